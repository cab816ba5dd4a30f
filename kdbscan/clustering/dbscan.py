"""
DBSCAN聚类
随机访问顺序的密度聚类，以及基于已有聚类结果的新点分类
"""

import enum
import math
import numbers
import time
import warnings
import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .exceptions import DimensionMismatch, NotFittedError
from .spatial_index import KDTreeIndex
from .utils import ArrayLike, as_point_set, get_cluster_stats

RandomState = Union[None, int, np.random.Generator]


class PointKind(enum.Enum):
    """新点相对于已有聚类的类别"""
    CORE = 'core'
    BORDER = 'border'
    NOISE = 'noise'


@dataclass(frozen=True)
class ClusterPrediction:
    """单个新点的分类结果"""
    kind: PointKind
    clusters: List[int] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class DBSCANModel:
    """
    DBSCAN聚类结果

    模型不保存点集本身，predict和classify需要调用方传入fit时使用的同一点集。
    """
    eps: float
    min_points: int
    labels: np.ndarray
    include_borders: bool = True
    n_features: int = 0
    core_sample_indices: np.ndarray = field(
        default_factory=lambda: np.empty(0, dtype=np.intp))
    execution_time: float = 0.0

    @property
    def n_clusters(self) -> int:
        return int(self.labels.max()) if len(self.labels) else 0

    def get_cluster_stats(self) -> dict:
        return get_cluster_stats(self.labels, self.core_sample_indices,
                                 self.execution_time)

    def predict(self, reference_points: ArrayLike, new_points: ArrayLike,
                n_jobs: int = 1) -> List[List[int]]:
        """
        将新点分配到已有聚类

        Args:
            reference_points: fit时使用的点集
            new_points: 待分类的新点
            n_jobs: 半径查询的并行线程数，-1表示使用所有CPU核心

        Returns:
            每个新点对应一个有序的聚类ID列表；eps内没有任何聚类时为[0]
        """
        return [clusters or [0]
                for clusters, _ in self._neighbour_clusters(reference_points, new_points, n_jobs)]

    def classify(self, reference_points: ArrayLike, new_points: ArrayLike,
                 n_jobs: int = 1) -> List[ClusterPrediction]:
        """
        将新点分为核心点、边界点或噪声，并给出其相邻的聚类

        Args:
            reference_points: fit时使用的点集
            new_points: 待分类的新点
            n_jobs: 半径查询的并行线程数

        Returns:
            每个新点对应一个ClusterPrediction
        """
        predictions = []
        for clusters, n_neighbours in self._neighbour_clusters(reference_points, new_points, n_jobs):
            if not clusters:
                predictions.append(ClusterPrediction(PointKind.NOISE))
            elif n_neighbours >= self.min_points:
                predictions.append(ClusterPrediction(PointKind.CORE, clusters))
            else:
                predictions.append(ClusterPrediction(PointKind.BORDER, clusters))
        return predictions

    def _neighbour_clusters(self, reference_points: ArrayLike, new_points: ArrayLike,
                            n_jobs: int):
        reference = as_point_set(reference_points, name='reference_points')
        if reference.shape[1] != self.n_features:
            raise DimensionMismatch(
                f"reference_points 的维度 {reference.shape[1]} 与fit时的维度 {self.n_features} 不一致")
        if reference.shape[0] != len(self.labels):
            raise DimensionMismatch(
                f"reference_points 有 {reference.shape[0]} 个点，fit时有 {len(self.labels)} 个点")

        queries = as_point_set(new_points, name='new_points', allow_empty=True)
        if len(queries) == 0:
            return []
        if queries.shape[1] != self.n_features:
            raise DimensionMismatch(
                f"new_points 的维度 {queries.shape[1]} 与fit时的维度 {self.n_features} 不一致")

        index = KDTreeIndex(reference)
        all_neighbours = index.radius_query_many(queries, self.eps ** 2, workers=n_jobs)

        results = []
        for neighbours in all_neighbours:
            clusters = {int(self.labels[idx]) for idx in neighbours}
            clusters.discard(0)
            results.append((sorted(clusters), len(set(neighbours))))
        return results


class DBSCAN:
    """
    DBSCAN聚类算法

    点的访问顺序是随机排列，核心点/噪声的判定与顺序无关；
    同时与两个聚类相邻的边界点归属哪一个聚类取决于访问顺序。
    """

    def __init__(self, eps: float = 0.5, min_points: int = 5,
                 include_borders: bool = True,
                 random_state: RandomState = None,
                 verbose: bool = False):
        """
        初始化DBSCAN参数

        Args:
            eps: 邻域半径
            min_points: 核心点的最小邻居数（包含该点自身）
            include_borders: 边界点是否获得发现它的核心点的聚类标签
            random_state: 访问顺序的随机种子
            verbose: 是否打印进度信息
        """
        if isinstance(eps, bool) or not isinstance(eps, numbers.Real) \
                or not math.isfinite(eps) or eps <= 0 \
                or not math.isfinite(float(eps) * float(eps)):
            raise ValueError(f"eps 必须是大于0的有限数: {eps}")
        if isinstance(min_points, bool) or not isinstance(min_points, numbers.Integral) \
                or min_points < 1:
            raise ValueError(f"min_points 必须是不小于1的整数: {min_points}")

        self.eps = float(eps)
        self.min_points = int(min_points)
        self.include_borders = include_borders
        self.random_state = random_state
        self.verbose = verbose

        self.model_: Optional[DBSCANModel] = None
        self.labels_ = None
        self.core_sample_indices_ = None
        self.components_ = None
        self.execution_time = 0

    def fit(self, points: ArrayLike) -> 'DBSCAN':
        """
        执行DBSCAN聚类

        Args:
            points: 形状为(n_samples, n_dims)的点集

        Returns:
            self: 返回聚类器实例
        """
        start_time = time.time()

        data = as_point_set(points)
        n_samples = data.shape[0]
        if self.min_points > n_samples:
            warnings.warn(f"min_points={self.min_points} 大于点数 {n_samples}，所有点都将是噪声")

        index = KDTreeIndex(data)
        radius_sq = self.eps ** 2
        order = np.random.default_rng(self.random_state).permutation(n_samples)

        if self.verbose:
            print(f"DBSCAN: {n_samples} 个点, {data.shape[1]} 维, eps={self.eps}, min_points={self.min_points}")

        visited = np.zeros(n_samples, dtype=bool)
        is_core = np.zeros(n_samples, dtype=bool)
        labels = np.zeros(n_samples, dtype=np.int64)

        # 整个fit过程中复用的工作缓冲区
        in_working_set = np.zeros(n_samples, dtype=bool)
        neighbours: List[int] = []
        sub_neighbours: List[int] = []
        cluster_id = 1

        for row_idx in order:
            if visited[row_idx]:
                continue
            visited[row_idx] = True

            self._region_query(index, data[row_idx], radius_sq, neighbours)
            if len(neighbours) < self.min_points:
                continue

            # 发现核心点，开始新的聚类
            is_core[row_idx] = True
            labels[row_idx] = cluster_id
            in_working_set[neighbours] = True

            while neighbours:
                neighbour_idx = neighbours.pop()
                in_working_set[neighbour_idx] = False

                if self.include_borders:
                    labels[neighbour_idx] = cluster_id

                if visited[neighbour_idx]:
                    continue
                visited[neighbour_idx] = True

                self._region_query(index, data[neighbour_idx], radius_sq, sub_neighbours)
                if len(sub_neighbours) < self.min_points:
                    continue

                is_core[neighbour_idx] = True
                if not self.include_borders:
                    labels[neighbour_idx] = cluster_id

                for idx in sub_neighbours:
                    if not in_working_set[idx]:
                        in_working_set[idx] = True
                        neighbours.append(idx)

            if self.verbose:
                print(f"  聚类 {cluster_id}: {int(np.sum(labels == cluster_id))} 个点")
            cluster_id += 1

        labels.flags.writeable = False
        core_indices = np.flatnonzero(is_core)
        self.execution_time = time.time() - start_time

        self.model_ = DBSCANModel(
            eps=self.eps,
            min_points=self.min_points,
            labels=labels,
            include_borders=self.include_borders,
            n_features=data.shape[1],
            core_sample_indices=core_indices,
            execution_time=self.execution_time,
        )
        self.labels_ = labels
        self.core_sample_indices_ = core_indices
        self.components_ = data[core_indices]

        if self.verbose:
            print(f"DBSCAN完成: {cluster_id - 1} 个聚类, 耗时 {self.execution_time:.4f} 秒")

        return self

    def fit_predict(self, points: ArrayLike) -> np.ndarray:
        return self.fit(points).labels_

    def predict(self, reference_points: ArrayLike, new_points: ArrayLike,
                n_jobs: int = 1) -> List[List[int]]:
        return self._check_is_fitted().predict(reference_points, new_points, n_jobs)

    def classify(self, reference_points: ArrayLike, new_points: ArrayLike,
                 n_jobs: int = 1) -> List[ClusterPrediction]:
        return self._check_is_fitted().classify(reference_points, new_points, n_jobs)

    def get_cluster_stats(self) -> dict:
        """
        获取聚类统计信息

        Returns:
            包含聚类统计信息的字典；未fit时为空字典
        """
        if self.model_ is None:
            return {}
        return self.model_.get_cluster_stats()

    def _check_is_fitted(self) -> DBSCANModel:
        if self.model_ is None:
            raise NotFittedError("DBSCAN尚未fit，请先调用fit")
        return self.model_

    @staticmethod
    def _region_query(index: KDTreeIndex, point: np.ndarray, radius_sq: float,
                      buffer: List[int]) -> None:
        """查询邻域并将结果排序去重后写入buffer"""
        buffer.clear()
        index.radius_query(point, radius_sq, out=buffer)
        buffer[:] = sorted(set(buffer))


def fit(points: ArrayLike, eps: float, min_points: int,
        include_borders: bool = True,
        random_state: RandomState = None) -> DBSCANModel:
    """执行一次DBSCAN聚类并返回聚类结果"""
    return DBSCAN(eps=eps, min_points=min_points, include_borders=include_borders,
                  random_state=random_state).fit(points).model_


def predict(model: DBSCANModel, reference_points: ArrayLike,
            new_points: ArrayLike) -> List[List[int]]:
    """将新点分配到已有聚类，reference_points必须是fit时使用的点集"""
    return model.predict(reference_points, new_points)
