"""
空间索引
基于KD树的精确半径查询，供DBSCAN邻域查找使用
"""

import math
import numpy as np
from typing import List, Optional
from numba import jit
from scipy.spatial import KDTree

from .exceptions import QueryError
from .utils import ArrayLike, as_point_set


@jit(nopython=True)
def _squared_distances(candidates: np.ndarray, query: np.ndarray) -> np.ndarray:
    """
    使用Numba加速的平方欧氏距离计算

    Args:
        candidates: 候选点，形状为(n_candidates, n_dims)
        query: 查询点，形状为(n_dims,)

    Returns:
        每个候选点到查询点的平方距离
    """
    n_candidates, n_dims = candidates.shape
    distances = np.empty(n_candidates)

    for i in range(n_candidates):
        acc = 0.0
        for k in range(n_dims):
            diff = candidates[i, k] - query[k]
            acc += diff * diff
        distances[i] = acc

    return distances


class KDTreeIndex:
    """静态KD树索引，构建后只读"""

    def __init__(self, points: ArrayLike):
        """
        构建索引，每个点以其行号作为标识插入

        Args:
            points: 形状为(n_samples, n_dims)的点集

        Raises:
            DimensionMismatch: 点集为空或各点维度不一致
        """
        self._points = as_point_set(points)
        self._tree = KDTree(self._points)

    @property
    def points(self) -> np.ndarray:
        return self._points

    @property
    def n_points(self) -> int:
        return self._points.shape[0]

    @property
    def n_dims(self) -> int:
        return self._points.shape[1]

    def radius_query(self, query_point: ArrayLike, radius_sq: float,
                     out: Optional[List[int]] = None) -> List[int]:
        """
        查找与查询点平方欧氏距离不超过radius_sq的所有点

        Args:
            query_point: 查询点，长度为n_dims
            radius_sq: 已平方的查询半径
            out: 可复用的结果缓冲区，结果追加到其末尾

        Returns:
            点索引列表（顺序不定）；传入out时返回out本身

        Raises:
            QueryError: 查询点维度不匹配、坐标或半径不合法
        """
        query = self._check_query(query_point)
        radius = self._candidate_radius(radius_sq)

        if out is None:
            out = []

        candidates = self._tree.query_ball_point(query, radius)
        out.extend(self._filter_candidates(candidates, query, radius_sq))
        return out

    def radius_query_many(self, query_points: ArrayLike, radius_sq: float,
                          workers: int = 1) -> List[List[int]]:
        """
        批量半径查询

        Args:
            query_points: 形状为(n_queries, n_dims)的查询点
            radius_sq: 已平方的查询半径
            workers: 并行线程数，-1表示使用所有CPU核心

        Returns:
            每个查询点对应一个索引列表
        """
        queries = np.array(query_points, dtype=np.float64)
        if queries.ndim != 2 or queries.shape[1] != self.n_dims:
            raise QueryError(f"查询点形状 {queries.shape} 与索引维度 {self.n_dims} 不匹配")
        if not np.all(np.isfinite(queries)):
            raise QueryError("查询点包含NaN或无穷大的坐标")
        radius = self._candidate_radius(radius_sq)

        if queries.shape[0] == 0:
            return []

        all_candidates = self._tree.query_ball_point(queries, radius, workers=workers)
        return [self._filter_candidates(candidates, query, radius_sq)
                for candidates, query in zip(all_candidates, queries)]

    def _check_query(self, query_point: ArrayLike) -> np.ndarray:
        query = np.array(query_point, dtype=np.float64)
        if query.ndim != 1 or query.shape[0] != self.n_dims:
            raise QueryError(f"查询点形状 {query.shape} 与索引维度 {self.n_dims} 不匹配")
        if not np.all(np.isfinite(query)):
            raise QueryError("查询点包含NaN或无穷大的坐标")
        return query

    @staticmethod
    def _candidate_radius(radius_sq: float) -> float:
        if not math.isfinite(radius_sq) or radius_sq < 0:
            raise QueryError(f"不合法的平方半径: {radius_sq}")
        # 略微放大半径，最终判定使用平方距离
        return float(np.nextafter(math.sqrt(radius_sq), np.inf))

    def _filter_candidates(self, candidates: List[int], query: np.ndarray,
                           radius_sq: float) -> List[int]:
        if not candidates:
            return []
        candidate_idx = np.asarray(candidates, dtype=np.intp)
        distances = _squared_distances(self._points[candidate_idx], query)
        return candidate_idx[distances <= radius_sq].tolist()
