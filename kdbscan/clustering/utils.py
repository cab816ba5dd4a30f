"""
聚类工具函数
点集校验和聚类统计
"""

import numpy as np
from typing import Dict, Optional, Sequence, Union

from .exceptions import DimensionMismatch

ArrayLike = Union[np.ndarray, Sequence]


def as_point_set(points: ArrayLike, name: str = 'points',
                 allow_empty: bool = False) -> np.ndarray:
    """
    将输入转换为只读的点集

    一维输入被视为N个一维点。返回的数组是副本，形状为(n_samples, n_dims)，
    类型为float64，并且不可写。

    Args:
        points: N x D 的数组或嵌套序列
        name: 参数名称（用于错误信息）
        allow_empty: 是否允许空点集

    Returns:
        形状为(n_samples, n_dims)的只读数组

    Raises:
        DimensionMismatch: 各行长度不一致、维度为0或点集为空
        ValueError: 坐标包含NaN或无穷大
    """
    if isinstance(points, np.ndarray) and points.dtype != object:
        data = np.array(points, dtype=np.float64)
        if data.ndim == 1:
            data = data.reshape(-1, 1)
        elif data.ndim != 2:
            raise DimensionMismatch(f"{name} 必须是二维数组，实际维数: {data.ndim}")
    else:
        rows = [np.atleast_1d(np.asarray(row, dtype=np.float64)) for row in points]
        if not rows:
            data = np.empty((0, 0), dtype=np.float64)
        else:
            n_dims = rows[0].shape[0]
            for row_idx, row in enumerate(rows):
                if row.ndim != 1 or row.shape[0] != n_dims:
                    raise DimensionMismatch(
                        f"{name} 第{row_idx}行的维度为 {row.shape}，与第0行的维度 {n_dims} 不一致"
                    )
            data = np.vstack(rows)

    if data.shape[0] == 0:
        if allow_empty:
            return data
        raise DimensionMismatch(f"{name} 不能为空")

    if data.shape[1] == 0:
        raise DimensionMismatch(f"{name} 的维度不能为0")

    if not np.all(np.isfinite(data)):
        raise ValueError(f"{name} 包含NaN或无穷大的坐标")

    data = np.ascontiguousarray(data)
    data.flags.writeable = False
    return data


def count_clusters(labels: np.ndarray) -> int:
    """统计非噪声聚类的数量"""
    labels = np.asarray(labels)
    return int(len(np.unique(labels[labels > 0])))


def get_cluster_stats(labels: np.ndarray,
                      core_sample_indices: Optional[np.ndarray] = None,
                      execution_time: float = 0.0) -> Dict:
    """
    计算聚类统计信息

    Args:
        labels: 聚类标签，0表示噪声
        core_sample_indices: 核心点索引
        execution_time: 聚类耗时（秒）

    Returns:
        包含聚类数量、噪声点数量、核心点数量和各聚类大小的字典
    """
    labels = np.asarray(labels)
    unique_labels, counts = np.unique(labels, return_counts=True)

    stats = {
        'n_clusters': count_clusters(labels),
        'n_noise': int(np.sum(labels == 0)),
        'n_core_points': len(core_sample_indices) if core_sample_indices is not None else 0,
        'execution_time': execution_time,
        'cluster_sizes': {}
    }

    for label, size in zip(unique_labels, counts):
        if label != 0:  # 跳过噪声点
            stats['cluster_sizes'][int(label)] = int(size)

    return stats
