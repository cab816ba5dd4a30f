"""
聚类算法模块
包含KD树空间索引和DBSCAN算法实现
"""

from .dbscan import DBSCAN, DBSCANModel, ClusterPrediction, PointKind, fit, predict
from .spatial_index import KDTreeIndex
from .exceptions import DBSCANError, DimensionMismatch, QueryError, NotFittedError
from .utils import as_point_set, count_clusters, get_cluster_stats

__all__ = [
    'DBSCAN',
    'DBSCANModel',
    'ClusterPrediction',
    'PointKind',
    'fit',
    'predict',
    'KDTreeIndex',
    'DBSCANError',
    'DimensionMismatch',
    'QueryError',
    'NotFittedError',
    'as_point_set',
    'count_clusters',
    'get_cluster_stats'
]
