"""
kdbscan
基于KD树的DBSCAN密度聚类
"""

from .clustering import (
    DBSCAN,
    DBSCANModel,
    ClusterPrediction,
    PointKind,
    KDTreeIndex,
    DBSCANError,
    DimensionMismatch,
    QueryError,
    NotFittedError,
    fit,
    predict
)

__version__ = '0.1.0'

__all__ = [
    'DBSCAN',
    'DBSCANModel',
    'ClusterPrediction',
    'PointKind',
    'KDTreeIndex',
    'DBSCANError',
    'DimensionMismatch',
    'QueryError',
    'NotFittedError',
    'fit',
    'predict'
]
