"""
聚类模块异常
所有异常都继承自ValueError，调用方可以统一捕获
"""


class DBSCANError(ValueError):
    """DBSCAN相关错误的基类"""


class DimensionMismatch(DBSCANError):
    """点的维度与已确定的维度不一致，或点集为空"""


class QueryError(DBSCANError):
    """空间索引拒绝了一次查询（查询点或半径不合法）"""


class NotFittedError(DBSCANError):
    """在调用fit之前使用了聚类器"""
