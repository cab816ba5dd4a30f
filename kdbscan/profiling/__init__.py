"""
性能分析模块
DBSCAN聚类的时间和内存监控
"""

from .memory_profiler import MemoryProfiler, MemorySnapshot
from .time_profiler import TimeProfiler, TimeMeasurement

__all__ = [
    'MemoryProfiler',
    'MemorySnapshot',
    'TimeProfiler',
    'TimeMeasurement'
]
