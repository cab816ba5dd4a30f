"""
内存分析器
监控聚类过程中的进程内存使用
"""

import os
import time
import tracemalloc
import psutil
import pandas as pd
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class MemorySnapshot:
    """内存快照"""
    label: str
    timestamp: float
    memory_usage_mb: float
    peak_memory_mb: float
    top_consumers: List[Tuple[str, float]] = field(default_factory=list)


class MemoryProfiler:
    """基于psutil的内存分析器，可作为上下文管理器使用"""

    def __init__(self, track_detailed: bool = False, verbose: bool = False):
        """
        初始化内存分析器

        Args:
            track_detailed: 是否用tracemalloc跟踪分配位置
            verbose: 拍摄快照时是否打印内存使用
        """
        self.track_detailed = track_detailed
        self.verbose = verbose
        self.snapshots: List[MemorySnapshot] = []
        self.start_time: Optional[float] = None
        self.peak_memory = 0.0
        self.process = psutil.Process(os.getpid())

    def start(self) -> None:
        """开始内存分析"""
        self.start_time = time.time()
        self.snapshots.clear()
        self.peak_memory = 0.0

        if self.track_detailed and not tracemalloc.is_tracing():
            tracemalloc.start(25)

    def stop(self) -> None:
        """停止内存分析"""
        if self.track_detailed and tracemalloc.is_tracing():
            tracemalloc.stop()

    def __enter__(self) -> 'MemoryProfiler':
        if self.start_time is None:
            self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def take_snapshot(self, label: str = "") -> MemorySnapshot:
        """
        拍摄内存快照

        Args:
            label: 快照标签

        Returns:
            内存快照对象
        """
        current_time = time.time() - self.start_time if self.start_time else 0.0
        memory_usage_mb = self.process.memory_info().rss / 1024 / 1024
        self.peak_memory = max(self.peak_memory, memory_usage_mb)

        top_consumers = []
        if self.track_detailed and tracemalloc.is_tracing():
            for stat in tracemalloc.take_snapshot().statistics('lineno')[:10]:
                top_consumers.append((
                    stat.traceback.format()[-1] if stat.traceback else "Unknown",
                    stat.size / 1024 / 1024
                ))

        snapshot = MemorySnapshot(
            label=label,
            timestamp=current_time,
            memory_usage_mb=memory_usage_mb,
            peak_memory_mb=self.peak_memory,
            top_consumers=top_consumers
        )
        self.snapshots.append(snapshot)

        if self.verbose and label:
            print(f"[{label}] 内存使用: {memory_usage_mb:.2f} MB, 峰值: {self.peak_memory:.2f} MB")

        return snapshot

    def analyze_memory_patterns(self) -> Dict[str, Any]:
        """
        分析内存使用模式

        Returns:
            内存统计；快照少于两个时为空字典
        """
        if len(self.snapshots) < 2:
            return {}

        df = pd.DataFrame([{
            'timestamp': s.timestamp,
            'memory_usage_mb': s.memory_usage_mb
        } for s in self.snapshots])

        return {
            'total_time': float(df['timestamp'].max() - df['timestamp'].min()),
            'avg_memory_usage_mb': float(df['memory_usage_mb'].mean()),
            'max_memory_usage_mb': float(df['memory_usage_mb'].max()),
            'min_memory_usage_mb': float(df['memory_usage_mb'].min()),
            'total_memory_growth_mb': float(df['memory_usage_mb'].iloc[-1] - df['memory_usage_mb'].iloc[0])
        }
