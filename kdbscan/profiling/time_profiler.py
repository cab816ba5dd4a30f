"""
时间性能分析器
记录聚类各阶段的执行时间
"""

import time
import warnings
import numpy as np
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple


@dataclass
class TimeMeasurement:
    """时间测量结果"""
    name: str
    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    children: List['TimeMeasurement'] = field(default_factory=list)

    def stop(self) -> float:
        """停止计时并返回持续时间"""
        self.end_time = time.perf_counter()
        self.duration = self.end_time - self.start_time
        return self.duration


class TimeProfiler:
    """支持嵌套测量的时间分析器"""

    def __init__(self):
        self.measurements: List[TimeMeasurement] = []
        self.current_stack: List[TimeMeasurement] = []
        self.function_timings: Dict[str, List[float]] = defaultdict(list)

    def start(self, name: str) -> TimeMeasurement:
        """
        开始计时，已有未结束的测量时作为其子测量

        Args:
            name: 测量名称

        Returns:
            时间测量对象
        """
        measurement = TimeMeasurement(name=name, start_time=time.perf_counter())

        if self.current_stack:
            self.current_stack[-1].children.append(measurement)
        else:
            self.measurements.append(measurement)

        self.current_stack.append(measurement)
        return measurement

    def stop(self, name: Optional[str] = None) -> Optional[float]:
        """
        停止计时

        Args:
            name: 要停止的测量名称，为None时停止最内层的测量；
                  指定名称时，其内层未结束的测量会一并停止

        Returns:
            持续时间（秒），没有可停止的测量时为None
        """
        if not self.current_stack:
            return None

        if name is None:
            measurement = self.current_stack.pop()
        else:
            names = [m.name for m in self.current_stack]
            if name not in names:
                warnings.warn(f"未找到测量 '{name}'")
                return None
            position = len(names) - 1 - names[::-1].index(name)
            while len(self.current_stack) > position + 1:
                inner = self.current_stack.pop()
                self.function_timings[inner.name].append(inner.stop())
            measurement = self.current_stack.pop()

        duration = measurement.stop()
        self.function_timings[measurement.name].append(duration)
        return duration

    @contextmanager
    def measure(self, name: str) -> Iterator[TimeMeasurement]:
        """以上下文管理器的形式测量一段代码"""
        measurement = self.start(name)
        try:
            yield measurement
        finally:
            self.stop(name)

    def profile_function(self, func: Callable, *args, **kwargs) -> Tuple[Any, float]:
        """
        测量一次函数调用

        Returns:
            (函数结果, 执行时间)
        """
        with self.measure(func.__name__) as measurement:
            result = func(*args, **kwargs)
        return result, measurement.duration

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        """
        按测量名称汇总

        Returns:
            {名称: {'n_calls', 'total_time', 'avg_time', 'max_time'}}
        """
        summary = {}
        for name, timings in self.function_timings.items():
            summary[name] = {
                'n_calls': len(timings),
                'total_time': float(np.sum(timings)),
                'avg_time': float(np.mean(timings)),
                'max_time': float(np.max(timings))
            }
        return summary

    def reset(self) -> None:
        self.measurements.clear()
        self.current_stack.clear()
        self.function_timings.clear()
