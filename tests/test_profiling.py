"""
Unit Tests for the time and memory profilers.
"""

import time

import pytest

from kdbscan.clustering import DBSCAN
from kdbscan.profiling import MemoryProfiler, TimeProfiler


class TestTimeProfiler:
    """Test nested timing measurements."""

    def test_measure_nested(self):
        profiler = TimeProfiler()
        with profiler.measure('outer'):
            with profiler.measure('inner'):
                time.sleep(0.001)

        assert len(profiler.measurements) == 1
        outer = profiler.measurements[0]
        assert outer.children[0].name == 'inner'
        assert outer.duration >= outer.children[0].duration

        summary = profiler.get_summary()
        assert summary['outer']['n_calls'] == 1
        assert summary['inner']['n_calls'] == 1

    def test_stop_by_name_closes_inner(self):
        profiler = TimeProfiler()
        profiler.start('outer')
        profiler.start('inner')

        assert profiler.stop('outer') is not None
        assert profiler.current_stack == []
        assert set(profiler.function_timings) == {'outer', 'inner'}

    def test_stop_unknown_name_warns(self):
        profiler = TimeProfiler()
        profiler.start('outer')
        with pytest.warns(UserWarning):
            assert profiler.stop('missing') is None

    def test_stop_without_measurement(self):
        assert TimeProfiler().stop() is None

    def test_profile_function(self, line_points):
        profiler = TimeProfiler()
        dbscan = DBSCAN(eps=0.5, min_points=3, random_state=0)

        result, duration = profiler.profile_function(dbscan.fit, line_points)

        assert result is dbscan
        assert duration >= 0
        assert profiler.get_summary()['fit']['n_calls'] == 1

    def test_reset(self):
        profiler = TimeProfiler()
        with profiler.measure('step'):
            pass
        profiler.reset()
        assert profiler.get_summary() == {}


class TestMemoryProfiler:
    """Test psutil based memory snapshots."""

    def test_snapshots(self):
        with MemoryProfiler() as profiler:
            first = profiler.take_snapshot("before")
            data = [0] * 100000
            second = profiler.take_snapshot("after")

        assert len(data) == 100000
        assert first.memory_usage_mb > 0
        assert second.peak_memory_mb >= first.memory_usage_mb
        assert profiler.peak_memory == max(first.memory_usage_mb, second.memory_usage_mb)

        patterns = profiler.analyze_memory_patterns()
        assert patterns['max_memory_usage_mb'] >= patterns['min_memory_usage_mb']
        assert 'total_memory_growth_mb' in patterns

    def test_patterns_need_two_snapshots(self):
        profiler = MemoryProfiler()
        profiler.start()
        profiler.take_snapshot()
        assert profiler.analyze_memory_patterns() == {}

    def test_detailed_tracking(self):
        with MemoryProfiler(track_detailed=True) as profiler:
            snapshot = profiler.take_snapshot("detailed")
        assert isinstance(snapshot.top_consumers, list)

    def test_verbose_prints(self, capsys):
        profiler = MemoryProfiler(verbose=True)
        profiler.start()
        profiler.take_snapshot("step")
        assert "step" in capsys.readouterr().out
