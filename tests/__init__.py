"""Test package for kdbscan.

- Unit tests (test_spatial_index.py, test_dbscan.py, test_data_processing.py,
  test_profiling.py, test_visualization.py)
- CLI test (test_run_dbscan.py)
- Shared fixtures (conftest.py)
"""
