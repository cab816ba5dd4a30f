"""
Tests for the scripts/run_dbscan.py command line driver.
"""

import importlib.util
import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

SCRIPT_PATH = Path(__file__).parent.parent / "scripts" / "run_dbscan.py"


@pytest.fixture(scope="module")
def run_dbscan_module():
    spec = importlib.util.spec_from_file_location("run_dbscan", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def data_files(tmp_path, blobs):
    points, _ = blobs
    data_path = tmp_path / "points.csv"
    pd.DataFrame(points, columns=['x', 'y']).to_csv(data_path, index=False)

    predict_path = tmp_path / "new_points.csv"
    pd.DataFrame([[0.0, 0.0], [50.0, 50.0]], columns=['x', 'y']).to_csv(predict_path, index=False)
    return data_path, predict_path


class TestRunDBSCAN:
    """Test the end-to-end CLI run."""

    def test_run_dbscan_result(self, run_dbscan_module, blobs):
        points, _ = blobs
        result = run_dbscan_module.run_dbscan(points, eps=1.0, min_points=5, seed=0)

        assert result['results']['n_clusters'] == 3
        assert result['results']['n_noise'] == 3
        assert result['parameters']['n_dims'] == 2
        assert 'DBSCAN.fit' in result['performance']['timings']

    def test_main_writes_outputs(self, run_dbscan_module, data_files, tmp_path):
        data_path, predict_path = data_files
        output_dir = tmp_path / "results"

        exit_code = run_dbscan_module.main([
            '--data', str(data_path),
            '--eps', '1.0',
            '--min-points', '5',
            '--seed', '0',
            '--predict', str(predict_path),
            '--output-dir', str(output_dir),
        ])

        assert exit_code == 0
        assert (output_dir / 'clusters.png').exists()

        with open(output_dir / 'dbscan_results.json') as f:
            summary = json.load(f)
        assert summary['results']['n_clusters'] == 3
        assert 'dbscan_object' not in summary

        labels = pd.read_csv(output_dir / 'labels.csv')
        assert list(labels.columns) == ['x0', 'x1', 'cluster']
        assert labels['cluster'].nunique() == 4

        with open(output_dir / 'predictions.json') as f:
            predictions = json.load(f)
        assert len(predictions) == 2
        assert predictions[0] != [0]
        assert predictions[1] == [0]

    def test_main_no_borders_no_visualize(self, run_dbscan_module, data_files, tmp_path):
        data_path, _ = data_files
        output_dir = tmp_path / "plain"

        exit_code = run_dbscan_module.main([
            '--data', str(data_path),
            '--eps', '1.0',
            '--min-points', '5',
            '--no-borders',
            '--no-visualize',
            '--columns', 'x', 'y',
            '--output-dir', str(output_dir),
        ])

        assert exit_code == 0
        assert not (output_dir / 'clusters.png').exists()
        assert list(pd.read_csv(output_dir / 'labels.csv').columns) == ['x', 'y', 'cluster']

    def test_main_reports_errors(self, run_dbscan_module, tmp_path, capsys):
        exit_code = run_dbscan_module.main([
            '--data', str(tmp_path / 'missing.csv'),
            '--output-dir', str(tmp_path / 'out'),
        ])

        assert exit_code == 1
        assert "错误" in capsys.readouterr().out
