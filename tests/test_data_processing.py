"""
Unit Tests for point loading and result saving (kdbscan.data_processing).
"""

import json

import numpy as np
import pandas as pd
import pytest

from kdbscan.data_processing import load_points, save_labels, save_predictions, save_results


@pytest.fixture
def points_csv(tmp_path):
    path = tmp_path / "points.csv"
    pd.DataFrame({
        'name': ['a', 'b', 'c'],
        'x': [1.0, 1.1, 5.0],
        'y': [2.0, 2.2, 5.0],
    }).to_csv(path, index=False)
    return path


class TestLoadPoints:
    """Test CSV loading."""

    def test_numeric_columns_by_default(self, points_csv):
        points = load_points(points_csv)
        assert points.shape == (3, 2)
        assert points.dtype == np.float64
        np.testing.assert_allclose(points[1], [1.1, 2.2])

    def test_selected_columns(self, points_csv):
        points = load_points(points_csv, columns=['y'])
        np.testing.assert_allclose(points[:, 0], [2.0, 2.2, 5.0])

    def test_nrows(self, points_csv):
        assert load_points(points_csv, nrows=2).shape == (2, 2)

    def test_missing_column(self, points_csv):
        with pytest.raises(ValueError):
            load_points(points_csv, columns=['z'])

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_points(tmp_path / "missing.csv")

    def test_no_numeric_columns(self, tmp_path):
        path = tmp_path / "names.csv"
        pd.DataFrame({'name': ['a', 'b']}).to_csv(path, index=False)
        with pytest.raises(ValueError):
            load_points(path)


class TestSaveResults:
    """Test writing labels, predictions and summaries."""

    def test_save_labels(self, tmp_path):
        points = np.array([[0.0, 1.0], [2.0, 3.0]])
        path = save_labels(tmp_path / "out" / "labels.csv", points, np.array([1, 0]))

        df = pd.read_csv(path)
        assert list(df.columns) == ['x0', 'x1', 'cluster']
        assert df['cluster'].tolist() == [1, 0]

    def test_save_labels_named_columns(self, tmp_path):
        path = save_labels(tmp_path / "labels.csv", np.array([1.5, 2.5]), [2, 2], columns=['value'])
        df = pd.read_csv(path)
        assert df['value'].tolist() == [1.5, 2.5]

    def test_save_labels_length_mismatch(self, tmp_path):
        with pytest.raises(ValueError):
            save_labels(tmp_path / "labels.csv", np.zeros((3, 2)), [0, 1])

    def test_save_predictions(self, tmp_path):
        path = save_predictions(tmp_path / "predictions.json", [[1, 2], [0], [np.int64(3)]])
        with open(path) as f:
            assert json.load(f) == [[1, 2], [0], [3]]

    def test_save_results(self, tmp_path):
        result = {
            'parameters': {'eps': 0.5, 'min_points': 3},
            'results': {'n_clusters': 2, 'cluster_sizes': {1: 4, 2: 2}},
        }
        path = save_results(result, tmp_path / "results")

        assert path.name == 'dbscan_results.json'
        with open(path) as f:
            data = json.load(f)
        assert data['parameters']['eps'] == 0.5
        assert data['results']['cluster_sizes'] == {'1': 4, '2': 2}
