"""
Pytest configuration and shared fixtures for kdbscan tests.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


# ==============================================================================
# Point Sets
# ==============================================================================

@pytest.fixture
def three_group_points() -> np.ndarray:
    """8 points: a tight group of 4, a pair, and two isolated points."""
    return np.array([
        [1.0, 2.0], [1.1, 2.2], [0.9, 1.9], [1.0, 2.1],
        [-2.0, 3.0], [-2.2, 3.1],
        [-1.0, -2.0], [-2.0, -1.0],
    ])


@pytest.fixture
def line_points() -> np.ndarray:
    """1-D points with a dense middle and one border point on each side."""
    return np.array([[1.55], [2.0], [2.1], [2.2], [2.65]])


@pytest.fixture
def blob_centers() -> np.ndarray:
    return np.array([[0.0, 0.0], [10.0, 0.0], [0.0, 10.0]])


@pytest.fixture
def blobs(blob_centers):
    """Three well separated groups of 20 points plus three isolated points.

    Returns (points, group) where group is the blob index or -1 for the
    isolated points.
    """
    rng = np.random.default_rng(0)
    groups = [center + rng.uniform(-0.2, 0.2, size=(20, 2)) for center in blob_centers]
    outliers = np.array([[5.0, 5.0], [20.0, 20.0], [-10.0, 5.0]])
    points = np.vstack(groups + [outliers])
    group = np.concatenate([np.full(20, i) for i in range(len(blob_centers))] + [np.full(3, -1)])
    return points, group


@pytest.fixture
def random_points() -> np.ndarray:
    rng = np.random.default_rng(42)
    return rng.normal(size=(200, 3))
