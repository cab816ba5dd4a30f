"""
数据处理模块
点集CSV数据的加载和聚类结果的保存
"""

from .loader import load_points, save_labels, save_predictions, save_results

__all__ = [
    'load_points',
    'save_labels',
    'save_predictions',
    'save_results'
]
