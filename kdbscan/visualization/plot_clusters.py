"""
聚类结果可视化
"""

import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path
from typing import Optional, Tuple, Union
from scipy.spatial import ConvexHull, QhullError


class ClusterVisualizer:
    """聚类可视化器"""

    def __init__(self, figsize: Tuple[int, int] = (12, 10),
                 colormap: str = 'tab20'):
        """
        初始化可视化器

        Args:
            figsize: 图形大小
            colormap: 颜色映射
        """
        self.figsize = figsize
        self.colormap = colormap
        self.cmap = plt.get_cmap(colormap)

    def plot_clusters_2d(self, points: np.ndarray, labels: np.ndarray,
                         title: str = "DBSCAN聚类结果",
                         save_path: Optional[Union[str, Path]] = None,
                         show_noise: bool = True,
                         alpha: float = 0.6,
                         s: float = 10.0) -> plt.Figure:
        """
        绘制聚类结果

        一维数据画在y=0的直线上，高于二维的数据只使用前两个坐标。

        Args:
            points: 点数据，形状为(n, d)
            labels: 聚类标签，0表示噪声
            title: 图表标题
            save_path: 保存路径
            show_noise: 是否显示噪声点
            alpha: 透明度
            s: 点的大小

        Returns:
            matplotlib图形对象
        """
        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 1:
            points = points.reshape(-1, 1)
        labels = np.asarray(labels)
        if points.shape[1] == 1:
            xy = np.column_stack([points[:, 0], np.zeros(len(points))])
        else:
            xy = points[:, :2]

        fig, ax = plt.subplots(figsize=self.figsize)

        cluster_ids = [label for label in np.unique(labels) if label != 0]
        colors = self.cmap(np.linspace(0, 1, max(len(cluster_ids), 1)))

        if show_noise and np.any(labels == 0):
            noise = xy[labels == 0]
            ax.scatter(noise[:, 0], noise[:, 1], c='gray', marker='x',
                       s=s * 0.5, alpha=alpha * 0.5, label='噪声点')

        for color, label in zip(colors, cluster_ids):
            cluster_points = xy[labels == label]
            ax.scatter(cluster_points[:, 0], cluster_points[:, 1],
                       c=[color], label=f'聚类 {label}', marker='o', s=s,
                       alpha=alpha, edgecolors='w', linewidths=0.5)

            # 二维数据且点数较多时绘制凸包
            if points.shape[1] == 2 and len(cluster_points) > 3:
                try:
                    hull = ConvexHull(cluster_points)
                except QhullError:
                    # 共线的点没有凸包
                    continue
                hull_points = cluster_points[hull.vertices]
                hull_points = np.vstack([hull_points, hull_points[0]])
                ax.plot(hull_points[:, 0], hull_points[:, 1],
                        color=color, alpha=0.3, linewidth=1, linestyle='--')

        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.set_xlabel('X坐标')
        ax.set_ylabel('Y坐标' if points.shape[1] > 1 else '')
        ax.grid(True, alpha=0.3)

        handles, legend_labels = ax.get_legend_handles_labels()
        if handles:
            ax.legend(handles[:15], legend_labels[:15], loc='upper right', fontsize=8)

        stats_text = (f'聚类数: {len(cluster_ids)}\n'
                      f'噪声点: {int(np.sum(labels == 0))}\n'
                      f'总点数: {len(points)}')
        ax.text(0.02, 0.98, stats_text, transform=ax.transAxes,
                fontsize=10, verticalalignment='top',
                bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.8))

        plt.tight_layout()

        if save_path:
            Path(save_path).parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        return fig
