#!/usr/bin/env python3
"""
运行DBSCAN聚类
从CSV加载点数据，聚类，可选地对新点进行预测，并保存结果
"""

import sys
from pathlib import Path

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
from typing import Any, Dict, List, Optional

import numpy as np
import matplotlib.pyplot as plt

from kdbscan.clustering import DBSCAN
from kdbscan.data_processing import load_points, save_labels, save_predictions, save_results
from kdbscan.profiling import MemoryProfiler, TimeProfiler
from kdbscan.visualization import ClusterVisualizer


def run_dbscan(points: np.ndarray, eps: float, min_points: int,
               include_borders: bool = True,
               seed: Optional[int] = None) -> Dict[str, Any]:
    """
    运行DBSCAN并收集统计和性能数据

    Args:
        points: 点数据
        eps: 邻域半径
        min_points: 最小邻居数
        include_borders: 是否为边界点分配聚类
        seed: 访问顺序的随机种子

    Returns:
        聚类结果和性能数据
    """
    print("\n" + "=" * 60)
    print("运行DBSCAN聚类")
    print("=" * 60)

    print("算法参数:")
    print(f"  eps (邻域半径): {eps}")
    print(f"  min_points (最小邻居数): {min_points}")
    print(f"  include_borders (包含边界点): {include_borders}")
    print(f"  数据点数量: {len(points)}")

    time_profiler = TimeProfiler()
    memory_profiler = MemoryProfiler()

    dbscan = DBSCAN(eps=eps, min_points=min_points,
                    include_borders=include_borders, random_state=seed)

    with memory_profiler:
        memory_before = memory_profiler.take_snapshot("聚类开始前")
        with time_profiler.measure('DBSCAN.fit'):
            dbscan.fit(points)
        memory_after = memory_profiler.take_snapshot("聚类结束后")

    stats = dbscan.get_cluster_stats()

    print("\n聚类结果:")
    print(f"  聚类数量: {stats['n_clusters']}")
    print(f"  核心点数量: {stats['n_core_points']}")
    print(f"  噪声点数量: {stats['n_noise']}")

    if stats['cluster_sizes']:
        print("  聚类大小分布:")
        for label, size in list(stats['cluster_sizes'].items())[:10]:
            print(f"    聚类 {label}: {size} 个点")
        if len(stats['cluster_sizes']) > 10:
            print(f"    ... 还有 {len(stats['cluster_sizes']) - 10} 个聚类")

    memory_usage = memory_after.memory_usage_mb - memory_before.memory_usage_mb
    print("\n性能统计:")
    print(f"  执行时间: {stats['execution_time']:.4f} 秒")
    print(f"  内存使用: {memory_usage:.2f} MB")

    return {
        'algorithm': 'DBSCAN',
        'parameters': {
            'eps': eps,
            'min_points': min_points,
            'include_borders': include_borders,
            'seed': seed,
            'n_points': len(points),
            'n_dims': int(points.shape[1])
        },
        'results': {
            'n_clusters': stats['n_clusters'],
            'n_core_points': stats['n_core_points'],
            'n_noise': stats['n_noise'],
            'cluster_sizes': stats['cluster_sizes']
        },
        'performance': {
            'execution_time': stats['execution_time'],
            'memory_usage_mb': memory_usage,
            'peak_memory_mb': memory_after.peak_memory_mb,
            'timings': time_profiler.get_summary()
        },
        'dbscan_object': dbscan
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='运行DBSCAN聚类算法')
    parser.add_argument('--data', type=str, required=True,
                        help='点数据CSV文件路径（需要表头）')
    parser.add_argument('--eps', type=float, default=0.5,
                        help='DBSCAN邻域半径（默认: 0.5）')
    parser.add_argument('--min-points', type=int, default=5,
                        help='核心点的最小邻居数，包含自身（默认: 5）')
    parser.add_argument('--no-borders', action='store_true',
                        help='不为边界点分配聚类')
    parser.add_argument('--seed', type=int,
                        help='访问顺序的随机种子')
    parser.add_argument('--columns', type=str, nargs='+',
                        help='作为坐标的列名（默认: 所有数值列）')
    parser.add_argument('--predict', type=str,
                        help='需要分类的新点CSV文件路径')
    parser.add_argument('--n-jobs', type=int, default=1,
                        help='预测时半径查询的并行线程数，-1表示所有核心（默认: 1）')
    parser.add_argument('--output-dir', type=str, default='./results/dbscan',
                        help='输出目录（默认: ./results/dbscan）')
    parser.add_argument('--no-visualize', action='store_true',
                        help='不生成可视化图表')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    args = build_parser().parse_args(argv)
    output_dir = Path(args.output_dir)

    try:
        print("DBSCAN聚类算法")
        print("=" * 60)

        points = load_points(args.data, columns=args.columns)
        print(f"从 {args.data} 加载了 {len(points)} 个点")

        result = run_dbscan(points, eps=args.eps, min_points=args.min_points,
                            include_borders=not args.no_borders, seed=args.seed)
        dbscan = result.pop('dbscan_object')

        save_labels(output_dir / 'labels.csv', points, dbscan.labels_, columns=args.columns)

        if args.predict:
            new_points = load_points(args.predict, columns=args.columns)
            predictions = dbscan.predict(points, new_points, n_jobs=args.n_jobs)
            prediction_file = save_predictions(output_dir / 'predictions.json', predictions)
            n_noise = sum(1 for clusters in predictions if clusters == [0])
            print(f"\n预测了 {len(predictions)} 个新点，其中 {n_noise} 个为噪声")
            print(f"预测结果已保存到: {prediction_file}")

        if not args.no_visualize:
            visualizer = ClusterVisualizer(figsize=(12, 10))
            fig = visualizer.plot_clusters_2d(
                points, dbscan.labels_,
                title=f"DBSCAN聚类结果 (eps={args.eps}, min_points={args.min_points})",
                save_path=output_dir / 'clusters.png'
            )
            plt.close(fig)

        result_file = save_results(result, output_dir)
        print(f"结果已保存到: {result_file}")

        print("\n" + "=" * 60)
        print("DBSCAN聚类完成")
        print("=" * 60)

    except Exception as e:
        print(f"错误: {e}")
        import traceback
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
