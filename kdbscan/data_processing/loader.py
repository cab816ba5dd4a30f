"""
点集数据加载器
负责读取CSV点数据以及保存聚类结果
"""

import json
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

PathLike = Union[str, Path]


def load_points(file_path: PathLike, columns: Optional[Sequence[str]] = None,
                nrows: Optional[int] = None) -> np.ndarray:
    """
    从CSV文件加载点数据

    Args:
        file_path: CSV文件路径（需要表头）
        columns: 作为坐标的列名；为None时使用所有数值列
        nrows: 限制加载的行数

    Returns:
        形状为(n_samples, n_dims)的float64数组

    Raises:
        FileNotFoundError: 文件不存在
        ValueError: 指定的列不存在或没有数值列
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"数据文件不存在: {file_path}")

    df = pd.read_csv(file_path, nrows=nrows)

    if columns:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise ValueError(f"数据文件中缺少列: {missing}")
        df = df[list(columns)]
    else:
        df = df.select_dtypes(include=[np.number])
        if df.shape[1] == 0:
            raise ValueError(f"数据文件中没有数值列: {file_path}")

    return df.to_numpy(dtype=np.float64)


def save_labels(file_path: PathLike, points: np.ndarray, labels: np.ndarray,
                columns: Optional[Sequence[str]] = None) -> Path:
    """
    保存每个点的坐标和聚类标签

    Args:
        file_path: 输出CSV路径
        points: 点数据
        labels: 聚类标签，0表示噪声
        columns: 坐标列名，默认为x0, x1, ...

    Returns:
        实际写入的文件路径
    """
    points = np.asarray(points)
    if points.ndim == 1:
        points = points.reshape(-1, 1)
    if len(points) != len(labels):
        raise ValueError(f"点数 {len(points)} 与标签数 {len(labels)} 不一致")

    if columns is None:
        columns = [f'x{i}' for i in range(points.shape[1])]

    df = pd.DataFrame(points, columns=list(columns))
    df['cluster'] = np.asarray(labels, dtype=np.int64)

    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(file_path, index=False)
    return file_path


def save_predictions(file_path: PathLike, predictions: List[List[int]]) -> Path:
    """
    以JSON格式保存新点的聚类预测

    Args:
        file_path: 输出JSON路径
        predictions: 每个新点对应的聚类ID列表

    Returns:
        实际写入的文件路径
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, 'w') as f:
        json.dump([[int(c) for c in clusters] for clusters in predictions], f, indent=2)
    return file_path


def save_results(result: Dict[str, Any], output_dir: PathLike,
                 file_name: str = 'dbscan_results.json') -> Path:
    """
    保存聚类参数和统计结果

    Args:
        result: 包含'parameters'和'results'的结果字典
        output_dir: 输出目录
        file_name: 输出文件名

    Returns:
        结果文件路径
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    result_file = output_path / file_name

    with open(result_file, 'w') as f:
        json.dump(result, f, indent=2, default=str)

    return result_file
