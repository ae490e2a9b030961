"""Logging and data file helpers."""
import logging
import os
from typing import Union

import numpy as np
import pandas as pd

from .matrix import Matrix, Problem


def get_logger(log_level: int, obj=None) -> logging.Logger:
    """Logger named after the owning module and class"""
    name = 'pylibmf'
    if obj is not None:
        cls = obj if isinstance(obj, type) else obj.__class__
        name = f"{cls.__module__}.{cls.__name__}"
    logger = logging.getLogger(name)
    if log_level:
        logger.setLevel(log_level)
    return logger


def load_ratings(path: Union[str, os.PathLike]) -> Matrix:
    """Read a LIBMF text file of 'row column value' lines into a Matrix.

    Args:
        path: File with whitespace separated triples, one per line

    Returns:
        Matrix holding the triples in file order
    """
    df = pd.read_csv(
        path,
        sep=r'\s+',
        header=None,
        names=['row', 'column', 'value'],
        dtype={'row': np.int64, 'column': np.int64, 'value': np.float32},
    )
    data = Matrix()
    data.extend(df['row'].values, df['column'].values, df['value'].values)
    return data


def get_problem_stats(problem: Problem) -> dict:
    """Basic statistics about an encoded problem."""
    stats = {
        "shape": (problem.rows, problem.columns),
        "nnz": problem.nnz,
        "density": problem.nnz / max(problem.rows * problem.columns, 1),
    }
    return stats


def format_problem_stats(problem: Problem) -> str:
    """Compact single line summary of an encoded problem."""
    stats = get_problem_stats(problem)
    return (
        f"({stats['shape'][0]:6}x{stats['shape'][1]:6}) "
        f"nnz={stats['nnz']:10,} ({stats['density']:5.3%})"
    )
