#!/usr/bin/env python3
"""
Encoding of rating data into the LIBMF sparse matrix layout.
"""
import ctypes
import logging
import os
from typing import Iterator, List, NamedTuple, Optional, Tuple, Union

import numpy as np
import scipy.sparse as sp

from . import native
from .errors import NoDataError
from .structs import NODE_DTYPE, MFNode, MFProblem

_log = logging.getLogger(__name__)

_INT_MAX = np.iinfo(np.intc).max


class Entry(NamedTuple):
    """A single (row, column, value) observation"""
    row: int
    column: int
    value: float


class Matrix:
    """Append-only list of sparse observations."""

    def __init__(self) -> None:
        self._rows: List[int] = []
        self._columns: List[int] = []
        self._values: List[float] = []

    def push(self, row_index: int, column_index: int, value: float) -> None:
        """Add one observation, duplicates are kept as is"""
        self._rows.append(row_index)
        self._columns.append(column_index)
        self._values.append(value)

    def extend(self, rows, columns, values) -> None:
        """Add many observations at once"""
        if not len(rows) == len(columns) == len(values):
            raise ValueError(
                f"Row, column and value counts must match: "
                f"{len(rows)}, {len(columns)}, {len(values)}"
            )
        self._rows.extend(np.asarray(rows).tolist())
        self._columns.extend(np.asarray(columns).tolist())
        self._values.extend(np.asarray(values).tolist())

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Entry]:
        for row, column, value in zip(
            self._rows, self._columns, self._values
        ):
            yield Entry(row, column, value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(nnz={len(self)})"

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return row, column and value arrays"""
        return (
            np.asarray(self._rows),
            np.asarray(self._columns),
            np.asarray(self._values, dtype=np.float32),
        )


class Problem:
    """
    An mf_problem ready to be handed to the native library.

    For in-memory data the node buffer is a numpy array owned by this
    object; keep the Problem referenced until the native call returns.
    For file input the buffer was allocated by mf_read_problem and is
    owned by the library.
    """

    def __init__(
        self,
        struct: MFProblem,
        buffer: Optional[np.ndarray] = None,
        source: Optional[str] = None
    ) -> None:
        self.struct = struct
        self._buffer = buffer
        self.source = source

    @property
    def rows(self) -> int:
        return self.struct.m

    @property
    def columns(self) -> int:
        return self.struct.n

    @property
    def nnz(self) -> int:
        return self.struct.nnz

    @property
    def native_owned(self) -> bool:
        """True when the node buffer belongs to the library"""
        return self._buffer is None

    def pointer(self):
        """Pointer to the mf_problem struct for the next native call"""
        return ctypes.pointer(self.struct)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(rows={self.rows}, "
            f"columns={self.columns}, nnz={self.nnz})"
        )


DataLike = Union[str, os.PathLike, Matrix, sp.spmatrix, list, tuple]


def _as_indices(indices) -> np.ndarray:
    """Index array as int64, rejecting fractional values"""
    indices = np.asarray(indices).ravel()
    if indices.dtype.kind == "f" and np.any(indices != np.floor(indices)):
        raise ValueError("Row and column indices must be integers")
    return indices.astype(np.int64)


def encode_entries(rows, columns, values) -> Problem:
    """Copy observations into a contiguous buffer in mf_node layout.

    Args:
        rows: Row indices
        columns: Column indices
        values: Observed values

    Returns:
        Problem whose dimensions are one plus the largest index seen
    """
    rows = _as_indices(rows)
    columns = _as_indices(columns)
    values = np.asarray(values, dtype=np.float32).ravel()

    if len(values) == 0:
        raise NoDataError()
    if not len(rows) == len(columns) == len(values):
        raise ValueError(
            f"Row, column and value counts must match: "
            f"{len(rows)}, {len(columns)}, {len(values)}"
        )
    if rows.min() < 0 or columns.min() < 0:
        raise ValueError("Row and column indices must be non-negative")
    if rows.max() > _INT_MAX or columns.max() > _INT_MAX:
        raise ValueError("Row and column indices must fit in a C int")

    buffer = np.empty(len(values), dtype=NODE_DTYPE)
    buffer['u'] = rows
    buffer['v'] = columns
    buffer['r'] = values

    struct = MFProblem(
        m=int(rows.max()) + 1,
        n=int(columns.max()) + 1,
        nnz=len(buffer),
        r=buffer.ctypes.data_as(ctypes.POINTER(MFNode)),
    )
    return Problem(struct, buffer=buffer)


def read_problem(path: Union[str, os.PathLike], lib=None) -> Problem:
    """Let the library parse a LIBMF text file"""
    # the library resolves relative paths against its own cwd
    path = os.path.abspath(os.fspath(path))
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Data file not found: {path}")

    lib = lib or native.get_lib()
    _log.debug(f"Reading problem from {path}")
    struct = lib.mf_read_problem(os.fsencode(path))
    if struct.nnz == 0:
        raise NoDataError(f"No data in {path}")
    return Problem(struct, source=path)


def create_problem(data: DataLike, lib=None) -> Problem:
    """Build a Problem from a path, Matrix, scipy sparse matrix or
    sequence of (row, column, value) triples."""
    if isinstance(data, (str, os.PathLike)):
        return read_problem(data, lib=lib)

    if isinstance(data, Matrix):
        problem = encode_entries(*data.to_arrays())
    elif sp.issparse(data):
        coo = data.tocoo()
        problem = encode_entries(coo.row, coo.col, coo.data)
    elif isinstance(data, np.ndarray):
        if data.size == 0:
            raise NoDataError()
        if data.ndim != 2 or data.shape[1] != 3:
            raise ValueError(
                f"Expected an (nnz, 3) array, got shape {data.shape}"
            )
        problem = encode_entries(data[:, 0], data[:, 1], data[:, 2])
    elif isinstance(data, (list, tuple)):
        if len(data) == 0:
            raise NoDataError()
        rows, columns, values = zip(*data)
        problem = encode_entries(rows, columns, values)
    else:
        raise TypeError(
            f"Unsupported data type: {type(data).__name__}"
        )

    _log.debug(f"Encoded {problem}")
    return problem
