"""
Binary layouts shared with the LIBMF C library.

Field order and types must track mf.h of the bundled library exactly,
a mismatch here silently corrupts memory on the native side.
"""
import ctypes

import numpy as np

# pylint: disable=invalid-name,too-few-public-methods


class MFNode(ctypes.Structure):
    """One (row, column, value) observation"""
    _fields_ = [
        ("u", ctypes.c_int),
        ("v", ctypes.c_int),
        ("r", ctypes.c_float),
    ]


class MFProblem(ctypes.Structure):
    """Sparse matrix descriptor, r points to nnz contiguous nodes"""
    _fields_ = [
        ("m", ctypes.c_int),
        ("n", ctypes.c_int),
        ("nnz", ctypes.c_longlong),
        ("r", ctypes.POINTER(MFNode)),
    ]


class MFParameter(ctypes.Structure):
    """Training configuration, passed to the library by value"""
    _fields_ = [
        ("fun", ctypes.c_int),
        ("k", ctypes.c_int),
        ("nr_threads", ctypes.c_int),
        ("nr_bins", ctypes.c_int),
        ("nr_iters", ctypes.c_int),
        ("lambda_p1", ctypes.c_float),
        ("lambda_p2", ctypes.c_float),
        ("lambda_q1", ctypes.c_float),
        ("lambda_q2", ctypes.c_float),
        ("eta", ctypes.c_float),
        ("alpha", ctypes.c_float),
        ("c", ctypes.c_float),
        ("do_nmf", ctypes.c_bool),
        ("quiet", ctypes.c_bool),
        ("copy_data", ctypes.c_bool),
    ]


class MFModel(ctypes.Structure):
    """Trained model, p and q are row-major (m x k) and (n x k) floats"""
    _fields_ = [
        ("fun", ctypes.c_int),
        ("m", ctypes.c_int),
        ("n", ctypes.c_int),
        ("k", ctypes.c_int),
        ("b", ctypes.c_float),
        ("p", ctypes.POINTER(ctypes.c_float)),
        ("q", ctypes.POINTER(ctypes.c_float)),
    ]


# numpy view of MFNode so entry buffers can be filled without a python loop
NODE_DTYPE = np.dtype(
    [("u", np.intc), ("v", np.intc), ("r", np.float32)],
    align=True
)