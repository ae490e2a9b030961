"""Loss function identifiers understood by mf_parameter.fun."""
from enum import IntEnum


class Loss(IntEnum):
    """LIBMF loss functions"""
    # real-valued matrix factorization
    REAL_L2 = 0
    REAL_L1 = 1
    REAL_KL = 2
    # binary matrix factorization
    BINARY_LOG = 5
    BINARY_L2 = 6
    BINARY_L1 = 7
    # one-class matrix factorization
    ONE_CLASS_ROW = 10
    ONE_CLASS_COL = 11
    ONE_CLASS_L2 = 12
