"""Public API exports for pylibmf package."""

# Native structs and library loading
from .structs import MFModel, MFNode, MFParameter, MFProblem
from .native import get_lib, library_available

# Data encoding
from .matrix import Entry, Matrix, Problem, create_problem

# Configuration
from .loss import Loss
from .params import build_param, load_options

# Models
from .model import Model

# Errors
from .errors import (
    CrossValidationError, FitError, LibMFError, LoadModelError,
    NativeLibraryError, NoDataError, NotFitError, SaveModelError
)

# Utilities
from .utils import load_ratings, get_problem_stats, format_problem_stats
