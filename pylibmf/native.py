"""
Loading of the platform specific LIBMF shared library and the ctypes
signatures of its C entry points.
"""
import ctypes
import logging
import os
import platform
import sys
from pathlib import Path
from typing import Optional

from .errors import NativeLibraryError
from .structs import MFModel, MFParameter, MFProblem

_log = logging.getLogger(__name__)

VENDOR_DIR = Path(__file__).parent / "vendor"

# (platform family, is arm) -> artifact name
LIBRARY_NAMES = {
    ('windows', False): 'mf.dll',
    ('windows', True): 'mf.dll',
    ('darwin', False): 'libmf.dylib',
    ('darwin', True): 'libmf.arm64.dylib',
    ('linux', False): 'libmf.so',
    ('linux', True): 'libmf.arm64.so',
}

_lib = None


def _is_arm(machine: str) -> bool:
    machine = machine.lower()
    return machine.startswith('arm') or machine == 'aarch64'


def default_library_name(
    sys_platform: Optional[str] = None,
    machine: Optional[str] = None
) -> str:
    """Artifact name for the given (or running) platform and processor"""
    sys_platform = sys_platform or sys.platform
    machine = machine or platform.machine()
    if sys_platform == 'win32':
        family = 'windows'
    elif sys_platform == 'darwin':
        family = 'darwin'
    else:
        family = 'linux'
    return LIBRARY_NAMES[(family, _is_arm(machine))]


def library_path() -> Path:
    """Location of the artifact inside the package"""
    return VENDOR_DIR / default_library_name()


def library_available() -> bool:
    """True when the shared library for this platform is on disk"""
    return library_path().exists()


def get_lib():
    """Load LIBMF once per process and return the configured library"""
    global _lib

    if _lib is not None:
        return _lib

    path = library_path()
    if not path.exists():
        raise NativeLibraryError(
            f"LIBMF shared library not found at {path}"
        )
    _log.info(f"Loading LIBMF from {path}")
    try:
        lib = ctypes.CDLL(os.fspath(path))
    except OSError as e:
        raise NativeLibraryError(
            f"Failed to load library from {path}: {e}"
        ) from e
    try:
        _configure_library(lib)
    except AttributeError as e:
        raise NativeLibraryError(
            f"Missing entry point in {path}: {e}"
        ) from e
    _lib = lib
    return _lib


def _configure_library(lib):
    """Attach struct layouts to every entry point"""
    problem_p = ctypes.POINTER(MFProblem)
    model_p = ctypes.POINTER(MFModel)

    lib.mf_get_default_param.argtypes = []
    lib.mf_get_default_param.restype = MFParameter

    lib.mf_read_problem.argtypes = [ctypes.c_char_p]
    lib.mf_read_problem.restype = MFProblem

    # persistence
    lib.mf_save_model.argtypes = [model_p, ctypes.c_char_p]
    lib.mf_save_model.restype = ctypes.c_int

    lib.mf_load_model.argtypes = [ctypes.c_char_p]
    lib.mf_load_model.restype = model_p

    lib.mf_destroy_model.argtypes = [ctypes.POINTER(model_p)]
    lib.mf_destroy_model.restype = None

    # training
    lib.mf_train.argtypes = [problem_p, MFParameter]
    lib.mf_train.restype = model_p

    lib.mf_train_with_validation.argtypes = [
        problem_p,
        problem_p,
        MFParameter,
    ]
    lib.mf_train_with_validation.restype = model_p

    lib.mf_cross_validation.argtypes = [problem_p, ctypes.c_int, MFParameter]
    lib.mf_cross_validation.restype = ctypes.c_double

    lib.mf_predict.argtypes = [model_p, ctypes.c_int, ctypes.c_int]
    lib.mf_predict.restype = ctypes.c_float

    # evaluation
    for name in ('rmse', 'mae', 'gkl', 'logloss', 'accuracy'):
        func = getattr(lib, f'calc_{name}')
        func.argtypes = [problem_p, model_p]
        func.restype = ctypes.c_double

    for name in ('mpr', 'auc'):
        func = getattr(lib, f'calc_{name}')
        func.argtypes = [problem_p, model_p, ctypes.c_bool]
        func.restype = ctypes.c_double
