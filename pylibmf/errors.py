"""Exceptions raised by the LIBMF bindings."""


class LibMFError(RuntimeError):
    """Base class for failures reported by or around the native library"""
    default_message = "LIBMF error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class NativeLibraryError(LibMFError):
    """Shared library artifact missing or not loadable"""
    default_message = "Cannot load LIBMF shared library"


class NoDataError(LibMFError, ValueError):
    """An in-memory data set with no entries was passed"""
    default_message = "No data"


class NotFitError(LibMFError):
    """Model accessed before fit/load or after destroy"""
    default_message = "Not fit"


class FitError(LibMFError):
    """mf_train returned a null model"""
    default_message = "fit failed"


class CrossValidationError(LibMFError):
    """mf_cross_validation returned 0 (bad parameters or a zero score)"""
    default_message = "cv failed"


class SaveModelError(LibMFError):
    default_message = "Cannot save model"


class LoadModelError(LibMFError):
    default_message = "Cannot open model"
