#!/usr/bin/env python3
"""
Matrix factorization model backed by a native LIBMF model pointer.
"""
import ctypes
import logging
import os
from typing import Dict, Optional

import numpy as np

from . import native
from .errors import (
    CrossValidationError,
    FitError,
    LoadModelError,
    NotFitError,
    SaveModelError,
)
from .loss import Loss
from .matrix import DataLike, create_problem
from .params import build_param, load_options, validate_options
from .utils import format_problem_stats, get_logger


class Model:
    """LIBMF matrix factorization model.

    Holds at most one native mf_model pointer. Fitting or loading
    releases the pointer currently held before adopting the new one,
    and destroy() can be called any number of times.

    Not thread safe: callers must not share one Model between
    concurrent fit/predict/destroy calls.
    """

    def __init__(self, log_level: int = logging.WARNING, **options) -> None:
        """Initialize an empty (not fit) model.

        Args:
            log_level: Level for this model's logger
            **options: Training options, see params.OPTION_FIELDS
        """
        validate_options(options)
        self.options: Dict = options
        self.logger = get_logger(log_level, self)
        self._ptr = None

    @classmethod
    def from_config(cls, config_path: str, **overrides) -> "Model":
        """Create a model with options read from a YAML file"""
        options = load_options(config_path)
        options.update(overrides)
        return cls(**options)

    @classmethod
    def load(cls, path, **kwargs) -> "Model":
        """Create a model from a file written by save()"""
        model = cls(**kwargs)
        model.load_model(path)
        return model

    def __repr__(self) -> str:
        if self._ptr is None:
            return f"{self.__class__.__name__}(not fit)"
        return (
            f"{self.__class__.__name__}(rows={self.rows()}, "
            f"columns={self.columns()}, factors={self.factors()})"
        )

    def __enter__(self) -> "Model":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    @property
    def is_fit(self) -> bool:
        return self._ptr is not None

    def fit(self, data: DataLike, eval_set: Optional[DataLike] = None):
        """Train on data, reporting validation metrics on eval_set.

        Args:
            data: Path, Matrix, scipy sparse matrix or (row, col, value)
                triples
            eval_set: Optional validation data in any of the same forms

        Returns:
            self
        """
        train_set = create_problem(data)
        self.logger.debug(f"Train set {format_problem_stats(train_set)}")
        eval_problem = None
        if eval_set is not None:
            eval_problem = create_problem(eval_set)
            self.logger.debug(
                f"Eval set {format_problem_stats(eval_problem)}"
            )

        lib = native.get_lib()
        param = build_param(self.options, lib=lib)
        if eval_problem is not None:
            ptr = lib.mf_train_with_validation(
                train_set.pointer(), eval_problem.pointer(), param
            )
        else:
            ptr = lib.mf_train(train_set.pointer(), param)

        if not ptr:
            self.logger.error(f"Training failed with options {self.options}")
            raise FitError()

        self._set_model(ptr)
        self.logger.info(
            f"Fit {self.rows()}x{self.columns()} model "
            f"with {self.factors()} factors"
        )
        return self

    def predict(self, row_index: int, column_index: int) -> float:
        """Predicted value at (row_index, column_index)"""
        ptr = self._model_ptr()
        lib = native.get_lib()
        return float(lib.mf_predict(ptr, row_index, column_index))

    def cv(self, data: DataLike, folds: int = 5) -> float:
        """Cross-validate the current options, does not fit the model.

        A result of exactly 0 is treated as failure since the library
        also returns 0 for invalid parameters.
        """
        problem = create_problem(data)
        lib = native.get_lib()
        param = build_param(self.options, lib=lib)
        # TODO separate bad parameters from a zero score once the C API does
        score = lib.mf_cross_validation(problem.pointer(), folds, param)
        if score == 0:
            self.logger.error(f"Cross-validation failed with {folds} folds")
            raise CrossValidationError()
        self.logger.info(f"{folds}-fold cross-validation score: {score}")
        return float(score)

    def save(self, path) -> None:
        """Write the model with mf_save_model, path is used as given"""
        ptr = self._model_ptr()
        self.logger.debug(f"Saving model to {path}")
        status = native.get_lib().mf_save_model(ptr, os.fsencode(path))
        if status != 0:
            self.logger.error(f"mf_save_model returned {status} for {path}")
            raise SaveModelError()

    def load_model(self, path) -> None:
        """Replace the current model with one read from path"""
        self.logger.debug(f"Loading model from {path}")
        ptr = native.get_lib().mf_load_model(os.fsencode(path))
        if not ptr:
            self.logger.error(f"mf_load_model failed for {path}")
            raise LoadModelError()
        self._set_model(ptr)

    def rows(self) -> int:
        return self._model().m

    def columns(self) -> int:
        return self._model().n

    def factors(self) -> int:
        return self._model().k

    def bias(self) -> float:
        return self._model().b

    def loss(self) -> Loss:
        return Loss(self._model().fun)

    def p(self) -> np.ndarray:
        """Row factors, shape (rows, factors)"""
        model = self._model()
        return self._read_factors(model.p, model.m, model.k)

    def q(self) -> np.ndarray:
        """Column factors, shape (columns, factors)"""
        model = self._model()
        return self._read_factors(model.q, model.n, model.k)

    def rmse(self, data: DataLike) -> float:
        return self._evaluate('rmse', data)

    def mae(self, data: DataLike) -> float:
        return self._evaluate('mae', data)

    def gkl(self, data: DataLike) -> float:
        return self._evaluate('gkl', data)

    def logloss(self, data: DataLike) -> float:
        return self._evaluate('logloss', data)

    def accuracy(self, data: DataLike) -> float:
        return self._evaluate('accuracy', data)

    def mpr(self, data: DataLike, transpose: bool = False) -> float:
        """Mean percentile rank"""
        return self._evaluate('mpr', data, transpose)

    def auc(self, data: DataLike, transpose: bool = False) -> float:
        """Area under the ROC curve"""
        return self._evaluate('auc', data, transpose)

    def destroy(self) -> None:
        """Free the native model, no-op when not fit"""
        self._destroy_model()

    def _evaluate(self, metric: str, data: DataLike, *args) -> float:
        ptr = self._model_ptr()
        problem = create_problem(data)
        lib = native.get_lib()
        func = getattr(lib, f'calc_{metric}')
        return float(func(problem.pointer(), ptr, *args))

    @staticmethod
    def _read_factors(ptr, n: int, k: int) -> np.ndarray:
        """Copy n rows of k floats starting at ptr"""
        if n == 0 or k == 0:
            return np.empty((n, k), dtype=np.float32)
        return np.ctypeslib.as_array(ptr, shape=(n, k)).copy()

    def _check_fit(self) -> None:
        if self._ptr is None:
            raise NotFitError()

    def _model(self):
        self._check_fit()
        return self._ptr.contents

    def _model_ptr(self):
        self._check_fit()
        return self._ptr

    def _set_model(self, ptr) -> None:
        self._destroy_model()
        self._ptr = ptr

    def _destroy_model(self) -> None:
        if self._ptr is None:
            return
        ptr = self._ptr
        self._ptr = None
        self.logger.debug("Destroying native model")
        native.get_lib().mf_destroy_model(ctypes.pointer(ptr))
