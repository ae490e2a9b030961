"""
Pure python stand-in for the LIBMF function table used by unit tests.

Models are real MFModel structs whose factor buffers are numpy arrays
kept alive by this object, so the bindings read them exactly as they
would read native memory.
"""
import ctypes
import os

import numpy as np

from pylibmf.structs import (
    MFModel, MFNode, MFParameter, MFProblem, NODE_DTYPE
)

# pylint: disable=invalid-name


class FakeLibMF:
    """Implements the mf_* and calc_* entry points in python"""

    def __init__(self):
        self.models = {}
        self.destroyed = []
        self.problems = []
        self.last_param = None
        self.last_folds = None
        self.last_transpose = None
        self.validation_calls = 0
        self.read_paths = []

    @staticmethod
    def mf_get_default_param():
        return MFParameter(
            fun=0, k=8, nr_threads=12, nr_bins=20, nr_iters=20,
            lambda_p1=0.0, lambda_p2=0.1, lambda_q1=0.0, lambda_q2=0.1,
            eta=0.1, alpha=1.0, c=0.0001,
            do_nmf=False, quiet=False, copy_data=True,
        )

    def mf_read_problem(self, path):
        path = os.fsdecode(path)
        self.read_paths.append(path)
        try:
            triples = np.loadtxt(path, ndmin=2)
        except OSError:
            return MFProblem()
        nodes = np.empty(len(triples), dtype=NODE_DTYPE)
        nodes['u'] = triples[:, 0]
        nodes['v'] = triples[:, 1]
        nodes['r'] = triples[:, 2]
        self.problems.append(nodes)
        return MFProblem(
            m=int(nodes['u'].max()) + 1,
            n=int(nodes['v'].max()) + 1,
            nnz=len(nodes),
            r=nodes.ctypes.data_as(ctypes.POINTER(MFNode)),
        )

    @staticmethod
    def nodes(prob_ptr):
        """(u, v, r) arrays of a problem passed by pointer"""
        prob = prob_ptr.contents
        u = np.array([prob.r[i].u for i in range(prob.nnz)])
        v = np.array([prob.r[i].v for i in range(prob.nnz)])
        r = np.array([prob.r[i].r for i in range(prob.nnz)],
                     dtype=np.float32)
        return u, v, r

    def _new_model(self, fun, m, n, k, b, p=None, q=None):
        if p is None:
            p = (np.arange(m * k, dtype=np.float32) % 7 + 1) * 0.01
        if q is None:
            q = (np.arange(n * k, dtype=np.float32) % 5 + 1) * 0.02
        p = np.ascontiguousarray(p, dtype=np.float32)
        q = np.ascontiguousarray(q, dtype=np.float32)
        float_p = ctypes.POINTER(ctypes.c_float)
        model = MFModel(
            fun=fun, m=m, n=n, k=k, b=b,
            p=p.ctypes.data_as(float_p),
            q=q.ctypes.data_as(float_p),
        )
        self.models[ctypes.addressof(model)] = (model, p, q)
        return ctypes.pointer(model)

    def _train(self, prob_ptr, param):
        self.last_param = param
        if param.k <= 0 or param.nr_iters <= 0:
            return None
        prob = prob_ptr.contents
        _, _, r = self.nodes(prob_ptr)
        return self._new_model(
            param.fun, prob.m, prob.n, param.k, float(r.mean())
        )

    def mf_train(self, prob_ptr, param):
        return self._train(prob_ptr, param)

    def mf_train_with_validation(self, tr_ptr, va_ptr, param):
        self.validation_calls += 1
        return self._train(tr_ptr, param)

    def mf_cross_validation(self, prob_ptr, folds, param):
        self.last_param = param
        self.last_folds = folds
        if param.k <= 0:
            return 0.0
        _, _, r = self.nodes(prob_ptr)
        return float(r.std()) + 1.0

    def _lookup(self, model_ptr):
        addr = ctypes.addressof(model_ptr.contents)
        if addr not in self.models:
            raise AssertionError(f"use of freed model at {addr:#x}")
        return self.models[addr]

    def mf_predict(self, model_ptr, u, v):
        model, p, q = self._lookup(model_ptr)
        k = model.k
        if not (0 <= u < model.m and 0 <= v < model.n):
            return model.b
        pu = p[u * k:(u + 1) * k]
        qv = q[v * k:(v + 1) * k]
        return float(np.float32(model.b) + np.dot(pu, qv))

    def mf_save_model(self, model_ptr, path):
        model, p, q = self._lookup(model_ptr)
        try:
            with open(os.fsdecode(path), 'wb') as f:
                np.savez(
                    f, header=np.array([model.fun, model.m, model.n, model.k]),
                    b=np.float32(model.b), p=p, q=q
                )
        except OSError:
            return 1
        return 0

    def mf_load_model(self, path):
        try:
            with open(os.fsdecode(path), 'rb') as f:
                data = np.load(f)
                fun, m, n, k = (int(x) for x in data['header'])
                return self._new_model(
                    fun, m, n, k, float(data['b']),
                    p=data['p'], q=data['q']
                )
        except OSError:
            return None

    def mf_destroy_model(self, model_ptr_ptr):
        addr = ctypes.addressof(model_ptr_ptr.contents.contents)
        if addr not in self.models:
            raise AssertionError(f"double free of model at {addr:#x}")
        del self.models[addr]
        self.destroyed.append(addr)

    def _errors(self, prob_ptr, model_ptr):
        self._lookup(model_ptr)
        u, v, r = self.nodes(prob_ptr)
        pred = np.array([self.mf_predict(model_ptr, i, j)
                         for i, j in zip(u, v)])
        return pred - r

    def calc_rmse(self, prob_ptr, model_ptr):
        return float(np.sqrt(np.mean(self._errors(prob_ptr, model_ptr)**2)))

    def calc_mae(self, prob_ptr, model_ptr):
        return float(np.mean(np.abs(self._errors(prob_ptr, model_ptr))))

    def calc_gkl(self, prob_ptr, model_ptr):
        self._lookup(model_ptr)
        return 0.25

    def calc_logloss(self, prob_ptr, model_ptr):
        self._lookup(model_ptr)
        return 0.5

    def calc_accuracy(self, prob_ptr, model_ptr):
        self._lookup(model_ptr)
        return 0.75

    def calc_mpr(self, prob_ptr, model_ptr, transpose):
        self._lookup(model_ptr)
        self.last_transpose = transpose
        return 0.4

    def calc_auc(self, prob_ptr, model_ptr, transpose):
        self._lookup(model_ptr)
        self.last_transpose = transpose
        return 0.6
