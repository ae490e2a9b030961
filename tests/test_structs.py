"""Layout checks for the structs shared with LIBMF."""
import ctypes

from pylibmf.structs import (
    NODE_DTYPE, MFModel, MFNode, MFParameter, MFProblem
)


def test_node_layout():
    """mf_node is two ints and a float with no padding"""
    assert ctypes.sizeof(MFNode) == 12
    assert MFNode.u.offset == 0
    assert MFNode.v.offset == 4
    assert MFNode.r.offset == 8


def test_node_dtype_matches_struct():
    """numpy buffers can be reinterpreted as mf_node arrays"""
    assert NODE_DTYPE.itemsize == ctypes.sizeof(MFNode)
    for name in ('u', 'v', 'r'):
        assert NODE_DTYPE.fields[name][1] == getattr(MFNode, name).offset


def test_problem_layout():
    """nnz is a long long, r is pointer aligned"""
    ptr_size = ctypes.sizeof(ctypes.c_void_p)
    assert MFProblem.nnz.offset == 8
    assert MFProblem.r.offset == 16
    assert ctypes.sizeof(MFProblem) == 16 + ptr_size


def test_parameter_layout():
    """Five ints, seven floats and three bools in declaration order"""
    names = [name for name, _ in MFParameter._fields_]
    assert names[:5] == ['fun', 'k', 'nr_threads', 'nr_bins', 'nr_iters']
    assert names[-3:] == ['do_nmf', 'quiet', 'copy_data']
    assert MFParameter.do_nmf.offset == 48
    assert MFParameter.copy_data.offset == 50
    assert ctypes.sizeof(MFParameter) == 52


def test_model_layout():
    """Factor pointers follow the float bias, aligned to pointer size"""
    ptr_size = ctypes.sizeof(ctypes.c_void_p)
    assert MFModel.b.offset == 16
    assert MFModel.p.offset == (24 if ptr_size == 8 else 20)
    assert MFModel.q.offset == MFModel.p.offset + ptr_size
