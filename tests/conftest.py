"""Pytest configuration and shared fixtures."""
import numpy as np
import pytest

from pylibmf import Matrix, native
from fake_native import FakeLibMF


@pytest.fixture
def fake_lib(monkeypatch):
    """Route every native call through the python fake"""
    lib = FakeLibMF()
    monkeypatch.setattr(native, '_lib', lib)
    return lib


def make_ratings(max_row=30, max_column=20, nnz=200, seed=1234):
    """Random ratings that include (max_row, max_column) corners"""
    rstate = np.random.RandomState(seed=seed)
    data = Matrix()
    data.push(max_row, 0, 3.0)
    data.push(0, max_column, 4.0)
    for _ in range(nnz - 2):
        data.push(
            int(rstate.randint(0, max_row + 1)),
            int(rstate.randint(0, max_column + 1)),
            float(rstate.randint(1, 6)),
        )
    return data


@pytest.fixture
def ratings():
    return make_ratings()


@pytest.fixture
def ratings_file(tmp_path, ratings):
    """LIBMF text file holding the ratings fixture"""
    path = tmp_path / 'real_matrix.tr.txt'
    with open(path, 'w') as f:
        for entry in ratings:
            f.write(f"{entry.row} {entry.column} {entry.value}\n")
    return path
