""" Testing the linear operator wrappers
"""

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import aslinearoperator
import pytest

from numpy.testing import assert_array_almost_equal, assert_array_equal

import gbpdn.api as G
from gbpdn.affine import check_mode, FORWARD, ADJOINT


def _operators(X):
    def fn(x, mode):
        if mode == 1:
            return np.dot(X, x)
        return np.dot(X.T, x)

    class mapper(object):
        def linear_map(self, x):
            return np.dot(X, x)

        def adjoint_map(self, u):
            return np.dot(X.T, u)

    return [X, sparse.csc_matrix(X), aslinearoperator(X), fn, mapper()]


def test_linear_transform():
    np.random.seed(0)
    X = np.random.standard_normal((5, 8))
    x = np.random.standard_normal(8)
    u = np.random.standard_normal(5)
    for op in _operators(X):
        T = G.linear_transform(op)
        assert_array_almost_equal(T.linear_map(x), np.dot(X, x))
        assert_array_almost_equal(T.adjoint_map(u), np.dot(X.T, u))
        assert_array_almost_equal(T.apply(x, 'forward'), np.dot(X, x))
        assert_array_almost_equal(T.apply(u, 2), np.dot(X.T, u))
        assert T.primal_shape == (8,)
        assert T.dual_shape == (5,)


def test_explicit():
    X = np.ones((2, 3))
    assert G.linear_transform(X).explicit
    assert G.linear_transform(sparse.csr_matrix(X)).explicit
    assert not G.linear_transform(lambda x, mode: x).explicit


def test_bad_operators():
    with pytest.raises(G.AffineError):
        G.linear_transform(None)
    with pytest.raises(G.AffineError):
        G.linear_transform(np.ones(4))


def test_modes():
    assert check_mode(1) == FORWARD
    assert check_mode('forward') == FORWARD
    assert check_mode(2) == ADJOINT
    assert check_mode('adjoint') == ADJOINT
    with pytest.raises(ValueError):
        check_mode(3)
    T = G.counted_transform(np.eye(3))
    with pytest.raises(ValueError):
        T.apply(np.ones(3), 'sideways')
    assert T.n_prod == 0


def test_counted_transform():
    X = np.arange(6.).reshape((2, 3))
    T = G.counted_transform(X, max_matvec=3)
    T.linear_map(np.ones(3))
    T.adjoint_map(np.ones(2))
    T.apply(np.ones(3), 1)
    assert (T.n_prod_A, T.n_prod_At) == (2, 1)
    assert T.time_matprod >= 0
    with pytest.raises(G.MatvecLimitExceeded):
        T.adjoint_map(np.ones(2))
    # a refused product is not counted
    assert (T.n_prod_A, T.n_prod_At) == (2, 1)


def test_counted_function_shapes():
    X = np.arange(6.).reshape((2, 3))
    T = G.counted_transform(lambda x, mode: np.dot(X, x) if mode == 1
                            else np.dot(X.T, x))
    assert T.primal_shape is None
    assert_array_equal(T.adjoint_map(np.ones(2)), [3., 5., 7.])
    assert T.primal_shape == (3,)
    assert T.n_prod_At == 1
