import numpy as np
import pytest

from numpy.testing import assert_almost_equal, assert_array_almost_equal

import gbpdn.api as G
from gbpdn.algorithms import (lbfgs_hessian, solvers, EXIT_OPTIMAL,
                              EXIT_CALLBACK, EXIT_ITERATIONS, EXIT_RUNTIME)


def _lasso(tau=1., seed=2):
    rng = np.random.RandomState(seed)
    A = rng.standard_normal((10, 20))
    b = rng.standard_normal(10)
    l1 = G.l1norm()
    data = G.pareto_data(b, l1.kappa_polar)
    data.tau = tau
    loss = G.squared_error(A)
    project = lambda x: l1.project(x, tau)
    return A, b, loss, project, data


@pytest.mark.parametrize("name", ['spg', 'pqn'])
def test_kls(name):
    A, b, loss, project, data = _lasso()
    x, info, data = solvers[name](loss, project, np.zeros(20),
                                  {'optTol': 1e-6}, data)
    assert info['stat'] == EXIT_OPTIMAL
    assert info['statMsg'] == 'Optimal'
    assert np.fabs(x).sum() <= 1 + 1e-8
    assert data.Atr is not None
    assert G.gap_value(data) < 1e-3
    assert_almost_equal(info['f'], data.f)


def test_spg_pqn_agree():
    A, b, loss, project, data = _lasso(tau=0.5)
    opts = {'optTol': 1e-7}
    x1, info1, _ = G.spg_lasso(loss, project, np.zeros(20), opts, data)
    x2, info2, _ = G.pqn_lasso(loss, project, np.zeros(20), opts, data)
    assert_almost_equal(info1['f'], info2['f'], decimal=5)
    assert_array_almost_equal(x1, x2, decimal=2)


def test_starting_point_projected():
    A, b, loss, project, data = _lasso()
    x, info, _ = G.spg_lasso(loss, project, np.ones(20) * 10,
                             {'iterations': 0}, data)
    assert info['stat'] == EXIT_ITERATIONS
    assert np.fabs(x).sum() <= 1 + 1e-10


def test_callback():
    A, b, loss, project, data = _lasso()
    seen = []

    def callback(x, data):
        seen.append(G.gap_value(data))
        return len(seen) == 3

    x, info, _ = G.spg_lasso(loss, project, np.zeros(20),
                             {'callback': callback}, data)
    assert info['stat'] == EXIT_CALLBACK
    assert info['iter'] == 2
    assert None not in seen


def test_runtime():
    A, b, loss, project, data = _lasso()
    x, info, _ = G.pqn_lasso(loss, project, np.zeros(20),
                             {'maxRuntime': 0}, data)
    assert info['stat'] == EXIT_RUNTIME
    assert info['iter'] == 0


def test_line_search_failure():
    A, b, loss, project, data = _lasso()
    calls = [0]

    def increasing(x, data, mode='both'):
        # every evaluation is worse than the last one
        calls[0] += 1
        data.f = float(calls[0])
        data.r = b
        data.Atr = np.dot(A.T, b)
        if mode == 'both':
            return data.f, -data.Atr
        return data.f

    for solver in [G.spg_lasso, G.pqn_lasso]:
        x, info, _ = solver(increasing, project, np.zeros(20),
                            {'maxLineSearch': 3}, data)
        assert info['stat'] == 'Line search failed'
        assert info['statMsg'] == 'Line search failed'
        assert info['iter'] == 0
        assert_array_almost_equal(x, np.zeros(20))


def test_unknown_option():
    A, b, loss, project, data = _lasso()
    with pytest.raises(ValueError):
        G.spg_lasso(loss, project, np.zeros(20), {'optTOL': 1e-3}, data)


def test_lbfgs_secant_equation():
    rng = np.random.RandomState(0)
    Q = rng.standard_normal((6, 6))
    Q = np.dot(Q.T, Q) + np.identity(6)
    B = lbfgs_hessian(memory=3)
    assert B.empty
    assert_array_almost_equal(B.dot(np.ones(6)), np.ones(6))
    for _ in range(5):
        s = rng.standard_normal(6)
        assert B.update(s, np.dot(Q, s))
    assert len(B.S) == 3
    assert_array_almost_equal(B.dot(s), np.dot(Q, s))
    # pairs with non-positive curvature are skipped
    assert not B.update(s, -s)
    assert len(B.S) == 3
