import numpy as np
import pytest

from numpy.testing import assert_array_almost_equal, assert_array_equal

import gbpdn.api as G

np.random.seed(0)


def check_projection(x, p, ball_points):
    """
    p is the projection of x onto a convex set containing
    ball_points iff (x-p)'(z-p) <= 0 for all z in the set.
    """
    for z in ball_points:
        assert np.dot(x - p, z - p) <= 1e-10


def test_projl1():
    for bound in [0.5, 1., 3.]:
        x = np.random.standard_normal(20) * 2
        p = G.projl1(x, bound)
        np.testing.assert_allclose(np.fabs(p).sum(), bound)
        Z = [G.projl1(np.random.standard_normal(20), bound) for _ in range(20)]
        check_projection(x, p, Z)


def test_projl1_inside():
    x = np.array([0.1, -0.2, 0.3])
    assert_array_equal(G.projl1(x, 1.), x)
    assert_array_equal(G.projl1(x, 0.), np.zeros(3))
    assert_array_almost_equal(G.projl1(np.array([3., -1., 0.5]), 2.),
                              [2., 0., 0.])
    with pytest.raises(ValueError):
        G.projl1(x, -1.)


def test_projl1_ties():
    # equal magnitudes share the budget
    assert_array_almost_equal(G.projl1(np.array([1., -1.]), 1.), [0.5, -0.5])


def test_projl1_weighted():
    x = np.random.standard_normal(15) * 2
    w = np.random.uniform(0.5, 2, 15)
    bound = 1.5
    p = G.projl1_weighted(x, w, bound)
    np.testing.assert_allclose(np.fabs(w * p).sum(), bound)
    Z = [G.projl1_weighted(np.random.standard_normal(15), w, bound)
         for _ in range(20)]
    check_projection(x, p, Z)

    assert_array_almost_equal(G.projl1_weighted(x, np.ones(15), bound),
                              G.projl1(x, bound))
    assert_array_almost_equal(G.projl1_weighted(x, 2., bound),
                              G.projl1(x, bound / 2.))


def test_projl1_weighted_free():
    x = np.array([3., -2., 1.])
    w = np.array([0., 1., 1.])
    p = G.projl1_weighted(x, w, 1.)
    assert p[0] == 3.
    np.testing.assert_allclose(np.fabs(p[1:]).sum(), 1.)


def test_l1norm():
    l1 = G.l1norm()
    x = np.array([1., -2., 0.5])
    assert l1.kappa(x) == 3.5
    assert l1.kappa_polar(x) == 2.
    assert_array_almost_equal(l1.project(x, 1.), G.projl1(x, 1.))

    wl1 = G.l1norm(weights=[2., 1., 4.])
    assert wl1.kappa(x) == 6.
    assert wl1.kappa_polar(x) == 2.
    np.testing.assert_allclose(wl1.kappa(wl1.project(x, 1.)), 1.)

    with pytest.raises(ValueError):
        G.l1norm(weights=[1., -1., 1.])


def test_make_gauge():
    assert isinstance(G.make_gauge(), G.l1norm)

    kappa = lambda x: np.linalg.norm(x)
    project = lambda x, tau: x * min(1, tau / max(np.linalg.norm(x), 1e-300))
    g = G.make_gauge(kappa, kappa, project)
    assert g.kappa(np.array([3., 4.])) == 5.
    assert_array_almost_equal(g.project(np.array([3., 4.]), 1.), [0.6, 0.8])

    with pytest.raises(ValueError):
        G.make_gauge(kappa=kappa)
    with pytest.raises(ValueError):
        G.make_gauge(kappa=kappa, project=project)
    with pytest.raises(ValueError):
        G.make_gauge(kappa, kappa, project, weights=np.ones(2))
