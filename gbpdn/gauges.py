r"""
Gauge functions, their polars and projections onto their balls.

A gauge is described by three callables

* ``kappa(x)``: the gauge itself,
* ``kappa_polar(x)``: its polar, used in the duality gap and as the
  slope of the Pareto curve,
* ``project(x, tau)``: Euclidean projection onto
  :math:`\{z : \kappa(z) \leq \tau\}`.
"""

import numpy as np

from .projl1 import projl1, projl1_weighted


class gauge(object):

    """
    A gauge given by user supplied functions.
    """

    def __init__(self, kappa, kappa_polar, project):
        for name, fn in [('kappa', kappa),
                         ('kappa_polar', kappa_polar),
                         ('project', project)]:
            if not callable(fn):
                raise ValueError('%s should be callable' % name)
        self._kappa = kappa
        self._kappa_polar = kappa_polar
        self._project = project

    def kappa(self, x):
        return self._kappa(x)

    def kappa_polar(self, x):
        return self._kappa_polar(x)

    def project(self, x, tau):
        return self._project(x, tau)

    def __repr__(self):
        return "%s()" % self.__class__.__name__


class l1norm(gauge):

    r"""
    The (weighted) one-norm :math:`\|w \cdot x\|_1` with polar
    :math:`\|x / w\|_{\infty}`.

    >>> l1 = l1norm()
    >>> l1.kappa(np.array([1., -2.]))
    3.0
    >>> l1.kappa_polar(np.array([1., -2.]))
    2.0
    """

    def __init__(self, weights=None):
        if weights is not None:
            weights = np.asarray(weights, dtype=float)
            if np.any(weights < 0):
                raise ValueError('weights should be non-negative')
        self.weights = weights

    def kappa(self, x):
        if self.weights is None:
            return float(np.fabs(x).sum())
        return float(np.fabs(self.weights * x).sum())

    def kappa_polar(self, x):
        if self.weights is None:
            return float(np.fabs(x).max())
        with np.errstate(divide='ignore', invalid='ignore'):
            ratio = np.fabs(x) / self.weights
        # zero weights leave a coordinate free, its polar is infinite
        # unless the coordinate itself vanishes
        ratio[np.isnan(ratio)] = 0
        return float(ratio.max())

    def project(self, x, tau):
        if self.weights is None:
            return projl1(x, tau)
        return projl1_weighted(x, self.weights, tau)

    def __repr__(self):
        if self.weights is None:
            return "l1norm()"
        return "l1norm(weights=%s)" % repr(self.weights)


def make_gauge(kappa=None, kappa_polar=None, project=None, weights=None):
    """
    Build the gauge used by the Pareto root finder.

    Either all of `kappa`, `kappa_polar` and `project` are given, in which
    case they define the gauge, or none of them is, in which case the
    (weighted) one-norm is used.
    """
    given = [fn is not None for fn in (kappa, kappa_polar, project)]
    if any(given) and not all(given):
        raise ValueError('Either all kappa related fields (kappa, kappa_polar, '
                         'project) should be given or none.')
    if all(given):
        if weights is not None:
            raise ValueError('weights only apply to the default one-norm gauge')
        return gauge(kappa, kappa_polar, project)
    return l1norm(weights)
