"""
Misfit functions for the KLS subproblem.

Each objective has a method ``smooth_objective(x, data, mode)``. It
evaluates the misfit of :math:`b - Ax` and records the residual and the
objective value in `data`. In mode 'both' it also computes :math:`A^Tr`,
stores it as ``data.Atr`` and returns the gradient; in mode 'func' it
clears ``data.Atr`` so that the callbacks never read a stale value.
"""

import numpy as np

from .affine import astransform


def huber(u):
    r"""
    Huber penalty with unit threshold and its clipped argument

    .. math::

        h(u) = \sum_i \begin{cases} \frac{1}{2}u_i^2 & |u_i| \leq 1 \\
                                     |u_i| - \frac{1}{2} & |u_i| > 1
                       \end{cases}

    Returns
    -------
    value : float
    clipped : ndarray
        `u` clipped to [-1,1].

    >>> huber(np.array([0.5, -3.]))
    (2.625, array([ 0.5, -1. ]))
    """
    absu = np.fabs(u)
    inner = absu <= 1
    value = 0.5 * (np.sum(u[inner]**2) + np.sum(2 * absu[~inner] - 1))
    return float(value), np.clip(u, -1, 1)


class smooth_objective(object):

    r"""
    A misfit :math:`\ell(b-Ax)` with a linear operator shared with the
    Pareto root finder.
    """

    def __init__(self, transform):
        self.transform = astransform(transform)

    def smooth_objective(self, x, data, mode='both'):
        raise NotImplementedError

    def __call__(self, x, data, mode='both'):
        return self.smooth_objective(x, data, mode)

    def initial_value(self, b):
        """
        Objective value at x=0.
        """
        raise NotImplementedError


class squared_error(smooth_objective):

    r"""
    The least-squares misfit :math:`\frac{1}{2}\|b-Ax\|^2_2`.
    """

    primal = 'lsq'

    def smooth_objective(self, x, data, mode='both'):
        data.r = data.b - self.transform.linear_map(x)
        data.f = 0.5 * float(np.dot(data.r, data.r))
        if mode == 'both':
            data.Atr = self.transform.adjoint_map(data.r)
            return data.f, -data.Atr
        elif mode == 'func':
            data.Atr = None
            return data.f
        raise ValueError("mode incorrectly specified")

    def initial_value(self, b):
        return 0.5 * float(np.dot(b, b))


class huber_error(smooth_objective):

    r"""
    The Huber misfit :math:`h((b-Ax)/M)` with threshold `M`.

    The residual recorded in `data` is :math:`M \cdot clip((b-Ax)/M)`, which
    takes the place of the least-squares residual in the duality gap.
    """

    primal = 'huber'

    def __init__(self, transform, M=1.):
        smooth_objective.__init__(self, transform)
        if not M > 0:
            raise ValueError('Huber threshold M should be positive')
        self.M = M

    def smooth_objective(self, x, data, mode='both'):
        M = self.M
        u = (data.b - self.transform.linear_map(x)) / M
        data.f, clipped = huber(u)
        data.r = M * clipped
        if mode == 'both':
            data.Atr = self.transform.adjoint_map(data.r) / M
            return data.f, -data.Atr
        elif mode == 'func':
            data.Atr = None
            return data.f
        raise ValueError("mode incorrectly specified")

    def initial_value(self, b):
        return huber(np.asarray(b) / self.M)[0]
