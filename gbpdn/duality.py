"""
Dual objective and primal-dual gap of the KLS subproblem

    minimize  loss(b - Ax)  subject to  kappa(x) <= tau

where loss is either half the squared two-norm or the Huber penalty.
Both are computed from the state that the objective leaves behind in a
:class:`pareto_data` instance.
"""

import numpy as np


class pareto_data(object):

    """
    State shared by the Pareto root finder, the objective and the
    callbacks of the inner solver during one solve.

    Attributes
    ----------
    b : ndarray
        Observations.
    r : ndarray or None
        Residual :math:`b-Ax` at the last evaluated point (for the Huber
        loss, the clipped and rescaled residual).
    f : float or None
        Objective value at the last evaluated point.
    Atr : ndarray or None
        :math:`A^Tr` at the last evaluated point, None unless the gradient
        was requested there.
    tau, sigma : float
        Current gauge bound and target misfit (sigma is None in KLS mode).
    rgap_tol : float
        Relative gap accuracy requested from the current inner solve.
    tau_old, f_old : float
        Last entries of the tau and objective histories.
    iteration : int
        Outer iteration count.
    dual_value : float
        Clamped dual objective at the end of the last inner solve.
    """

    def __init__(self, b, kappa_polar, primal='lsq', M=1.):
        self.b = b
        self.kappa_polar = kappa_polar
        self.primal = primal
        self.M = M
        self.r = None
        self.f = None
        self.Atr = None
        self.tau = 0.
        self.sigma = None
        self.rgap_tol = 1.
        self.tau_old = 0.
        self.f_old = 0.
        self.iteration = 0
        self.dual_value = 0.

    @property
    def scale(self):
        """
        Scaling of b in the dual formulas: 1 for least squares,
        M for the Huber loss.
        """
        if self.primal == 'huber':
            return self.M
        return 1.

    def refresh(self, iteration, tau, sigma, rgap_tol, tau_old, f_old):
        """
        Reset the per-iteration fields before an inner solve.
        """
        self.iteration = iteration
        self.tau = tau
        self.sigma = sigma
        self.rgap_tol = rgap_tol
        self.tau_old = tau_old
        self.f_old = f_old

    def __repr__(self):
        return ("pareto_data(primal=%s, tau=%s, sigma=%s, f=%s)" %
                (self.primal, self.tau, self.sigma, self.f))


def dual_objective(data):
    r"""
    Dual objective of the KLS subproblem at the current residual

    .. math::

        b^Tr / M - \frac{1}{2}\|r\|_2^2 - \tau \kappa^*(A^Tr)

    with M=1 for least squares. Returns None if :math:`A^Tr` is
    not available.
    """
    if data.Atr is None:
        return None
    r = data.r
    return (np.dot(data.b, r) / data.scale - 0.5 * np.dot(r, r)
            - data.tau * data.kappa_polar(data.Atr))


def gap_value(data):
    r"""
    Relative primal-dual gap

    .. math::

        \frac{|r^T(r - b/M) + \tau \kappa^*(A^Tr)|}{\max(1, f)}

    Returns None if :math:`A^Tr` is not available.
    """
    if data.Atr is None:
        return None
    r = data.r
    gap = np.dot(r, r - data.b / data.scale) + data.tau * data.kappa_polar(data.Atr)
    return np.fabs(gap) / max(1., data.f)
