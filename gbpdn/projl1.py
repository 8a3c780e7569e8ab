r"""
Implements projections onto the (weighted) \ell_1 ball by sorting, as described in
title = {Efficient projections onto the l1-ball for learning in high dimensions}
author = {Duchi, John and Shalev-Shwartz, Shai and Singer, Yoram and Chandra, Tushar}
"""

import numpy as np


def projl1(x, bound=1.):
    r"""
    Euclidean projection of `x` onto the ball
    :math:`\{z : \|z\|_1 \leq bound\}`.

    >>> projl1(np.array([3., -1., 0.5]), bound=2.)
    array([ 2., -0.,  0.])
    """
    x = np.asarray(x, dtype=float)
    if bound < 0:
        raise ValueError('bound should be non-negative')
    absx = np.fabs(x)
    if absx.sum() <= bound:
        return x.copy()
    if bound <= np.spacing(1):
        return np.zeros_like(x)

    sorted_x = np.sort(absx)[::-1]
    csum = np.cumsum(sorted_x)
    # cut[i] is the threshold that makes the i+1 largest entries
    # sum to bound
    cut = (csum - bound) / np.arange(1, x.shape[0] + 1)
    idx = np.nonzero(sorted_x > cut)[0][-1]
    return np.sign(x) * np.maximum(absx - cut[idx], 0.)


def projl1_weighted(x, weights, bound=1.):
    r"""
    Euclidean projection of `x` onto the ball
    :math:`\{z : \|w \cdot z\|_1 \leq bound\}` for
    non-negative weights `w`. Coordinates with (numerically)
    zero weight are unconstrained.
    """
    x = np.asarray(x, dtype=float)
    weights = np.fabs(np.asarray(weights, dtype=float))
    if np.isscalar(weights) or weights.ndim == 0:
        if weights == 0:
            return x.copy()
        return projl1(x, bound / weights)
    if weights.shape != x.shape:
        raise ValueError('vectors x and weights must have the same shape')
    if bound < 0:
        raise ValueError('bound should be non-negative')

    result = x.copy()
    free = weights <= np.spacing(1)
    b, d = np.fabs(x[~free]), weights[~free]
    if np.dot(d, b) <= bound:
        return result
    if bound <= np.spacing(1):
        result[~free] = 0
        return result

    # the solution soft-thresholds b / d at a common level,
    # entries with larger ratios shrink first
    order = np.argsort(b / d)[::-1]
    b, d = b[order], d[order]
    cut = (np.cumsum(d * b) - bound) / np.cumsum(d * d)
    active = np.nonzero(cut < b / d)[0][-1]
    shrunk = np.zeros_like(b)
    shrunk[order] = np.maximum(b - d * cut[active], 0.)
    result[~free] = np.sign(x[~free]) * shrunk
    return result
