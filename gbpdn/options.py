"""
Option handling for the Pareto root finder and the inner solvers.
"""

import numpy as np


def set_options(options=None, **defaults):
    """
    Merge `options` with `defaults`.

    Parameters
    ----------
    options : dict or None
        User supplied options. None means all defaults.
    defaults : keyword arguments
        Recognized options and their default values.

    Returns
    -------
    merged : dict

    >>> set_options({'verbosity': 0}, verbosity=1, iterations=10)['verbosity']
    0
    """
    if options is None:
        options = {}
    unknown = set(options.keys()).difference(defaults.keys())
    if unknown:
        raise ValueError('Unknown option(s): %s' % ', '.join(sorted(unknown)))
    merged = dict(defaults)
    merged.update(options)
    return merged


def two_sided(tolerance):
    """
    Return the tolerance as (above, below). A scalar applies to both sides.

    >>> two_sided(1e-3)
    (0.001, 0.001)
    """
    if np.isscalar(tolerance):
        return (float(tolerance), float(tolerance))
    tolerance = np.asarray(tolerance, dtype=float).ravel()
    if tolerance.shape != (2,):
        raise ValueError('tolerance should be a scalar or a pair (above, below)')
    return (tolerance[0], tolerance[1])
