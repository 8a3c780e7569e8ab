"""
Console output of the solvers.

The solvers print tables to a file-like sink `fid` (default ``sys.stdout``)
when their verbosity is positive. Diagnostics that do not belong in the
table go through the standard `logging` module.
"""

import logging
import sys

logger = logging.getLogger('gbpdn')


def printf(fid, message, prefix=''):
    """
    Write a line to `fid` (``sys.stdout`` if None), preceded by `prefix`.
    """
    if fid is None:
        fid = sys.stdout
    fid.write('%s%s\n' % (prefix, message))
