"""
GBPDN: generalized basis pursuit denoise by Pareto root finding
"""

from .info import __version__, long_description as __doc__
