""" This file contains defines parameters for gbpdn that we use to fill
settings in setup.py and the gbpdn top-level docstring.  In setup.py in
particular, we exec this file, so it cannot import gbpdn
"""

# gbpdn version information.  An empty _version_extra corresponds to a
# full release.  '.dev' as a _version_extra string means this is a development
# version
_version_major = 0
_version_minor = 1
_version_micro = 0
_version_extra = '.dev'

# Format expected by setup.py: string of form "X.Y.Z"
__version__ = "%s.%s.%s%s" % (_version_major,
                              _version_minor,
                              _version_micro,
                              _version_extra)

CLASSIFIERS = ["Development Status :: 3 - Alpha",
               "Environment :: Console",
               "Intended Audience :: Science/Research",
               "License :: OSI Approved :: GNU Lesser General Public License v2 or later (LGPLv2+)",
               "Operating System :: OS Independent",
               "Programming Language :: Python :: 3",
               "Topic :: Scientific/Engineering :: Mathematics"]

description  = 'Generalized basis pursuit denoise by Pareto root finding'

long_description = \
"""
=====
GBPDN
=====

GBPDN solves the generalized basis pursuit denoise problem

    minimize  kappa(x)  subject to  ||Ax - b||_2 <= sigma

by root finding on the Pareto curve of the kappa-regularized least-squares
problem

    minimize  ||Ax - b||_2  subject to  kappa(x) <= tau,

optionally with a Huber misfit in place of the least-squares residual.
"""

NAME                = 'gbpdn'
MAINTAINER          = "gbpdn developers"
MAINTAINER_EMAIL    = ""
DESCRIPTION         = description
LONG_DESCRIPTION    = long_description
URL                 = ""
DOWNLOAD_URL        = ""
LICENSE             = "LGPL-2.1-or-later"
CLASSIFIERS         = CLASSIFIERS
AUTHOR              = "gbpdn developers"
AUTHOR_EMAIL        = ""
PLATFORMS           = "OS Independent"
MAJOR               = _version_major
MINOR               = _version_minor
MICRO               = _version_micro
ISRELEASE           = _version_extra == ''
VERSION             = __version__
REQUIRES            = ["numpy", "scipy"]
STATUS              = 'alpha'

# versions
NUMPY_MIN_VERSION = '1.20'
SCIPY_MIN_VERSION = '1.6'
