"""
A collection of commonly used GBPDN functions and objects
"""

# Root finding

from .pareto import (gbpdn, gbp, gbpdn_denoise, kls,
                     newton, secant, isecant, root_finders,
                     RootFinderError, ParetoSlopeError, check_slope,
                     EXIT_OPTIMAL, EXIT_ITERATIONS, EXIT_MATVEC_LIMIT,
                     EXIT_ERROR, EXIT_RUNTIME_LIMIT)

# Linear operators

from .affine import (linear_transform, counted_transform, astransform,
                     MatvecLimitExceeded, AffineError)

# Gauges

from .gauges import gauge, l1norm, make_gauge
from .projl1 import projl1, projl1_weighted

# Objectives and duality

from .objectives import squared_error, huber_error, huber
from .duality import pareto_data, dual_objective, gap_value

# Inner solvers

from .algorithms import spg, pqn, spg_lasso, pqn_lasso
