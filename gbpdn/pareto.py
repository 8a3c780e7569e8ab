"""
Generalized basis pursuit denoise by root finding on the Pareto curve.

Solve the generalized basis pursuit denoise problem (GBPDN) or the
kappa-regularized least-squares problem (KLS)::

    (GBPDN)   minimize  kappa(x)    subject to  ||Ax-b||_2 <= sigma,

    (KLS)     minimize  ||Ax-b||_2  subject to  kappa(x) <= tau.

GBPDN is solved by finding the root of f(tau) = sigma where f is the
value function of KLS, evaluated by an inner solver from
:mod:`gbpdn.algorithms`. The misfit can be least squares or Huber, see
:mod:`gbpdn.objectives`.
"""

import time
import warnings

import numpy as np

from .affine import counted_transform, MatvecLimitExceeded
from .algorithms import solvers, solver_names
from .duality import pareto_data, dual_objective, gap_value
from .gauges import make_gauge
from .log import logger, printf
from .objectives import squared_error, huber_error
from .options import set_options, two_sided

# Exit conditions (constants).
EXIT_OPTIMAL = 1       # see options['tolerance']
EXIT_ITERATIONS = 2    # see options['iterations']
EXIT_MATVEC_LIMIT = 3  # see options['maxMatvec']
EXIT_ERROR = 4         # inner solver error
EXIT_RUNTIME_LIMIT = 5 # see options['maxRuntime']

_exit_messages = {EXIT_OPTIMAL: 'Optimal solution found',
                  EXIT_ITERATIONS: 'Too many iterations',
                  EXIT_MATVEC_LIMIT: 'Maximum matrix-vector operations reached',
                  EXIT_RUNTIME_LIMIT: 'Maximum runtime reached'}


class RootFinderError(AssertionError):
    """
    A root finding step went the wrong way. Continuing would
    produce a meaningless sequence of tau values.
    """
    pass


class ParetoSlopeError(ArithmeticError):
    """
    The slope estimate of the Pareto curve vanished or is not finite,
    so no root finding step can be taken from the current tau.
    """
    pass


def check_slope(slope):
    """
    Raise :class:`ParetoSlopeError` unless `slope` is finite and nonzero.
    """
    if slope == 0:
        raise ParetoSlopeError('Pareto curve slope is zero')
    if not np.isfinite(slope):
        raise ParetoSlopeError('Pareto curve slope is not finite')
    return slope


class root_finder(object):

    """
    Update rule for tau and the stopping rule handed to the inner solver.

    On the first iteration every root finder takes the Newton step
    ``tau - (f - sigma) / g`` where ``g = -kappa_polar(A'r)``.
    """

    name = 'root_finder'
    # recompute g = -kappa_polar(A'r) after every inner solve
    uses_gradient = False
    # f should not increase along the tau iterates
    monotone = False
    # relative gap at which the inner solve stops
    gap_tol = 1e-10

    def callback(self, x, data):
        rgap = gap_value(data)
        if rgap is None:
            return False
        return rgap <= self.gap_tol

    def newton_step(self, tau, f, g, sigma):
        check_slope(g)
        return tau - (f - sigma) / g, -g

    def update(self, tau, f, g, sigma, iteration, tau_hist, f_hist, dual_hist):
        """
        Return the next tau and the slope estimate that produced it.

        `tau_hist`, `f_hist` and `dual_hist` already hold the values
        of the current iteration as their last entries.
        """
        if iteration == 1:
            return self.newton_step(tau, f, g, sigma)
        return self.secant_step(tau, f, g, sigma, tau_hist, f_hist, dual_hist)

    def secant_step(self, tau, f, g, sigma, tau_hist, f_hist, dual_hist):
        raise NotImplementedError

    def __repr__(self):
        return "%s()" % self.__class__.__name__


class newton(root_finder):

    """
    Newton's method, with the slope of the Pareto curve
    given by the polar gauge of the gradient.
    """

    name = 'newton'
    uses_gradient = True
    monotone = True

    def update(self, tau, f, g, sigma, iteration, tau_hist, f_hist, dual_hist):
        return self.newton_step(tau, f, g, sigma)


class secant(root_finder):

    """
    Secant method on the primal objective values.
    """

    name = 'secant'
    monotone = True

    def secant_step(self, tau, f, g, sigma, tau_hist, f_hist, dual_hist):
        dtau = tau_hist[-1] - tau_hist[-2]
        if dtau == 0:
            raise ParetoSlopeError('tau did not change between iterations')
        slope = check_slope((f_hist[-1] - f_hist[-2]) / dtau)
        return tau - (f_hist[-1] - sigma) / slope, slope


class isecant(root_finder):

    """
    Inexact secant method. The inner solve stops as soon as the relative
    gap is below the tolerance of the current iteration and the dual
    objective certifies that the root lies further out; the slope uses
    the dual value of the current iteration against the primal value of
    the previous one.
    """

    name = 'isecant'

    def callback(self, x, data):
        rgap = gap_value(data)
        if rgap is None:
            return False
        dual = dual_objective(data)
        if data.sigma is not None and dual < data.sigma:
            return False
        return rgap <= data.rgap_tol

    def secant_step(self, tau, f, g, sigma, tau_hist, f_hist, dual_hist):
        dtau = tau_hist[-1] - tau_hist[-2]
        if dtau == 0:
            raise ParetoSlopeError('tau did not change between iterations')
        slope = check_slope((dual_hist[-1] - f_hist[-2]) / dtau)
        step = -(dual_hist[-1] - sigma) / slope
        if not step > 0:
            raise RootFinderError('inexact secant step should be positive, '
                                  'got %s' % step)
        return tau + step, slope


root_finders = {'newton': newton,
                'secant': secant,
                'isecant': isecant}


class projector(object):

    """
    Projection onto the gauge ball that counts its calls and
    the time spent in them.
    """

    def __init__(self, gauge):
        self.gauge = gauge
        self.n_projections = 0
        self.time_project = 0.

    def __call__(self, x, tau):
        tstart = time.time()
        z = self.gauge.project(x, tau)
        self.time_project += time.time() - tstart
        self.n_projections += 1
        return z

    def at(self, tau):
        """
        The projector onto the ball of radius `tau`.
        """
        def project(x):
            return self(x, tau)
        return project


_defaults = dict(fid=None,
                 verbosity=1,
                 prefix='',
                 iterations=100,
                 tolerance=None,
                 maxMatvec=np.inf,
                 maxRuntime=np.inf,
                 solver='spg',
                 project=None,
                 kappa=None,
                 kappa_polar=None,
                 weights=None,
                 lassoOpts=None,
                 rootFinder='newton',
                 primal='lsq',
                 hparaM=1.)


def gbpdn(A, b, tau=None, sigma=None, x0=None, options=None, **keywords):
    """
    Solve the generalized basis pursuit denoise problem.

    Parameters
    ----------
    A : {ndarray, sparse matrix, LinearOperator, callable}
        The m-by-n operator. A callable is called as ``A(x, mode)`` with
        ``mode == 1`` for ``A x`` and ``mode == 2`` for ``A' x``.
    b : ndarray
        Observations, shape (m,).
    tau : float, optional
        Bound on kappa(x) for KLS. Used only when `sigma` is None.
    sigma : float, optional
        Target misfit. If given, tau is found by root finding,
        starting from tau = 0.
    x0 : ndarray, optional
        Starting point. If None, zeros of length n.
    options : dict, optional
        Solver options, see below. Keyword arguments override entries
        of `options`.

    Options
    -------
    fid : file-like
        Sink for the log (``sys.stdout`` by default).
    verbosity : int
        0 is quiet, 1 logs root finding iterations, larger values also
        log the inner solver.
    prefix : str
        Prefix of every log line.
    iterations : int
        Maximum number of root finding iterations (100).
    tolerance : float or pair
        Maximum deviation of the objective from sigma; a pair gives
        the deviations (above, below). Default ``1e-5 * ||b||``.
    maxMatvec : int
        Maximum number of products with A and A'.
    maxRuntime : float
        Maximum runtime in seconds.
    solver : {'spg', 'pqn'}
        Inner solver: spectral projected gradient or projected
        quasi-Newton (also 1 and 2).
    kappa, kappa_polar, project : callables
        Gauge, polar gauge and ``project(x, tau)`` onto the gauge ball.
        Give all three or none (one-norm).
    weights : ndarray
        Weights of the default one-norm gauge.
    lassoOpts : dict
        Options of the inner solver.
    rootFinder : {'newton', 'secant', 'isecant'}
        Newton's method, exact secant or inexact secant.
    primal : {'lsq', 'huber'}
        Misfit ``0.5*||Ax-b||^2`` or ``huber((Ax-b)/hparaM)``.
    hparaM : float
        Huber threshold (1).

    Returns
    -------
    x : ndarray
        Solution.
    info : dict
        Keys 'tau', 'iterations', 'f', 'r', 'stat', 'statMsg',
        'timeTotal', 'timeProject', 'timeMatProd', 'nProdA', 'nProdAt',
        'productCounts', 'nProjections', 'tauHist', 'slopeHist',
        'fHist', 'dualHist' and 'innerInfo'.
    """
    t0 = time.time()

    if options is None:
        options = {}
    options = dict(options)
    options.update(keywords)

    if A is None or b is None:
        raise ValueError('At least two arguments are required')
    b = np.asarray(b, dtype=float)
    if b.size == 0:
        raise ValueError('At least two arguments are required')

    options = set_options(options, **_defaults)
    if options['tolerance'] is None:
        options['tolerance'] = 1e-5 * np.linalg.norm(b)
    tolerance = two_sided(options['tolerance'])

    if tau is not None and tau < 0:
        raise ValueError('tau should be non-negative')
    if sigma is not None and sigma < 0:
        raise ValueError('sigma should be non-negative')

    gauge = make_gauge(kappa=options['kappa'],
                       kappa_polar=options['kappa_polar'],
                       project=options['project'],
                       weights=options['weights'])

    try:
        funlasso = solvers[options['solver']]
    except (KeyError, TypeError):
        raise ValueError('Unknown solver in options: %s' % repr(options['solver']))
    try:
        finder = root_finders[options['rootFinder']]()
    except (KeyError, TypeError):
        raise ValueError('Unknown root finder: %s' % repr(options['rootFinder']))

    transform = counted_transform(A, max_matvec=options['maxMatvec'])
    if options['primal'] == 'lsq':
        objective = squared_error(transform)
        M = 1.
    elif options['primal'] == 'huber':
        M = options['hparaM']
        objective = huber_error(transform, M)
    else:
        raise ValueError('Unknown primal: %s' % repr(options['primal']))

    project = projector(gauge)

    # Match tau and x0.
    x = None
    if x0 is not None:
        x = np.array(x0, dtype=float)
        if tau is None:
            tau = gauge.kappa(x)
        else:
            x = project(x, tau)

    # Determine solver mode.
    if tau is None and sigma is None:
        tau = 0.
        sigma = 0.
    elif sigma is not None:
        tau = 0.

    f_init = objective.initial_value(b)
    if options['primal'] == 'lsq':
        bnorm = np.linalg.norm(b)
    else:
        bnorm = np.sqrt(2 * f_init)

    # Determine problem size. (May need a product with A')
    if x is None:
        if transform.primal_shape is not None:
            n = transform.primal_shape[0]
        else:
            n = transform.adjoint_map(b).shape[0]
        x = np.zeros(n)
    else:
        n = x.shape[0]
    m = b.shape[0]

    lasso_opts = dict(options['lassoOpts'] or {})
    lasso_opts.setdefault('verbosity', max(0, options['verbosity'] - 1))
    lasso_opts.setdefault('iterations', 100000)
    lasso_opts.setdefault('optTol', 1e-6)
    lasso_opts.setdefault('fid', options['fid'])
    if funlasso is solvers['spg']:
        lasso_opts['prefix'] = options['prefix'] + '  |'
    else:
        lasso_opts['prefix'] = options['prefix'] + '  >'
    lasso_opts['callback'] = finder.callback

    data = pareto_data(b, gauge.kappa_polar, primal=options['primal'], M=M)

    fid = options['fid']
    verbose = options['verbosity'] > 0
    prefix = options['prefix']

    def log(message):
        if verbose:
            printf(fid, message, prefix)

    # ----------------------------------------------------------------------
    # Log header.
    # ----------------------------------------------------------------------
    log('')
    log('=' * 80)
    log('GBPDN')
    log('=' * 80)
    log('%-22s: %8i %4s %-22s: %8i' % ('No. rows', m, '', 'No. columns', n))
    solver_name = solver_names.get(funlasso, funlasso.__name__)
    log('%-22s: %8.2e %4s %-22s: %s' % ('Two-norm of b', bnorm, '', 'Solver',
                                         solver_name))
    log('%-22s: %8s %4s %-22s: %s' % ('Root finder', finder.name, '', 'Primal',
                                       options['primal']))
    logh = '%4s  %-13s  %-13s  %6s  %10s  %10s  %-30s' % (
        'Iter', 'Objective', 'Parameter', 'SubIts', 'rGapTol', 'rGap', 'SubExit')
    logb = '%4d  %13.7e  %13.7e  %6d  %10.4e  %10.4e  %-30s'
    log('')
    if options['verbosity'] == 1:
        log(logh)

    # ----------------------------------------------------------------------
    # Quick exit if sigma >= ||b||. Set tau = 0 to short-circuit the loop.
    # ----------------------------------------------------------------------
    if sigma is not None and bnorm <= sigma:
        tau = 0.
        sigma = None

    iteration = 1
    stat = None
    stat_msg = ''
    f = -1.      # objective before the first Pareto evaluation
    g = None
    r = None
    slope = 1.
    rgap_tol = 1.
    tau_hist = [tau]
    f_hist = [f_init]
    dual_hist = []
    slope_hist = []
    inner_info = {'iter': 0, 'stat': 0, 'statMsg': ''}
    max_runtime = options['maxRuntime']

    # ----------------------------------------------------------------------
    # Main loop
    # ----------------------------------------------------------------------
    while True:
        rgap_tol = 0.99 * min(1., rgap_tol * abs(f / slope))
        rgap_tol = max(0.1 * tolerance[0], rgap_tol)
        data.refresh(iteration, tau, sigma, rgap_tol, tau_hist[-1], f_hist[-1])
        lasso_opts['maxRuntime'] = max_runtime - (time.time() - t0)

        # Evaluate Pareto function and compute gradient
        try:
            x, inner_info, data = funlasso(objective.smooth_objective,
                                           project.at(tau), x, lasso_opts, data)
        except MatvecLimitExceeded:
            stat = EXIT_MATVEC_LIMIT
            iteration -= 1
            inner_info = {'iter': 0, 'stat': 0,
                          'statMsg': '---ABORTED BY GBPDN---'}
        else:
            f = data.f
            r = data.r
            if finder.uses_gradient or iteration == 1:
                g = -gauge.kappa_polar(data.Atr)
            dual = max(0., dual_objective(data))
            data.dual_value = dual
            if (finder.monotone and iteration > 1
                and f > f_hist[-1] + 1e-8 * max(1., f_hist[-1])):
                warnings.warn('Pareto curve value increased from %e to %e '
                              'at tau=%e' % (f_hist[-1], f, tau), RuntimeWarning)

        rgap = gap_value(data) if stat is None else None
        if options['verbosity'] > 1:
            log('=' * len(logh))
            log(logh)
        log(logb % (iteration, f, tau, inner_info['iter'], rgap_tol,
                    np.nan if rgap is None else rgap, inner_info['statMsg']))

        # Check exit conditions
        if stat is None:
            if time.time() - t0 >= max_runtime:
                stat = EXIT_RUNTIME_LIMIT
            elif iteration >= options['iterations']:
                stat = EXIT_ITERATIONS
            elif isinstance(inner_info['stat'], str):
                stat = EXIT_ERROR
                stat_msg = 'Inner solver error: %s' % inner_info['stat']
            elif (sigma is None or
                  ((f - sigma) <= tolerance[0] and (sigma - f) <= tolerance[1]) or
                  (tau == 0 and f <= sigma)):
                # x = 0 is feasible at tau = 0, a Newton step from here
                # would make tau negative
                stat = EXIT_OPTIMAL
        if stat is not None:
            break

        # Update tau
        try:
            tau_new, slope = finder.update(tau, f, g, sigma, iteration,
                                           tau_hist + [tau], f_hist + [f],
                                           dual_hist + [dual])
        except ParetoSlopeError as err:
            logger.debug('gbpdn: %s at tau=%e', err, tau)
            stat = EXIT_ERROR
            stat_msg = str(err)
            break
        tau_hist.append(tau)
        f_hist.append(f)
        dual_hist.append(dual)
        slope_hist.append(slope)
        tau = tau_new

        iteration += 1

    # ----------------------------------------------------------------------
    # End of main loop
    # ----------------------------------------------------------------------

    if stat != EXIT_ERROR:
        stat_msg = _exit_messages.get(stat, 'Unknown termination condition')

    info = {}
    info['tau'] = tau
    info['iterations'] = iteration
    info['f'] = f
    info['r'] = r
    info['stat'] = stat
    info['statMsg'] = stat_msg
    info['timeTotal'] = time.time() - t0
    info['timeProject'] = project.time_project
    info['timeMatProd'] = transform.time_matprod
    info['nProdA'] = transform.n_prod_A
    info['nProdAt'] = transform.n_prod_At
    info['productCounts'] = (transform.n_prod_A, transform.n_prod_At)
    info['nProjections'] = project.n_projections
    info['tauHist'] = np.array(tau_hist + [tau])
    if g is not None:
        slope_hist = slope_hist + [-g]
    info['slopeHist'] = np.array(slope_hist)
    info['fHist'] = np.array(f_hist)
    info['dualHist'] = np.array(dual_hist)
    info['innerInfo'] = inner_info

    # Print final output.
    log('')
    log('EXIT -- %s' % stat_msg)
    log('')
    log('%-20s:  %6i %6s %-20s:  %6.1f' % ('Products with A', info['nProdA'], '',
                                           'Total time   (secs)', info['timeTotal']))
    log('%-20s:  %6i %6s %-20s:  %6.1f' % ("Products with A'", info['nProdAt'], '',
                                           'Project time (secs)', info['timeProject']))
    log('%-20s:  %6i %6s %-20s:  %6.1f' % ('Newton iterations', iteration, '',
                                           'Mat-vec time (secs)', info['timeMatProd']))

    return x, info


def gbp(A, b, x0=None, options=None, **keywords):
    """
    Generalized basis pursuit: minimize kappa(x) subject to Ax = b.

    See :func:`gbpdn` for the options.
    """
    return gbpdn(A, b, tau=None, sigma=0., x0=x0, options=options,
                 **keywords)


def gbpdn_denoise(A, b, sigma, x0=None, options=None, **keywords):
    """
    Generalized basis pursuit denoise: minimize kappa(x) subject to
    ||Ax - b|| <= sigma.

    See :func:`gbpdn` for the options.
    """
    return gbpdn(A, b, tau=None, sigma=sigma, x0=x0, options=options,
                 **keywords)


def kls(A, b, tau, x0=None, options=None, **keywords):
    """
    Kappa-regularized least squares: minimize ||Ax - b|| subject to
    kappa(x) <= tau.

    See :func:`gbpdn` for the options.
    """
    return gbpdn(A, b, tau=tau, sigma=None, x0=x0, options=options,
                 **keywords)
