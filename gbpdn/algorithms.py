"""
Inner solvers for the KLS subproblem

    minimize  f(x)  subject to  kappa(x) <= tau

where f is one of the objectives of :mod:`gbpdn.objectives` and the
constraint enters only through a projector ``project(x)``.

Both solvers share the signature::

    x, info, data = solver(objective, project, x0, options, data)

``info['stat']`` is an integer exit code on regular termination and a
string describing the failure otherwise.
"""

import time

import numpy as np

from .log import logger, printf
from .options import set_options

# Exit conditions (constants).
EXIT_OPTIMAL = 1    # projected gradient below optTol
EXIT_CALLBACK = 2   # callback asked to stop
EXIT_ITERATIONS = 3 # see options['iterations']
EXIT_RUNTIME = 4    # see options['maxRuntime']

_messages = {EXIT_OPTIMAL: 'Optimal',
             EXIT_CALLBACK: 'Callback',
             EXIT_ITERATIONS: 'Iterations',
             EXIT_RUNTIME: 'Runtime'}

_defaults = dict(fid=None,
                 verbosity=0,
                 prefix='',
                 iterations=100000,
                 optTol=1e-6,
                 maxRuntime=np.inf,
                 callback=None,
                 stepMin=1e-16,
                 stepMax=1e5,
                 nPrevVals=3,
                 memory=10,
                 maxSubIterations=20,
                 maxLineSearch=10,
                 gamma=1e-4)


class LineSearchError(Exception):
    pass


class algorithm(object):

    """
    Base class of the inner solvers. Subclasses implement `step`, which
    moves from the current iterate to the next one.
    """

    name = 'algorithm'

    def __init__(self, objective, project, options=None):
        self.objective = objective
        self.project = project
        self.options = set_options(options, **_defaults)

    def projected_gradient(self, x, g):
        """
        Infinity norm of the projected gradient step :math:`P(x-g)-x`.
        """
        return np.fabs(self.project(x - g) - x).max()

    def step(self, x, f, g, data):
        raise NotImplementedError

    def fit(self, x, data):
        """
        Run the solver from `x`.

        Returns
        -------
        x : ndarray
            Final iterate, feasible for the gauge ball.
        info : dict
            Keys 'iter', 'stat', 'statMsg' and 'f'.
        """
        opts = self.options
        callback = opts['callback']
        tstart = time.time()

        self.setup()
        x = self.project(x)
        f, g = self.objective(x, data, 'both')

        if opts['verbosity'] > 0:
            printf(opts['fid'], ' %5s  %13s  %10s' %
                   ('Iter', 'Objective', 'gNorm'), opts['prefix'])

        itercount = 0
        while True:
            stat = None
            gnorm = self.projected_gradient(x, g)
            if opts['verbosity'] > 0:
                printf(opts['fid'], ' %5d  %13.7e  %10.4e' %
                       (itercount, f, gnorm), opts['prefix'])

            if callback is not None and callback(x, data):
                stat = EXIT_CALLBACK
            elif gnorm <= opts['optTol']:
                stat = EXIT_OPTIMAL
            elif itercount >= opts['iterations']:
                stat = EXIT_ITERATIONS
            elif time.time() - tstart >= opts['maxRuntime']:
                stat = EXIT_RUNTIME
            if stat is not None:
                break

            try:
                x, f, g = self.step(x, f, g, data)
            except LineSearchError as err:
                logger.debug('%s: %s', self.name, err)
                # leave data describing the current iterate
                f, g = self.objective(x, data, 'both')
                stat = str(err)
                break
            itercount += 1

        if isinstance(stat, str):
            msg = stat
        else:
            msg = _messages[stat]
        info = {'iter': itercount,
                'stat': stat,
                'statMsg': msg,
                'f': f}
        return x, info

    def setup(self):
        pass


class spg(algorithm):

    """
    Spectral projected gradient with a non-monotone line search
    along the projected arc.
    """

    name = 'spg'

    def setup(self):
        self.step_length = None
        self.fhist = []

    def step(self, x, f, g, data):
        opts = self.options
        if self.step_length is None:
            gnorm = self.projected_gradient(x, g)
            self.step_length = min(opts['stepMax'],
                                   max(opts['stepMin'], 1. / gnorm))
        self.fhist = (self.fhist + [f])[-opts['nPrevVals']:]
        fmax = max(self.fhist)

        alpha = self.step_length
        for _ in range(opts['maxLineSearch']):
            xnew = self.project(x - alpha * g)
            fnew, gnew = self.objective(xnew, data, 'both')
            gtd = np.dot(g, xnew - x)
            if fnew <= fmax + opts['gamma'] * gtd:
                break
            alpha /= 2.
        else:
            raise LineSearchError('Line search failed')

        s = xnew - x
        y = gnew - g
        sts = np.dot(s, s)
        sty = np.dot(s, y)
        if sty <= 0:
            self.step_length = opts['stepMax']
        else:
            self.step_length = min(opts['stepMax'],
                                   max(opts['stepMin'], sts / sty))
        return xnew, fnew, gnew


class lbfgs_hessian(object):

    r"""
    Limited-memory BFGS approximation of the Hessian in compact form

    .. math::

        B = \sigma I - W M^{-1} W^T, \qquad W = [\sigma S \; Y]

    built from the last `memory` pairs (s, y).
    """

    def __init__(self, memory=10):
        self.memory = memory
        self.S = []
        self.Y = []
        self.sigma = 1.

    def update(self, s, y):
        sty = np.dot(s, y)
        if sty <= 1e-10 * np.sqrt(np.dot(s, s) * np.dot(y, y)):
            return False
        self.S = (self.S + [s])[-self.memory:]
        self.Y = (self.Y + [y])[-self.memory:]
        self.sigma = np.dot(y, y) / sty
        S = np.array(self.S).T
        Y = np.array(self.Y).T
        StY = np.dot(S.T, Y)
        L = np.tril(StY, -1)
        D = np.diag(np.diag(StY))
        self._W = np.hstack([self.sigma * S, Y])
        self._M = np.vstack([np.hstack([self.sigma * np.dot(S.T, S), L]),
                             np.hstack([L.T, -D])])
        return True

    @property
    def empty(self):
        return len(self.S) == 0

    def dot(self, v):
        if self.empty:
            return v.copy()
        Wv = np.dot(self._W.T, v)
        return self.sigma * v - np.dot(self._W, np.linalg.solve(self._M, Wv))


class pqn(algorithm):

    """
    Projected quasi-Newton: an L-BFGS model of the objective is minimized
    over the gauge ball by spectral projected gradient, and the result
    gives a feasible descent direction for a backtracking line search.
    """

    name = 'pqn'

    def setup(self):
        self.hessian = lbfgs_hessian(self.options['memory'])

    def solve_subproblem(self, x, g):
        r"""
        Approximately minimize :math:`g^T(z-x) + \frac{1}{2}(z-x)^TB(z-x)`
        over the gauge ball, starting from the projected gradient step.
        """
        opts = self.options
        B = self.hessian

        def model(z):
            dz = z - x
            Bdz = B.dot(dz)
            return np.dot(g, dz) + 0.5 * np.dot(dz, Bdz), g + Bdz

        z = self.project(x - g / B.sigma)
        q, gq = model(z)
        alpha = 1. / B.sigma
        for _ in range(opts['maxSubIterations']):
            znew = self.project(z - alpha * gq)
            dz = znew - z
            if np.fabs(dz).max() <= 1e-2 * opts['optTol']:
                break
            qnew, gqnew = model(znew)
            gtd = np.dot(gq, dz)
            t = 1.
            while qnew > q + opts['gamma'] * t * gtd and t > 1e-10:
                t /= 2.
                qnew, gqnew = model(z + t * dz)
            znew = z + t * dz
            s, y = znew - z, gqnew - gq
            sty = np.dot(s, y)
            alpha = np.dot(s, s) / sty if sty > 0 else 1. / B.sigma
            z, q, gq = znew, qnew, gqnew
        return z - x

    def step(self, x, f, g, data):
        opts = self.options
        if self.hessian.empty:
            gnorm1 = np.fabs(g).sum()
            d = self.project(x - g * min(1., 1. / gnorm1)) - x
        else:
            d = self.solve_subproblem(x, g)
        gtd = np.dot(g, d)
        if gtd >= 0:
            # the model gave no descent, fall back to the gradient
            d = self.project(x - g) - x
            gtd = np.dot(g, d)

        t = 1.
        for _ in range(opts['maxLineSearch']):
            xnew = x + t * d
            fnew, gnew = self.objective(xnew, data, 'both')
            if fnew <= f + opts['gamma'] * t * gtd:
                break
            # safeguarded quadratic interpolation
            tnew = -gtd * t**2 / (2 * (fnew - f - t * gtd))
            if not np.isfinite(tnew) or tnew < 0.1 * t or tnew > 0.9 * t:
                tnew = t / 2.
            t = tnew
        else:
            raise LineSearchError('Line search failed')

        self.hessian.update(xnew - x, gnew - g)
        return xnew, fnew, gnew


def _run(cls, objective, project, x, options, data):
    solver = cls(objective, project, options)
    x, info = solver.fit(x, data)
    return x, info, data


def spg_lasso(objective, project, x, options, data):
    """
    Solve the KLS subproblem by spectral projected gradient.

    Parameters
    ----------
    objective : callable
        ``objective(x, data, mode)``, see :mod:`gbpdn.objectives`.
    project : callable
        Projection onto the gauge ball.
    x : ndarray
        Starting point.
    options : dict
        Solver options.
    data : pareto_data
        Shared state, updated in place.

    Returns
    -------
    x, info, data
    """
    return _run(spg, objective, project, x, options, data)


def pqn_lasso(objective, project, x, options, data):
    """
    Solve the KLS subproblem by projected quasi-Newton, see :func:`spg_lasso`.
    """
    return _run(pqn, objective, project, x, options, data)


solvers = {'spg': spg_lasso, 1: spg_lasso,
           'pqn': pqn_lasso, 2: pqn_lasso}

solver_names = {spg_lasso: 'SPG Solver',
                pqn_lasso: 'PQN Solver'}
