"""
Linear operators for the Pareto root finder.

A linear operator can be an explicit array, a scipy sparse matrix, a
scipy ``LinearOperator``, an object exposing ``linear_map`` and
``adjoint_map``, or a function with the signature::

    y = A(x, mode)   if mode == 1 then y = A x
                     if mode == 2 then y = A' x

All of these are cast to :class:`linear_transform`. The class
:class:`counted_transform` wraps a :class:`linear_transform`, counting
products and enforcing a budget on their number.
"""

import time

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import LinearOperator

FORWARD = 1
ADJOINT = 2

_modes = {1: FORWARD, 'forward': FORWARD,
          2: ADJOINT, 'adjoint': ADJOINT}


class AffineError(Exception):
    pass


class MatvecLimitExceeded(Exception):
    """
    Raised by :class:`counted_transform` when the number of products
    with the operator and its adjoint reaches the budget.
    """
    pass


def check_mode(mode):
    """
    Normalize a product mode to FORWARD or ADJOINT.

    >>> check_mode('adjoint')
    2
    """
    try:
        return _modes[mode]
    except (KeyError, TypeError):
        raise ValueError('Wrong mode: %s' % repr(mode))


class linear_transform(object):

    def __init__(self, linear_operator, primal_shape=None, dual_shape=None):
        """ Create linear transform

        Parameters
        ----------
        linear_operator : ndarray, sparse matrix, LinearOperator, callable
            Representation of the linear map. An object with
            ``linear_map`` and ``adjoint_map`` methods is used as is.
            A callable is called as ``linear_operator(x, mode)``.
        primal_shape : tuple, optional
            Shape of the input of a callable operator, if known.
        dual_shape : tuple, optional
            Shape of the output of a callable operator, if known.
        """
        # denseD - linear_operator is an ndarray
        # sparseD - linear_operator is sparse
        # operatorD - linear_operator is a scipy LinearOperator
        # affineD - linear_operator supports linear_map / adjoint_map
        # functionD - linear_operator is a function of (x, mode)
        if linear_operator is None:
            raise AffineError('linear_operator cannot be None')

        self.linear_operator = linear_operator
        self.denseD = self.sparseD = self.operatorD = False
        self.affineD = self.functionD = False

        if sparse.issparse(linear_operator):
            self.sparseD = True
            self.linear_operator = sparse.csr_matrix(linear_operator)
            self.linear_operator_T = sparse.csr_matrix(linear_operator.T)
            self.dual_shape, self.primal_shape = ((linear_operator.shape[0],),
                                                  (linear_operator.shape[1],))
        elif isinstance(linear_operator, LinearOperator):
            self.operatorD = True
            self.dual_shape, self.primal_shape = ((linear_operator.shape[0],),
                                                  (linear_operator.shape[1],))
        elif all([hasattr(linear_operator, n) for n in ['linear_map',
                                                        'adjoint_map']]):
            self.affineD = True
            self.primal_shape = getattr(linear_operator, 'primal_shape',
                                        primal_shape)
            self.dual_shape = getattr(linear_operator, 'dual_shape',
                                      dual_shape)
        elif callable(linear_operator):
            self.functionD = True
            self.primal_shape = primal_shape
            self.dual_shape = dual_shape
        else:
            linear_operator = np.asarray(linear_operator)
            if linear_operator.ndim != 2:
                raise AffineError('an explicit operator should be a 2D array, '
                                  'got shape %s' % repr(linear_operator.shape))
            self.denseD = True
            self.linear_operator = linear_operator
            self.dual_shape, self.primal_shape = ((linear_operator.shape[0],),
                                                  (linear_operator.shape[1],))

    @property
    def explicit(self):
        """
        Is the operator an explicit (dense or sparse) matrix?
        """
        return self.denseD or self.sparseD

    def linear_map(self, x):
        r"""Apply the transform to `x`

        Return :math:`Ax`
        """
        if self.denseD:
            return np.dot(self.linear_operator, x)
        elif self.sparseD:
            return self.linear_operator.dot(x)
        elif self.operatorD:
            return self.linear_operator.matvec(x)
        elif self.affineD:
            return self.linear_operator.linear_map(x)
        v = np.asarray(self.linear_operator(x, FORWARD))
        if self.dual_shape is None:
            self.dual_shape = v.shape
        return v

    def adjoint_map(self, u):
        r"""Apply the transpose of the transform to `u`

        Return :math:`A^Tu`
        """
        if self.denseD:
            return np.dot(self.linear_operator.T, u)
        elif self.sparseD:
            return self.linear_operator_T.dot(u)
        elif self.operatorD:
            return self.linear_operator.rmatvec(u)
        elif self.affineD:
            return self.linear_operator.adjoint_map(u)
        v = np.asarray(self.linear_operator(u, ADJOINT))
        if self.primal_shape is None:
            self.primal_shape = v.shape
        return v

    def apply(self, x, mode):
        if check_mode(mode) == FORWARD:
            return self.linear_map(x)
        return self.adjoint_map(x)

    def __repr__(self):
        return "linear_transform(%s)" % repr(self.linear_operator)


def astransform(X):
    """
    If X is a linear_transform, return X,
    else try to cast it as a linear_transform
    """
    if isinstance(X, linear_transform):
        return X
    return linear_transform(X)


class counted_transform(object):

    """
    A linear transform that counts its products with A and A',
    accumulates the time spent in them and refuses to compute
    more than `max_matvec` of them in total.

    >>> A = counted_transform(np.eye(3), max_matvec=2)
    >>> _ = A.linear_map(np.ones(3)); _ = A.adjoint_map(np.ones(3))
    >>> A.n_prod_A, A.n_prod_At
    (1, 1)
    """

    def __init__(self, transform, max_matvec=np.inf):
        self.transform = astransform(transform)
        self.max_matvec = max_matvec
        self.n_prod_A = 0
        self.n_prod_At = 0
        self.time_matprod = 0.

    @property
    def primal_shape(self):
        return self.transform.primal_shape

    @property
    def dual_shape(self):
        return self.transform.dual_shape

    @property
    def explicit(self):
        return self.transform.explicit

    @property
    def n_prod(self):
        return self.n_prod_A + self.n_prod_At

    def _check_budget(self):
        if self.n_prod >= self.max_matvec:
            raise MatvecLimitExceeded('maximum number of products (%s) reached'
                                      % self.max_matvec)

    def linear_map(self, x):
        self._check_budget()
        tstart = time.time()
        self.n_prod_A += 1
        v = self.transform.linear_map(x)
        self.time_matprod += time.time() - tstart
        return v

    def adjoint_map(self, u):
        self._check_budget()
        tstart = time.time()
        self.n_prod_At += 1
        v = self.transform.adjoint_map(u)
        self.time_matprod += time.time() - tstart
        return v

    def apply(self, x, mode):
        if check_mode(mode) == FORWARD:
            return self.linear_map(x)
        return self.adjoint_map(x)

    def __repr__(self):
        return ("counted_transform(%s, max_matvec=%s)" %
                (repr(self.transform), self.max_matvec))
