import numpy as np
import pylab

import gbpdn.api as G

np.random.seed(1)

m, n, k, s = 120, 512, 20, 5  # rows, columns, nonzeros, outliers
x0 = np.zeros(n)
x0[np.random.permutation(n)[:k]] = np.sign(np.random.standard_normal(k))
Q = np.linalg.qr(np.random.standard_normal((n, m)))[0]
A = Q.T

err = np.zeros(m)
err[np.random.permutation(m)[:s]] = np.random.standard_normal(s)
b = np.dot(A, x0) + 0.005 * np.random.standard_normal(m) + err

sigma = 0.5
options = {'lassoOpts': {'optTol': 1e-10, 'verbosity': 0},
           'tolerance': 1e-7 * np.linalg.norm(b),
           'rootFinder': 'newton'}

xL2, info = G.gbpdn_denoise(A, b, sigma, options=options, primal='lsq')
print('Target tau = %15.7e' % np.fabs(x0).sum())

xHuber, info = G.gbpdn_denoise(A, b, sigma, options=options,
                               primal='huber', hparaM=1e-3)
print('Target tau = %15.7e' % np.fabs(x0).sum())

pylab.figure(1)
pylab.plot(x0, label='true')
pylab.plot(xL2 + 2, label='l2')
pylab.plot(xHuber - 2, label='huber')
pylab.legend()

pylab.figure(2)
pylab.plot(err, label='True Outliers')
pylab.plot(b - np.dot(A, xL2) + 3, label='l2 residuals')
pylab.plot(b - np.dot(A, xHuber) - 3, label='Huber residuals')
pylab.legend()
pylab.show()
