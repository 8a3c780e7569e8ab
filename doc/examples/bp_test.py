import numpy as np
import pylab

import gbpdn.api as G

np.random.seed(0)

m, n, k = 120, 512, 20  # rows, columns, nonzeros
x0 = np.zeros(n)
x0[np.random.permutation(n)[:k]] = np.sign(np.random.standard_normal(k))
Q = np.linalg.qr(np.random.standard_normal((n, m)))[0]
A = Q.T
b = np.dot(A, x0) + 0.005 * np.random.standard_normal(m)

options = {'lassoOpts': {'optTol': 1e-10},
           'tolerance': 1e-7 * np.linalg.norm(b)}

solutions = {}
for root_finder in ['newton', 'secant', 'isecant']:
    x, info = G.gbpdn(A, b, tau=0, sigma=1e-8, options=options,
                      rootFinder=root_finder)
    solutions[root_finder] = x
    print('%-8s %s after %d iterations, %d products with A'
          % (root_finder, info['statMsg'], info['iterations'], info['nProdA']))

for i, root_finder in enumerate(['newton', 'secant', 'isecant']):
    pylab.plot(solutions[root_finder] + 2 * i, label=root_finder)
pylab.plot(x0 - 2, label='true')
pylab.legend()
pylab.show()
