import numpy as np
from numba import jit
from scipy.sparse import coo_matrix

from asnlp.base import AbstractNLPModel
from asnlp.meta import NLPModelMeta

# the kernels write into the output buffers handed over by the base class,
# they are module level functions because numba can't compile bound methods

@jit(nopython=True)
def rosenbrock_obj(x, a, b):
    return (a - x[0]) ** 2 + b * (x[1] - x[0] ** 2) ** 2

@jit(nopython=True)
def rosenbrock_grad(x, g, a, b):
    g[0] = 2. * (x[0] - a) + 4. * b * x[0] * (x[0] ** 2 - x[1])
    g[1] = 2. * b * (x[1] - x[0] ** 2)

@jit(nopython=True)
def rosenbrock_hess_coord(x, vals, a, b, obj_weight):
    # lower triangle: (0,0), (1,0), (1,1)
    vals[0] = obj_weight * (2. + 12. * b * x[0] ** 2 - 4. * b * x[1])
    vals[1] = obj_weight * (-4. * b * x[0])
    vals[2] = obj_weight * (2. * b)

@jit(nopython=True)
def rosenbrock_hprod(x, v, Hv, a, b, obj_weight):
    H11 = 2. + 12. * b * x[0] ** 2 - 4. * b * x[1]
    H12 = -4. * b * x[0]
    H22 = 2. * b
    Hv[0] = obj_weight * (H11 * v[0] + H12 * v[1])
    Hv[1] = obj_weight * (H12 * v[0] + H22 * v[1])

class Rosenbrock2D(AbstractNLPModel):
    ''' An unconstrained problem
        f(x,y) = (a-x)^2 + b(y-x^2)^2
        a = 1, b = 100
        optimal result at: x* = (1,1)
    '''
    def __init__(self, a=1., b=100.):
        meta = NLPModelMeta(2, x0=np.array([-1.2, 1.]), nnzh=3, name="Rosenbrock2D")
        super().__init__(meta)
        self.a = float(a)
        self.b = float(b)

    def _obj(self, x):
        return rosenbrock_obj(x, self.a, self.b)

    def _grad(self, x, g):
        rosenbrock_grad(x, g, self.a, self.b)

    def _hess_structure(self, rows, cols):
        rows[:] = [0, 1, 1]
        cols[:] = [0, 0, 1]

    def _hess_coord(self, x, vals, y, obj_weight):
        rosenbrock_hess_coord(x, vals, self.a, self.b, obj_weight)

    def _hprod(self, x, v, Hv, y, obj_weight):
        rosenbrock_hprod(x, v, Hv, self.a, self.b, obj_weight)

@jit(nopython=True)
def halfcircle_cons(x, c):
    c[0] = x[0]
    c[1] = x[0] ** 2 + x[1] ** 2

@jit(nopython=True)
def halfcircle_jac_coord(x, vals):
    vals[0] = 1.
    vals[1] = 2. * x[0]
    vals[2] = 2. * x[1]

@jit(nopython=True)
def halfcircle_jprod(x, v, Jv):
    Jv[0] = v[0]
    Jv[1] = 2. * x[0] * v[0] + 2. * x[1] * v[1]

@jit(nopython=True)
def halfcircle_jtprod(x, v, Jtv):
    Jtv[0] = v[0] + 2. * x[0] * v[1]
    Jtv[1] = 2. * x[1] * v[1]

class HalfCircle(AbstractNLPModel):
    ''' A constrained toy problem: x \\in R^2
        f(x) = x - y
                x = 0
        x^2 + y^2 <= 1
        optimal result at: x* = (0,1)

        c(x) = [x, x^2 + y^2], the first one is linear
    '''
    def __init__(self):
        meta = NLPModelMeta(2, x0=np.array([2., 2.]), ncon=2,
                            lcon=np.array([0., -np.inf]), ucon=np.array([0., 1.]),
                            nnzj=3, nnzh=2, lin=[0], name="HalfCircle")
        super().__init__(meta)

    def _obj(self, x):
        return x[0] - x[1]

    def _grad(self, x, g):
        g[0] = 1.
        g[1] = -1.

    def _cons(self, x, c):
        halfcircle_cons(x, c)

    def _jth_con(self, x, j):
        if j == 0:
            return x[0]
        return x[0] ** 2 + x[1] ** 2

    def _jth_congrad(self, x, j, g):
        if j == 0:
            g[:] = [1., 0.]
        else:
            g[:] = [2. * x[0], 2. * x[1]]

    def _jth_sparse_congrad(self, x, j):
        if j == 0:
            return coo_matrix(([1.], ([0], [0])), shape=(1, self.nvar))
        return coo_matrix(([2. * x[0], 2. * x[1]], ([0, 0], [0, 1])), shape=(1, self.nvar))

    def _jac_structure(self, rows, cols):
        rows[:] = [0, 1, 1]
        cols[:] = [0, 0, 1]

    def _jac_coord(self, x, vals):
        halfcircle_jac_coord(x, vals)

    def _jprod(self, x, v, Jv):
        halfcircle_jprod(x, v, Jv)

    def _jtprod(self, x, v, Jtv):
        halfcircle_jtprod(x, v, Jtv)

    def _jth_hprod(self, x, v, j, Hv):
        if j == 0:
            Hv[:] = 0.
        else:
            Hv[:] = 2. * v

    def _ghjvprod(self, x, g, v, gHv):
        gHv[0] = 0.
        gHv[1] = 2. * np.dot(g, v)

    # the objective is linear, only the circle contributes to the Hessian
    def _hess_structure(self, rows, cols):
        rows[:] = [0, 1]
        cols[:] = [0, 1]

    def _hess_coord(self, x, vals, y, obj_weight):
        vals[:] = 2. * y[1]

    def _hprod(self, x, v, Hv, y, obj_weight):
        Hv[:] = 2. * y[1] * v
