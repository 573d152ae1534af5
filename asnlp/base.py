import numpy as np
from scipy.sparse import coo_matrix

from asnlp.meta import NLPModelMeta
from asnlp.counters import Counters
from asnlp.operators import JacobianOperator, HessianOperator
from asnlp.common_utils.check import RIGHT_SHAPE, IN_RANGE

class OperationNotImplemented(NotImplementedError):
    ''' raised when a model does not provide the requested operation,
        name is the public name of that operation, e.g. "grad_"
    '''
    def __init__(self, name:str):
        super().__init__("{} not implemented".format(name))
        self.name = name

def _vec(x):
    return np.asarray(x, dtype=np.float64)

class AbstractNLPModel():
    """
    Non Linear program

    min_x    f(x)
    s.t.     lcon <= c(x) <= ucon
             lvar <=  x   <= uvar

    where:
    x is a continous variable, in vector space R^nvar
    f is a scalar function
    c is a vector of ncon constraints

    The public methods are the evaluation contract seen by algorithms. Each of them
    checks the shapes of its arguments, increments its counter once and dispatches
    to a protected hook (_obj, _grad, _cons, ...). A concrete model overrides the
    hooks it supports; the others raise OperationNotImplemented with the public name.

    Pairs of methods:
        op_(..., out) writes into the caller supplied buffer and returns it,
        op(...) allocates the buffer and calls op_.

    Indices are 0-based, the Hessian is always reported as its lower triangle.
    """

    def __init__(self, meta:NLPModelMeta):
        self.meta = meta
        self.counters = Counters()

    @property
    def nvar(self):
        return self.meta.nvar

    @property
    def ncon(self):
        return self.meta.ncon

    @property
    def nnzj(self):
        return self.meta.nnzj

    @property
    def nnzh(self):
        return self.meta.nnzh

    ### counters ###

    def increment(self, name:str):
        self.counters.increment(name)

    def reset(self):
        ''' zero all counters, returns the model
        '''
        self.counters.reset()
        return self

    def sum_counters(self):
        return self.counters.sum()

    ### objective and constraints ###

    def obj(self, x):
        """
        evaluate the objective f(x)

        Parameters
        ------
        x: array (nvar,)

        Returns
        ------
        f: float
        """
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        self.increment("neval_obj")
        return self._obj(x)

    def grad_(self, x, g):
        """
        evaluate the gradient of f at x in place

        Parameters
        ------
        x: array (nvar,)
        g: array (nvar,), overwritten

        Returns
        ------
        g
        """
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(g, (self.nvar,))
        self.increment("neval_grad")
        self._grad(x, g)
        return g

    def grad(self, x):
        return self.grad_(x, np.empty((self.nvar,), dtype=np.float64))

    def cons_(self, x, c):
        """
        evaluate the constraints c(x) in place

        Parameters
        ------
        x: array (nvar,)
        c: array (ncon,), overwritten

        Returns
        ------
        c

        A model without constraints returns the empty buffer untouched.
        """
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(c, (self.ncon,))
        if self.ncon == 0:
            return c
        self.increment("neval_cons")
        self._cons(x, c)
        return c

    def cons(self, x):
        return self.cons_(x, np.empty((self.ncon,), dtype=np.float64))

    def objgrad_(self, x, g):
        f = self.obj(x)
        self.grad_(x, g)
        return f, g

    def objgrad(self, x):
        f = self.obj(x)
        g = self.grad(x)
        return f, g

    def objcons_(self, x, c):
        f = self.obj(x)
        self.cons_(x, c)
        return f, c

    def objcons(self, x):
        f = self.obj(x)
        c = self.cons(x)
        return f, c

    ### single constraint ###

    def jth_con(self, x, j):
        ''' value of the j-th constraint
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        IN_RANGE(j, self.ncon)
        self.increment("neval_jcon")
        return self._jth_con(x, j)

    def jth_congrad_(self, x, j, g):
        ''' gradient of the j-th constraint, written in g
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(g, (self.nvar,))
        IN_RANGE(j, self.ncon)
        self.increment("neval_jgrad")
        self._jth_congrad(x, j, g)
        return g

    def jth_congrad(self, x, j):
        return self.jth_congrad_(x, j, np.empty((self.nvar,), dtype=np.float64))

    def jth_sparse_congrad(self, x, j):
        ''' gradient of the j-th constraint as a sparse (1, nvar) matrix
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        IN_RANGE(j, self.ncon)
        self.increment("neval_jgrad")
        return self._jth_sparse_congrad(x, j)

    ### Jacobian ###

    def jac_structure_(self, rows, cols):
        """
        structure of the constraint Jacobian in coordinate format

        Parameters
        ------
        rows: int array (nnzj,), overwritten
        cols: int array (nnzj,), overwritten

        Returns
        ------
        rows, cols

        The pattern doesn't depend on x, it is the same for every call.
        """
        RIGHT_SHAPE(rows, (self.nnzj,))
        RIGHT_SHAPE(cols, (self.nnzj,))
        self._jac_structure(rows, cols)
        return rows, cols

    def jac_structure(self):
        return self.jac_structure_(np.empty((self.nnzj,), dtype=np.int64),
                                   np.empty((self.nnzj,), dtype=np.int64))

    def jac_coord_(self, x, vals):
        """
        values of the constraint Jacobian at x, aligned with jac_structure

        Parameters
        ------
        x: array (nvar,)
        vals: array (nnzj,), overwritten

        Returns
        ------
        vals
        """
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(vals, (self.nnzj,))
        self.increment("neval_jac")
        self._jac_coord(x, vals)
        return vals

    def jac_coord(self, x):
        return self.jac_coord_(x, np.empty((self.nnzj,), dtype=np.float64))

    def jac(self, x):
        ''' constraint Jacobian at x, a (ncon, nvar) coo_matrix unless the model returns it dense
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        self.increment("neval_jac")
        return self._jac(x)

    def jprod_(self, x, v, Jv):
        ''' Jacobian-vector product J(x) v, written in Jv (ncon,)
        '''
        x, v = _vec(x), _vec(v)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(v, (self.nvar,))
        RIGHT_SHAPE(Jv, (self.ncon,))
        self.increment("neval_jprod")
        self._jprod(x, v, Jv)
        return Jv

    def jprod(self, x, v):
        return self.jprod_(x, v, np.empty((self.ncon,), dtype=np.float64))

    def jtprod_(self, x, v, Jtv):
        ''' transposed Jacobian-vector product J(x)^T v, written in Jtv (nvar,)
        '''
        x, v = _vec(x), _vec(v)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(v, (self.ncon,))
        RIGHT_SHAPE(Jtv, (self.nvar,))
        self.increment("neval_jtprod")
        self._jtprod(x, v, Jtv)
        return Jtv

    def jtprod(self, x, v):
        return self.jtprod_(x, v, np.empty((self.nvar,), dtype=np.float64))

    def jac_op(self, x):
        ''' Jacobian at x as a linear operator, J @ v and J.H @ v
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        return JacobianOperator(self, x)

    def jac_op_(self, x, Jv, Jtv):
        ''' same as jac_op, the products are stored in the preallocated Jv and Jtv
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(Jv, (self.ncon,))
        RIGHT_SHAPE(Jtv, (self.nvar,))
        return JacobianOperator(self, x, Jv=Jv, Jtv=Jtv)

    ### Hessian ###

    def _multipliers(self, y):
        if y is None:
            return np.zeros((self.ncon,), dtype=np.float64)
        y = _vec(y)
        RIGHT_SHAPE(y, (self.ncon,))
        return y

    def jth_hprod_(self, x, v, j, Hv):
        ''' product of the Hessian of the j-th constraint with v, written in Hv
        '''
        x, v = _vec(x), _vec(v)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(v, (self.nvar,))
        RIGHT_SHAPE(Hv, (self.nvar,))
        IN_RANGE(j, self.ncon)
        self.increment("neval_jhprod")
        self._jth_hprod(x, v, j, Hv)
        return Hv

    def jth_hprod(self, x, v, j):
        return self.jth_hprod_(x, v, j, np.empty((self.nvar,), dtype=np.float64))

    def ghjvprod_(self, x, g, v, gHv):
        ''' gHv[j] = g^T Hess c_j(x) v for every constraint j
        '''
        x, g, v = _vec(x), _vec(g), _vec(v)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(g, (self.nvar,))
        RIGHT_SHAPE(v, (self.nvar,))
        RIGHT_SHAPE(gHv, (self.ncon,))
        self._ghjvprod(x, g, v, gHv)
        return gHv

    def ghjvprod(self, x, g, v):
        return self.ghjvprod_(x, g, v, np.empty((self.ncon,), dtype=np.float64))

    def hess_structure_(self, rows, cols):
        """
        structure of the lower triangle of the Lagrangian Hessian in coordinate format

        Parameters
        ------
        rows: int array (nnzh,), overwritten
        cols: int array (nnzh,), overwritten

        Returns
        ------
        rows, cols
        """
        RIGHT_SHAPE(rows, (self.nnzh,))
        RIGHT_SHAPE(cols, (self.nnzh,))
        self._hess_structure(rows, cols)
        return rows, cols

    def hess_structure(self):
        return self.hess_structure_(np.empty((self.nnzh,), dtype=np.int64),
                                    np.empty((self.nnzh,), dtype=np.int64))

    def hess_coord_(self, x, vals, y=None, obj_weight=1.):
        """
        values of the lower triangle of the Lagrangian Hessian

            obj_weight * Hess f(x) + sum_i y_i Hess c_i(x)

        aligned with hess_structure

        Parameters
        ------
        x: array (nvar,)
        vals: array (nnzh,), overwritten
        y: array (ncon,), multipliers, default zeros
        obj_weight: float, default 1

        Returns
        ------
        vals
        """
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(vals, (self.nnzh,))
        y = self._multipliers(y)
        self.increment("neval_hess")
        self._hess_coord(x, vals, y, float(obj_weight))
        return vals

    def hess_coord(self, x, y=None, obj_weight=1.):
        return self.hess_coord_(x, np.empty((self.nnzh,), dtype=np.float64), y=y, obj_weight=obj_weight)

    def hess(self, x, y=None, obj_weight=1.):
        ''' lower triangle of the Lagrangian Hessian as a (nvar, nvar) coo_matrix,
            unless the model returns it dense
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        y = self._multipliers(y)
        self.increment("neval_hess")
        return self._hess(x, y, float(obj_weight))

    def hprod_(self, x, v, Hv, y=None, obj_weight=1.):
        ''' Lagrangian Hessian-vector product, written in Hv (nvar,)
        '''
        x, v = _vec(x), _vec(v)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(v, (self.nvar,))
        RIGHT_SHAPE(Hv, (self.nvar,))
        y = self._multipliers(y)
        self.increment("neval_hprod")
        self._hprod(x, v, Hv, y, float(obj_weight))
        return Hv

    def hprod(self, x, v, y=None, obj_weight=1.):
        return self.hprod_(x, v, np.empty((self.nvar,), dtype=np.float64), y=y, obj_weight=obj_weight)

    def hess_op(self, x, y=None, obj_weight=1.):
        ''' Lagrangian Hessian at (x, y) as a symmetric linear operator
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        return HessianOperator(self, x, y=self._multipliers(y), obj_weight=float(obj_weight))

    def hess_op_(self, x, Hv, y=None, obj_weight=1.):
        ''' same as hess_op, the products are stored in the preallocated Hv
        '''
        x = _vec(x)
        RIGHT_SHAPE(x, (self.nvar,))
        RIGHT_SHAPE(Hv, (self.nvar,))
        return HessianOperator(self, x, y=self._multipliers(y), obj_weight=float(obj_weight), Hv=Hv)

    ### extension and scaling ###

    def push(self, *args, **kwargs):
        ''' add data to the model on the fly, e.g. a cut
        '''
        raise OperationNotImplemented("push")

    def varscale(self, s):
        raise OperationNotImplemented("varscale")

    def lagscale(self, sigma):
        raise OperationNotImplemented("lagscale")

    def conscale(self, s):
        raise OperationNotImplemented("conscale")

    ### hooks, overridden by the concrete models ###

    def _obj(self, x):
        raise OperationNotImplemented("obj")

    def _grad(self, x, g):
        raise OperationNotImplemented("grad_")

    def _cons(self, x, c):
        raise OperationNotImplemented("cons_")

    def _jth_con(self, x, j):
        raise OperationNotImplemented("jth_con")

    def _jth_congrad(self, x, j, g):
        raise OperationNotImplemented("jth_congrad_")

    def _jth_sparse_congrad(self, x, j):
        raise OperationNotImplemented("jth_sparse_congrad")

    def _jac_structure(self, rows, cols):
        raise OperationNotImplemented("jac_structure_")

    def _jac_coord(self, x, vals):
        raise OperationNotImplemented("jac_coord_")

    def _jac(self, x):
        rows = np.empty((self.nnzj,), dtype=np.int64)
        cols = np.empty((self.nnzj,), dtype=np.int64)
        vals = np.empty((self.nnzj,), dtype=np.float64)
        self._jac_structure(rows, cols)
        self._jac_coord(x, vals)
        return coo_matrix((vals, (rows, cols)), shape=(self.ncon, self.nvar))

    def _jprod(self, x, v, Jv):
        raise OperationNotImplemented("jprod_")

    def _jtprod(self, x, v, Jtv):
        raise OperationNotImplemented("jtprod_")

    def _jth_hprod(self, x, v, j, Hv):
        raise OperationNotImplemented("jth_hprod_")

    def _ghjvprod(self, x, g, v, gHv):
        raise OperationNotImplemented("ghjvprod_")

    def _hess_structure(self, rows, cols):
        raise OperationNotImplemented("hess_structure_")

    def _hess_coord(self, x, vals, y, obj_weight):
        raise OperationNotImplemented("hess_coord_")

    def _hess(self, x, y, obj_weight):
        rows = np.empty((self.nnzh,), dtype=np.int64)
        cols = np.empty((self.nnzh,), dtype=np.int64)
        vals = np.empty((self.nnzh,), dtype=np.float64)
        self._hess_structure(rows, cols)
        self._hess_coord(x, vals, y, obj_weight)
        return coo_matrix((vals, (rows, cols)), shape=(self.nvar, self.nvar))

    def _hprod(self, x, v, Hv, y, obj_weight):
        raise OperationNotImplemented("hprod_")

    def __str__(self):
        return "{0}\n{1}\n{2}".format(type(self).__name__, self.meta, self.counters)
