##
#   Matrix-free views of the Jacobian and of the Lagrangian Hessian.
#   Each application calls one product primitive of the model, nothing is materialized.
##
import numpy as np
from scipy.sparse.linalg import LinearOperator

def _by_columns(apply, X, m):
    ''' apply to every column of X, each product is copied out before the next one
        overwrites a shared buffer
    '''
    X = np.asarray(X)
    out = np.empty((m, X.shape[1]), dtype=np.float64)
    for k in range(X.shape[1]):
        out[:, k] = apply(X[:, k])
    return out

class JacobianOperator(LinearOperator):
    ''' J(x) as a (ncon, nvar) linear operator
        nlp:    the model providing jprod / jtprod
        x:      the point, kept by reference
        Jv, Jtv: optional preallocated outputs of the forward and adjoint products,
                 reused by every application, so two applications in flight must not share them
    '''
    def __init__(self, nlp, x, Jv=None, Jtv=None) -> None:
        self.nlp = nlp
        self.x = x
        self.Jv = Jv
        self.Jtv = Jtv
        # dtype given explicitly, otherwise scipy probes the operator with a matvec
        super().__init__(dtype=np.float64, shape=(nlp.meta.ncon, nlp.meta.nvar))

    def apply(self, v):
        v = np.ravel(v)
        if self.Jv is None:
            return self.nlp.jprod(self.x, v)
        return self.nlp.jprod_(self.x, v, self.Jv)

    def apply_adjoint(self, v):
        v = np.ravel(v)
        if self.Jtv is None:
            return self.nlp.jtprod(self.x, v)
        return self.nlp.jtprod_(self.x, v, self.Jtv)

    def _matvec(self, v):
        return self.apply(v)

    def _rmatvec(self, v):
        return self.apply_adjoint(v)

    def _matmat(self, X):
        return _by_columns(self.apply, X, self.shape[0])

    def _rmatmat(self, X):
        return _by_columns(self.apply_adjoint, X, self.shape[1])

class HessianOperator(LinearOperator):
    ''' obj_weight * Hess f(x) + sum_i y_i Hess c_i(x) as a symmetric (nvar, nvar) linear operator
        Hv: optional preallocated output reused by every application
    '''
    symmetric = True

    def __init__(self, nlp, x, y=None, obj_weight=1., Hv=None) -> None:
        self.nlp = nlp
        self.x = x
        self.y = y
        self.obj_weight = obj_weight
        self.Hv = Hv
        super().__init__(dtype=np.float64, shape=(nlp.meta.nvar, nlp.meta.nvar))

    def apply(self, v):
        v = np.ravel(v)
        if self.Hv is None:
            return self.nlp.hprod(self.x, v, y=self.y, obj_weight=self.obj_weight)
        return self.nlp.hprod_(self.x, v, self.Hv, y=self.y, obj_weight=self.obj_weight)

    def apply_adjoint(self, v):
        return self.apply(v)

    def _matvec(self, v):
        return self.apply(v)

    def _rmatvec(self, v):
        return self.apply(v)

    def _matmat(self, X):
        return _by_columns(self.apply, X, self.shape[0])

    def _rmatmat(self, X):
        return _by_columns(self.apply, X, self.shape[0])

    def _adjoint(self):
        return self
