import numpy as np
from scipy.sparse import coo_matrix

from asnlp.base import AbstractNLPModel
from asnlp.meta import NLPModelMeta

class SlackModel(AbstractNLPModel):
    ''' Reformulation of a model where every inequality becomes an equality
        by adding one slack variable per non-fixed constraint

        min_{x,s}   f(x)
        s.t.        c_E(x)     = lcon_E
                    c_I(x) - s = 0
                    lcon_I <= s <= ucon_I,  lvar <= x <= uvar

        - the slack s_k belongs to the k-th entry of jslack, the non-fixed constraints in increasing order.
        - the wrapper has its own counters, the wrapped model keeps counting its own evaluations.
    '''
    def __init__(self, model:AbstractNLPModel) -> None:
        self.model = model
        inner = model.meta
        n = inner.nvar
        self.jslack = np.setdiff1d(np.arange(inner.ncon, dtype=np.int64), inner.jfix)
        ns = len(self.jslack)
        self.n = n
        self.ns = ns

        lcon = np.zeros((inner.ncon,), dtype=np.float64)
        lcon[inner.jfix] = inner.lcon[inner.jfix]
        meta = NLPModelMeta(n + ns,
                            x0=np.concatenate([inner.x0, np.zeros((ns,))]),
                            lvar=np.concatenate([inner.lvar, inner.lcon[self.jslack]]),
                            uvar=np.concatenate([inner.uvar, inner.ucon[self.jslack]]),
                            ncon=inner.ncon, y0=inner.y0, lcon=lcon, ucon=lcon,
                            nnzj=inner.nnzj + ns, nnzh=inner.nnzh,
                            lin=inner.lin, minimize=inner.minimize, name=inner.name + "-slack")
        super().__init__(meta)

    def _split(self, xs):
        return xs[:self.n], xs[self.n:]

    def _slack_of(self, j):
        ''' position k of constraint j in jslack, or None for an equality
        '''
        k = np.searchsorted(self.jslack, j)
        if k < self.ns and self.jslack[k] == j:
            return k
        return None

    def _obj(self, xs):
        x, _ = self._split(xs)
        return self.model.obj(x)

    def _grad(self, xs, g):
        x, _ = self._split(xs)
        self.model.grad_(x, g[:self.n])
        g[self.n:] = 0.

    def _cons(self, xs, c):
        x, s = self._split(xs)
        self.model.cons_(x, c)
        c[self.jslack] -= s

    def _jth_con(self, xs, j):
        x, s = self._split(xs)
        cj = self.model.jth_con(x, j)
        k = self._slack_of(j)
        return cj if k is None else cj - s[k]

    def _jth_congrad(self, xs, j, g):
        x, _ = self._split(xs)
        self.model.jth_congrad_(x, j, g[:self.n])
        g[self.n:] = 0.
        k = self._slack_of(j)
        if k is not None:
            g[self.n + k] = -1.

    def _jth_sparse_congrad(self, xs, j):
        x, _ = self._split(xs)
        inner = self.model.jth_sparse_congrad(x, j).tocoo()
        rows, cols, vals = list(inner.row), list(inner.col), list(inner.data)
        k = self._slack_of(j)
        if k is not None:
            rows.append(0)
            cols.append(self.n + k)
            vals.append(-1.)
        return coo_matrix((vals, (rows, cols)), shape=(1, self.nvar))

    def _jac_structure(self, rows, cols):
        nnzj = self.model.nnzj
        self.model.jac_structure_(rows[:nnzj], cols[:nnzj])
        rows[nnzj:] = self.jslack
        cols[nnzj:] = self.n + np.arange(self.ns)

    def _jac_coord(self, xs, vals):
        x, _ = self._split(xs)
        nnzj = self.model.nnzj
        self.model.jac_coord_(x, vals[:nnzj])
        vals[nnzj:] = -1.

    def _jprod(self, xs, v, Jv):
        x, _ = self._split(xs)
        vx, vs = self._split(v)
        self.model.jprod_(x, vx, Jv)
        Jv[self.jslack] -= vs

    def _jtprod(self, xs, v, Jtv):
        x, _ = self._split(xs)
        self.model.jtprod_(x, v, Jtv[:self.n])
        Jtv[self.n:] = -v[self.jslack]

    def _jth_hprod(self, xs, v, j, Hv):
        x, _ = self._split(xs)
        vx, _ = self._split(v)
        self.model.jth_hprod_(x, vx, j, Hv[:self.n])
        Hv[self.n:] = 0.

    def _ghjvprod(self, xs, g, v, gHv):
        x, _ = self._split(xs)
        gx, _ = self._split(g)
        vx, _ = self._split(v)
        self.model.ghjvprod_(x, gx, vx, gHv)

    # slacks enter linearly, the Hessian is the one of the wrapped model padded with zeros
    def _hess_structure(self, rows, cols):
        self.model.hess_structure_(rows, cols)

    def _hess_coord(self, xs, vals, y, obj_weight):
        x, _ = self._split(xs)
        self.model.hess_coord_(x, vals, y=y, obj_weight=obj_weight)

    def _hprod(self, xs, v, Hv, y, obj_weight):
        x, _ = self._split(xs)
        vx, _ = self._split(v)
        self.model.hprod_(x, vx, Hv[:self.n], y=y, obj_weight=obj_weight)
        Hv[self.n:] = 0.
