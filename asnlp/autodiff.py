import numpy as np
import torch as th
from torch.autograd.functional import jacobian, jvp, vjp, hessian, hvp
from scipy.sparse import coo_matrix

from asnlp.base import AbstractNLPModel
from asnlp.meta import NLPModelMeta
from asnlp.common_utils.check import RIGHT_SHAPE

def _tensor(x):
    return th.as_tensor(np.asarray(x, dtype=np.float64).copy(), dtype=th.float64)

def _write(out, value:th.Tensor):
    out[:] = value.detach().cpu().numpy().reshape(out.shape)

class ADNLPModel(AbstractNLPModel):
    ''' NLP model whose derivatives are computed by torch.autograd
        f:      callable, th.Tensor (nvar,) -> scalar th.Tensor
        x0:     initial point, (nvar,)
        c:      callable, th.Tensor (nvar,) -> th.Tensor (ncon,), optional
        lcon, ucon: constraint bounds, ncon is taken from them,
                    or inferred from c(x0) if both are None

        - the Jacobian and the Hessian are treated as dense,
          structures list every entry of the Jacobian row by row and
          every entry of the lower triangle of the Hessian.
        - all computations are done in float64 on the cpu.
    '''
    def __init__(self, f, x0, lvar=None, uvar=None, c=None, lcon=None, ucon=None,
                 y0=None, lin=None, minimize=True, name="Generic") -> None:
        x0 = np.asarray(x0, dtype=np.float64)
        nvar = len(x0)
        if c is None:
            ncon = 0
        elif lcon is not None and np.ndim(lcon) > 0:
            ncon = len(lcon)
        elif ucon is not None and np.ndim(ucon) > 0:
            ncon = len(ucon)
        else:
            ncon = int(th.numel(c(_tensor(x0))))
        if ncon > 0:
            # constraints default to equalities c(x) = 0
            lcon = 0. if lcon is None else lcon
            ucon = 0. if ucon is None else ucon
        meta = NLPModelMeta(nvar, x0=x0, lvar=lvar, uvar=uvar, ncon=ncon, y0=y0,
                            lcon=lcon, ucon=ucon, nnzj=nvar * ncon, nnzh=nvar * (nvar + 1) // 2,
                            lin=lin, minimize=minimize, name=name)
        super().__init__(meta)
        self.f = f
        self.c = c
        # cached dense patterns
        self._jrows = np.repeat(np.arange(ncon, dtype=np.int64), nvar)
        self._jcols = np.tile(np.arange(nvar, dtype=np.int64), ncon)
        self._hrows, self._hcols = np.tril_indices(nvar)

    def _c(self, x:th.Tensor):
        c = self.c(x).reshape(-1)
        RIGHT_SHAPE(c, (self.ncon,))
        return c

    def _lagrangian(self, y, obj_weight):
        y = _tensor(y)
        def lag(x):
            val = obj_weight * self.f(x)
            if self.ncon > 0:
                val = val + th.dot(y, self._c(x))
            return val
        return lag

    @staticmethod
    def _gradient_of(value:th.Tensor, x:th.Tensor):
        ''' gradient of a scalar tensor w.r.t. x, zero when value doesn't depend on x
        '''
        if not value.requires_grad:
            return th.zeros_like(x)
        grad, = th.autograd.grad(value, x, allow_unused=True)
        if grad is None:
            grad = th.zeros_like(x)
        return grad

    def _obj(self, x):
        with th.no_grad():
            return self.f(_tensor(x)).item()

    def _grad(self, x, g):
        x = _tensor(x).requires_grad_(True)
        fx = self.f(x)
        _write(g, self._gradient_of(fx, x))

    def _cons(self, x, c):
        with th.no_grad():
            _write(c, self._c(_tensor(x)))

    def _jth_con(self, x, j):
        with th.no_grad():
            return self._c(_tensor(x))[j].item()

    def _jth_congrad(self, x, j, g):
        x = _tensor(x).requires_grad_(True)
        cj = self._c(x)[j]
        _write(g, self._gradient_of(cj, x))

    def _jth_sparse_congrad(self, x, j):
        g = np.empty((self.nvar,), dtype=np.float64)
        self._jth_congrad(x, j, g)
        cols = np.nonzero(g)[0]
        return coo_matrix((g[cols], (np.zeros_like(cols), cols)), shape=(1, self.nvar))

    def _jac_structure(self, rows, cols):
        rows[:] = self._jrows
        cols[:] = self._jcols

    def _jac_coord(self, x, vals):
        if self.ncon == 0:
            return
        J = jacobian(self._c, _tensor(x))
        _write(vals, J.reshape(-1))

    def _jprod(self, x, v, Jv):
        if self.ncon == 0:
            return
        _, Jv_t = jvp(self._c, _tensor(x), _tensor(v))
        _write(Jv, Jv_t)

    def _jtprod(self, x, v, Jtv):
        if self.ncon == 0:
            Jtv[:] = 0.
            return
        _, Jtv_t = vjp(self._c, _tensor(x), _tensor(v))
        _write(Jtv, Jtv_t)

    def _jth_hprod(self, x, v, j, Hv):
        cj = lambda z: self._c(z)[j]
        _, Hv_t = hvp(cj, _tensor(x), _tensor(v))
        _write(Hv, Hv_t)

    def _ghjvprod(self, x, g, v, gHv):
        x_t, g_t, v_t = _tensor(x), _tensor(g), _tensor(v)
        for j in range(self.ncon):
            cj = lambda z: self._c(z)[j]
            _, Hv_t = hvp(cj, x_t, v_t)
            gHv[j] = th.dot(g_t, Hv_t).item()

    def _hess_structure(self, rows, cols):
        rows[:] = self._hrows
        cols[:] = self._hcols

    def _hess_coord(self, x, vals, y, obj_weight):
        H = hessian(self._lagrangian(y, obj_weight), _tensor(x))
        _write(vals, H[th.as_tensor(self._hrows), th.as_tensor(self._hcols)])

    def _hprod(self, x, v, Hv, y, obj_weight):
        _, Hv_t = hvp(self._lagrangian(y, obj_weight), _tensor(x), _tensor(v))
        _write(Hv, Hv_t)
