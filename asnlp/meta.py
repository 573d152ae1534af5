import numpy as np
from asnlp.common_utils.check import RIGHT_SHAPE

def _fill(value, n, default):
    ''' broadcast a scalar / None / array to a float64 vector of length n
    '''
    if value is None:
        return np.full((n,), default, dtype=np.float64)
    value = np.array(value, dtype=np.float64)
    if value.ndim == 0:
        return np.full((n,), float(value), dtype=np.float64)
    return value

def _freeze(*arrays):
    for arr in arrays:
        arr.flags.writeable = False

def _classify(lower, upper):
    ''' split the indices of a bounded vector into
        fixed, lower only, upper only, range and free
    '''
    lfin = np.isfinite(lower)
    ufin = np.isfinite(upper)
    fix = np.where(lower == upper)[0]
    low = np.where(lfin & ~ufin)[0]
    upp = np.where(~lfin & ufin)[0]
    rng = np.where(lfin & ufin & (lower < upper))[0]
    free = np.where(~lfin & ~ufin)[0]
    return fix, low, upp, rng, free

class NLPModelMeta:
    ''' Description of the shape of a nonlinear program

        min_x    f(x)
        s.t.     lcon <= c(x) <= ucon
                 lvar <=  x   <= uvar

        nvar:   number of variables
        ncon:   number of constraints, 0 if unconstrained
        x0:     initial point, (nvar,)
        lvar, uvar: variable bounds, (nvar,), default -inf / inf
        y0:     initial multipliers, (ncon,)
        lcon, ucon: constraint bounds, (ncon,), lcon[i] == ucon[i] marks an equality
        nnzj:   number of structural nonzeros of the Jacobian, default dense
        nnzh:   number of structural nonzeros of the lower triangle of the Lagrangian Hessian, default dense
        lin:    indices of the linear constraints

        - the arrays are read-only after construction.
    '''
    def __init__(self, nvar:int, x0=None, lvar=None, uvar=None,
                 ncon:int=0, y0=None, lcon=None, ucon=None,
                 nnzj=None, nnzh=None, lin=None, minimize=True, name="Generic") -> None:
        assert int(nvar) == nvar and nvar > 0, "nvar has to be a positive integer."
        assert int(ncon) == ncon and ncon >= 0, "ncon has to be a non-negative integer."
        self.nvar = int(nvar)
        self.ncon = int(ncon)

        self.x0 = _fill(x0, self.nvar, 0.)
        self.lvar = _fill(lvar, self.nvar, -np.inf)
        self.uvar = _fill(uvar, self.nvar, np.inf)
        self.y0 = _fill(y0, self.ncon, 0.)
        self.lcon = _fill(lcon, self.ncon, -np.inf)
        self.ucon = _fill(ucon, self.ncon, np.inf)

        for vec in (self.x0, self.lvar, self.uvar):
            RIGHT_SHAPE(vec, (self.nvar,))
        for vec in (self.y0, self.lcon, self.ucon):
            RIGHT_SHAPE(vec, (self.ncon,))
        assert np.all(self.lvar <= self.uvar), "lvar has to be elementwise smaller than uvar."
        assert np.all(self.lcon <= self.ucon), "lcon has to be elementwise smaller than ucon."

        self.nnzj = self.nvar * self.ncon if nnzj is None else int(nnzj)
        self.nnzh = self.nvar * (self.nvar + 1) // 2 if nnzh is None else int(nnzh)
        assert self.nnzj >= 0 and self.nnzh >= 0, "nnzj and nnzh have to be non-negative."

        self.lin = np.array([] if lin is None else lin, dtype=np.int64)
        assert np.all((self.lin >= 0) & (self.lin < self.ncon)), "lin contains indices out of [0, ncon)."
        self.nln = np.setdiff1d(np.arange(self.ncon, dtype=np.int64), self.lin)
        self.nlin = len(self.lin)
        self.nnln = len(self.nln)

        self.ifix, self.ilow, self.iupp, self.irng, self.ifree = _classify(self.lvar, self.uvar)
        self.jfix, self.jlow, self.jupp, self.jrng, self.jfree = _classify(self.lcon, self.ucon)

        self.minimize = minimize
        self.name = name

        _freeze(self.x0, self.lvar, self.uvar, self.y0, self.lcon, self.ucon, self.lin, self.nln,
                self.ifix, self.ilow, self.iupp, self.irng, self.ifree,
                self.jfix, self.jlow, self.jupp, self.jrng, self.jfree)

    @property
    def has_bounds(self):
        return self.nvar > len(self.ifree)

    @property
    def unconstrained(self):
        return self.ncon == 0 and not self.has_bounds

    @property
    def bound_constrained(self):
        return self.ncon == 0 and self.has_bounds

    @property
    def equality_constrained(self):
        return self.ncon > 0 and len(self.jfix) == self.ncon

    @property
    def inequality_constrained(self):
        return self.ncon > 0 and len(self.jfix) == 0

    def __str__(self):
        lines = ["  Problem name: {}".format(self.name),
                 "   All variables: {0:6d}   free: {1:6d}   lower: {2:6d}   upper: {3:6d}   low/upp: {4:6d}   fixed: {5:6d}".format(
                     self.nvar, len(self.ifree), len(self.ilow), len(self.iupp), len(self.irng), len(self.ifix)),
                 "   All constraints: {0:4d}   free: {1:6d}   lower: {2:6d}   upper: {3:6d}   low/upp: {4:6d}   fixed: {5:6d}".format(
                     self.ncon, len(self.jfree), len(self.jlow), len(self.jupp), len(self.jrng), len(self.jfix)),
                 "   linear: {0:6d}   nonlinear: {1:6d}".format(self.nlin, self.nnln),
                 "   nnzj: {0:6d}   nnzh: {1:6d}".format(self.nnzj, self.nnzh)]
        return "\n".join(lines)

    def __repr__(self):
        return "NLPModelMeta(name={0!r}, nvar={1}, ncon={2}, nnzj={3}, nnzh={4})".format(
            self.name, self.nvar, self.ncon, self.nnzj, self.nnzh)
