##
#   Finite-difference checks of the derivatives a model provides.
#   Each check returns the entries whose discrepancy exceeds atol + rtol * |reference|,
#   an empty dict means the derivatives agree with the finite differences.
##
import numpy as np

from asnlp.common_utils.check import REPORT_VALUE, WARNING, PRINT, bcolors

def _point(nlp, x):
    if x is None:
        return np.array(nlp.meta.x0, dtype=np.float64)
    return np.array(x, dtype=np.float64)

def _central_difference(func, x, i, h):
    xp = x.copy()
    xm = x.copy()
    xp[i] += h
    xm[i] -= h
    return (func(xp) - func(xm)) / (2. * h)

def _mismatch(err, ref, atol, rtol):
    return err > atol + rtol * abs(ref)

def gradient_check(nlp, x=None, h=1e-6, atol=1e-6, rtol=1e-4, info_level=0):
    ''' compare grad(x) with central differences of obj
        return: {i: |g_i - fd_i|} for the failing components
    '''
    x = _point(nlp, x)
    g = nlp.grad(x)
    errors = {}
    max_err = 0.
    for i in range(nlp.meta.nvar):
        fd = _central_difference(nlp.obj, x, i, h)
        err = abs(g[i] - fd)
        max_err = max(max_err, err)
        if _mismatch(err, fd, atol, rtol):
            errors[i] = err
            WARNING(True, "gradient component {0}: {1:.4e} vs fd {2:.4e}".format(i, g[i], fd), info_level)
    REPORT_VALUE(max_err, "Gradient check, max discrepancy:", info_level)
    return errors

def jacobian_check(nlp, x=None, h=1e-6, atol=1e-6, rtol=1e-4, info_level=0):
    ''' compare jac(x) with central differences of cons
        return: {(i, j): |J_ij - fd_ij|} for the failing entries
    '''
    x = _point(nlp, x)
    errors = {}
    if nlp.meta.ncon == 0:
        return errors
    J = nlp.jac(x)
    J = J.toarray() if hasattr(J, "toarray") else np.asarray(J)
    max_err = 0.
    for j in range(nlp.meta.nvar):
        fd = _central_difference(nlp.cons, x, j, h)
        for i in range(nlp.meta.ncon):
            err = abs(J[i, j] - fd[i])
            max_err = max(max_err, err)
            if _mismatch(err, fd[i], atol, rtol):
                errors[(i, j)] = err
                WARNING(True, "Jacobian entry ({0},{1}): {2:.4e} vs fd {3:.4e}".format(i, j, J[i, j], fd[i]), info_level)
    REPORT_VALUE(max_err, "Jacobian check, max discrepancy:", info_level)
    return errors

def hessian_check(nlp, x=None, h=1e-6, atol=1e-6, rtol=1e-4, info_level=0):
    ''' compare the lower triangle of the Hessians of f and of every c_k
        with central differences of their gradients
        return: {0: errors of f, k+1: errors of c_k}, errors = {(i, j): discrepancy}
    '''
    x = _point(nlp, x)
    nvar, ncon = nlp.meta.nvar, nlp.meta.ncon
    report = {}
    for k in range(ncon + 1):
        if k == 0:
            H = nlp.hess(x, obj_weight=1.)
            gradient = nlp.grad
        else:
            y = np.zeros((ncon,))
            y[k-1] = 1.
            H = nlp.hess(x, y=y, obj_weight=0.)
            gradient = lambda z, y=y: nlp.jtprod(z, y)
        H = H.toarray() if hasattr(H, "toarray") else np.asarray(H)
        errors = {}
        for j in range(nvar):
            fd = _central_difference(gradient, x, j, h)
            for i in range(j, nvar):
                err = abs(H[i, j] - fd[i])
                if _mismatch(err, fd[i], atol, rtol):
                    errors[(i, j)] = err
                    WARNING(True, "Hessian {0}, entry ({1},{2}): {3:.4e} vs fd {4:.4e}".format(k, i, j, H[i, j], fd[i]), info_level)
        PRINT("." if not errors else bcolors.FAIL + "x" + bcolors.ENDC, info_level)
        report[k] = errors
    PRINT("\n", info_level)
    return report
