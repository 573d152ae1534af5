import numpy as np
import torch as th

from asnlp.autodiff import ADNLPModel
from asnlp.toyproblems import Rosenbrock2D, HalfCircle

def rosenbrock(x):
    return (1. - x[0]) ** 2 + 100. * (x[1] - x[0] ** 2) ** 2

def halfcircle_model():
    return ADNLPModel(lambda x: x[0] - x[1], np.array([2., 2.]),
                      c=lambda x: th.stack([x[0], x[0] ** 2 + x[1] ** 2]),
                      lcon=np.array([0., -np.inf]), ucon=np.array([0., 1.]))

def test_unconstrained_matches_closed_form():
    nlp = ADNLPModel(rosenbrock, np.array([-1.2, 1.]))
    ref = Rosenbrock2D()
    x0 = nlp.meta.x0
    assert nlp.ncon == 0 and nlp.nnzh == 3
    assert np.isclose(nlp.obj(x0), 24.2)
    assert np.allclose(nlp.grad(x0), [-215.6, -88.])
    assert np.allclose(nlp.hess(x0).toarray(), ref.hess(x0).toarray())
    v = np.array([0.5, 2.])
    assert np.allclose(nlp.hprod(x0, v), ref.hprod(x0, v))
    assert np.allclose(nlp.hess_op(x0) @ v, ref.hprod(x0, v))
    assert nlp.cons(x0).shape == (0,)
    assert np.allclose(nlp.jtprod(x0, np.zeros(0)), 0.)

def test_constrained_matches_closed_form():
    nlp = halfcircle_model()
    ref = HalfCircle()
    x = np.array([0.5, -1.])
    y = np.array([4., 3.])
    v = np.array([1., 2.])
    assert nlp.ncon == 2 and list(nlp.meta.jfix) == [0]
    assert np.allclose(nlp.cons(x), ref.cons(x))
    assert np.allclose(nlp.jac(x).toarray(), ref.jac(x).toarray())
    assert np.allclose(nlp.jprod(x, v), ref.jprod(x, v))
    assert np.allclose(nlp.jtprod(x, v), ref.jtprod(x, v))
    assert np.allclose(nlp.hess(x, y=y).toarray(), ref.hess(x, y=y).toarray())
    assert np.allclose(nlp.hprod(x, v, y=y), ref.hprod(x, v, y=y))
    for j in range(2):
        assert np.isclose(nlp.jth_con(x, j), ref.jth_con(x, j))
        assert np.allclose(nlp.jth_congrad(x, j), ref.jth_congrad(x, j))
        assert np.allclose(nlp.jth_sparse_congrad(x, j).toarray(), ref.jth_sparse_congrad(x, j).toarray())
        assert np.allclose(nlp.jth_hprod(x, v, j), ref.jth_hprod(x, v, j))
    assert np.allclose(nlp.ghjvprod(x, v, v), ref.ghjvprod(x, v, v))

def test_dense_structures():
    nlp = halfcircle_model()
    rows, cols = nlp.jac_structure()
    assert list(rows) == [0, 0, 1, 1] and list(cols) == [0, 1, 0, 1]
    rows, cols = nlp.hess_structure()
    assert list(rows) == [0, 1, 1] and list(cols) == [0, 0, 1]

def test_ncon_inferred_and_equalities_by_default():
    nlp = ADNLPModel(lambda x: th.sum(x ** 2), np.zeros(3), c=lambda x: th.sum(x).reshape(1))
    assert nlp.ncon == 1
    assert nlp.meta.equality_constrained
    assert np.allclose(nlp.jac_coord(np.ones(3)), [1., 1., 1.])

def test_constant_objective_and_constraint():
    nlp = ADNLPModel(lambda x: th.tensor(0., dtype=th.float64), np.zeros(2),
                     c=lambda x: (x[0] + x[1] ** 2).reshape(1))
    x = np.array([1., 2.])
    assert np.array_equal(nlp.grad(x), [0., 0.])
    f, g = nlp.objgrad(x)
    assert f == 0. and np.array_equal(g, [0., 0.])
    assert np.allclose(nlp.jth_congrad(x, 0), [1., 4.])
    assert np.allclose(nlp.hprod(x, np.ones(2), y=np.array([2.])), [0., 4.])

    nlp = ADNLPModel(lambda x: th.sum(x ** 2), np.zeros(2),
                     c=lambda x: th.ones(1, dtype=th.float64))
    assert np.array_equal(nlp.jth_congrad(x, 0), [0., 0.])
    assert nlp.jth_sparse_congrad(x, 0).nnz == 0

if __name__ == "__main__":
    test_constant_objective_and_constraint()
    test_unconstrained_matches_closed_form()
    test_constrained_matches_closed_form()
    test_dense_structures()
    test_ncon_inferred_and_equalities_by_default()
    print("ALL TESTS PAST")
