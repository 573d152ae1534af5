import numpy as np

from asnlp.slack import SlackModel
from asnlp.toyproblems import HalfCircle, Rosenbrock2D

def test_meta():
    inner = HalfCircle()
    nlp = SlackModel(inner)
    assert nlp.nvar == 3 and nlp.ncon == 2
    assert list(nlp.jslack) == [1]
    assert nlp.meta.equality_constrained
    assert np.array_equal(nlp.meta.lcon, [0., 0.])
    assert nlp.meta.lvar[2] == -np.inf and nlp.meta.uvar[2] == 1.
    assert nlp.nnzj == inner.nnzj + 1 and nlp.nnzh == inner.nnzh

def test_evaluations():
    inner = HalfCircle()
    nlp = SlackModel(inner)
    xs = np.array([0.5, -1., 0.25])
    x = xs[:2]
    assert nlp.obj(xs) == inner.obj(x)
    assert np.allclose(nlp.grad(xs), [1., -1., 0.])
    assert np.allclose(nlp.cons(xs), [0.5, 1.])
    J = nlp.jac(xs).toarray()
    assert np.allclose(J, [[1., 0., 0.], [1., -2., -1.]])
    v = np.array([1., 2., 3.])
    w = np.array([-1., 2.])
    assert np.allclose(nlp.jprod(xs, v), J @ v)
    assert np.allclose(nlp.jtprod(xs, w), J.T @ w)
    assert np.allclose(nlp.jac_op(xs) @ v, J @ v)
    for j in range(2):
        assert np.allclose(nlp.jth_congrad(xs, j), J[j])
        assert np.allclose(nlp.jth_sparse_congrad(xs, j).toarray().ravel(), J[j])
    assert np.isclose(nlp.jth_con(xs, 1), 1.)
    y = np.array([1., 2.])
    assert np.allclose(nlp.hprod(xs, v, y=y), [4., 8., 0.])
    H = nlp.hess(xs, y=y)
    assert H.shape == (3, 3)
    assert np.allclose(H.toarray()[:2, :2], inner.hess(x, y=y).toarray())
    assert np.allclose(nlp.jth_hprod(xs, v, 1), [2., 4., 0.])
    assert np.allclose(nlp.ghjvprod(xs, v, v), [0., 10.])

def test_counters_are_separate():
    inner = HalfCircle()
    nlp = SlackModel(inner)
    nlp.objgrad(nlp.meta.x0)
    assert nlp.counters.neval_obj == 1 and nlp.counters.neval_grad == 1
    assert inner.counters.neval_obj == 1 and inner.counters.neval_grad == 1
    nlp.reset()
    assert nlp.sum_counters() == 0 and inner.sum_counters() == 2

def test_no_constraints():
    nlp = SlackModel(Rosenbrock2D())
    assert nlp.nvar == 2 and nlp.ncon == 0
    assert np.allclose(nlp.grad(nlp.meta.x0), [-215.6, -88.])

if __name__ == "__main__":
    test_meta()
    test_evaluations()
    test_counters_are_separate()
    test_no_constraints()
    print("ALL TESTS PAST")
