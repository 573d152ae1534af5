import numpy as np
import pytest

from asnlp.meta import NLPModelMeta

def test_defaults():
    meta = NLPModelMeta(3)
    assert np.array_equal(meta.x0, np.zeros(3))
    assert np.all(meta.lvar == -np.inf) and np.all(meta.uvar == np.inf)
    assert meta.ncon == 0 and meta.lcon.shape == (0,)
    assert meta.nnzj == 0 and meta.nnzh == 6
    assert meta.unconstrained and not meta.bound_constrained
    assert len(meta.ifree) == 3

def test_index_sets():
    meta = NLPModelMeta(4, lvar=[0., -np.inf, 1., 2.], uvar=[np.inf, 5., 3., 2.],
                        ncon=5, lcon=[0., -np.inf, 1., -np.inf, 2.], ucon=[0., 1., np.inf, np.inf, 4.],
                        lin=[0, 3])
    assert list(meta.ilow) == [0] and list(meta.iupp) == [1]
    assert list(meta.irng) == [2] and list(meta.ifix) == [3]
    assert list(meta.jfix) == [0] and list(meta.jupp) == [1] and list(meta.jlow) == [2]
    assert list(meta.jfree) == [3] and list(meta.jrng) == [4]
    assert meta.nlin == 2 and list(meta.nln) == [1, 2, 4]
    assert meta.nnzj == 20
    assert not meta.equality_constrained and not meta.inequality_constrained
    assert "All constraints" in str(meta)

def test_scalar_bounds_broadcast():
    meta = NLPModelMeta(2, lvar=0., uvar=1., ncon=1, lcon=0., ucon=0.)
    assert np.array_equal(meta.lvar, [0., 0.])
    assert meta.equality_constrained

def test_read_only():
    meta = NLPModelMeta(2, x0=[1., 2.])
    with pytest.raises(ValueError):
        meta.x0[0] = 3.

def test_malformed():
    with pytest.raises(AssertionError):
        NLPModelMeta(2, x0=[1., 2., 3.])
    with pytest.raises(AssertionError):
        NLPModelMeta(2, lvar=[1., 1.], uvar=[0., 2.])
    with pytest.raises(AssertionError):
        NLPModelMeta(2, ncon=1, lcon=[0., 0.])
    with pytest.raises(AssertionError):
        NLPModelMeta(0)

if __name__ == "__main__":
    test_defaults()
    test_index_sets()
    test_scalar_bounds_broadcast()
    test_read_only()
    test_malformed()
    print("ALL TESTS PAST")
