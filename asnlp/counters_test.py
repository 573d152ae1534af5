import pytest

from asnlp.counters import Counters, reset, sum_counters

def test_increment_sum_reset():
    c = Counters()
    assert c.sum() == 0
    c.increment("neval_obj")
    c.increment("neval_obj")
    c.increment("neval_hprod")
    assert c.neval_obj == 2 and c.neval_hprod == 1
    assert sum_counters(c) == 3
    assert reset(c) is c
    assert all(v == 0 for v in c.as_dict().values())

def test_declared_fields():
    assert Counters.names() == ("neval_obj", "neval_grad", "neval_cons", "neval_jcon", "neval_jgrad",
                                "neval_jac", "neval_jprod", "neval_jtprod", "neval_hess", "neval_hprod",
                                "neval_jhprod")

def test_unknown_counter():
    with pytest.raises(ValueError):
        Counters().increment("neval_foo")

def test_str():
    c = Counters(neval_grad=4)
    assert "grad:      4" in str(c)

if __name__ == "__main__":
    test_increment_sum_reset()
    test_declared_fields()
    test_unknown_counter()
    test_str()
    print("ALL TESTS PAST")
