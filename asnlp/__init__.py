from asnlp.meta import NLPModelMeta
from asnlp.counters import Counters, reset, sum_counters
from asnlp.base import AbstractNLPModel, OperationNotImplemented
from asnlp.operators import JacobianOperator, HessianOperator
