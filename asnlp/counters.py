from dataclasses import dataclass, fields

@dataclass
class Counters:
    ''' evaluation tally of one model, one field per counted primitive
    '''
    neval_obj:      int = 0
    neval_grad:     int = 0
    neval_cons:     int = 0
    neval_jcon:     int = 0
    neval_jgrad:    int = 0
    neval_jac:      int = 0
    neval_jprod:    int = 0
    neval_jtprod:   int = 0
    neval_hess:     int = 0
    neval_hprod:    int = 0
    neval_jhprod:   int = 0

    @classmethod
    def names(cls):
        return tuple(f.name for f in fields(cls))

    def increment(self, name:str):
        if name not in self.names():
            raise ValueError("Unknown counter '{}'.".format(name))
        setattr(self, name, getattr(self, name) + 1)

    def reset(self):
        for name in self.names():
            setattr(self, name, 0)
        return self

    def sum(self):
        return sum(getattr(self, name) for name in self.names())

    def as_dict(self):
        return {name: getattr(self, name) for name in self.names()}

    def __str__(self):
        items = ["{0:>14s}: {1:6d}".format(name[len("neval_"):], count) for name, count in self.as_dict().items()]
        rows = ["  ".join(items[i:i+3]) for i in range(0, len(items), 3)]
        return "  Counters:\n" + "\n".join(rows)

def _counters_of(nlp):
    return nlp if isinstance(nlp, Counters) else nlp.counters

def reset(nlp):
    ''' zero every counter of a model (or of a Counters instance) and return it
    '''
    _counters_of(nlp).reset()
    return nlp

def sum_counters(nlp):
    ''' total number of counted evaluations of a model (or of a Counters instance)
    '''
    return _counters_of(nlp).sum()
