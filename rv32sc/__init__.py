from amaranth import *
from amaranth.lib import wiring
from amaranth.lib.enum import Enum
from amaranth.lib.wiring import In, Out

from functools import reduce

class AlwaysReady(wiring.Signature):
    def __init__(self, payload_shape):
        super().__init__({
            'payload': Out(payload_shape),
            'valid': Out(1),
        })

def _as_value(x):
    if isinstance(x, Enum):
        x = x.value
    if isinstance(x, int):
        x = Const(x)
    return x

# Two-way mux built from AND and OR gates rather than a Mux. The result takes
# the width of the wider input.
def mux(select, one, zero):
    one = _as_value(one)
    zero = _as_value(zero)
    n = max(one.shape().width, zero.shape().width)
    select = select.any() # force to 1 bit
    return (
        (select.replicate(n) & one) | (~select.replicate(n) & zero)
    )

# Selects one value out of several by guarding each with its own condition.
#
# options is a list of (condition, value) pairs. Each value is ANDed with its
# (reduced) condition and the results are ORed together, so at most one
# condition may be true at a time; overlapping conditions give the OR of their
# values. When no condition holds the result is default, or zero if there
# isn't one.
def oneof(options, default = None):
    assert len(options) > 0
    output = []
    matches = []
    for (condition, result) in options:
        condition = _as_value(condition)
        result = _as_value(result)

        matches.append(condition.any())

        case = condition.any().replicate(result.shape().width) & result

        output.append(case)

    if default is not None:
        default = _as_value(default)
        no_match = ~reduce(lambda a, b: a|b, matches)
        output.append(no_match.replicate(default.shape().width) & default)

    return reduce(lambda a, b: a|b, output)
