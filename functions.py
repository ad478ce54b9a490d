import math
import re

from errors import (BasicError, FunctionAlreadyExists, HostFunctionError,
                    ResourceExhausted)

VARIADIC = -1

_IDENTIFIER = re.compile(r'[A-Za-z_][A-Za-z0-9_]*\Z')


class Function:
    def __init__(self, name, arity, impl):
        self.name = name
        self.arity = arity # -1 for variadic
        self.impl = impl

    def __call__(self, args):
        try:
            return float(self.impl(args))
        except BasicError:
            raise
        except Exception as e:
            raise HostFunctionError(self.name, e) from e

    def __repr__(self):
        return f"Function({self.name}, {self.arity})"


def _c_math(fn):
    """Wraps a math function so domain errors give NaN and overflow gives inf."""
    def wrapper(args):
        try:
            return fn(*args)
        except ValueError:
            return math.nan
        except OverflowError:
            return math.inf
    return wrapper


def _pow(args):
    base, exponent = args
    odd = math.isfinite(exponent) and exponent == int(exponent) and int(exponent) % 2 == 1
    if base == 0 and exponent < 0:
        # Pole at zero keeps the sign of the zero for odd exponents
        return math.copysign(math.inf, base) if odd else math.inf
    try:
        return math.pow(base, exponent)
    except ValueError:
        return math.nan
    except OverflowError:
        # Odd integral exponents keep the sign of the base
        if base < 0 and odd:
            return -math.inf
        return math.inf


def _min(args):
    if not args: return math.nan
    return min(args)


def _max(args):
    if not args: return math.nan
    return max(args)


BUILTINS = [
    ('sin', 1, _c_math(math.sin)),
    ('cos', 1, _c_math(math.cos)),
    ('tan', 1, _c_math(math.tan)),
    ('sqrt', 1, _c_math(math.sqrt)),
    ('abs', 1, _c_math(math.fabs)),
    ('pow', 2, _pow),
    ('log', 1, _c_math(math.log)),
    ('log10', 1, _c_math(math.log10)),
    ('exp', 1, _c_math(math.exp)),
    ('floor', 1, _c_math(lambda x: float(math.floor(x)) if math.isfinite(x) else x)),
    ('ceil', 1, _c_math(lambda x: float(math.ceil(x)) if math.isfinite(x) else x)),
    ('min', VARIADIC, _min),
    ('max', VARIADIC, _max),
]


class FunctionRegistry:
    """Name -> Function map. Names are case-sensitive."""

    def __init__(self):
        self.functions = {}

    def register(self, name, arity, impl):
        if not isinstance(name, str) or not _IDENTIFIER.match(name):
            raise ValueError(f"invalid function name: {name!r}")
        if arity < VARIADIC:
            raise ValueError(f"invalid arity for {name}: {arity}")
        if name in self.functions:
            raise FunctionAlreadyExists(name)
        try:
            self.functions[name] = Function(name, arity, impl)
        except MemoryError:
            raise ResourceExhausted(f"out of memory registering function '{name}'")

    def register_builtins(self):
        for name, arity, impl in BUILTINS:
            self.register(name, arity, impl)

    def find(self, name):
        return self.functions.get(name)

    def clear(self):
        self.functions.clear()

    def __contains__(self, name):
        return name in self.functions

    def __len__(self):
        return len(self.functions)
