import math

import pytest

from errors import FunctionAlreadyExists, HostFunctionError, UndefinedVariable
from functions import VARIADIC, FunctionRegistry


@pytest.fixture
def registry():
    functions = FunctionRegistry()
    functions.register_builtins()
    return functions


def call(registry, name, *args):
    return registry.find(name)(list(args))


def test_builtins_present(registry):
    for name in ('sin', 'cos', 'tan', 'sqrt', 'abs', 'pow', 'log', 'log10',
                 'exp', 'floor', 'ceil', 'min', 'max'):
        assert name in registry
    assert registry.find('max').arity == VARIADIC
    assert registry.find('pow').arity == 2


def test_builtin_values(registry):
    assert call(registry, 'sqrt', 16.0) == 4.0
    assert call(registry, 'abs', -3.0) == 3.0
    assert call(registry, 'floor', 2.7) == 2.0
    assert call(registry, 'ceil', 2.1) == 3.0
    assert call(registry, 'log10', 1000.0) == pytest.approx(3.0)
    assert call(registry, 'pow', 2.0, 0.5) == pytest.approx(math.sqrt(2))


def test_domain_errors_give_nan(registry):
    assert math.isnan(call(registry, 'sqrt', -1.0))
    assert math.isnan(call(registry, 'log', 0.0))
    assert math.isnan(call(registry, 'max'))
    assert math.isnan(call(registry, 'pow', -8.0, 1 / 3))


def test_overflow_gives_inf(registry):
    assert call(registry, 'exp', 1000.0) == math.inf
    assert call(registry, 'pow', 10.0, 400.0) == math.inf
    assert call(registry, 'pow', -10.0, 401.0) == -math.inf
    assert call(registry, 'pow', 0.0, -1.0) == math.inf
    assert call(registry, 'pow', -0.0, -1.0) == -math.inf
    assert call(registry, 'pow', -0.0, -2.0) == math.inf
    assert call(registry, 'pow', 0.0, -0.5) == math.inf


def test_duplicate_registration_fails_without_side_effect(registry):
    original = registry.find('sin')
    with pytest.raises(FunctionAlreadyExists):
        registry.register('sin', 2, lambda args: 0.0)
    assert registry.find('sin') is original


def test_invalid_names_rejected(registry):
    with pytest.raises(ValueError):
        registry.register('2x', 1, lambda args: 0.0)
    with pytest.raises(ValueError):
        registry.register('ok', -2, lambda args: 0.0)


def test_host_result_is_coerced_to_float(registry):
    registry.register('answer', 0, lambda args: 42)
    result = call(registry, 'answer')
    assert result == 42.0
    assert isinstance(result, float)


def test_host_exception_becomes_function_error(registry):
    def broken(args):
        raise ZeroDivisionError("inner")

    registry.register('broken', 0, broken)
    with pytest.raises(HostFunctionError) as excinfo:
        call(registry, 'broken')
    assert str(excinfo.value) == "function 'broken' failed: inner"
    assert excinfo.value.kind == "FunctionError"
    assert isinstance(excinfo.value.cause, ZeroDivisionError)


def test_uncoercible_result_becomes_function_error(registry):
    registry.register('nothing', 0, lambda args: None)
    with pytest.raises(HostFunctionError, match="function 'nothing' failed"):
        call(registry, 'nothing')


def test_basic_errors_from_host_pass_through(registry):
    def lookup(args):
        raise UndefinedVariable('z')

    registry.register('lookup', 0, lookup)
    with pytest.raises(UndefinedVariable):
        call(registry, 'lookup')


def test_keyboard_interrupt_is_not_wrapped(registry):
    def stop(args):
        raise KeyboardInterrupt

    registry.register('stop', 0, stop)
    with pytest.raises(KeyboardInterrupt):
        call(registry, 'stop')
