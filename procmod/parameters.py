"""
Helpers turning plain numbers into named parameters.

Process constructors accept numbers for things like timescales or constant
values; these helpers give such numbers a name derived from the variable they
belong to, so they show up as tunable parameters of the assembled model.
Wrap a number in :class:`LiteralParameter` to keep it as a literal instead.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

import sympy as sp

from procmod.symbolic import Parameter, variable_name

__all__ = ["LiteralParameter", "literal_value", "derive_parameter", "convert_to_parameters"]


@dataclass(frozen=True)
class LiteralParameter:
    """
    Marks ``value`` to be kept as a numeric literal.

    :func:`derive_parameter` and :func:`convert_to_parameters` unwrap it
    instead of creating a named parameter.
    """

    value: Any


def literal_value(x: Any) -> Any:
    """Unwrap a :class:`LiteralParameter`; return anything else unchanged."""
    if isinstance(x, LiteralParameter):
        return x.value
    return x


def _is_symbolic(value: Any) -> bool:
    # Symbols and expressions are reused, sympy numbers are still numbers
    return isinstance(value, sp.Basic) and not isinstance(value, sp.Number)


def _named_or_passthrough(name: str, value: Any) -> Any:
    if isinstance(value, LiteralParameter):
        return value.value
    if _is_symbolic(value):
        return value
    return Parameter(name, value, real=True)


def derive_parameter(variable: Any, value: Any, tag: str, prefixed: bool = True) -> Any:
    """
    Return a named parameter for ``value``, named after ``variable``.

    - a symbolic ``value`` (e.g. an existing parameter) is returned as is,
    - a :class:`LiteralParameter` is unwrapped to its literal value,
    - otherwise a new :class:`~procmod.symbolic.Parameter` with default
      ``value`` is created, named ``{tag}_{name}`` if ``prefixed`` else
      ``{name}_{tag}``.

    ``variable`` may be a variable, a symbol or a plain name.

    Example::

        x = variable("x", 0.5)
        p = derive_parameter(x, 0.2, "tau")                   # tau_x, default 0.2
        p = derive_parameter(x, 0.2, "tau", prefixed=False)   # x_tau
    """
    base = variable_name(variable)
    name = f"{tag}_{base}" if prefixed else f"{base}_{tag}"
    return _named_or_passthrough(name, value)


def convert_to_parameters(values: Union[Mapping[str, Any], Iterable]) -> list:
    """
    Convert ``(name, value)`` pairs into named parameters, in order.

    Numbers become parameters named ``name`` with that default value; symbolic
    values are kept (they already are parameters, possibly under another
    name) and :class:`LiteralParameter` values are unwrapped. Typical use is
    turning keyword arguments of a process factory into parameters::

        A, B, C = convert_to_parameters({"A": 0.5, "B": LiteralParameter(2.0), "C": parameter("X", 1.0)})
    """
    items = values.items() if isinstance(values, Mapping) else values
    return [_named_or_passthrough(name, value) for name, value in items]
