"""
SymPy adapter for the symbolic quantities procmod works with.

procmod never manipulates expressions itself; it only needs to:

- tell time-dependent variables ``x(t)`` apart from named parameters,
- read the static default value attached to either,
- list the variables an expression references,
- build first time derivatives ``D(x)``.

Variables are applied undefined SymPy functions of the independent variable
``t``, so ``D(x)`` stays an unevaluated :class:`sympy.Derivative`. Their
default value lives on the function class, which makes it part of the
variable's identity:

>>> x = variable("x", default=0.5)
>>> default_value(x)
0.5
>>> get_variables(x**2 + D(x))
[x(t)]

Parameters are :class:`Parameter` symbols carrying an optional default.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy as np
import sympy as sp
from sympy.core.function import AppliedUndef

from procmod.types import Expression, NumericValue

__all__ = [
    "t",
    "D",
    "Equation",
    "Parameter",
    "variable",
    "parameter",
    "as_equation",
    "is_variable",
    "is_parameter",
    "variable_name",
    "default_value",
    "get_variables",
    "get_parameters",
    "has_variable",
]

# Independent variable (time)
t = sp.Symbol("t", real=True)


class Parameter(sp.Symbol):
    """
    A named constant with an optional default value.

    Two parameters are equal only if name, assumptions and default agree, so
    a parameter can be recreated from its name and default and still compare
    equal to the first one.
    """

    __slots__ = ("default",)

    def __new__(cls, name: str, default: Any = None, **assumptions):
        cls._sanitize(assumptions, cls)
        # Uncached constructor, the default must not leak between instances
        obj = sp.Symbol.__xnew__(cls, name, **assumptions)
        obj.default = default
        return obj

    def _hashable_content(self):
        return super()._hashable_content() + (self.default,)

    def __getnewargs_ex__(self):
        return ((self.name, self.default), dict(self.assumptions0))


@dataclass(frozen=True)
class Equation:
    """
    An equation ``lhs ~ rhs``.

    The left-hand side is expected to be one of ``x``, ``D(x)``, ``D(x)*p`` or
    ``p*D(x)`` for a variable ``x``; see :func:`procmod.process.lhs_variable`.
    """

    lhs: Any
    rhs: Any

    def __str__(self) -> str:
        return f"{self.lhs} ~ {self.rhs}"

    def __repr__(self) -> str:
        return f"Equation({self})"


def variable(name: str, default: Optional[NumericValue] = None, independent: sp.Symbol = t) -> sp.Expr:
    """Create the time-dependent variable ``name(t)`` with an optional default value."""
    return sp.Function(name, real=True, default=default)(independent)


def parameter(name: str, default: Optional[NumericValue] = None) -> Parameter:
    """Create a named parameter with an optional default value."""
    return Parameter(name, default, real=True)


def as_equation(obj: Any) -> Equation:
    """Return ``obj`` as an :class:`Equation`, accepting ``sympy.Eq`` too."""
    if isinstance(obj, Equation):
        return obj
    if isinstance(obj, sp.Equality):
        return Equation(obj.lhs, obj.rhs)
    raise TypeError(f"Expected an Equation or sympy.Eq, got {type(obj).__name__}: {obj!r}")


def is_variable(x: Any) -> bool:
    """True if ``x`` is a variable, i.e. an undefined function applied to one symbol."""
    return (
        isinstance(x, AppliedUndef)
        and len(x.args) == 1
        and isinstance(x.args[0], sp.Symbol)
        and not isinstance(x.args[0], Parameter)
    )


def is_parameter(x: Any) -> bool:
    """True if ``x`` is a :class:`Parameter`."""
    return isinstance(x, Parameter)


def variable_name(x: Any) -> str:
    """Name of a variable, parameter or symbol (strings are returned as is)."""
    if isinstance(x, str):
        return x
    if isinstance(x, AppliedUndef):
        return x.func.__name__
    if isinstance(x, sp.Symbol):
        return x.name
    return str(x)


def default_value(x: Any) -> Optional[Any]:
    """
    Default value of a variable or parameter, or ``None`` if it has none.

    Plain numbers are their own default value.
    """
    if isinstance(x, (int, float, np.integer, np.floating, sp.Number)):
        return x
    if isinstance(x, Parameter):
        return x.default
    if isinstance(x, AppliedUndef):
        return getattr(x.func, "default", None)
    return None


def D(expr: Expression) -> sp.Expr:
    """First time derivative of ``expr``, left unevaluated."""
    if is_variable(expr):
        return sp.Derivative(expr, expr.args[0])
    return sp.Derivative(expr, t)


def get_variables(expr: Any) -> list:
    """
    Variables referenced in ``expr``, each once, in preorder traversal order.

    The order depends only on the expression structure, never on hashing.
    """
    if not isinstance(expr, sp.Basic):
        return []
    found = []
    for node in sp.preorder_traversal(expr):
        if is_variable(node) and node not in found:
            found.append(node)
    return found


def get_parameters(expr: Any, independent: sp.Symbol = t) -> list:
    """Symbols other than ``independent`` referenced in ``expr``, in preorder order."""
    if not isinstance(expr, sp.Basic):
        return []
    found = []
    for node in sp.preorder_traversal(expr):
        if isinstance(node, sp.Symbol) and node != independent and node not in found:
            found.append(node)
    return found


def _contains(expr: Any, var: Any) -> bool:
    return isinstance(expr, sp.Basic) and expr.has(var)


def has_variable(eqs: Union[Equation, sp.Equality, Iterable], var: Any) -> bool:
    """
    Return True if ``var`` occurs in the equation(s) ``eqs``.

    Works for variables and parameters alike.
    """
    if isinstance(eqs, (Equation, sp.Equality)):
        eq = as_equation(eqs)
        return _contains(eq.lhs, var) or _contains(eq.rhs, var)
    return any(has_variable(eq, var) for eq in eqs)
