"""
The Process abstraction.

A process describes the equation defining exactly one variable. Subclasses of
:class:`Process` provide:

- ``lhs_variable()``: the variable the process defines. Defaults to the
  ``variable`` attribute.
- ``rhs()``: the right-hand side expression, the "actual" process. Must be
  overridden.
- ``timescale()`` (optional): defaults to ``NO_TIME_DERIVATIVE``.
- ``lhs()`` (optional): derived from variable and timescale ``tau``:

  - ``x`` if ``tau`` is ``NO_TIME_DERIVATIVE`` or zero,
  - ``D(x)`` if ``tau`` is ``None``,
  - ``tau_x*D(x)`` otherwise, where ``tau_x`` is a new parameter with default
    ``tau`` (or ``tau`` itself if it already is symbolic).

Plain :class:`~procmod.symbolic.Equation` objects act as processes too; the
module-level functions :func:`lhs_variable`, :func:`rhs`, :func:`lhs` and
:func:`timescale` accept both.

Example:
>>> class Decay(Process):
...     def __init__(self, variable, rate):
...         self.variable = variable
...         self.rate = rate
...     def timescale(self):
...         return None
...     def rhs(self):
...         return -self.rate * self.variable
>>> x = variable("x", 1.0)
>>> Decay(x, 2).equation()
Equation(Derivative(x(t), t) ~ -2*x(t))
"""

from typing import Any

import sympy as sp

from procmod.errors import ConfigurationError, MalformedLeftHandSideError
from procmod.parameters import derive_parameter, literal_value
from procmod.symbolic import D, Equation, as_equation, get_variables, is_variable, variable
from procmod.types import NO_TIME_DERIVATIVE, NoTimeDerivative

__all__ = [
    "Process",
    "lhs_variable",
    "rhs",
    "lhs",
    "timescale",
    "to_equation",
    "is_process_like",
    "has_time_derivative",
]


def _is_zero(tau: Any) -> bool:
    tau = literal_value(tau)
    if isinstance(tau, sp.Basic):
        return tau.is_zero is True
    return bool(tau == 0)


def has_time_derivative(tau: Any) -> bool:
    """True if timescale ``tau`` puts a time derivative on the left-hand side."""
    if isinstance(tau, NoTimeDerivative):
        return False
    if tau is None:
        return True
    return not _is_zero(tau)


class Process:
    """Base class of all processes. See the module docstring for the contract."""

    def lhs_variable(self) -> Any:
        if not hasattr(self, "variable"):
            raise ConfigurationError(f"`lhs_variable` not defined for process {type(self).__name__}.")
        return self.variable

    def rhs(self) -> Any:
        raise ConfigurationError(f"Right-hand side (`rhs`) is not defined for process {type(self).__name__}.")

    def timescale(self) -> Any:
        return NO_TIME_DERIVATIVE

    def lhs(self) -> Any:
        # Not cached: a numeric timescale yields a fresh parameter per call
        tau = self.timescale()
        var = self.lhs_variable()
        if not has_time_derivative(tau):
            return var
        if tau is None:
            return D(var)
        tau_var = derive_parameter(var, tau, "tau", prefixed=True)
        return tau_var * D(var)

    def equation(self) -> Equation:
        """The equation ``lhs ~ rhs`` of this process."""
        return Equation(self.lhs(), self.rhs())

    def __repr__(self) -> str:
        try:
            var = self.lhs_variable()
        except ConfigurationError:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}(variable={var})"


def is_process_like(entry: Any) -> bool:
    """True for processes and equations (including ``sympy.Eq``)."""
    return isinstance(entry, (Process, Equation, sp.Equality))


def _check_entry(entry: Any) -> None:
    if not is_process_like(entry):
        raise TypeError(f"Expected a Process or an Equation, got {type(entry).__name__}: {entry!r}")


def _is_first_derivative(expr: Any) -> bool:
    return (
        isinstance(expr, sp.Derivative)
        and is_variable(expr.expr)
        and expr.derivative_count == 1
        and expr.variables[0] == expr.expr.args[0]
    )


def _is_coefficient(expr: Any) -> bool:
    return not get_variables(expr) and not expr.has(sp.Derivative)


def _parse_lhs_variable(eq: Equation) -> Any:
    x = eq.lhs
    # x ~ ...
    if is_variable(x):
        return x
    # D(x) ~ ...
    if _is_first_derivative(x):
        return x.expr
    # D(x)*p ~ ... and p*D(x) ~ ..., sympy orders the factors canonically
    if isinstance(x, sp.Mul):
        derivatives = [a for a in x.args if _is_first_derivative(a)]
        coefficient = [a for a in x.args if not _is_first_derivative(a)]
        if len(derivatives) == 1 and all(_is_coefficient(c) for c in coefficient):
            return derivatives[0].expr
    raise MalformedLeftHandSideError(eq)


def lhs_variable(entry: Any) -> Any:
    """The variable defined by a process or equation."""
    _check_entry(entry)
    if isinstance(entry, Process):
        return entry.lhs_variable()
    return _parse_lhs_variable(as_equation(entry))


def rhs(entry: Any) -> Any:
    """The right-hand side of a process or equation."""
    _check_entry(entry)
    if isinstance(entry, Process):
        return entry.rhs()
    return as_equation(entry).rhs


def lhs(entry: Any) -> Any:
    """The left-hand side of a process, or of an equation exactly as written."""
    _check_entry(entry)
    if isinstance(entry, Process):
        return entry.lhs()
    return as_equation(entry).lhs


def timescale(entry: Any) -> Any:
    """The timescale of a process; equations have ``NO_TIME_DERIVATIVE``."""
    _check_entry(entry)
    if isinstance(entry, Process):
        return entry.timescale()
    return NO_TIME_DERIVATIVE


def to_equation(entry: Any) -> Equation:
    """``lhs(entry) ~ rhs(entry)``, computing the left-hand side once."""
    _check_entry(entry)
    if isinstance(entry, Process):
        return entry.equation()
    return as_equation(entry)
