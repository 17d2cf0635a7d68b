"""
Ready-made processes.

- :class:`ParameterProcess`: ``x ~ x_0`` with ``x_0`` a named parameter.
- :class:`TimeDerivative`: ``tau_x*D(x) ~ expression``.
- :class:`ExpRelaxation`: ``tau_x*D(x) ~ expression - x``.
- :class:`AdditionProcess`: adds further terms to another process.
"""

from dataclasses import dataclass
from typing import Any

from procmod.errors import IncompatibleAdditionError, MissingDefaultValueError
from procmod.parameters import derive_parameter
from procmod.process import Process, has_time_derivative, is_process_like, lhs, lhs_variable, rhs, timescale
from procmod.symbolic import default_value, variable_name

__all__ = ["ParameterProcess", "TimeDerivative", "ExpRelaxation", "AdditionProcess"]


class ParameterProcess(Process):
    """
    Equate ``variable`` to a constant held by a parameter.

    If ``value`` is a number, a parameter named after the variable with ``_0``
    appended is created with that default; a symbolic ``value`` is used
    directly. Without ``value`` the variable's own default value is used::

        T = variable("T", 0.5)
        ParameterProcess(T).equation()   # T(t) ~ T_0, T_0 defaults to 0.5
    """

    def __init__(self, variable: Any, value: Any = None):
        if value is None:
            value = default_value(variable)
        if value is None:
            raise MissingDefaultValueError(variable)
        self.variable = variable
        self.value = derive_parameter(variable, value, "0", prefixed=False)

    def rhs(self) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"ParameterProcess(variable={self.variable}, value={self.value})"


@dataclass
class TimeDerivative(Process):
    """
    Equate the time derivative of ``variable`` to ``expression``.

    With ``tau`` given, the equation is ``tau_x*D(x) ~ expression`` where
    ``tau_x`` is a new parameter with default ``tau`` (or ``tau`` itself if it
    is already a parameter). Without ``tau`` the unit timescale is used and
    no parameter is created. A zero ``tau`` gives ``x ~ expression``.
    """

    variable: Any
    expression: Any
    tau: Any = None

    def timescale(self) -> Any:
        return self.tau

    def rhs(self) -> Any:
        return self.expression


@dataclass
class ExpRelaxation(Process):
    """
    Exponential relaxation of ``variable`` towards ``expression`` on timescale ``tau``:
    ``tau_x*D(x) ~ expression - x``.

    ``tau`` behaves as in :class:`TimeDerivative`; with a zero ``tau`` the
    equation becomes ``x ~ expression``.
    """

    variable: Any
    expression: Any
    tau: Any = None

    @classmethod
    def from_process(cls, process: Any, tau: Any = None) -> "ExpRelaxation":
        """Turn an existing process or equation into a relaxation towards its rhs."""
        return cls(lhs_variable(process), rhs(process), tau)

    def timescale(self) -> Any:
        return self.tau

    def rhs(self) -> Any:
        if has_time_derivative(self.tau):
            return self.expression - self.variable
        return self.expression


class AdditionProcess(Process):
    """
    Add terms to the right-hand side of ``process``.

    Each of ``added`` is either an expression or a process/equation (a single
    list of them works too); processes must define the same variable as
    ``process``. The variable, timescale and left-hand side are those of
    ``process``.

    Example::

        AdditionProcess(ParameterProcess(w), x**2)                 # w ~ w_0 + x**2
        AdditionProcess(TimeDerivative(q, x), ExpRelaxation(q, x))  # D(q) ~ x + (x - q)
    """

    def __init__(self, process: Any, *added: Any):
        if len(added) == 1 and isinstance(added[0], (list, tuple)):
            added = tuple(added[0])
        expected = variable_name(lhs_variable(process))
        for add in added:
            if is_process_like(add):
                got = variable_name(lhs_variable(add))
                if got != expected:
                    raise IncompatibleAdditionError(expected, got)
        self.process = process
        self.added = list(added)

    def lhs_variable(self) -> Any:
        return lhs_variable(self.process)

    def timescale(self) -> Any:
        return timescale(self.process)

    def lhs(self) -> Any:
        return lhs(self.process)

    def rhs(self) -> Any:
        terms = [rhs(add) if is_process_like(add) else add for add in self.added]
        return sum(terms, rhs(self.process))

    def __repr__(self) -> str:
        return f"AdditionProcess(process={self.process!r}, added={self.added!r})"
