"""
Exceptions and warnings raised while building equation systems from processes.

Every error names the variable(s) at fault and, where it applies, the
variable whose process introduced the problem.
"""

from typing import Any


class ConfigurationError(NotImplementedError):
    """A process type does not provide a required capability."""


class MalformedLeftHandSideError(ValueError):
    """The left-hand side of an equation does not define a single variable."""

    def __init__(self, equation: Any):
        self.equation = equation
        super().__init__(
            f"In given equation {equation}, the left-hand-side does not represent a variable. "
            "Accepted forms are `x`, `D(x)`, `D(x)*p` and `p*D(x)`."
        )


class InvalidRightHandSideError(ValueError):
    """The right-hand side of a process is an equation instead of an expression."""

    def __init__(self, variable: Any, entry: Any):
        self.variable = variable
        self.entry = entry
        super().__init__(
            f"The process for variable {variable} has an equation as its right-hand side: "
            f"{entry!r}. The right-hand side must be an expression."
        )


class DuplicateDefinitionError(ValueError):
    """More than one process defines the same variable."""

    def __init__(self, duplicates: dict, source: str = "processes"):
        self.duplicates = duplicates
        self.source = source
        lines = [f"The following variables have more than one process assigned to them in {source}:"]
        for var, entries in duplicates.items():
            lines.append(f"  {var}:")
            for entry in entries:
                lines.append(f"    {entry!r}")
        super().__init__("\n".join(lines))


class UnresolvableVariableError(ValueError):
    """A referenced variable has no process, no default process and no default value."""

    def __init__(self, variable: Any, introduced_by: Any):
        self.variable = variable
        self.introduced_by = introduced_by
        super().__init__(
            f"Variable {variable} was introduced in process of variable {introduced_by}.\n"
            f"However, a process for {variable} was not provided, there is no default process "
            "for it, and it doesn't have a default value.\n"
            f"Please provide a process for variable {variable}."
        )


class MismatchedDefaultError(ValueError):
    """A default process is stored under a variable it does not define."""

    def __init__(self, key: Any, variable: Any, entry: Any):
        self.key = key
        self.variable = variable
        self.entry = entry
        super().__init__(
            f"Default process for variable {key} defines variable {variable} instead: {entry!r}. "
            "Default processes must be keyed by their lhs variable."
        )


class IncompatibleAdditionError(ValueError):
    """Components of an AdditionProcess define different variables."""

    def __init__(self, expected: str, got: str):
        self.expected = expected
        self.got = got
        super().__init__(f"Added processes do not have the same lhs variable. Got: {expected}, {got}")


class MissingDefaultValueError(ValueError):
    """A parameter process was requested for a variable without any value."""

    def __init__(self, variable: Any):
        self.variable = variable
        super().__init__(
            f"Cannot create a parameter process for variable {variable}: "
            "no value was given and the variable has no default value."
        )


class ProcessModelWarning(UserWarning):
    """Base class for recoverable problems found while building a model."""


class ImplicitParameterWarning(ProcessModelWarning):
    """A variable without a process was turned into a parameter from its default value."""


class DefaultOverwriteWarning(ProcessModelWarning):
    """A registered default process replaced an existing one."""
