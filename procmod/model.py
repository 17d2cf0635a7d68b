"""
Model representation.

A Model is the equation system produced by :func:`procmod.completion.assemble_model`:
a flat list of equations over an independent variable, with every symbol
classified as a state, an algebraic variable or a parameter.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import sympy as sp

from procmod.process import lhs_variable
from procmod.symbolic import Equation, default_value, get_parameters, get_variables, has_variable, t, variable_name
from procmod.types import VariableType


@dataclass
class ModelVariable:
    """A symbol of a model together with its role and default value."""

    name: str
    symbol: Any
    var_type: VariableType
    default: Optional[Any] = None

    @property
    def is_state(self) -> bool:
        """True if this is a state variable."""
        return self.var_type == VariableType.STATE

    @property
    def is_algebraic(self) -> bool:
        """True if this is an algebraic variable."""
        return self.var_type == VariableType.ALGEBRAIC

    @property
    def is_parameter(self) -> bool:
        """True if this is a parameter."""
        return self.var_type == VariableType.PARAMETER


@dataclass
class Model:
    """
    An ordinary differential equation system.

    Each equation defines one variable: a state if its left-hand side contains
    a time derivative, an algebraic variable otherwise. All other symbols
    (except the independent variable) are parameters.
    """

    equations: list[Equation]
    independent: sp.Symbol = t
    name: str = "Model"
    description: str = ""

    variables: list[ModelVariable] = field(default_factory=list, init=False)
    _var_dict: dict = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        for eq in self.equations:
            var = lhs_variable(eq)
            var_type = VariableType.STATE if eq.lhs.has(sp.Derivative) else VariableType.ALGEBRAIC
            self.add_variable(ModelVariable(variable_name(var), var, var_type, default_value(var)))
        for eq in self.equations:
            for sym in get_parameters(eq.lhs, self.independent) + get_parameters(eq.rhs, self.independent):
                if variable_name(sym) not in self._var_dict:
                    self.add_variable(
                        ModelVariable(variable_name(sym), sym, VariableType.PARAMETER, default_value(sym))
                    )

    def add_variable(self, var: ModelVariable) -> None:
        """Add a variable to the model."""
        if var.name in self._var_dict:
            raise ValueError(f"Variable '{var.name}' already exists in model")
        self.variables.append(var)
        self._var_dict[var.name] = var

    def get_variable(self, name: str) -> Optional[ModelVariable]:
        """Get a variable by name."""
        return self._var_dict.get(name)

    def has_variable(self, var: Any) -> bool:
        """Check if a symbol occurs in any equation of the model."""
        return has_variable(self.equations, var)

    def get_variables_by_type(self, var_type: VariableType) -> list[ModelVariable]:
        """Get all variables of a specific type."""
        return [v for v in self.variables if v.var_type == var_type]

    @property
    def states(self) -> list[ModelVariable]:
        """Get all state variables."""
        return self.get_variables_by_type(VariableType.STATE)

    @property
    def algebraic_vars(self) -> list[ModelVariable]:
        """Get all algebraic variables."""
        return self.get_variables_by_type(VariableType.ALGEBRAIC)

    @property
    def parameters(self) -> list[ModelVariable]:
        """Get all parameters."""
        return self.get_variables_by_type(VariableType.PARAMETER)

    @property
    def unknowns(self) -> list:
        """Symbols of all variables defined by an equation, in equation order."""
        return [v.symbol for v in self.variables if not v.is_parameter]

    @property
    def n_states(self) -> int:
        """Number of states."""
        return len(self.states)

    @property
    def n_algebraic(self) -> int:
        """Number of algebraic variables."""
        return len(self.algebraic_vars)

    @property
    def n_parameters(self) -> int:
        """Number of parameters."""
        return len(self.parameters)

    def defaults(self) -> dict:
        """Default values of every symbol that has one."""
        return {v.symbol: v.default for v in self.variables if v.default is not None}

    def undefined_variables(self) -> list:
        """Variables referenced by some equation but defined by none."""
        defined = {variable_name(v) for v in self.unknowns}
        undefined = []
        for eq in self.equations:
            for var in get_variables(eq.lhs) + get_variables(eq.rhs):
                if variable_name(var) not in defined and var not in undefined:
                    undefined.append(var)
        return undefined

    def _format_variable(self, var: ModelVariable) -> str:
        if var.default is not None:
            return f"{var.symbol} (default={var.default})"
        return f"{var.symbol}"

    def __str__(self) -> str:
        lines = [f"Model: {self.name}"]
        if self.description:
            lines.append(f"  Description: {self.description}")

        if self.states:
            lines.append(f"\n  States ({len(self.states)}):")
            for v in self.states:
                lines.append(f"    {self._format_variable(v)}")

        if self.algebraic_vars:
            lines.append(f"\n  Algebraic Variables ({len(self.algebraic_vars)}):")
            for v in self.algebraic_vars:
                lines.append(f"    {self._format_variable(v)}")

        if self.parameters:
            lines.append(f"\n  Parameters ({len(self.parameters)}):")
            for v in self.parameters:
                lines.append(f"    {self._format_variable(v)}")

        if self.equations:
            lines.append(f"\n  Equations ({len(self.equations)}):")
            for eq in self.equations:
                lines.append(f"    {eq}")

        return "\n".join(lines)
