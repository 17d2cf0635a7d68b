"""
procmod - Process-based assembly of symbolic equation systems

Describe each variable of a model by one "process" and let procmod assemble
the complete, consistent equation system, filling in variables that were
referenced but never given a process from default processes or default
values, and reporting precisely which variable is missing or duplicated.
"""

from beartype.claw import beartype_package

beartype_package(__name__)

__version__ = "0.1.0"

from procmod.completion import assemble_model, complete, expand_processes
from procmod.errors import (
    ConfigurationError,
    DefaultOverwriteWarning,
    DuplicateDefinitionError,
    ImplicitParameterWarning,
    IncompatibleAdditionError,
    InvalidRightHandSideError,
    MalformedLeftHandSideError,
    MismatchedDefaultError,
    MissingDefaultValueError,
    ProcessModelWarning,
    UnresolvableVariableError,
)
from procmod.model import Model, ModelVariable
from procmod.parameters import LiteralParameter, convert_to_parameters, derive_parameter
from procmod.process import Process, lhs, lhs_variable, rhs, timescale, to_equation
from procmod.processes import AdditionProcess, ExpRelaxation, ParameterProcess, TimeDerivative
from procmod.registry import DefaultRegistry
from procmod.symbolic import (
    D,
    Equation,
    Parameter,
    default_value,
    get_variables,
    has_variable,
    parameter,
    t,
    variable,
)
from procmod.types import NO_TIME_DERIVATIVE, NoTimeDerivative, VariableType

__all__ = [
    "__version__",
    # Symbolic
    "t",
    "D",
    "Equation",
    "Parameter",
    "variable",
    "parameter",
    "default_value",
    "get_variables",
    "has_variable",
    # Processes
    "Process",
    "NoTimeDerivative",
    "NO_TIME_DERIVATIVE",
    "lhs_variable",
    "lhs",
    "rhs",
    "timescale",
    "to_equation",
    "ParameterProcess",
    "TimeDerivative",
    "ExpRelaxation",
    "AdditionProcess",
    # Parameters
    "LiteralParameter",
    "derive_parameter",
    "convert_to_parameters",
    # Defaults and completion
    "DefaultRegistry",
    "complete",
    "assemble_model",
    "expand_processes",
    # Model
    "Model",
    "ModelVariable",
    "VariableType",
    # Errors and warnings
    "ConfigurationError",
    "MalformedLeftHandSideError",
    "InvalidRightHandSideError",
    "DuplicateDefinitionError",
    "UnresolvableVariableError",
    "IncompatibleAdditionError",
    "MismatchedDefaultError",
    "MissingDefaultValueError",
    "ProcessModelWarning",
    "ImplicitParameterWarning",
    "DefaultOverwriteWarning",
]
