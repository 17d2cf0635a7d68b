"""
Completion of a process list into a closed equation system.

Given processes that each define one variable but may reference variables
nobody defined yet, :func:`complete` discovers every such variable and
resolves it, in order of preference, by

1. a default process from the given default source,
2. a :class:`~procmod.processes.ParameterProcess` built from the variable's
   default value (with an :class:`~procmod.errors.ImplicitParameterWarning`),

and fails naming the variable and the process that introduced it if neither
exists. :func:`assemble_model` hands the completed list to a model
constructor.

Example::

    z, x, y = variable("z", 0.0), variable("x"), variable("y", 0.0)
    eqs = complete([
        ExpRelaxation(z, x**2, 1.0),     # introduces x
        TimeDerivative(x, 0.1 * y),      # introduces y
        Equation(y, z - x),
    ])
    model = assemble_model(eqs)
"""

import warnings
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import sympy as sp
from sympy.core.relational import Relational

from procmod.errors import (
    DuplicateDefinitionError,
    ImplicitParameterWarning,
    InvalidRightHandSideError,
    MismatchedDefaultError,
    UnresolvableVariableError,
)
from procmod.model import Model
from procmod.process import Process, lhs_variable, rhs, to_equation
from procmod.processes import ParameterProcess
from procmod.registry import DefaultRegistry
from procmod.symbolic import Equation, as_equation, default_value, get_variables, t, variable_name

__all__ = ["complete", "assemble_model", "expand_processes", "default_dict", "nonunique"]


@dataclass
class _Closure:
    """
    Working state of one :func:`complete` call.

    Variables are tracked by name, so two symbols for the same variable
    that differ only in their default value count as one variable.
    """

    lhs_vars: list = field(default_factory=list)  # Defined so far, grows monotonically
    defined: set = field(default_factory=set)  # Names of lhs_vars, for membership
    incomplete: deque = field(default_factory=deque)  # Referenced but undefined, FIFO
    queued: set = field(default_factory=set)  # Names ever queued, a variable is queued at most once
    introduced: dict = field(default_factory=dict)  # var -> lhs variable that first referenced it
    eqs: list = field(default_factory=list)

    def define(self, var: Any) -> None:
        self.lhs_vars.append(var)
        self.defined.add(variable_name(var))

    def is_defined(self, var: Any) -> bool:
        return variable_name(var) in self.defined

    def append_incomplete_variables(self, process: Any) -> None:
        """Queue variables of ``rhs(process)`` that are neither defined nor queued."""
        for var in get_variables(rhs(process)):
            name = variable_name(var)
            if name in self.defined or name in self.queued:
                continue
            self.incomplete.append(var)
            self.queued.add(name)
            self.introduced[var] = lhs_variable(process)

    def pop(self) -> Any:
        return self.incomplete.popleft()


def expand_processes(processes: Any) -> list:
    """
    Flatten ``processes`` into a list of processes and equations.

    Lists and tuples are spliced in place (recursively) and a :class:`Model`
    contributes its equations; ``sympy.Eq`` becomes an :class:`Equation`.
    """
    expanded = []
    for entry in processes:
        if isinstance(entry, (list, tuple)):
            expanded.extend(expand_processes(entry))
        elif isinstance(entry, Model):
            expanded.extend(entry.equations)
        elif isinstance(entry, (Process, Equation)):
            expanded.append(entry)
        elif isinstance(entry, sp.Equality):
            expanded.append(as_equation(entry))
        else:
            raise TypeError(
                f"Cannot use {type(entry).__name__} as a process: {entry!r}. "
                "Expected a Process, an Equation, a Model or a list of them."
            )
    return expanded


def nonunique(items: list) -> list:
    """Items occurring more than once, each once, in order of first repetition."""
    seen = set()
    duplicated = []
    for item in items:
        if item in seen:
            if item not in duplicated:
                duplicated.append(item)
        else:
            seen.add(item)
    return duplicated


def _duplicates(processes: list, lhs_vars: list) -> dict:
    # Grouped by name, keyed by the first symbol seen for that name
    names = [variable_name(var) for var in lhs_vars]
    first = {}
    for var, name in zip(lhs_vars, names):
        first.setdefault(name, var)
    return {first[name]: [p for p, n in zip(processes, names) if n == name] for name in nonunique(names)}


def default_dict(processes: Any) -> dict:
    """Map each process to its lhs variable, failing if a variable appears twice."""
    processes = expand_processes(processes)
    lhs_vars = [lhs_variable(proc) for proc in processes]
    duplicates = _duplicates(processes, lhs_vars)
    if duplicates:
        raise DuplicateDefinitionError(duplicates, source="default processes")
    return dict(zip(lhs_vars, processes))


def _check_default_keys(defaults: Mapping) -> None:
    for key, proc in defaults.items():
        var = lhs_variable(proc)
        if variable_name(var) != variable_name(key):
            raise MismatchedDefaultError(key, var, proc)


def _by_name(defaults: Mapping) -> dict:
    keys, procs = list(defaults), list(defaults.values())
    duplicates = _duplicates(procs, keys)
    if duplicates:
        raise DuplicateDefinitionError(duplicates, source="default processes")
    return {variable_name(key): proc for key, proc in zip(keys, procs)}


def _resolve_default_source(default: Any, registry: Optional[DefaultRegistry]) -> Mapping:
    if default is None:
        return {}
    if isinstance(default, Mapping):
        _check_default_keys(default)
        return default
    if isinstance(default, (list, tuple)):
        return default_dict(default)
    if registry is None:
        raise TypeError(
            f"Default source {default!r} is neither a list of processes nor a mapping; "
            "looking it up as a namespace requires a `registry`."
        )
    defaults = registry.lookup(default)
    _check_default_keys(defaults)
    return defaults


def _check_rhs(processes: list) -> None:
    for proc in processes:
        value = rhs(proc)
        if isinstance(value, (Equation, Relational)):
            raise InvalidRightHandSideError(lhs_variable(proc), proc)


def complete(
    processes: Any,
    default: Any = (),
    *,
    registry: Optional[DefaultRegistry] = None,
    warn_on_implicit_parameter: bool = True,
    validate_rhs: bool = True,
) -> list[Equation]:
    """
    Complete ``processes`` into a list of equations defining every referenced variable.

    Args:
        processes: Processes, equations, models, or (nested) lists of them.
            Each must define a different variable.
        default: Fallback processes for referenced variables without a
            process: a list of processes/equations, a ``variable -> process``
            mapping, or a namespace of ``registry``.
        registry: Registry used when ``default`` is a namespace.
        warn_on_implicit_parameter: Warn when a variable is turned into a
            parameter because it only has a default value.
        validate_rhs: Reject processes whose right-hand side is an equation.

    Returns:
        The equations of ``processes`` in the given order, followed by those
        of the fallback processes in the order they were needed.

    Raises:
        DuplicateDefinitionError: A variable is defined more than once.
        UnresolvableVariableError: A referenced variable has no process, no
            default process and no default value.
        InvalidRightHandSideError: ``validate_rhs`` is set and a right-hand
            side is an equation.
        MismatchedDefaultError: A default mapping stores a process under a
            variable it does not define.
    """
    processes = expand_processes(processes)
    defaults = _resolve_default_source(default, registry)
    default_procs = _by_name(defaults)
    if validate_rhs:
        _check_rhs(processes)

    lhs_vars = [lhs_variable(proc) for proc in processes]
    duplicates = _duplicates(processes, lhs_vars)
    if duplicates:
        raise DuplicateDefinitionError(duplicates)

    state = _Closure()
    for var in lhs_vars:
        state.define(var)

    # First pass: equations of the given processes, collecting undefined variables
    for proc in processes:
        state.append_incomplete_variables(proc)
        state.eqs.append(to_equation(proc))

    # Second pass: resolve undefined variables, including those introduced by defaults
    while state.incomplete:
        added_var = state.pop()
        if state.is_defined(added_var):
            continue
        def_proc = default_procs.get(variable_name(added_var))
        if def_proc is not None:
            state.eqs.append(to_equation(def_proc))
            state.define(lhs_variable(def_proc))
            state.append_incomplete_variables(def_proc)
            continue

        if default_value(added_var) is None:
            raise UnresolvableVariableError(added_var, state.introduced[added_var])
        if warn_on_implicit_parameter:
            warnings.warn(
                f"Variable {added_var} was introduced in process of variable "
                f"{state.introduced[added_var]}.\n"
                f"However, a process for {added_var} was not provided, "
                "and there is no default process for it either.\n"
                "Since it has a default value, we make it a parameter by adding a process: "
                f"`ParameterProcess({added_var})`.",
                ImplicitParameterWarning,
                stacklevel=2,
            )
        state.eqs.append(to_equation(ParameterProcess(added_var)))
        state.define(added_var)

    return state.eqs


def assemble_model(
    processes: Any = None,
    default: Any = (),
    *,
    registry: Optional[DefaultRegistry] = None,
    model_type: Callable[..., Any] = Model,
    name: Optional[str] = None,
    independent: sp.Symbol = t,
    warn_on_implicit_parameter: bool = True,
    validate_rhs: bool = True,
) -> Any:
    """
    Build a model from ``processes`` and ``default`` processes.

    The equations from :func:`complete` are passed to
    ``model_type(equations, independent, name=name)``; ``name`` defaults to
    the name of ``model_type``. Without ``processes``, every process of the
    default source is used, i.e. the model is made of defaults only.
    """
    if processes is None:
        processes = list(_resolve_default_source(default, registry).values())
    eqs = complete(
        processes,
        default,
        registry=registry,
        warn_on_implicit_parameter=warn_on_implicit_parameter,
        validate_rhs=validate_rhs,
    )
    if name is None:
        name = getattr(model_type, "__name__", type(model_type).__name__)
    return model_type(eqs, independent, name=name)
