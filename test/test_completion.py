"""
Tests for completing process lists into closed equation systems (procmod.completion).
"""

import warnings

import pytest
import sympy as sp

from procmod.completion import assemble_model, complete, default_dict, expand_processes, nonunique
from procmod.errors import (
    DuplicateDefinitionError,
    ImplicitParameterWarning,
    InvalidRightHandSideError,
    MismatchedDefaultError,
    UnresolvableVariableError,
)
from procmod.process import Process, lhs_variable
from procmod.processes import AdditionProcess, ExpRelaxation, ParameterProcess, TimeDerivative
from procmod.registry import DefaultRegistry
from procmod.symbolic import D, Equation, get_variables, parameter, variable

z = variable("z", 0.0)
x = variable("x")
y = variable("y", 0.0)
w = variable("w", 2.0)

a = variable("a")
b = variable("b")
c = variable("c", 1.0)
d = variable("d", 2.0)
k = parameter("k", 0.5)


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


class Forcing(Process):
    def __init__(self, variable):
        self.variable = variable

    def rhs(self):
        return k


def make_processes():
    """z relaxes towards x**2, x is driven by y, y closes the loop."""
    return [
        ExpRelaxation(z, x**2, 1.0),  # introduces x
        TimeDerivative(x, 0.1 * y),  # introduces y
        Equation(y, z - x),
    ]


def defined_variables(eqs):
    return [lhs_variable(eq) for eq in eqs]


def assert_closed(eqs):
    defined = set(defined_variables(eqs))
    for eq in eqs:
        for var in get_variables(eq.rhs):
            assert var in defined, f"{var} is not defined by any equation"


def assert_unique(eqs):
    lhs_vars = defined_variables(eqs)
    assert len(lhs_vars) == len(set(lhs_vars))


def complete_quietly(*args, **kwargs):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        return complete(*args, **kwargs)


# ---------------------------------------------------------------------------
# Basic completion
# ---------------------------------------------------------------------------


class TestComplete:
    def test_all_given(self):
        procs = make_processes()
        eqs = complete_quietly(procs)
        assert len(eqs) == 3
        assert defined_variables(eqs) == [z, x, y]
        assert eqs[0] == Equation(parameter("tau_z", 1.0) * D(z), x**2 - z)
        assert eqs[1] == Equation(D(x), 0.1 * y)
        assert eqs[2] == Equation(y, z - x)
        assert_closed(eqs)

    def test_unresolvable(self):
        procs = make_processes()
        with pytest.raises(UnresolvableVariableError) as err:
            complete(procs[:1])
        assert err.value.variable == x
        assert err.value.introduced_by == z
        assert "Variable x(t) was introduced in process of variable z(t)" in str(err.value)

    def test_unresolvable_with_unrelated_default(self):
        procs = make_processes()
        with pytest.raises(UnresolvableVariableError):
            complete(procs[:1], procs[2:3])

    def test_implicit_parameter(self):
        procs = make_processes()
        with pytest.warns(ImplicitParameterWarning, match="parameter"):
            eqs = complete(procs[:2])
        assert len(eqs) == 3
        assert eqs[2] == ParameterProcess(y).equation()
        assert eqs[2].rhs == parameter("y_0", 0.0)
        assert_closed(eqs)

    def test_implicit_parameter_from_default_process(self):
        procs = make_processes()
        with pytest.warns(ImplicitParameterWarning, match="parameter"):
            eqs = complete(procs[:1], procs[1:2])
        assert len(eqs) == 3

    def test_implicit_parameter_warning_names_both_variables(self):
        with pytest.warns(ImplicitParameterWarning) as record:
            complete([TimeDerivative(x, y)])
        message = str(record[0].message)
        assert "y(t)" in message
        assert "x(t)" in message

    def test_suppressed_warning(self):
        procs = make_processes()
        eqs = complete_quietly(procs[:2], warn_on_implicit_parameter=False)
        assert len(eqs) == 3

    @pytest.mark.parametrize("split", [1, 2])
    def test_all_given_across_processes_and_defaults(self, split):
        procs = make_processes()
        eqs = complete_quietly(procs[:split], procs[split:])
        assert len(eqs) == 3
        assert set(defined_variables(eqs)) == {x, y, z}
        assert_closed(eqs)

    def test_defaults_around_processes(self):
        procs = make_processes()
        eqs = complete_quietly(procs[1:2], [procs[0], procs[2]])
        assert defined_variables(eqs) == [x, y, z]

    def test_defaults_for_all_but_last(self):
        procs = make_processes()
        eqs = complete_quietly(procs[2:3], procs[:2])
        assert defined_variables(eqs)[0] == y
        assert set(defined_variables(eqs)) == {x, y, z}

    def test_default_mapping(self):
        eqs = complete_quietly([TimeDerivative(x, a)], {a: Equation(a, k)})
        assert eqs == [Equation(D(x), a), Equation(a, k)]

    def test_default_found_by_name(self):
        # Default process keyed by the same variable carrying a default value
        a1 = variable("a", 1.0)
        eqs = complete_quietly([TimeDerivative(x, a)], [Equation(a1, k)])
        assert eqs == [Equation(D(x), a), Equation(a1, k)]

    def test_defined_by_name(self):
        eqs = complete_quietly([TimeDerivative(x, variable("w")), Equation(w, k)])
        assert len(eqs) == 2

    def test_none_default(self):
        eqs = complete_quietly([Equation(x, k)], None)
        assert eqs == [Equation(x, k)]

    def test_unresolvable_in_default_process(self):
        with pytest.raises(UnresolvableVariableError) as err:
            complete([TimeDerivative(x, a)], [TimeDerivative(a, b)])
        assert err.value.variable == b
        assert err.value.introduced_by == a

    def test_addition_process(self):
        eqs = complete_quietly([AdditionProcess(ParameterProcess(w), x**2), Equation(x, k)])
        assert eqs[0] == Equation(w, parameter("w_0", 2.0) + x**2)
        assert len(eqs) == 2

    def test_sympy_eq(self):
        eqs = complete_quietly([TimeDerivative(x, a), sp.Eq(a, k)])
        assert eqs[1] == Equation(a, k)

    def test_time_symbol_is_not_a_variable(self):
        t = x.args[0]
        eqs = complete_quietly([TimeDerivative(x, sp.sin(t) * k)])
        assert len(eqs) == 1


class TestRegistryDefaults:
    def test_namespace(self):
        registry = DefaultRegistry()
        registry.register("NS", Equation(a, 2.0))
        eqs = complete_quietly([TimeDerivative(x, a)], "NS", registry=registry)
        assert eqs == [Equation(D(x), a), Equation(a, 2.0)]

    def test_namespace_without_registry(self):
        with pytest.raises(TypeError, match="registry"):
            complete([TimeDerivative(x, a)], "NS")

    def test_empty_namespace(self):
        registry = DefaultRegistry()
        with pytest.raises(UnresolvableVariableError):
            complete([TimeDerivative(x, a)], "NS", registry=registry)

    def test_registration_after_first_lookup(self):
        registry = DefaultRegistry()
        registry.lookup("NS")
        registry.register("NS", Equation(a, 2.0))
        assert len(complete_quietly([TimeDerivative(x, a)], "NS", registry=registry)) == 2


# ---------------------------------------------------------------------------
# Duplicates and invalid input
# ---------------------------------------------------------------------------


class TestInvalidInput:
    def test_duplicate(self):
        first, second = Equation(w, 1.0), TimeDerivative(w, x)
        with pytest.raises(DuplicateDefinitionError) as err:
            complete([first, Equation(x, 1.0), second])
        assert err.value.duplicates == {w: [first, second]}
        assert err.value.source == "processes"
        message = str(err.value)
        assert "w(t)" in message
        assert repr(first) in message
        assert repr(second) in message

    def test_every_duplicate_is_reported(self):
        procs = [Equation(w, 1.0), Equation(x, 1.0), Equation(w, 2.0), Equation(x, 2.0), Equation(w, 3.0)]
        with pytest.raises(DuplicateDefinitionError) as err:
            complete(procs)
        assert list(err.value.duplicates) == [w, x]
        assert len(err.value.duplicates[w]) == 3

    def test_duplicate_with_different_defaults(self):
        first, second = Equation(variable("w", 1.0), 1.0), Equation(variable("w"), 2.0)
        with pytest.raises(DuplicateDefinitionError) as err:
            complete([first, second])
        assert list(err.value.duplicates.values()) == [[first, second]]

    def test_duplicate_default_mapping_keys_by_name(self):
        defaults = {variable("a", 1.0): Equation(a, 1.0), a: Equation(a, 2.0)}
        with pytest.raises(DuplicateDefinitionError):
            complete([TimeDerivative(x, a)], defaults)

    def test_custom_process_in_message(self):
        with pytest.raises(DuplicateDefinitionError, match=r"Forcing\(variable=w\(t\)\)"):
            complete([Forcing(w), Equation(w, 1.0)])

    def test_mismatched_default_mapping(self):
        proc = Equation(b, 1.0)
        with pytest.raises(MismatchedDefaultError) as err:
            complete([TimeDerivative(x, a)], {a: proc})
        assert err.value.key == a
        assert err.value.variable == b
        assert err.value.entry is proc
        assert "a(t)" in str(err.value)
        assert "b(t)" in str(err.value)

    def test_duplicate_across_derivative_forms(self):
        with pytest.raises(DuplicateDefinitionError):
            complete([Equation(x, 1.0), Equation(k * D(x), 1.0)])

    def test_duplicate_defaults(self):
        with pytest.raises(DuplicateDefinitionError) as err:
            complete([TimeDerivative(x, a)], [Equation(a, 1.0), Equation(a, 2.0)])
        assert err.value.source == "default processes"
        assert "default processes" in str(err.value)

    def test_equation_valued_rhs(self):
        bad = TimeDerivative(x, Equation(a, 1.0))
        with pytest.raises(InvalidRightHandSideError) as err:
            complete([bad])
        assert err.value.variable == x
        assert err.value.entry is bad

    def test_sympy_relation_as_rhs(self):
        with pytest.raises(InvalidRightHandSideError):
            complete([Equation(x, sp.Eq(a, 1.0))])

    def test_equation_valued_rhs_without_validation(self):
        eqs = complete([TimeDerivative(x, Equation(a, 1.0))], validate_rhs=False)
        assert len(eqs) == 1

    @pytest.mark.parametrize("entry", [x, "x ~ 1", 1.0, {x: 1.0}])
    def test_not_a_process(self, entry):
        with pytest.raises(TypeError):
            complete([entry])


# ---------------------------------------------------------------------------
# Closure properties
# ---------------------------------------------------------------------------


class TestClosure:
    def test_order_is_fifo(self):
        eqs = complete_quietly(
            [TimeDerivative(x, a), TimeDerivative(y, b)],
            [TimeDerivative(a, c), TimeDerivative(b, d)],
            warn_on_implicit_parameter=False,
        )
        assert defined_variables(eqs) == [x, y, a, b, c, d]
        assert_closed(eqs)
        assert_unique(eqs)

    def test_repeated_runs_are_identical(self):
        procs = [TimeDerivative(x, a * b + c), Equation(y, d - x)]
        defaults = [Equation(a, b), Equation(b, c * d)]
        runs = [complete(procs, defaults, warn_on_implicit_parameter=False) for _ in range(3)]
        assert runs[0] == runs[1] == runs[2]
        assert [str(eq) for eq in runs[0]] == [str(eq) for eq in runs[2]]

    def test_cycle_through_default(self):
        eqs = complete_quietly([Equation(a, b)], [Equation(b, a)])
        assert eqs == [Equation(a, b), Equation(b, a)]

    def test_mutual_defaults(self):
        eqs = complete_quietly([TimeDerivative(x, a)], [Equation(a, b), Equation(b, a)])
        assert defined_variables(eqs) == [x, a, b]
        assert_closed(eqs)

    def test_mutual_defaults_with_static_defaults(self):
        a0, b0 = variable("a", 1.0), variable("b", 2.0)
        eqs = complete_quietly([TimeDerivative(x, a0)], [Equation(a0, b0), Equation(b0, a0)])
        assert defined_variables(eqs) == [x, a0, b0]

    def test_self_reference(self):
        eqs = complete_quietly([TimeDerivative(x, -x)])
        assert eqs == [Equation(D(x), -x)]

    def test_variable_referenced_twice_is_queued_once(self):
        eqs = complete(
            [TimeDerivative(x, c), TimeDerivative(y, c**2), Equation(z, c * x)],
            warn_on_implicit_parameter=False,
        )
        assert defined_variables(eqs) == [x, y, z, c]


class TestFallbackPrecedence:
    """Explicit process > default process > default value > error."""

    a5 = variable("a", 5.0)

    def test_explicit_process_wins(self):
        eqs = complete_quietly([TimeDerivative(x, self.a5), Equation(self.a5, 1.0)], [Equation(self.a5, 2.0)])
        assert eqs == [Equation(D(x), self.a5), Equation(self.a5, 1.0)]

    def test_default_process_over_default_value(self):
        eqs = complete_quietly([TimeDerivative(x, self.a5)], [Equation(self.a5, 2.0)])
        assert eqs[1] == Equation(self.a5, 2.0)

    def test_default_value(self):
        with pytest.warns(ImplicitParameterWarning):
            eqs = complete([TimeDerivative(x, self.a5)], [Equation(y, 2.0)])
        assert eqs == [Equation(D(x), self.a5), Equation(self.a5, parameter("a_0", 5.0))]

    def test_error(self):
        with pytest.raises(UnresolvableVariableError):
            complete([TimeDerivative(x, a)], [Equation(y, 2.0)])


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------


class TestExpandProcesses:
    def test_flat_is_unchanged(self):
        procs = make_processes()
        assert expand_processes(procs) == procs
        assert expand_processes(expand_processes(procs)) == procs

    def test_nested_lists_are_spliced_in_place(self):
        p1, p2, p3 = make_processes()
        assert expand_processes([p1, [p2, [p3]]]) == [p1, p2, p3]
        assert expand_processes([[p1], p2, (p3,)]) == [p1, p2, p3]

    def test_associative(self):
        p1, p2, p3 = make_processes()
        assert expand_processes([[p1, p2], p3]) == expand_processes([p1, [p2, p3]])

    def test_model_contributes_equations(self):
        procs = make_processes()
        model = assemble_model(procs)
        assert expand_processes([model]) == model.equations
        eqs = complete_quietly([model, Equation(w, z)])
        assert defined_variables(eqs) == [z, x, y, w]

    def test_sympy_eq_becomes_equation(self):
        (eq,) = expand_processes([sp.Eq(a, k)])
        assert eq == Equation(a, k)


def test_nonunique():
    assert nonunique([1, 2, 1, 3, 2, 1]) == [1, 2]
    assert nonunique([1, 2, 3]) == []


def test_default_dict():
    procs = make_processes()
    mdict = default_dict(procs)
    assert list(mdict) == [z, x, y]
    assert mdict[y] is procs[2]
