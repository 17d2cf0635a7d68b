"""
Example: Zero-dimensional energy balance climate model.

Global mean temperature T is driven by absorbed sunlight and emitted
longwave radiation. Albedo and emissivity depend on T (ice-albedo and
water-vapour feedbacks), which makes the model bistable.

This demonstrates:
- Writing custom processes
- Registering default processes for a namespace
- Letting procmod fill in missing variables
- Inspecting the assembled model
"""

import warnings

import numpy as np
import sympy as sp

from procmod import (
    DefaultRegistry,
    ImplicitParameterWarning,
    ParameterProcess,
    Process,
    assemble_model,
    variable,
)

T = variable("T", 300.0)  # temperature, K
albedo = variable("alpha", 0.3)
emissivity = variable("epsilon", 0.5)
insolation = variable("S", 340.25)  # W/m^2, already divided by 4

STEFAN_BOLTZMANN = 5.670374419e-8


class HeatBalance(Process):
    """c_T dT/dt = S (1 - alpha) - epsilon sigma T^4, in units of S."""

    def __init__(self, c_T=5e8, solar_constant=340.25):
        self.c_T = c_T
        self.solar_constant = solar_constant

    def lhs_variable(self):
        return T

    def timescale(self):
        return self.c_T / self.solar_constant

    def rhs(self):
        absorbed_shortwave = insolation / self.solar_constant * (1 - albedo)
        emitted_longwave = emissivity * (STEFAN_BOLTZMANN / self.solar_constant) * T**4
        return absorbed_shortwave - emitted_longwave


class TanhProcess(Process):
    """Smooth step of ``variable`` from ``left`` to ``right`` as ``driver`` crosses ``reference``."""

    def __init__(self, variable, driver, left, right, scale, reference):
        self.variable = variable
        self.driver = driver
        self.left = left
        self.right = right
        self.scale = scale
        self.reference = reference

    def rhs(self):
        step = (1 + sp.tanh(2 * (self.driver - self.reference) / self.scale)) * 0.5
        return self.left + (self.right - self.left) * step


def climate_defaults():
    """Default processes a climate library would ship."""
    registry = DefaultRegistry()
    registry.register(
        "climate",
        TanhProcess(albedo, T, 0.7, 0.289, 10.0, 274.5),
        TanhProcess(emissivity, T, 0.5, 0.41, 2.0, 288.0),
    )
    return registry


def equilibria(model, low=200.0, high=350.0, n=3001):
    """Temperatures where the net energy input changes sign."""
    heat = next(eq for eq in model.equations if eq.lhs.has(sp.Derivative))
    algebraic = {eq.lhs: eq.rhs for eq in model.equations if not eq.lhs.has(sp.Derivative)}
    params = {p.symbol: p.default for p in model.parameters}

    kelvin = sp.Symbol("kelvin")
    net = heat.rhs
    for _ in range(len(algebraic)):
        net = net.subs(algebraic)
    net = net.subs(params).subs(T, kelvin)

    temps = np.linspace(low, high, n)
    values = sp.lambdify(kelvin, net, "numpy")(temps)
    crossings = np.nonzero(np.diff(np.sign(values)))[0]
    return temps[crossings]


def main():
    registry = climate_defaults()

    # Only the heat balance is given, feedbacks come from the registry.
    # Insolation has no process but a default value, so it becomes a parameter.
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ImplicitParameterWarning)
        model = assemble_model([HeatBalance()], "climate", registry=registry, name="EnergyBalance")
    for w in caught:
        print(f"warning: {w.message}\n")

    print(model)
    print()

    for temp in equilibria(model):
        print(f"Equilibrium near {temp:.1f} K")
    print()

    # Fixing insolation explicitly silences the warning
    model = assemble_model(
        [HeatBalance(), ParameterProcess(insolation, 340.25)],
        "climate",
        registry=registry,
        name="EnergyBalance",
    )
    print(f"Unknowns: {model.unknowns}")


if __name__ == "__main__":
    main()
