"""
Type definitions shared across procmod.
"""

from enum import Enum, auto
from typing import Union

import numpy as np
import sympy as sp

# Plain numbers accepted wherever a numeric default or timescale is expected
NumericValue = Union[int, float, np.integer, np.floating]

# Anything that may sit on either side of an equation
Expression = Union[sp.Basic, int, float, np.integer, np.floating]


class NoTimeDerivative:
    """
    Timescale marker for processes whose left-hand side is the bare variable.

    This is the default :meth:`procmod.process.Process.timescale`. It differs
    from ``None``, which means "time derivative with unit timescale".
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NoTimeDerivative()"


NO_TIME_DERIVATIVE = NoTimeDerivative()


class VariableType(Enum):
    """Role of a symbol in an assembled model."""

    STATE = auto()  # Left-hand side contains d/dt
    ALGEBRAIC = auto()  # Defined without a derivative
    PARAMETER = auto()  # Named constant
