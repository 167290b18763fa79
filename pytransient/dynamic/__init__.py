"""pytransient dynamic-circuit module.

Companion models reduce reactive elements to an MnaCircuit per time step;
TimestepSubdivisions picks the sub-steps adaptively within a frame.

Elements:
    - ResistiveBattery: ideal battery with series internal resistance
    - DynamicCapacitor: trapezoidal companion plus series leakage resistor
    - DynamicInductor: trapezoidal companion
"""

from .elements import (
    ElementKey,
    DynamicElementState,
    ResistiveBattery,
    DynamicCapacitor,
    DynamicInductor,
    RESISTOR,
    BATTERY,
    CAPACITOR,
    INDUCTOR,
)
from .circuit import DynamicCircuit, DynamicCircuitSolution, NodeAllocator
from .subdivisions import Steppable, SubStep, ResultSet, TimestepSubdivisions
from .result import CircuitResult
from .state import (
    DynamicState,
    DYNAMIC_STEPPABLE,
    euclidean_distance,
    solve_one_substep,
    solve_with_adaptive_subdivision,
)

__all__ = [
    # Elements
    "ElementKey",
    "DynamicElementState",
    "ResistiveBattery",
    "DynamicCapacitor",
    "DynamicInductor",
    "RESISTOR",
    "BATTERY",
    "CAPACITOR",
    "INDUCTOR",
    # Circuit
    "DynamicCircuit",
    "DynamicCircuitSolution",
    "NodeAllocator",
    # Stepping
    "Steppable",
    "SubStep",
    "ResultSet",
    "TimestepSubdivisions",
    "DynamicState",
    "DYNAMIC_STEPPABLE",
    "euclidean_distance",
    "CircuitResult",
    # Entry points
    "solve_one_substep",
    "solve_with_adaptive_subdivision",
]
