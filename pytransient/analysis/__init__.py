"""pytransient analysis module.

Solves a Circuit of caller elements frame by frame.

Elements:
    - Battery: voltage source with internal resistance
    - Resistor, Wire, Fuse, SeriesAmmeter: ohmic elements
    - Switch: ohmic when closed, open circuit otherwise
    - LightBulb: ohmic, or voltage-dependent when `real`
    - Capacitor, Inductor: reactive elements carrying state between frames
"""

from .model import (
    Circuit,
    CircuitElement,
    Battery,
    Resistor,
    Wire,
    Switch,
    Fuse,
    SeriesAmmeter,
    LightBulb,
    Capacitor,
    Inductor,
)
from .adapters import (
    Adapter,
    BatteryAdapter,
    ResistorAdapter,
    CapacitorAdapter,
    InductorAdapter,
    classify,
    build_dynamic_circuit,
)
from .transient import solve_circuit, light_bulb_resistance

__all__ = [
    # Model
    "Circuit",
    "CircuitElement",
    "Battery",
    "Resistor",
    "Wire",
    "Switch",
    "Fuse",
    "SeriesAmmeter",
    "LightBulb",
    "Capacitor",
    "Inductor",
    # Adapters
    "Adapter",
    "BatteryAdapter",
    "ResistorAdapter",
    "CapacitorAdapter",
    "InductorAdapter",
    "classify",
    "build_dynamic_circuit",
    # Solving
    "solve_circuit",
    "light_bulb_resistance",
]
