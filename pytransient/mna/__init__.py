"""pytransient Modified Nodal Analysis module.

Solves linear networks of ideal batteries, resistors and current sources.

Elements:
    - Battery: ideal voltage source, V(node_b) - V(node_a) = voltage
    - Resistor: Ohm's law, or an ideal wire when resistance is 0
    - CurrentSource: ideal current source from node_a to node_b
"""

from .elements import (
    MnaElement,
    NodeId,
    SyntheticNode,
    Battery,
    Resistor,
    CurrentSource,
    BATTERY,
    RESISTOR,
    CURRENT,
)
from .circuit import MnaCircuit, Equation, Term, UnknownVoltage, UnknownCurrent
from .solution import MnaSolution

__all__ = [
    # Elements
    "MnaElement",
    "NodeId",
    "SyntheticNode",
    "Battery",
    "Resistor",
    "CurrentSource",
    "BATTERY",
    "RESISTOR",
    "CURRENT",
    # Solving
    "MnaCircuit",
    "MnaSolution",
    "Equation",
    "Term",
    "UnknownVoltage",
    "UnknownCurrent",
]
