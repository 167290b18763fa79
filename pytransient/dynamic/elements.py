"""Dynamic-circuit element records (immutable/functional style).

Sign conventions used throughout the dynamic layer:
    voltage - rise from node_a to node_b, V(node_b) - V(node_a)
    current - conventional current flowing from node_a to node_b
"""

from __future__ import annotations
from typing import NamedTuple

from ..mna.elements import NodeId

RESISTOR = "resistor"
BATTERY = "battery"
CAPACITOR = "capacitor"
INDUCTOR = "inductor"


class ElementKey(NamedTuple):
    """Stable identifier of an element inside one DynamicCircuit."""
    kind: str  # "resistor", "battery", "capacitor" or "inductor"
    index: int  # position in that kind's tuple


class DynamicElementState(NamedTuple):
    """
    Memory of a capacitor or inductor between sub-steps and frames.

    Capacitors remember their charge through `voltage`, inductors their flux
    through `current`; the trapezoidal rule needs both.
    """
    voltage: float = 0.0
    current: float = 0.0


class ResistiveBattery(NamedTuple):
    """Ideal battery in series with its internal resistance."""
    node_a: NodeId
    node_b: NodeId
    voltage: float
    resistance: float = 0.0


class DynamicCapacitor(NamedTuple):
    node_a: NodeId
    node_b: NodeId
    capacitance: float
    state: DynamicElementState = DynamicElementState()


class DynamicInductor(NamedTuple):
    node_a: NodeId
    node_b: NodeId
    inductance: float
    state: DynamicElementState = DynamicElementState()
