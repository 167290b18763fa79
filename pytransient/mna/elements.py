"""MNA primitives: node identifiers and two-terminal elements (immutable)."""

from __future__ import annotations
import math
from typing import NamedTuple, Union


class SyntheticNode(NamedTuple):
    """Internal series node minted by the companion-model builder."""
    index: int

    def __str__(self) -> str:
        return f"s{self.index}"


NodeId = Union[int, SyntheticNode]

BATTERY = "battery"
RESISTOR = "resistor"
CURRENT = "current"


class MnaElement(NamedTuple):
    """
    Two-terminal element of a linear network.

    kind selects the meaning of value:
        "battery"  - voltage rise from node_a to node_b (V)
        "resistor" - resistance (Ohms), 0 means an ideal wire
        "current"  - current driven from node_a to node_b (A)
    """
    node_a: NodeId
    node_b: NodeId
    kind: str
    value: float

    def contains_node(self, node: NodeId) -> bool:
        return self.node_a == node or self.node_b == node

    def opposite_node(self, node: NodeId) -> NodeId:
        assert self.contains_node(node), f"{node} is not a terminal of {self}"
        return self.node_b if self.node_a == node else self.node_a

    def __str__(self) -> str:
        unit = {BATTERY: "Volts", RESISTOR: "Ohms", CURRENT: "Amps"}[self.kind]
        return f"node{self.node_a} -> node{self.node_b} @ {self.value} {unit}"


def _element(node_a: NodeId, node_b: NodeId, kind: str, value: float) -> MnaElement:
    assert node_a != node_b, f"{kind} must connect two distinct nodes, got {node_a}"
    assert math.isfinite(value), f"{kind} value must be finite, got {value}"
    return MnaElement(node_a, node_b, kind, float(value))


def Battery(node_a: NodeId, node_b: NodeId, voltage: float) -> MnaElement:
    """
    Create an ideal battery.

    Args:
        node_a: Negative terminal
        node_b: Positive terminal
        voltage: V(node_b) - V(node_a) in Volts

    Example:
        b = Battery(0, 1, 9.0)  # node 1 sits 9 V above node 0
    """
    return _element(node_a, node_b, BATTERY, voltage)


def Resistor(node_a: NodeId, node_b: NodeId, resistance: float) -> MnaElement:
    """
    Create a resistor.

    A resistance of exactly 0 is allowed and is solved as an ideal wire with
    an unknown current instead of an Ohm's-law term.
    """
    assert resistance >= 0, f"resistance must be non-negative, got {resistance}"
    return _element(node_a, node_b, RESISTOR, resistance)


def CurrentSource(node_a: NodeId, node_b: NodeId, current: float) -> MnaElement:
    """Create an ideal current source pushing current from node_a to node_b."""
    return _element(node_a, node_b, CURRENT, current)
