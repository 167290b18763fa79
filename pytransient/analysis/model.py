"""
Caller-side circuit model (immutable/functional style).

Each element record carries a class-level `kind` tag, its two terminal nodes
and the time-averaged `current` of the last frame. Capacitors and inductors
also carry the state the companion models need across frames.

Build using functional style:
    circuit = Circuit((
        Battery(0, 1, voltage=9.0),
        Resistor(1, 2, resistance=10.0),
        Capacitor(2, 0, capacitance=1e-2),
    ))
    circuit = solve_circuit(circuit, 1 / 60)
    circuit.elements[1].current
"""

from __future__ import annotations
from typing import NamedTuple, Union


class Battery(NamedTuple):
    kind = "battery"
    node_a: int  # negative terminal
    node_b: int  # positive terminal
    voltage: float
    internal_resistance: float = 0.0
    current: float = 0.0


class Resistor(NamedTuple):
    kind = "resistor"
    node_a: int
    node_b: int
    resistance: float
    current: float = 0.0


class Wire(NamedTuple):
    kind = "wire"
    node_a: int
    node_b: int
    resistance: float = 0.0
    current: float = 0.0


class Switch(NamedTuple):
    kind = "switch"
    node_a: int
    node_b: int
    closed: bool = False
    resistance: float = 0.0
    current: float = 0.0


class Fuse(NamedTuple):
    kind = "fuse"
    node_a: int
    node_b: int
    resistance: float = 0.0
    current: float = 0.0


class SeriesAmmeter(NamedTuple):
    kind = "series_ammeter"
    node_a: int
    node_b: int
    resistance: float = 0.0
    current: float = 0.0


class LightBulb(NamedTuple):
    """
    Light bulb; a `real` bulb is non-ohmic and its resistance is
    recomputed from the voltage across it every frame.
    """
    kind = "light_bulb"
    node_a: int
    node_b: int
    resistance: float
    real: bool = False
    current: float = 0.0


class Capacitor(NamedTuple):
    kind = "capacitor"
    node_a: int
    node_b: int
    capacitance: float
    mna_voltage_drop: float = 0.0  # V(node_b) - V(node_a) at the end of the last frame
    mna_current: float = 0.0  # node_a -> node_b at the end of the last frame
    current: float = 0.0


class Inductor(NamedTuple):
    kind = "inductor"
    node_a: int
    node_b: int
    inductance: float
    mna_voltage_drop: float = 0.0
    mna_current: float = 0.0
    current: float = 0.0


CircuitElement = Union[
    Battery, Resistor, Wire, Switch, Fuse, SeriesAmmeter, LightBulb, Capacitor, Inductor
]

# Elements whose voltage drop is zero when no current flows through them
OHMIC_KINDS = frozenset({"resistor", "wire", "switch", "fuse", "series_ammeter", "light_bulb"})


def contains_node(element: CircuitElement, node: int) -> bool:
    return element.node_a == node or element.node_b == node


def opposite_node(element: CircuitElement, node: int) -> int:
    assert contains_node(element, node), f"{node} is not a terminal of {element}"
    return element.node_b if element.node_a == node else element.node_a


def is_open_switch(element: CircuitElement) -> bool:
    return element.kind == "switch" and not element.closed


class Circuit(NamedTuple):
    """
    Elements plus the node voltages of the last solved frame.

    node_voltages is None until the circuit has been solved once.
    """
    elements: tuple[CircuitElement, ...] = ()
    node_voltages: dict[int, float] | None = None

    @property
    def nodes(self) -> tuple[int, ...]:
        """All nodes, in order of first appearance."""
        seen: dict[int, None] = {}
        for element in self.elements:
            seen.setdefault(element.node_a)
            seen.setdefault(element.node_b)
        return tuple(seen)

    def node_voltage(self, node: int) -> float:
        if self.node_voltages is None or node not in self.node_voltages:
            raise KeyError(f"No solved voltage for node '{node}'.")
        return self.node_voltages[node]

    def neighbors(self, node: int) -> list[tuple[int, CircuitElement]]:
        """(index, element) of every element attached to node."""
        return [(i, e) for i, e in enumerate(self.elements) if contains_node(e, node)]

    def is_in_loop(self, index: int) -> bool:
        """
        True if the element at index closes a loop, i.e. its two nodes are
        connected through other elements without crossing an open switch.

        An open switch is never in a loop.
        """
        element = self.elements[index]
        if is_open_switch(element):
            return False

        stack = [element.node_a]
        visited: set[int] = set()
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            for i, neighbor in self.neighbors(node):
                if i == index or is_open_switch(neighbor):
                    continue
                opposite = opposite_node(neighbor, node)
                if opposite == element.node_b:
                    return True
                stack.append(opposite)
        return False
