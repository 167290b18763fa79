"""Solved node voltages and branch currents of an MnaCircuit."""

from __future__ import annotations
import math
from typing import NamedTuple, TYPE_CHECKING

from .elements import MnaElement, NodeId, RESISTOR

if TYPE_CHECKING:
    from .circuit import MnaCircuit


def _approx(a: float, b: float, tol: float) -> bool:
    return abs(a - b) < tol


class MnaSolution(NamedTuple):
    """
    Sparse solution of an MnaCircuit (immutable).

    Currents solved by the matrix (batteries and zero-resistance resistors)
    are keyed by the element's index in the circuit, never by the element
    object, so identical elements in parallel stay distinguishable.
    Currents through positive resistors are derived with Ohm's law.
    """
    circuit: MnaCircuit
    node_voltages: dict[NodeId, float]
    battery_currents: tuple[float, ...]
    resistor_currents: dict[int, float]  # only zero-resistance resistors

    def node_voltage(self, node: NodeId) -> float:
        """Voltage at a node (0 for a component's reference node)."""
        if node not in self.node_voltages:
            raise KeyError(f"Unknown node '{node}'.")
        return self.node_voltages[node]

    def has_node(self, node: NodeId) -> bool:
        return node in self.node_voltages

    def voltage_between(self, node_a: NodeId, node_b: NodeId) -> float:
        """V(node_b) - V(node_a)."""
        voltage = self.node_voltage(node_b) - self.node_voltage(node_a)
        assert not math.isnan(voltage)
        return voltage

    def voltage_across(self, element: MnaElement) -> float:
        """V(node_b) - V(node_a) for the element's terminals."""
        return self.voltage_between(element.node_a, element.node_b)

    def current_through_resistor(self, element: MnaElement) -> float:
        """
        Ohm's-law current from node_a to node_b.

        Conventional current flows from high to low potential, so a positive
        voltage rise across the resistor means negative current.
        """
        assert element.kind == RESISTOR
        assert element.value > 0, "resistor must have resistance to use Ohm's law"
        return -self.voltage_across(element) / element.value

    def battery_current(self, index: int) -> float:
        """Current through battery `index`, flowing from node_a to node_b."""
        return self.battery_currents[index]

    def resistor_current(self, index: int) -> float:
        """Current through resistor `index`, from node_a to node_b."""
        if index in self.resistor_currents:
            return self.resistor_currents[index]
        return self.current_through_resistor(self.circuit.resistors[index])

    def approx_equals(self, other: MnaSolution, tol: float = 1e-6) -> bool:
        """
        True if both solutions agree on every node voltage and on every
        matrix-solved current (batteries and zero-resistance resistors).
        """
        if set(self.node_voltages) != set(other.node_voltages):
            return False
        for node, voltage in self.node_voltages.items():
            if not _approx(voltage, other.node_voltages[node], tol):
                return False
        if len(self.battery_currents) != len(other.battery_currents):
            return False
        for mine, theirs in zip(self.battery_currents, other.battery_currents):
            if not _approx(mine, theirs, tol):
                return False
        if set(self.resistor_currents) != set(other.resistor_currents):
            return False
        return all(
            _approx(current, other.resistor_currents[index], tol)
            for index, current in self.resistor_currents.items()
        )
