"""
Companion-model builder: reduces batteries with internal resistance,
capacitors and inductors to a purely resistive MnaCircuit for one time step.

The trapezoidal rule is used for both reactive elements:
    Capacitor: Req = dt / (2C),  Veq = v - Req * i
    Inductor:  Req = 2L / dt,    Veq = Req * i - v
with v the rise V(node_b) - V(node_a) and i flowing node_a -> node_b.
"""

from __future__ import annotations
from typing import NamedTuple, Callable, TYPE_CHECKING

from ..config import SolverOptions, DEFAULT_OPTIONS
from ..mna import (
    MnaCircuit, MnaElement, MnaSolution, NodeId, SyntheticNode, Battery, Resistor,
)
from .elements import (
    ElementKey, DynamicElementState, ResistiveBattery, DynamicCapacitor,
    DynamicInductor, RESISTOR, BATTERY, CAPACITOR, INDUCTOR,
)

if TYPE_CHECKING:
    from .result import CircuitResult
    from .subdivisions import TimestepSubdivisions


CurrentCompanion = Callable[[MnaSolution], float]


class NodeAllocator:
    """Hands out fresh SyntheticNodes for one solve_propagate call."""

    def __init__(self):
        self._next_index = 0

    def allocate(self) -> SyntheticNode:
        node = SyntheticNode(self._next_index)
        self._next_index += 1
        return node


def _battery_current(index: int) -> CurrentCompanion:
    return lambda solution: solution.battery_current(index)


def _resistor_current(index: int) -> CurrentCompanion:
    return lambda solution: solution.resistor_current(index)


class DynamicCircuitSolution(NamedTuple):
    """
    MNA solution of one companion network plus the readouts that map it
    back onto the elements of the DynamicCircuit it came from.
    """
    circuit: DynamicCircuit
    mna_solution: MnaSolution
    current_companions: dict[ElementKey, CurrentCompanion]
    voltage_terminals: dict[ElementKey, tuple[NodeId, NodeId]]

    def node_voltage(self, node: NodeId) -> float:
        return self.mna_solution.node_voltage(node)

    def has_node(self, node: NodeId) -> bool:
        return self.mna_solution.has_node(node)

    def voltage_between(self, node_a: NodeId, node_b: NodeId) -> float:
        return self.mna_solution.voltage_between(node_a, node_b)

    def _check_resistor(self, key: ElementKey) -> None:
        if not 0 <= key.index < len(self.circuit.resistors):
            raise KeyError(f"No element {key} in this circuit.")

    def current(self, key: ElementKey) -> float:
        """Current through the element, flowing node_a -> node_b."""
        if key.kind == RESISTOR:
            self._check_resistor(key)
            return self.mna_solution.resistor_current(key.index)
        if key not in self.current_companions:
            raise KeyError(f"No element {key} in this circuit.")
        return self.current_companions[key](self.mna_solution)

    def voltage(self, key: ElementKey) -> float:
        """
        Voltage rise across the element.

        For capacitors this excludes the series leakage resistor, so it is
        the voltage the capacitor will carry into the next step.
        """
        if key.kind == RESISTOR:
            self._check_resistor(key)
            resistor = self.circuit.resistors[key.index]
            return self.mna_solution.voltage_across(resistor)
        if key not in self.voltage_terminals:
            raise KeyError(f"No element {key} in this circuit.")
        node_a, node_b = self.voltage_terminals[key]
        return self.mna_solution.voltage_between(node_a, node_b)


class DynamicCircuit(NamedTuple):
    """
    Linear circuit with memory (immutable).

    Example:
        circuit = DynamicCircuit(
            resistors=(Resistor(1, 2, 10.0),),
            batteries=(ResistiveBattery(0, 1, 5.0),),
            capacitors=(DynamicCapacitor(2, 0, 1e-2),),
        )
        solution = circuit.solve_propagate(1e-3)
        circuit = circuit.update_circuit(solution)
    """
    resistors: tuple[MnaElement, ...] = ()
    batteries: tuple[ResistiveBattery, ...] = ()
    capacitors: tuple[DynamicCapacitor, ...] = ()
    inductors: tuple[DynamicInductor, ...] = ()
    options: SolverOptions = DEFAULT_OPTIONS

    def keys(self) -> list[ElementKey]:
        """ElementKeys of every element, in resistor/battery/capacitor/inductor order."""
        keys = [ElementKey(RESISTOR, i) for i in range(len(self.resistors))]
        keys += [ElementKey(BATTERY, i) for i in range(len(self.batteries))]
        keys += [ElementKey(CAPACITOR, i) for i in range(len(self.capacitors))]
        keys += [ElementKey(INDUCTOR, i) for i in range(len(self.inductors))]
        return keys

    def solve_propagate(self, dt: float) -> DynamicCircuitSolution:
        """Build the companion network for a step of dt and solve it."""
        assert dt > 0, f"time step must be positive, got {dt}"

        nodes = NodeAllocator()
        mna_batteries: list[MnaElement] = []
        mna_resistors: list[MnaElement] = list(self.resistors)
        companions: dict[ElementKey, CurrentCompanion] = {}
        terminals: dict[ElementKey, tuple[NodeId, NodeId]] = {}

        for i, battery in enumerate(self.batteries):
            key = ElementKey(BATTERY, i)
            s = nodes.allocate()
            companions[key] = _battery_current(len(mna_batteries))
            terminals[key] = (battery.node_a, battery.node_b)
            mna_batteries.append(Battery(battery.node_a, s, battery.voltage))
            mna_resistors.append(Resistor(s, battery.node_b, battery.resistance))

        for i, capacitor in enumerate(self.capacitors):
            assert capacitor.capacitance > 0, "capacitance must be positive"
            key = ElementKey(CAPACITOR, i)
            s1 = nodes.allocate()
            s2 = nodes.allocate()
            req = dt / 2.0 / capacitor.capacitance
            veq = capacitor.state.voltage - req * capacitor.state.current
            mna_batteries.append(Battery(capacitor.node_a, s1, veq))
            companions[key] = _resistor_current(len(mna_resistors))
            terminals[key] = (capacitor.node_a, s2)
            mna_resistors.append(Resistor(s1, s2, req))
            mna_resistors.append(
                Resistor(s2, capacitor.node_b, self.options.capacitor_resistance)
            )

        for i, inductor in enumerate(self.inductors):
            assert inductor.inductance > 0, "inductance must be positive"
            key = ElementKey(INDUCTOR, i)
            s = nodes.allocate()
            req = 2.0 * inductor.inductance / dt
            veq = req * inductor.state.current - inductor.state.voltage
            mna_batteries.append(Battery(inductor.node_a, s, veq))
            companions[key] = _resistor_current(len(mna_resistors))
            terminals[key] = (inductor.node_a, inductor.node_b)
            mna_resistors.append(Resistor(s, inductor.node_b, req))

        mna_circuit = MnaCircuit(batteries=tuple(mna_batteries), resistors=tuple(mna_resistors))
        return DynamicCircuitSolution(self, mna_circuit.solve(), companions, terminals)

    def update_circuit(self, solution: DynamicCircuitSolution) -> DynamicCircuit:
        """New circuit whose capacitors and inductors carry the solved states."""
        capacitors = tuple(
            capacitor._replace(state=DynamicElementState(
                solution.voltage(ElementKey(CAPACITOR, i)),
                solution.current(ElementKey(CAPACITOR, i)),
            ))
            for i, capacitor in enumerate(self.capacitors)
        )
        inductors = tuple(
            inductor._replace(state=DynamicElementState(
                solution.voltage(ElementKey(INDUCTOR, i)),
                solution.current(ElementKey(INDUCTOR, i)),
            ))
            for i, inductor in enumerate(self.inductors)
        )
        return self._replace(capacitors=capacitors, inductors=inductors)

    def update(self, dt: float) -> DynamicCircuit:
        """Advance one fixed step of dt."""
        return self.update_circuit(self.solve_propagate(dt))

    def solve_with_subdivisions(
        self, dt: float, subdivisions: TimestepSubdivisions | None = None
    ) -> CircuitResult:
        """Advance dt with adaptive sub-stepping."""
        from .result import CircuitResult
        from .state import DynamicState, DYNAMIC_STEPPABLE
        from .subdivisions import TimestepSubdivisions

        if subdivisions is None:
            subdivisions = TimestepSubdivisions(self.options)
        result_set = subdivisions.step_in_time_with_history(
            DynamicState(self), DYNAMIC_STEPPABLE, dt
        )
        return CircuitResult(result_set)

    def solve_it_with_subdivisions(
        self, dt: float, subdivisions: TimestepSubdivisions | None = None
    ) -> DynamicCircuitSolution:
        """Solution of the final sub-step of an adaptive advance."""
        return self.solve_with_subdivisions(dt, subdivisions).final_solution

    def update_with_subdivisions(
        self, dt: float, subdivisions: TimestepSubdivisions | None = None
    ) -> DynamicCircuit:
        """Circuit state after an adaptive advance of dt."""
        return self.solve_with_subdivisions(dt, subdivisions).final_state.circuit
