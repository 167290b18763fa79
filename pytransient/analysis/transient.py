"""
Frame driver: solves a caller Circuit over one frame of dt.

Steps:
1. Elements that close a loop participate; the rest carry no current
2. Participants are classified into adapters and solved adaptively
3. Real light bulbs and overloaded batteries trigger exactly one re-solve
4. Currents and dynamic states are written back onto the elements
5. Node voltages come from the solve; nodes on open branches are filled
   in by walking outward from known voltages
"""

from __future__ import annotations
import math

from ..config import SolverOptions, DEFAULT_OPTIONS
from ..dynamic import CircuitResult, TimestepSubdivisions
from ..logging import logger
from .adapters import Adapter, BatteryAdapter, ResistorAdapter, classify, build_dynamic_circuit
from .model import Circuit, CircuitElement, OHMIC_KINDS, is_open_switch, opposite_node


def light_bulb_resistance(voltage: float) -> float:
    """
    Resistance of a real (non-ohmic) bulb at the given voltage.

    R = 10 + 3 V / log2(V + 2), so R = 10 Ohms at V = 0.
    """
    voltage = abs(voltage)
    return 10.0 + 3.0 * voltage / math.log2(voltage + 2.0)


def _solve(adapters: list[Adapter], dt: float, options: SolverOptions) -> CircuitResult:
    circuit = build_dynamic_circuit(adapters, options)
    return circuit.solve_with_subdivisions(dt, TimestepSubdivisions(options))


def _correct(adapters: list[Adapter], result: CircuitResult,
             options: SolverOptions) -> tuple[list[Adapter], bool]:
    """Adapters with bulb and battery resistances adjusted, and whether any changed."""
    corrected: list[Adapter] = []
    needs_resolve = False
    for adapter in adapters:
        element = adapter.element
        if isinstance(adapter, ResistorAdapter) and element.kind == "light_bulb" and element.real:
            voltage = result.final_solution.voltage(adapter.key)
            resistance = light_bulb_resistance(voltage)
            adapter = adapter._replace(
                element=element._replace(resistance=resistance), resistance=resistance
            )
            needs_resolve = True
        elif isinstance(adapter, BatteryAdapter):
            threshold = options.battery_current_threshold
            current = result.time_average_current(adapter.key)
            if abs(current) > threshold:
                resistance = max(adapter.resistance, abs(element.voltage) / threshold)
                logger.debug(
                    "battery %s overloaded (%.3g A), internal resistance raised to %.3g Ohms",
                    adapter.key.index, current, resistance,
                )
                adapter = adapter._replace(resistance=resistance)
                needs_resolve = True
        corrected.append(adapter)
    return corrected, needs_resolve


def _propagate_voltages(circuit: Circuit, result: CircuitResult) -> dict[int, float]:
    """
    Node voltages for every node of the circuit.

    Solved nodes take the final sub-step's voltage. Others are reached by
    depth-first traversal from solved nodes: no drop across ohmic elements
    (no current flows), the source voltage across batteries and the last
    companion voltage across capacitors and inductors. Open switches are not
    crossed; anything unreachable stays at 0 V.
    """
    voltages: dict[int, float] = {}
    solved: list[int] = []
    unsolved: list[int] = []
    for node in circuit.nodes:
        if result.has_node(node):
            voltages[node] = result.node_voltage(node)
            solved.append(node)
        else:
            voltages[node] = 0.0
            unsolved.append(node)
    known = set(solved)

    def drop(element: CircuitElement, start: int) -> float:
        sign = 1.0 if start == element.node_a else -1.0
        if element.kind in OHMIC_KINDS:
            return 0.0
        if element.kind == "battery":
            return sign * element.voltage
        if element.kind in ("capacitor", "inductor"):
            return sign * element.mna_voltage_drop
        raise TypeError(f"Unknown circuit element type: {type(element).__name__}")

    visited: set[int] = set()
    for root in solved + unsolved:
        if root in visited:
            continue
        visited.add(root)
        stack = [root]
        while stack:
            node = stack.pop()
            for _, element in circuit.neighbors(node):
                if is_open_switch(element):
                    continue
                opposite = opposite_node(element, node)
                if opposite in visited:
                    continue
                if opposite not in known:
                    voltages[opposite] = voltages[node] + drop(element, node)
                    known.add(opposite)
                visited.add(opposite)
                stack.append(opposite)
    return voltages


def solve_circuit(circuit: Circuit, dt: float,
                  options: SolverOptions = DEFAULT_OPTIONS) -> Circuit:
    """
    Advance a circuit by one frame.

    Args:
        circuit: Caller circuit, including capacitor/inductor state from the
            previous frame
        dt: Frame length in seconds
        options: Solver settings

    Returns:
        New Circuit with element currents, dynamic states and node voltages

    Example:
        for _ in range(60):
            circuit = solve_circuit(circuit, 1 / 60)
    """
    participants = [i for i in range(len(circuit.elements)) if circuit.is_in_loop(i)]
    adapters = classify([circuit.elements[i] for i in participants], options)

    result = _solve(adapters, dt, options)
    adapters, needs_resolve = _correct(adapters, result, options)
    if needs_resolve:
        logger.debug("re-solving frame with corrected resistances")
        result = _solve(adapters, dt, options)

    # Non-participants, open switches included, carry no current
    elements = [e._replace(current=0.0) for e in circuit.elements]
    assert len(adapters) == len(participants), "open switches never participate"
    for i, adapter in zip(participants, adapters):
        elements[i] = adapter.apply_solution(result)

    solved = circuit._replace(elements=tuple(elements))
    return solved._replace(node_voltages=_propagate_voltages(solved, result))
