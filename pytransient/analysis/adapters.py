"""
Adapters between caller elements and the dynamic-circuit solver.

classify() resolves every participating caller element once into one of
four adapter variants. Each adapter knows how to build its solver element
and how to read its results back out of a CircuitResult.
"""

from __future__ import annotations
from typing import NamedTuple, Union

from ..config import SolverOptions, DEFAULT_OPTIONS, clamp_magnitude
from ..dynamic import (
    CircuitResult, DynamicCircuit, DynamicCapacitor, DynamicElementState,
    DynamicInductor, ElementKey, ResistiveBattery, BATTERY, CAPACITOR, INDUCTOR, RESISTOR,
)
from ..mna import Resistor as MnaResistor
from .model import CircuitElement, OHMIC_KINDS


class BatteryAdapter(NamedTuple):
    element: CircuitElement
    key: ElementKey
    resistance: float

    def to_dynamic(self) -> ResistiveBattery:
        e = self.element
        return ResistiveBattery(e.node_a, e.node_b, e.voltage, self.resistance)

    def apply_solution(self, result: CircuitResult) -> CircuitElement:
        return self.element._replace(current=result.time_average_current(self.key))


class ResistorAdapter(NamedTuple):
    """Any ohmic element: resistor, wire, closed switch, fuse, ammeter, bulb."""
    element: CircuitElement
    key: ElementKey
    resistance: float

    def to_dynamic(self):
        return MnaResistor(self.element.node_a, self.element.node_b, self.resistance)

    def apply_solution(self, result: CircuitResult) -> CircuitElement:
        return self.element._replace(current=result.time_average_current(self.key))


class CapacitorAdapter(NamedTuple):
    element: CircuitElement
    key: ElementKey
    clamp: float

    def to_dynamic(self) -> DynamicCapacitor:
        e = self.element
        state = DynamicElementState(e.mna_voltage_drop, e.mna_current)
        return DynamicCapacitor(e.node_a, e.node_b, e.capacitance, state)

    def apply_solution(self, result: CircuitResult) -> CircuitElement:
        return self.element._replace(
            current=result.time_average_current(self.key),
            mna_current=clamp_magnitude(result.instantaneous_current(self.key), self.clamp),
            mna_voltage_drop=clamp_magnitude(result.instantaneous_voltage(self.key), self.clamp),
        )


class InductorAdapter(NamedTuple):
    element: CircuitElement
    key: ElementKey
    clamp: float

    def to_dynamic(self) -> DynamicInductor:
        e = self.element
        state = DynamicElementState(e.mna_voltage_drop, e.mna_current)
        return DynamicInductor(e.node_a, e.node_b, e.inductance, state)

    def apply_solution(self, result: CircuitResult) -> CircuitElement:
        return self.element._replace(
            current=result.time_average_current(self.key),
            mna_current=clamp_magnitude(result.instantaneous_current(self.key), self.clamp),
            mna_voltage_drop=clamp_magnitude(result.instantaneous_voltage(self.key), self.clamp),
        )


Adapter = Union[BatteryAdapter, ResistorAdapter, CapacitorAdapter, InductorAdapter]


def classify(
    elements: list[CircuitElement], options: SolverOptions = DEFAULT_OPTIONS
) -> list[Adapter]:
    """
    Wrap participating caller elements in adapters.

    ElementKeys are handed out per kind in the order the elements are given.
    Open switches carry no current and get no adapter. Zero-resistance
    ohmic elements get options.minimum_resistance so Ohm's law stays usable.

    Raises:
        TypeError: for an element kind the solver does not know
    """
    adapters: list[Adapter] = []
    counts = {BATTERY: 0, RESISTOR: 0, CAPACITOR: 0, INDUCTOR: 0}

    def next_key(kind: str) -> ElementKey:
        key = ElementKey(kind, counts[kind])
        counts[kind] += 1
        return key

    for element in elements:
        kind = getattr(element, "kind", None)
        if kind == "battery":
            adapters.append(
                BatteryAdapter(element, next_key(BATTERY), element.internal_resistance)
            )
        elif kind == "switch" and not element.closed:
            continue
        elif kind in OHMIC_KINDS:
            resistance = element.resistance or options.minimum_resistance
            adapters.append(ResistorAdapter(element, next_key(RESISTOR), resistance))
        elif kind == "capacitor":
            adapters.append(
                CapacitorAdapter(element, next_key(CAPACITOR), options.clamp_magnitude)
            )
        elif kind == "inductor":
            adapters.append(
                InductorAdapter(element, next_key(INDUCTOR), options.clamp_magnitude)
            )
        else:
            raise TypeError(f"Unknown circuit element type: {type(element).__name__}")
    return adapters


def build_dynamic_circuit(
    adapters: list[Adapter], options: SolverOptions = DEFAULT_OPTIONS
) -> DynamicCircuit:
    """DynamicCircuit whose element positions match the adapters' keys."""
    def of_kind(kind: str):
        selected = sorted((a for a in adapters if a.key.kind == kind), key=lambda a: a.key.index)
        return tuple(a.to_dynamic() for a in selected)

    return DynamicCircuit(
        resistors=of_kind(RESISTOR),
        batteries=of_kind(BATTERY),
        capacitors=of_kind(CAPACITOR),
        inductors=of_kind(INDUCTOR),
        options=options,
    )
