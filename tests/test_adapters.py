"""
Test: classification of caller elements into solver adapters.

This validates:
- One adapter variant per element family, keys handed out per kind
- Zero-resistance ohmic elements get the minimum resistance
- Open switches get no adapter, unknown element types are rejected
- Companion states travel from caller elements into the DynamicCircuit
"""
import pytest


def test_keys_per_kind_in_order():
    from pytransient.dynamic import ElementKey, BATTERY, RESISTOR, CAPACITOR, INDUCTOR
    from pytransient.analysis import (
        Battery, Resistor, Wire, Capacitor, Inductor, classify,
        BatteryAdapter, ResistorAdapter, CapacitorAdapter, InductorAdapter,
    )

    adapters = classify([
        Resistor(1, 2, 5.0),
        Battery(0, 1, 9.0),
        Capacitor(2, 3, 1e-3),
        Wire(3, 4),
        Inductor(4, 0, 1.0),
        Battery(0, 5, 1.5),
    ])

    assert [type(a) for a in adapters] == [
        ResistorAdapter, BatteryAdapter, CapacitorAdapter,
        ResistorAdapter, InductorAdapter, BatteryAdapter,
    ]
    assert [a.key for a in adapters] == [
        ElementKey(RESISTOR, 0),
        ElementKey(BATTERY, 0),
        ElementKey(CAPACITOR, 0),
        ElementKey(RESISTOR, 1),
        ElementKey(INDUCTOR, 0),
        ElementKey(BATTERY, 1),
    ]


def test_zero_resistance_gets_minimum():
    from pytransient.config import MINIMUM_RESISTANCE, SolverOptions
    from pytransient.analysis import Wire, Fuse, SeriesAmmeter, Switch, Resistor, classify

    elements = [Wire(0, 1), Fuse(1, 2), SeriesAmmeter(2, 3), Switch(3, 4, closed=True), Resistor(4, 0, 0.0)]
    assert all(a.resistance == MINIMUM_RESISTANCE for a in classify(elements))

    options = SolverOptions(minimum_resistance=1e-6)
    assert all(a.resistance == 1e-6 for a in classify(elements, options))

    assert classify([Resistor(0, 1, 7.0)])[0].resistance == 7.0


def test_open_switch_has_no_adapter():
    from pytransient.analysis import Switch, classify

    assert classify([Switch(0, 1, closed=False)]) == []


def test_unknown_element_type():
    from pytransient.analysis import classify

    class Diode:
        kind = "diode"
        node_a = 0
        node_b = 1

    with pytest.raises(TypeError):
        classify([Diode()])
    with pytest.raises(TypeError):
        classify([(0, 1, 5.0)])


def test_battery_internal_resistance_is_kept():
    from pytransient.analysis import Battery, classify, build_dynamic_circuit

    adapters = classify([Battery(0, 1, 9.0, internal_resistance=0.5)])
    circuit = build_dynamic_circuit(adapters)

    assert adapters[0].resistance == 0.5
    assert circuit.batteries[0].resistance == 0.5
    assert circuit.batteries[0].voltage == 9.0


def test_dynamic_state_from_caller_elements():
    from pytransient.dynamic import DynamicElementState
    from pytransient.analysis import Capacitor, Inductor, Resistor, classify, build_dynamic_circuit

    adapters = classify([
        Capacitor(1, 0, 1e-3, mna_voltage_drop=-2.0, mna_current=0.1),
        Resistor(1, 2, 3.0),
        Inductor(2, 0, 0.5, mna_voltage_drop=1.0, mna_current=-0.25),
    ])
    circuit = build_dynamic_circuit(adapters)

    assert circuit.capacitors[0].state == DynamicElementState(-2.0, 0.1)
    assert circuit.capacitors[0].capacitance == 1e-3
    assert circuit.inductors[0].state == DynamicElementState(1.0, -0.25)
    assert circuit.resistors[0].value == 3.0


def test_apply_solution_writes_back():
    from pytransient.dynamic import solve_with_adaptive_subdivision
    from pytransient.analysis import Battery, Resistor, Capacitor, classify, build_dynamic_circuit

    adapters = classify([Battery(0, 1, 5.0), Resistor(1, 2, 10.0), Capacitor(2, 0, 1e-2)])
    result = solve_with_adaptive_subdivision(build_dynamic_circuit(adapters), 1 / 60)

    battery, resistor, capacitor = (a.apply_solution(result) for a in adapters)
    assert battery.current == pytest.approx(resistor.current, abs=1e-9)
    assert capacitor.current == pytest.approx(resistor.current, abs=1e-9)
    assert capacitor.mna_current == pytest.approx(result.instantaneous_current(adapters[2].key))
    assert capacitor.mna_voltage_drop < 0
    # input records are not modified
    assert adapters[2].element.mna_current == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
