"""
Example: RC Charging, frame by frame

A 5 V battery charges a capacitor through a resistor. The circuit is solved
once per 1/60 s frame, the way an interactive simulation would drive it:
- Time constant: tau = R * C
- V_C(t) = V * (1 - exp(-t / tau))

Components used: Battery, Resistor, Capacitor, Switch
"""
import math
from pytransient.analysis import Circuit, Battery, Resistor, Capacitor, Switch, solve_circuit

FRAME = 1 / 60


def build_rc_circuit(V=5.0, R_val=10.0, C_val=1e-2, closed=True):
    """Build the RC charging circuit.

    Circuit:
        (0) --[Battery]-- (1) --[R]-- (2) --[Switch]-- (3)
         |                                             |
         +-------------------[C]-----------------------+
    """
    return Circuit((
        Battery(0, 1, V),
        Resistor(1, 2, R_val),
        Switch(2, 3, closed=closed),
        Capacitor(3, 0, C_val),
    ))


def simulate(circuit, n_frames):
    """Solve n_frames frames; return times, capacitor voltages and currents."""
    times, voltages, currents = [], [], []
    for i in range(n_frames):
        circuit = solve_circuit(circuit, FRAME)
        times.append((i + 1) * FRAME)
        voltages.append(circuit.node_voltage(3) - circuit.node_voltage(0))
        currents.append(circuit.elements[1].current)
    return circuit, times, voltages, currents


def main():
    print("=" * 60)
    print("RC Charging Example (1/60 s frames)")
    print("=" * 60)

    V, R_val, C_val = 5.0, 10.0, 1e-2
    tau = R_val * C_val

    print(f"\nCircuit Parameters:")
    print(f"   V = {V:.1f} V")
    print(f"   R = {R_val:.0f} ohm")
    print(f"   C = {C_val*1e3:.0f} mF")
    print(f"   tau = R*C = {tau*1000:.0f} ms")

    print("\n1. Charging")
    print("-" * 40)
    circuit = build_rc_circuit(V, R_val, C_val)
    circuit, times, voltages, currents = simulate(circuit, 30)
    for i in [5, 11, 17, 29]:
        expected = V * (1 - math.exp(-times[i] / tau))
        print(f"   t={times[i]*1000:6.1f} ms: V_C = {voltages[i]:.4f} V "
              f"(expected: {expected:.4f} V), I = {currents[i]*1000:.2f} mA")

    print("\n2. Switch opened: capacitor holds its charge")
    print("-" * 40)
    elements = list(circuit.elements)
    elements[2] = elements[2]._replace(closed=False)
    circuit = circuit._replace(elements=tuple(elements))
    circuit, times, voltages, currents = simulate(circuit, 10)
    print(f"   V_C after 10 more frames = {voltages[-1]:.4f} V, I = {currents[-1]:.1f} A")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
