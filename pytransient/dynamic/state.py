"""DynamicState: the Steppable wrapper around a DynamicCircuit."""

from __future__ import annotations
from typing import NamedTuple, Callable, Union

import jax.numpy as jnp

from ..config import SolverOptions, DEFAULT_OPTIONS
from .circuit import DynamicCircuit, DynamicCircuitSolution
from .subdivisions import Steppable, TimestepSubdivisions
from .result import CircuitResult


class DynamicState(NamedTuple):
    """
    A circuit together with the solution that produced it (immutable).

    solution is None only for the initial state of a frame.
    """
    circuit: DynamicCircuit
    solution: DynamicCircuitSolution | None = None

    def update(self, dt: float) -> DynamicState:
        solution = self.circuit.solve_propagate(dt)
        return DynamicState(self.circuit.update_circuit(solution), solution)

    def characteristic_array(self) -> tuple[float, ...]:
        """Capacitor currents then inductor currents of the updated circuit."""
        return (
            tuple(c.state.current for c in self.circuit.capacitors)
            + tuple(ind.state.current for ind in self.circuit.inductors)
        )


def euclidean_distance(a: DynamicState, b: DynamicState) -> float:
    x = jnp.asarray(a.characteristic_array(), dtype=float)
    y = jnp.asarray(b.characteristic_array(), dtype=float)
    assert x.shape == y.shape, "states must describe the same circuit"
    return float(jnp.linalg.norm(x - y))


DYNAMIC_STEPPABLE = Steppable(
    update=lambda state, dt: state.update(dt),
    distance=euclidean_distance,
)


def solve_one_substep(circuit: DynamicCircuit, dt: float) -> DynamicCircuitSolution:
    """Companion-model solve of a single fixed step, no subdivision."""
    return circuit.solve_propagate(dt)


def solve_with_adaptive_subdivision(
    circuit_factory: Union[DynamicCircuit, Callable[[], DynamicCircuit]],
    dt: float,
    options: SolverOptions = DEFAULT_OPTIONS,
) -> CircuitResult:
    """
    Advance a circuit over a frame of dt with adaptive sub-stepping.

    Args:
        circuit_factory: DynamicCircuit, or a zero-argument callable building one
        dt: Frame length in seconds
        options: Solver settings

    Returns:
        CircuitResult covering every accepted sub-step
    """
    circuit = circuit_factory() if callable(circuit_factory) else circuit_factory
    subdivisions = TimestepSubdivisions(options)
    result_set = subdivisions.step_in_time_with_history(DynamicState(circuit), DYNAMIC_STEPPABLE, dt)
    return CircuitResult(result_set)
