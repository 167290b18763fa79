"""
Modified Nodal Analysis for a linear network of batteries, resistors and
current sources.

An Equation is a sum of Terms equal to a number. A Term is a coefficient
times an unknown, either an UnknownVoltage (one per node) or an
UnknownCurrent (one per battery and per zero-resistance resistor). The
equations are stamped into a dense matrix and solved with JAX.
"""

from __future__ import annotations
import logging
from typing import NamedTuple, Callable, Union

import jax
import jax.numpy as jnp
from jax import Array

from ..logging import logger
from .elements import MnaElement, NodeId, BATTERY, RESISTOR
from .solution import MnaSolution


class UnknownVoltage(NamedTuple):
    """Unknown potential of a node."""
    node: NodeId

    def term_name(self) -> str:
        return f"V{self.node}"


class UnknownCurrent(NamedTuple):
    """Unknown current through the element at `index` of its kind's list."""
    kind: str
    index: int

    def term_name(self) -> str:
        return f"I_{self.kind}{self.index}"


Unknown = Union[UnknownVoltage, UnknownCurrent]


class Term(NamedTuple):
    """coefficient * variable, like 7x."""
    coefficient: float
    variable: Unknown

    def __str__(self) -> str:
        if self.coefficient == 1:
            prefix = ""
        elif self.coefficient == -1:
            prefix = "-"
        else:
            prefix = f"{self.coefficient}*"
        return prefix + self.variable.term_name()


class Equation(NamedTuple):
    """terms[0] + terms[1] + ... = rhs"""
    rhs: float
    terms: tuple[Term, ...]

    def stamp(self, row: int, a: list[list[float]], z: list[float],
              column_of: Callable[[Unknown], int]) -> None:
        """Enter this equation into row `row` of the system a x = z."""
        z[row] = self.rhs
        for term in self.terms:
            a[row][column_of(term.variable)] += term.coefficient

    def __str__(self) -> str:
        lhs = "+".join(str(t) for t in self.terms) or "0"
        return f"{lhs}={self.rhs}".replace("+-", "-")


@jax.jit
def _solve_dense(a: Array, z: Array) -> Array:
    return jnp.linalg.solve(a, z)


class MnaCircuit(NamedTuple):
    """
    Linear network ready to be solved (immutable).

    Example:
        circuit = MnaCircuit(
            batteries=(Battery(0, 1, 9.0),),
            resistors=(Resistor(1, 0, 3.0),),
        )
        solution = circuit.solve()
        solution.battery_current(0)  # 3.0
    """
    batteries: tuple[MnaElement, ...] = ()
    resistors: tuple[MnaElement, ...] = ()
    current_sources: tuple[MnaElement, ...] = ()

    @property
    def elements(self) -> tuple[MnaElement, ...]:
        return tuple(self.batteries) + tuple(self.resistors) + tuple(self.current_sources)

    @property
    def nodes(self) -> tuple[NodeId, ...]:
        """All nodes, in order of first appearance."""
        seen: dict[NodeId, None] = {}
        for element in self.elements:
            seen.setdefault(element.node_a)
            seen.setdefault(element.node_b)
        return tuple(seen)

    def _zero_resistance_indices(self) -> list[int]:
        return [i for i, r in enumerate(self.resistors) if r.value == 0]

    def unknown_currents(self) -> list[UnknownCurrent]:
        """One unknown per battery, then one per zero-resistance resistor."""
        unknowns = [UnknownCurrent(BATTERY, i) for i in range(len(self.batteries))]
        unknowns += [UnknownCurrent(RESISTOR, i) for i in self._zero_resistance_indices()]
        return unknowns

    def _adjacency(self) -> dict[NodeId, list[NodeId]]:
        adjacency: dict[NodeId, list[NodeId]] = {node: [] for node in self.nodes}
        for element in self.elements:
            adjacency[element.node_a].append(element.node_b)
            adjacency[element.node_b].append(element.node_a)
        return adjacency

    def connected_nodes(self, node: NodeId, adjacency: dict | None = None) -> list[NodeId]:
        """All nodes reachable from `node` through any element, `node` first."""
        if adjacency is None:
            adjacency = self._adjacency()
        visited = [node]
        seen = {node}
        i = 0
        while i < len(visited):
            for neighbor in adjacency[visited[i]]:
                if neighbor not in seen:
                    seen.add(neighbor)
                    visited.append(neighbor)
            i += 1
        return visited

    def reference_nodes(self) -> list[NodeId]:
        """First-discovered node of each connected component, pinned to 0 V."""
        adjacency = self._adjacency()
        references = []
        covered: set[NodeId] = set()
        for node in adjacency:
            if node not in covered:
                references.append(node)
                covered.update(self.connected_nodes(node, adjacency))
        return references

    def current_source_total(self, node: NodeId) -> float:
        """Net current driven out of `node` by current sources."""
        total = 0.0
        for source in self.current_sources:
            if source.node_b == node:
                total -= source.value
            if source.node_a == node:
                total += source.value
        return total

    def _kcl_terms(self) -> dict[NodeId, list[Term]]:
        """Per node, the terms for current entering through each element."""
        terms: dict[NodeId, list[Term]] = {node: [] for node in self.nodes}

        for i, battery in enumerate(self.batteries):
            unknown = UnknownCurrent(BATTERY, i)
            terms[battery.node_b].append(Term(1.0, unknown))
            terms[battery.node_a].append(Term(-1.0, unknown))

        for i, resistor in enumerate(self.resistors):
            if resistor.value == 0:
                unknown = UnknownCurrent(RESISTOR, i)
                terms[resistor.node_b].append(Term(1.0, unknown))
                terms[resistor.node_a].append(Term(-1.0, unknown))
            else:
                g = 1.0 / resistor.value
                va = UnknownVoltage(resistor.node_a)
                vb = UnknownVoltage(resistor.node_b)
                # (V_a - V_b) / R enters node_b and leaves node_a
                terms[resistor.node_b] += [Term(g, va), Term(-g, vb)]
                terms[resistor.node_a] += [Term(-g, va), Term(g, vb)]

        return terms

    def equations(self) -> list[Equation]:
        """The square system: references, KCL, batteries, ideal wires."""
        references = self.reference_nodes()
        equations = [
            Equation(0.0, (Term(1.0, UnknownVoltage(node)),)) for node in references
        ]

        # KCL at a reference node is implied by the others in its component
        kcl_terms = self._kcl_terms()
        for node in self.nodes:
            if node not in references:
                equations.append(
                    Equation(self.current_source_total(node), tuple(kcl_terms[node]))
                )

        for battery in self.batteries:
            equations.append(Equation(battery.value, (
                Term(1.0, UnknownVoltage(battery.node_b)),
                Term(-1.0, UnknownVoltage(battery.node_a)),
            )))

        for i in self._zero_resistance_indices():
            resistor = self.resistors[i]
            equations.append(Equation(0.0, (
                Term(1.0, UnknownVoltage(resistor.node_a)),
                Term(-1.0, UnknownVoltage(resistor.node_b)),
            )))

        return equations

    def solve(self) -> MnaSolution:
        """
        Solve for all node voltages and unknown currents.

        A singular system (degenerate topology, e.g. an isolated current
        source or two ideal wires in parallel) yields an all-zero solution
        instead of raising.
        """
        equations = self.equations()
        unknowns: list[Unknown] = [UnknownVoltage(node) for node in self.nodes]
        unknowns += self.unknown_currents()
        column = {unknown: i for i, unknown in enumerate(unknowns)}
        n = len(unknowns)
        assert len(equations) == n, f"{len(equations)} equations for {n} unknowns"

        if n == 0:
            return MnaSolution(self, {}, (), {})

        a = [[0.0] * n for _ in range(n)]
        z = [0.0] * n
        for row, equation in enumerate(equations):
            equation.stamp(row, a, z, column.__getitem__)

        x = _solve_dense(jnp.asarray(a), jnp.asarray(z))
        if not bool(jnp.all(jnp.isfinite(x))):
            logger.warning(
                "MNA system is singular (%d unknowns); substituting a zero solution",
                n,
            )
            x = jnp.zeros(n)
        values = x.tolist()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(self.describe(equations, unknowns, values))

        node_voltages = {node: values[column[UnknownVoltage(node)]] for node in self.nodes}
        battery_currents = tuple(
            values[column[UnknownCurrent(BATTERY, i)]] for i in range(len(self.batteries))
        )
        resistor_currents = {
            i: values[column[UnknownCurrent(RESISTOR, i)]]
            for i in self._zero_resistance_indices()
        }
        return MnaSolution(self, node_voltages, battery_currents, resistor_currents)

    def describe(self, equations: list[Equation] | None = None,
                 unknowns: list[Unknown] | None = None,
                 values: list[float] | None = None) -> str:
        """Human-readable dump of the circuit (and optionally its solve)."""
        lines = ["batteries:"]
        lines += [f"  {b}" for b in self.batteries]
        lines.append("resistors:")
        lines += [f"  {r}" for r in self.resistors]
        lines.append("current sources:")
        lines += [f"  {c}" for c in self.current_sources]
        lines.append("equations:")
        lines += [f"  {e}" for e in (equations if equations is not None else self.equations())]
        if unknowns is not None and values is not None:
            lines.append("solution:")
            lines += [f"  {u.term_name()}={v}" for u, v in zip(unknowns, values)]
        return "\n".join(lines)
