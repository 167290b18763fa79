"""Frame-level readouts over the sub-steps of an adaptive solve."""

from __future__ import annotations
from typing import NamedTuple, Callable, TYPE_CHECKING

from ..mna import NodeId
from .elements import ElementKey
from .subdivisions import ResultSet

if TYPE_CHECKING:
    from .circuit import DynamicCircuitSolution
    from .state import DynamicState


class CircuitResult(NamedTuple):
    """
    ResultSet of DynamicStates with per-element readouts.

    Instantaneous values come from the final sub-step; time averages weight
    every sub-step by its dt.
    """
    result_set: ResultSet

    @property
    def final_state(self) -> DynamicState:
        return self.result_set.final_state

    @property
    def final_solution(self) -> DynamicCircuitSolution:
        return self.final_state.solution

    @property
    def sub_step_count(self) -> int:
        return self.result_set.sub_step_count

    @property
    def total_time(self) -> float:
        return self.result_set.total_time

    def _time_average(self, read: Callable[[DynamicCircuitSolution], float]) -> float:
        weighted = sum(read(step.state.solution) * step.dt for step in self.result_set.steps)
        return weighted / self.total_time

    def time_average_current(self, key: ElementKey) -> float:
        return self._time_average(lambda solution: solution.current(key))

    def time_average_voltage(self, key: ElementKey) -> float:
        return self._time_average(lambda solution: solution.voltage(key))

    def instantaneous_current(self, key: ElementKey) -> float:
        return self.final_solution.current(key)

    def instantaneous_voltage(self, key: ElementKey) -> float:
        return self.final_solution.voltage(key)

    def node_voltage(self, node: NodeId) -> float:
        return self.final_solution.node_voltage(node)

    def has_node(self, node: NodeId) -> bool:
        return self.final_solution.has_node(node)
