"""
Adaptive time-step subdivision by step doubling.

A step of dt is compared against two steps of dt/2. If the two results are
within error_threshold of each other the finer one is accepted, otherwise dt
is halved down to min_dt, the rejected half step serving as the next coarse
step. After an accepted step the next attempt doubles, clipped to the time
remaining.
"""

from __future__ import annotations
from typing import NamedTuple, Callable, Any

from ..config import SolverOptions, DEFAULT_OPTIONS
from ..logging import logger


class Steppable(NamedTuple):
    """How to advance a state and how far apart two states are."""
    update: Callable[[Any, float], Any]
    distance: Callable[[Any, Any], float]


class SubStep(NamedTuple):
    """An accepted state and the dt that produced it."""
    state: Any
    dt: float


class ResultSet(NamedTuple):
    """Ordered sub-steps of one frame; the dts sum to the frame's total time."""
    steps: tuple[SubStep, ...]

    @property
    def final_state(self) -> Any:
        return self.steps[-1].state

    @property
    def total_time(self) -> float:
        return sum(step.dt for step in self.steps)

    @property
    def sub_step_count(self) -> int:
        return len(self.steps)


class TimestepSubdivisions:
    """
    Integrates a Steppable over a frame with adaptive sub-steps.

    Example:
        subdivisions = TimestepSubdivisions(SolverOptions(error_threshold=1e-4))
        result_set = subdivisions.step_in_time_with_history(state, steppable, 1 / 60)
    """

    def __init__(self, options: SolverOptions = DEFAULT_OPTIONS):
        assert options.min_dt > 0, "min_dt must be positive"
        self.options = options

    def step_in_time_with_history(self, state, steppable: Steppable, total_time: float) -> ResultSet:
        assert total_time > 0, f"total time must be positive, got {total_time}"

        if total_time == self.options.paused_dt:
            steps = (SubStep(steppable.update(state, total_time), total_time),)
            logger.debug("paused frame: 1 unchecked sub-step of %g s", total_time)
            return ResultSet(steps)

        steps: list[SubStep] = []
        elapsed = 0.0
        attempt = total_time
        while elapsed < total_time:
            remaining = total_time - elapsed
            step = self._search(state, steppable, min(attempt, remaining), remaining, None)
            steps.append(step)
            state = step.state
            elapsed += step.dt
            if step.dt >= remaining:
                break
            attempt = 2.0 * step.dt

        logger.debug("frame of %g s took %d sub-steps", total_time, len(steps))
        return ResultSet(tuple(steps))

    def _search(self, state, steppable: Steppable, dt: float, remaining: float,
                coarse: Any) -> SubStep:
        """
        Accepted sub-step starting at state, trying dt first.

        coarse, when given, is state already advanced by dt in one step.
        """
        min_dt = self.options.min_dt
        if dt <= min_dt or not self.options.search_time_step:
            step = min(min_dt, remaining)
            return SubStep(steppable.update(state, step), step)

        if coarse is None:
            coarse = steppable.update(state, dt)
        half_step = steppable.update(state, dt / 2.0)
        fine = steppable.update(half_step, dt / 2.0)

        if steppable.distance(coarse, fine) < self.options.error_threshold:
            return SubStep(fine, dt)
        return self._search(state, steppable, dt / 2.0, remaining, half_step)
