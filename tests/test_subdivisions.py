"""
Test: adaptive time-step subdivision.

This validates:
- Sub-step dts always sum to the frame length
- min_dt is a hard floor and halving stops there
- Doubling after acceptance, search disabled, paused frames
- The current spike of an ideal battery charging a capacitor is resolved
- Results are deterministic
"""
import math
import pytest

DT = 1 / 60


def decay_steppable():
    """x' = -x with one trapezoidal step per update; distance is |a - b|."""
    from pytransient.dynamic import Steppable

    return Steppable(
        update=lambda x, dt: x * (1 - dt / 2) / (1 + dt / 2),
        distance=lambda a, b: abs(a - b),
    )


class TestToySteppable:
    """Subdivision logic on a scalar ODE with exactly representable times."""

    def test_steps_sum_to_total(self):
        from pytransient.config import SolverOptions
        from pytransient.dynamic import TimestepSubdivisions

        subdivisions = TimestepSubdivisions(SolverOptions(min_dt=1e-3, error_threshold=1e-6))
        result_set = subdivisions.step_in_time_with_history(1.0, decay_steppable(), 1.0)

        assert result_set.total_time == pytest.approx(1.0, abs=1e-12)
        assert result_set.sub_step_count > 1
        assert result_set.final_state == pytest.approx(math.exp(-1.0), abs=1e-4)

    def test_min_dt_floor(self):
        from pytransient.config import SolverOptions
        from pytransient.dynamic import TimestepSubdivisions

        # threshold 0 can never be met, so every step lands on the floor
        options = SolverOptions(min_dt=0.125, error_threshold=0.0)
        result_set = TimestepSubdivisions(options).step_in_time_with_history(
            1.0, decay_steppable(), 1.0
        )

        assert [s.dt for s in result_set.steps] == [0.125] * 8

    def test_floor_clipped_to_remaining_time(self):
        from pytransient.config import SolverOptions
        from pytransient.dynamic import TimestepSubdivisions

        options = SolverOptions(min_dt=0.25, error_threshold=0.0)
        result_set = TimestepSubdivisions(options).step_in_time_with_history(
            1.0, decay_steppable(), 0.625
        )

        assert [s.dt for s in result_set.steps] == [0.25, 0.25, 0.125]
        assert result_set.total_time == 0.625

    def test_search_disabled_uses_min_dt(self):
        from pytransient.config import SolverOptions
        from pytransient.dynamic import TimestepSubdivisions

        options = SolverOptions(min_dt=0.25, error_threshold=1e9, search_time_step=False)
        result_set = TimestepSubdivisions(options).step_in_time_with_history(
            1.0, decay_steppable(), 1.0
        )

        assert [s.dt for s in result_set.steps] == [0.25] * 4

    def test_huge_threshold_takes_one_step(self):
        from pytransient.config import SolverOptions
        from pytransient.dynamic import TimestepSubdivisions

        options = SolverOptions(error_threshold=1e9)
        result_set = TimestepSubdivisions(options).step_in_time_with_history(
            1.0, decay_steppable(), DT
        )

        assert result_set.sub_step_count == 1
        assert result_set.steps[0].dt == DT

    def test_accepted_step_doubles(self):
        from pytransient.dynamic import Steppable, TimestepSubdivisions
        from pytransient.config import SolverOptions

        # state is (end time, last dt); steps longer than 0.25 are rejected
        # until t = 0.25, anything is accepted afterwards
        def update(state, dt):
            return (state[0] + dt, dt)

        def distance(coarse, fine):
            end, dt = coarse
            return 0.0 if dt <= 0.25 or end - dt >= 0.25 else 1.0

        steppable = Steppable(update=update, distance=distance)
        options = SolverOptions(min_dt=1e-3, error_threshold=0.5)
        result_set = TimestepSubdivisions(options).step_in_time_with_history((0.0, 0.0), steppable, 1.0)

        assert [s.dt for s in result_set.steps] == [0.25, 0.5, 0.25]
        assert result_set.total_time == 1.0

    def test_paused_frame_is_single_step(self):
        from pytransient.config import PAUSED_DT
        from pytransient.dynamic import TimestepSubdivisions

        result_set = TimestepSubdivisions().step_in_time_with_history(
            1.0, decay_steppable(), PAUSED_DT
        )
        assert result_set.sub_step_count == 1
        assert result_set.steps[0].dt == PAUSED_DT

    def test_total_time_must_be_positive(self):
        from pytransient.dynamic import TimestepSubdivisions

        with pytest.raises(AssertionError):
            TimestepSubdivisions().step_in_time_with_history(1.0, decay_steppable(), 0.0)


def charging_circuit():
    """Ideal 9 V battery straight across an uncharged 0.1 F capacitor."""
    from pytransient.dynamic import DynamicCircuit, ResistiveBattery, DynamicCapacitor

    return DynamicCircuit(
        batteries=(ResistiveBattery(0, 1, 9.0, 0.0),),
        capacitors=(DynamicCapacitor(1, 0, 0.1),),
    )


class TestCircuitSubdivision:

    def test_sum_of_dts_is_frame(self):
        from pytransient.dynamic import solve_with_adaptive_subdivision

        result = solve_with_adaptive_subdivision(charging_circuit, DT)
        assert result.total_time == pytest.approx(DT, abs=1e-12)
        assert all(s.dt > 0 for s in result.result_set.steps)

    def test_min_dt_is_respected(self):
        from pytransient.config import MIN_DT
        from pytransient.dynamic import solve_with_adaptive_subdivision

        result = solve_with_adaptive_subdivision(charging_circuit(), DT)
        steps = result.result_set.steps
        # only the last step may be clipped below the floor
        assert all(s.dt >= MIN_DT * (1 - 1e-9) for s in steps[:-1])

    def test_current_spike_is_resolved(self):
        from pytransient.dynamic import ElementKey, BATTERY, solve_with_adaptive_subdivision

        key = ElementKey(BATTERY, 0)
        result = solve_with_adaptive_subdivision(charging_circuit, DT)
        first = result.result_set.steps[0].state.solution.current(key)
        average = result.time_average_current(key)

        assert result.sub_step_count > 1
        assert average > 0
        assert first > 100 * average

    def test_single_substep_without_error_check(self):
        from pytransient.config import SolverOptions
        from pytransient.dynamic import (
            ElementKey, BATTERY, solve_with_adaptive_subdivision, solve_one_substep,
        )

        result = solve_with_adaptive_subdivision(
            charging_circuit, DT, SolverOptions(error_threshold=1e9)
        )
        assert result.sub_step_count == 1
        assert result.result_set.steps[0].dt == DT
        # the accepted state is the fine one: two half steps
        key = ElementKey(BATTERY, 0)
        fine = solve_one_substep(charging_circuit().update(DT / 2), DT / 2)
        assert result.final_solution.current(key) == pytest.approx(fine.current(key))

    def test_deterministic(self):
        from pytransient.dynamic import solve_with_adaptive_subdivision

        a = solve_with_adaptive_subdivision(charging_circuit, DT)
        b = solve_with_adaptive_subdivision(charging_circuit, DT)
        assert [s.dt for s in a.result_set.steps] == [s.dt for s in b.result_set.steps]
        assert a.final_state.circuit == b.final_state.circuit

    def test_distance_of_circuit_without_memory_is_zero(self):
        from pytransient.mna import Resistor
        from pytransient.dynamic import (
            DynamicCircuit, DynamicState, ResistiveBattery, euclidean_distance,
        )

        circuit = DynamicCircuit(
            resistors=(Resistor(1, 0, 3.0),),
            batteries=(ResistiveBattery(0, 1, 9.0, 0.0),),
        )
        state = DynamicState(circuit).update(DT)
        assert state.characteristic_array() == ()
        assert euclidean_distance(state, state.update(DT)) == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
