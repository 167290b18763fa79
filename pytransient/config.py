"""Default solver configuration for pytransient.

This module centralizes the numeric constants used by the solving core.
All of them can be overridden per call through SolverOptions.
"""

from __future__ import annotations
from typing import NamedTuple

# Smallest sub-step the adaptive integrator may take (s). Hard floor.
MIN_DT = 1e-5

# Max Euclidean distance between coarse and fine dynamic-element currents (A)
ERROR_THRESHOLD = 1e-5

# Frame size used while the simulation clock is paused (s). Never subdivided.
PAUSED_DT = 1e-6

# Series leakage resistor in every capacitor companion (Ohms)
CAPACITOR_RESISTANCE = 1e-4

# Substituted for zero-resistance ohmic elements in the frame driver (Ohms)
MINIMUM_RESISTANCE = 1.1e-10

# Time-averaged battery current above which the battery is re-solved (A)
BATTERY_CURRENT_THRESHOLD = 1000.0

# Persisted dynamic-element values are clamped to this magnitude
CLAMP_MAGNITUDE = 1e20


class SolverOptions(NamedTuple):
    """
    Immutable bundle of solver settings.

    Example:
        opts = SolverOptions(error_threshold=1e-6)
        result = solve_circuit(circuit, 1 / 60, opts)
    """
    min_dt: float = MIN_DT
    error_threshold: float = ERROR_THRESHOLD
    paused_dt: float = PAUSED_DT
    search_time_step: bool = True
    capacitor_resistance: float = CAPACITOR_RESISTANCE
    minimum_resistance: float = MINIMUM_RESISTANCE
    battery_current_threshold: float = BATTERY_CURRENT_THRESHOLD
    clamp_magnitude: float = CLAMP_MAGNITUDE


DEFAULT_OPTIONS = SolverOptions()


def clamp_magnitude(value: float, magnitude: float = CLAMP_MAGNITUDE) -> float:
    """Clamp value into [-magnitude, magnitude], keeping its sign."""
    assert magnitude >= 0, "magnitude should be non-negative"
    if abs(value) > magnitude:
        return magnitude if value > 0 else -magnitude
    return value
