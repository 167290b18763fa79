"""PyTransient - per-frame transient solver for linear circuits, on JAX.

This package provides three layers:
    - mna: Modified Nodal Analysis of batteries, resistors and current sources
    - dynamic: trapezoidal companion models and adaptive sub-stepping
    - analysis: frame driver that solves a Circuit of caller elements

Usage:
    from pytransient.analysis import Circuit, Battery, Resistor, Capacitor, solve_circuit
    from pytransient.dynamic import DynamicCircuit, solve_with_adaptive_subdivision
    from pytransient.mna import MnaCircuit
"""

import jax

# Error thresholds of 1e-5 A need double precision
jax.config.update("jax_enable_x64", True)

__version__ = "0.1.0"
__all__ = ["mna", "dynamic", "analysis", "config", "__version__"]
