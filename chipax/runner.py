"""Compiled multi-cycle execution."""

from functools import partial

import jax
import jax.numpy as jnp

from chipax.state import EmulatorState
from chipax.emulator import step
from chipax.errors import raise_for_fault
from chipax.logging import fori_loop_with_progress


def run_cycle(state: EmulatorState, _):
    state = step(state)
    return state, state.display


@partial(jax.jit, static_argnums=1)
def run_n_cycles(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` cycles. Stepping stops having an effect after a fault."""
    return jax.lax.fori_loop(0, n, lambda _, state: step(state), state)


@partial(jax.jit, static_argnums=1)
def trace_cycles(state: EmulatorState, n: int) -> tuple[EmulatorState, jnp.ndarray]:
    """Run ``n`` cycles and return the display after each one, shape (n, 64, 32)."""
    return jax.lax.scan(run_cycle, state, length=n)


def run_n_cycles_with_progress(state: EmulatorState, n: int, desc: str = None) -> EmulatorState:
    """Same as ``run_n_cycles`` with a tqdm bar updated from inside the loop."""
    @fori_loop_with_progress(n, desc=desc)
    def body(_, state):
        return step(state)

    return jax.jit(lambda state: jax.lax.fori_loop(0, n, body, state))(state)


def run(state: EmulatorState, n: int, progress: bool = False) -> EmulatorState:
    """Run ``n`` cycles and raise the matching ``EmulatorError`` on a fault.

    Raises:
        ValueError: If ``n`` is negative
        EmulatorError: If the program faulted during the run; the
            exception's ``state`` is the frozen state at the fault
    """
    if n < 0:
        raise ValueError(f"Cycle count must be non-negative, got {n}")
    if n == 0:
        raise_for_fault(state)
        return state
    if progress:
        state = run_n_cycles_with_progress(state, n)
    else:
        state = run_n_cycles(state, n)
    raise_for_fault(state)
    return state
