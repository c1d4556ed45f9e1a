"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chipax import create_state, load_program


@pytest.fixture
def fresh_state():
    """Provide a fresh interpreter state for each test."""
    return create_state()


@pytest.fixture
def quirks_state():
    """Provide a fresh state reproducing the reference interpreter quirks."""
    return create_state(reference_quirks=True)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V0=1, VF=2)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def program_state(program, **kwargs):
    """Fresh state with ``program`` bytes loaded at 0x200."""
    return load_program(create_state(**kwargs), bytes(program))
