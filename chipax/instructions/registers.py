"""CHIP-8 register load, add, index and random instructions."""

import jax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.instructions.system import next_instruction


def execute_set(state: EmulatorState, instruction: DecodedInstruction):
    """6XNN - Set VX = NN."""
    state = state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))
    return state, next_instruction(state)


def execute_add(state: EmulatorState, instruction: DecodedInstruction):
    """7XNN - Add NN to VX, wrapping, VF untouched."""
    state = state.replace(V=state.V.at[instruction.x].add(jnp.astype(instruction.nn, jnp.uint8)))
    return state, next_instruction(state)


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction):
    """ANNN - Set I = NNN."""
    state = state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))
    return state, next_instruction(state)


def execute_random(state: EmulatorState, instruction: DecodedInstruction):
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    masked = jnp.astype(random_value & instruction.nn, jnp.uint8)
    state = state.replace(V=state.V.at[instruction.x].set(masked), rng=key)
    return state, next_instruction(state)
