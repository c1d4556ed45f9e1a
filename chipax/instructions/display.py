"""CHIP-8 display operations."""

import jax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, FLAG_REGISTER, FAULT_ADDRESS,
)
from chipax.memory import read_byte
from chipax.instructions.system import next_instruction, record_fault

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Pixels set by an N-row sprite at (VX, VY), wrapping around both screen edges."""
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    col_offset = (xx - sprite_x) % SCREEN_WIDTH
    row_offset = (yy - sprite_y) % SCREEN_HEIGHT
    in_sprite = (col_offset < 8) & (row_offset < instruction.n)

    # Rows outside the sprite are masked below, clamp their reads into memory
    addresses = jnp.minimum(jnp.astype(state.I, jnp.int32) + row_offset, MEMORY_SIZE - 1)
    sprite_bytes = jnp.astype(read_byte(state.memory, addresses), jnp.int32)
    bits = (sprite_bytes >> (7 - jnp.minimum(col_offset, 7))) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction):
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    def _draw(state):
        sprite = sprite_mask(state, instruction)
        lit = state.display != 0
        collision = jnp.any(lit & sprite)
        state = state.replace(
            display=jnp.astype(lit ^ sprite, jnp.uint8),
            display_changed=jnp.ones((), dtype=jnp.bool_),
            V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
        )
        return state, next_instruction(state)

    last_row = jnp.astype(state.I, jnp.int32) + instruction.n - 1
    out_of_range = (instruction.n > 0) & (last_row >= MEMORY_SIZE)

    return jax.lax.cond(
        out_of_range,
        lambda state: record_fault(state, instruction, FAULT_ADDRESS),
        _draw,
        state,
    )
