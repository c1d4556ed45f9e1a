"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.constants import (
    ADDRESS_MASK, FONT_START, GLYPH_HEIGHT, MEMORY_SIZE, NUM_REGISTERS,
    FLAG_REGISTER, FAULT_ADDRESS,
)
from chipax.memory import read_byte, write_byte
from chipax.instructions.system import next_instruction, record_fault


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction):
    """FX07 - Set VX to delay timer value."""
    state = state.replace(V=state.V.at[instruction.x].set(state.delay_timer))
    return state, next_instruction(state)


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction):
    """FX15 - Set delay timer to VX."""
    state = state.replace(delay_timer=state.V[instruction.x])
    return state, next_instruction(state)


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction):
    """FX18 - Set sound timer to VX."""
    state = state.replace(sound_timer=state.V[instruction.x])
    return state, next_instruction(state)


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction):
    """FX1E - Add VX to I register, VF = range overflow past 0xFFF."""
    total = jnp.astype(state.I, jnp.int32) + state.V[instruction.x]
    overflow_flag = jnp.astype(total > ADDRESS_MASK, jnp.uint8)
    state = state.replace(
        I=jnp.astype(total & ADDRESS_MASK, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(overflow_flag)
    )
    return state, next_instruction(state)


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction):
    """FX0A - Wait for key press.

    Re-executes itself until a key is down, then stores the lowest pressed key.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        state = state.replace(V=state.V.at[instruction.x].set(pressed_key))
        return state, next_instruction(state)

    def wait_action(state):
        return state, state.pc

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction):
    """FX29 - Set I to location of sprite for digit VX."""
    if state.reference_quirks:
        digit = instruction.x
    else:
        digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.int32)
    font_address = FONT_START + digit * GLYPH_HEIGHT
    state = state.replace(I=jnp.astype(font_address, jnp.uint16))
    return state, next_instruction(state)


def index_out_of_range(state: EmulatorState, length) -> jnp.ndarray:
    """True when ``length`` bytes starting at I run past the end of memory."""
    return jnp.astype(state.I, jnp.int32) + length > MEMORY_SIZE


def guard_index_access(length_fn):
    """Fault with FAULT_ADDRESS instead of touching memory past the end."""
    def decorator(handler):
        def guarded(state: EmulatorState, instruction: DecodedInstruction):
            return jax.lax.cond(
                index_out_of_range(state, length_fn(instruction)),
                lambda state: record_fault(state, instruction, FAULT_ADDRESS),
                lambda state: handler(state, instruction),
                state,
            )
        guarded.__doc__ = handler.__doc__
        guarded.__name__ = handler.__name__
        return guarded
    return decorator


@guard_index_access(lambda instruction: 3)
def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction):
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + state.I
    state = state.replace(memory=write_byte(state.memory, indices, digits))
    return state, next_instruction(state)


@guard_index_access(lambda instruction: instruction.x + 1)
def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction):
    """FX55 - Store V0 through VX in memory starting at I, I unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = state.I + jnp.arange(NUM_REGISTERS)
    current_memory_values = read_byte(state.memory, base_indices)
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    state = state.replace(memory=write_byte(state.memory, base_indices, new_memory_values))
    return state, next_instruction(state)


@guard_index_access(lambda instruction: instruction.x + 1)
def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction):
    """FX65 - Load V0 through VX from memory starting at I, I unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = state.I + jnp.arange(NUM_REGISTERS)
    memory_values = read_byte(state.memory, base_indices)
    state = state.replace(V=jnp.where(register_mask, memory_values, state.V))
    return state, next_instruction(state)
