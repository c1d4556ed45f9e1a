"""Main CHIP-8 interpreter: fetch, decode, execute."""

import jax
import jax.lax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Operation, decode
from chipax.constants import (
    PROGRAM_START, MEMORY_SIZE, INSTRUCTION_SIZE, NUM_KEYS, FAULT_NONE, FAULT_ADDRESS,
)
from chipax.memory import load_block, read_word
from chipax.instructions.system import (
    no_op, execute_invalid, execute_clear_screen, execute_return, record_fault,
)
from chipax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_jump_with_offset_reference, execute_skip_if_key_pressed,
    execute_skip_if_key_not_pressed,
)
from chipax.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor,
    execute_alu_add, execute_alu_sub_xy, execute_alu_shift_right,
    execute_alu_sub_yx, execute_alu_shift_left,
)
from chipax.instructions.registers import execute_set, execute_add, execute_set_index, execute_random
from chipax.instructions.display import execute_display
from chipax.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)


def instruction_handlers(reference_quirks: bool) -> list:
    """Handler table indexed by ``Operation``."""
    handlers = {
        Operation.CLEAR_SCREEN: execute_clear_screen,
        Operation.RETURN: execute_return,
        Operation.SYSTEM_CALL: no_op,
        Operation.JUMP: execute_jump,
        Operation.CALL: execute_call,
        Operation.SKIP_IF_EQUAL_IMMEDIATE: execute_skip_if_equal_immediate,
        Operation.SKIP_IF_NOT_EQUAL_IMMEDIATE: execute_skip_if_not_equal_immediate,
        Operation.SKIP_IF_EQUAL_REGISTER: execute_skip_if_equal_register,
        Operation.LOAD_IMMEDIATE: execute_set,
        Operation.ADD_IMMEDIATE: execute_add,
        Operation.MOVE: execute_alu_set,
        Operation.OR: execute_alu_or,
        Operation.AND: execute_alu_and,
        Operation.XOR: execute_alu_xor,
        Operation.ADD_REGISTER: execute_alu_add,
        Operation.SUBTRACT: execute_alu_sub_xy,
        Operation.SHIFT_RIGHT: execute_alu_shift_right,
        Operation.SUBTRACT_REVERSE: execute_alu_sub_yx,
        Operation.SHIFT_LEFT: execute_alu_shift_left,
        Operation.SKIP_IF_NOT_EQUAL_REGISTER: execute_skip_if_not_equal_register,
        Operation.LOAD_INDEX: execute_set_index,
        Operation.JUMP_OFFSET: (
            execute_jump_with_offset_reference if reference_quirks else execute_jump_with_offset
        ),
        Operation.RANDOM: execute_random,
        Operation.DRAW: execute_display,
        Operation.SKIP_IF_KEY_PRESSED: execute_skip_if_key_pressed,
        Operation.SKIP_IF_KEY_NOT_PRESSED: execute_skip_if_key_not_pressed,
        Operation.LOAD_DELAY_TIMER: execute_get_delay_timer,
        Operation.WAIT_FOR_KEY: execute_wait_for_key,
        Operation.SET_DELAY_TIMER: execute_set_delay_timer,
        Operation.SET_SOUND_TIMER: execute_set_sound_timer,
        Operation.ADD_TO_INDEX: execute_add_to_index,
        Operation.LOAD_GLYPH: execute_font_character,
        Operation.STORE_BCD: execute_bcd_conversion,
        Operation.STORE_REGISTERS: execute_store_registers,
        Operation.LOAD_REGISTERS: execute_load_registers,
        Operation.INVALID: execute_invalid,
    }
    return [handlers[operation] for operation in Operation]


def execute(state: EmulatorState, instruction) -> EmulatorState:
    """Execute a single CHIP-8 instruction located at ``state.pc``.

    The handler's next program counter is applied afterwards: PC + 2, PC + 4
    for a taken skip, or an absolute jump target.
    """
    decoded_instruction = decode(instruction)

    state, next_pc = jax.lax.switch(
        decoded_instruction.operation,
        instruction_handlers(state.reference_quirks),
        state, decoded_instruction
    )
    return state.replace(pc=next_pc)


def fetch(state: EmulatorState) -> jnp.ndarray:
    """Fetch the instruction word at the program counter."""
    return read_word(state.memory, state.pc)


def tick_delay_timer(state: EmulatorState) -> EmulatorState:
    """Decrement the delay timer once, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer)
    )


def _cycle(state: EmulatorState) -> EmulatorState:
    def _run(state):
        instruction = fetch(state)
        state = tick_delay_timer(state)
        return execute(state, instruction)

    def _fetch_fault(state):
        state, _ = record_fault(state, decode(0), FAULT_ADDRESS)
        return state

    return jax.lax.cond(
        jnp.astype(state.pc, jnp.int32) > MEMORY_SIZE - INSTRUCTION_SIZE,
        _fetch_fault,
        _run,
        state,
    )


def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch / tick / decode / execute cycle.

    A faulted state is returned unchanged.
    """
    return jax.lax.cond(state.fault == FAULT_NONE, _cycle, lambda state: state, state)


def load_program(state: EmulatorState, program) -> EmulatorState:
    """Copy program bytes into memory at 0x200, truncating at the end of memory."""
    return state.replace(memory=load_block(state.memory, PROGRAM_START, program))


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def set_keys(state: EmulatorState, keys) -> EmulatorState:
    """Replace the keypad snapshot with 16 pressed/released flags."""
    keypad = jnp.asarray(keys, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key flags, got shape {keypad.shape}")
    return state.replace(keypad=keypad)


def acknowledge_display(state: EmulatorState) -> EmulatorState:
    """Clear the display-changed flag once the consumer has read the display."""
    return state.replace(display_changed=jnp.zeros((), dtype=jnp.bool_))
