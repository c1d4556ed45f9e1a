"""CHIP-8 control flow instructions."""

import jax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.constants import ADDRESS_MASK, FAULT_ADDRESS, FAULT_STACK_OVERFLOW
from chipax.stack import push, is_full
from chipax.instructions.system import (
    jump_to, next_instruction, skip_if, record_fault,
)


def execute_jump(state: EmulatorState, instruction: DecodedInstruction):
    """1NNN - Jump to address NNN."""
    return state, jump_to(instruction.nnn)


def execute_call(state: EmulatorState, instruction: DecodedInstruction):
    """2NNN - Call subroutine at NNN."""
    def _call(state):
        state = state.replace(stack=push(state.stack, next_instruction(state)))
        return execute_jump(state, instruction)

    return jax.lax.cond(
        is_full(state.stack),
        lambda state: record_fault(state, instruction, FAULT_STACK_OVERFLOW),
        _call,
        state,
    )


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction):
        return state, skip_if(state, condition_fn(state, instruction))
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction):
    """BNNN - Jump to address NNN + V0, address fault past 0xFFF."""
    target = instruction.nnn + jnp.astype(state.V[0], jnp.int32)
    return jax.lax.cond(
        target > ADDRESS_MASK,
        lambda state: record_fault(state, instruction, FAULT_ADDRESS),
        lambda state: (state, jump_to(target)),
        state,
    )


def execute_jump_with_offset_reference(state: EmulatorState, instruction: DecodedInstruction):
    """BNNN - Reference behaviour: I = NNN + V0, no jump."""
    address = instruction.nnn + jnp.astype(state.V[0], jnp.int32)
    state = state.replace(I=jnp.astype(address, jnp.uint16))
    return state, next_instruction(state)


def key_index(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Key tested by EX9E/EXA1: VX, or the register slot X under reference quirks."""
    if state.reference_quirks:
        return instruction.x
    return state.V[instruction.x] & 0xF


execute_skip_if_key_pressed = make_skip_instruction(
    lambda state, inst: state.keypad[key_index(state, inst)]
)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~state.keypad[key_index(state, inst)]
)
