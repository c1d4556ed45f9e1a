"""CHIP-8 system instructions (0x0xxx) and program counter helpers.

Every instruction handler returns ``(state, next_pc)``; the interpreter applies
``next_pc`` after the handler runs. The helpers below build the three
control-flow outcomes: advance to the next instruction, skip one instruction,
or jump to an absolute address.
"""

import jax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.constants import (
    ADDRESS_MASK, INSTRUCTION_SIZE, FAULT_DECODE, FAULT_STACK_UNDERFLOW,
)
from chipax.stack import pop, is_empty


def next_instruction(state: EmulatorState) -> jnp.ndarray:
    return jnp.astype(state.pc + INSTRUCTION_SIZE, jnp.uint16)


def skip_instruction(state: EmulatorState) -> jnp.ndarray:
    return jnp.astype(state.pc + 2 * INSTRUCTION_SIZE, jnp.uint16)


def jump_to(address) -> jnp.ndarray:
    return jnp.astype(address & ADDRESS_MASK, jnp.uint16)


def skip_if(state: EmulatorState, condition) -> jnp.ndarray:
    return jnp.where(condition, skip_instruction(state), next_instruction(state))


def record_fault(state: EmulatorState, instruction: DecodedInstruction, code: int):
    """Freeze the program counter and remember what went wrong."""
    state = state.replace(
        fault=jnp.astype(code, jnp.uint8),
        fault_instruction=jnp.astype(instruction.raw, jnp.uint16),
        fault_pc=state.pc,
    )
    return state, state.pc


def no_op(state: EmulatorState, instruction: DecodedInstruction):
    """0NNN - Machine code routine call, ignored."""
    return state, next_instruction(state)


def execute_invalid(state: EmulatorState, instruction: DecodedInstruction):
    """Unrecognized instruction word."""
    return record_fault(state, instruction, FAULT_DECODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction):
    """00E0 - Clear display."""
    state = state.replace(
        display=jnp.zeros_like(state.display),
        display_changed=jnp.ones((), dtype=jnp.bool_),
    )
    return state, next_instruction(state)


def execute_return(state: EmulatorState, instruction: DecodedInstruction):
    """00EE - Return from subroutine."""
    def _return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack), jump_to(address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda state: record_fault(state, instruction, FAULT_STACK_UNDERFLOW),
        _return,
        state,
    )
