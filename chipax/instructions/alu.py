"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import DecodedInstruction
from chipax.constants import FLAG_REGISTER
from chipax.instructions.system import next_instruction


def alu_set(vx: int, vy: int) -> int:
    """8XY0 - Set: VX = VY."""
    return vy


def alu_or(vx: int, vy: int) -> int:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy


def alu_and(vx: int, vy: int) -> int:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy


def alu_xor(vx: int, vy: int) -> int:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + vy
    carry = jnp.astype(result > 255, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, flag is 0 on borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    result = (vx - vy) & 0xFF
    return result, no_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1."""
    shifted_bit = vx & 1
    result = vx >> 1
    return result, shifted_bit


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, flag is 0 on borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.uint8)
    result = (vy - vx) & 0xFF
    return result, no_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1."""
    shifted_bit = (vx & 0x80) >> 7
    result = (vx << 1) & 0xFF
    return result, shifted_bit


def make_logic_instruction(operation):
    """Register-to-register operation that leaves VF alone."""
    def logic_instruction(state: EmulatorState, instruction: DecodedInstruction):
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        result = jnp.astype(operation(vx, vy), jnp.uint8)
        state = state.replace(V=state.V.at[instruction.x].set(result))
        return state, next_instruction(state)
    return logic_instruction


def make_flag_instruction(operation):
    """Register-to-register operation that reports carry/borrow/shifted bit in VF.

    VF is written after VX, so the flag wins when X is F.
    """
    def flag_instruction(state: EmulatorState, instruction: DecodedInstruction):
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        result, vf = operation(vx, vy)
        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(vf, jnp.uint8))
        state = state.replace(V=new_V)
        return state, next_instruction(state)
    return flag_instruction


execute_alu_set = make_logic_instruction(alu_set)
execute_alu_or = make_logic_instruction(alu_or)
execute_alu_and = make_logic_instruction(alu_and)
execute_alu_xor = make_logic_instruction(alu_xor)
execute_alu_add = make_flag_instruction(alu_add)
execute_alu_sub_xy = make_flag_instruction(alu_sub_xy)
execute_alu_shift_right = make_flag_instruction(alu_shift_right)
execute_alu_sub_yx = make_flag_instruction(alu_sub_yx)
execute_alu_shift_left = make_flag_instruction(alu_shift_left)
