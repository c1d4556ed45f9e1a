"""Tests for ALU operations (8xxx)."""

import jax
import jax.numpy as jnp
import pytest
from chipax import execute
from chipax.instructions.alu import alu_add, alu_sub_xy, alu_sub_yx
from conftest import set_registers


# Every (a, b) pair of 8-bit values
_a, _b = jnp.meshgrid(jnp.arange(256, dtype=jnp.uint8), jnp.arange(256, dtype=jnp.uint8), indexing='ij')
ALL_A = _a.ravel()
ALL_B = _b.ravel()


class TestBasicALU:
    """Test bitwise register-to-register operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = set_registers(fresh_state, V1=0xFF, V2=0xF0)

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    def test_alu_xor_same(self, fresh_state):
        """8XY3 - XOR with same value should be 0."""
        state = set_registers(fresh_state, V3=0xAA, V4=0xAA)

        state = execute(state, 0x8343)  # V3 ^= V4

        assert state.V[3] == 0

    @pytest.mark.parametrize("instruction", [0x8120, 0x8121, 0x8122, 0x8123])
    def test_logic_leaves_flag_alone(self, fresh_state, instruction):
        """Bitwise operations do not touch VF."""
        state = set_registers(fresh_state, V1=0x0F, V2=0xF0, VF=0x77)

        state = execute(state, instruction)

        assert state.V[15] == 0x77

    def test_alu_advances_pc(self, fresh_state):
        state = execute(fresh_state, 0x8120)
        assert state.pc == 0x202


class TestArithmetic:
    """Test add/subtract with carry and borrow flags."""

    def test_add_without_carry(self, fresh_state):
        """8XY4 - Add without overflow."""
        state = set_registers(fresh_state, V1=10, V2=20)

        state = execute(state, 0x8124)

        assert state.V[1] == 30
        assert state.V[15] == 0

    def test_add_with_carry(self, fresh_state):
        """8XY4 - Add with overflow sets VF and wraps."""
        state = set_registers(fresh_state, V1=200, V2=100)

        state = execute(state, 0x8124)

        assert state.V[1] == 44  # 300 - 256
        assert state.V[15] == 1

    def test_add_exact_boundary(self, fresh_state):
        """8XY4 - 255 + 0 has no carry, 255 + 1 does."""
        state = set_registers(fresh_state, V1=255, V2=0)
        state = execute(state, 0x8124)
        assert state.V[1] == 255
        assert state.V[15] == 0

        state = set_registers(state, V2=1)
        state = execute(state, 0x8124)
        assert state.V[1] == 0
        assert state.V[15] == 1

    def test_sub_no_borrow(self, fresh_state):
        """8XY5 - VX >= VY sets VF = 1."""
        state = set_registers(fresh_state, V1=50, V2=20)

        state = execute(state, 0x8125)

        assert state.V[1] == 30
        assert state.V[15] == 1

    def test_sub_with_borrow(self, fresh_state):
        """8XY5 - VY > VX sets VF = 0 and wraps."""
        state = set_registers(fresh_state, V1=20, V2=50)

        state = execute(state, 0x8125)

        assert state.V[1] == 226  # (20 - 50) mod 256
        assert state.V[15] == 0

    def test_sub_equal_values(self, fresh_state):
        """8XY5 - Equal operands are not a borrow."""
        state = set_registers(fresh_state, V1=77, V2=77)

        state = execute(state, 0x8125)

        assert state.V[1] == 0
        assert state.V[15] == 1

    def test_reverse_sub_no_borrow(self, fresh_state):
        """8XY7 - VX = VY - VX."""
        state = set_registers(fresh_state, V1=20, V2=50)

        state = execute(state, 0x8127)

        assert state.V[1] == 30
        assert state.V[15] == 1

    def test_reverse_sub_with_borrow(self, fresh_state):
        """8XY7 - VX > VY sets VF = 0."""
        state = set_registers(fresh_state, V1=50, V2=20)

        state = execute(state, 0x8127)

        assert state.V[1] == 226
        assert state.V[15] == 0

    def test_flag_wins_when_target_is_vf(self, fresh_state):
        """8FY4 - When VX is VF the flag overwrites the sum."""
        state = set_registers(fresh_state, VF=200, V1=100)

        state = execute(state, 0x8F14)

        assert state.V[15] == 1


class TestExhaustiveFlags:
    """Flag semantics over every pair of 8-bit operands."""

    def test_add_carry_all_pairs(self):
        result, carry = jax.vmap(alu_add)(ALL_A, ALL_B)
        total = ALL_A.astype(jnp.int32) + ALL_B.astype(jnp.int32)

        assert jnp.array_equal(result, (total % 256).astype(jnp.uint8))
        assert jnp.array_equal(carry, (total > 255).astype(jnp.uint8))

    def test_sub_borrow_all_pairs(self):
        result, flag = jax.vmap(alu_sub_xy)(ALL_A, ALL_B)
        difference = ALL_A.astype(jnp.int32) - ALL_B.astype(jnp.int32)

        assert jnp.array_equal(result, (difference % 256).astype(jnp.uint8))
        assert jnp.array_equal(flag == 0, ALL_B > ALL_A)

    def test_reverse_sub_borrow_all_pairs(self):
        result, flag = jax.vmap(alu_sub_yx)(ALL_A, ALL_B)
        difference = ALL_B.astype(jnp.int32) - ALL_A.astype(jnp.int32)

        assert jnp.array_equal(result, (difference % 256).astype(jnp.uint8))
        assert jnp.array_equal(flag == 0, ALL_A > ALL_B)


class TestShifts:
    """Test shift operations."""

    def test_shift_right(self, fresh_state):
        """8XY6 - VF = LSB, VX >>= 1."""
        state = set_registers(fresh_state, V1=0b00000101)

        state = execute(state, 0x8106)

        assert state.V[1] == 0b00000010
        assert state.V[15] == 1

    def test_shift_right_even(self, fresh_state):
        state = set_registers(fresh_state, V1=0b00000100)

        state = execute(state, 0x8106)

        assert state.V[1] == 0b00000010
        assert state.V[15] == 0

    def test_shift_left(self, fresh_state):
        """8XYE - VF = MSB, VX <<= 1."""
        state = set_registers(fresh_state, V1=0b10000001)

        state = execute(state, 0x810E)

        assert state.V[1] == 0b00000010
        assert state.V[15] == 1

    def test_shift_left_no_msb(self, fresh_state):
        state = set_registers(fresh_state, V1=0b01000000)

        state = execute(state, 0x810E)

        assert state.V[1] == 0b10000000
        assert state.V[15] == 0

    def test_shift_ignores_vy(self, fresh_state):
        """Shifts operate on VX only."""
        state = set_registers(fresh_state, V1=0x02, V2=0xFF)

        state = execute(state, 0x8126)

        assert state.V[1] == 0x01
        assert state.V[2] == 0xFF
