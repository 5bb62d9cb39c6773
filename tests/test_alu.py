"""Tests for ALU operations (8xxx)."""

import pytest
from chip8jax import execute, Fault
from conftest import set_registers


class TestBasicALU:
    """Test basic ALU operations."""

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

    def test_alu_xor_same(self, fresh_state):
        """8XY3 - XOR with same value should be 0."""
        state = set_registers(fresh_state, V3=0xAA, V4=0xAA)

        state = execute(state, 0x8343)  # V3 ^= V4

        assert state.V[3] == 0x00

    def test_logic_ops_leave_vf_alone(self, fresh_state):
        """8XY1/2/3 do not touch the flag register."""
        for op in (0x1, 0x2, 0x3):
            state = set_registers(fresh_state, V1=0x0F, V2=0xF0, VF=0x42)
            state = execute(state, 0x8120 | op)
            assert state.V[15] == 0x42, f"8xy{op} changed VF"


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = set_registers(fresh_state, V1=0x01, V2=0x01)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - Add with carry."""
        state = set_registers(fresh_state, V1=0xFF, V2=0x02)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x01  # 257 wraps to 1
        assert state.V[15] == 1  # Carry set

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, no borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1  # No borrow (VX >= VY)

    def test_alu_sub_xy_equal_operands(self, fresh_state):
        """8XY5 - Equal operands count as no borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x30)

        state = execute(state, 0x8125)

        assert state.V[1] == 0x00
        assert state.V[15] == 1

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, with borrow."""
        state = set_registers(fresh_state, V3=0x10, V4=0x30)

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 0xE0  # 16 - 48 = -32 → 224
        assert state.V[15] == 0  # Borrow (VX < VY)

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = set_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1  # No borrow (VY >= VX)

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, with borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0
        assert state.V[15] == 0


class TestALUShifts:
    """Shifts read VY and store into VX."""

    def test_shift_right_uses_vy(self, fresh_state):
        """8XY6 - VX = VY >> 1, VF = VY's low bit."""
        state = set_registers(fresh_state, V5=0x08, V6=0x03)  # V5 should be ignored

        state = execute(state, 0x8566)  # V5 = V6 >> 1

        assert state.V[5] == 0x01  # V6 (3) >> 1 = 1
        assert state.V[6] == 0x03  # Source untouched
        assert state.V[15] == 1  # LSB of V6 was 1

    def test_shift_right_even(self, fresh_state):
        """8XY6 - Even source clears VF."""
        state = set_registers(fresh_state, V1=0xFF, V2=0x04)

        state = execute(state, 0x8126)

        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_shift_left_uses_vy(self, fresh_state):
        """8XYE - VX = VY << 1, VF = VY's high bit."""
        state = set_registers(fresh_state, V3=0x00, V4=0x81)  # 10000001

        state = execute(state, 0x834E)  # V3 = V4 << 1

        assert state.V[3] == 0x02  # 129 << 1 = 258 → 2
        assert state.V[15] == 1  # MSB was 1

    def test_shift_left_no_overflow(self, fresh_state):
        """8XYE - High bit clear leaves VF = 0."""
        state = set_registers(fresh_state, V3=0xFF, V4=0x41)

        state = execute(state, 0x834E)

        assert state.V[3] == 0x82
        assert state.V[15] == 0


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    def test_alu_undefined_operations_halt(self, fresh_state):
        """Undefined 8XYN variants are unhandled opcodes."""
        for op in [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF]:
            state = set_registers(fresh_state, V1=0x42, V2=0x99)

            state = execute(state, 0x8120 | op)

            assert state.halted, f"8xy{op:X} did not halt"
            assert state.fault == Fault.UNHANDLED_OPCODE
            assert state.V[1] == 0x42, f"Undefined op {op:X} changed VX"

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = set_registers(fresh_state, V5=0xAA)

        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        state = set_registers(state, V5=0x80)
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_as_source(self, fresh_state):
        """VF used as an operand is read before the flag is written."""
        state = set_registers(fresh_state, VF=0x42, V1=0x10)

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52, "Addition with VF as source failed"
        assert state.V[15] == 0, "VF should be overwritten by operation result"

    @pytest.mark.parametrize("instruction,vf,v1,expected", [
        (0x8F14, 0x10, 0x02, 0x12),  # VF += V1, no carry
        (0x8F14, 0xFF, 0x03, 0x02),  # VF += V1, carry discarded
        (0x8F15, 0x10, 0x02, 0x0E),  # VF -= V1
        (0x8F16, 0x10, 0x09, 0x04),  # VF = V1 >> 1
        (0x8F17, 0x02, 0x10, 0x0E),  # VF = V1 - VF
        (0x8F1E, 0x10, 0x21, 0x42),  # VF = V1 << 1
    ])
    def test_vf_as_destination_keeps_result(self, fresh_state, instruction, vf, v1, expected):
        """With X = F the flag is written first and the result replaces it."""
        state = set_registers(fresh_state, VF=vf, V1=v1)

        state = execute(state, instruction)

        assert state.V[15] == expected
        assert state.V[1] == v1
