"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, flag)``. Flag-setting
operations write VF before VX, so with X = F the result replaces the flag.
Shifts take their operand from VY.
"""

import jax.numpy as jnp
from chip8jax.state import EmulatorState
from chip8jax.decode import DecodedInstruction
from chip8jax.constants import FLAG_REGISTER


def _byte(value) -> jnp.ndarray:
    return (jnp.asarray(value, dtype=jnp.int32) & 0xFF).astype(jnp.uint8)


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = vx.astype(jnp.int32) + vy.astype(jnp.int32)
    return _byte(result), (result > 255).astype(jnp.uint8)


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    result = vx.astype(jnp.int32) - vy.astype(jnp.int32)
    return _byte(result), (vx >= vy).astype(jnp.uint8)


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX = VY >> 1, VF = old LSB of VY."""
    return vy >> 1, vy & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    result = vy.astype(jnp.int32) - vx.astype(jnp.int32)
    return _byte(result), (vy >= vx).astype(jnp.uint8)


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX = VY << 1, VF = old MSB of VY."""
    return _byte(vy.astype(jnp.int32) << 1), vy >> 7


def make_alu_instruction(operation):
    """Wrap an ALU operation as an instruction handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        result, flag = operation(vx, vy)

        new_V = state.V
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.asarray(flag, dtype=jnp.uint8))
        new_V = new_V.at[instruction.x].set(jnp.asarray(result, dtype=jnp.uint8))
        return state.replace(V=new_V)
    alu_instruction.__doc__ = operation.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
