"""Main CHIP-8 emulator execution engine."""

import os
from typing import Optional

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import EmulatorState, halt, reset
from chip8jax.decode import decode, classify, InstructionKind
from chip8jax.constants import PROGRAM_START, MEMORY_SIZE, MAX_PROGRAM_SIZE
from chip8jax.errors import Fault, LoadError
from chip8jax.logging import ConsoleLogger
from chip8jax.instructions.system import (
    no_op, execute_clear_screen, execute_return, execute_unhandled
)
from chip8jax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8jax.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chip8jax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8jax.instructions.display import execute_display
from chip8jax.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

K = InstructionKind

INSTRUCTION_HANDLERS = {
    K.CLS: execute_clear_screen,
    K.RET: execute_return,
    K.SYS: no_op,
    K.JP: execute_jump,
    K.CALL: execute_call,
    K.SE_BYTE: execute_skip_if_equal_immediate,
    K.SNE_BYTE: execute_skip_if_not_equal_immediate,
    K.SE_REG: execute_skip_if_equal_register,
    K.LD_BYTE: execute_set,
    K.ADD_BYTE: execute_add,
    K.LD_REG: execute_alu_set,
    K.OR: execute_alu_or,
    K.AND: execute_alu_and,
    K.XOR: execute_alu_xor,
    K.ADD_REG: execute_alu_add,
    K.SUB: execute_alu_sub_xy,
    K.SHR: execute_alu_shift_right,
    K.SUBN: execute_alu_sub_yx,
    K.SHL: execute_alu_shift_left,
    K.SNE_REG: execute_skip_if_not_equal_register,
    K.LD_I: execute_set_index,
    K.JP_V0: execute_jump_with_offset,
    K.RND: execute_random,
    K.DRW: execute_display,
    K.SKP: execute_skip_if_key,
    K.SKNP: execute_skip_if_not_key,
    K.LD_VX_DT: execute_get_delay_timer,
    K.LD_VX_K: execute_wait_for_key,
    K.LD_DT_VX: execute_set_delay_timer,
    K.LD_ST_VX: execute_set_sound_timer,
    K.ADD_I_VX: execute_add_to_index,
    K.LD_F_VX: execute_font_character,
    K.LD_B_VX: execute_bcd_conversion,
    K.LD_MEM_VX: execute_store_registers,
    K.LD_VX_MEM: execute_load_registers,
    K.UNKNOWN: execute_unhandled,
}

_missing = set(InstructionKind) - set(INSTRUCTION_HANDLERS)
if _missing:
    raise RuntimeError(f"No handler for instruction kinds: {sorted(k.name for k in _missing)}")

_BRANCHES = [INSTRUCTION_HANDLERS[kind] for kind in sorted(InstructionKind)]

logger = ConsoleLogger(name="chip8jax")


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(classify(instruction), _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def pc_in_program_space(state: EmulatorState) -> jnp.ndarray:
    pc = state.pc.astype(jnp.int32)
    return (pc >= PROGRAM_START) & (pc + 1 < MEMORY_SIZE)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory. Callers check ``pc_in_program_space`` first."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=(state.pc + 2).astype(jnp.uint16)), instruction


def _fetch_execute(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return execute(state, instruction)


def _cycle(state: EmulatorState) -> EmulatorState:
    return jax.lax.cond(
        pc_in_program_space(state),
        _fetch_execute,
        lambda s: halt(s, Fault.PC_OUT_OF_RANGE, s.pc, 0),
        state
    )


def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch/execute cycle.

    A halted machine stays halted, and a machine waiting on FX0A does not
    advance until a key press clears the latch.
    """
    return jax.lax.cond(state.halted | state.waiting, lambda s: s, _cycle, state)


@jax.jit
def run_instructions(state: EmulatorState, budget) -> tuple[EmulatorState, jnp.ndarray]:
    """Execute up to ``budget`` instructions.

    Stops early as soon as the wait latch is armed or the machine halts.

    Returns:
        Tuple of (new state, number of instructions executed)
    """
    def cond_fn(carry):
        state, executed = carry
        return (executed < budget) & ~state.halted & ~state.waiting

    def body_fn(carry):
        state, executed = carry
        return _cycle(state), executed + 1

    return jax.lax.while_loop(cond_fn, body_fn, (state, jnp.zeros((), dtype=jnp.int32)))


step_jit = jax.jit(step)


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Reset the machine and place ``program`` at 0x200."""
    if len(program) == 0:
        raise LoadError("Program is empty")
    if len(program) > MAX_PROGRAM_SIZE:
        raise LoadError(
            f"Program size of {len(program)} bytes exceeds maximum size of {MAX_PROGRAM_SIZE} bytes")

    state = reset(state)
    rom_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str,
             log: Optional[ConsoleLogger] = None) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    log = log or logger
    if not os.path.isfile(filename):
        raise LoadError(f"Missing or invalid file: {filename}")
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read(MAX_PROGRAM_SIZE + 1)
    except OSError as e:
        raise LoadError(f"Failed to open file: {filename}") from e

    state = load_program(state, rom_data)
    log.info(f"Loaded program {filename} ({len(rom_data)} bytes)")
    return state
