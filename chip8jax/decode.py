"""CHIP-8 instruction decoding.

Instructions are classified by matching the raw word against an ordered
table of ``(mask, pattern)`` rows. The first matching row wins, so the exact
``00E0``/``00EE`` rows must precede the ``0nnn`` catch-all.
"""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    w: int     # First nibble
    x: int     # Second nibble (VX register)
    y: int     # Third nibble (VY register)
    z: int     # Fourth nibble (4-bit immediate)
    kk: int    # Last byte (8-bit immediate)
    nnn: int   # Last 12 bits (12-bit address)


class InstructionKind(IntEnum):
    CLS = 0
    RET = 1
    SYS = 2
    JP = 3
    CALL = 4
    SE_BYTE = 5
    SNE_BYTE = 6
    SE_REG = 7
    LD_BYTE = 8
    ADD_BYTE = 9
    LD_REG = 10
    OR = 11
    AND = 12
    XOR = 13
    ADD_REG = 14
    SUB = 15
    SHR = 16
    SUBN = 17
    SHL = 18
    SNE_REG = 19
    LD_I = 20
    JP_V0 = 21
    RND = 22
    DRW = 23
    SKP = 24
    SKNP = 25
    LD_VX_DT = 26
    LD_VX_K = 27
    LD_DT_VX = 28
    LD_ST_VX = 29
    ADD_I_VX = 30
    LD_F_VX = 31
    LD_B_VX = 32
    LD_MEM_VX = 33
    LD_VX_MEM = 34
    UNKNOWN = 35


K = InstructionKind

# (mask, pattern, kind, mnemonic)
OPCODE_TABLE = (
    (0xFFFF, 0x00E0, K.CLS, "00E0 - CLS: clear the display"),
    (0xFFFF, 0x00EE, K.RET, "00EE - RET: return from a subroutine"),
    (0xF000, 0x0000, K.SYS, "0nnn - SYS addr: ignored machine code routine"),
    (0xF000, 0x1000, K.JP, "1nnn - JP addr: jump to location nnn"),
    (0xF000, 0x2000, K.CALL, "2nnn - CALL addr: call subroutine at nnn"),
    (0xF000, 0x3000, K.SE_BYTE, "3xkk - SE Vx, byte: skip next instruction if Vx = kk"),
    (0xF000, 0x4000, K.SNE_BYTE, "4xkk - SNE Vx, byte: skip next instruction if Vx != kk"),
    (0xF00F, 0x5000, K.SE_REG, "5xy0 - SE Vx, Vy: skip next instruction if Vx = Vy"),
    (0xF000, 0x6000, K.LD_BYTE, "6xkk - LD Vx, byte: set Vx = kk"),
    (0xF000, 0x7000, K.ADD_BYTE, "7xkk - ADD Vx, byte: set Vx = Vx + kk"),
    (0xF00F, 0x8000, K.LD_REG, "8xy0 - LD Vx, Vy: set Vx = Vy"),
    (0xF00F, 0x8001, K.OR, "8xy1 - OR Vx, Vy: set Vx = Vx OR Vy"),
    (0xF00F, 0x8002, K.AND, "8xy2 - AND Vx, Vy: set Vx = Vx AND Vy"),
    (0xF00F, 0x8003, K.XOR, "8xy3 - XOR Vx, Vy: set Vx = Vx XOR Vy"),
    (0xF00F, 0x8004, K.ADD_REG, "8xy4 - ADD Vx, Vy: set Vx = Vx + Vy, VF = carry"),
    (0xF00F, 0x8005, K.SUB, "8xy5 - SUB Vx, Vy: set Vx = Vx - Vy, VF = NOT borrow"),
    (0xF00F, 0x8006, K.SHR, "8xy6 - SHR Vx, Vy: set Vx = Vy SHR 1"),
    (0xF00F, 0x8007, K.SUBN, "8xy7 - SUBN Vx, Vy: set Vx = Vy - Vx, VF = NOT borrow"),
    (0xF00F, 0x800E, K.SHL, "8xyE - SHL Vx, Vy: set Vx = Vy SHL 1"),
    (0xF00F, 0x9000, K.SNE_REG, "9xy0 - SNE Vx, Vy: skip next instruction if Vx != Vy"),
    (0xF000, 0xA000, K.LD_I, "Annn - LD I, addr: set I = nnn"),
    (0xF000, 0xB000, K.JP_V0, "Bnnn - JP V0, addr: jump to location nnn + V0"),
    (0xF000, 0xC000, K.RND, "Cxkk - RND Vx, byte: set Vx = random byte AND kk"),
    (0xF000, 0xD000, K.DRW, "Dxyn - DRW Vx, Vy, nibble: draw n-byte sprite at (Vx, Vy), VF = collision"),
    (0xF0FF, 0xE09E, K.SKP, "Ex9E - SKP Vx: skip next instruction if key Vx is pressed"),
    (0xF0FF, 0xE0A1, K.SKNP, "ExA1 - SKNP Vx: skip next instruction if key Vx is not pressed"),
    (0xF0FF, 0xF007, K.LD_VX_DT, "Fx07 - LD Vx, DT: set Vx = delay timer"),
    (0xF0FF, 0xF00A, K.LD_VX_K, "Fx0A - LD Vx, K: wait for a key press, store it in Vx"),
    (0xF0FF, 0xF015, K.LD_DT_VX, "Fx15 - LD DT, Vx: set delay timer = Vx"),
    (0xF0FF, 0xF018, K.LD_ST_VX, "Fx18 - LD ST, Vx: set sound timer = Vx"),
    (0xF0FF, 0xF01E, K.ADD_I_VX, "Fx1E - ADD I, Vx: set I = I + Vx"),
    (0xF0FF, 0xF029, K.LD_F_VX, "Fx29 - LD F, Vx: set I = location of sprite for digit Vx"),
    (0xF0FF, 0xF033, K.LD_B_VX, "Fx33 - LD B, Vx: store BCD of Vx at I, I+1, I+2"),
    (0xF0FF, 0xF055, K.LD_MEM_VX, "Fx55 - LD [I], Vx: store V0..Vx at I"),
    (0xF0FF, 0xF065, K.LD_VX_MEM, "Fx65 - LD Vx, [I]: read V0..Vx from I"),
)

_MASKS = jnp.array([row[0] for row in OPCODE_TABLE], dtype=jnp.uint16)
_PATTERNS = jnp.array([row[1] for row in OPCODE_TABLE], dtype=jnp.uint16)
_KINDS = jnp.array([int(row[2]) for row in OPCODE_TABLE], dtype=jnp.int32)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        w=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        z=instruction & 0x000F,
        kk=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def classify(instruction) -> jnp.ndarray:
    """Map an instruction word to its ``InstructionKind`` index (traceable)."""
    word = jnp.asarray(instruction, dtype=jnp.uint16)
    matches = (word & _MASKS) == _PATTERNS
    return jnp.where(jnp.any(matches), _KINDS[jnp.argmax(matches)], int(K.UNKNOWN))


def describe(instruction: int) -> str:
    """Mnemonic listing for a concrete instruction word."""
    instruction = int(instruction)
    for mask, pattern, _, text in OPCODE_TABLE:
        if instruction & mask == pattern:
            return f"{instruction:04X}  {text}"
    return f"{instruction:04X}  unhandled opcode"
