"""CHIP-8 instruction decoding."""

import enum

import jax.numpy as jnp
from chex import dataclass


class Operation(enum.IntEnum):
    """Every operation the interpreter can execute.

    The order matches the handler table in ``chipax.emulator``.
    """
    CLEAR_SCREEN = 0                 # 00E0
    RETURN = 1                       # 00EE
    SYSTEM_CALL = 2                  # 0NNN
    JUMP = 3                         # 1NNN
    CALL = 4                         # 2NNN
    SKIP_IF_EQUAL_IMMEDIATE = 5      # 3XNN
    SKIP_IF_NOT_EQUAL_IMMEDIATE = 6  # 4XNN
    SKIP_IF_EQUAL_REGISTER = 7       # 5XY0
    LOAD_IMMEDIATE = 8               # 6XNN
    ADD_IMMEDIATE = 9                # 7XNN
    MOVE = 10                        # 8XY0
    OR = 11                          # 8XY1
    AND = 12                         # 8XY2
    XOR = 13                         # 8XY3
    ADD_REGISTER = 14                # 8XY4
    SUBTRACT = 15                    # 8XY5
    SHIFT_RIGHT = 16                 # 8XY6
    SUBTRACT_REVERSE = 17            # 8XY7
    SHIFT_LEFT = 18                  # 8XYE
    SKIP_IF_NOT_EQUAL_REGISTER = 19  # 9XY0
    LOAD_INDEX = 20                  # ANNN
    JUMP_OFFSET = 21                 # BNNN
    RANDOM = 22                      # CXNN
    DRAW = 23                        # DXYN
    SKIP_IF_KEY_PRESSED = 24         # EX9E
    SKIP_IF_KEY_NOT_PRESSED = 25     # EXA1
    LOAD_DELAY_TIMER = 26            # FX07
    WAIT_FOR_KEY = 27                # FX0A
    SET_DELAY_TIMER = 28             # FX15
    SET_SOUND_TIMER = 29             # FX18
    ADD_TO_INDEX = 30                # FX1E
    LOAD_GLYPH = 31                  # FX29
    STORE_BCD = 32                   # FX33
    STORE_REGISTERS = 33             # FX55
    LOAD_REGISTERS = 34              # FX65
    INVALID = 35


def _lookup_table(size: int, entries: dict) -> jnp.ndarray:
    table = [int(Operation.INVALID)] * size
    for index, operation in entries.items():
        table[index] = int(operation)
    return jnp.array(table, dtype=jnp.int32)


# Opcodes whose first nibble alone selects the operation
_FAMILY_OPERATIONS = _lookup_table(16, {
    0x1: Operation.JUMP,
    0x2: Operation.CALL,
    0x3: Operation.SKIP_IF_EQUAL_IMMEDIATE,
    0x4: Operation.SKIP_IF_NOT_EQUAL_IMMEDIATE,
    0x5: Operation.SKIP_IF_EQUAL_REGISTER,
    0x6: Operation.LOAD_IMMEDIATE,
    0x7: Operation.ADD_IMMEDIATE,
    0x9: Operation.SKIP_IF_NOT_EQUAL_REGISTER,
    0xA: Operation.LOAD_INDEX,
    0xB: Operation.JUMP_OFFSET,
    0xC: Operation.RANDOM,
    0xD: Operation.DRAW,
})

# 8XYN, indexed by N
_ALU_OPERATIONS = _lookup_table(16, {
    0x0: Operation.MOVE,
    0x1: Operation.OR,
    0x2: Operation.AND,
    0x3: Operation.XOR,
    0x4: Operation.ADD_REGISTER,
    0x5: Operation.SUBTRACT,
    0x6: Operation.SHIFT_RIGHT,
    0x7: Operation.SUBTRACT_REVERSE,
    0xE: Operation.SHIFT_LEFT,
})

# EXNN, indexed by NN
_KEY_OPERATIONS = _lookup_table(256, {
    0x9E: Operation.SKIP_IF_KEY_PRESSED,
    0xA1: Operation.SKIP_IF_KEY_NOT_PRESSED,
})

# FXNN, indexed by NN
_MISC_OPERATIONS = _lookup_table(256, {
    0x07: Operation.LOAD_DELAY_TIMER,
    0x0A: Operation.WAIT_FOR_KEY,
    0x15: Operation.SET_DELAY_TIMER,
    0x18: Operation.SET_SOUND_TIMER,
    0x1E: Operation.ADD_TO_INDEX,
    0x29: Operation.LOAD_GLYPH,
    0x33: Operation.STORE_BCD,
    0x55: Operation.STORE_REGISTERS,
    0x65: Operation.LOAD_REGISTERS,
})


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    operation: int  # Operation tag, INVALID when no pattern matches
    opcode: int     # First nibble
    x: int          # Second nibble (VX register)
    y: int          # Third nibble (VY register)
    n: int          # Fourth nibble (4-bit immediate)
    nn: int         # Last byte (8-bit immediate)
    nnn: int        # Last 12 bits (12-bit address)


def decode_operation(raw: jnp.ndarray) -> jnp.ndarray:
    """Map a 16-bit instruction word to its ``Operation`` tag."""
    word = jnp.astype(raw, jnp.int32)
    opcode = (word & 0xF000) >> 12
    n = word & 0x000F
    nn = word & 0x00FF

    system_operation = jnp.where(
        word == 0x00E0,
        int(Operation.CLEAR_SCREEN),
        jnp.where(word == 0x00EE, int(Operation.RETURN), int(Operation.SYSTEM_CALL)),
    )

    return jnp.select(
        [opcode == 0x0, opcode == 0x8, opcode == 0xE, opcode == 0xF],
        [
            jnp.astype(system_operation, jnp.int32),
            _ALU_OPERATIONS[n],
            _KEY_OPERATIONS[nn],
            _MISC_OPERATIONS[nn],
        ],
        default=_FAMILY_OPERATIONS[opcode],
    )


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into an operation tag and its operands."""
    raw = jnp.astype(jnp.asarray(instruction), jnp.uint16)
    word = jnp.astype(raw, jnp.int32)
    return DecodedInstruction(
        raw=raw,
        operation=decode_operation(raw),
        opcode=(word & 0xF000) >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        nn=word & 0x00FF,
        nnn=word & 0x0FFF,
    )
