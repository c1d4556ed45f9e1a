"""CHIP-8 interpreter state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipax.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS,
    SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE, FAULT_NONE,
)


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Complete CHIP-8 interpreter state.

    Attributes:
        rng: PRNG key consumed by the random instruction
        memory: 4096 bytes, glyph table at FONT_START, program at PROGRAM_START
        pc: Address of the next instruction to fetch
        display: (64, 32) pixel grid indexed ``display[x, y]``, nonzero is on
        display_changed: Set by draw/clear, cleared by the display consumer
        stack: Return addresses for subroutine calls
        delay_timer: Decremented once per cycle while nonzero
        sound_timer: Set by programs, consumed by the host audio logic
        keypad: Pressed state of the 16 logical keys
        V: General purpose registers, VF doubles as the flag register
        I: Address register
        fault: Fault code (see ``chipax.constants``), FAULT_NONE while running
        fault_instruction: Raw instruction word that raised the fault
        fault_pc: Program counter at the time of the fault
        reference_quirks: Static switch reproducing the reference interpreter's
            BNNN, FX29 and EXA1 behaviour instead of canonical CHIP-8
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.uint8))
    display_changed: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.astype(FAULT_NONE, jnp.uint8))
    fault_instruction: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault_pc: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    reference_quirks: bool = field(pytree_node=False, default=False)


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    reference_quirks: bool = False,
) -> EmulatorState:
    """Create initial interpreter state with the glyph table loaded."""
    state = EmulatorState(rng, reference_quirks=reference_quirks)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
