"""CHIP-8 memory operations.

Memory is a flat ``uint8`` array of ``MEMORY_SIZE`` bytes. ``read_byte`` and
``write_byte`` take a single address or an array of addresses, which is how the
I-indexed instructions (DXYN, FX33, FX55, FX65) use them. They do no bounds
checking; the interpreter validates addresses derived from the index register
before it calls them.
"""

import jax.numpy as jnp

from chipax.constants import MEMORY_SIZE


def load_block(memory: jnp.ndarray, offset: int, data) -> jnp.ndarray:
    """Copy ``data`` into memory starting at ``offset``.

    Bytes whose destination would fall past the end of memory are dropped;
    loading stops at the boundary instead of wrapping.
    """
    block = jnp.array(list(bytes(data)), dtype=jnp.uint8)
    available = max(0, MEMORY_SIZE - offset)
    block = block[:available]
    if block.size == 0:
        return memory
    return memory.at[offset:offset + block.size].set(block)


def read_word(memory: jnp.ndarray, address) -> jnp.ndarray:
    """Read a big-endian 16-bit word at ``address``."""
    high = memory[address].astype(jnp.uint16)
    low = memory[address + 1].astype(jnp.uint16)
    return (high << 8) | low


def read_byte(memory: jnp.ndarray, address) -> jnp.ndarray:
    """Byte(s) at ``address``, a scalar or an array of addresses."""
    return memory[address]


def write_byte(memory: jnp.ndarray, address, value) -> jnp.ndarray:
    """Store ``value`` at ``address``; both may be arrays of matching shape."""
    return memory.at[address].set(jnp.astype(value, jnp.uint8))
