"""CHIP-8 interpreter package."""

from chipax.state import EmulatorState, StackState, create_state
from chipax.emulator import (
    execute, fetch, step, load_rom, load_program, set_keys, acknowledge_display,
)
from chipax.decode import DecodedInstruction, Operation, decode
from chipax.errors import (
    EmulatorError, DecodeError, StackUnderflowError, StackOverflowError, AddressError,
    raise_for_fault,
)
from chipax.constants import *
from chipax.runner import run, run_n_cycles, trace_cycles
from chipax.machine import Machine
from chipax.rendering import chip8_display_to_rgb, create_color_scheme, display_to_text, save_frame

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "load_rom",
    "load_program",
    "set_keys",
    "acknowledge_display",
    "DecodedInstruction",
    "Operation",
    "decode",
    "EmulatorError",
    "DecodeError",
    "StackUnderflowError",
    "StackOverflowError",
    "AddressError",
    "raise_for_fault",
    "run",
    "run_n_cycles",
    "trace_cycles",
    "Machine",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "display_to_text",
    "save_frame",
]
