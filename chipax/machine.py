from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np

from chipax.constants import MEMORY_SIZE, NUM_KEYS, PROGRAM_START
from chipax.emulator import acknowledge_display, load_program, set_keys
from chipax.errors import EmulatorError
from chipax.logging import ConsoleLogger
from chipax.rendering import chip8_display_to_rgb, create_color_scheme
from chipax.runner import run
from chipax.state import EmulatorState, create_state


class Machine:
    """Host driving loop around the CHIP-8 interpreter.

    Owns the program image, the current interpreter state and the host-side
    keypad snapshot. Each frame runs a fixed number of cycles, decrements the
    sound timer once and leaves the display for the consumer to poll. Pacing
    against wall-clock time is left to the caller (see ``main.py``).
    """

    def __init__(
        self,
        rom_path: Optional[str] = None,
        program: Optional[bytes] = None,
        instructions_per_frame: int = 10,
        fps: int = 60,
        reference_quirks: bool = False,
        seed: int = 0,
        logger: Optional[ConsoleLogger] = None,
    ):
        """Initialize the machine and load a program.

        Args:
            rom_path: Path to a CHIP-8 ROM file
            program: Raw program bytes, used when ``rom_path`` is None
            instructions_per_frame: Cycles executed by each ``run_frame`` call
            fps: Frame rate the caller paces ``run_frame`` at
            reference_quirks: Reproduce the reference BNNN/FX29/EXA1 behaviour
            seed: Seed of the PRNG key used by CXNN
            logger: Console logger, a default one is created when None
        """
        if (rom_path is None) == (program is None):
            raise ValueError("Provide exactly one of rom_path or program")
        if instructions_per_frame < 1:
            raise ValueError(f"instructions_per_frame must be positive, got {instructions_per_frame}")
        if fps < 1:
            raise ValueError(f"fps must be positive, got {fps}")

        self.logger = logger or ConsoleLogger()
        self.instructions_per_frame = instructions_per_frame
        self.fps = fps
        self.reference_quirks = reference_quirks
        self.seed = seed

        if rom_path is not None:
            with open(rom_path, 'rb') as f:
                program = f.read()
            self.logger.info(f"Loaded ROM {rom_path} ({len(program)} bytes)")
        self.program = bytes(program)

        capacity = MEMORY_SIZE - PROGRAM_START
        if len(self.program) > capacity:
            self.logger.warning(
                f"Program is {len(self.program)} bytes, only the first {capacity} fit in memory"
            )

        self.keys = np.zeros(NUM_KEYS, dtype=np.bool_)
        self.frame_count = 0
        self.state = self._initial_state()

    def _initial_state(self) -> EmulatorState:
        state = create_state(jax.random.PRNGKey(self.seed), reference_quirks=self.reference_quirks)
        return load_program(state, self.program)

    @property
    def instruction_frequency(self) -> int:
        """Emulated CPU speed in Hz."""
        return self.instructions_per_frame * self.fps

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is nonzero."""
        return int(self.state.sound_timer) > 0

    def reset(self) -> EmulatorState:
        """Reload the program into a fresh state and release every key."""
        self.keys[:] = False
        self.frame_count = 0
        self.state = self._initial_state()
        self.logger.debug("Machine reset")
        return self.state

    def press(self, key: int):
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be in [0, {NUM_KEYS}), got {key}")
        self.keys[key] = True

    def release(self, key: int):
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be in [0, {NUM_KEYS}), got {key}")
        self.keys[key] = False

    def run_frame(self) -> EmulatorState:
        """Run one frame worth of cycles with the current key snapshot.

        Raises:
            EmulatorError: If the program faulted; the state stays frozen at
                the faulting instruction
        """
        self.state = set_keys(self.state, self.keys)
        try:
            self.state = run(self.state, self.instructions_per_frame)
        except EmulatorError as e:
            self.state = e.state
            self.logger.error(f"Halted after {self.frame_count} frames: {e}")
            raise
        self.state = self.state.replace(
            sound_timer=jnp.where(self.state.sound_timer > 0, self.state.sound_timer - 1, 0).astype(jnp.uint8)
        )
        self.frame_count += 1
        return self.state

    def run_frames(self, frames: int) -> EmulatorState:
        """Run several frames back to back without pacing."""
        for _ in range(frames):
            self.run_frame()
        return self.state

    def poll_display(self) -> Optional[np.ndarray]:
        """Return the display if it changed since the last poll, else None."""
        if not bool(self.state.display_changed):
            return None
        display = np.asarray(self.state.display)
        self.state = acknowledge_display(self.state)
        return display

    def render(self, scale: int = 8, color_scheme: str = "classic") -> np.ndarray:
        """Render the current display as an RGB array."""
        on_color, off_color = create_color_scheme(color_scheme)
        return chip8_display_to_rgb(
            self.state.display,
            scale=scale,
            on_color=on_color,
            off_color=off_color,
        )
