"""Console output for the chipax host loop.

``ConsoleLogger`` prints levelled messages for the CLI and ``Machine``.
``fori_loop_with_progress`` feeds a tqdm bar from inside a compiled run,
reporting cycles done, the current PC and any recorded fault.
"""

import sys
import time
from typing import Callable, Optional

import jax
import jax.numpy as jnp
from jax.experimental import io_callback
from tqdm import tqdm

from chipax.constants import FAULT_NONE
from chipax.errors import FAULT_ERRORS


class ConsoleLogger:
    """Levelled logger writing ``[elapsed][LEVEL][name] message`` to stdout.

    The level tag is coloured when stdout is a terminal.
    """

    LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        name: str = "chipax",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        level = log_level.upper()
        if level not in self.LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(self.LEVELS)}")
        self.name = name
        self.log_level = level
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def is_enabled(self, level: str) -> bool:
        return self.LEVELS.index(level.upper()) >= self.LEVELS.index(self.log_level)

    def log(self, level: str, message: str):
        level = level.upper()
        if not self.is_enabled(level):
            return
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{self.COLORS[level]}{tag}{self.RESET}"
        stamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        print(f"{stamp}{tag}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


def fault_name(code: int) -> str:
    if code == FAULT_NONE:
        return "none"
    return FAULT_ERRORS[code].kind


def build_cycle_progress_bar(n: int, desc: Optional[str] = None) -> Callable:
    """Build the per-cycle reporting function for an ``n`` cycle run.

    The returned ``report(i, state)`` is traced inside the loop body. It opens
    the bar on the first cycle, pushes an update every ``print_rate`` cycles
    and on the last one, and closes the bar when the run is over.
    """
    print_rate = max(1, min(n // 20, 50))
    bars = {}

    def _open():
        bars["bar"] = tqdm(total=n, desc=desc or f"Running {n:,} cycles", unit="cycle")

    def _update(cycles, pc, fault):
        bar = bars.get("bar")
        if bar is None:
            return
        bar.update(int(cycles))
        bar.set_postfix(pc=f"0x{int(pc):03X}", fault=fault_name(int(fault)), refresh=False)

    def _close():
        bar = bars.pop("bar", None)
        if bar is not None:
            bar.close()

    def report(i, state):
        done = i + 1
        remainder = done % print_rate
        steps = jnp.where(remainder == 0, print_rate, remainder)

        jax.lax.cond(
            i == 0,
            lambda _: io_callback(_open, None, ordered=True),
            lambda _: None,
            None,
        )
        jax.lax.cond(
            (remainder == 0) | (done == n),
            lambda _: io_callback(_update, None, steps, state.pc, state.fault, ordered=True),
            lambda _: None,
            None,
        )
        jax.lax.cond(
            done == n,
            lambda _: io_callback(_close, None, ordered=True),
            lambda _: None,
            None,
        )

    return report


def fori_loop_with_progress(n: int, desc: Optional[str] = None) -> Callable:
    """Decorate a ``fori_loop`` body over interpreter states with a progress bar."""
    report = build_cycle_progress_bar(n, desc)

    def decorator(body):
        def body_with_progress(i, state):
            state = body(i, state)
            report(i, state)
            return state

        return body_with_progress

    return decorator
