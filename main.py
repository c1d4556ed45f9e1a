"""
CHIP-8 front end: pygame window or headless terminal run.
"""

import argparse
import sys
import time

from chipax import EmulatorError, Machine
from chipax.logging import ConsoleLogger
from chipax.rendering import create_color_scheme, display_to_text, save_frame
from chipax.runner import run


def build_key_map(pygame):
    """Host keys to logical CHIP-8 keys (hex keypad on 1234/QWER/ASDF/ZXCV)."""
    return {
        pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
        pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
        pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
        pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
    }


def run_window(machine: Machine, scale: int = 8, color_scheme: str = "classic"):
    """Main emulator loop paced at ``machine.fps`` frames per second."""
    import pygame

    key_map = build_key_map(pygame)
    on_color, off_color = create_color_scheme(color_scheme)

    pygame.init()
    screen = pygame.display.set_mode((64 * scale, 32 * scale))
    pygame.display.set_caption("chipax")
    clock = pygame.time.Clock()

    running = True
    paused = False
    display = None

    machine.logger.info("Controls: ESC=Quit, P=Pause, F5=Reset")

    try:
        while running:
            clock.tick(machine.fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        paused = not paused
                    elif event.key == pygame.K_F5:
                        machine.reset()
                        display = None
                        machine.logger.info("Reset")
                    elif event.key in key_map:
                        machine.press(key_map[event.key])
                elif event.type == pygame.KEYUP:
                    if event.key in key_map:
                        machine.release(key_map[event.key])

            if paused:
                continue

            try:
                machine.run_frame()
            except EmulatorError:
                # Faults are logged by the machine; keep the last frame on screen
                paused = True
                continue

            changed = machine.poll_display()
            if changed is None and display is not None:
                continue
            display = changed if changed is not None else machine.state.display

            screen.fill(off_color)
            for y in range(32):
                for x in range(64):
                    if display[x, y]:
                        rect = pygame.Rect(x * scale, y * scale, scale, scale)
                        pygame.draw.rect(screen, on_color, rect)
            pygame.display.flip()
    finally:
        pygame.quit()


def run_headless(machine: Machine, cycles: int, progress: bool = False) -> int:
    """Run a fixed number of cycles and print the final frame. Returns an exit code."""
    start = time.time()
    try:
        machine.state = run(machine.state, cycles, progress=progress)
    except EmulatorError as e:
        machine.state = e.state
        machine.logger.error(f"Halted: {e}")
        print(display_to_text(machine.state.display))
        return 1
    elapsed = time.time() - start
    machine.logger.info(f"Ran {cycles} cycles in {elapsed:.2f}s, PC=0x{int(machine.state.pc):03X}")
    print(display_to_text(machine.state.display))
    return 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a CHIP-8 program")
    parser.add_argument("rom", type=str, help="Path to the CHIP-8 ROM file")
    parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Run headless for this many cycles and print the final frame",
    )
    parser.add_argument(
        "--ipf",
        type=int,
        default=10,
        help="Instructions per frame (default: 10, i.e. 600 Hz at 60 FPS)",
    )
    parser.add_argument("--fps", type=int, default=60, help="Frames per second (default: 60)")
    parser.add_argument("--scale", type=int, default=8, help="Window upscaling factor (default: 8)")
    parser.add_argument(
        "--color-scheme",
        type=str,
        default="classic",
        help="Color scheme: classic, amber, white, blue, retro (default: classic)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed for CXNN (default: 0)")
    parser.add_argument(
        "--reference-quirks",
        action="store_true",
        help="Use the reference interpreter's BNNN, FX29 and EXA1 behaviour",
    )
    parser.add_argument(
        "--screenshot",
        type=str,
        default=None,
        help="Save the final headless frame to this image file",
    )
    parser.add_argument("--progress", action="store_true", help="Show a progress bar in headless mode")
    parser.add_argument("--log-level", type=str, default="INFO", help="DEBUG, INFO, WARNING, ERROR")
    args = parser.parse_args(argv)
    if args.cycles is not None and args.cycles < 0:
        parser.error("--cycles must be non-negative")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = ConsoleLogger(log_level=args.log_level)

    try:
        machine = Machine(
            rom_path=args.rom,
            instructions_per_frame=args.ipf,
            fps=args.fps,
            reference_quirks=args.reference_quirks,
            seed=args.seed,
            logger=logger,
        )
    except (OSError, ValueError) as e:
        logger.error(f"Cannot start: {e}")
        return 2

    if args.cycles is None:
        run_window(machine, scale=args.scale, color_scheme=args.color_scheme)
        return 0

    code = run_headless(machine, args.cycles, progress=args.progress)
    if args.screenshot:
        save_frame(machine.state.display, args.screenshot, scale=args.scale, color_scheme=args.color_scheme)
        logger.info(f"Saved frame to {args.screenshot}")
    return code


if __name__ == "__main__":
    sys.exit(main())
