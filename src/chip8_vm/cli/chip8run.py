"""
chip8run - Headless CHIP-8 Runner Command-Line Interface
========================================================

This module implements a headless runner for CHIP-8 programs. It loads a
ROM, optionally holds some keys down, runs for a number of frames or
cycles and then prints the screen as text. It is intended for smoke
testing ROMs and for scripting.

Usage Examples
--------------
Run one second of emulated time (60 frames):
    $ chip8run maze.ch8

Run a fixed number of instruction cycles:
    $ chip8run test_opcode.ch8 --cycles 2000

Reproducible random numbers:
    $ chip8run maze.ch8 --seed 1234

Hold keypad keys (host layout names, 1234/QWER/ASDF/ZXCV):
    $ chip8run pong.ch8 --key 1 --key Q

Save a PNG screenshot:
    $ chip8run maze.ch8 --screenshot maze.png --scale 10

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import ExitCode, handle_cli_exception
from chip8_vm.emulator import Emulator, EmulatorConfig


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "rom_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--cycles",
    type=click.IntRange(min=0),
    default=None,
    help="Run this many instruction cycles (timers are not ticked)",
)
@click.option(
    "--frames",
    type=click.IntRange(min=0),
    default=None,
    help="Run this many 60 Hz frames (default: 60)",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the RND instruction (default: $CHIP8_SEED or random)",
)
@click.option(
    "-k", "--key",
    "keys",
    multiple=True,
    help="Hold a key for the whole run (host name, e.g. 1, Q, V). Repeatable",
)
@click.option(
    "--screenshot",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the final screen as a PNG image",
)
@click.option(
    "--scale",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="Pixel scale factor for --screenshot",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Log every executed instruction (implies --verbose)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="chip8run")
def main(
    rom_file: Path,
    cycles: Optional[int],
    frames: Optional[int],
    seed: Optional[int],
    keys: Tuple[str, ...],
    screenshot: Optional[Path],
    scale: int,
    trace: bool,
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 ROM headlessly and print the screen.

    ROM_FILE is the program image to load at $200.

    Exits with status 1 if the program stops on an execution error
    (unknown opcode, stack overflow or underflow, protected write).

    Examples:

        # Run for two seconds of emulated time
        chip8run maze.ch8 --frames 120

        # Hold keypad key 5 (host W) and save a screenshot
        chip8run game.ch8 --key W --screenshot out.png
    """
    if cycles is not None and frames is not None:
        click.echo("Error: --cycles and --frames are mutually exclusive", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    if verbose or trace:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        config = EmulatorConfig.from_env()
        if seed is not None:
            config = dataclasses.replace(config, seed=seed)
        if trace:
            config = dataclasses.replace(config, trace=True)

        emu = Emulator(config)
        emu.load_rom(rom_file)

        for key in keys:
            emu.press_key(key)

        if verbose:
            click.echo(f"Loaded {rom_file} ({rom_file.stat().st_size} bytes)", err=True)

        if cycles is not None:
            event = emu.run(cycles)
        else:
            event = emu.run_frames(60 if frames is None else frames)

        click.echo(emu.display_text)
        regs = emu.registers
        click.echo(
            f"Stopped: {event} (pc=${regs['pc']:03X}, i=${regs['i']:03X}, "
            f"cycles={emu.total_cycles})"
        )

        if screenshot:
            screenshot.write_bytes(emu.render_display(scale=scale))
            if verbose:
                click.echo(f"Screenshot written to: {screenshot}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Load")

    if event.is_error:
        sys.exit(ExitCode.RUNTIME_ERROR)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
