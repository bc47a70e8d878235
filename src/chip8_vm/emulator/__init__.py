"""
CHIP-8 Virtual Machine Core
===========================

An interpreter core for the CHIP-8 virtual machine: 4 KB of memory,
sixteen 8-bit registers, a 16-level call stack, two 60 Hz timers, a
64x32 monochrome XOR display and a 16-key hexadecimal keypad.

This package provides:

- **Decoder**: Maps 16-bit words to the 35 CHIP-8 instruction forms
- **Execution Engine**: One cycle per step(), with errors raised before
  any state change
- **Display**: 64x32 framebuffer with wraparound sprite drawing, text
  and PNG rendering
- **Keypad**: Key latches with the conventional host keyboard mapping
- **Debugging**: Breakpoints, register conditions, disassembly

Quick Start
-----------

Basic usage::

    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(seed=42))
    >>> emu.load_rom("maze.ch8")
    >>> emu.run_frames(120)
    >>> print(emu.display_text)

With debugging::

    >>> emu = Emulator()
    >>> emu.load_rom("pong.ch8")
    >>> emu.add_breakpoint(0x2F0)
    >>> event = emu.run()
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Stopped at ${event.address:03X}")

Module Structure
----------------

- `emulator.py`: Main Emulator class (high-level API)
- `state.py`: Machine state, memory map and font
- `decoder.py`: Instruction decoding
- `cpu.py`: Execution engine
- `display.py`: Framebuffer
- `keyboard.py`: Keypad latches and host key mapping
- `breakpoints.py`: Debugging support
- `config.py`: Pacing constants and EmulatorConfig

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

# Main entry point
from .emulator import Emulator
from .config import EmulatorConfig, CYCLE_RATE_HZ, TIMER_RATE_HZ

# Core components
from .state import MachineState, FONT, MEMORY_SIZE, PROGRAM_START, PROGRAM_CAPACITY
from .decoder import Instruction, Op, decode
from .cpu import Chip8CPU

# I/O
from .display import Display, WIDTH, HEIGHT
from .keyboard import Keyboard, HOST_KEYMAP, resolve_key

# Debugging support
from .breakpoints import (
    BreakpointManager,
    BreakEvent,
    BreakReason,
    RegisterCondition,
)

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",
    "CYCLE_RATE_HZ",
    "TIMER_RATE_HZ",

    # Core
    "MachineState",
    "FONT",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "PROGRAM_CAPACITY",
    "Instruction",
    "Op",
    "decode",
    "Chip8CPU",

    # Display
    "Display",
    "WIDTH",
    "HEIGHT",

    # Keypad
    "Keyboard",
    "HOST_KEYMAP",
    "resolve_key",

    # Debugging
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",
    "RegisterCondition",
]
