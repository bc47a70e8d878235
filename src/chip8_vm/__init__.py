"""
CHIP-8 VM - Interpreter Core and Tools for the CHIP-8 Virtual Machine
=====================================================================

CHIP-8 is the interpreted bytecode language of the late-1970s COSMAC VIP
and Telmac hobby computers. Programs are loaded at $200 and run on a tiny
virtual machine with a 64x32 monochrome display and a hex keypad.

Main Components
---------------
- **emulator**: The virtual machine core
    Machine state, decoder, execution engine, display, keypad, timers

- **disassembler**: Bytecode disassembler (chip8dis)
    Converts ROM images to readable assembly listings

- **cli**: Command-line tools
    chip8run runs a ROM headlessly, chip8dis lists it

Quick Start
-----------
Run a program and look at the screen:
    >>> from chip8_vm import Emulator
    >>> emu = Emulator()
    >>> emu.load_rom("maze.ch8")
    >>> emu.run_frames(60)
    >>> print(emu.display_text)

Disassemble a ROM:
    >>> from chip8_vm import Chip8Disassembler
    >>> print(Chip8Disassembler().disassemble_to_text(open("maze.ch8", "rb").read()))

Or use the command-line tools:
    $ chip8run maze.ch8 --frames 60
    $ chip8dis maze.ch8 -o maze.lst

Version History
---------------
1.0.0 - Initial release with interpreter core, disassembler and CLI tools
"""

__version__ = "1.0.0"
__author__ = "Hugo José Pinto & Contributors"

# =============================================================================
# Public API Exports
# =============================================================================
# The emulator package is imported first; the disassembler builds on its
# decoder.
# =============================================================================

from chip8_vm.emulator import (
    Emulator,
    EmulatorConfig,
    MachineState,
    Chip8CPU,
    Display,
    Keyboard,
    BreakpointManager,
    BreakEvent,
    BreakReason,
    Instruction,
    Op,
    decode,
)
from chip8_vm.disassembler import Chip8Disassembler, DisassembledInstruction
from chip8_vm.errors import (
    Chip8Error,
    ProgramError,
    ProgramTooLarge,
    ExecutionError,
    UnknownOpcode,
    StackOverflow,
    StackUnderflow,
    ProtectedMemoryWrite,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Emulator
    "Emulator",
    "EmulatorConfig",
    "MachineState",
    "Chip8CPU",
    "Display",
    "Keyboard",
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",
    "Instruction",
    "Op",
    "decode",
    # Disassembler
    "Chip8Disassembler",
    "DisassembledInstruction",
    # Exception hierarchy
    "Chip8Error",
    "ProgramError",
    "ProgramTooLarge",
    "ExecutionError",
    "UnknownOpcode",
    "StackOverflow",
    "StackUnderflow",
    "ProtectedMemoryWrite",
]
