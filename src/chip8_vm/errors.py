"""
CHIP-8 VM Error Hierarchy
=========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Chip8Error, allowing callers to catch every
library error with a single except clause if desired.

Exception Hierarchy
-------------------
Chip8Error (base)
├── ProgramError (program loading)
│   └── ProgramTooLarge - ROM does not fit in program space
└── ExecutionError (raised by the engine during a single cycle)
    ├── UnknownOpcode - word at pc matches no instruction form
    ├── StackOverflow - CALL with all 16 stack slots in use
    ├── StackUnderflow - RET with an empty stack
    └── ProtectedMemoryWrite - store into the interpreter area below 0x200

Design Philosophy
-----------------
Execution errors are detected before the instruction mutates anything, so
the machine state is exactly as it was before the failing cycle. Each
execution error records the address and opcode of the offending
instruction so a debugger or CLI can report it.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all CHIP-8 VM errors.

        try:
            emu.load_rom("pong.ch8")
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Program Loading Exceptions
# =============================================================================

class ProgramError(Chip8Error):
    """Base exception for errors while loading a program image."""
    pass


class ProgramTooLarge(ProgramError):
    """
    Program image exceeds the available program space.

    Raised by load_program() before any byte is copied, so memory is
    left untouched.

    Attributes:
        size: Size of the rejected program in bytes
        capacity: Number of bytes available from 0x200 upwards
    """

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"program is {size} bytes, only {capacity} bytes available"
        )


# =============================================================================
# Execution Exceptions
# =============================================================================

class ExecutionError(Chip8Error):
    """
    Base exception for errors raised while executing one cycle.

    Attributes:
        message: The error description
        address: Address of the instruction that failed (optional)
        opcode: The 16-bit instruction word (optional)
    """

    def __init__(
        self,
        message: str,
        address: Optional[int] = None,
        opcode: Optional[int] = None,
    ):
        self.message = message
        self.address = address
        self.opcode = opcode
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format as 'ADDR: [OPCODE] message'.

        Example output:
            $0204: [FFFF] unknown opcode
        """
        parts = []
        if self.address is not None:
            parts.append(f"${self.address:04X}:")
        if self.opcode is not None:
            parts.append(f"[{self.opcode:04X}]")
        parts.append(self.message)
        return " ".join(parts)


class UnknownOpcode(ExecutionError):
    """
    The instruction word at pc does not match any recognised form.

    The cycle is aborted and pc is left pointing at the bad word so the
    caller can decide whether to halt or skip it.
    """

    def __init__(
        self,
        opcode: int,
        address: Optional[int] = None,
        message: str = "unknown opcode",
    ):
        super().__init__(message, address=address, opcode=opcode)


class StackOverflow(ExecutionError):
    """CALL executed while all 16 return-address slots are in use."""

    def __init__(self, address: Optional[int] = None, opcode: Optional[int] = None):
        super().__init__("stack overflow", address=address, opcode=opcode)


class StackUnderflow(ExecutionError):
    """RET executed with an empty stack."""

    def __init__(self, address: Optional[int] = None, opcode: Optional[int] = None):
        super().__init__("stack underflow", address=address, opcode=opcode)


class ProtectedMemoryWrite(ExecutionError):
    """
    A store instruction targeted the interpreter area (0x000-0x1FF).

    Attributes:
        target: First address the instruction would have written
    """

    def __init__(
        self,
        target: int,
        address: Optional[int] = None,
        opcode: Optional[int] = None,
    ):
        self.target = target
        super().__init__(
            f"write to protected address ${target:03X}",
            address=address,
            opcode=opcode,
        )
