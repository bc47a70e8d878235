"""
CHIP-8 VM Command-Line Interface
================================

This package provides command-line tools for the CHIP-8 VM:

- **chip8run**: Headless ROM runner with text and PNG screen dumps
- **chip8dis**: Bytecode disassembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["chip8run", "chip8dis"]
