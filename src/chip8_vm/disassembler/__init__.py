"""
CHIP-8 VM Disassembler Module
=============================

Disassembly of CHIP-8 bytecode, used by the chip8dis tool and by the
emulator's disassemble_at() debugging helper.

Usage:
    from chip8_vm.disassembler import Chip8Disassembler

    disasm = Chip8Disassembler()
    instructions = disasm.disassemble(rom_bytes, start_address=0x200)

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from .chip8 import Chip8Disassembler, DisassembledInstruction

__all__ = [
    "Chip8Disassembler",
    "DisassembledInstruction",
]
