"""
CHIP-8 Disassembler
===================

Disassembles CHIP-8 bytecode into Cowgod-style assembly text.

Every instruction is two bytes, big-endian. The disassembler reuses the
emulator's decoder, so anything the engine would reject as an unknown
opcode is listed as a data word instead.

Output syntax:
    CLS / RET
    JP 0x200          CALL 0x300        JP V0, 0x300
    LD V1, 0x2A       ADD V1, 0x2A      SE V1, 0x2A
    LD V1, V2         SUB V1, V2        SHR V1, V2
    LD I, 0x300       DRW V0, V1, 5     SKP V1
    LD V1, DT         LD V1, K          LD DT, V1
    LD [I], V3        LD V3, [I]        LD B, V1
    DW 0xFFFF         (undecodable word)
    DB 0x12           (trailing odd byte)

Usage:
    disasm = Chip8Disassembler()

    # Disassemble a ROM image
    instructions = disasm.disassemble(rom_bytes, start_address=0x200)

    # Disassemble a single instruction
    instr = disasm.disassemble_one(rom_bytes, address=0x200)
    print(f"{instr.address:03X}: {instr.mnemonic} {instr.operand_str}")

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..emulator.decoder import Instruction, Op, decode
from ..emulator.state import PROGRAM_START
from ..errors import UnknownOpcode


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    Represents a single disassembled CHIP-8 instruction.

    Attributes:
        address: Memory address of the instruction
        opcode: The 16-bit word (or the single byte for DB)
        op: The decoded instruction form, None for data
        mnemonic: The instruction mnemonic (e.g., "LD", "DRW", "DW")
        operand_str: Formatted operand string for display
        raw_bytes: All bytes comprising this instruction
        comment: Optional comment (e.g., symbol name of a target)
    """
    address: int
    opcode: int
    op: Optional[Op]
    mnemonic: str
    operand_str: str
    raw_bytes: bytes
    comment: str = ""

    @property
    def size(self) -> int:
        """Instruction size in bytes."""
        return len(self.raw_bytes)

    @property
    def is_data(self) -> bool:
        """True if the bytes did not decode to an instruction."""
        return self.op is None

    def __str__(self) -> str:
        """Format as assembly line: ADDRESS: BYTES  MNEMONIC OPERAND"""
        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes).ljust(5)

        if self.operand_str:
            asm = f"{self.mnemonic} {self.operand_str}"
        else:
            asm = self.mnemonic

        if self.comment:
            return f"${self.address:03X}: {hex_bytes}  {asm:<16} ; {self.comment}"
        else:
            return f"${self.address:03X}: {hex_bytes}  {asm}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"${self.address:03X}",
            "address_int": self.address,
            "opcode": f"${self.opcode:04X}",
            "mnemonic": self.mnemonic,
            "operand": self.operand_str,
            "size": self.size,
            "bytes": [f"${b:02X}" for b in self.raw_bytes],
            "comment": self.comment,
        }


# =============================================================================
# Operand Formatting
# =============================================================================

def _addr(value: int) -> str:
    return f"0x{value:03X}"


def _byte(value: int) -> str:
    return f"0x{value:02X}"


def _reg(index: int) -> str:
    return f"V{index:X}"


# Mnemonic and operand template for every form
FORMATS: Dict[Op, Tuple[str, str]] = {
    Op.SYS: ("SYS", "{nnn}"),
    Op.CLS: ("CLS", ""),
    Op.RET: ("RET", ""),
    Op.JP: ("JP", "{nnn}"),
    Op.CALL: ("CALL", "{nnn}"),
    Op.SE_BYTE: ("SE", "{vx}, {kk}"),
    Op.SNE_BYTE: ("SNE", "{vx}, {kk}"),
    Op.SE_REG: ("SE", "{vx}, {vy}"),
    Op.LD_BYTE: ("LD", "{vx}, {kk}"),
    Op.ADD_BYTE: ("ADD", "{vx}, {kk}"),
    Op.LD_REG: ("LD", "{vx}, {vy}"),
    Op.OR: ("OR", "{vx}, {vy}"),
    Op.AND: ("AND", "{vx}, {vy}"),
    Op.XOR: ("XOR", "{vx}, {vy}"),
    Op.ADD_REG: ("ADD", "{vx}, {vy}"),
    Op.SUB: ("SUB", "{vx}, {vy}"),
    Op.SHR: ("SHR", "{vx}, {vy}"),
    Op.SUBN: ("SUBN", "{vx}, {vy}"),
    Op.SHL: ("SHL", "{vx}, {vy}"),
    Op.SNE_REG: ("SNE", "{vx}, {vy}"),
    Op.LD_I: ("LD", "I, {nnn}"),
    Op.JP_V0: ("JP", "V0, {nnn}"),
    Op.RND: ("RND", "{vx}, {kk}"),
    Op.DRW: ("DRW", "{vx}, {vy}, {n}"),
    Op.SKP: ("SKP", "{vx}"),
    Op.SKNP: ("SKNP", "{vx}"),
    Op.LD_VX_DT: ("LD", "{vx}, DT"),
    Op.LD_VX_K: ("LD", "{vx}, K"),
    Op.LD_DT_VX: ("LD", "DT, {vx}"),
    Op.LD_ST_VX: ("LD", "ST, {vx}"),
    Op.ADD_I_VX: ("ADD", "I, {vx}"),
    Op.LD_F_VX: ("LD", "F, {vx}"),
    Op.LD_B_VX: ("LD", "B, {vx}"),
    Op.LD_MEM_VX: ("LD", "[I], {vx}"),
    Op.LD_VX_MEM: ("LD", "{vx}, [I]"),
}

# Forms whose nnn operand is a code or data address worth annotating
ADDRESS_OPS = {Op.SYS, Op.JP, Op.CALL, Op.LD_I, Op.JP_V0}


# =============================================================================
# CHIP-8 Disassembler
# =============================================================================

class Chip8Disassembler:
    """
    Disassembler for CHIP-8 bytecode.

    Attributes:
        _symbol_table: Optional symbol table for address annotation
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        """
        Initialize the disassembler.

        Args:
            symbol_table: Optional dict mapping addresses to symbol names.
                         Used to annotate jump, call and index targets.
        """
        self._symbol_table = symbol_table or {}

    def disassemble_one(
        self,
        data: bytes,
        address: int = PROGRAM_START,
        offset: int = 0
    ) -> DisassembledInstruction:
        """
        Disassemble a single instruction.

        Args:
            data: Byte buffer containing the instruction
            address: Memory address of the instruction (for display)
            offset: Offset into data buffer where instruction starts

        Returns:
            DisassembledInstruction with decoded information

        Raises:
            ValueError: If offset is beyond the end of data
        """
        if offset >= len(data):
            raise ValueError(f"Offset {offset} beyond data length {len(data)}")

        if offset + 2 > len(data):
            byte = data[offset]
            return DisassembledInstruction(
                address=address,
                opcode=byte,
                op=None,
                mnemonic="DB",
                operand_str=_byte(byte),
                raw_bytes=bytes([byte]),
                comment="incomplete instruction",
            )

        raw_bytes = bytes(data[offset:offset + 2])
        opcode = (raw_bytes[0] << 8) | raw_bytes[1]

        try:
            instruction = decode(opcode, address=address)
        except UnknownOpcode:
            return DisassembledInstruction(
                address=address,
                opcode=opcode,
                op=None,
                mnemonic="DW",
                operand_str=f"0x{opcode:04X}",
                raw_bytes=raw_bytes,
                comment="unknown opcode",
            )

        mnemonic, operand_str = self._format(instruction)
        comment = ""
        if instruction.op in ADDRESS_OPS:
            comment = self._symbol_table.get(instruction.nnn, "")

        return DisassembledInstruction(
            address=address,
            opcode=opcode,
            op=instruction.op,
            mnemonic=mnemonic,
            operand_str=operand_str,
            raw_bytes=raw_bytes,
            comment=comment,
        )

    @staticmethod
    def _format(instruction: Instruction) -> Tuple[str, str]:
        """Return (mnemonic, operand_str) for a decoded instruction."""
        mnemonic, template = FORMATS[instruction.op]
        operand_str = template.format(
            vx=_reg(instruction.x),
            vy=_reg(instruction.y),
            n=instruction.n,
            kk=_byte(instruction.kk),
            nnn=_addr(instruction.nnn),
        )
        return mnemonic, operand_str

    def disassemble(
        self,
        data: bytes,
        start_address: int = PROGRAM_START,
        count: Optional[int] = None
    ) -> List[DisassembledInstruction]:
        """
        Disassemble multiple instructions.

        Args:
            data: Byte buffer containing bytecode
            start_address: Memory address of first byte
            count: Maximum number of instructions to disassemble (None = all)

        Returns:
            List of DisassembledInstruction objects
        """
        result = []
        offset = 0
        address = start_address

        while offset < len(data):
            if count is not None and len(result) >= count:
                break

            instr = self.disassemble_one(data, address, offset)
            result.append(instr)

            offset += instr.size
            address += instr.size

        return result

    def disassemble_to_text(
        self,
        data: bytes,
        start_address: int = PROGRAM_START,
        count: Optional[int] = None
    ) -> str:
        """
        Disassemble and return a multi-line listing.

        Args:
            data: Byte buffer containing bytecode
            start_address: Memory address of first byte
            count: Maximum number of instructions

        Returns:
            Multi-line string with disassembly listing
        """
        instructions = self.disassemble(data, start_address, count)
        return "\n".join(str(instr) for instr in instructions)

    def add_symbol(self, address: int, name: str) -> None:
        """
        Add a symbol to the symbol table.

        Args:
            address: The address value
            name: The symbol name
        """
        self._symbol_table[address] = name
