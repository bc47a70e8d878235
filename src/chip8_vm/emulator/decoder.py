"""
CHIP-8 Instruction Decoder
==========================

Every CHIP-8 instruction is one big-endian 16-bit word. The high nibble
selects the instruction family; families 0, 8, E and F need a second field
(the low nibble or the low byte) to pick the exact form.

Operand Fields
--------------
    x   = (opcode >> 8) & 0xF     register index
    y   = (opcode >> 4) & 0xF     register index
    n   = opcode & 0xF            4-bit immediate (DRW height)
    kk  = opcode & 0xFF           8-bit immediate
    nnn = opcode & 0xFFF          12-bit address

Decoding resolves a word to exactly one Op once; the engine then looks
the Op up in its handler table. Words that match no form raise
UnknownOpcode, including reserved encodings such as 5xy1 or 8xy8.

Reference
---------
- Cowgod's Chip-8 Technical Reference, section 3.1
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Optional

from ..errors import UnknownOpcode


class Op(Enum):
    """
    Instruction forms.

    SYS (0nnn) is recognised so listings can show it, but the engine
    does not execute it.
    """
    SYS = auto()        # 0nnn
    CLS = auto()        # 00E0
    RET = auto()        # 00EE
    JP = auto()         # 1nnn
    CALL = auto()       # 2nnn
    SE_BYTE = auto()    # 3xkk
    SNE_BYTE = auto()   # 4xkk
    SE_REG = auto()     # 5xy0
    LD_BYTE = auto()    # 6xkk
    ADD_BYTE = auto()   # 7xkk
    LD_REG = auto()     # 8xy0
    OR = auto()         # 8xy1
    AND = auto()        # 8xy2
    XOR = auto()        # 8xy3
    ADD_REG = auto()    # 8xy4
    SUB = auto()        # 8xy5
    SHR = auto()        # 8xy6
    SUBN = auto()       # 8xy7
    SHL = auto()        # 8xyE
    SNE_REG = auto()    # 9xy0
    LD_I = auto()       # Annn
    JP_V0 = auto()      # Bnnn
    RND = auto()        # Cxkk
    DRW = auto()        # Dxyn
    SKP = auto()        # Ex9E
    SKNP = auto()       # ExA1
    LD_VX_DT = auto()   # Fx07
    LD_VX_K = auto()    # Fx0A
    LD_DT_VX = auto()   # Fx15
    LD_ST_VX = auto()   # Fx18
    ADD_I_VX = auto()   # Fx1E
    LD_F_VX = auto()    # Fx29
    LD_B_VX = auto()    # Fx33
    LD_MEM_VX = auto()  # Fx55
    LD_VX_MEM = auto()  # Fx65


# Second-level tables for the multi-form families
ALU_OPS: Dict[int, Op] = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

KEY_OPS: Dict[int, Op] = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

MISC_OPS: Dict[int, Op] = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.LD_MEM_VX,
    0x65: Op.LD_VX_MEM,
}

# Families fully identified by their high nibble
SIMPLE_OPS: Dict[int, Op] = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_BYTE,
    0x4: Op.SNE_BYTE,
    0x6: Op.LD_BYTE,
    0x7: Op.ADD_BYTE,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}


@dataclass(frozen=True)
class Instruction:
    """
    A decoded instruction word.

    All operand fields are extracted for every form; each handler reads
    only the ones its form defines.

    Attributes:
        op: The instruction form
        opcode: The raw 16-bit word
    """
    op: Op
    opcode: int

    @property
    def x(self) -> int:
        return (self.opcode >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.opcode >> 4) & 0xF

    @property
    def n(self) -> int:
        return self.opcode & 0xF

    @property
    def kk(self) -> int:
        return self.opcode & 0xFF

    @property
    def nnn(self) -> int:
        return self.opcode & 0xFFF


def _resolve(opcode: int) -> Optional[Op]:
    """Map a word to its form, or None if it matches nothing."""
    family = (opcode >> 12) & 0xF

    if family in SIMPLE_OPS:
        return SIMPLE_OPS[family]

    match family:
        case 0x0:
            if opcode == 0x00E0:
                return Op.CLS
            if opcode == 0x00EE:
                return Op.RET
            return Op.SYS
        case 0x5:
            return Op.SE_REG if opcode & 0xF == 0 else None
        case 0x8:
            return ALU_OPS.get(opcode & 0xF)
        case 0x9:
            return Op.SNE_REG if opcode & 0xF == 0 else None
        case 0xE:
            return KEY_OPS.get(opcode & 0xFF)
        case 0xF:
            return MISC_OPS.get(opcode & 0xFF)
    return None


def decode(opcode: int, address: Optional[int] = None) -> Instruction:
    """
    Decode one instruction word.

    Args:
        opcode: 16-bit instruction word
        address: Where the word was fetched from (for error reporting)

    Returns:
        The decoded Instruction

    Raises:
        UnknownOpcode: If the word matches no instruction form
    """
    opcode &= 0xFFFF
    op = _resolve(opcode)
    if op is None:
        raise UnknownOpcode(opcode, address=address)
    return Instruction(op, opcode)
