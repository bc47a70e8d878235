"""
Machine State for the CHIP-8 Virtual Machine
============================================

The single mutable aggregate the execution engine operates on.

Memory Map:
    $000-$04F  Built-in hexadecimal font (16 glyphs x 5 bytes)
    $050-$1FF  Reserved for the interpreter (never written by programs)
    $200-$FFF  Program and data space

Registers:
    - V0-VF: 8-bit general purpose (VF doubles as carry/borrow/collision flag)
    - I: index register (addresses are taken modulo 4096)
    - pc: program counter, starts at $200
    - stack/sp: 16 return addresses, sp is the current depth
    - delay_timer, sound_timer: 8-bit, counted down at 60 Hz

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import ProgramTooLarge
from .display import Display

logger = logging.getLogger(__name__)


MEMORY_SIZE = 0x1000
PROGRAM_START = 0x200
PROGRAM_CAPACITY = MEMORY_SIZE - PROGRAM_START
ADDRESS_MASK = 0xFFF

NUM_REGISTERS = 16
STACK_DEPTH = 16
NUM_KEYS = 16

FONT_ADDRESS = 0x000
FONT_GLYPH_SIZE = 5

# Glyphs 0-F, 4 pixels wide (high nibble), 5 rows tall
FONT = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


@dataclass
class MachineState:
    """
    Complete CHIP-8 machine state.

    Plain data: the execution engine is the only thing that mutates it
    during a cycle. External collaborators touch keypad (input) and
    draw_flag (renderer) between cycles.

    All sizes are fixed at construction; initialise() resets contents in
    place so references held by collaborators stay valid.

    Attributes:
        memory: 4096 bytes of RAM
        v: Registers V0-VF
        i: Index register
        pc: Program counter
        stack: 16 return-address slots
        sp: Number of occupied stack slots (0 = empty)
        delay_timer: Delay timer (0-255)
        sound_timer: Sound timer (0-255), tone is on while non-zero
        display: 64x32 framebuffer
        keypad: 16 key latches, True while held
        draw_flag: Set when display changed, cleared by the renderer
        awaiting_key: Register index an Fx0A is waiting to fill, or None
    """
    memory: bytearray = field(default_factory=lambda: bytearray(MEMORY_SIZE))
    v: bytearray = field(default_factory=lambda: bytearray(NUM_REGISTERS))
    i: int = 0
    pc: int = PROGRAM_START
    stack: List[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    sp: int = 0
    delay_timer: int = 0
    sound_timer: int = 0
    display: Display = field(default_factory=Display)
    keypad: List[bool] = field(default_factory=lambda: [False] * NUM_KEYS)
    draw_flag: bool = False
    awaiting_key: Optional[int] = None

    def __post_init__(self):
        self.memory[FONT_ADDRESS:FONT_ADDRESS + len(FONT)] = FONT

    def initialise(self) -> None:
        """
        Reset to power-on state.

        Registers, stack, timers, display and keypad are cleared, pc is set
        to $200 and the font is (re)loaded at $000. Program memory above
        $200 is left as is. Safe to call any number of times.
        """
        self.pc = PROGRAM_START
        self.i = 0
        self.sp = 0
        for index in range(NUM_REGISTERS):
            self.v[index] = 0
        for index in range(STACK_DEPTH):
            self.stack[index] = 0
        for index in range(NUM_KEYS):
            self.keypad[index] = False
        self.delay_timer = 0
        self.sound_timer = 0
        self.display.clear()
        self.draw_flag = False
        self.awaiting_key = None

        self.memory[FONT_ADDRESS:FONT_ADDRESS + len(FONT)] = FONT

    def load_program(self, data: bytes) -> None:
        """
        Copy a program image into memory at $200.

        Memory below $200 is not touched. An empty program is accepted
        and changes nothing.

        Args:
            data: Program bytes

        Raises:
            ProgramTooLarge: If data does not fit in $200-$FFF (memory
                is left unchanged)
        """
        if len(data) > PROGRAM_CAPACITY:
            raise ProgramTooLarge(len(data), PROGRAM_CAPACITY)

        self.memory[PROGRAM_START:PROGRAM_START + len(data)] = data
        logger.debug(f"Loaded program: {len(data)} bytes at ${PROGRAM_START:03X}")

