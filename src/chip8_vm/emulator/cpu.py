"""
CHIP-8 Execution Engine
=======================

Fetch-decode-execute engine for the CHIP-8 virtual machine.

Each cycle:
    1. If an Fx0A key wait is pending, poll the keypad and return
    2. Fetch the big-endian word at pc
    3. Decode it into an Instruction (UnknownOpcode if nothing matches)
    4. Dispatch to the handler for its form; the handler updates pc

Every failure is detected before the handler mutates anything, so a
raised ExecutionError leaves the machine exactly as it was.

Flag semantics:
    - VF is written after the result register, so instructions whose
      destination is VF end with the flag value in VF
    - 8xy6/8xyE shift Vx in place; Vy is encoded but not read
    - DRW sets VF to 1 on collision, 0 otherwise

Timers are not touched by cycles; an external 60 Hz driver calls
tick_timers().

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
import random
from typing import Callable, Dict, Optional

from ..errors import ProtectedMemoryWrite, StackOverflow, StackUnderflow, UnknownOpcode
from .decoder import Instruction, Op, decode
from .state import ADDRESS_MASK, FONT_ADDRESS, FONT_GLYPH_SIZE, NUM_KEYS, PROGRAM_START, STACK_DEPTH, MachineState

logger = logging.getLogger(__name__)


class Chip8CPU:
    """
    CHIP-8 interpreter core with instrumentation support.

    The engine owns one MachineState and is its only mutator during a
    cycle. It never blocks: the Fx0A key wait is a flag on the state that
    is polled at the top of each cycle.

    Instrumentation hooks allow:
    - Tracing every instruction before execution
    - Implementing breakpoints and register conditions

    Example:
        >>> cpu = Chip8CPU()
        >>> cpu.state.load_program(bytes([0x60, 0x2A]))  # LD V0, 0x2A
        >>> _ = cpu.step()
        >>> print(f"V0=${cpu.state.v[0]:02X} PC=${cpu.pc:03X}")
        V0=$2A PC=$202
    """

    def __init__(
        self,
        state: Optional[MachineState] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the engine.

        Args:
            state: Machine state to operate on (a fresh one if None)
            rng: Random source for RND (a new unseeded Random if None)
        """
        self.state = state if state is not None else MachineState()
        self.rng = rng if rng is not None else random.Random()

        # on_instruction(pc, opcode) -> bool: return False to stop execute()
        self.on_instruction: Optional[Callable[[int, int], bool]] = None

        # Log every executed instruction at DEBUG level
        self.trace: bool = False

        self._handlers: Dict[Op, Callable[[Instruction], None]] = {
            Op.CLS: self._op_cls,
            Op.RET: self._op_ret,
            Op.JP: self._op_jp,
            Op.CALL: self._op_call,
            Op.SE_BYTE: self._op_se_byte,
            Op.SNE_BYTE: self._op_sne_byte,
            Op.SE_REG: self._op_se_reg,
            Op.LD_BYTE: self._op_ld_byte,
            Op.ADD_BYTE: self._op_add_byte,
            Op.LD_REG: self._op_ld_reg,
            Op.OR: self._op_or,
            Op.AND: self._op_and,
            Op.XOR: self._op_xor,
            Op.ADD_REG: self._op_add_reg,
            Op.SUB: self._op_sub,
            Op.SHR: self._op_shr,
            Op.SUBN: self._op_subn,
            Op.SHL: self._op_shl,
            Op.SNE_REG: self._op_sne_reg,
            Op.LD_I: self._op_ld_i,
            Op.JP_V0: self._op_jp_v0,
            Op.RND: self._op_rnd,
            Op.DRW: self._op_drw,
            Op.SKP: self._op_skp,
            Op.SKNP: self._op_sknp,
            Op.LD_VX_DT: self._op_ld_vx_dt,
            Op.LD_VX_K: self._op_ld_vx_k,
            Op.LD_DT_VX: self._op_ld_dt_vx,
            Op.LD_ST_VX: self._op_ld_st_vx,
            Op.ADD_I_VX: self._op_add_i_vx,
            Op.LD_F_VX: self._op_ld_f_vx,
            Op.LD_B_VX: self._op_ld_b_vx,
            Op.LD_MEM_VX: self._op_ld_mem_vx,
            Op.LD_VX_MEM: self._op_ld_vx_mem,
        }

    # ========================================
    # Register Properties
    # ========================================

    @property
    def pc(self) -> int:
        """Program counter (12-bit)."""
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value & ADDRESS_MASK

    @property
    def waiting_for_key(self) -> bool:
        """True while an Fx0A instruction is waiting for a key press."""
        return self.state.awaiting_key is not None

    # ========================================
    # Memory Access
    # ========================================

    def _read_byte(self, addr: int) -> int:
        return self.state.memory[addr & ADDRESS_MASK]

    def fetch(self) -> int:
        """Read the instruction word at pc without advancing it."""
        return (self._read_byte(self.pc) << 8) | self._read_byte(self.pc + 1)

    def _advance(self, skip: bool = False) -> None:
        """Move pc past this instruction, and past the next one if skip."""
        self.pc = self.pc + (4 if skip else 2)

    # ========================================
    # Main Execution Loop
    # ========================================

    def step(self) -> Optional[Instruction]:
        """
        Execute exactly one cycle.

        Returns:
            The instruction that completed, or None if the engine is
            waiting for a key press (pc not advanced)

        Raises:
            UnknownOpcode: The word at pc is not a valid instruction
            StackOverflow: CALL with a full stack
            StackUnderflow: RET with an empty stack
            ProtectedMemoryWrite: Fx33/Fx55 targeting memory below $200
        """
        if self.state.awaiting_key is not None:
            return self._poll_key_wait()

        address = self.pc
        opcode = self.fetch()
        instruction = decode(opcode, address=address)

        handler = self._handlers.get(instruction.op)
        if handler is None:
            raise UnknownOpcode(
                opcode,
                address=address,
                message="machine-language subroutine calls are not supported",
            )

        if self.trace:
            logger.debug(f"${address:03X}: {opcode:04X} {instruction.op.name}")

        handler(instruction)

        if self.state.awaiting_key is not None:
            return None
        return instruction

    def execute(self, max_cycles: int) -> int:
        """
        Execute up to max_cycles cycles.

        Execution stops early if:
        - The on_instruction hook returns False (breakpoint hit)
        - An Fx0A key wait is pending

        Args:
            max_cycles: Maximum number of cycles to execute

        Returns:
            Number of cycles actually executed

        Raises:
            ExecutionError: Propagated from step(); cycles completed
                before the failing one are already applied
        """
        cycles = 0

        while cycles < max_cycles:
            if self.state.awaiting_key is None and self.on_instruction:
                if not self.on_instruction(self.pc, self.fetch()):
                    break

            result = self.step()
            cycles += 1

            if result is None:
                break

        return cycles

    # ========================================
    # Timers
    # ========================================

    def tick_timers(self) -> None:
        """
        Count both timers down by one, stopping at zero.

        Intended to be called at 60 Hz regardless of the cycle rate.
        """
        if self.state.delay_timer > 0:
            self.state.delay_timer -= 1
        if self.state.sound_timer > 0:
            self.state.sound_timer -= 1

    # ========================================
    # Key Wait
    # ========================================

    def _first_pressed_key(self) -> Optional[int]:
        for key in range(NUM_KEYS):
            if self.state.keypad[key]:
                return key
        return None

    def _poll_key_wait(self) -> Optional[Instruction]:
        """Finish a pending Fx0A if a key is held."""
        key = self._first_pressed_key()
        if key is None:
            return None

        instruction = decode(self.fetch(), address=self.pc)
        register = self.state.awaiting_key
        self.state.v[register] = key
        self.state.awaiting_key = None
        self._advance()
        logger.debug(f"Key wait satisfied: V{register:X}={key:X}")
        return instruction

    # ========================================
    # Instruction Handlers
    # ========================================

    def _op_cls(self, ins: Instruction) -> None:
        self.state.display.clear()
        self.state.draw_flag = True
        self._advance()

    def _op_ret(self, ins: Instruction) -> None:
        if self.state.sp == 0:
            raise StackUnderflow(address=self.pc, opcode=ins.opcode)
        self.state.sp -= 1
        self.pc = self.state.stack[self.state.sp]

    def _op_jp(self, ins: Instruction) -> None:
        self.pc = ins.nnn

    def _op_call(self, ins: Instruction) -> None:
        if self.state.sp == STACK_DEPTH:
            raise StackOverflow(address=self.pc, opcode=ins.opcode)
        self.state.stack[self.state.sp] = (self.pc + 2) & ADDRESS_MASK
        self.state.sp += 1
        self.pc = ins.nnn

    def _op_se_byte(self, ins: Instruction) -> None:
        self._advance(self.state.v[ins.x] == ins.kk)

    def _op_sne_byte(self, ins: Instruction) -> None:
        self._advance(self.state.v[ins.x] != ins.kk)

    def _op_se_reg(self, ins: Instruction) -> None:
        self._advance(self.state.v[ins.x] == self.state.v[ins.y])

    def _op_ld_byte(self, ins: Instruction) -> None:
        self.state.v[ins.x] = ins.kk
        self._advance()

    def _op_add_byte(self, ins: Instruction) -> None:
        # No carry flag for the immediate form
        self.state.v[ins.x] = (self.state.v[ins.x] + ins.kk) & 0xFF
        self._advance()

    def _op_ld_reg(self, ins: Instruction) -> None:
        self.state.v[ins.x] = self.state.v[ins.y]
        self._advance()

    def _op_or(self, ins: Instruction) -> None:
        self.state.v[ins.x] |= self.state.v[ins.y]
        self._advance()

    def _op_and(self, ins: Instruction) -> None:
        self.state.v[ins.x] &= self.state.v[ins.y]
        self._advance()

    def _op_xor(self, ins: Instruction) -> None:
        self.state.v[ins.x] ^= self.state.v[ins.y]
        self._advance()

    def _op_add_reg(self, ins: Instruction) -> None:
        v = self.state.v
        total = v[ins.x] + v[ins.y]
        v[ins.x] = total & 0xFF
        v[0xF] = 1 if total > 0xFF else 0
        self._advance()

    def _op_sub(self, ins: Instruction) -> None:
        v = self.state.v
        no_borrow = v[ins.x] >= v[ins.y]
        v[ins.x] = (v[ins.x] - v[ins.y]) & 0xFF
        v[0xF] = 1 if no_borrow else 0
        self._advance()

    def _op_shr(self, ins: Instruction) -> None:
        v = self.state.v
        lsb = v[ins.x] & 0x01
        v[ins.x] >>= 1
        v[0xF] = lsb
        self._advance()

    def _op_subn(self, ins: Instruction) -> None:
        v = self.state.v
        no_borrow = v[ins.y] >= v[ins.x]
        v[ins.x] = (v[ins.y] - v[ins.x]) & 0xFF
        v[0xF] = 1 if no_borrow else 0
        self._advance()

    def _op_shl(self, ins: Instruction) -> None:
        v = self.state.v
        msb = (v[ins.x] >> 7) & 0x01
        v[ins.x] = (v[ins.x] << 1) & 0xFF
        v[0xF] = msb
        self._advance()

    def _op_sne_reg(self, ins: Instruction) -> None:
        self._advance(self.state.v[ins.x] != self.state.v[ins.y])

    def _op_ld_i(self, ins: Instruction) -> None:
        self.state.i = ins.nnn
        self._advance()

    def _op_jp_v0(self, ins: Instruction) -> None:
        self.pc = ins.nnn + self.state.v[0]

    def _op_rnd(self, ins: Instruction) -> None:
        self.state.v[ins.x] = self.rng.randrange(256) & ins.kk
        self._advance()

    def _op_drw(self, ins: Instruction) -> None:
        state = self.state
        sprite = [self._read_byte(state.i + row) for row in range(ins.n)]
        collision = state.display.draw_sprite(state.v[ins.x], state.v[ins.y], sprite)
        if sprite:
            state.draw_flag = True
        state.v[0xF] = 1 if collision else 0
        self._advance()

    def _op_skp(self, ins: Instruction) -> None:
        self._advance(self.state.keypad[self.state.v[ins.x] & 0xF])

    def _op_sknp(self, ins: Instruction) -> None:
        self._advance(not self.state.keypad[self.state.v[ins.x] & 0xF])

    def _op_ld_vx_dt(self, ins: Instruction) -> None:
        self.state.v[ins.x] = self.state.delay_timer
        self._advance()

    def _op_ld_vx_k(self, ins: Instruction) -> None:
        key = self._first_pressed_key()
        if key is None:
            # pc stays on this instruction until a key arrives
            self.state.awaiting_key = ins.x
            logger.debug(f"Waiting for key into V{ins.x:X}")
            return
        self.state.v[ins.x] = key
        self._advance()

    def _op_ld_dt_vx(self, ins: Instruction) -> None:
        self.state.delay_timer = self.state.v[ins.x]
        self._advance()

    def _op_ld_st_vx(self, ins: Instruction) -> None:
        self.state.sound_timer = self.state.v[ins.x]
        self._advance()

    def _op_add_i_vx(self, ins: Instruction) -> None:
        self.state.i = (self.state.i + self.state.v[ins.x]) & 0xFFFF
        self._advance()

    def _op_ld_f_vx(self, ins: Instruction) -> None:
        self.state.i = FONT_ADDRESS + FONT_GLYPH_SIZE * self.state.v[ins.x]
        self._advance()

    def _store_targets(self, ins: Instruction, count: int) -> list[int]:
        """Addresses an I-relative store will write, checked against $000-$1FF."""
        targets = [(self.state.i + offset) & ADDRESS_MASK for offset in range(count)]
        for target in targets:
            if target < PROGRAM_START:
                raise ProtectedMemoryWrite(target, address=self.pc, opcode=ins.opcode)
        return targets

    def _op_ld_b_vx(self, ins: Instruction) -> None:
        value = self.state.v[ins.x]
        targets = self._store_targets(ins, 3)
        for target, digit in zip(targets, (value // 100, (value // 10) % 10, value % 10)):
            self.state.memory[target] = digit
        self._advance()

    def _op_ld_mem_vx(self, ins: Instruction) -> None:
        targets = self._store_targets(ins, ins.x + 1)
        for register, target in enumerate(targets):
            self.state.memory[target] = self.state.v[register]
        self._advance()

    def _op_ld_vx_mem(self, ins: Instruction) -> None:
        for register in range(ins.x + 1):
            self.state.v[register] = self._read_byte(self.state.i + register)
        self._advance()

    def __repr__(self) -> str:
        return (
            f"Chip8CPU(pc=${self.pc:03X}, i=${self.state.i:03X}, "
            f"sp={self.state.sp})"
        )
