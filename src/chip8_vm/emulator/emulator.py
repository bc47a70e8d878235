"""
CHIP-8 Emulator - Main Orchestrator
===================================

This module provides the main `Emulator` class that ties the machine
state, the execution engine, the keypad and the breakpoint manager into
one high-level API for running and testing programs.

The Emulator class:
- Owns the MachineState and the Chip8CPU that mutates it
- Provides program loading from ROM files or raw bytes
- Exposes the two periodic entry points: step() and tick_timers()
- Supports execution control (run, run_frames, run_until_pc)
- Reports errors, key waits and breakpoints as BreakEvent results
- Offers display inspection and keypad input

Timing is the caller's business: step() is meant to be called at
CYCLE_RATE_HZ and tick_timers() at TIMER_RATE_HZ. run_frames() is a
headless convenience that interleaves the two without wall-clock pacing.

Example usage:
    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(seed=1))
    >>> emu.load_rom("maze.ch8")
    >>> event = emu.run_frames(60)
    >>> print(emu.display_text)

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
import random
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..errors import ExecutionError
from .breakpoints import BreakEvent, BreakpointManager, BreakReason
from .config import EmulatorConfig
from .cpu import Chip8CPU
from .display import Display
from .keyboard import Key, Keyboard
from .state import ADDRESS_MASK, MachineState

logger = logging.getLogger(__name__)


class Emulator:
    """
    CHIP-8 emulator with instrumentation support.

    This is the main entry point for emulator usage. Errors raised by the
    engine never escape step() or the run methods; they are returned as
    BreakEvent(reason=BreakReason.ERROR) with the machine state left as it
    was before the failing cycle.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        state: The MachineState (memory, registers, display, keypad)
        cpu: The Chip8CPU execution engine
        keyboard: The keypad controller
        breakpoints: The breakpoint manager

    Example:
        >>> emu = Emulator()
        >>> emu.load_program(bytes([0x60, 0x05, 0xF0, 0x29, 0xD0, 0x05]))
        >>> emu.run(3).reason
        <BreakReason.MAX_CYCLES: 7>
        >>> emu.draw_flag
        True
    """

    def __init__(self, config: Optional[EmulatorConfig] = None):
        """
        Initialize the emulator with given configuration.

        Args:
            config: EmulatorConfig with RND seed and trace settings. If
                    None, defaults are used.
        """
        self.config = config or EmulatorConfig()

        self.state = MachineState()
        self.cpu = Chip8CPU(self.state, rng=random.Random(self.config.seed))
        self.cpu.trace = self.config.trace
        self.keyboard = Keyboard(self.state)
        self.breakpoints = BreakpointManager()

        self.cpu.on_instruction = self._instruction_hook

        self._is_running = False
        self._total_cycles = 0

    def _instruction_hook(self, pc: int, opcode: int) -> bool:
        """
        Internal hook called before each instruction during run().

        Returns:
            True to continue execution, False to stop (breakpoint hit)
        """
        return self.breakpoints.check_instruction(self.state, pc, opcode)

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_program(self, data: bytes) -> None:
        """
        Load a program image at $200.

        Args:
            data: Program bytes

        Raises:
            ProgramTooLarge: If the image exceeds the program space
                (state unchanged)
        """
        self.state.load_program(data)

    def load_rom(self, path: Union[str, Path]) -> None:
        """
        Read a ROM file and load it at $200.

        Args:
            path: Path to the ROM file

        Raises:
            FileNotFoundError: If the ROM file doesn't exist
            ProgramTooLarge: If the ROM exceeds the program space
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"ROM file not found: {path}")

        self.load_program(path.read_bytes())
        logger.debug(f"Loaded ROM {path.name}")

    def load_bytes(self, data: bytes, address: int) -> None:
        """
        Write raw bytes anywhere in memory (addresses wrap at $FFF).

        Intended for tests and tooling; programs are loaded with
        load_program().
        """
        for offset, byte in enumerate(data):
            self.state.memory[(address + offset) & ADDRESS_MASK] = byte

    # =========================================================================
    # Execution Control
    # =========================================================================

    def reset(self) -> None:
        """
        Reset the machine to power-on state.

        Registers, stack, timers, display and keypad are cleared and pc
        returns to $200. Loaded program memory is kept.
        """
        self.state.initialise()
        self._is_running = False
        self._total_cycles = 0
        self.breakpoints.clear_break_request()
        self.breakpoints.clear_last_event()

    def step(self) -> BreakEvent:
        """
        Execute a single cycle, ignoring breakpoints.

        Returns:
            BreakEvent with reason STEP (instruction completed), KEY_WAIT
            (Fx0A still waiting, pc not advanced) or ERROR
        """
        address = self.state.pc
        try:
            result = self.cpu.step()
        except ExecutionError as e:
            return self._error_event(e)

        self._total_cycles += 1

        if result is None:
            return BreakEvent(
                BreakReason.KEY_WAIT,
                address=address,
                message=f"Waiting for key at ${address:03X}"
            )
        return BreakEvent(
            BreakReason.STEP,
            address=self.state.pc,
            message=f"Step at ${self.state.pc:03X}"
        )

    def run(self, max_cycles: int = 1_000_000) -> BreakEvent:
        """
        Run until a breakpoint, an error, a key wait or max_cycles.

        A PC breakpoint at the current pc is stepped over so that
        repeated calls make progress.

        Args:
            max_cycles: Maximum number of cycles to execute

        Returns:
            BreakEvent describing why execution stopped
        """
        self.breakpoints.clear_last_event()
        executed = 0

        if max_cycles > 0 and self.breakpoints.has_breakpoint(self.state.pc):
            event = self.step()
            if event.reason != BreakReason.STEP:
                return event
            executed = 1

        self._is_running = True
        try:
            cycles = self.cpu.execute(max_cycles - executed)
        except ExecutionError as e:
            return self._error_event(e)
        finally:
            self._is_running = False

        self._total_cycles += cycles

        if self.breakpoints.last_event is not None:
            return self.breakpoints.last_event

        if self.cpu.waiting_for_key:
            return BreakEvent(
                BreakReason.KEY_WAIT,
                address=self.state.pc,
                message=f"Waiting for key at ${self.state.pc:03X}"
            )

        return BreakEvent(
            BreakReason.MAX_CYCLES,
            address=self.state.pc,
            message=f"Reached max cycles ({max_cycles})"
        )

    def run_frames(self, frames: int, stop_on_key_wait: bool = False) -> BreakEvent:
        """
        Run whole 60 Hz frames headlessly.

        Each frame executes config.cycles_per_tick cycles followed by one
        timer tick. Key waits consume the rest of their frame (timers keep
        running) unless stop_on_key_wait is set.

        Args:
            frames: Number of frames to run
            stop_on_key_wait: Return as soon as a key wait is pending

        Returns:
            The event that stopped execution early, or MAX_CYCLES after
            all frames completed
        """
        for _ in range(frames):
            event = self.run(self.config.cycles_per_tick)
            if event.reason == BreakReason.KEY_WAIT and not stop_on_key_wait:
                self.tick_timers()
                continue
            if event.reason != BreakReason.MAX_CYCLES:
                return event
            self.tick_timers()

        return BreakEvent(
            BreakReason.MAX_CYCLES,
            address=self.state.pc,
            message=f"Completed {frames} frames"
        )

    def run_until_pc(self, address: int, max_cycles: int = 1_000_000) -> bool:
        """
        Run until pc reaches a specific address.

        Creates a temporary breakpoint at the address and runs until hit.

        Args:
            address: 12-bit address to stop at
            max_cycles: Maximum cycles before giving up

        Returns:
            True if address was reached, False otherwise
        """
        was_set = self.breakpoints.has_breakpoint(address)
        if not was_set:
            self.breakpoints.add_breakpoint(address)

        try:
            event = self.run(max_cycles)
            return (event.reason == BreakReason.PC_BREAKPOINT and
                    event.address == address)
        finally:
            if not was_set:
                self.breakpoints.remove_breakpoint(address)

    def tick_timers(self) -> None:
        """Count the delay and sound timers down by one (60 Hz entry point)."""
        self.cpu.tick_timers()

    def _error_event(self, error: ExecutionError) -> BreakEvent:
        logger.warning(f"Execution stopped: {error}")
        return BreakEvent(
            BreakReason.ERROR,
            address=self.state.pc,
            error=error,
            message=str(error)
        )

    # =========================================================================
    # Breakpoint Management (delegates to BreakpointManager)
    # =========================================================================

    def add_breakpoint(self, address: int) -> None:
        """Add a PC breakpoint at the specified address."""
        self.breakpoints.add_breakpoint(address)

    def remove_breakpoint(self, address: int) -> None:
        """Remove a PC breakpoint at the specified address."""
        self.breakpoints.remove_breakpoint(address)

    def clear_breakpoints(self) -> None:
        """Remove all breakpoints and register conditions."""
        self.breakpoints.clear_all()

    # =========================================================================
    # Keypad Input
    # =========================================================================

    def press_key(self, key: Key) -> None:
        """
        Press a key (held until release_key()).

        Args:
            key: Keypad index 0-15 or host key name ('1', 'Q', 'V', ...)
        """
        self.keyboard.key_down(key)

    def release_key(self, key: Key) -> None:
        """Release a previously pressed key."""
        self.keyboard.key_up(key)

    # =========================================================================
    # Display and Sound Output
    # =========================================================================

    @property
    def display(self) -> Display:
        """The 64x32 framebuffer."""
        return self.state.display

    @property
    def display_text(self) -> str:
        """Framebuffer as 32 lines of '#' (lit) and '.' (unlit)."""
        return self.state.display.get_text()

    @property
    def draw_flag(self) -> bool:
        """True if the display changed since the last consume_frame()."""
        return self.state.draw_flag

    def consume_frame(self) -> bool:
        """
        Acknowledge the current frame.

        Returns:
            True if a new frame was pending; the draw flag is cleared
        """
        pending = self.state.draw_flag
        self.state.draw_flag = False
        return pending

    def render_display(self, scale: int = 8) -> bytes:
        """Render the framebuffer as PNG bytes."""
        return self.state.display.render_image(scale=scale)

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is non-zero (tone should play)."""
        return self.state.sound_timer > 0

    # =========================================================================
    # Memory Access
    # =========================================================================

    def read_byte(self, address: int) -> int:
        """Read a single byte from memory."""
        return self.state.memory[address & ADDRESS_MASK]

    def read_bytes(self, address: int, count: int) -> bytes:
        """Read count bytes starting at address (wrapping at $FFF)."""
        return bytes(self.state.memory[(address + i) & ADDRESS_MASK] for i in range(count))

    def write_bytes(self, address: int, data: bytes) -> None:
        """Write bytes starting at address (wrapping at $FFF)."""
        self.load_bytes(data, address)

    # =========================================================================
    # State Inspection
    # =========================================================================

    @property
    def registers(self) -> Dict[str, int]:
        """
        Get current register values as a dictionary.

        Returns:
            Dictionary with keys v0-vf, i, pc, sp, dt, st
        """
        result = {f"v{index:x}": value for index, value in enumerate(self.state.v)}
        result.update({
            "i": self.state.i,
            "pc": self.state.pc,
            "sp": self.state.sp,
            "dt": self.state.delay_timer,
            "st": self.state.sound_timer,
        })
        return result

    @property
    def total_cycles(self) -> int:
        """Total cycles executed since last reset."""
        return self._total_cycles

    @property
    def is_running(self) -> bool:
        """True if in the middle of run()."""
        return self._is_running

    # =========================================================================
    # Debug Helpers
    # =========================================================================

    def disassemble_at(self, address: Optional[int] = None, count: int = 10) -> List[str]:
        """
        Disassemble instructions from memory.

        Args:
            address: Starting address (default: current pc)
            count: Number of instructions to disassemble

        Returns:
            List of disassembly lines
        """
        from ..disassembler import Chip8Disassembler

        if address is None:
            address = self.state.pc
        data = self.read_bytes(address, count * 2)
        disasm = Chip8Disassembler()
        return [str(instr) for instr in disasm.disassemble(data, address, count)]

    def __repr__(self) -> str:
        """Return string representation of emulator state."""
        return (
            f"Emulator(pc=${self.state.pc:03X}, "
            f"i=${self.state.i:03X}, "
            f"cycles={self._total_cycles})"
        )
