"""
Emulator Integration Tests
==========================

Tests for the complete emulator system, verifying that all components
work together correctly.

These tests ensure:
- Program loading from bytes and ROM files
- Stepping and running with break events
- Errors surfaced as BreakEvent results, never raised
- Headless frame driving with timers
- Keypad input and the key wait
- Display, memory and register access

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging

import pytest

from chip8_vm.emulator import BreakReason, Emulator, EmulatorConfig
from chip8_vm.errors import ProgramTooLarge, StackUnderflow, UnknownOpcode


def program(*words):
    """Assemble 16-bit words into a big-endian program image."""
    data = bytearray()
    for word in words:
        data += bytes([word >> 8, word & 0xFF])
    return bytes(data)


@pytest.fixture
def emu():
    """Create an emulator with a fixed RND seed."""
    return Emulator(EmulatorConfig(seed=1))


# =============================================================================
# Loading Tests
# =============================================================================

class TestLoading:
    """Test program loading."""

    def test_load_program(self, emu):
        """Program bytes appear at $200."""
        emu.load_program(program(0x602A))
        assert emu.read_bytes(0x200, 2) == b"\x60\x2A"

    def test_load_rom(self, emu, tmp_path):
        """ROM files are read and loaded at $200."""
        rom = tmp_path / "test.ch8"
        rom.write_bytes(program(0x00E0, 0x1202))
        emu.load_rom(rom)
        assert emu.read_bytes(0x200, 4) == b"\x00\xE0\x12\x02"

    def test_load_rom_missing(self, emu, tmp_path):
        """A missing ROM raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            emu.load_rom(tmp_path / "nope.ch8")

    def test_load_rom_too_large(self, emu, tmp_path):
        """An oversized ROM raises ProgramTooLarge."""
        rom = tmp_path / "big.ch8"
        rom.write_bytes(bytes(4000))
        with pytest.raises(ProgramTooLarge):
            emu.load_rom(rom)

    def test_reset_keeps_program(self, emu):
        """reset() clears registers and keeps program memory."""
        emu.load_program(program(0x602A, 0x1202))
        emu.run(5)
        emu.reset()
        assert emu.registers["pc"] == 0x200
        assert emu.registers["v0"] == 0
        assert emu.total_cycles == 0
        assert emu.read_byte(0x200) == 0x60


# =============================================================================
# Stepping Tests
# =============================================================================

class TestStep:
    """Test single-cycle execution."""

    def test_step_event(self, emu):
        """step() reports STEP with the new pc."""
        emu.load_program(program(0x602A))
        event = emu.step()
        assert event.reason == BreakReason.STEP
        assert event.address == 0x202
        assert emu.registers["v0"] == 0x2A
        assert emu.total_cycles == 1

    def test_step_error_is_event(self, emu, caplog):
        """Execution errors come back as ERROR events and are logged."""
        emu.load_program(program(0xFFFF))
        with caplog.at_level(logging.WARNING, logger="chip8_vm.emulator.emulator"):
            event = emu.step()
        assert event.is_error
        assert isinstance(event.error, UnknownOpcode)
        assert event.address == 0x200
        assert emu.registers["pc"] == 0x200
        assert "FFFF" in caplog.text

    def test_step_stack_underflow(self, emu):
        """RET on an empty stack is reported, not raised."""
        emu.load_program(program(0x00EE))
        event = emu.step()
        assert isinstance(event.error, StackUnderflow)
        assert emu.registers["sp"] == 0

    def test_step_key_wait(self, emu):
        """A pending key wait is reported as KEY_WAIT."""
        emu.load_program(program(0xF00A))
        assert emu.step().reason == BreakReason.KEY_WAIT
        assert emu.step().reason == BreakReason.KEY_WAIT
        emu.press_key(4)
        assert emu.step().reason == BreakReason.STEP
        assert emu.registers["v0"] == 4
        assert emu.registers["pc"] == 0x202


# =============================================================================
# Run Tests
# =============================================================================

class TestRun:
    """Test run() and its stop reasons."""

    def test_max_cycles(self, emu):
        """An endless loop stops at max_cycles."""
        emu.load_program(program(0x1200))
        event = emu.run(50)
        assert event.reason == BreakReason.MAX_CYCLES
        assert emu.total_cycles == 50
        assert not emu.is_running

    def test_breakpoint_and_resume(self, emu):
        """run() stops at a breakpoint and resumes past it."""
        emu.load_program(program(0x6001, 0x6102, 0x6203, 0x1206))
        emu.add_breakpoint(0x204)

        event = emu.run(100)
        assert event.reason == BreakReason.PC_BREAKPOINT
        assert event.address == 0x204
        assert emu.registers["v1"] == 2
        assert emu.registers["v2"] == 0

        event = emu.run(10)
        assert event.reason == BreakReason.MAX_CYCLES
        assert emu.registers["v2"] == 3

    def test_register_condition(self, emu):
        """Register conditions stop run()."""
        emu.load_program(program(0x7001, 0x1200))
        emu.breakpoints.add_condition("v0", "==", 3)
        event = emu.run(1000)
        assert event.reason == BreakReason.REGISTER_CONDITION
        assert event.address == 0x202
        assert emu.registers["v0"] == 3

    def test_run_error(self, emu):
        """An error mid-run stops with ERROR and keeps earlier effects."""
        emu.load_program(program(0x6001, 0xFFFF))
        event = emu.run(100)
        assert event.reason == BreakReason.ERROR
        assert event.address == 0x202
        assert emu.registers["v0"] == 1

    def test_run_stack_overflow(self, emu):
        """Unbounded recursion ends in a StackOverflow event."""
        emu.load_program(program(0x2200))
        event = emu.run(100)
        assert event.is_error
        assert "stack overflow" in str(event)
        assert emu.registers["sp"] == 16

    def test_run_key_wait(self, emu):
        """run() returns on a key wait and continues after a press."""
        emu.load_program(program(0xF00A, 0x1202))
        assert emu.run(100).reason == BreakReason.KEY_WAIT

        emu.press_key("W")
        emu.run(5)
        assert emu.registers["v0"] == 5

    def test_clear_breakpoints(self, emu):
        """clear_breakpoints removes everything."""
        emu.load_program(program(0x1200))
        emu.add_breakpoint(0x200)
        emu.clear_breakpoints()
        assert emu.run(10).reason == BreakReason.MAX_CYCLES


class TestRunUntilPc:
    """Test run_until_pc()."""

    def test_reached(self, emu):
        """Returns True when the address is reached."""
        emu.load_program(program(0x6001, 0x6102, 0x6203, 0x1206))
        assert emu.run_until_pc(0x204) is True
        assert emu.registers["pc"] == 0x204
        assert not emu.breakpoints.has_breakpoint(0x204)

    def test_not_reached(self, emu):
        """Returns False when max_cycles runs out first."""
        emu.load_program(program(0x1200))
        assert emu.run_until_pc(0x300, max_cycles=100) is False

    def test_keeps_existing_breakpoint(self, emu):
        """A pre-existing breakpoint at the target survives."""
        emu.load_program(program(0x6001, 0x6102, 0x1204))
        emu.add_breakpoint(0x204)
        assert emu.run_until_pc(0x204) is True
        assert emu.breakpoints.has_breakpoint(0x204)


# =============================================================================
# Frame and Timer Tests
# =============================================================================

class TestFrames:
    """Test headless frame driving."""

    def test_frames_tick_timers(self, emu):
        """Each frame ticks the timers once."""
        # V0 = 60; DT = V0; loop: V1 = DT; jump loop
        emu.load_program(program(0x603C, 0xF015, 0xF107, 0x1204))
        event = emu.run_frames(10)
        assert event.reason == BreakReason.MAX_CYCLES
        assert emu.registers["dt"] == 50
        assert emu.total_cycles == 10 * emu.config.cycles_per_tick

    def test_frames_stop_on_error(self, emu):
        """An error ends run_frames early."""
        emu.load_program(program(0xFFFF))
        assert emu.run_frames(5).reason == BreakReason.ERROR

    def test_key_wait_keeps_timers_running(self, emu):
        """Timers keep ticking while a key wait is pending."""
        emu.load_program(program(0x6005, 0xF015, 0xF00A))
        event = emu.run_frames(3)
        assert event.reason == BreakReason.MAX_CYCLES
        assert emu.registers["dt"] == 2
        assert emu.state.awaiting_key == 0

    def test_stop_on_key_wait(self, emu):
        """stop_on_key_wait returns as soon as the wait starts."""
        emu.load_program(program(0x6005, 0xF015, 0xF00A))
        event = emu.run_frames(3, stop_on_key_wait=True)
        assert event.reason == BreakReason.KEY_WAIT
        assert emu.registers["dt"] == 5

    def test_sound_active(self, emu):
        """sound_active follows the sound timer."""
        emu.load_program(program(0x6002, 0xF018))
        emu.run(2)
        assert emu.sound_active
        emu.tick_timers()
        emu.tick_timers()
        assert not emu.sound_active


# =============================================================================
# Display Tests
# =============================================================================

class TestDisplay:
    """Test display access through the emulator."""

    def test_draw_and_consume_frame(self, emu):
        """DRW sets the draw flag until the frame is consumed."""
        emu.load_program(program(0xD015))
        emu.step()
        assert emu.draw_flag is True
        assert emu.display.lit_count() == 14
        assert emu.display_text.split("\n")[0].startswith("####....")

        assert emu.consume_frame() is True
        assert emu.draw_flag is False
        assert emu.consume_frame() is False

    def test_render_display(self, emu):
        """render_display returns PNG bytes."""
        assert emu.render_display(scale=2).startswith(b"\x89PNG")

    def test_seeded_rnd_reproducible(self):
        """Equal seeds give equal RND sequences."""
        results = []
        for _ in range(2):
            emu = Emulator(EmulatorConfig(seed=7))
            emu.load_program(program(0xC0FF, 0xC1FF, 0xC2FF))
            emu.run(3)
            results.append((emu.registers["v0"], emu.registers["v1"], emu.registers["v2"]))
        assert results[0] == results[1]


# =============================================================================
# Memory and Register Access Tests
# =============================================================================

class TestInspection:
    """Test memory and register inspection."""

    def test_registers(self, emu):
        """registers exposes V0-VF, I, pc, sp and both timers."""
        regs = emu.registers
        assert set(regs) == {f"v{i:x}" for i in range(16)} | {"i", "pc", "sp", "dt", "st"}
        assert regs["pc"] == 0x200

    def test_write_and_read_wrap(self, emu):
        """Memory access wraps at $FFF."""
        emu.write_bytes(0xFFF, b"\x01\x02")
        assert emu.read_byte(0xFFF) == 1
        assert emu.read_byte(0x000) == 2
        assert emu.read_bytes(0xFFF, 2) == b"\x01\x02"

    def test_release_key(self, emu):
        """press_key and release_key drive the keypad latches."""
        emu.press_key("v")
        assert emu.state.keypad[0xF]
        emu.release_key(0xF)
        assert not emu.state.keypad[0xF]

    def test_press_unknown_key(self, emu):
        """Unknown key names raise ValueError."""
        with pytest.raises(ValueError):
            emu.press_key("?")

    def test_disassemble_at(self, emu):
        """disassemble_at lists instructions from memory."""
        emu.load_program(program(0x602A, 0x00E0))
        lines = emu.disassemble_at(0x200, 2)
        assert lines == ["$200: 60 2A  LD V0, 0x2A", "$202: 00 E0  CLS"]

    def test_disassemble_at_defaults_to_pc(self, emu):
        """Without an address the listing starts at pc."""
        emu.load_program(program(0x1204, 0x0000, 0x00E0))
        emu.step()
        assert emu.disassemble_at(count=1) == ["$204: 00 E0  CLS"]

    def test_repr(self, emu):
        """repr shows pc, I and the cycle count."""
        assert repr(emu) == "Emulator(pc=$200, i=$000, cycles=0)"
