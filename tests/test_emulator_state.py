"""
Machine State Tests
===================

Tests for MachineState: construction, initialise() and program loading.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import pytest

from chip8_vm.emulator import FONT, MEMORY_SIZE, PROGRAM_CAPACITY, PROGRAM_START, MachineState
from chip8_vm.errors import ProgramTooLarge


@pytest.fixture
def state():
    """Create a fresh machine state."""
    return MachineState()


# =============================================================================
# Construction Tests
# =============================================================================

class TestConstruction:
    """Test initial machine state."""

    def test_sizes(self, state):
        """Fixed sizes for memory, registers, stack and keypad."""
        assert len(state.memory) == MEMORY_SIZE == 4096
        assert len(state.v) == 16
        assert len(state.stack) == 16
        assert len(state.keypad) == 16

    def test_power_on_registers(self, state):
        """pc starts at $200, everything else at zero."""
        assert state.pc == 0x200
        assert state.i == 0
        assert state.sp == 0
        assert state.delay_timer == 0
        assert state.sound_timer == 0
        assert all(value == 0 for value in state.v)
        assert state.awaiting_key is None
        assert state.draw_flag is False

    def test_font_loaded(self, state):
        """The 80-byte font sits at $000."""
        assert len(FONT) == 80
        assert bytes(state.memory[0:80]) == FONT

    def test_font_glyph_zero(self, state):
        """Glyph 0 is the classic hollow box."""
        assert list(state.memory[0:5]) == [0xF0, 0x90, 0x90, 0x90, 0xF0]

    def test_program_space_empty(self, state):
        """Memory above the font is zeroed."""
        assert not any(state.memory[0x50:])


# =============================================================================
# initialise() Tests
# =============================================================================

class TestInitialise:
    """Test resetting the state."""

    def test_resets_registers(self, state):
        """initialise() clears registers, stack and timers."""
        state.pc = 0x345
        state.i = 0x123
        state.v[3] = 0x42
        state.stack[0] = 0x222
        state.sp = 1
        state.delay_timer = 10
        state.sound_timer = 20
        state.keypad[4] = True
        state.draw_flag = True
        state.awaiting_key = 2
        state.display.draw_sprite(0, 0, [0xFF])

        state.initialise()

        assert state.pc == PROGRAM_START
        assert state.i == 0
        assert state.v[3] == 0
        assert state.stack[0] == 0
        assert state.sp == 0
        assert state.delay_timer == 0
        assert state.sound_timer == 0
        assert state.keypad[4] is False
        assert state.draw_flag is False
        assert state.awaiting_key is None
        assert state.display.lit_count() == 0

    def test_restores_font(self, state):
        """A damaged font is reloaded."""
        state.memory[0] = 0x00
        state.initialise()
        assert bytes(state.memory[0:80]) == FONT

    def test_keeps_program(self, state):
        """Program memory survives a reset."""
        state.load_program(bytes([0x12, 0x00]))
        state.initialise()
        assert state.memory[0x200] == 0x12

    def test_idempotent(self, state):
        """Calling initialise() twice gives the same state."""
        state.initialise()
        first = (bytes(state.memory), bytes(state.v), state.pc, state.i, state.sp)
        state.initialise()
        second = (bytes(state.memory), bytes(state.v), state.pc, state.i, state.sp)
        assert first == second

    def test_keeps_object_identity(self, state):
        """Collaborators holding references see the reset in place."""
        memory, display, keypad = state.memory, state.display, state.keypad
        state.initialise()
        assert state.memory is memory
        assert state.display is display
        assert state.keypad is keypad


# =============================================================================
# load_program() Tests
# =============================================================================

class TestLoadProgram:
    """Test copying program images into memory."""

    def test_loads_at_0x200(self, state):
        """Program bytes land at $200 onward."""
        state.load_program(bytes([0x60, 0x2A, 0x70, 0x01]))
        assert list(state.memory[0x200:0x204]) == [0x60, 0x2A, 0x70, 0x01]

    def test_empty_program_is_noop(self, state):
        """Zero-length programs are accepted and change nothing."""
        before = bytes(state.memory)
        state.load_program(b"")
        assert bytes(state.memory) == before

    def test_exact_capacity(self, state):
        """A program filling $200-$FFF loads."""
        data = bytes([0xAB]) * PROGRAM_CAPACITY
        state.load_program(data)
        assert state.memory[0xFFF] == 0xAB
        assert bytes(state.memory[0:80]) == FONT

    def test_too_large(self, state):
        """One byte over capacity is rejected without touching memory."""
        before = bytes(state.memory)
        with pytest.raises(ProgramTooLarge) as exc_info:
            state.load_program(bytes(PROGRAM_CAPACITY + 1))
        assert exc_info.value.size == PROGRAM_CAPACITY + 1
        assert exc_info.value.capacity == 3584
        assert bytes(state.memory) == before

    def test_does_not_clear_low_memory(self, state):
        """Loading leaves the interpreter area alone."""
        state.memory[0x100] = 0x77
        state.load_program(bytes([0x00, 0xE0]))
        assert state.memory[0x100] == 0x77
