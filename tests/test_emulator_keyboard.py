"""
Keypad Unit Tests
=================

Tests for key resolution and the Keyboard latch controller.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import pytest

from chip8_vm.emulator import HOST_KEYMAP, Keyboard, MachineState, resolve_key


@pytest.fixture
def state():
    """Create a fresh machine state."""
    return MachineState()


@pytest.fixture
def keyboard(state):
    """Create a keypad controller over the state."""
    return Keyboard(state)


# =============================================================================
# Key Resolution Tests
# =============================================================================

class TestResolveKey:
    """Test mapping of key names and indices."""

    def test_int_passthrough(self):
        """Integers select keypad keys directly."""
        assert resolve_key(0) == 0
        assert resolve_key(0xF) == 0xF

    @pytest.mark.parametrize("key", [-1, 16, 255])
    def test_int_out_of_range(self, key):
        """Integers outside 0-15 are rejected."""
        with pytest.raises(ValueError):
            resolve_key(key)

    @pytest.mark.parametrize("name,index", [
        ("1", 0x1), ("4", 0xC),
        ("Q", 0x4), ("R", 0xD),
        ("A", 0x7), ("F", 0xE),
        ("Z", 0xA), ("X", 0x0), ("C", 0xB), ("V", 0xF),
    ])
    def test_host_layout(self, name, index):
        """Host names follow the 1234/QWER/ASDF/ZXCV layout."""
        assert resolve_key(name) == index

    def test_case_insensitive(self):
        """Host names are case-insensitive."""
        assert resolve_key("w") == resolve_key("W") == 0x5

    def test_unknown_name(self):
        """Unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown key"):
            resolve_key("P")

    def test_keymap_covers_all_keys(self):
        """Every keypad key has exactly one host name."""
        assert sorted(HOST_KEYMAP.values()) == list(range(16))


# =============================================================================
# Keyboard Controller Tests
# =============================================================================

class TestKeyboard:
    """Test pressing and releasing keys."""

    def test_key_down_sets_latch(self, keyboard, state):
        """key_down sets the keypad latch."""
        keyboard.key_down(0xA)
        assert state.keypad[0xA] is True
        assert keyboard.is_pressed(0xA)

    def test_key_down_by_name(self, keyboard, state):
        """Host names press the mapped key."""
        keyboard.key_down("W")
        assert state.keypad[0x5] is True
        assert keyboard.is_pressed("w")

    def test_key_up(self, keyboard, state):
        """key_up clears the latch."""
        keyboard.key_down(3)
        keyboard.key_up(3)
        assert state.keypad[3] is False

    def test_pressed_keys_sorted(self, keyboard):
        """pressed_keys lists held keys in ascending order."""
        keyboard.key_down(9)
        keyboard.key_down(2)
        keyboard.key_down("V")
        assert keyboard.pressed_keys() == [2, 9, 0xF]

    def test_release_all(self, keyboard):
        """release_all clears every latch."""
        for key in range(16):
            keyboard.key_down(key)
        keyboard.release_all()
        assert keyboard.pressed_keys() == []
