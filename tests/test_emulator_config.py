"""
Emulator Configuration Tests
============================

Tests for EmulatorConfig defaults and environment loading.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import dataclasses

import pytest

from chip8_vm.emulator import CYCLE_RATE_HZ, TIMER_RATE_HZ, EmulatorConfig


class TestEmulatorConfig:
    """Test configuration values."""

    def test_defaults(self):
        """No seed and no trace by default."""
        config = EmulatorConfig()
        assert config.seed is None
        assert config.trace is False

    def test_rates(self):
        """Conventional pacing constants."""
        assert CYCLE_RATE_HZ == 700
        assert TIMER_RATE_HZ == 60

    def test_cycles_per_tick(self):
        """Cycles between timer ticks derive from the two rates."""
        assert EmulatorConfig().cycles_per_tick == 11

    def test_frozen(self):
        """Config objects are immutable."""
        config = EmulatorConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.seed = 1


class TestFromEnv:
    """Test EmulatorConfig.from_env()."""

    def test_empty_environment(self, monkeypatch):
        """Unset variables give defaults."""
        monkeypatch.delenv("CHIP8_SEED", raising=False)
        monkeypatch.delenv("CHIP8_TRACE", raising=False)
        assert EmulatorConfig.from_env() == EmulatorConfig()

    def test_decimal_seed(self, monkeypatch):
        """CHIP8_SEED accepts decimal."""
        monkeypatch.setenv("CHIP8_SEED", "1234")
        assert EmulatorConfig.from_env().seed == 1234

    def test_hex_seed(self, monkeypatch):
        """CHIP8_SEED accepts 0x hex."""
        monkeypatch.setenv("CHIP8_SEED", "0x10")
        assert EmulatorConfig.from_env().seed == 16

    def test_bad_seed(self, monkeypatch):
        """A non-integer seed raises ValueError."""
        monkeypatch.setenv("CHIP8_SEED", "banana")
        with pytest.raises(ValueError, match="CHIP8_SEED"):
            EmulatorConfig.from_env()

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("true", True), ("YES", True),
        ("0", False), ("no", False), ("", False),
    ])
    def test_trace(self, monkeypatch, value, expected):
        """CHIP8_TRACE enables tracing for 1/true/yes."""
        monkeypatch.delenv("CHIP8_SEED", raising=False)
        monkeypatch.setenv("CHIP8_TRACE", value)
        assert EmulatorConfig.from_env().trace is expected
