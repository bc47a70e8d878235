"""
CHIP-8 Emulator - Configuration
===============================

Pacing constants and per-instance emulator settings. Configuration can
come from:
- Default values (defined here)
- Explicit EmulatorConfig arguments
- Environment variables (EmulatorConfig.from_env)

The core never schedules itself. The two rates below are what an
external driver needs to pace it:
- CYCLE_RATE_HZ instruction cycles per second (conventional value)
- TIMER_RATE_HZ calls to tick_timers() per second (fixed by CHIP-8)

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from typing import Optional
import os


CYCLE_RATE_HZ = 700
TIMER_RATE_HZ = 60


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        seed: Seed for the RND instruction's random source. None gives
              a nondeterministic sequence.
        trace: Log every executed instruction at DEBUG level.

    Example:
        >>> config = EmulatorConfig(seed=1234)   # reproducible RND
        >>> config = EmulatorConfig(trace=True)  # instruction trace
    """
    seed: Optional[int] = None
    trace: bool = False

    @property
    def cycles_per_tick(self) -> int:
        """Instruction cycles to run between two timer ticks."""
        return CYCLE_RATE_HZ // TIMER_RATE_HZ

    @classmethod
    def from_env(cls) -> "EmulatorConfig":
        """
        Create EmulatorConfig from environment variables.

        Environment variables (all optional):
            CHIP8_SEED: Integer seed for RND (decimal or 0x hex)
            CHIP8_TRACE: "1", "true" or "yes" to enable tracing

        Raises:
            ValueError: If CHIP8_SEED is not an integer
        """
        seed: Optional[int] = None
        raw_seed = os.environ.get("CHIP8_SEED")
        if raw_seed:
            try:
                seed = int(raw_seed, 0)
            except ValueError:
                raise ValueError(f"CHIP8_SEED must be an integer, got {raw_seed!r}") from None

        trace = os.environ.get("CHIP8_TRACE", "").lower() in ("1", "true", "yes")

        return cls(seed=seed, trace=trace)
