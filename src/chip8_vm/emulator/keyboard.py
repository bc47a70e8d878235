"""
Keypad Controller for the CHIP-8 Emulator
=========================================

The CHIP-8 keypad has 16 hexadecimal keys. Each key is a latch in
MachineState.keypad: True while the key is held.

Keypad layout and the conventional host mapping:

    CHIP-8 keypad        Host keyboard
    -------------        -------------
    1  2  3  C           1  2  3  4
    4  5  6  D     <-    Q  W  E  R
    7  8  9  E           A  S  D  F
    A  0  B  F           Z  X  C  V

Keys can be given either as an int 0x0-0xF (the keypad key itself) or
as a host key name from the right-hand side (case-insensitive).

Latches change only between cycles; the engine reads them during SKP,
SKNP and the Fx0A key wait.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from typing import Dict, List, Union

from .state import NUM_KEYS, MachineState


Key = Union[int, str]


# =============================================================================
# HOST KEY MAPPING
# =============================================================================
# Maps host key names to CHIP-8 keypad keys.

HOST_KEYMAP: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "Q": 0x4, "W": 0x5, "E": 0x6, "R": 0xD,
    "A": 0x7, "S": 0x8, "D": 0x9, "F": 0xE,
    "Z": 0xA, "X": 0x0, "C": 0xB, "V": 0xF,
}


def resolve_key(key: Key) -> int:
    """
    Resolve a key to its keypad index.

    Args:
        key: Keypad index (0-15) or host key name

    Returns:
        Keypad index 0x0-0xF

    Raises:
        ValueError: If the index is out of range or the name is unknown
    """
    if isinstance(key, int):
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Keypad key must be 0-15, got {key}")
        return key

    index = HOST_KEYMAP.get(key.upper())
    if index is None:
        raise ValueError(
            f"Unknown key '{key}'. Valid keys: {', '.join(HOST_KEYMAP)}"
        )
    return index


class Keyboard:
    """
    Keypad controller over a MachineState's key latches.

    Example:
        >>> kb = Keyboard(state)
        >>> kb.key_down("W")      # host W is keypad 5
        >>> kb.is_pressed(0x5)
        True
        >>> kb.key_up(5)
    """

    def __init__(self, state: MachineState):
        """
        Initialize keypad controller.

        Args:
            state: Machine state whose keypad latches are driven
        """
        self._state = state

    def key_down(self, key: Key) -> None:
        """
        Press a key.

        Args:
            key: Keypad index or host key name
        """
        self._state.keypad[resolve_key(key)] = True

    def key_up(self, key: Key) -> None:
        """
        Release a key.

        Args:
            key: Keypad index or host key name
        """
        self._state.keypad[resolve_key(key)] = False

    def release_all(self) -> None:
        """Release every key."""
        for index in range(NUM_KEYS):
            self._state.keypad[index] = False

    def is_pressed(self, key: Key) -> bool:
        """Check if a key is currently held."""
        return self._state.keypad[resolve_key(key)]

    def pressed_keys(self) -> List[int]:
        """Get sorted list of held keypad keys."""
        return [index for index in range(NUM_KEYS) if self._state.keypad[index]]
