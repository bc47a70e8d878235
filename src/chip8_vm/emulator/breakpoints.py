"""
Breakpoint System for the CHIP-8 Emulator
=========================================

Provides debugging and run-control support:
- PC breakpoints (break when pc reaches an address)
- Register conditions (break when a register matches)
- BreakEvent results describing why a run or step stopped

This module is integrated with the CPU via its on_instruction hook. The
BreakpointManager is checked before each instruction during execute().

BreakEvent is also how the Emulator reports execution errors: a failing
cycle produces BreakEvent(reason=ERROR, error=<ExecutionError>) instead
of an exception escaping the run loop.

Example usage:

    >>> from chip8_vm.emulator import Emulator, BreakReason
    >>> emu = Emulator()
    >>> emu.breakpoints.add_breakpoint(0x208)
    >>> event = emu.run(10_000)
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Hit breakpoint at ${event.address:03X}")

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Set, TYPE_CHECKING

from ..errors import ExecutionError

if TYPE_CHECKING:
    from .state import MachineState


class BreakReason(Enum):
    """
    Enumeration of reasons why execution stopped.

    Used in BreakEvent to indicate what triggered the break.
    """
    NONE = auto()           # No specific reason (normal termination)
    PC_BREAKPOINT = auto()  # pc reached a breakpoint address
    REGISTER_CONDITION = auto()  # Register condition met
    STEP = auto()           # One cycle completed
    KEY_WAIT = auto()       # Fx0A is waiting for a key press
    USER_INTERRUPT = auto() # User requested stop
    MAX_CYCLES = auto()     # Maximum cycle count reached
    ERROR = auto()          # Execution error (see BreakEvent.error)


@dataclass
class BreakEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: pc at the time of the stop (if applicable)
        error: The execution error, for reason == ERROR
        message: Human-readable description
    """
    reason: BreakReason
    address: Optional[int] = None
    error: Optional[ExecutionError] = None
    message: str = ""

    @property
    def is_error(self) -> bool:
        """True if execution stopped because of an error."""
        return self.reason == BreakReason.ERROR

    def __str__(self) -> str:
        """Return human-readable description."""
        if self.message:
            return self.message
        match self.reason:
            case BreakReason.PC_BREAKPOINT:
                return f"Breakpoint at ${self.address:03X}" if self.address is not None else "Breakpoint"
            case BreakReason.REGISTER_CONDITION:
                return "Register condition met"
            case BreakReason.STEP:
                return "Single step"
            case BreakReason.KEY_WAIT:
                return "Waiting for key"
            case BreakReason.MAX_CYCLES:
                return "Maximum cycles reached"
            case BreakReason.ERROR:
                return str(self.error) if self.error else "Execution error"
            case _:
                return "Unknown"


# Register names accepted by RegisterCondition
VALID_REGISTERS = (
    {f"v{index:x}" for index in range(16)}
    | {"i", "pc", "sp", "delay_timer", "sound_timer"}
)


class RegisterCondition:
    """
    Condition on machine registers.

    Supported registers: v0-vf, i, pc, sp, delay_timer, sound_timer

    Supported operators:
    - '==' : Equal
    - '!=' : Not equal
    - '<'  : Less than
    - '<=' : Less than or equal
    - '>'  : Greater than
    - '>=' : Greater than or equal
    - '&'  : Bitwise AND test (true if result non-zero)

    Examples:
        >>> cond = RegisterCondition('v0', '==', 0x42)  # V0 equals 0x42
        >>> cond = RegisterCondition('i', '>', 0x300)   # I above 0x300
        >>> cond = RegisterCondition('vf', '&', 0x01)   # Flag set
    """

    def __init__(
        self,
        register: str,
        operator: str,
        value: int,
        description: str = ""
    ):
        """
        Create a register condition.

        Args:
            register: Register name (v0-vf, i, pc, sp, delay_timer, sound_timer)
            operator: Comparison operator (==, !=, <, <=, >, >=, &)
            value: Value to compare against
            description: Optional description for debugging
        """
        self.register = register.lower()
        self.operator = operator
        self.value = value
        self.description = description or f"{register} {operator} {value}"

        if self.register not in VALID_REGISTERS:
            raise ValueError(
                f"Unknown register '{register}'. Valid registers: {', '.join(sorted(VALID_REGISTERS))}"
            )

        valid_operators = {'==', '!=', '<', '<=', '>', '>=', '&'}
        if self.operator not in valid_operators:
            raise ValueError(
                f"Unknown operator '{operator}'. Valid operators: {', '.join(sorted(valid_operators))}"
            )

    def _read(self, state: "MachineState") -> int:
        if self.register.startswith("v") and len(self.register) == 2:
            return state.v[int(self.register[1], 16)]
        return getattr(state, self.register)

    def check(self, state: "MachineState") -> bool:
        """
        Check if condition is met against machine state.

        Args:
            state: Machine state to check

        Returns:
            True if condition is met, False otherwise
        """
        actual = self._read(state)

        match self.operator:
            case '==':
                return actual == self.value
            case '!=':
                return actual != self.value
            case '<':
                return actual < self.value
            case '<=':
                return actual <= self.value
            case '>':
                return actual > self.value
            case '>=':
                return actual >= self.value
            case '&':
                return (actual & self.value) != 0
            case _:
                return False

    def __repr__(self) -> str:
        return f"RegisterCondition({self.register!r}, {self.operator!r}, {self.value!r})"


class BreakpointManager:
    """
    Manages breakpoints and register conditions.

    The manager integrates with the CPU via its on_instruction hook,
    which calls check_instruction() before every fetch.

    Example:
        >>> mgr = BreakpointManager()
        >>> mgr.add_breakpoint(0x20A)
        >>> mgr.add_condition('v3', '==', 0x00)
        >>> cpu.on_instruction = lambda pc, op: mgr.check_instruction(cpu.state, pc, op)
    """

    def __init__(self):
        """Initialize empty breakpoint manager."""
        self._pc_breakpoints: Set[int] = set()

        # Register conditions (list with possible None holes)
        self._register_conditions: List[Optional[RegisterCondition]] = []

        # Last break event (for inspection after break)
        self._last_event: Optional[BreakEvent] = None

        # Break request flag (for external interrupt)
        self._break_requested: bool = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def last_event(self) -> Optional[BreakEvent]:
        """Get the last break event that occurred."""
        return self._last_event

    @property
    def breakpoint_count(self) -> int:
        """Number of active PC breakpoints."""
        return len(self._pc_breakpoints)

    def clear_last_event(self) -> None:
        """Forget the last break event."""
        self._last_event = None

    # =========================================================================
    # PC Breakpoints
    # =========================================================================

    def add_breakpoint(self, address: int) -> None:
        """
        Add PC breakpoint at address.

        Execution will stop when pc reaches this address, before the
        instruction at that address is executed.

        Args:
            address: 12-bit memory address
        """
        self._pc_breakpoints.add(address & 0xFFF)

    def remove_breakpoint(self, address: int) -> None:
        """Remove PC breakpoint at address."""
        self._pc_breakpoints.discard(address & 0xFFF)

    def has_breakpoint(self, address: int) -> bool:
        """Check if breakpoint exists at address."""
        return (address & 0xFFF) in self._pc_breakpoints

    def clear_breakpoints(self) -> None:
        """Remove all PC breakpoints."""
        self._pc_breakpoints.clear()

    def list_breakpoints(self) -> List[int]:
        """Get sorted list of breakpoint addresses."""
        return sorted(self._pc_breakpoints)

    # =========================================================================
    # Register Conditions
    # =========================================================================

    def add_register_condition(self, condition: RegisterCondition) -> int:
        """
        Add register condition.

        Execution will stop when the condition evaluates to True.

        Args:
            condition: RegisterCondition to add

        Returns:
            Condition ID for later removal
        """
        for i, c in enumerate(self._register_conditions):
            if c is None:
                self._register_conditions[i] = condition
                return i
        self._register_conditions.append(condition)
        return len(self._register_conditions) - 1

    def add_condition(
        self,
        register: str,
        operator: str,
        value: int,
        description: str = ""
    ) -> int:
        """
        Add register condition using parameters.

        Returns:
            Condition ID
        """
        return self.add_register_condition(
            RegisterCondition(register, operator, value, description)
        )

    def remove_register_condition(self, condition_id: int) -> None:
        """Remove register condition by ID."""
        if 0 <= condition_id < len(self._register_conditions):
            self._register_conditions[condition_id] = None

    def clear_register_conditions(self) -> None:
        """Remove all register conditions."""
        self._register_conditions.clear()

    def list_register_conditions(self) -> List[tuple[int, RegisterCondition]]:
        """Get list of active (id, condition) tuples."""
        return [
            (i, c) for i, c in enumerate(self._register_conditions)
            if c is not None
        ]

    # =========================================================================
    # Break Control
    # =========================================================================

    def request_break(self) -> None:
        """Request execution to break before the next instruction."""
        self._break_requested = True

    def clear_break_request(self) -> None:
        """Clear any pending break request."""
        self._break_requested = False

    def clear_all(self) -> None:
        """Remove all breakpoints and conditions."""
        self.clear_breakpoints()
        self.clear_register_conditions()
        self._break_requested = False
        self._last_event = None

    # =========================================================================
    # Check Functions (called by CPU hooks)
    # =========================================================================

    def check_instruction(
        self,
        state: "MachineState",
        pc: int,
        opcode: int
    ) -> bool:
        """
        Check if we should break before executing an instruction.

        Args:
            state: Machine state
            pc: Current program counter
            opcode: Instruction word about to be executed

        Returns:
            True to continue execution, False to break
        """
        if self._break_requested:
            self._break_requested = False
            self._last_event = BreakEvent(
                BreakReason.USER_INTERRUPT,
                address=pc,
                message="User interrupt"
            )
            return False

        if pc in self._pc_breakpoints:
            self._last_event = BreakEvent(
                BreakReason.PC_BREAKPOINT,
                address=pc,
                message=f"Breakpoint at ${pc:03X}"
            )
            return False

        for cond in self._register_conditions:
            if cond is not None and cond.check(state):
                self._last_event = BreakEvent(
                    BreakReason.REGISTER_CONDITION,
                    address=pc,
                    message=f"Condition: {cond.description}"
                )
                return False

        return True
