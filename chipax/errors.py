"""Exceptions raised when a faulted interpreter state reaches the host."""

from chipax.constants import (
    FAULT_NONE, FAULT_DECODE, FAULT_STACK_UNDERFLOW, FAULT_STACK_OVERFLOW, FAULT_ADDRESS,
)


class EmulatorError(Exception):
    """Base class for unrecoverable interpreter faults.

    Attributes:
        kind: Short name of the fault
        instruction: Raw 16-bit instruction word being executed
        pc: Program counter of that instruction
        state: The frozen interpreter state, when raised from a run
    """
    kind = "fault"

    def __init__(self, instruction: int, pc: int, state=None):
        self.instruction = instruction
        self.pc = pc
        self.state = state
        super().__init__(f"{self.kind} at PC 0x{pc:03X}: instruction 0x{instruction:04X}")


class DecodeError(EmulatorError):
    """Instruction word matches no known pattern."""
    kind = "decode error"


class StackUnderflowError(EmulatorError):
    """Return executed with an empty call stack."""
    kind = "stack underflow"


class StackOverflowError(EmulatorError):
    """Call executed with a full call stack."""
    kind = "stack overflow"


class AddressError(EmulatorError):
    """Fetch or index-register access past the end of memory."""
    kind = "address out of range"


FAULT_ERRORS = {
    FAULT_DECODE: DecodeError,
    FAULT_STACK_UNDERFLOW: StackUnderflowError,
    FAULT_STACK_OVERFLOW: StackOverflowError,
    FAULT_ADDRESS: AddressError,
}


def fault_error(state):
    """Exception matching the fault recorded in ``state``, or None."""
    code = int(state.fault)
    if code == FAULT_NONE:
        return None
    error_cls = FAULT_ERRORS.get(code, EmulatorError)
    return error_cls(int(state.fault_instruction), int(state.fault_pc), state=state)


def raise_for_fault(state) -> None:
    """Raise the exception for a faulted state; no-op while running."""
    error = fault_error(state)
    if error is not None:
        raise error
