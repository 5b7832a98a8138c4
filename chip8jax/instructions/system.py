"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import MachineState, with_fault
from chip8jax.decode import DecodedInstruction
from chip8jax.constants import FAULT_UNKNOWN_OPCODE, FAULT_STACK_UNDERFLOW
from chip8jax.stack import pop, is_empty


def execute_unknown(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Unrecognized opcode: report and carry on."""
    return with_fault(state, FAULT_UNKNOWN_OPCODE)


def execute_clear_screen(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00EE - Return from subroutine.

    With an empty stack the cycle is abandoned and PC stays on the RET.
    """
    def underflow(state):
        return with_fault(state, FAULT_STACK_UNDERFLOW).replace(pc=state.pc - 2)

    def ret(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(is_empty(state.stack), underflow, ret, state)
