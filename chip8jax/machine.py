"""Stateful front end over the pure CHIP-8 functions."""

from typing import Iterable, Optional

import jax
import jax.numpy as jnp
import numpy as np
from tqdm import tqdm

from chip8jax.state import MachineState, create_state
from chip8jax.emulator import step, tick_timers, load_image, load_rom, load_font
from chip8jax.decode import disassemble
from chip8jax.errors import MemoryFault
from chip8jax.logging import ConsoleLogger
from chip8jax.constants import (
    KEYPAD_SIZE, MEMORY_SIZE, FAULT_NONE, FAULT_UNKNOWN_OPCODE, FAULT_STACK_OVERFLOW,
    FAULT_STACK_UNDERFLOW, FAULT_MEMORY,
)

FAULT_MESSAGES = {
    FAULT_UNKNOWN_OPCODE: "Unknown opcode {opcode:#06x} at PC={pc:#05x}, skipped",
    FAULT_STACK_OVERFLOW: "Stack overflow on {opcode:#06x} at PC={pc:#05x}, call skipped",
    FAULT_STACK_UNDERFLOW: "Stack underflow on {opcode:#06x} at PC={pc:#05x}, return ignored",
}


class Machine:
    """A CHIP-8 machine driven one cycle at a time.

    Owns a single ``MachineState`` and replaces it on every call. Faults the
    pure functions record in the state are reported here: recoverable ones are
    logged as warnings, memory faults are logged and raised as ``MemoryFault``.

    Callers are responsible for pacing: call ``step`` at the instruction rate,
    ``tick`` at 60Hz, and refresh the keypad between cycles.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        logger: Optional[ConsoleLogger] = None,
        trace: bool = False,
        jit: bool = True,
    ):
        """Create a zeroed machine with PC at 0x200.

        Args:
            seed: Seed for the CXKK random source. None draws fresh entropy.
            logger: Logger for faults and traces (default: ConsoleLogger at INFO)
            trace: Log every executed instruction at DEBUG level
            jit: Compile the cycle and timer functions with jax.jit
        """
        if seed is None:
            seed = np.random.SeedSequence().entropy % (2 ** 31)
        self.seed = seed
        self.logger = logger or ConsoleLogger()
        self.trace = trace
        self._step = jax.jit(step) if jit else step
        self._tick = jax.jit(tick_timers) if jit else tick_timers
        self.state: MachineState = create_state(jax.random.PRNGKey(seed))

    def load_image(self, data: bytes):
        """Copy a program image into memory at 0x200."""
        self.state = load_image(self.state, data)
        self.logger.info(f"Loaded {len(data)} byte program image")

    def load_rom(self, filename: str):
        """Read a ROM file into memory at 0x200."""
        self.state = load_rom(self.state, filename)
        self.logger.info(f"Loaded ROM {filename}")

    def load_font(self):
        """Install the built-in hexadecimal font used by FX29."""
        self.state = load_font(self.state)

    def step(self) -> int:
        """Execute exactly one instruction cycle and return its opcode.

        Raises:
            MemoryFault: the cycle touched memory outside the machine
        """
        pc = self.pc
        state, instruction = self._step(self.state)
        self.state = state
        opcode = int(instruction)
        fault = int(state.fault)

        if fault == FAULT_MEMORY:
            # Either the fetch itself or the instruction's operands left memory
            error = MemoryFault(pc) if pc + 1 >= MEMORY_SIZE else MemoryFault(pc, opcode)
            self.logger.error(str(error))
            self.logger.log_state(self.state)
            raise error

        if fault != FAULT_NONE:
            self.logger.warning(FAULT_MESSAGES[fault].format(opcode=opcode, pc=pc))
        elif self.trace:
            self.logger.debug(f"{pc:#05x}: {disassemble(opcode)}")
        return opcode

    def run(self, cycles: int, progress: bool = False):
        """Execute ``cycles`` instruction cycles, stopping on a memory fault."""
        for _ in tqdm(range(cycles), desc="Executing", unit="cycle", disable=not progress):
            self.step()

    def tick(self) -> bool:
        """Advance both timers by one 60Hz tick; returns whether a tone should sound."""
        self.state = self._tick(self.state)
        return self.sound_active

    def press(self, key: int):
        """Mark a key (0x0-0xF) as held down."""
        self._check_key(key)
        self.state = self.state.replace(keypad=self.state.keypad.at[key].set(True))

    def release(self, key: int):
        """Mark a key (0x0-0xF) as released."""
        self._check_key(key)
        self.state = self.state.replace(keypad=self.state.keypad.at[key].set(False))

    def set_keypad(self, keys: Iterable[bool]):
        """Replace the whole keypad with 16 key states."""
        keypad = jnp.asarray(list(keys), dtype=jnp.bool_)
        if keypad.shape != (KEYPAD_SIZE,):
            raise ValueError(f"Expected {KEYPAD_SIZE} key states, got {keypad.shape[0]}")
        self.state = self.state.replace(keypad=keypad)

    @staticmethod
    def _check_key(key: int):
        if not 0 <= key < KEYPAD_SIZE:
            raise ValueError(f"Key must be in 0x0-0xF, got {key!r}")

    @property
    def keypad(self) -> np.ndarray:
        return self._read_only(self.state.keypad)

    @property
    def framebuffer(self) -> np.ndarray:
        """Read-only (32, 64) boolean grid, row-major, True meaning lit."""
        return self._read_only(self.state.display)

    @property
    def registers(self) -> np.ndarray:
        return self._read_only(self.state.V)

    @property
    def memory(self) -> np.ndarray:
        return self._read_only(self.state.memory)

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def index(self) -> int:
        return int(self.state.I)

    @property
    def delay_timer(self) -> int:
        return int(self.state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self.state.sound_timer)

    @property
    def sound_active(self) -> bool:
        return bool(self.state.sound_active)

    @property
    def awaiting_key(self) -> bool:
        """True while the program is spinning on FX0A with no key held."""
        return bool(self.state.awaiting_key)

    @staticmethod
    def _read_only(array) -> np.ndarray:
        view = np.array(array)
        view.setflags(write=False)
        return view
