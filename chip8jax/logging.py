"""Console logging for the CHIP-8 machine.

Prints leveled lines, optionally timestamped and coloured, to stdout. The
pure emulator functions never log; ``Machine`` reports faults and traces
through a ``ConsoleLogger``.
"""

import time
import sys
from typing import Optional, TextIO

LEVELS = {
    "DEBUG": 0,
    "INFO": 1,
    "WARNING": 2,
    "ERROR": 3,
    "CRITICAL": 4,
}

ANSI_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
ANSI_RESET = "\033[0m"


def _check_level(log_level: str) -> str:
    level = log_level.upper()
    if level not in LEVELS:
        raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
    return level


class ConsoleLogger:
    """Leveled console logger with optional ANSI colours.

    Colours are only used when the output stream is a terminal.
    """

    def __init__(
        self,
        name: str = "chip8jax",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.name = name
        self.log_level = _check_level(log_level)
        self.stream = stream
        out = stream or sys.stdout
        self.use_colors = use_colors and hasattr(out, "isatty") and out.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def set_level(self, log_level: str):
        """Change the minimum level that gets printed."""
        self.log_level = _check_level(log_level)

    def is_enabled_for(self, level: str) -> bool:
        return LEVELS.get(level.upper(), LEVELS["INFO"]) >= LEVELS[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        prefix = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{ANSI_COLORS.get(level.upper(), '')}{tag}{ANSI_RESET}"
        return f"{prefix}{tag}[{self.name}] {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self.is_enabled_for(level):
            print(self._format_message(level, message), file=self.stream or sys.stdout, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)

    def log_state(self, state, level: str = "DEBUG"):
        """Dump the CPU registers of a ``MachineState``, one line per group."""
        if not self.is_enabled_for(level):
            return
        registers = " ".join(f"V{i:X}={int(v):02x}" for i, v in enumerate(state.V))
        depth = int(state.stack.pointer)
        return_addresses = ", ".join(f"{int(a):#05x}" for a in state.stack.data[:depth])
        self.log(level, "=" * 60)
        self.log(level, f"PC={int(state.pc):#05x} I={int(state.I):#05x} "
                        f"DT={int(state.delay_timer)} ST={int(state.sound_timer)}")
        self.log(level, registers)
        self.log(level, f"Stack ({depth}): [{return_addresses}]")
        self.log(level, "=" * 60)
