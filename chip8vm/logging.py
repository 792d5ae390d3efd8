"""Console logging for chip8vm.

A level-filtered console logger that knows how to report machine state, and a
tqdm progress bar fed from inside compiled ``fori_loop`` runs via io_callback.
"""

import time
import sys

import jax
from jax.experimental import io_callback

from tqdm import tqdm

from chip8vm.errors import describe_faults

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"


def format_registers(state) -> list[str]:
    """Registers and pointers of ``state`` as printable lines, four registers per line."""
    lines = [
        f"PC: 0x{int(state.pc):03X}  I: 0x{int(state.I):03X}  "
        f"SP: {int(state.stack.pointer)}  opcode: 0x{int(state.opcode):04X}",
        f"Delay: {int(state.delay_timer)}  Sound: {int(state.sound_timer)}",
    ]
    for i in range(0, 16, 4):
        lines.append(" ".join(f"V{j:X}:{int(state.V[j]):02X}" for j in range(i, i + 4)))
    return lines


class ConsoleLogger:
    """Console logger with level filtering, coloured on a terminal.

    Besides plain messages it reports emulator state: ``registers`` dumps the
    register file and ``faults`` warns about any fault bits a run has set.
    """

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.set_level(log_level)
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def set_level(self, log_level: str):
        """Change the minimum level that gets printed."""
        level = log_level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.log_level = level

    def log(self, level: str, message: str):
        level = level.upper()
        if LEVELS.index(level) < LEVELS.index(self.log_level):
            return
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{_COLORS[level]}{tag}{_RESET}"
        stamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        print(f"{stamp}{tag}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def registers(self, state, level: str = "DEBUG"):
        """Log the register dump of ``state``, one line per message."""
        for line in format_registers(state):
            self.log(level, line)

    def faults(self, state) -> list[str]:
        """Warn about the fault bits set in ``state`` and return their names."""
        names = describe_faults(state.fault)
        if names:
            self.warning(f"Faults raised (pc=0x{int(state.pc):03X}): {', '.join(names)}")
        return names


_logger = None


def get_logger() -> ConsoleLogger:
    """Package-wide logger, created on first use."""
    global _logger
    if _logger is None:
        _logger = ConsoleLogger()
    return _logger


def fori_loop_with_progress(num_cycles: int, desc: str = None):
    """Decorate a ``(i, state) -> state`` loop body with a live tqdm bar.

    The bar advances about twenty times per run. Its postfix shows the
    instruction rate, the program counter and any fault names, read from the
    state the body returns.
    """
    if desc is None:
        desc = f"Emulating ({num_cycles:,} cycles)"
    interval = max(1, num_cycles // 20)
    bar = {}

    def _open():
        bar["tqdm"] = tqdm(total=num_cycles, desc=desc, unit="cycle")
        bar["start"] = time.perf_counter()

    def _advance(done, pc, fault):
        progress = bar["tqdm"]
        done = int(done)
        progress.update(done - progress.n)
        elapsed = max(time.perf_counter() - bar["start"], 1e-9)
        postfix = {"ips": f"{done / elapsed:,.0f}", "pc": f"0x{int(pc):03X}"}
        faults = describe_faults(fault)
        if faults:
            postfix["faults"] = ",".join(faults)
        progress.set_postfix(postfix, refresh=False)
        if done == num_cycles:
            progress.close()

    def decorator(body):
        def body_with_progress(i, state):
            jax.lax.cond(
                i == 0,
                lambda _: io_callback(_open, None, ordered=True),
                lambda _: None,
                operand=None,
            )
            state = body(i, state)
            done = i + 1
            jax.lax.cond(
                (done % interval == 0) | (done == num_cycles),
                lambda _: io_callback(_advance, None, done, state.pc, state.fault, ordered=True),
                lambda _: None,
                operand=None,
            )
            return state

        return body_with_progress

    return decorator
