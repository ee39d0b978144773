"""Diagnostics: error reporting, exit status tracking and debug flags."""

from __future__ import annotations

import inspect
import signal
import sys
from typing import TextIO

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def _signal_description(signum: int) -> str | None:
    try:
        return signal.strsignal(signum)
    except (ValueError, AttributeError):
        return None


def _describe_signal(kind: str, signum: int) -> str:
    text = f", {kind} {signum}"
    description = _signal_description(signum)
    if description is not None:
        text += f" {description}"
    return text


def format_wait_status(command: str, status: int) -> str:
    """Describe a wait(2) status; empty when the status is zero."""
    if status == 0:
        return ""
    text = f"{command}: status 0x{status:04X}"
    low = status & 0x7F
    if low == 0:
        text += f", exit {(status >> 8) & 0xFF}"
    if low not in (0, 0x7F):
        text += _describe_signal("Terminated", low)
        if status & 0x80:
            text += ", core dumped"
    if status & 0xFF == 0x7F:
        text += _describe_signal("Stopped", (status >> 8) & 0xFF)
    if status == 0xFFFF:
        text += ", Continued"
    return text + "\n"


class Reporter:
    """Writes diagnostics to a stream and remembers whether an error occurred."""

    def __init__(self, execname: str = "oc", stream: TextIO | None = None):
        self.execname = execname
        self.exit_status = EXIT_SUCCESS
        self._stream = stream
        self.debugflags = ""
        self.alldebugflags = False

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def eprint(self, message: str) -> None:
        """Write a message; a leading '%:' is replaced by the program name."""
        if message.startswith("%:"):
            message = f"{self.execname}: {message[2:]}"
        self.stream.write(message)
        self.stream.flush()

    def error(self, message: str) -> None:
        """Write a message and mark the run as failed."""
        self.eprint(message)
        self.exit_status = EXIT_FAILURE

    def syserror(self, obj: str, exc: OSError) -> None:
        """Report a failed system operation on ``obj``."""
        reason = exc.strerror or str(exc)
        self.error(f"%:{obj}: {reason}\n")

    def set_debugflags(self, flags: str) -> None:
        self.debugflags = flags
        if "@" in flags:
            self.alldebugflags = True
        self.debug(
            "x",
            f'Debugflags = "{flags}", all = {int(self.alldebugflags)}\n',
        )

    def is_debugflag(self, flag: str) -> bool:
        return self.alldebugflags or flag in self.debugflags

    def debug(self, flag: str, message: str) -> None:
        """Write a debug message tagged with its caller if the flag is on."""
        if not self.is_debugflag(flag):
            return
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        if caller is not None:
            where = (
                f"{caller.f_code.co_filename}[{caller.f_lineno}] "
                f"{caller.f_code.co_name}()"
            )
        else:
            where = "?"
        self.stream.write(f"DEBUGF({flag}): {where}:\n{message}")
        self.stream.flush()