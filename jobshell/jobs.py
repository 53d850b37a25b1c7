"""Job list, command-line parsing and signal helpers for the job-control shell."""

from __future__ import annotations

import os
import signal
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, TextIO, Tuple, Union

MAX_LINE = 256

SignalHandler = Union[Callable[[int, object], object], int, signal.Handlers]

_TERMINAL_SIGNALS = (
    signal.SIGINT,   # CTRL+C
    signal.SIGQUIT,  # CTRL+\
    signal.SIGTSTP,  # CTRL+Z
    signal.SIGTTIN,  # background process wants to read from the terminal
    signal.SIGTTOU,  # background process wants to write to the terminal
)


class Status(Enum):
    """Why a waited-for child changed state."""

    SUSPENDED = "Suspendido"
    SIGNALED = "Senalizado"
    EXITED = "Finalizado"
    CONTINUED = "Reanudado"

    def __str__(self) -> str:
        return self.value


class Ground(Enum):
    """Where a job is running."""

    FOREGROUND = "Primer Plano"
    BACKGROUND = "Segundo Plano"
    STOPPED = "Detenido"

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False)
class Job:
    """A process group started by the shell."""

    pgid: int
    command: str
    ground: Ground = Ground.FOREGROUND

    def describe(self) -> str:
        """One-line description with pid, command and placement."""
        return f"PID {self.pgid}. Comando {self.command}. Ubicado como {self.ground}."


class JobList:
    """Named list of jobs; new jobs go to the front."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._jobs: list[Job] = []

    def add(self, job: Job) -> None:
        """Insert a job at the front of the list."""
        self._jobs.insert(0, job)

    def delete(self, job: Job) -> None:
        """Remove exactly this job object; ValueError if it is not in the list."""
        for index, candidate in enumerate(self._jobs):
            if candidate is job:
                del self._jobs[index]
                return
        raise ValueError(f"job {job.pgid} is not in {self.name}")

    def get_by_pid(self, pid: int) -> Optional[Job]:
        """First job whose process group id is pid, or None."""
        return next((job for job in self._jobs if job.pgid == pid), None)

    def get_by_pos(self, n: int) -> Optional[Job]:
        """The n-th job counting from 1, or None if out of range."""
        if n < 1 or n > len(self._jobs):
            return None
        return self._jobs[n - 1]

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self) -> Iterator[Job]:
        return iter(list(self._jobs))

    def render(self) -> str:
        """Text listing of the jobs, numbered from 1."""
        lines = [f"Contenidos de {self.name}:\n"]
        lines.extend(
            f" [{n}] {job.describe()}\n" for n, job in enumerate(self._jobs, start=1)
        )
        return "".join(lines)


def parse_command(line: str) -> Tuple[list[str], bool]:
    """Split a command line into arguments and a background flag.

    Spaces, tabs and newlines separate arguments; '&' marks the command as a
    background one and ends the command, ignoring anything after it.
    """
    background = False
    head, amp, _ = line.partition("&")
    if amp:
        background = True
    args = head.replace("\t", " ").replace("\n", " ").split(" ")
    return [arg for arg in args if arg], background


def read_command(stream: TextIO) -> Tuple[list[str], bool]:
    """Read one command line from stream and parse it.

    Raises EOFError when the stream is exhausted.
    """
    line = stream.readline(MAX_LINE)
    if not line:
        raise EOFError("end of input")
    return parse_command(line)


def analyze_status(status: int) -> Tuple[Status, int]:
    """Interpret a wait status: the cause and its associated number.

    The number is the stop signal, the terminating signal, the exit code,
    or 0 for a continued process.
    """
    if os.WIFSTOPPED(status):
        return Status.SUSPENDED, os.WSTOPSIG(status)
    if os.WIFSIGNALED(status):
        return Status.SIGNALED, os.WTERMSIG(status)
    if os.WIFEXITED(status):
        return Status.EXITED, os.WEXITSTATUS(status)
    if os.WIFCONTINUED(status):
        return Status.CONTINUED, 0
    raise ValueError(f"unrecognised wait status {status:#x}")


def terminal_signals(handler: SignalHandler) -> None:
    """Set the action of every terminal-related signal to handler."""
    for signum in _TERMINAL_SIGNALS:
        signal.signal(signum, handler)


def ignore_terminal_signals() -> None:
    """Ignore terminal-related signals."""
    terminal_signals(signal.SIG_IGN)


def restore_terminal_signals() -> None:
    """Restore the default action of terminal-related signals."""
    terminal_signals(signal.SIG_DFL)


def block_signal(signum: int, block: bool) -> None:
    """Block or unblock a single signal for the calling thread."""
    how = signal.SIG_BLOCK if block else signal.SIG_UNBLOCK
    signal.pthread_sigmask(how, {signum})