"""Interactive job-control shell: foreground/background commands and builtins."""

from __future__ import annotations

import os
import re
import signal
import sys
from contextlib import contextmanager, suppress
from typing import Iterator, Optional, Sequence, TextIO

from jobshell.jobs import (
    Ground,
    Job,
    JobList,
    Status,
    analyze_status,
    block_signal,
    ignore_terminal_signals,
    read_command,
    restore_terminal_signals,
)

PROMPT = "COMANDO->"
DEFAULT_CD_TARGET = "/home"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_MANAGED_SIGNALS = (
    signal.SIGINT,
    signal.SIGQUIT,
    signal.SIGTSTP,
    signal.SIGTTIN,
    signal.SIGTTOU,
    signal.SIGCHLD,
)


def _leading_int(text: str) -> int:
    """Integer value of the leading digits of text, 0 if there are none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _job_position(args: Sequence[str]) -> int:
    return _leading_int(args[1]) if len(args) > 1 else 1


@contextmanager
def _sigchld_blocked() -> Iterator[None]:
    block_signal(signal.SIGCHLD, True)
    try:
        yield
    finally:
        block_signal(signal.SIGCHLD, False)


class Shell:
    """A small shell that runs programs and keeps track of their jobs."""

    def __init__(self, stdin: TextIO, stdout: TextIO) -> None:
        self.stdin = stdin
        self.stdout = stdout
        self.jobs = JobList("lista_trabajo")
        self._terminal_fd: Optional[int] = None
        try:
            fd = stdin.fileno()
        except (OSError, ValueError, AttributeError):
            fd = None
        if fd is not None and os.isatty(fd):
            self._terminal_fd = fd

    # -- output and terminal -------------------------------------------------

    def _write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _set_terminal(self, pgid: int) -> None:
        if self._terminal_fd is not None:
            with suppress(OSError):
                os.tcsetpgrp(self._terminal_fd, pgid)

    def _reclaim_terminal(self) -> None:
        self._set_terminal(os.getpgrp())

    # -- main loop -----------------------------------------------------------

    def run(self) -> int:
        """Read and execute commands until logout or end of input."""
        saved = {signum: signal.getsignal(signum) for signum in _MANAGED_SIGNALS}
        ignore_terminal_signals()
        signal.signal(signal.SIGCHLD, self.reap_children)
        try:
            while True:
                self._write(PROMPT)
                try:
                    args, background = read_command(self.stdin)
                except EOFError:
                    self._write("\nSaliendo del Shell\n")
                    return 0
                if not args:
                    continue
                if args[0] == "logout":
                    return 0
                self._dispatch(args, background)
        finally:
            for signum, handler in saved.items():
                signal.signal(signum, signal.SIG_DFL if handler is None else handler)

    def _dispatch(self, args: list[str], background: bool) -> None:
        command = args[0]
        if command == "cd":
            self.builtin_cd(args)
        elif command == "jobs":
            self.builtin_jobs()
        elif command == "fg":
            self.builtin_fg(args)
        elif command == "bg":
            self.builtin_bg(args)
        else:
            self.execute(args, background)

    # -- external commands ---------------------------------------------------

    def _run_child(self, args: Sequence[str], background: bool) -> None:
        """Body of the forked child; never returns."""
        try:
            os.setpgid(0, 0)
            if not background:
                self._set_terminal(os.getpid())
            restore_terminal_signals()
            signal.signal(signal.SIGCHLD, signal.SIG_DFL)
            try:
                os.execvp(args[0], list(args))
            except OSError:
                self.stdout.write(f"{args[0]}: No se encontró la orden\n")
                self.stdout.flush()
                os._exit(1)
        finally:
            os._exit(127)

    def execute(self, args: Sequence[str], background: bool) -> int:
        """Start an external command in its own process group; return its pid."""
        self.stdout.flush()
        pid = os.fork()
        if pid == 0:
            self._run_child(args, background)

        with suppress(OSError):
            os.setpgid(pid, pid)

        if background:
            self._write(f"Background job running. pid: {pid}, command: {args[0]}\n")
            self.jobs.add(Job(pid, args[0], Ground.BACKGROUND))
            return pid

        self._set_terminal(pid)
        with _sigchld_blocked():
            _, status = os.waitpid(pid, os.WUNTRACED)
        self._reclaim_terminal()
        state, info = analyze_status(status)
        self._write(f"Foreground pid: {pid}, comando: {args[0]}, {state}, info: {info}\n")
        if state is Status.SUSPENDED:
            self.jobs.add(Job(pid, args[0], Ground.STOPPED))
        return pid

    # -- builtins ------------------------------------------------------------

    def builtin_cd(self, args: Sequence[str]) -> None:
        """Change the working directory, to /home when no directory is given."""
        target = args[1] if len(args) > 1 else DEFAULT_CD_TARGET
        try:
            os.chdir(target)
        except OSError:
            self._write(f"No se puede cambiar al directorio {target}\n")

    def builtin_jobs(self) -> None:
        """Print the job list."""
        if len(self.jobs) == 0:
            self._write("La lista está vacía \n")
        else:
            self._write(self.jobs.render())

    def builtin_fg(self, args: Sequence[str]) -> None:
        """Bring a stopped or background job to the foreground and wait for it."""
        position = _job_position(args)
        job = self.jobs.get_by_pos(position)
        if job is None:
            self._write("FG ERROR: trabajo no encontrado \n")
            return
        if job.ground not in (Ground.STOPPED, Ground.BACKGROUND):
            self._write("El proceso no estaba en background o detenido\n")
            return
        self._write(
            f"Puesto en foreground el trabajo {position} que estaba detenido o en "
            f"background, el trabajo era: {job.command}\n"
        )
        job.ground = Ground.FOREGROUND
        self._set_terminal(job.pgid)
        with _sigchld_blocked():
            with suppress(ProcessLookupError):
                os.killpg(job.pgid, signal.SIGCONT)
            try:
                _, status = os.waitpid(job.pgid, os.WUNTRACED)
            except ChildProcessError:
                status = None
        self._reclaim_terminal()
        if status is not None and analyze_status(status)[0] is Status.SUSPENDED:
            job.ground = Ground.STOPPED
        else:
            self.jobs.delete(job)

    def builtin_bg(self, args: Sequence[str]) -> None:
        """Resume a stopped job in the background."""
        position = _job_position(args)
        job = self.jobs.get_by_pos(position)
        if job is None:
            self._write("BG ERROR: trabajo no encontrado \n")
        elif job.ground is Ground.STOPPED:
            job.ground = Ground.BACKGROUND
            self._write(
                f"Puesto en background el trabajo {position} que estaba detenido, "
                f"el trabajo era: {job.command}\n"
            )
            with suppress(ProcessLookupError):
                os.killpg(job.pgid, signal.SIGCONT)

    # -- child reaping -------------------------------------------------------

    def reap_children(self, signum: Optional[int] = None, frame: object = None) -> None:
        """SIGCHLD handler: collect finished jobs and mark stopped ones."""
        with _sigchld_blocked():
            for job in self.jobs:
                try:
                    pid, status = os.waitpid(job.pgid, os.WUNTRACED | os.WNOHANG)
                except ChildProcessError:
                    continue
                if pid != job.pgid:
                    continue
                self._write(
                    f"Wait realizado a proceso en background: {job.command}, pid: {job.pgid}\n"
                )
                state, _ = analyze_status(status)
                if state in (Status.EXITED, Status.SIGNALED):
                    self.jobs.delete(job)
                elif state is Status.SUSPENDED:
                    job.ground = Ground.STOPPED


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the shell on the process's standard streams."""
    return Shell(sys.stdin, sys.stdout).run()


if __name__ == "__main__":
    sys.exit(main())