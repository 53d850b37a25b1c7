import io
import signal

import pytest

from jobshell.jobs import (
    Ground,
    Job,
    JobList,
    Status,
    analyze_status,
    block_signal,
    ignore_terminal_signals,
    parse_command,
    read_command,
    restore_terminal_signals,
    terminal_signals,
)

TERMINAL = (
    signal.SIGINT,
    signal.SIGQUIT,
    signal.SIGTSTP,
    signal.SIGTTIN,
    signal.SIGTTOU,
)


@pytest.fixture
def saved_handlers():
    saved = {s: signal.getsignal(s) for s in TERMINAL}
    yield
    for s, h in saved.items():
        signal.signal(s, h)


@pytest.fixture
def saved_mask():
    mask = signal.pthread_sigmask(signal.SIG_BLOCK, [])
    yield
    signal.pthread_sigmask(signal.SIG_SETMASK, mask)


def _current_handlers():
    return [signal.getsignal(s) for s in TERMINAL]


@pytest.mark.parametrize(
    "line, expected",
    [
        ("ls -l\n", (["ls", "-l"], False)),
        ("  ls \t  -a   /tmp  \n", (["ls", "-a", "/tmp"], False)),
        ("sleep 10 &\n", (["sleep", "10"], True)),
        ("sleep 10&\n", (["sleep", "10"], True)),
        ("sleep 10 & echo hi\n", (["sleep", "10"], True)),
        ("\n", ([], False)),
        ("", ([], False)),
        ("&\n", ([], True)),
        ("echo", (["echo"], False)),
    ],
)
def test_parse_command(line, expected):
    assert parse_command(line) == expected


def test_read_command_reads_one_line():
    stream = io.StringIO("cat file &\nls\n")
    assert read_command(stream) == (["cat", "file"], True)
    assert read_command(stream) == (["ls"], False)


def test_read_command_eof():
    with pytest.raises(EOFError):
        read_command(io.StringIO(""))


def test_read_command_limits_line_length():
    stream = io.StringIO("a" * 300 + "\n")
    args, background = read_command(stream)
    assert len(args[0]) == 256
    assert background is False


def test_job_describe():
    job = Job(42, "ls", Ground.BACKGROUND)
    assert job.describe() == "PID 42. Comando ls. Ubicado como Segundo Plano."


def test_job_defaults_to_foreground():
    assert Job(1, "x").ground is Ground.FOREGROUND


def test_status_and_ground_labels():
    statuses = [
        analyze_status((int(signal.SIGTSTP) << 8) | 0x7F)[0],
        analyze_status(int(signal.SIGKILL))[0],
        analyze_status(0)[0],
        analyze_status(0xFFFF)[0],
    ]
    assert [str(s) for s in statuses] == [
        "Suspendido",
        "Senalizado",
        "Finalizado",
        "Reanudado",
    ]
    descriptions = [Job(1, "x", g).describe() for g in Ground]
    assert descriptions == [
        "PID 1. Comando x. Ubicado como Primer Plano.",
        "PID 1. Comando x. Ubicado como Segundo Plano.",
        "PID 1. Comando x. Ubicado como Detenido.",
    ]


def test_new_list_is_empty():
    jobs = JobList("lista_trabajo")
    assert len(jobs) == 0
    assert list(jobs) == []
    assert jobs.render() == "Contenidos de lista_trabajo:\n"


def test_add_inserts_at_front():
    jobs = JobList("l")
    a, b, c = Job(1, "a"), Job(2, "b"), Job(3, "c")
    for job in (a, b, c):
        jobs.add(job)
    assert list(jobs) == [c, b, a]
    assert len(jobs) == 3


def test_get_by_pos():
    jobs = JobList("l")
    a, b = Job(1, "a"), Job(2, "b")
    jobs.add(a)
    jobs.add(b)
    assert jobs.get_by_pos(1) is b
    assert jobs.get_by_pos(2) is a
    assert jobs.get_by_pos(0) is None
    assert jobs.get_by_pos(3) is None
    assert jobs.get_by_pos(-1) is None


def test_get_by_pid():
    jobs = JobList("l")
    a, b = Job(10, "a"), Job(20, "b")
    jobs.add(a)
    jobs.add(b)
    assert jobs.get_by_pid(10) is a
    assert jobs.get_by_pid(20) is b
    assert jobs.get_by_pid(30) is None


def test_delete_removes_identity():
    jobs = JobList("l")
    a, twin = Job(5, "x"), Job(5, "x")
    jobs.add(a)
    jobs.add(twin)
    jobs.delete(a)
    assert list(jobs) == [twin]
    assert len(jobs) == 1


def test_delete_missing_raises():
    jobs = JobList("l")
    jobs.add(Job(1, "a"))
    with pytest.raises(ValueError):
        jobs.delete(Job(1, "a"))
    assert len(jobs) == 1


def test_iteration_survives_deletion():
    jobs = JobList("l")
    for pid in (1, 2, 3):
        jobs.add(Job(pid, str(pid)))
    for job in jobs:
        jobs.delete(job)
    assert len(jobs) == 0


def test_render():
    jobs = JobList("tareas")
    jobs.add(Job(7, "vim", Ground.STOPPED))
    jobs.add(Job(8, "sleep", Ground.BACKGROUND))
    assert jobs.render() == (
        "Contenidos de tareas:\n"
        " [1] PID 8. Comando sleep. Ubicado como Segundo Plano.\n"
        " [2] PID 7. Comando vim. Ubicado como Detenido.\n"
    )


@pytest.mark.parametrize("code", [0, 1, 127, 255])
def test_analyze_exited(code):
    assert analyze_status(code << 8) == (Status.EXITED, code)


@pytest.mark.parametrize("sig", [signal.SIGKILL, signal.SIGTERM, signal.SIGINT])
def test_analyze_signaled(sig):
    assert analyze_status(int(sig)) == (Status.SIGNALED, int(sig))


@pytest.mark.parametrize("sig", [signal.SIGTSTP, signal.SIGSTOP, signal.SIGTTIN])
def test_analyze_stopped(sig):
    assert analyze_status((int(sig) << 8) | 0x7F) == (Status.SUSPENDED, int(sig))


def test_analyze_continued():
    assert analyze_status(0xFFFF) == (Status.CONTINUED, 0)


def test_ignore_terminal_signals(saved_handlers):
    def handler(signum, frame):
        return None

    terminal_signals(handler)
    assert all(h is handler for h in _current_handlers())
    ignore_terminal_signals()
    handlers = _current_handlers()
    assert handlers == [signal.SIG_IGN] * len(TERMINAL)
    assert not any(h is handler for h in handlers)


def test_restore_terminal_signals(saved_handlers):
    def handler(signum, frame):
        return None

    terminal_signals(handler)
    assert all(h is handler for h in _current_handlers())
    restore_terminal_signals()
    handlers = _current_handlers()
    assert handlers == [signal.SIG_DFL] * len(TERMINAL)
    assert not any(h is handler for h in handlers)


def test_terminal_signals_custom_handler(saved_handlers):
    def handler(signum, frame):
        return None

    terminal_signals(handler)
    assert all(signal.getsignal(s) is handler for s in TERMINAL)


def test_block_and_unblock_signal(saved_mask):
    block_signal(signal.SIGCHLD, True)
    assert signal.SIGCHLD in signal.pthread_sigmask(signal.SIG_BLOCK, [])
    block_signal(signal.SIGCHLD, False)
    assert signal.SIGCHLD not in signal.pthread_sigmask(signal.SIG_BLOCK, [])