# jobshell

A small interactive shell for POSIX systems with job control. It runs
programs in the foreground or in the background, keeps a list of background
and stopped jobs, and lets you move them between foreground and background.

## Installing

    pip install .

## Running

    jobshell

The shell shows a `COMANDO->` prompt. Type a command and its arguments,
separated by spaces or tabs. Put `&` after the command to run it in the
background; anything after the `&` is ignored. A line is read up to 256
characters. Press Ctrl+D to leave.

## Built-in commands

| Command      | Effect                                                        |
|--------------|---------------------------------------------------------------|
| `cd [dir]`   | Change directory; with no argument goes to `/home`.           |
| `jobs`       | List background and stopped jobs with their positions.        |
| `fg [n]`     | Bring job `n` (default 1) to the foreground and wait for it.  |
| `bg [n]`     | Resume stopped job `n` (default 1) in the background.         |
| `logout`     | Leave the shell.                                              |

Each program started gets its own process group. When standard input is a
terminal, a foreground job is given the terminal and the shell takes it back
when the job stops or ends; Ctrl+Z stops a foreground job and adds it to the
job list as stopped. The shell itself ignores Ctrl+C, Ctrl+\ and Ctrl+Z.
Finished background jobs are reaped on `SIGCHLD` and removed from the list;
stopped ones are marked as stopped.

Newly added jobs go to the front of the list, so position 1 is always the
most recent job.

## What it does not do

The command line is split on spaces and tabs only. There is no quoting or
escaping, no variables or globbing, no pipes, no input or output
redirection, and no command sequences; there are no scripts, history or
line editing.

## Using the job list from Python

```python
from jobshell.jobs import Ground, Job, JobList, parse_command, analyze_status

jobs = JobList("lista_trabajo")
jobs.add(Job(4242, "sleep", Ground.BACKGROUND))
print(len(jobs))                      # 1
print(jobs.get_by_pos(1).describe())  # PID 4242. Comando sleep. Ubicado como Segundo Plano.
print(jobs.render())
print(parse_command("sleep 10 &"))    # (['sleep', '10'], True)
```

`jobshell.jobs` also provides `read_command(stream)`, `analyze_status(status)`
(turns a wait status into a `Status` and its exit code or signal number),
and the signal helpers `terminal_signals`, `ignore_terminal_signals`,
`restore_terminal_signals` and `block_signal`. `jobshell.shell.Shell` can be
run on any pair of text streams with `Shell(stdin, stdout).run()`.

## Running the tests

    pip install .[test]
    pytest