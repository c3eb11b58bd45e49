"""Session activator.

Spawns the interactive shell (or a single command) with exactly the
assembled environment and returns its exit status. The child never sees the
parent's `os.environ` directly: the activation mapping already contains
whatever was inherited, with declared overrides applied.

The child process is scoped to `activate` and is reaped on every exit path.
"""

from __future__ import annotations

import shlex
import signal
import subprocess
import threading
from contextlib import contextmanager
from typing import Iterator, Sequence

import structlog

from core.domain.models import ActivationEnvironment
from core.errors import SpawnFailed

log = structlog.get_logger(__name__)

DEFAULT_SHELL = "/bin/sh"


def select_shell(environment: ActivationEnvironment, shell: str | None = None) -> str:
    """Explicit shell, else the environment's `SHELL`, else `/bin/sh`."""

    return shell or environment.variables.get("SHELL") or DEFAULT_SHELL


def build_argv(shell: str, command: str | None, shell_hook: str | None = None) -> list[str]:
    if command is None:
        if shell_hook:
            return [shell, "-c", f"{shell_hook}\nexec {shlex.quote(shell)}"]
        return [shell]
    if shell_hook:
        return [shell, "-c", f"{shell_hook}\n{command}"]
    return [shell, "-c", command]


def exit_status(returncode: int) -> int:
    """Map `Popen.returncode` to a shell-style status (signal N -> 128 + N)."""

    if returncode < 0:
        return 128 + (-returncode)
    return returncode


@contextmanager
def _ignore_interrupts() -> Iterator[None]:
    # Ctrl-C at an interactive prompt belongs to the child shell.
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _spawn(argv: Sequence[str], env: dict[str, str]) -> subprocess.Popen:
    try:
        return subprocess.Popen(list(argv), env=env)
    except OSError as exc:
        raise SpawnFailed(argv, exc) from exc


def activate(
    environment: ActivationEnvironment,
    command: str | None = None,
    *,
    shell: str | None = None,
) -> int:
    """Run the session and return its exit status.

    Without `command` an interactive shell is started; with it, the command
    runs non-interactively through `<shell> -c`.
    """

    selected = select_shell(environment, shell)
    argv = build_argv(selected, command, environment.shell_hook)
    interactive = command is None

    proc = _spawn(argv, environment.as_env())
    log.info("session_spawned", pid=proc.pid, shell=selected, interactive=interactive)

    with proc:
        try:
            if interactive:
                with _ignore_interrupts():
                    returncode = proc.wait()
            else:
                returncode = proc.wait()
        except BaseException:
            if proc.poll() is None:
                proc.terminate()
                try:
                    proc.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    proc.kill()
                    proc.wait()
            raise

    status = exit_status(returncode)
    log.info("session_exited", pid=proc.pid, status=status)
    return status
