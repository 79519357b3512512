from __future__ import annotations

import logging as _logging
import os as _os
import pathlib as _pathlib
import shlex as _shlex
import subprocess as _subprocess
import sys as _sys


_LOGGER = _logging.getLogger(__name__)
_SELFDIR = _pathlib.Path(__file__).parent.resolve()
_ROOT_DIR = (_SELFDIR / ".." / ".." / ".." / "..").resolve()


def run_tool(
    tool,
    *args,
    env_update=None,
    check=False,
    cwd=None,
    **kwargs,
) -> _subprocess.CompletedProcess:
    """Run ``tools/<tool>.py`` with the current interpreter.

    stdout and stderr are captured as text.
    """
    if not _os.path.isabs(tool):
        tool = _os.path.join(_ROOT_DIR, "tools", tool)
    env = _os.environ.copy()
    if env_update is not None:
        env.update(env_update)
    cmd = [_sys.executable, str(tool), *(str(a) for a in args)]
    _LOGGER.info("Run %s", " ".join(_shlex.quote(a) for a in cmd))
    proc = _subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        env=env,
        check=check,
        cwd=cwd,
        **kwargs,
    )
    _LOGGER.debug("stdout:\n%s", proc.stdout)
    _LOGGER.debug("stderr:\n%s", proc.stderr)
    return proc


def docker_psql(container: str, dbname: str, sql: str, *, username="postgres") -> str:
    """Return the unaligned, tuples-only output of *sql* run in *container*."""
    cmd = [
        "docker",
        "exec",
        container,
        "psql",
        "-X",
        "-U",
        username,
        "-d",
        dbname,
        "-t",
        "-A",
        "-c",
        sql,
    ]
    _LOGGER.info("Run %s", " ".join(_shlex.quote(a) for a in cmd))
    return _subprocess.run(
        cmd, capture_output=True, text=True, check=True
    ).stdout.strip()


def docker_file_exists(container: str, path: str) -> bool:
    proc = _subprocess.run(
        ["docker", "exec", container, "test", "-e", path], capture_output=True
    )
    return proc.returncode == 0
