from __future__ import annotations

import collections.abc as _collections_abc
import dataclasses as _dataclasses
import logging as _logging
import subprocess as _subprocess
import typing as _typing

from . import _errors, _util


if _typing.TYPE_CHECKING:
    import pathlib as _pathlib


__all__ = [
    "ContainerRef",
    "DockerCli",
]


_LOGGER = _logging.getLogger(__name__)

_PS_FORMAT = "{{.ID}}\t{{.Names}}\t{{.Image}}\t{{.Status}}"


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class ContainerRef:
    id: str
    name: str
    image: str = ""
    status: str = ""

    def __str__(self) -> str:
        return f"{self.name} ({self.short_id})"

    @property
    def short_id(self) -> str:
        return self.id[:12]

    def matches(self, ident: str) -> bool:
        """Return `True` if *ident* is this container's name or an id prefix.

        >>> c = ContainerRef(id="c091f5a68780aa", name="base-setup-postgres-1")
        >>> c.matches("base-setup-postgres-1"), c.matches("c091f5"), c.matches("postgres")
        (True, True, False)
        """
        if not ident:
            return False
        return ident == self.name or self.id.startswith(ident)

    @classmethod
    def from_ps_line(cls, line: str) -> ContainerRef:
        """Parse one line of ``docker ps`` output in tab separated format.

        >>> ContainerRef.from_ps_line("abc\\tdb\\tpostgres:16\\tUp 2 hours")
        ContainerRef(id='abc', name='db', image='postgres:16', status='Up 2 hours')
        """
        fields = line.rstrip("\n").split("\t", 3)
        fields += [""] * (4 - len(fields))
        container_id, name, image, status = fields
        return cls(id=container_id, name=name, image=image, status=status)


class DockerCli:
    """Thin wrapper around the ``docker`` command line client."""

    def __init__(
        self,
        executable: str = "docker",
        *,
        logger: _logging.Logger | _logging.LoggerAdapter | None = None,
    ) -> None:
        self._executable = executable
        if logger is None:
            self._logger = _util.PrefixLoggerAdapter(_LOGGER, prefix="[docker]")
        else:
            self._logger = logger

    @property
    def executable(self) -> str:
        return self._executable

    def run(
        self,
        args: _collections_abc.Sequence[str],
        *,
        check: bool = True,
        capture_output: bool = True,
    ) -> _subprocess.CompletedProcess[str]:
        """Run ``docker *args`` and wait for it.

        Raises :obj:`DockerCommandError` on a nonzero exit status if
        *check* is `True`. With *capture_output* `False` the output of
        the command goes straight to this process' stdout/stderr.
        """
        import sys

        cmd = [self._executable, *args]
        self._logger.info("Run %s", _util.cmd_to_str(cmd))
        if not capture_output:
            sys.stdout.flush()
            sys.stderr.flush()
        try:
            proc = _subprocess.run(
                cmd, capture_output=capture_output, text=True, check=False
            )
        except FileNotFoundError as exc:
            raise _errors.DockerUnavailableError(
                f"Cannot run {self._executable!r}: {exc.strerror}"
            ) from exc
        self._logger.debug("Exit code %s: %s", proc.returncode, _util.cmd_to_str(cmd))
        if check and proc.returncode != 0:
            raise _errors.DockerCommandError(cmd, proc.returncode, proc.stderr)
        return proc

    def popen(
        self, args: _collections_abc.Sequence[str], **kwargs
    ) -> _subprocess.Popen:
        """Start ``docker *args`` without waiting for it."""
        import sys

        cmd = [self._executable, *args]
        self._logger.info("Start %s", _util.cmd_to_str(cmd))
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            return _subprocess.Popen(cmd, **kwargs)
        except FileNotFoundError as exc:
            raise _errors.DockerUnavailableError(
                f"Cannot run {self._executable!r}: {exc.strerror}"
            ) from exc

    def ps(self) -> list[ContainerRef]:
        """Return all running containers."""
        proc = self.run(["ps", "--no-trunc", "--format", _PS_FORMAT])
        containers = [
            ContainerRef.from_ps_line(line)
            for line in proc.stdout.splitlines()
            if line.strip()
        ]
        self._logger.debug("Found %s running container(s)", len(containers))
        return containers

    def copy_into(
        self,
        local_path: str | _pathlib.Path,
        container: ContainerRef,
        remote_path: str,
    ) -> None:
        self.run(["cp", str(local_path), f"{container.id}:{remote_path}"])

    def exec_args(
        self,
        container: ContainerRef,
        argv: _collections_abc.Sequence[str],
        *,
        env: _collections_abc.Mapping[str, str] | None = None,
    ) -> list[str]:
        args = ["exec"]
        for key, value in (env or {}).items():
            args += ["-e", f"{key}={value}"]
        return [*args, container.id, *argv]

    def exec(
        self,
        container: ContainerRef,
        argv: _collections_abc.Sequence[str],
        *,
        env: _collections_abc.Mapping[str, str] | None = None,
        check: bool = True,
        capture_output: bool = True,
    ) -> _subprocess.CompletedProcess[str]:
        return self.run(
            self.exec_args(container, argv, env=env),
            check=check,
            capture_output=capture_output,
        )

    def exec_popen(
        self,
        container: ContainerRef,
        argv: _collections_abc.Sequence[str],
        *,
        env: _collections_abc.Mapping[str, str] | None = None,
        **kwargs,
    ) -> _subprocess.Popen:
        return self.popen(self.exec_args(container, argv, env=env), **kwargs)
