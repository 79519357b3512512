from __future__ import annotations

import collections.abc as _collections_abc
import typing as _typing

from . import _util


if _typing.TYPE_CHECKING:
    from . import _docker


__all__ = [
    "AmbiguousError",
    "CleanupFailedError",
    "CreateFailedError",
    "DockerCommandError",
    "DockerUnavailableError",
    "DropFailedError",
    "NotFoundError",
    "PgContainerError",
    "RestoreCancelledError",
    "RestoreFailedError",
    "TransferError",
]


class PgContainerError(Exception):
    """Base class of all errors reported by the pgcontainer tools.

    *stage* names the step that failed and is shown to the operator.
    """

    default_stage: _typing.ClassVar[str] = "pgcontainer"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage

    def __str__(self) -> str:
        return self.message


class DockerUnavailableError(PgContainerError):
    default_stage = "docker"


class DockerCommandError(PgContainerError):
    """A ``docker`` invocation exited with a nonzero status.

    >>> str(DockerCommandError(["docker", "exec", "db", "psql", "-c", "SELECT 1"], 2, "boom\\n"))
    "Command docker exec db psql -c 'SELECT 1' failed with exit code 2: boom"
    """

    default_stage = "docker"

    def __init__(
        self,
        argv: _collections_abc.Sequence[str],
        returncode: int,
        stderr: str | None = None,
        *,
        stage: str | None = None,
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        message = (
            f"Command {_util.cmd_to_str(self.argv)} failed with exit code {returncode}"
        )
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message, stage=stage)


class NotFoundError(PgContainerError):
    default_stage = "locate"


class AmbiguousError(PgContainerError):
    default_stage = "locate"

    def __init__(
        self,
        message: str,
        candidates: _collections_abc.Iterable[_docker.ContainerRef],
        *,
        stage: str | None = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.candidates = list(candidates)


class TransferError(PgContainerError):
    default_stage = "stage"


class DropFailedError(PgContainerError):
    default_stage = "drop"


class CreateFailedError(PgContainerError):
    default_stage = "create"


class RestoreFailedError(PgContainerError):
    default_stage = "restore"

    def __init__(
        self, message: str, *, exit_code: int, stage: str | None = None
    ) -> None:
        super().__init__(message, stage=stage)
        self.exit_code = exit_code


class RestoreCancelledError(PgContainerError):
    default_stage = "restore"


class CleanupFailedError(PgContainerError):
    default_stage = "cleanup"
