from __future__ import annotations

import dataclasses as _dataclasses
import datetime as _datetime
import enum as _enum
import pathlib as _pathlib
import typing as _typing


__all__ = [
    "ArtifactFormat",
    "BackupArtifact",
    "DropResult",
    "RestoreOutcome",
    "RestoreProgress",
    "RestoreStatus",
]


_PG_DUMP_CUSTOM_MAGIC = b"PGDMP"


class _ReprEnum(_enum.StrEnum):
    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}.{self.name}"


class ArtifactFormat(_ReprEnum):
    """
    >>> str(ArtifactFormat.CUSTOM)
    'custom'

    >>> repr(ArtifactFormat.PLAIN)
    'ArtifactFormat.PLAIN'
    """

    PLAIN = "plain"
    CUSTOM = "custom"

    @classmethod
    def detect(cls, path: str | _pathlib.Path) -> _typing.Self:
        """Return `CUSTOM` for ``pg_dump --format=custom`` archives, `PLAIN` otherwise."""
        with open(path, "rb") as f:
            head = f.read(len(_PG_DUMP_CUSTOM_MAGIC))
        return cls.CUSTOM if head == _PG_DUMP_CUSTOM_MAGIC else cls.PLAIN


class DropResult(_ReprEnum):
    DROPPED = "dropped"
    ABSENT = "absent"


class RestoreStatus(_ReprEnum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class BackupArtifact:
    local_path: _pathlib.Path
    remote_staged_path: str
    format: ArtifactFormat = ArtifactFormat.PLAIN

    @staticmethod
    def remote_path_for(local_path: str | _pathlib.Path, staging_root: str = "/") -> str:
        """Return where *local_path* is staged inside the container.

        >>> BackupArtifact.remote_path_for("/home/me/qa-order-service.sql")
        '/qa-order-service.sql'
        >>> BackupArtifact.remote_path_for("dump.sql", "/tmp/restore/")
        '/tmp/restore/dump.sql'
        """
        import posixpath

        return posixpath.join(staging_root or "/", _pathlib.Path(local_path).name)

    @property
    def basename(self) -> str:
        return self.local_path.name


@_dataclasses.dataclass(frozen=True, slots=True)
class RestoreProgress:
    elapsed: _datetime.timedelta
    database_size_bytes: int | None

    @property
    def database_size_str(self) -> str:
        """Human readable database size.

        >>> import datetime
        >>> RestoreProgress(datetime.timedelta(seconds=20), 8 * 1024 * 1024).database_size_str
        '8 MiB'
        >>> RestoreProgress(datetime.timedelta(seconds=20), None).database_size_str
        'unknown'
        """
        import humanfriendly as _humanfriendly

        if self.database_size_bytes is None:
            return "unknown"
        return _humanfriendly.format_size(self.database_size_bytes, binary=True)

    def __str__(self) -> str:
        import humanfriendly as _humanfriendly

        elapsed = _humanfriendly.format_timespan(self.elapsed.total_seconds())
        return f"Database size = {self.database_size_str} (after {elapsed})"


@_dataclasses.dataclass(frozen=True, slots=True)
class RestoreOutcome:
    status: RestoreStatus
    exit_code: int | None = None
    elapsed: _datetime.timedelta = _datetime.timedelta()

    @property
    def ok(self) -> bool:
        return self.status == RestoreStatus.SUCCESS

    @classmethod
    def from_exit_code(
        cls, exit_code: int, *, elapsed: _datetime.timedelta = _datetime.timedelta()
    ) -> _typing.Self:
        """
        >>> RestoreOutcome.from_exit_code(0).status
        RestoreStatus.SUCCESS
        >>> RestoreOutcome.from_exit_code(3)
        RestoreOutcome(status=RestoreStatus.FAILED, exit_code=3, elapsed=datetime.timedelta(0))
        """
        status = RestoreStatus.SUCCESS if exit_code == 0 else RestoreStatus.FAILED
        return cls(status, exit_code, elapsed)
