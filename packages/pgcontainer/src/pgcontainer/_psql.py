from __future__ import annotations

import collections.abc as _collections_abc
import logging as _logging
import typing as _typing

from . import _util


if _typing.TYPE_CHECKING:
    import subprocess as _subprocess

    from . import _docker


__all__ = [
    "ContainerPsql",
    "psql_argv",
]


_LOGGER = _logging.getLogger(__name__)


def psql_argv(
    *,
    username: str,
    dbname: str | None = None,
    command: str | None = None,
    file: str | None = None,
    tuples_only: bool = False,
    on_error_stop: bool = False,
) -> list[str]:
    """Return the argument vector of a ``psql`` call.

    >>> psql_argv(username="postgres", dbname="postgres", command="SELECT 1", tuples_only=True)
    ['psql', '-X', '-U', 'postgres', '-d', 'postgres', '-t', '-A', '-c', 'SELECT 1']
    >>> psql_argv(username="postgres", dbname="app", file="/app.sql", on_error_stop=True)
    ['psql', '-X', '-U', 'postgres', '-d', 'app', '-v', 'ON_ERROR_STOP=1', '-f', '/app.sql']
    """
    if (command is None) == (file is None):
        raise ValueError("Exactly one of command and file must be given")
    argv = ["psql", "-X", "-U", username]
    if dbname:
        argv += ["-d", dbname]
    if tuples_only:
        argv += ["-t", "-A"]
    if on_error_stop:
        argv += ["-v", "ON_ERROR_STOP=1"]
    if command is not None:
        argv += ["-c", command]
    else:
        argv += ["-f", _typing.cast(str, file)]
    return argv


class ContainerPsql:
    """Runs ``psql`` inside one container via ``docker exec``."""

    def __init__(
        self,
        docker: _docker.DockerCli,
        container: _docker.ContainerRef,
        *,
        username: str = "postgres",
        maintenance_db: str = "postgres",
    ) -> None:
        self._docker = docker
        self._container = container
        self._username = username
        self._maintenance_db = maintenance_db
        self._logger = _util.PrefixLoggerAdapter(_LOGGER, prefix="[psql]")

    @property
    def docker(self) -> _docker.DockerCli:
        return self._docker

    @property
    def container(self) -> _docker.ContainerRef:
        return self._container

    @property
    def username(self) -> str:
        return self._username

    @property
    def maintenance_db(self) -> str:
        return self._maintenance_db

    def run(
        self,
        sql: str,
        *,
        dbname: str | None = None,
        tuples_only: bool = False,
        check: bool = True,
        capture_output: bool = True,
    ) -> _subprocess.CompletedProcess[str]:
        """Run *sql* in *dbname* (default: the maintenance database)."""
        dbname = dbname or self._maintenance_db
        argv = psql_argv(
            username=self._username,
            dbname=dbname,
            command=sql,
            tuples_only=tuples_only,
        )
        self._logger.debug("%s in %s: %s", self._container, dbname, sql)
        return self._docker.exec(
            self._container,
            argv,
            env={"PAGER": "cat"},
            check=check,
            capture_output=capture_output,
        )

    def scalar(self, sql: str, *, dbname: str | None = None) -> str | None:
        """Return the first value of the first row or `None` if there are no rows."""
        proc = self.run(sql, dbname=dbname, tuples_only=True)
        lines = [line.strip() for line in proc.stdout.splitlines() if line.strip()]
        return lines[0] if lines else None

    def database_exists(self, name: str) -> bool:
        value = self.scalar(
            f"SELECT 1 FROM pg_database WHERE datname = {_util.quote_literal(name)};"
        )
        return value == "1"

    def database_size(self, name: str) -> int:
        value = self.scalar(
            f"SELECT pg_database_size({_util.quote_literal(name)});"
        )
        if value is None:
            raise ValueError(f"No size returned for database {name!r}")
        return int(value)

    def list_database_names(self) -> list[str]:
        proc = self.run(
            "SELECT datname FROM pg_database WHERE NOT datistemplate ORDER BY datname;",
            tuples_only=True,
        )
        return [line.strip() for line in proc.stdout.splitlines() if line.strip()]

    def exec_popen(
        self,
        argv: _collections_abc.Sequence[str],
        **kwargs,
    ) -> _subprocess.Popen:
        return self._docker.exec_popen(
            self._container, argv, env={"PAGER": "cat"}, **kwargs
        )
