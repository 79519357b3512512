from __future__ import annotations

import logging as _logging
import typing as _typing

from . import _errors, _types, _util


if _typing.TYPE_CHECKING:
    from . import _psql


__all__ = [
    "create_database",
    "drop_database",
    "reset_database",
    "terminate_backends",
]


_LOGGER = _logging.getLogger(__name__)


def drop_database(
    psql: _psql.ContainerPsql,
    name: str,
    *,
    terminate_other_clients: bool = False,
) -> _types.DropResult:
    """Drop database *name* if it exists.

    Returns :obj:`DropResult.ABSENT` if there was nothing to drop.
    Raises :obj:`DropFailedError` if the database exists but could not
    be dropped (e.g. because of open connections).
    """
    try:
        exists = psql.database_exists(name)
    except _errors.DockerCommandError as exc:
        raise _errors.DropFailedError(
            f"Could not check whether database {name} exists: {exc.stderr or exc}"
        ) from exc
    if not exists:
        _LOGGER.info("[drop] Database %s does not exist", name)
        return _types.DropResult.ABSENT

    try:
        if terminate_other_clients:
            terminate_backends(psql, name)
        psql.run(f"DROP DATABASE IF EXISTS {_util.quote_ident(name)};")
    except _errors.DockerCommandError as exc:
        raise _errors.DropFailedError(
            f"Could not drop database {name}: {exc.stderr or exc}"
        ) from exc
    _LOGGER.info("[drop] Dropped database %s", name)
    return _types.DropResult.DROPPED


def terminate_backends(psql: _psql.ContainerPsql, name: str) -> None:
    """Terminate all sessions connected to database *name* except our own."""
    psql.run(
        "SELECT pg_terminate_backend(pid) FROM pg_stat_activity"
        f" WHERE datname = {_util.quote_literal(name)}"
        " AND pid <> pg_backend_pid();"
    )
    _LOGGER.info("[terminate] Terminated sessions on database %s", name)


def create_database(psql: _psql.ContainerPsql, name: str) -> None:
    try:
        psql.run(f"CREATE DATABASE {_util.quote_ident(name)};")
    except _errors.DockerCommandError as exc:
        raise _errors.CreateFailedError(
            f"Could not create database {name}: {exc.stderr or exc}"
        ) from exc
    _LOGGER.info("[create] Created database %s", name)


def reset_database(
    psql: _psql.ContainerPsql,
    name: str,
    *,
    terminate_other_clients: bool = False,
) -> _types.DropResult:
    """Drop (if present) and recreate database *name*.

    Safe to call again after a failure between the two steps.
    """
    result = drop_database(
        psql, name, terminate_other_clients=terminate_other_clients
    )
    create_database(psql, name)
    return result
