from __future__ import annotations

import logging as _logging
import typing as _typing


if _typing.TYPE_CHECKING:
    from . import _psql


__all__ = [
    "run_query",
]


_LOGGER = _logging.getLogger(__name__)


def run_query(psql: _psql.ContainerPsql, db_name: str, sql: str) -> int:
    """Run *sql* in *db_name*, passing the ``psql`` output through verbatim.

    Returns the exit code of ``psql``.
    """
    proc = psql.run(sql, dbname=db_name, check=False, capture_output=False)
    if proc.returncode != 0:
        _LOGGER.warning(
            "[query] psql exited with code %s in %s", proc.returncode, db_name
        )
    return proc.returncode
