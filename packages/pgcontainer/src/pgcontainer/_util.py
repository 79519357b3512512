from __future__ import annotations

import collections.abc as _collections_abc
import logging as _logging
import typing as _typing


if _typing.TYPE_CHECKING:
    import pathlib as _pathlib


_LOGGER = _logging.getLogger(__name__)


__all__ = [
    "PrefixLoggerAdapter",
    "cmd_to_str",
    "configure_file_logging",
    "quote_ident",
    "quote_literal",
    "to_bool",
    "to_log_level",
]


class PrefixLoggerAdapter(_logging.LoggerAdapter):
    def __init__(
        self,
        logger: _logging.Logger | _logging.LoggerAdapter,
        *,
        prefix: str,
    ) -> None:
        self._prefix = prefix
        super().__init__(logger)

    def process(self, msg, kwargs):
        return (f"{self._prefix} {msg}", kwargs)


def to_log_level(level: int | str | None, default: int | None = None) -> int:
    """Return the numeric logging level for *level*.

    >>> to_log_level("INFO")
    20
    >>> to_log_level("debug")
    10
    >>> to_log_level(None, default=30)
    30
    >>> to_log_level("verbose")
    Traceback (most recent call last):
    ...
    ValueError: Invalid log level 'verbose'
    """
    import logging

    if default is None:
        default = logging.DEBUG
    if level is None:
        return default
    elif isinstance(level, str):
        if level.isdigit():
            return int(level)
        try:
            return logging.getLevelNamesMapping()[level.upper()]
        except KeyError:
            raise ValueError(f"Invalid log level {level!r}") from None
    else:
        return level


def configure_file_logging(
    filename: str | _pathlib.Path,
    *,
    level: int | str | None,
    logger: _logging.Logger | str | None = None,
) -> _logging.Handler:
    import logging

    if logger is None:
        logger = logging.getLogger()
    elif isinstance(logger, str):
        logger = logging.getLogger(logger)
    level = to_log_level(level, default=logging.NOTSET)

    formatter = logging.Formatter("%(asctime)s %(levelname)-1s %(message)s")
    handler = logging.FileHandler(filename, encoding="utf-8")
    handler.setFormatter(formatter)
    handler.setLevel(level)
    logger.addHandler(handler)
    return handler


def to_bool(name: str, value: bool | str | int) -> bool:
    """Parse a boolean config value.

    >>> to_bool("x", "yes")
    True
    >>> to_bool("x", "F")
    False
    >>> to_bool("x", "maybe")
    Traceback (most recent call last):
    ...
    ValueError: Invalid config x! Expected bool, got 'maybe'
    """
    if isinstance(value, bool):
        return value
    s_low = str(value).lower()
    if s_low in {"true", "t", "1", "yes"}:
        return True
    elif s_low in {"false", "f", "0", "no"}:
        return False
    else:
        raise ValueError(f"Invalid config {name}! Expected bool, got {value!r}")


def cmd_to_str(cmd: _collections_abc.Iterable[object]) -> str:
    """Return *cmd* as a string that can be pasted into a shell.

    >>> cmd_to_str(["psql", "-c", "SELECT 1;"])
    "psql -c 'SELECT 1;'"
    """
    import shlex

    return " ".join(shlex.quote(str(a)) for a in cmd)


# ==============================================================================
# SQL
# ==============================================================================


def quote_ident(name: str) -> str:
    """Quote *name* as an SQL identifier.

    >>> quote_ident("order_development")
    '"order_development"'
    >>> quote_ident('we"ird')
    '"we""ird"'
    """
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Quote *value* as an SQL string literal.

    >>> quote_literal("testdb")
    "'testdb'"
    >>> quote_literal("it's")
    "'it''s'"
    """
    return "'" + value.replace("'", "''") + "'"
