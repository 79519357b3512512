"""Entry points of the ``pgc-restore``, ``pgc-query`` and ``pgc-list-containers`` tools."""

from __future__ import annotations

import contextlib as _contextlib
import logging as _logging
import pathlib as _pathlib
import signal as _signal
import threading as _threading
import typing as _typing

from . import _context, _errors, _listing, _locate, _psql, _query, _restore_backup


if _typing.TYPE_CHECKING:
    import argparse as _argparse

    from . import _console, _docker


__all__ = [
    "list_containers_main",
    "query_main",
    "restore_main",
]


_LOGGER = _logging.getLogger(__name__)

EXIT_CANCELLED = 130


_RESTORE_USAGE = """\
Usage: {prog} <backup-file> [container-id] <database-name>

Arguments:
  backup-file    Path to the SQL backup file (e.g., ~/Downloads/qa-order-service.sql)
  container-id   Docker container ID or name (optional, default: {default_container})
  database-name  Name of the database to restore (e.g., order_development)

Examples:
  {prog} ~/Downloads/qa-order-service.sql c091f5a68780 order_development
  {prog} ~/Downloads/qa-order-service.sql order_development
"""

_QUERY_USAGE = """\
Usage: {prog} <database_name> <sql_query> [container_id]

Examples:
  {prog} order_development "SELECT * FROM users LIMIT 10"
  {prog} order_development "INSERT INTO logs (message) VALUES ('test')" c091f5a68780
"""


@_contextlib.contextmanager
def _cancel_on_signal(
    cancel: _threading.Event, signals: tuple[int, ...] = (_signal.SIGTERM,)
) -> _typing.Iterator[_threading.Event]:
    """Set *cancel* when one of *signals* is received (main thread only)."""
    if _threading.current_thread() is not _threading.main_thread():
        yield cancel
        return

    def handler(signum, frame):
        _LOGGER.warning("Received signal %s, cancelling", signum)
        cancel.set()

    previous = {signum: _signal.signal(signum, handler) for signum in signals}
    try:
        yield cancel
    finally:
        for signum, prev_handler in previous.items():
            _signal.signal(signum, prev_handler)


def _create_context(
    argument_parser: _argparse.ArgumentParser,
    argv: list[str] | None,
    *,
    docker: _docker.DockerCli | None,
    reporter: _console.Reporter | None,
) -> _context.PgContainerContext | None:
    """Return the tool context or `None` after reporting a config error."""
    import yaml as _yaml

    try:
        return _context.PgContainerContext(
            argument_parser=argument_parser,
            argv=argv,
            docker=docker,
            reporter=reporter,
        )
    except (OSError, ValueError, _yaml.YAMLError) as exc:
        if reporter is None:
            from . import _console

            reporter = _console.Reporter()
        reporter.error(str(exc), stage="config")
        return None


def _exit_status(returncode: int | None) -> int:
    """Return the exit status of this process after a child failed with *returncode*.

    A child killed by signal N (negative *returncode*) maps to 128 + N.

    >>> _exit_status(3), _exit_status(-15), _exit_status(0), _exit_status(None)
    (3, 143, 1, 1)
    """
    if not returncode:
        return 1
    elif returncode < 0:
        return 128 - returncode
    return returncode


def _print_usage(reporter: _console.Reporter, usage: str, **kwargs) -> None:
    reporter.out.print(usage.format(**kwargs), markup=False, end="")


def _report_ambiguous(
    reporter: _console.Reporter, exc: _errors.AmbiguousError, hint: str
) -> None:
    reporter.error(exc)
    reporter.out.print("[yellow]Multiple matching containers found:[/]")
    reporter.candidates(exc.candidates)
    reporter.blank()
    reporter.out.print(f"[yellow]{hint}[/]")


# ==============================================================================
# restore
# ==============================================================================


def create_restore_argument_parser() -> _argparse.ArgumentParser:
    import argparse

    p = argparse.ArgumentParser(
        prog="pgc-restore",
        usage="%(prog)s [options] <backup-file> [container-id] <database-name>",
        description="Restore a PostgreSQL backup into a database running in a Docker container.",
    )
    p.add_argument(
        "args",
        nargs="*",
        metavar="ARG",
    )
    p.add_argument(
        "--poll-interval",
        type=float,
        metavar="<seconds>",
        help="Seconds between two progress reports (default: 10)",
    )
    p.add_argument(
        "--on-error-stop",
        action="store_true",
        default=None,
        help="Abort the restore at the first failing statement",
    )
    p.add_argument(
        "--terminate-connections",
        action="store_true",
        default=False,
        help="Terminate other sessions connected to the database before dropping it",
    )
    return p


def restore_main(
    argv: list[str] | None = None,
    *,
    docker: _docker.DockerCli | None = None,
    reporter: _console.Reporter | None = None,
    cancel: _threading.Event | None = None,
) -> int:
    ctx = _create_context(
        create_restore_argument_parser(),
        argv,
        docker=docker,
        reporter=reporter,
    )
    if ctx is None:
        return 1
    args = ctx.parsed_args
    reporter = ctx.reporter

    if len(args.args) == 3:
        backup_file, container_id, db_name = args.args
    elif len(args.args) == 2:
        backup_file, db_name = args.args
        container_id = ctx.config.default_container
    else:
        _print_usage(
            reporter,
            _RESTORE_USAGE,
            prog="pgc-restore",
            default_container=ctx.config.default_container,
        )
        return 1

    try:
        config = ctx.config.replace(
            poll_interval=args.poll_interval, on_error_stop=args.on_error_stop
        )
    except ValueError as exc:
        reporter.error(str(exc), stage="config")
        return 1

    if cancel is None:
        cancel = _threading.Event()
    backup_path = _pathlib.Path(backup_file).expanduser()
    try:
        if not backup_path.is_file():
            raise _errors.NotFoundError(
                f"Backup file not found: {backup_file}", stage="stage"
            )
        container = _locate.locate_explicit(ctx.docker, container_id)
        with _cancel_on_signal(cancel):
            _restore_backup.restore_backup(
                docker=ctx.docker,
                container=container,
                backup_file=backup_path,
                db_name=db_name,
                config=config,
                reporter=reporter,
                terminate_other_clients=args.terminate_connections,
                cancel=cancel,
            )
    except _errors.AmbiguousError as exc:
        _report_ambiguous(reporter, exc, "Please specify a longer container ID or the name")
        return 1
    except _errors.RestoreFailedError as exc:
        reporter.error(exc)
        return _exit_status(exc.exit_code)
    except _errors.RestoreCancelledError as exc:
        reporter.error(exc)
        return EXIT_CANCELLED
    except _errors.PgContainerError as exc:
        reporter.error(exc)
        return 1
    except KeyboardInterrupt:
        reporter.error("Interrupted", stage="restore")
        return EXIT_CANCELLED
    return 0


# ==============================================================================
# query
# ==============================================================================


def create_query_argument_parser() -> _argparse.ArgumentParser:
    import argparse

    p = argparse.ArgumentParser(
        prog="pgc-query",
        usage="%(prog)s [options] <database_name> <sql_query> [container_id]",
        description="Run an SQL statement in a PostgreSQL database running in a Docker container.",
    )
    p.add_argument(
        "args",
        nargs="*",
        metavar="ARG",
    )
    p.add_argument(
        "--image-hint",
        metavar="<text>",
        help="Only consider containers whose image contains <text> (default: postgres)",
    )
    return p


def query_main(
    argv: list[str] | None = None,
    *,
    docker: _docker.DockerCli | None = None,
    reporter: _console.Reporter | None = None,
) -> int:
    ctx = _create_context(
        create_query_argument_parser(),
        argv,
        docker=docker,
        reporter=reporter,
    )
    if ctx is None:
        return 1
    args = ctx.parsed_args
    reporter = ctx.reporter

    positional = list(args.args)
    if len(positional) not in (2, 3) or not all(positional[:2]):
        reporter.error("Missing required arguments", stage="usage")
        _print_usage(reporter, _QUERY_USAGE, prog="pgc-query")
        return 1
    db_name, sql = positional[:2]
    container_id = positional[2] if len(positional) == 3 else ""
    image_hint = ctx.config.image_hint if args.image_hint is None else args.image_hint

    try:
        if container_id:
            container = _locate.locate_explicit(ctx.docker, container_id)
        else:
            reporter.info("Searching for PostgreSQL containers...")
            container = _locate.locate(ctx.docker, image_hint)
            reporter.success(f"Found PostgreSQL container: {container}")

        reporter.info(f"Executing query on database: {db_name}")
        reporter.info(f"Query: {sql}")
        reporter.blank()

        psql = _psql.ContainerPsql(
            ctx.docker,
            container,
            username=ctx.config.db_username,
            maintenance_db=ctx.config.maintenance_db,
        )
        exit_code = _query.run_query(psql, db_name, sql)
    except _errors.AmbiguousError as exc:
        _report_ambiguous(reporter, exc, "Please specify container ID as third argument")
        return 1
    except _errors.PgContainerError as exc:
        reporter.error(exc)
        return 1

    reporter.blank()
    if exit_code == 0:
        reporter.success("Query executed successfully")
    else:
        reporter.error(f"Query failed with exit code: {exit_code}", stage="query")
        return _exit_status(exit_code)
    return 0


# ==============================================================================
# list-containers
# ==============================================================================


def create_list_containers_argument_parser() -> _argparse.ArgumentParser:
    import argparse

    p = argparse.ArgumentParser(
        prog="pgc-list-containers",
        description="Show running PostgreSQL containers and their databases.",
    )
    p.add_argument(
        "--image-hint",
        metavar="<text>",
        help="Only list containers whose image contains <text> (default: postgres)",
    )
    return p


def list_containers_main(
    argv: list[str] | None = None,
    *,
    docker: _docker.DockerCli | None = None,
    reporter: _console.Reporter | None = None,
) -> int:
    ctx = _create_context(
        create_list_containers_argument_parser(),
        argv,
        docker=docker,
        reporter=reporter,
    )
    if ctx is None:
        return 1
    try:
        _listing.list_containers(
            docker=ctx.docker,
            config=ctx.config,
            reporter=ctx.reporter,
            image_hint=ctx.parsed_args.image_hint,
        )
    except _errors.PgContainerError as exc:
        ctx.reporter.error(exc)
        return 1
    return 0
