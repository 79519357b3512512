from __future__ import annotations

import collections.abc as _collections_abc
import datetime as _datetime
import logging as _logging
import subprocess as _subprocess
import threading as _threading
import time as _time
import typing as _typing

from . import _database, _errors, _psql, _types, _util


__all__ = [
    "RestoreExecutor",
    "restore_argv",
]


_LOGGER = _logging.getLogger(__name__)

# How often the wait for the restore process checks for cancellation
_WAIT_SLICE = 0.2


def restore_argv(
    artifact: _types.BackupArtifact,
    db_name: str,
    *,
    username: str = "postgres",
    on_error_stop: bool = False,
) -> list[str]:
    """Return the command (run inside the container) applying *artifact*.

    >>> import pathlib
    >>> plain = _types.BackupArtifact(local_path=pathlib.Path("a.sql"), remote_staged_path="/a.sql")
    >>> restore_argv(plain, "testdb")
    ['psql', '-X', '-U', 'postgres', '-d', 'testdb', '-f', '/a.sql']
    >>> custom = _types.BackupArtifact(local_path=pathlib.Path("a.dump"), remote_staged_path="/a.dump",
    ...                                format=_types.ArtifactFormat.CUSTOM)
    >>> restore_argv(custom, "testdb", on_error_stop=True)
    ['pg_restore', '-U', 'postgres', '-d', 'testdb', '--no-owner', '--exit-on-error', '/a.dump']
    """
    if artifact.format == _types.ArtifactFormat.CUSTOM:
        argv = ["pg_restore", "-U", username, "-d", db_name, "--no-owner"]
        if on_error_stop:
            argv.append("--exit-on-error")
        argv.append(artifact.remote_staged_path)
        return argv
    return _psql.psql_argv(
        username=username,
        dbname=db_name,
        file=artifact.remote_staged_path,
        on_error_stop=on_error_stop,
    )


class RestoreExecutor:
    """Apply a staged artifact while reporting the database size periodically.

    The restore process runs in the background. A heartbeat thread
    samples ``pg_database_size`` every *poll_interval* seconds and
    passes a :obj:`RestoreProgress` to *on_progress*. The samples are
    advisory only; the outcome is decided by the exit status of the
    restore process alone.
    """

    def __init__(
        self,
        psql: _psql.ContainerPsql,
        *,
        poll_interval: float = 10.0,
        on_progress: _collections_abc.Callable[[_types.RestoreProgress], None]
        | None = None,
        on_error_stop: bool = False,
        clock: _collections_abc.Callable[[], float] = _time.monotonic,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval!r}")
        self._psql = psql
        self._poll_interval = poll_interval
        self._on_progress = on_progress
        self._on_error_stop = on_error_stop
        self._clock = clock
        self._logger = _util.PrefixLoggerAdapter(_LOGGER, prefix="[restore]")

    def sample_progress(self, db_name: str, started: float) -> _types.RestoreProgress:
        elapsed = _datetime.timedelta(seconds=self._clock() - started)
        try:
            size = self._psql.database_size(db_name)
        except (_errors.PgContainerError, ValueError) as exc:
            self._logger.debug("Could not sample size of %s: %s", db_name, exc)
            size = None
        return _types.RestoreProgress(elapsed, size)

    def _heartbeat(self, db_name: str, started: float, stop: _threading.Event) -> None:
        while not stop.is_set():
            progress = self.sample_progress(db_name, started)
            if stop.is_set():
                break
            self._logger.info("%s: %s", db_name, progress)
            if self._on_progress is not None:
                try:
                    self._on_progress(progress)
                except Exception:
                    self._logger.exception("Progress callback failed")
            stop.wait(self._poll_interval)

    def _wait(
        self, proc: _subprocess.Popen, cancel: _threading.Event | None
    ) -> int | None:
        """Wait for *proc*; return `None` if the wait was cancelled."""
        try:
            while True:
                if cancel is not None and cancel.is_set():
                    return None
                try:
                    return proc.wait(timeout=_WAIT_SLICE)
                except _subprocess.TimeoutExpired:
                    continue
        except KeyboardInterrupt:
            self._logger.warning("Interrupted")
            return None

    def _join(self, heartbeat: _threading.Thread) -> None:
        try:
            heartbeat.join()
        except KeyboardInterrupt:
            self._logger.warning("Interrupted while stopping the heartbeat")

    def _terminate(self, proc: _subprocess.Popen, db_name: str) -> None:
        """Stop the ``docker exec`` client and the restore sessions.

        ``docker exec`` does not forward signals, so the sessions still
        running on *db_name* are terminated with ``pg_terminate_backend``.
        """
        self._logger.warning("Cancelled, sending termination request to restore")
        proc.terminate()
        try:
            _database.terminate_backends(self._psql, db_name)
        except _errors.PgContainerError as exc:
            self._logger.warning(
                "Could not terminate sessions on %s: %s", db_name, exc
            )

    def restore(
        self,
        artifact: _types.BackupArtifact,
        db_name: str,
        *,
        cancel: _threading.Event | None = None,
    ) -> _types.RestoreOutcome:
        argv = restore_argv(
            artifact,
            db_name,
            username=self._psql.username,
            on_error_stop=self._on_error_stop,
        )
        started = self._clock()
        proc = self._psql.exec_popen(argv)

        stop = _threading.Event()
        heartbeat = _threading.Thread(
            target=self._heartbeat,
            args=(db_name, started, stop),
            name=f"restore-heartbeat-{db_name}",
            daemon=True,
        )
        heartbeat.start()
        try:
            returncode = self._wait(proc, cancel)
        except BaseException:
            stop.set()
            self._terminate(proc, db_name)
            raise
        stop.set()
        self._join(heartbeat)

        if returncode is None:
            self._terminate(proc, db_name)
            exit_code = proc.wait()
            elapsed = _datetime.timedelta(seconds=self._clock() - started)
            return _types.RestoreOutcome(
                _types.RestoreStatus.CANCELLED, exit_code, elapsed
            )

        elapsed = _datetime.timedelta(seconds=self._clock() - started)
        outcome = _types.RestoreOutcome.from_exit_code(returncode, elapsed=elapsed)
        self._logger.info(
            "%s into %s finished with exit code %s after %s",
            artifact.basename,
            db_name,
            returncode,
            elapsed,
        )
        return outcome
