"""Restore a backup file into a database running in a Docker container.

The steps are strictly sequential:

1. copy the backup file into the container
2. drop the database (if it exists)
3. create the database
4. apply the backup, printing the database size periodically
5. remove the backup file from the container

A failed restore leaves the copied backup file in the container for
inspection. A failing cleanup is reported but never changes the
outcome.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

from . import _database, _errors, _psql, _restore, _stage, _types


if _typing.TYPE_CHECKING:
    import threading as _threading

    from . import _config, _console, _docker


__all__ = [
    "restore_backup",
]


_LOGGER = _logging.getLogger(__name__)

_STEPS = 5


def restore_backup(
    *,
    docker: _docker.DockerCli,
    container: _docker.ContainerRef,
    backup_file: str | _pathlib.Path,
    db_name: str,
    config: _config.PgContainerConfig,
    reporter: _console.Reporter,
    terminate_other_clients: bool = False,
    cancel: _threading.Event | None = None,
) -> _types.RestoreOutcome:
    backup_file = _pathlib.Path(backup_file)

    reporter.title("PostgreSQL Backup Restore Process")
    reporter.field("Backup file", backup_file)
    reporter.field("Container", container)
    reporter.field("Database", db_name)
    reporter.blank()

    reporter.step(1, _STEPS, "Copying backup file to container...")
    artifact = _stage.stage(
        docker, backup_file, container, staging_root=config.staging_root
    )
    reporter.done(f"Backup file copied to {artifact.remote_staged_path}")

    psql = _psql.ContainerPsql(
        docker,
        container,
        username=config.db_username,
        maintenance_db=config.maintenance_db,
    )

    reporter.step(2, _STEPS, "Dropping existing database...")
    drop_result = _database.drop_database(
        psql, db_name, terminate_other_clients=terminate_other_clients
    )
    if drop_result == _types.DropResult.ABSENT:
        reporter.done("Database did not exist")
    else:
        reporter.done("Database dropped")

    reporter.step(3, _STEPS, "Creating new database...")
    _database.create_database(psql, db_name)
    reporter.done("Database created")

    interval = f"{config.poll_interval:g} seconds"
    reporter.step(4, _STEPS, f"Restoring backup (showing progress every {interval})...")
    executor = _restore.RestoreExecutor(
        psql,
        poll_interval=config.poll_interval,
        on_progress=lambda progress: reporter.progress(str(progress)),
        on_error_stop=config.on_error_stop,
    )
    outcome = executor.restore(artifact, db_name, cancel=cancel)

    if outcome.status == _types.RestoreStatus.FAILED:
        _LOGGER.warning(
            "[restore] Keeping %s in %s for inspection",
            artifact.remote_staged_path,
            container,
        )
        raise _errors.RestoreFailedError(
            f"Restore of {artifact.basename} into {db_name} failed with exit code"
            f" {outcome.exit_code}; {artifact.remote_staged_path} was left in"
            f" {container} for inspection",
            exit_code=_typing.cast(int, outcome.exit_code),
        )
    elif outcome.status == _types.RestoreStatus.CANCELLED:
        if not _stage.cleanup(docker, container, artifact):
            reporter.warning(
                f"Could not remove {artifact.remote_staged_path} from {container}"
            )
        raise _errors.RestoreCancelledError(
            f"Restore of {artifact.basename} into {db_name} was cancelled;"
            f" database {db_name} is incomplete"
        )
    reporter.done("Backup restored")

    reporter.step(5, _STEPS, "Cleaning up backup file from container...")
    if _stage.cleanup(docker, container, artifact):
        reporter.done("Cleanup complete")
    else:
        reporter.warning(
            f"Could not remove {artifact.remote_staged_path} from {container}"
        )

    reporter.blank()
    reporter.success("=== Restore completed successfully ===")
    reporter.out.print(
        f"Database {db_name} has been restored from {artifact.basename}",
        markup=False,
    )
    return outcome
