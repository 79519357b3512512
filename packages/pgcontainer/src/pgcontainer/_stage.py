"""Copy backup artifacts into a container and remove them afterwards."""

from __future__ import annotations

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

from . import _errors, _locate, _types


if _typing.TYPE_CHECKING:
    from . import _docker


__all__ = [
    "cleanup",
    "remove_staged_artifact",
    "stage",
]


_LOGGER = _logging.getLogger(__name__)


def stage(
    docker: _docker.DockerCli,
    local_path: str | _pathlib.Path,
    container: _docker.ContainerRef,
    *,
    staging_root: str = "/",
) -> _types.BackupArtifact:
    """Copy *local_path* into *container* below *staging_root*.

    An existing file with the same name in the container is
    overwritten.
    """
    local_path = _pathlib.Path(local_path).expanduser()
    if not local_path.is_file():
        raise _errors.NotFoundError(
            f"Backup file not found: {local_path}", stage="stage"
        )
    if not _os.access(local_path, _os.R_OK):
        raise _errors.NotFoundError(
            f"Backup file not readable: {local_path}", stage="stage"
        )
    _locate.ensure_running(docker, container, stage="stage")

    artifact = _types.BackupArtifact(
        local_path=local_path.resolve(),
        remote_staged_path=_types.BackupArtifact.remote_path_for(
            local_path, staging_root
        ),
        format=_types.ArtifactFormat.detect(local_path),
    )
    _LOGGER.info(
        "[stage] Copy %s (%s) to %s:%s",
        local_path,
        artifact.format,
        container,
        artifact.remote_staged_path,
    )
    try:
        docker.copy_into(local_path, container, artifact.remote_staged_path)
    except _errors.DockerCommandError as exc:
        raise _errors.TransferError(
            f"Copying {local_path} into {container} failed: {exc.stderr or exc}"
        ) from exc
    return artifact


def remove_staged_artifact(
    docker: _docker.DockerCli,
    container: _docker.ContainerRef,
    artifact: _types.BackupArtifact,
) -> None:
    try:
        docker.exec(container, ["rm", artifact.remote_staged_path])
    except _errors.PgContainerError as exc:
        raise _errors.CleanupFailedError(
            f"Could not remove {artifact.remote_staged_path} from {container}: {exc}"
        ) from exc


def cleanup(
    docker: _docker.DockerCli,
    container: _docker.ContainerRef,
    artifact: _types.BackupArtifact,
) -> bool:
    """Remove the staged artifact, logging (not raising) any failure.

    Returns `True` if the artifact was removed.
    """
    try:
        remove_staged_artifact(docker, container, artifact)
    except _errors.CleanupFailedError as exc:
        _LOGGER.warning("[cleanup] %s", exc)
        return False
    _LOGGER.info("[cleanup] Removed %s from %s", artifact.remote_staged_path, container)
    return True
