"""Find the container to work on."""

from __future__ import annotations

import collections.abc as _collections_abc
import logging as _logging
import typing as _typing

from . import _errors


if _typing.TYPE_CHECKING:
    from . import _docker


__all__ = [
    "ensure_running",
    "filter_containers",
    "list_running_containers",
    "locate",
    "locate_explicit",
]


_LOGGER = _logging.getLogger(__name__)


def list_running_containers(docker: _docker.DockerCli) -> list[_docker.ContainerRef]:
    try:
        return docker.ps()
    except _errors.DockerCommandError as exc:
        raise _errors.NotFoundError(
            f"Could not list running containers: {exc.stderr or exc}"
        ) from exc


def filter_containers(
    containers: _collections_abc.Iterable[_docker.ContainerRef],
    hint: str | None,
) -> list[_docker.ContainerRef]:
    """Keep containers whose image name contains *hint* (case-insensitive).

    >>> from pgcontainer._docker import ContainerRef
    >>> cs = [ContainerRef(id="1", name="a", image="Postgres:16"),
    ...       ContainerRef(id="2", name="b", image="redis:7")]
    >>> [c.name for c in filter_containers(cs, "postgres")]
    ['a']
    >>> [c.name for c in filter_containers(cs, None)]
    ['a', 'b']
    """
    if not hint:
        return list(containers)
    hint_low = hint.lower()
    return [c for c in containers if hint_low in c.image.lower()]


def locate(
    docker: _docker.DockerCli, filter_hint: str | None = "postgres"
) -> _docker.ContainerRef:
    """Return the single running container whose image matches *filter_hint*.

    Raises :obj:`NotFoundError` if nothing matches and
    :obj:`AmbiguousError` (with all candidates) if more than one
    container matches. There is no automatic pick.
    """
    candidates = filter_containers(list_running_containers(docker), filter_hint)
    if not candidates:
        what = f"image matching {filter_hint!r}" if filter_hint else "any image"
        raise _errors.NotFoundError(f"No running container with {what} found")
    elif len(candidates) > 1:
        raise _errors.AmbiguousError(
            f"{len(candidates)} running containers match {filter_hint!r}",
            candidates,
        )
    container = candidates[0]
    _LOGGER.info("[locate] Found container %s (image %s)", container, container.image)
    return container


def locate_explicit(
    docker: _docker.DockerCli, container_id: str
) -> _docker.ContainerRef:
    """Return the running container named *container_id* or with that id prefix."""
    if not container_id:
        raise _errors.NotFoundError("No container id or name given")
    containers = list_running_containers(docker)
    by_name = [c for c in containers if c.name == container_id]
    if by_name:
        return by_name[0]
    matches = [c for c in containers if c.matches(container_id)]
    if not matches:
        raise _errors.NotFoundError(
            f"Container not found or not running: {container_id}"
        )
    elif len(matches) > 1:
        raise _errors.AmbiguousError(
            f"Container id {container_id!r} matches {len(matches)} containers",
            matches,
        )
    _LOGGER.info("[locate] Using container %s", matches[0])
    return matches[0]


def ensure_running(
    docker: _docker.DockerCli, container: _docker.ContainerRef, *, stage: str | None = None
) -> _docker.ContainerRef:
    """Raise :obj:`NotFoundError` unless *container* is (still) running."""
    if not any(c.id == container.id for c in list_running_containers(docker)):
        raise _errors.NotFoundError(
            f"Container not found or not running: {container}", stage=stage
        )
    return container
