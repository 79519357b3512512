"""Overview of the PostgreSQL containers running on this host."""

from __future__ import annotations

import collections.abc as _collections_abc
import logging as _logging
import typing as _typing

import rich.table as _rich_table

from . import _errors, _locate, _psql


if _typing.TYPE_CHECKING:
    from . import _config, _console, _docker


__all__ = [
    "containers_table",
    "list_containers",
]


_LOGGER = _logging.getLogger(__name__)


def containers_table(
    containers: _collections_abc.Iterable[_docker.ContainerRef],
    *,
    show_image: bool = False,
) -> _rich_table.Table:
    table = _rich_table.Table(box=None, header_style="bold")
    table.add_column("CONTAINER ID", no_wrap=True)
    table.add_column("NAME", no_wrap=True)
    if show_image:
        table.add_column("IMAGE")
    table.add_column("STATUS")
    for c in containers:
        row = [c.short_id, c.name]
        if show_image:
            row.append(c.image)
        row.append(c.status)
        table.add_row(*row)
    return table


def list_containers(
    *,
    docker: _docker.DockerCli,
    config: _config.PgContainerConfig,
    reporter: _console.Reporter,
    image_hint: str | None = None,
) -> list[_docker.ContainerRef]:
    """Print matching containers and the databases in each of them.

    Returns the matching containers (possibly empty).
    """
    image_hint = config.image_hint if image_hint is None else image_hint
    reporter.info("Searching for PostgreSQL containers...")
    reporter.blank()

    running = _locate.list_running_containers(docker)
    matching = _locate.filter_containers(running, image_hint)
    if not matching:
        reporter.warning(f"No running containers with image matching {image_hint!r} found")
        reporter.blank()
        reporter.out.print("All running containers:")
        reporter.out.print(containers_table(running, show_image=True))
        return matching

    reporter.success("PostgreSQL containers found:")
    reporter.blank()
    reporter.out.print(containers_table(matching))
    reporter.blank()
    reporter.info("Databases in each container:")
    reporter.blank()

    for container in matching:
        reporter.success(f"Container: {container}")
        psql = _psql.ContainerPsql(
            docker,
            container,
            username=config.db_username,
            maintenance_db=config.maintenance_db,
        )
        try:
            names = psql.list_database_names()
        except _errors.DockerCommandError as exc:
            _LOGGER.warning("[list] Listing databases in %s failed: %s", container, exc)
            reporter.warning("Failed to list databases")
        else:
            for name in names:
                reporter.out.print(f"  {name}", markup=False)
        reporter.blank()
    return matching
