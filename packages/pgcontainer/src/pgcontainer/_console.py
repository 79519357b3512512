"""Operator facing output (stdout for progress, stderr for errors)."""

from __future__ import annotations

import collections.abc as _collections_abc
import typing as _typing

import rich.console as _rich_console
from rich.markup import escape as _escape


if _typing.TYPE_CHECKING:
    from . import _docker, _errors


__all__ = [
    "Reporter",
]


class Reporter:
    def __init__(
        self,
        out: _rich_console.Console | None = None,
        err: _rich_console.Console | None = None,
    ) -> None:
        self.out = out or _rich_console.Console(highlight=False, soft_wrap=True)
        self.err = err or _rich_console.Console(
            stderr=True, highlight=False, soft_wrap=True
        )

    def title(self, text: str) -> None:
        self.out.print(f"[bold yellow]=== {_escape(text)} ===[/]")

    def field(self, label: str, value: object) -> None:
        self.out.print(f"{_escape(label)}: [green]{_escape(str(value))}[/]")

    def info(self, text: str) -> None:
        self.out.print(f"[blue]{_escape(text)}[/]")

    def blank(self) -> None:
        self.out.print()

    def step(self, number: int, total: int, text: str) -> None:
        self.out.print(f"[yellow]\\[{number}/{total}][/] {_escape(text)}")

    def done(self, text: str) -> None:
        self.out.print(f"[green]✓ {_escape(text)}[/]")

    def progress(self, text: str) -> None:
        self.out.print(f"  Progress: [green]{_escape(text)}[/]")

    def success(self, text: str) -> None:
        self.out.print(f"[bold green]{_escape(text)}[/]")

    def warning(self, text: str) -> None:
        self.err.print(f"[yellow]Warning: {_escape(text)}[/]")

    def error(self, exc: _errors.PgContainerError | str, *, stage: str | None = None) -> None:
        if not isinstance(exc, str):
            stage = stage or exc.stage
        label = f"Error \\[{_escape(stage)}]" if stage else "Error"
        self.err.print(f"[bold red]{label}:[/] [red]{_escape(str(exc))}[/]")

    def candidates(
        self, containers: _collections_abc.Iterable[_docker.ContainerRef]
    ) -> None:
        for i, c in enumerate(containers, start=1):
            self.out.print(
                f"  {i:>3}  {_escape(c.short_id)}\t{_escape(c.name)}\t"
                f"{_escape(c.image)}\t{_escape(c.status)}"
            )
