from __future__ import annotations

import logging
from typing import Iterable

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .model import GeneratedArtifact

console = Console()


def p(msg: str) -> None:
    console.print(msg, markup=False)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


def show_artifacts(artifacts: Iterable[GeneratedArtifact], title: str = "Generated artifacts") -> None:
    t = Table(title=title)
    t.add_column("#", justify="right")
    t.add_column("Kind")
    t.add_column("Name")
    t.add_column("Status")
    t.add_column("Path")
    for i, a in enumerate(artifacts, start=1):
        t.add_row(str(i), a.kind.value, a.name, "created" if a.created else "kept", a.virtual_path)
    console.print(t)
