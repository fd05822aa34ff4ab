"""Renderers that present a ranked list of ProcessRecord."""

import sys
from collections.abc import Callable
from typing import TextIO

from cputop.app import CputopApp, NAME_WIDTH
from cputop.config import DisplayMode
from cputop.models import ProcessRecord

Renderer = Callable[[list[ProcessRecord]], None]


def format_record(record: ProcessRecord) -> str:
    """Format one record as a line of the static dump."""
    return f"{record.pid:>8}  {record.name[:NAME_WIDTH]:<{NAME_WIDTH}}  {record.cpu_percent:6.2f}"


def render_static(records: list[ProcessRecord], stream: TextIO | None = None) -> None:
    """Print the records once, highest usage first."""
    out = stream if stream is not None else sys.stdout
    if not records:
        print("No processes sampled.", file=out)
        return
    print(f"{'PID':>8}  {'NAME':<{NAME_WIDTH}}  {'CPU(%)':>6}", file=out)
    for record in records:
        print(format_record(record), file=out)


def render_table(records: list[ProcessRecord]) -> None:
    """Show the records in an interactive table until the user quits."""
    CputopApp(records).run()


RENDERERS: dict[DisplayMode, Renderer] = {
    DisplayMode.STATIC: render_static,
    DisplayMode.TABLE: render_table,
}


def get_renderer(mode: DisplayMode) -> Renderer:
    """Return the renderer for ``mode``."""
    return RENDERERS[mode]
