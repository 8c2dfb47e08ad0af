"""Rendering of resolved options for the terminal."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from readbin.options.model import Options
from readbin.options.schema import SCHEMA_BY_DEST
from readbin.options.values import Explicit, Implicit


def format_value(value: Any) -> str:
    """Return a short human-readable form of an option value.

    Examples
    --------
    >>> format_value(None)
    '-'
    >>> format_value(("foo", "bar"))
    'foo, bar'
    >>> format_value(Implicit("asm"))
    'asm (bare flag)'

    """
    if value is None:
        return "-"
    if isinstance(value, Implicit):
        return f"{format_value(value.value)} (bare flag)"
    if isinstance(value, Explicit):
        return format_value(value.value)
    if isinstance(value, tuple):
        return ", ".join(format_value(item) for item in value) if value else "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def describe_options(options: Options, console: Optional[Any] = None) -> int:
    """Print the resolved configuration as a table.

    This is the runner used by ``main`` when no analysis pipeline is
    attached.

    Parameters
    ----------
    options : Options
        Parsed options
    console : rich.console.Console, optional
        Destination console; a new stdout console when omitted

    Returns
    -------
    int
        Exit code (always 0)

    """
    from rich.console import Console
    from rich.table import Table

    console = console or Console()

    table = Table(title=f"Options for {options.filename}", show_header=True, header_style="bold")
    table.add_column("Option", style="cyan", no_wrap=True)
    table.add_column("Value")

    for name, value in options.to_dict().items():
        spec = SCHEMA_BY_DEST.get(name)
        label = spec.display_name if spec is not None else name
        # highlight values that differ from the built-in default
        changed = spec is not None and value != spec.empty_value()
        table.add_row(label, format_value(value), style="bold green" if changed else None)

    console.print(table)
    return 0
