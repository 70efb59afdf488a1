"""Shared utility functions for svelte-adder.

Provides JSON document I/O and merging, duration formatting, and the
Rich-based console output used by the engine and the CLI.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON document that must contain an object.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    file_path = Path(path)
    data = json.loads(file_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {file_path}")
    return data


def save_json(data: dict[str, Any], path: str | Path) -> Path:
    """Save *data* as pretty-printed JSON with a trailing newline.

    Parent directories are created automatically.  Key order is preserved.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    file_path.write_text(content, encoding="utf-8")
    return file_path


def deep_merge(base: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *patch* into a copy of *base*.

    Nested objects are merged key by key, lists are unioned keeping the
    order of *base* first, and any other value in *patch* replaces the one in
    *base*.  Neither argument is mutated.

    Examples::

        deep_merge({"a": {"x": 1}}, {"a": {"y": 2}}) -> {"a": {"x": 1, "y": 2}}
        deep_merge({"t": ["a"]}, {"t": ["a", "b"]})   -> {"t": ["a", "b"]}
    """
    merged = dict(base)
    for key, value in patch.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + [item for item in value if item not in current]
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds, e.g. ``3.7s`` or ``1m 5s``."""
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_header(name: str, out: Console | None = None) -> None:
    """Print the adder banner."""
    out = out or console
    out.print(Panel(f"[bold bright_cyan]{name}[/bold bright_cyan]", border_style="bright_cyan"))


def print_step(title: str, out: Console | None = None) -> None:
    """Print a titled step as it starts executing."""
    (out or console).print(f"[bold cyan]>[/bold cyan] {title}")


def print_skipped(description: str, out: Console | None = None) -> None:
    (out or console).print(f"  [dim]- skipped: {escape(description)}[/dim]")


def print_success(message: str, out: Console | None = None) -> None:
    """Print a green success message."""
    (out or console).print(f"[bold green]{message}[/bold green]")


def print_error(message: str, out: Console | None = None) -> None:
    """Print a red error message."""
    (out or console).print(f"[bold red]{message}[/bold red]")


def print_warning(message: str, out: Console | None = None) -> None:
    """Print a yellow warning message."""
    (out or console).print(f"[bold yellow]{message}[/bold yellow]")


def print_instructions(heading: str, message: str, out: Console | None = None) -> None:
    """Print post-run guidance in a panel."""
    (out or console).print(
        Panel(message, title=f"[bold]{heading}[/bold]", border_style="magenta")
    )


def print_plan_table(rows: list[tuple[str, str, str]], title: str = "Action plan",
                     out: Console | None = None) -> None:
    """Print a three-column ``(step, action, gate)`` table.

    Args:
        rows: One tuple per queued action.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Step", style="dim", no_wrap=True)
    table.add_column("Action")
    table.add_column("Gate", style="magenta")

    for step, action, gate in rows:
        table.add_row(escape(step), escape(action), escape(gate))

    (out or console).print(table)
