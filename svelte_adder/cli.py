"""Command-line entry point for svelte-adder.

Usage::

    svelte-add-vitest ./my-app
    svelte-add-vitest ./my-app --interactive
    svelte-add-vitest ./my-app -o jsdom=false -o examples=no --force
    svelte-add-vitest ./my-app --declaration adder.yaml --dry-run
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.markup import escape

from svelte_adder.adder import Adder
from svelte_adder.adders.vitest import SvelteVitestAdder
from svelte_adder.config import RunConfig, parse_option_pairs
from svelte_adder.declarations.models import AdderDeclaration, AdderError
from svelte_adder.engine.actions import ActionPlan
from svelte_adder.engine.runner import AdderAborted, FileTransformEngine
from svelte_adder.utils import console, format_duration, print_error, print_plan_table

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ABORTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svelte-add-vitest",
        description="Add Vitest to a SvelteKit project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  svelte-add-vitest ./my-app\n"
            "  svelte-add-vitest ./my-app --interactive\n"
            "  svelte-add-vitest ./my-app -o jsdom=false -o examples=no\n"
        ),
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Project directory to modify (default: current directory)",
    )
    parser.add_argument(
        "--interactive", "-i",
        action="store_true",
        default=None,
        help="Prompt for every configuration option",
    )
    parser.add_argument(
        "--option", "-o",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Set a configuration option non-interactively (repeatable)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        default=None,
        help="Overwrite existing files with different content without asking",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Print the action plan without touching any file",
    )
    parser.add_argument(
        "--declaration",
        default=None,
        help="Run a declarative adder from a YAML or JSON declaration file",
    )
    parser.add_argument(
        "--templates",
        default=None,
        help="Override the adder's template directory",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    """Combine environment settings with explicitly passed CLI flags."""
    explicit: dict = {}
    if args.target is not None:
        explicit["target_dir"] = Path(args.target)
    if args.interactive is not None:
        explicit["interactive"] = args.interactive
    if args.force is not None:
        explicit["force"] = args.force
    if args.dry_run is not None:
        explicit["dry_run"] = args.dry_run
    if args.option is not None:
        explicit["options"] = parse_option_pairs(args.option)
    if args.templates is not None:
        explicit["template_dir"] = Path(args.templates)
    if args.declaration is not None:
        explicit["declaration"] = Path(args.declaration)
    return RunConfig.from_env().merged_with(RunConfig(**explicit))


def build_adder(config: RunConfig) -> Adder:
    """Return the adder selected by *config*."""
    if config.declaration is not None:
        return Adder(AdderDeclaration.load(config.declaration), template_dir=config.template_dir)
    return SvelteVitestAdder(template_dir=config.template_dir)


def plan_rows(plan: ActionPlan) -> list[tuple[str, str, str]]:
    return [
        (title or "-", action.describe(), action.gate.describe())
        for title, action in plan.flatten()
    ]


def run(config: RunConfig) -> int:
    """Run one adder as described by *config* and return an exit status."""
    started = time.monotonic()
    try:
        adder = build_adder(config)
        if config.dry_run:
            plan = adder.plan()
            print_plan_table(plan_rows(plan), title=f"{adder.name} -- action plan")
            return EXIT_OK

        if not config.target_dir.is_dir():
            print_error(f"Error: target directory not found: {escape(str(config.target_dir))}")
            return EXIT_ERROR

        engine = FileTransformEngine(
            config.target_dir,
            interactive=config.interactive,
            options=config.options,
            force=config.force,
        )
        report = adder.run(engine)
    except AdderAborted:
        print_error("Aborted.")
        return EXIT_ABORTED
    except AdderError as exc:
        print_error(f"Error: {escape(str(exc))}")
        return EXIT_ERROR

    console.print(
        f"[dim]{len(report.written)} file(s) written, "
        f"{len(report.skipped)} action(s) skipped in "
        f"{format_duration(time.monotonic() - started)}[/dim]"
    )
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``svelte-add-vitest``."""
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
    except (ValidationError, AdderError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(EXIT_ERROR)

    try:
        status = run(config)
    except KeyboardInterrupt:
        print_error("Aborted.")
        status = EXIT_ABORTED
    sys.exit(status)


if __name__ == "__main__":
    main()
