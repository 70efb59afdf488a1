"""File-transform engine: executes an ``ActionPlan`` against a project.

The engine owns everything that touches the terminal or the file system:
prompting (or reading non-interactive option values), rendering and
extracting templates, merging JSON documents, patching text files, and
editing ``package.json``.  Actions run strictly in plan order, each at most
once, and each gate is evaluated exactly once, immediately before its action.

There is no rollback: when an action fails, files written by earlier actions
stay on disk and the error propagates to the caller.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

from rich.console import Console
from rich.prompt import Confirm, Prompt

from svelte_adder.declarations.gating import GatingEvaluator
from svelte_adder.declarations.models import (
    AdderError,
    ConfigurationOption,
    ResolvedConfiguration,
    UnknownConfigurationKey,
)
from svelte_adder.utils import (
    console as default_console,
    deep_merge,
    load_json,
    print_header,
    print_instructions,
    print_skipped,
    print_step,
    print_success,
    print_warning,
    save_json,
)

from .actions import (
    Action,
    ActionGroup,
    ActionPlan,
    ConfigureAction,
    ConflictPolicy,
    EditJsonAction,
    EditTextAction,
    ExtractAction,
    InstructAction,
    PackageEditAction,
)
from .templates import TemplateRenderer, output_name

PACKAGE_MANIFEST = "package.json"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class FileTransformError(AdderError):
    """Raised when a file action cannot be applied."""


class UnresolvedFileConflict(AdderError):
    """Raised when an ``ask`` conflict is declined or cannot be asked."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Refusing to overwrite {path}: {reason}")


class AdderAborted(AdderError):
    """Raised when the user aborts an interactive prompt."""


# ---------------------------------------------------------------------------
# Execution report
# ---------------------------------------------------------------------------


@dataclass
class ExecutionReport:
    """What happened while executing one plan."""

    executed: list[Action] = field(default_factory=list)
    skipped: list[Action] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    instructions: list[InstructAction] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class FileTransformEngine:
    """Executes queued actions against a target project directory.

    Attributes:
        target_dir: Root of the project being modified.
        options: Non-interactive option values keyed by option key.
        force: Answer "yes" to every ``ask`` conflict without prompting.
    """

    _ACTION_METHODS: dict[type, str] = {
        ConfigureAction: "_run_configure",
        PackageEditAction: "_run_package_edit",
        ExtractAction: "_run_extract",
        EditJsonAction: "_run_edit_json",
        EditTextAction: "_run_edit_text",
        InstructAction: "_run_instruct",
        ActionGroup: "_run_group",
    }

    def __init__(
        self,
        target_dir: str | Path,
        *,
        interactive: bool = False,
        options: Optional[dict[str, Any]] = None,
        force: bool = False,
        renderer: Optional[TemplateRenderer] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.target_dir = Path(target_dir)
        self.options: dict[str, Any] = dict(options or {})
        self.force = force
        self.name: Optional[str] = None
        self._interactive = interactive
        self._renderer = renderer
        self.console = console or default_console

    # -- Identity and mode --------------------------------------------------

    @property
    def is_interactive(self) -> bool:
        return self._interactive

    def set_name(self, name: str) -> None:
        """Record the display name of the adder being run."""
        self.name = name

    # -- Configuration reads ------------------------------------------------

    def prompt_value(self, option: ConfigurationOption) -> Union[bool, str]:
        """Ask the user for *option* with a confirm or input prompt."""
        if option.is_confirm:
            return self._ask(
                Confirm.ask, option.message,
                default=bool(option.default), console=self.console,
            )
        return self._ask(
            Prompt.ask, option.message,
            default=str(option.default), console=self.console,
        )

    def option_value(self, option: ConfigurationOption) -> Union[bool, str]:
        """Read *option* from the supplied option map, or its default."""
        if option.key not in self.options:
            return option.default
        return option.coerce(self.options[option.key])

    # -- Execution ----------------------------------------------------------

    def execute(self, plan: ActionPlan, resolved: ResolvedConfiguration) -> ExecutionReport:
        """Execute every action in *plan*, in order.

        Args:
            plan: The plan submitted by an adder.
            resolved: The adder's configuration table; configuration actions
                record into it and gates read from it.

        Returns:
            An ``ExecutionReport`` describing executed and skipped actions.

        Raises:
            UnknownConfigurationKey: If an option value names an undeclared
                option.  Nothing is executed in that case.
        """
        for key in self.options:
            if key not in resolved.declared_keys:
                raise UnknownConfigurationKey(key)

        if self.name is None:
            self.set_name(plan.name)
        print_header(self.name, out=self.console)

        renderer = self._renderer
        if renderer is None and plan.template_dir is not None:
            renderer = TemplateRenderer(plan.template_dir)

        run = _Run(
            resolved=resolved,
            evaluator=GatingEvaluator(resolved),
            renderer=renderer,
            report=ExecutionReport(),
        )
        for action in plan:
            self._dispatch(action, run)

        for instruction in run.report.instructions:
            print_instructions(instruction.heading, instruction.message, out=self.console)
        print_success(f"{self.name} finished", out=self.console)
        return run.report

    def _dispatch(self, action: Action, run: "_Run") -> None:
        if not run.evaluator.evaluate(action.gate):
            run.report.skipped.append(action)
            print_skipped(action.title or action.describe(), out=self.console)
            return

        if action.title and not isinstance(action, ActionGroup):
            print_step(action.title, out=self.console)

        method_name = self._ACTION_METHODS.get(type(action))
        if method_name is None:
            raise FileTransformError(f"Unsupported action: {action.describe()}")
        getattr(self, method_name)(action, run)
        run.report.executed.append(action)

    # -- Action handlers ----------------------------------------------------

    def _run_group(self, group: ActionGroup, run: "_Run") -> None:
        if group.title:
            print_step(group.title, out=self.console)
        for child in group:
            self._dispatch(child, run)

    def _run_configure(self, action: ConfigureAction, run: "_Run") -> None:
        option = action.option
        if run.resolved.is_resolved(option.key):
            return
        if self.is_interactive:
            value = self.prompt_value(option)
        else:
            value = self.option_value(option)
        run.resolved.record(option.key, value)

    def _run_package_edit(self, action: PackageEditAction, run: "_Run") -> None:
        manifest_path = self.target_dir / PACKAGE_MANIFEST
        if manifest_path.exists():
            manifest = self._load_document(manifest_path)
        else:
            print_warning(f"  {PACKAGE_MANIFEST} not found, creating it", out=self.console)
            manifest = {}

        section_name = action.channel.manifest_section
        section = dict(manifest.get(section_name) or {})
        section[action.name] = action.version
        manifest[section_name] = section
        save_json(manifest, manifest_path)
        _remember(run.report, manifest_path)

    def _run_extract(self, action: ExtractAction, run: "_Run") -> None:
        if run.renderer is None:
            raise FileTransformError(
                f"No template directory configured to extract {action.template}"
            )
        if not run.renderer.has_template(action.template):
            raise FileTransformError(f"Template not found: {action.template}")
        context = {"adder_name": self.name, "config": run.resolved.as_dict()}
        content = run.renderer.render(action.template, context)
        destination = self.target_dir / action.destination / output_name(action.template)

        if destination.exists():
            existing = destination.read_text(encoding="utf-8")
            if existing == content:
                return
            if not self._may_overwrite(destination, action.conflict):
                print_skipped(f"{destination} kept", out=self.console)
                return

        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(content, encoding="utf-8")
        _remember(run.report, destination)

    def _run_edit_json(self, action: EditJsonAction, run: "_Run") -> None:
        path = self.target_dir / action.path
        document = self._load_document(path) if path.exists() else {}
        save_json(deep_merge(document, action.patch), path)
        _remember(run.report, path)

    def _run_edit_text(self, action: EditTextAction, run: "_Run") -> None:
        path = self.target_dir / action.path
        if not path.exists():
            raise FileTransformError(f"Cannot patch missing file: {path}")

        original = path.read_text(encoding="utf-8").splitlines(keepends=True)
        lines = original
        for anchor, text in action.insertions:
            lines, found = _insert_after(lines, anchor, text)
            if not found:
                print_warning(f"  Anchor {anchor!r} not found in {path}", out=self.console)

        if lines != original:
            path.write_text("".join(lines), encoding="utf-8")
            _remember(run.report, path)

    def _run_instruct(self, action: InstructAction, run: "_Run") -> None:
        run.report.instructions.append(action)

    # -- Helpers ------------------------------------------------------------

    def _may_overwrite(self, path: Path, policy: ConflictPolicy) -> bool:
        if policy is ConflictPolicy.OVERRIDE:
            return True
        if policy is ConflictPolicy.SKIP:
            return False
        if self.force:
            return True
        if not self.is_interactive:
            raise UnresolvedFileConflict(
                path, "file exists with different content (use --force to overwrite)"
            )
        relative = path.relative_to(self.target_dir)
        if not self._ask(
            Confirm.ask, f"{relative} already exists. Overwrite?",
            default=False, console=self.console,
        ):
            raise UnresolvedFileConflict(path, "overwrite declined")
        return True

    def _load_document(self, path: Path) -> dict[str, Any]:
        try:
            return load_json(path)
        except (json.JSONDecodeError, ValueError) as exc:
            raise FileTransformError(f"Cannot parse {path}: {exc}") from exc

    def _ask(self, prompt: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return prompt(*args, **kwargs)
        except (KeyboardInterrupt, EOFError) as exc:
            raise AdderAborted("Aborted by user") from exc


@dataclass
class _Run:
    resolved: ResolvedConfiguration
    evaluator: GatingEvaluator
    renderer: Optional[TemplateRenderer]
    report: ExecutionReport


def _remember(report: ExecutionReport, path: Path) -> None:
    if path not in report.written:
        report.written.append(path)


def _insert_after(lines: list[str], anchor: str, text: str) -> tuple[list[str], bool]:
    """Insert *text* after every line containing *anchor*.

    The inserted line takes the anchor line's indentation.  A line that
    already follows the anchor with the same content is left alone.
    """
    result: list[str] = []
    found = False
    for index, line in enumerate(lines):
        result.append(line)
        if anchor not in line:
            continue
        found = True
        following = lines[index + 1] if index + 1 < len(lines) else ""
        if following.strip() == text.strip():
            continue
        indent = line[: len(line) - len(line.lstrip())]
        if not line.endswith("\n"):
            result[-1] = line + "\n"
        result.append(f"{indent}{text}\n")
    return result, found
