"""Queued actions understood by the file-transform engine.

Every action is a small fluent builder: it is created, optionally titled and
gated, and appended to an ``ActionPlan``.  Nothing happens until the engine
executes the plan, at which point each action's gate is evaluated exactly
once.

Example::

    ExtractAction("index.spec.ts")
        .when_conflict(ConflictPolicy.ASK)
        .with_title("Initializing example test file")
        .to("src/routes/")
        .when(ConfigKeyRef(key="examples"))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from svelte_adder.declarations.models import (
    ALWAYS,
    ConfigurationOption,
    DependencyChannel,
    Gate,
)


class ConflictPolicy(str, Enum):
    """What to do when an extracted file would replace different content."""
    ASK = "ask"
    OVERRIDE = "override"
    SKIP = "skip"


# ---------------------------------------------------------------------------
# Base action
# ---------------------------------------------------------------------------


@dataclass
class Action:
    """Common title/gate handling shared by every queued action."""

    title: Optional[str] = field(default=None, kw_only=True)
    gate: Gate = field(default=ALWAYS, kw_only=True)

    def with_title(self, title: str) -> "Action":
        self.title = title
        return self

    def without_title(self) -> "Action":
        self.title = None
        return self

    def when(self, gate: Gate) -> "Action":
        """Gate this action; it is skipped when *gate* evaluates false."""
        self.gate = gate
        return self

    def describe(self) -> str:
        return type(self).__name__


# ---------------------------------------------------------------------------
# Configuration and dependency actions
# ---------------------------------------------------------------------------


@dataclass
class ConfigureAction(Action):
    """Resolves one configuration option, by prompt or by option value."""

    option: ConfigurationOption

    def describe(self) -> str:
        kind = "confirm" if self.option.is_confirm else "input"
        return f"{kind} {self.option.key} (default: {self.option.default!r})"


@dataclass
class PackageEditAction(Action):
    """Adds one dependency to a section of ``package.json``."""

    name: str
    version: str
    channel: DependencyChannel = DependencyChannel.CORE

    @classmethod
    def add(cls, name: str, version: str) -> "PackageEditAction":
        return cls(name=name, version=version, channel=DependencyChannel.CORE)

    @classmethod
    def add_dev(cls, name: str, version: str) -> "PackageEditAction":
        return cls(name=name, version=version, channel=DependencyChannel.DEV)

    @classmethod
    def add_peer(cls, name: str, version: str) -> "PackageEditAction":
        return cls(name=name, version=version, channel=DependencyChannel.PEER)

    @classmethod
    def for_channel(cls, channel: DependencyChannel, name: str, version: str) -> "PackageEditAction":
        builders = {
            DependencyChannel.CORE: cls.add,
            DependencyChannel.DEV: cls.add_dev,
            DependencyChannel.PEER: cls.add_peer,
        }
        return builders[channel](name, version)

    def describe(self) -> str:
        return f"{self.channel.manifest_section}: {self.name}@{self.version}"


# ---------------------------------------------------------------------------
# File actions
# ---------------------------------------------------------------------------


@dataclass
class ExtractAction(Action):
    """Materializes a template file into the project."""

    template: str
    destination: str = "."
    conflict: ConflictPolicy = ConflictPolicy.OVERRIDE

    def when_conflict(self, policy: Union[ConflictPolicy, str]) -> "ExtractAction":
        self.conflict = ConflictPolicy(policy)
        return self

    def to(self, destination: str) -> "ExtractAction":
        self.destination = destination
        return self

    def describe(self) -> str:
        return f"extract {self.template} -> {Path(self.destination) / self.template}"


@dataclass
class EditJsonAction(Action):
    """Recursively merges a partial object into a JSON document."""

    path: str
    patch: dict[str, Any] = field(default_factory=dict)

    def merge(self, partial: dict[str, Any]) -> "EditJsonAction":
        self.patch = {**self.patch, **partial}
        return self

    def describe(self) -> str:
        return f"merge into {self.path}"


@dataclass
class EditTextAction(Action):
    """Inserts lines after anchor lines of a text file."""

    path: str
    insertions: list[tuple[str, str]] = field(default_factory=list)

    def add_after(self, anchor: str, text: str) -> "EditTextAction":
        self.insertions.append((anchor, text))
        return self

    def describe(self) -> str:
        return f"patch {self.path}"


@dataclass
class InstructAction(Action):
    """Post-run guidance for the user; touches no files."""

    message: str
    heading: str = "Next steps"

    def with_heading(self, heading: str) -> "InstructAction":
        self.heading = heading
        return self

    def describe(self) -> str:
        return f"instruct: {self.heading}"


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


@dataclass
class ActionGroup(Action):
    """Several actions reported to the user as one step."""

    actions: list[Action] = field(default_factory=list)

    def describe(self) -> str:
        return f"group of {len(self.actions)} action(s)"

    def __iter__(self) -> Iterator[Action]:
        return iter(self.actions)

    def __len__(self) -> int:
        return len(self.actions)


@dataclass
class ActionPlan:
    """The ordered list of actions produced by one adder run."""

    name: str
    template_dir: Optional[Path] = None
    actions: list[Action] = field(default_factory=list)

    def append(self, action: Action) -> Action:
        self.actions.append(action)
        return action

    def extend(self, actions: list[Action]) -> None:
        self.actions.extend(actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self.actions)

    def __len__(self) -> int:
        return len(self.actions)

    def flatten(self) -> list[tuple[Optional[str], Action]]:
        """Return ``(group title, action)`` pairs in execution order.

        Top-level actions that are not groups are paired with their own title.
        """
        flat: list[tuple[Optional[str], Action]] = []
        for action in self.actions:
            if isinstance(action, ActionGroup):
                flat.extend((action.title, child) for child in action.actions)
            else:
                flat.append((action.title, action))
        return flat
