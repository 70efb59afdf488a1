"""Adder runtime -- turns static declarations into an ordered action plan.

An adder goes through a strictly linear lifecycle:

1. IDENTITY_SET            -- the display name is recorded.
2. CONFIGURATION_QUEUED    -- one configuration action per declared option.
3. DEPENDENCIES_QUEUED     -- one gated package edit per declared dependency.
4. SUBCLASS_ACTIONS_QUEUED -- the concrete adder's own file actions.
5. SUBMITTED               -- the plan is handed to the engine.

Configuration must be queued before dependencies because dependency gates
read configuration keys.  Values are resolved later, when the engine
executes the configuration actions; gates are evaluated after that.

Usage::

    adder = SvelteVitestAdder()
    report = adder.run(FileTransformEngine("./my-app"))
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Union

from svelte_adder.declarations.models import (
    AdderDeclaration,
    AdderError,
    ResolvedConfiguration,
)
from svelte_adder.engine.actions import (
    Action,
    ActionGroup,
    ActionPlan,
    ConfigureAction,
    ConflictPolicy,
    ExtractAction,
    PackageEditAction,
)
from svelte_adder.engine.runner import ExecutionReport, FileTransformEngine

CONFIGURATION_GROUP_TITLE = "Resolving configuration"
DEPENDENCY_GROUP_TITLE = "Adding required dependencies"


class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    IDENTITY_SET = "identity_set"
    CONFIGURATION_QUEUED = "configuration_queued"
    DEPENDENCIES_QUEUED = "dependencies_queued"
    SUBCLASS_ACTIONS_QUEUED = "subclass_actions_queued"
    SUBMITTED = "submitted"


class LifecycleError(AdderError):
    """Raised when a lifecycle stage runs out of order or twice."""


class Adder:
    """Base adder: owns a declaration and the configuration resolved for it.

    Subclasses supply their declaration to ``__init__`` and override
    :meth:`queue_actions` to add file actions after the configuration and
    dependency stages.  The base class on its own is a purely declarative
    adder (configuration plus dependencies, no files).

    Attributes:
        declaration: Name, options and dependencies of this adder.
        resolved: Option values for this run, filled in by the engine.
        template_dir: Directory holding this adder's ``.j2`` templates.
        state: Current lifecycle state.
    """

    template_dir: Optional[Path] = None

    def __init__(
        self,
        declaration: AdderDeclaration,
        template_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        self.declaration = declaration
        self.resolved = ResolvedConfiguration(declaration.option_keys)
        if template_dir is not None:
            self.template_dir = Path(template_dir)
        self.state = LifecycleState.UNINITIALIZED
        self._plan: Optional[ActionPlan] = None

    @property
    def name(self) -> str:
        return self.declaration.name

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def plan(self) -> ActionPlan:
        """Queue every stage and return the resulting plan without executing it."""
        self._advance(LifecycleState.UNINITIALIZED, LifecycleState.IDENTITY_SET)
        self._plan = ActionPlan(name=self.name, template_dir=self.template_dir)

        self._plan.append(self.setup_configuration())
        self._advance(LifecycleState.IDENTITY_SET, LifecycleState.CONFIGURATION_QUEUED)

        self._plan.append(self.setup_dependencies())
        self._advance(LifecycleState.CONFIGURATION_QUEUED, LifecycleState.DEPENDENCIES_QUEUED)

        self._plan.extend(self.queue_actions())
        self._advance(LifecycleState.DEPENDENCIES_QUEUED, LifecycleState.SUBCLASS_ACTIONS_QUEUED)
        return self._plan

    def run(self, engine: FileTransformEngine) -> ExecutionReport:
        """Plan this adder and submit the plan to *engine*.

        Submission is terminal: errors raised while the engine executes
        propagate unchanged and nothing is rolled back.
        """
        if self.state not in (
            LifecycleState.UNINITIALIZED,
            LifecycleState.SUBCLASS_ACTIONS_QUEUED,
            LifecycleState.SUBMITTED,
        ):
            raise LifecycleError(
                f"{self.name}: planning did not complete (stopped at "
                f"{self.state.value}); create a new adder to run again"
            )
        engine.set_name(self.name)
        if self.state is LifecycleState.UNINITIALIZED:
            self.plan()
        self._advance(LifecycleState.SUBCLASS_ACTIONS_QUEUED, LifecycleState.SUBMITTED)
        return engine.execute(self._plan, self.resolved)

    def get_configuration(self, key: str) -> Union[bool, str]:
        """Return the resolved value of option *key*."""
        return self.resolved.lookup(key)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def setup_configuration(self) -> ActionGroup:
        """One configuration action per declared option, in declaration order."""
        actions: list[Action] = [
            ConfigureAction(option) for option in self.declaration.configuration
        ]
        return ActionGroup(actions=actions, title=CONFIGURATION_GROUP_TITLE)

    def setup_dependencies(self) -> ActionGroup:
        """One gated package edit per declared dependency, in declaration order."""
        actions: list[Action] = []
        for dependency in self.declaration.dependencies:
            action = PackageEditAction.for_channel(
                dependency.channel, dependency.name, dependency.version
            )
            actions.append(action.when(dependency.gate))
        return ActionGroup(actions=actions, title=DEPENDENCY_GROUP_TITLE)

    def queue_actions(self) -> list[Action]:
        """Adder-specific actions; override in subclasses."""
        return []

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def safe_extract(self, title: str, filename: str) -> ExtractAction:
        """Extract *filename*, asking before replacing different content."""
        return (
            ExtractAction(filename)
            .when_conflict(ConflictPolicy.ASK)
            .with_title(title)
        )

    def _advance(self, expected: LifecycleState, target: LifecycleState) -> None:
        if self.state is not expected:
            raise LifecycleError(
                f"{self.name}: cannot move to {target.value} from {self.state.value}"
            )
        self.state = target
