"""File-transform engine -- executes the actions an adder queues.

Quick usage::

    from svelte_adder.engine import FileTransformEngine

    engine = FileTransformEngine("./my-app", options={"jsdom": "false"})
    report = engine.execute(plan, resolved)
"""

from svelte_adder.engine.actions import (
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
from svelte_adder.engine.runner import (
    AdderAborted,
    ExecutionReport,
    FileTransformEngine,
    FileTransformError,
    UnresolvedFileConflict,
)
from svelte_adder.engine.templates import TemplateRenderer

__all__ = [
    "Action",
    "ActionGroup",
    "ActionPlan",
    "AdderAborted",
    "ConfigureAction",
    "ConflictPolicy",
    "EditJsonAction",
    "EditTextAction",
    "ExecutionReport",
    "ExtractAction",
    "FileTransformEngine",
    "FileTransformError",
    "InstructAction",
    "PackageEditAction",
    "TemplateRenderer",
    "UnresolvedFileConflict",
]
