"""svelte-adder -- declarative project-scaffolding adders.

An adder declares configuration options, dependencies gated on those options,
and file actions; the runtime queues them in a fixed order and the engine
executes them against a project directory.

Quick usage::

    from svelte_adder import FileTransformEngine, SvelteVitestAdder

    engine = FileTransformEngine("./my-app", options={"jsdom": "false"})
    SvelteVitestAdder().run(engine)
"""

from svelte_adder.adder import Adder, LifecycleError, LifecycleState
from svelte_adder.adders.vitest import SvelteVitestAdder
from svelte_adder.config import RunConfig
from svelte_adder.declarations import AdderDeclaration, AdderError, GatingEvaluator
from svelte_adder.engine import FileTransformEngine

__all__ = [
    "Adder",
    "AdderDeclaration",
    "AdderError",
    "FileTransformEngine",
    "GatingEvaluator",
    "LifecycleError",
    "LifecycleState",
    "RunConfig",
    "SvelteVitestAdder",
]
