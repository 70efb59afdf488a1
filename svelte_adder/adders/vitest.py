"""Vitest adder for SvelteKit projects.

Adds Vitest (optionally with JSDOM and jest-dom matchers) to an existing
SvelteKit project: dev dependencies, a ``vitest.config.ts``, TypeScript
globals, example test files and ``test`` scripts in ``package.json``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from svelte_adder.adder import Adder
from svelte_adder.declarations.models import AdderDeclaration, AllOf, ConfigKeyRef, Not
from svelte_adder.engine.actions import Action, EditJsonAction, EditTextAction, InstructAction

ADDER_NAME = "svelte-add-vitest"

TEMPLATE_DIR = Path(__file__).parent / "templates"

CONFIGURATION: dict[str, dict[str, Any]] = {
    "jsdom": {
        "message": "Enable JSDOM environment by default?",
        "default": True,
        "question": True,
    },
    "jest-dom": {
        "message": "Enable Jest DOM support?",
        "default": True,
        "question": True,
    },
    "examples": {
        "message": "Generate example test file?",
        "default": True,
        "question": True,
    },
}

REQUIRED_DEPENDENCIES: dict[str, dict[str, Any]] = {
    "vite": {"version": "^2.9.9", "type": "DEV"},
    "vitest": {"version": "^0.13.1", "type": "DEV"},
    "@sveltejs/vite-plugin-svelte": {"version": "^1.0.0-next.47", "type": "DEV"},
    "@testing-library/svelte": {"version": "^3.0.0", "type": "DEV"},
    "@testing-library/jest-dom": {
        "version": "^5.14.0",
        "type": "DEV",
        "reliesOn": ["jest-dom", "jsdom"],
    },
    "@types/testing-library__jest-dom": {
        "version": "^5.14.0",
        "type": "DEV",
        "reliesOn": ["jest-dom", "jsdom"],
    },
    "jsdom": {"version": "^19.0.0", "type": "DEV", "reliesOn": "jsdom"},
}

EXAMPLES_DIR = "src/routes/"


class SvelteVitestAdder(Adder):
    """Sets up Vitest in a SvelteKit project."""

    def __init__(self, template_dir: Optional[Union[str, Path]] = None) -> None:
        super().__init__(
            AdderDeclaration.from_mappings(
                name=ADDER_NAME,
                configuration=CONFIGURATION,
                dependencies=REQUIRED_DEPENDENCIES,
            ),
            template_dir=template_dir or TEMPLATE_DIR,
        )

    def queue_actions(self) -> list[Action]:
        examples = ConfigKeyRef(key="examples")
        jest_dom = ConfigKeyRef(key="jest-dom")

        return [
            self.safe_extract("Initializing Vitest config", "vitest.config.ts"),
            EditJsonAction("tsconfig.json")
            .merge({
                "compilerOptions": {
                    "types": ["vitest/globals", "@testing-library/jest-dom"],
                },
            })
            .with_title("Modifying TypeScript config for project"),
            EditTextAction("vitest.config.ts")
            .add_after("globals: true", "environment: 'jsdom',")
            .with_title("Modifying vitest config to enable JSDOM environment")
            .when(ConfigKeyRef(key="jsdom")),
            self.safe_extract("Initializing example test file", "index-dom.spec.ts")
            .to(EXAMPLES_DIR)
            .when(AllOf(gates=(examples, jest_dom))),
            self.safe_extract("Initializing example test file", "index.spec.ts")
            .to(EXAMPLES_DIR)
            .when(AllOf(gates=(examples, Not(gate=jest_dom)))),
            EditJsonAction("package.json")
            .merge({"scripts": {"test": "vitest run", "test:watch": "vitest watch"}})
            .with_title("Adding test scripts to package.json"),
            InstructAction(
                "Run [magenta]npm install[/magenta], [magenta]pnpm install[/magenta], "
                "or [magenta]yarn[/magenta] to install dependencies"
            ).with_heading("What's next?"),
        ]
