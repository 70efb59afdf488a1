"""Shared pytest fixtures for the svelte-adder test suite.

Provides reusable fixtures for:
- A minimal SvelteKit project in a temporary directory
- A quiet Rich console that records output
- Engine construction against the temporary project
- Raw declaration mappings and resolved configurations
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Callable

import pytest
from rich.console import Console

from svelte_adder.declarations.models import ResolvedConfiguration
from svelte_adder.engine.runner import FileTransformEngine


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_adder_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make sure ADDER_* variables from the outer shell never leak into tests."""
    for name in (
        "ADDER_TARGET_DIR",
        "ADDER_INTERACTIVE",
        "ADDER_FORCE",
        "ADDER_DRY_RUN",
        "ADDER_OPTIONS",
        "ADDER_TEMPLATE_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Project directories
# ---------------------------------------------------------------------------

SAMPLE_PACKAGE_JSON: dict[str, Any] = {
    "name": "my-app",
    "version": "0.0.1",
    "scripts": {
        "dev": "svelte-kit dev",
        "build": "svelte-kit build",
    },
    "devDependencies": {
        "@sveltejs/kit": "next",
        "svelte": "^3.44.0",
    },
    "type": "module",
}

SAMPLE_TSCONFIG: dict[str, Any] = {
    "extends": "./.svelte-kit/tsconfig.json",
    "compilerOptions": {
        "strict": True,
        "types": ["svelte"],
    },
}


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A minimal SvelteKit project (package.json, tsconfig.json, one route)."""
    root = tmp_path / "my-app"
    (root / "src" / "routes").mkdir(parents=True)
    (root / "package.json").write_text(
        json.dumps(SAMPLE_PACKAGE_JSON, indent=2) + "\n", encoding="utf-8"
    )
    (root / "tsconfig.json").write_text(
        json.dumps(SAMPLE_TSCONFIG, indent=2) + "\n", encoding="utf-8"
    )
    (root / "src" / "routes" / "index.svelte").write_text(
        "<h1>Welcome to SvelteKit</h1>\n", encoding="utf-8"
    )
    yield root


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A small template directory with one plain and one templated file."""
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "config.ts.j2").write_text(
        "export default {\n  globals: true,\n};\n", encoding="utf-8"
    )
    (templates / "hello.txt.j2").write_text(
        "Hello from {{ adder_name }}\n", encoding="utf-8"
    )
    yield templates


# ---------------------------------------------------------------------------
# Console & engine
# ---------------------------------------------------------------------------

@pytest.fixture
def quiet_console() -> Console:
    """A Rich console that writes to memory and records for export_text()."""
    return Console(file=io.StringIO(), record=True, width=120, color_system=None)


@pytest.fixture
def make_engine(project_dir: Path, quiet_console: Console) -> Callable[..., FileTransformEngine]:
    """Factory building an engine for the sample project.

    Usage:
        engine = make_engine(options={"jsdom": "false"}, force=True)
    """

    def _factory(**kwargs: Any) -> FileTransformEngine:
        kwargs.setdefault("console", quiet_console)
        return FileTransformEngine(project_dir, **kwargs)

    return _factory


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

@pytest.fixture
def raw_configuration() -> dict[str, dict[str, Any]]:
    """Raw CONFIGURATION mapping with one confirm and one input option."""
    return {
        "typescript": {
            "message": "Use TypeScript?",
            "default": True,
            "question": True,
        },
        "directory": {
            "message": "Where should tests live?",
            "default": "src/tests",
        },
    }


@pytest.fixture
def raw_dependencies() -> dict[str, dict[str, Any]]:
    """Raw REQUIRED_DEPENDENCIES mapping covering every channel and gate form."""
    return {
        "left-pad": {"version": "^1.3.0"},
        "typescript": {"version": "^4.6.0", "type": "DEV", "reliesOn": "typescript"},
        "svelte": {"version": "^3.0.0", "type": "PEER"},
        "tslib": {"version": "^2.4.0", "type": "DEV", "reliesOn": ["typescript", "directory"]},
    }


@pytest.fixture
def resolved_factory() -> Callable[..., ResolvedConfiguration]:
    """Build a ResolvedConfiguration pre-populated with the given values."""

    def _factory(**values: Any) -> ResolvedConfiguration:
        resolved = ResolvedConfiguration(list(values))
        for key, value in values.items():
            resolved.record(key, value)
        return resolved

    return _factory
