"""Tests for the command-line entry point (svelte_adder.cli).

Tests cover:
- Argument parsing and merging with ADDER_* environment settings
- Exit codes for success, errors and aborted prompts
- Dry runs printing the plan without touching files
- Running a declarative adder from a YAML file
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from svelte_adder.adders.vitest import SvelteVitestAdder
from svelte_adder.cli import (
    EXIT_ABORTED,
    EXIT_ERROR,
    EXIT_OK,
    build_adder,
    build_parser,
    config_from_args,
    main,
    plan_rows,
    run,
)
from svelte_adder.config import RunConfig
from svelte_adder.declarations.models import InvalidOptionValue


pytestmark = pytest.mark.unit


def _main(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def _snapshot(root: Path) -> dict[str, str]:
    return {
        str(path.relative_to(root)): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def _manifest(project_dir: Path) -> dict:
    return json.loads((project_dir / "package.json").read_text(encoding="utf-8"))


@pytest.fixture
def declaration_file(tmp_path: Path) -> Path:
    path = tmp_path / "lint-adder.yaml"
    path.write_text(
        "name: lint-adder\n"
        "configuration:\n"
        "  prettier:\n"
        "    message: Add Prettier too?\n"
        "    default: false\n"
        "    question: true\n"
        "dependencies:\n"
        "  eslint:\n"
        "    version: ^8.16.0\n"
        "    type: DEV\n"
        "  prettier:\n"
        "    version: ^2.6.2\n"
        "    type: DEV\n"
        "    reliesOn: prettier\n",
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# Argument handling
# ---------------------------------------------------------------------------


class TestConfigFromArgs:
    def test_defaults(self):
        config = config_from_args(build_parser().parse_args([]))
        assert config.target_dir == Path(".")
        assert config.interactive is False
        assert config.options == {}

    def test_flags(self, project_dir):
        args = build_parser().parse_args(
            [str(project_dir), "-i", "--force", "--dry-run", "-o", "jsdom=false"]
        )
        config = config_from_args(args)
        assert config.target_dir == project_dir
        assert config.interactive is True
        assert config.force is True
        assert config.dry_run is True
        assert config.options == {"jsdom": "false"}

    def test_environment_fills_unset_flags(self, monkeypatch, project_dir):
        monkeypatch.setenv("ADDER_TARGET_DIR", str(project_dir))
        monkeypatch.setenv("ADDER_FORCE", "1")
        config = config_from_args(build_parser().parse_args([]))
        assert config.target_dir == project_dir
        assert config.force is True

    def test_cli_options_override_environment(self, monkeypatch):
        monkeypatch.setenv("ADDER_OPTIONS", "jsdom=false,examples=no")
        config = config_from_args(build_parser().parse_args(["-o", "jsdom=true"]))
        assert config.options == {"jsdom": "true", "examples": "no"}

    def test_malformed_option(self):
        with pytest.raises(InvalidOptionValue):
            config_from_args(build_parser().parse_args(["-o", "jsdom"]))


class TestBuildAdder:
    def test_vitest_by_default(self):
        assert isinstance(build_adder(RunConfig()), SvelteVitestAdder)

    def test_declaration(self, declaration_file):
        adder = build_adder(RunConfig(declaration=declaration_file))
        assert adder.name == "lint-adder"
        assert not isinstance(adder, SvelteVitestAdder)

    def test_plan_rows(self):
        rows = plan_rows(SvelteVitestAdder().plan())
        assert ("Resolving configuration", "confirm jsdom (default: True)", "always") in rows
        assert (
            "Adding required dependencies",
            "devDependencies: @testing-library/jest-dom@^5.14.0",
            "[jest-dom, jsdom]",
        ) in rows
        assert rows[-1] == ("-", "instruct: What's next?", "always")


# ---------------------------------------------------------------------------
# Running
# ---------------------------------------------------------------------------


class TestRun:
    def test_success(self, project_dir, capsys):
        assert run(RunConfig(target_dir=project_dir)) == EXIT_OK
        assert "vitest" in _manifest(project_dir)["devDependencies"]
        assert "file(s) written" in capsys.readouterr().out

    def test_dry_run_changes_nothing(self, project_dir, capsys):
        before = (project_dir / "package.json").read_text(encoding="utf-8")
        assert run(RunConfig(target_dir=project_dir, dry_run=True)) == EXIT_OK
        assert (project_dir / "package.json").read_text(encoding="utf-8") == before
        assert not (project_dir / "vitest.config.ts").exists()
        assert "action plan" in capsys.readouterr().out

    def test_missing_target(self, tmp_path, capsys):
        assert run(RunConfig(target_dir=tmp_path / "nope")) == EXIT_ERROR
        assert "target directory not found" in capsys.readouterr().out

    def test_conflict_without_force(self, project_dir, capsys):
        (project_dir / "vitest.config.ts").write_text("export default {};\n", encoding="utf-8")
        assert run(RunConfig(target_dir=project_dir)) == EXIT_ERROR
        assert "Refusing to overwrite" in capsys.readouterr().out

    def test_conflict_with_force(self, project_dir):
        (project_dir / "vitest.config.ts").write_text("export default {};\n", encoding="utf-8")
        assert run(RunConfig(target_dir=project_dir, force=True)) == EXIT_OK
        content = (project_dir / "vitest.config.ts").read_text(encoding="utf-8")
        assert "defineConfig" in content

    def test_aborted_prompt(self, project_dir):
        with patch("svelte_adder.engine.runner.Confirm.ask", side_effect=KeyboardInterrupt):
            assert run(RunConfig(target_dir=project_dir, interactive=True)) == EXIT_ABORTED

    def test_invalid_option_value(self, project_dir, capsys):
        config = RunConfig(target_dir=project_dir, options={"jsdom": "sometimes"})
        assert run(config) == EXIT_ERROR
        assert "jsdom" in capsys.readouterr().out

    def test_declarative_adder(self, project_dir, declaration_file):
        config = RunConfig(
            target_dir=project_dir,
            declaration=declaration_file,
            options={"prettier": "yes"},
        )
        assert run(config) == EXIT_OK
        dev = _manifest(project_dir)["devDependencies"]
        assert dev["eslint"] == "^8.16.0"
        assert dev["prettier"] == "^2.6.2"
        assert not (project_dir / "vitest.config.ts").exists()

    def test_invalid_declaration(self, project_dir, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("name: bad\ndependencies:\n  x:\n    version: '1'\n    type: OPTIONAL\n")
        assert run(RunConfig(target_dir=project_dir, declaration=bad)) == EXIT_ERROR


class TestMain:
    def test_exit_ok(self, project_dir):
        assert _main([str(project_dir), "-o", "examples=false"]) == EXIT_OK
        assert not (project_dir / "src" / "routes" / "index-dom.spec.ts").exists()

    def test_target_is_a_file(self, project_dir):
        assert _main([str(project_dir / "package.json")]) == EXIT_ERROR

    def test_malformed_option(self, project_dir, capsys):
        assert _main([str(project_dir), "-o", "=true"]) == EXIT_ERROR
        assert "KEY=VALUE" in capsys.readouterr().out

    def test_undeclared_option_fails_without_changes(self, project_dir, capsys):
        before = _snapshot(project_dir)
        assert _main([str(project_dir), "-o", "nope=false"]) == EXIT_ERROR
        assert _snapshot(project_dir) == before
        assert "Unknown configuration key: 'nope'" in capsys.readouterr().out

    def test_undeclared_option_from_environment(self, project_dir, monkeypatch):
        monkeypatch.setenv("ADDER_OPTIONS", "jest_dom=false")
        before = _snapshot(project_dir)
        assert _main([str(project_dir)]) == EXIT_ERROR
        assert _snapshot(project_dir) == before

    def test_keyboard_interrupt(self, project_dir):
        with patch("svelte_adder.cli.run", side_effect=KeyboardInterrupt):
            assert _main([str(project_dir)]) == EXIT_ABORTED
