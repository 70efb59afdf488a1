"""svelte-adder run configuration.

Typed settings for a single adder run.  Uses a Pydantic v2 model so values are
validated at construction time and can come from CLI flags or environment
variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from svelte_adder.declarations.models import InvalidOptionValue


class RunConfig(BaseModel):
    """Settings for one adder run.

    Instances are created once by the CLI entry point (or by tests) and used
    to build the ``FileTransformEngine``.
    """

    target_dir: Path = Field(default=Path("."), description="Project to modify")
    interactive: bool = Field(default=False, description="Prompt for every option")
    options: dict[str, str] = Field(
        default_factory=dict,
        description="Non-interactive option values keyed by option key",
    )
    force: bool = Field(default=False, description="Overwrite conflicting files without asking")
    dry_run: bool = Field(default=False, description="Print the action plan and exit")
    template_dir: Optional[Path] = Field(
        default=None, description="Override the adder's template directory"
    )
    declaration: Optional[Path] = Field(
        default=None, description="YAML/JSON declaration for a declarative adder"
    )

    @field_validator("target_dir")
    @classmethod
    def _target_must_be_directory(cls, value: Path) -> Path:
        if value.exists() and not value.is_dir():
            raise ValueError(f"Target is not a directory: {value}")
        return value

    @classmethod
    def from_env(cls) -> "RunConfig":
        """Build a ``RunConfig`` from environment variables.

        Recognised variables (all optional):
            ADDER_TARGET_DIR, ADDER_INTERACTIVE, ADDER_FORCE, ADDER_DRY_RUN,
            ADDER_OPTIONS (comma-separated ``key=value`` pairs),
            ADDER_TEMPLATE_DIR.
        """
        template_dir = os.environ.get("ADDER_TEMPLATE_DIR")
        return cls(
            target_dir=Path(os.environ.get("ADDER_TARGET_DIR", ".")),
            interactive=_env_flag("ADDER_INTERACTIVE"),
            force=_env_flag("ADDER_FORCE"),
            dry_run=_env_flag("ADDER_DRY_RUN"),
            options=parse_option_pairs(
                p for p in os.environ.get("ADDER_OPTIONS", "").split(",") if p.strip()
            ),
            template_dir=Path(template_dir) if template_dir else None,
        )

    def merged_with(self, other: "RunConfig") -> "RunConfig":
        """Return a copy where explicitly set fields of *other* win."""
        update = other.model_dump(exclude_unset=True)
        if "options" in update:
            update["options"] = {**self.options, **other.options}
        return self.model_copy(update=update)


def parse_option_pairs(pairs) -> dict[str, str]:
    """Parse ``key=value`` strings into a dict.

    Raises:
        InvalidOptionValue: If a pair has no ``=`` or an empty key.
    """
    options: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise InvalidOptionValue(f"Expected KEY=VALUE, got {pair!r}")
        options[key] = value.strip()
    return options


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")
