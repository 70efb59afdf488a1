"""Pydantic v2 models for adder declarations.

Defines the static data an adder declares up front (configuration options and
required dependencies), the gate expressions that decide whether a queued
action executes, and the ``ResolvedConfiguration`` table those gates read.

The raw declaration schema mirrors the ``CONFIGURATION`` and
``REQUIRED_DEPENDENCIES`` mappings::

    CONFIGURATION = {
        "jsdom": {"message": "Enable JSDOM?", "default": True, "question": True},
    }
    REQUIRED_DEPENDENCIES = {
        "jsdom": {"version": "^19.0.0", "type": "DEV", "reliesOn": "jsdom"},
    }
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AdderError(Exception):
    """Base class for every error that terminates an adder run."""


class InvalidDeclaration(AdderError):
    """Raised when a raw declaration mapping does not match the schema."""


class UnknownConfigurationKey(AdderError):
    """Raised when a gate or lookup references an undeclared option."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown configuration key: {key!r}")


class UnsupportedDependencyChannel(AdderError):
    """Raised when a dependency declares a ``type`` other than DEV or PEER."""

    def __init__(self, name: str, channel: Any) -> None:
        self.name = name
        self.channel = channel
        super().__init__(
            f"Dependency {name!r} declares unsupported type {channel!r} "
            f"(expected 'DEV', 'PEER' or no type)"
        )


class ConfigurationAlreadyResolved(AdderError):
    """Raised when a resolved option is recorded again with another value."""


class UnresolvedConfigurationValue(AdderError):
    """Raised when a declared option is read before it has been resolved."""


class InvalidOptionValue(AdderError):
    """Raised when a non-interactive option value cannot be coerced."""


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Presentation(str, Enum):
    """How an option is presented when prompted interactively."""
    CONFIRM = "confirm"
    INPUT = "input"


class DependencyChannel(str, Enum):
    """Which section of the package manifest a dependency is added to."""
    CORE = "CORE"
    DEV = "DEV"
    PEER = "PEER"

    @property
    def manifest_section(self) -> str:
        return _MANIFEST_SECTIONS[self]


_MANIFEST_SECTIONS: dict[DependencyChannel, str] = {
    DependencyChannel.CORE: "dependencies",
    DependencyChannel.DEV: "devDependencies",
    DependencyChannel.PEER: "peerDependencies",
}

_TRUE_STRINGS = frozenset({"true", "yes", "y", "1", "on"})
_FALSE_STRINGS = frozenset({"false", "no", "n", "0", "off"})


# ---------------------------------------------------------------------------
# Gate expressions
# ---------------------------------------------------------------------------


class Always(BaseModel):
    """Gate that is always open (no ``reliesOn``)."""
    model_config = ConfigDict(frozen=True)

    def referenced_keys(self) -> list[str]:
        return []

    def describe(self) -> str:
        return "always"


class ConfigKeyRef(BaseModel):
    """Gate that opens when a resolved option is truthy."""
    model_config = ConfigDict(frozen=True)

    key: str

    def referenced_keys(self) -> list[str]:
        return [self.key]

    def describe(self) -> str:
        return self.key


class LiteralList(BaseModel):
    """Gate built from a list of strings.

    Each entry is evaluated for its own truthiness; the entries are *not*
    looked up in the resolved configuration even though they name options,
    so they are not checked against the declared keys either.
    """
    model_config = ConfigDict(frozen=True)

    literals: tuple[str, ...]

    def referenced_keys(self) -> list[str]:
        return []

    def describe(self) -> str:
        return "[" + ", ".join(self.literals) + "]"


class Not(BaseModel):
    """Negates another gate."""
    model_config = ConfigDict(frozen=True)

    gate: "Gate"

    def referenced_keys(self) -> list[str]:
        return self.gate.referenced_keys()

    def describe(self) -> str:
        return f"not {self.gate.describe()}"


class AllOf(BaseModel):
    """Opens when every sub-gate is open."""
    model_config = ConfigDict(frozen=True)

    gates: tuple["Gate", ...]

    def referenced_keys(self) -> list[str]:
        return [key for gate in self.gates for key in gate.referenced_keys()]

    def describe(self) -> str:
        return " and ".join(gate.describe() for gate in self.gates)


Gate = Union[Always, ConfigKeyRef, LiteralList, Not, AllOf]

Not.model_rebuild()
AllOf.model_rebuild()

ALWAYS = Always()


def gate_from_relies_on(relies_on: Optional[Union[str, list[str]]]) -> Gate:
    """Translate a raw ``reliesOn`` value into a gate expression."""
    if relies_on is None:
        return ALWAYS
    if isinstance(relies_on, str):
        return ConfigKeyRef(key=relies_on)
    return LiteralList(literals=tuple(relies_on))


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class ConfigurationOption(BaseModel):
    """A single named configuration option."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Unique option key")
    message: str = Field(..., description="Prompt text shown to the user")
    default: Union[bool, str] = Field(..., description="Value used when none is supplied")
    presentation: Presentation = Field(default=Presentation.INPUT)

    @property
    def is_confirm(self) -> bool:
        return self.presentation is Presentation.CONFIRM

    def coerce(self, value: Any) -> Union[bool, str]:
        """Coerce a non-interactive option value to this option's kind.

        Confirm options accept booleans or the usual yes/no spellings; input
        options are converted to ``str``.
        """
        if not self.is_confirm:
            return value if isinstance(value, str) else str(value)
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise InvalidOptionValue(
            f"Option {self.key!r} expects a yes/no value, got {value!r}"
        )


class DependencyDeclaration(BaseModel):
    """A package dependency, optionally gated on configuration."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Package identifier")
    version: str = Field(..., description="Version range, e.g. '^0.13.1'")
    channel: DependencyChannel = Field(default=DependencyChannel.CORE)
    gate: Gate = Field(default=ALWAYS)


class _RawOption(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str
    default: Union[bool, str]
    question: bool = False


class _RawDependency(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str
    type: Optional[str] = None
    reliesOn: Optional[Union[str, list[str]]] = None


class AdderDeclaration(BaseModel):
    """Everything an adder declares statically: name, options, dependencies.

    Options and dependencies keep their declaration order; that order is the
    order in which actions are queued.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Display name of the adder")
    configuration: tuple[ConfigurationOption, ...] = Field(default=())
    dependencies: tuple[DependencyDeclaration, ...] = Field(default=())

    def model_post_init(self, __context: Any) -> None:
        keys = [option.key for option in self.configuration]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise InvalidDeclaration(
                f"Duplicate configuration keys: {', '.join(duplicates)}"
            )
        for dependency in self.dependencies:
            for key in dependency.gate.referenced_keys():
                if key not in keys:
                    raise UnknownConfigurationKey(key)

    @property
    def option_keys(self) -> list[str]:
        return [option.key for option in self.configuration]

    def option(self, key: str) -> ConfigurationOption:
        """Return the declared option for *key*."""
        for option in self.configuration:
            if option.key == key:
                return option
        raise UnknownConfigurationKey(key)

    # -- Construction from raw mappings -------------------------------------

    @classmethod
    def from_mappings(
        cls,
        name: str,
        configuration: dict[str, dict[str, Any]],
        dependencies: dict[str, dict[str, Any]],
    ) -> "AdderDeclaration":
        """Build a declaration from ``CONFIGURATION`` / ``REQUIRED_DEPENDENCIES``.

        Args:
            name: Adder display name.
            configuration: Option key -> ``{message, default, question?}``.
            dependencies: Package name -> ``{version, type?, reliesOn?}``.

        Raises:
            InvalidDeclaration: If an entry does not match the schema.
            UnsupportedDependencyChannel: If a ``type`` is not DEV or PEER.
            UnknownConfigurationKey: If a string ``reliesOn`` names an undeclared
                option.  List entries are not checked.
        """
        options: list[ConfigurationOption] = []
        for key, raw in configuration.items():
            entry = _validate(_RawOption, raw, f"configuration option {key!r}")
            options.append(
                ConfigurationOption(
                    key=key,
                    message=entry.message,
                    default=entry.default,
                    presentation=(
                        Presentation.CONFIRM if entry.question else Presentation.INPUT
                    ),
                )
            )

        declared: list[DependencyDeclaration] = []
        for dep_name, raw in dependencies.items():
            entry = _validate(_RawDependency, raw, f"dependency {dep_name!r}")
            declared.append(
                DependencyDeclaration(
                    name=dep_name,
                    version=entry.version,
                    channel=_parse_channel(dep_name, entry.type),
                    gate=gate_from_relies_on(entry.reliesOn),
                )
            )

        return cls(name=name, configuration=tuple(options), dependencies=tuple(declared))

    @classmethod
    def load(cls, path: str | Path) -> "AdderDeclaration":
        """Load a declaration from a YAML or JSON file.

        The document holds ``name``, ``configuration`` and
        ``dependencies`` keys using the raw mapping schema.
        """
        file_path = Path(path)
        try:
            raw_text = file_path.read_text(encoding="utf-8")
            if file_path.suffix.lower() == ".json":
                data = json.loads(raw_text)
            else:
                data = yaml.safe_load(raw_text)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise InvalidDeclaration(f"Cannot read declaration {file_path}: {exc}") from exc

        if not isinstance(data, dict) or "name" not in data:
            raise InvalidDeclaration(
                f"{file_path}: expected a mapping with at least a 'name' key"
            )
        return cls.from_mappings(
            name=str(data["name"]),
            configuration=data.get("configuration") or {},
            dependencies=data.get("dependencies") or {},
        )


def _validate(model: type[BaseModel], raw: Any, label: str) -> Any:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise InvalidDeclaration(f"Invalid {label}: {exc}") from exc


def _parse_channel(name: str, raw_type: Optional[str]) -> DependencyChannel:
    if raw_type is None:
        return DependencyChannel.CORE
    if raw_type in (DependencyChannel.DEV.value, DependencyChannel.PEER.value):
        return DependencyChannel(raw_type)
    raise UnsupportedDependencyChannel(name, raw_type)


# ---------------------------------------------------------------------------
# Resolved configuration
# ---------------------------------------------------------------------------


class ResolvedConfiguration:
    """Option key -> resolved value for a single run.

    Only keys declared on the owning adder may be recorded or read. Each key
    is resolved at most once; later stages only read.
    """

    def __init__(self, declared_keys: list[str]) -> None:
        self._declared = list(declared_keys)
        self._values: dict[str, Union[bool, str]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    @property
    def declared_keys(self) -> list[str]:
        return list(self._declared)

    def is_resolved(self, key: str) -> bool:
        self._check_declared(key)
        return key in self._values

    def record(self, key: str, value: Union[bool, str]) -> Union[bool, str]:
        """Store the resolved value for *key* and return the stored value."""
        self._check_declared(key)
        if key in self._values:
            if self._values[key] != value:
                raise ConfigurationAlreadyResolved(
                    f"Option {key!r} already resolved to {self._values[key]!r}"
                )
            return self._values[key]
        self._values[key] = value
        return value

    def lookup(self, key: str) -> Union[bool, str]:
        self._check_declared(key)
        if key not in self._values:
            raise UnresolvedConfigurationValue(
                f"Option {key!r} has not been resolved yet"
            )
        return self._values[key]

    def as_dict(self) -> dict[str, Union[bool, str]]:
        """Return resolved values in declaration order."""
        return {key: self._values[key] for key in self._declared if key in self._values}

    def _check_declared(self, key: str) -> None:
        if key not in self._declared:
            raise UnknownConfigurationKey(key)
