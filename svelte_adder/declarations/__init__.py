"""Static adder declarations and gate evaluation.

Usage::

    from svelte_adder.declarations import AdderDeclaration, GatingEvaluator

    declaration = AdderDeclaration.from_mappings(
        name="my-adder",
        configuration={"jsdom": {"message": "Use JSDOM?", "default": True, "question": True}},
        dependencies={"jsdom": {"version": "^19.0.0", "type": "DEV", "reliesOn": "jsdom"}},
    )
"""

from svelte_adder.declarations.gating import GatingEvaluator
from svelte_adder.declarations.models import (
    ALWAYS,
    AdderDeclaration,
    AdderError,
    AllOf,
    Always,
    ConfigKeyRef,
    ConfigurationAlreadyResolved,
    ConfigurationOption,
    DependencyChannel,
    DependencyDeclaration,
    Gate,
    InvalidDeclaration,
    InvalidOptionValue,
    LiteralList,
    Not,
    Presentation,
    ResolvedConfiguration,
    UnknownConfigurationKey,
    UnresolvedConfigurationValue,
    UnsupportedDependencyChannel,
    gate_from_relies_on,
)

__all__ = [
    "ALWAYS",
    "AdderDeclaration",
    "AdderError",
    "AllOf",
    "Always",
    "ConfigKeyRef",
    "ConfigurationAlreadyResolved",
    "ConfigurationOption",
    "DependencyChannel",
    "DependencyDeclaration",
    "Gate",
    "GatingEvaluator",
    "InvalidDeclaration",
    "InvalidOptionValue",
    "LiteralList",
    "Not",
    "Presentation",
    "ResolvedConfiguration",
    "UnknownConfigurationKey",
    "UnresolvedConfigurationValue",
    "UnsupportedDependencyChannel",
    "gate_from_relies_on",
]
