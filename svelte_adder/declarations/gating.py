"""Gate evaluation against a resolved configuration."""

from __future__ import annotations

from .models import (
    AllOf,
    Always,
    ConfigKeyRef,
    Gate,
    LiteralList,
    Not,
    ResolvedConfiguration,
)


class GatingEvaluator:
    """Evaluates gate expressions against one ``ResolvedConfiguration``.

    Rules:
    - ``Always`` is true.
    - ``ConfigKeyRef(k)`` is the truthiness of the resolved value of ``k``.
    - ``LiteralList([...])`` is true when every literal string is non-empty.
      The strings are not looked up as configuration keys, so the resolved
      values of the options they name do not affect the result.
    - ``AllOf`` / ``Not`` combine the above.
    """

    def __init__(self, resolved: ResolvedConfiguration) -> None:
        self.resolved = resolved

    def evaluate(self, gate: Gate) -> bool:
        if isinstance(gate, Always):
            return True
        if isinstance(gate, ConfigKeyRef):
            return bool(self.resolved.lookup(gate.key))
        if isinstance(gate, LiteralList):
            return all(bool(literal) for literal in gate.literals)
        if isinstance(gate, Not):
            return not self.evaluate(gate.gate)
        if isinstance(gate, AllOf):
            return all(self.evaluate(sub) for sub in gate.gates)
        raise TypeError(f"Unsupported gate expression: {gate!r}")
