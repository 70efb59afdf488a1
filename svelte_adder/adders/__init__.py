"""Concrete adders shipped with svelte-adder."""

from svelte_adder.adders.vitest import SvelteVitestAdder

__all__ = ["SvelteVitestAdder"]
