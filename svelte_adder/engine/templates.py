"""Jinja2 template rendering for extracted files.

Provides the TemplateRenderer class which loads ``.j2`` templates from an
adder's template directory and renders them with the adder name and the
resolved configuration as context.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

TEMPLATE_SUFFIX = ".j2"


class TemplateRenderer:
    """Renders Jinja2 templates for file extraction.

    A template named ``vitest.config.ts`` is stored on disk as
    ``vitest.config.ts.j2``; callers always use the output filename.
    """

    def __init__(self, template_dir: str | Path) -> None:
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def template_name(self, filename: str) -> str:
        """Return the on-disk template name for an output *filename*."""
        if filename.endswith(TEMPLATE_SUFFIX):
            return filename
        return filename + TEMPLATE_SUFFIX

    def has_template(self, filename: str) -> bool:
        return (self.template_dir / self.template_name(filename)).is_file()

    def render(self, filename: str, context: dict[str, Any]) -> str:
        """Render the template for *filename* with the provided context.

        Raises:
            jinja2.TemplateNotFound: If no ``.j2`` template exists for it.
        """
        template = self.env.get_template(self.template_name(filename))
        return template.render(**context)


def output_name(filename: str) -> str:
    """Strip the template suffix from *filename*, keeping only the basename."""
    name = Path(filename).name
    if name.endswith(TEMPLATE_SUFFIX):
        return name[: -len(TEMPLATE_SUFFIX)]
    return name
