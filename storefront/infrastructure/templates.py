"""File Template Renderer — loads <name>.html / <name>.txt and renders both.

Invariants:
    - Each template file is parsed once and cached as an immutable node tree
    - HTML output is autoescaped; text output is not
    - Missing files raise FileNotFoundError; parse/render errors propagate
"""

import logging
from pathlib import Path

from storefront.core.render_template import Node, parse, render

logger = logging.getLogger(__name__)


class FileTemplateRenderer:
    """TemplateRenderer backed by a directory of template files."""

    def __init__(self, templates_dir: str | Path):
        self.templates_dir = Path(templates_dir)
        self._cache: dict[str, tuple[Node, ...]] = {}

    def render(self, template_name: str, data: dict) -> dict[str, str]:
        return {
            "html": render(self._load(f"{template_name}.html"), data, autoescape=True),
            "text": render(self._load(f"{template_name}.txt"), data),
        }

    def _load(self, filename: str) -> tuple[Node, ...]:
        nodes = self._cache.get(filename)
        if nodes is None:
            source = (self.templates_dir / filename).read_text(encoding="utf-8")
            nodes = self._cache[filename] = parse(source)
            logger.debug(f"Template parsed: {filename}")
        return nodes
