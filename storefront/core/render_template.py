"""Template Rendering — two-phase (parse, then render) templates for receipts.

Invariants:
    - parse() is pure and total: it returns a node tree or raises TemplateSyntaxError
    - render() never re-scans text: substituted values are not themselves interpreted
    - {{#each name}} blocks must be closed by {{/each}}; nesting is allowed
    - A missing variable raises TemplateRenderError (no silent empty output)

Design Decisions:
    - Syntax kept to what receipts need: {{ name }}, dotted lookups, {{#each list}}
    - Inside an each block, the item's keys shadow the outer data
"""

import html
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

_TAG = re.compile(r"\{\{\s*(.*?)\s*\}\}", re.DOTALL)
_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class TemplateSyntaxError(ValueError):
    """Template source could not be parsed."""


class TemplateRenderError(KeyError):
    """Template data is missing a referenced value."""


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class Each:
    name: str
    body: tuple["Node", ...]


Node = Union[Text, Var, Each]


def parse(source: str) -> tuple[Node, ...]:
    """Parse template source into an immutable node tree."""
    stack: list[tuple[str | None, list[Node]]] = [(None, [])]
    pos = 0
    for match in _TAG.finditer(source):
        if match.start() > pos:
            stack[-1][1].append(Text(source[pos:match.start()]))
        pos = match.end()
        tag = match.group(1)
        if tag.startswith("#each"):
            name = tag[len("#each"):].strip()
            _check_name(name, tag)
            stack.append((name, []))
        elif tag == "/each":
            if len(stack) == 1:
                raise TemplateSyntaxError("{{/each}} without matching {{#each}}")
            name, body = stack.pop()
            stack[-1][1].append(Each(name, tuple(body)))
        else:
            _check_name(tag, tag)
            stack[-1][1].append(Var(tag))
    if len(stack) > 1:
        raise TemplateSyntaxError(f"Unclosed {{{{#each {stack[-1][0]}}}}} block")
    if pos < len(source):
        stack[0][1].append(Text(source[pos:]))
    return tuple(stack[0][1])


def _check_name(name: str, tag: str) -> None:
    if not _NAME.match(name):
        raise TemplateSyntaxError(f"Invalid template tag: {{{{{tag}}}}}")


def render(
    nodes: tuple[Node, ...], data: Mapping[str, Any], autoescape: bool = False,
) -> str:
    """Render a parsed node tree against data."""
    out: list[str] = []
    for node in nodes:
        if isinstance(node, Text):
            out.append(node.value)
        elif isinstance(node, Var):
            value = str(_lookup(data, node.name))
            out.append(html.escape(value) if autoescape else value)
        else:
            items = _lookup(data, node.name)
            if isinstance(items, (str, bytes, Mapping)) or not hasattr(items, "__iter__"):
                raise TemplateRenderError(f"'{node.name}' is not a list")
            for item in items:
                scope = {**data, **item} if isinstance(item, Mapping) else {**data, "this": item}
                out.append(render(node.body, scope, autoescape))
    return "".join(out)


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    value: Any = data
    for part in name.split("."):
        if not isinstance(value, Mapping) or part not in value:
            raise TemplateRenderError(name)
        value = value[part]
    return value
