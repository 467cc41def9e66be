"""
A minimal Mustache renderer driving the Context.

Supports variables ({{name}}, {{{name}}}, {{&name}}), sections
({{#name}}...{{/name}}), inverted sections ({{^name}}...{{/name}}), comments
({{! ... }}) and lambdas. Tag names may use the dotted call syntax understood
by Context, e.g. {{user.greet("Hi", name)}}.
"""
import html
import inspect
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Union

from tagscope.tagscope_context import Context, DEFAULT_MAX_DEPTH
from tagscope.tagscope_datatypes import TemplateSyntaxError, PathNode
from tagscope.tagscope_parser import parse_path

logger = logging.getLogger(__name__)

TAG_RE = re.compile(r"\{\{\{\s*(.+?)\s*\}\}\}|\{\{\s*([#^/&!]?)\s*(.*?)\s*\}\}", re.DOTALL)


@dataclass
class TextNode:
    text: str


@dataclass
class VariableNode:
    name: str
    path: PathNode
    escape: bool = True


@dataclass
class SectionNode:
    name: str
    path: PathNode
    inverted: bool = False
    children: List[Any] = field(default_factory=list)
    source: str = ""


Node = Union[TextNode, VariableNode, SectionNode]


class LambdaHelper:
    """Handed to section lambdas so they can resolve and render against the
    context active at their call site."""

    def __init__(self, renderer: 'Renderer', context: Context):
        self.renderer = renderer
        self.context = context

    def find(self, id: str) -> Any:
        return self.context.resolve(id)

    def render(self, text: str) -> str:
        return self.renderer.render_in(text, self.context)


def _is_lambda(value) -> bool:
    return callable(value) and not isinstance(value, type)


def _accepts_helper(fn) -> bool:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return True
    positional = 0
    for p in sig.parameters.values():
        if p.kind == p.VAR_POSITIONAL:
            return True
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2


class Renderer:
    """Compiles template text into nodes and renders them against a Context."""

    def __init__(self, escape: Optional[Callable[[str], str]] = None, max_depth: int = DEFAULT_MAX_DEPTH):
        self.escape = escape if escape is not None else html.escape
        self.max_depth = max_depth

    def render(self, template: str, data: Any = None) -> str:
        """Render `template` with a fresh Context rooted at `data`."""
        return self.render_in(template, Context(data, max_depth=self.max_depth))

    def render_in(self, template: str, context: Context) -> str:
        """Render `template` against an existing Context (used by lambdas)."""
        nodes = self.compile(template)
        out: List[str] = []
        self._render_nodes(nodes, context, out)
        return "".join(out)

    # -----------------------------------------------------------------
    # Compilation
    # -----------------------------------------------------------------

    def compile(self, template: str) -> List[Node]:
        """Builds the node tree. Every tag name is parsed here, so syntax
        errors surface before anything is looked up."""
        root: List[Node] = []
        children = root
        open_sections: List[tuple] = []  # (SectionNode, parent children, body start)
        pos = 0
        for m in TAG_RE.finditer(template):
            if m.start() > pos:
                children.append(TextNode(template[pos:m.start()]))
            pos = m.end()
            if m.group(1) is not None:
                name = m.group(1)
                children.append(VariableNode(name, parse_path(name), escape=False))
                continue
            sigil, name = m.group(2), m.group(3)
            match sigil:
                case '!':
                    continue
                case '#' | '^':
                    section = SectionNode(name, parse_path(name), inverted=(sigil == '^'))
                    children.append(section)
                    open_sections.append((section, children, m.end()))
                    children = section.children
                case '/':
                    if not open_sections:
                        raise TemplateSyntaxError(f"unexpected closing tag {name!r}", m.start())
                    section, parent, body_start = open_sections.pop()
                    if section.name != name:
                        raise TemplateSyntaxError(
                            f"closing tag {name!r} does not match open section '{section.path}'", m.start()
                        )
                    section.source = template[body_start:m.start()]
                    children = parent
                case '&':
                    children.append(VariableNode(name, parse_path(name), escape=False))
                case _:
                    children.append(VariableNode(name, parse_path(name)))
        if open_sections:
            section = open_sections[-1][0]
            raise TemplateSyntaxError(f"unclosed section '{section.path}'")
        if pos < len(template):
            children.append(TextNode(template[pos:]))
        return root

    # -----------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------

    def _render_nodes(self, nodes: List[Node], context: Context, out: List[str]):
        for node in nodes:
            match node:
                case TextNode():
                    out.append(node.text)
                case VariableNode():
                    out.append(self._render_variable(node, context))
                case SectionNode():
                    self._render_section(node, context, out)

    def _render_variable(self, node: VariableNode, context: Context) -> str:
        value = context.resolve(node.path)
        if _is_lambda(value):
            with context.guard():
                value = self.render_in(str(value()), context)
        if value is None:
            return ""
        text = str(value)
        return self.escape(text) if node.escape else text

    def _render_section(self, node: SectionNode, context: Context, out: List[str]):
        value = context.resolve(node.path)
        if node.inverted:
            if not value:
                self._render_nodes(node.children, context, out)
            return

        if _is_lambda(value):
            logger.debug("section lambda %r", node.name)
            helper = LambdaHelper(self, context)
            with context.guard():
                result = value(node.source, helper) if _accepts_helper(value) else value(node.source)
                result = "" if result is None else str(result)
                out.append(self.render_in(result, context) if "{{" in result else result)
            return

        if not value:
            return
        if isinstance(value, (list, tuple)):
            for item in value:
                with context.frame(item):
                    self._render_nodes(node.children, context, out)
            return
        with context.frame(value):
            self._render_nodes(node.children, context, out)


__all__ = [
    "Renderer",
    "LambdaHelper",
]
