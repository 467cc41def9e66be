"""
Defines the core data types for tagscope.

This module provides the path AST produced by the tag parser, the
ABSENT sentinel returned for misses, and the exception hierarchy.
"""

from abc import ABC
from typing import List, Any, Optional, Union

# A miss anywhere in scope resolves to the empty string. A legitimately empty
# value looks exactly the same to callers.
ABSENT = ''


class _Missing:
    """Internal marker for a lookup that matched nothing."""
    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False

MISSING = _Missing()


# =================================================================
# Errors
# =================================================================

class TagscopeError(Exception):
    """Base class for every error raised by tagscope itself."""
    pass


class PathSyntaxError(TagscopeError, ValueError):
    """Raised when a tag identifier cannot be parsed."""
    def __init__(self, message: str, text: str = "", position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.text = text
        self.position = position

    def format(self) -> str:
        """Formats the message with the offending text and a caret under the column."""
        label = type(self).__name__
        if self.position is None:
            return f"{label}: {self.message}"
        caret = " " * max(self.position, 0)
        return f"{label}: {self.message} (col {self.position + 1})\n  | {self.text}\n  | {caret}^"

    def __str__(self):
        if self.position is None:
            return self.message
        return f"{self.message} at col {self.position + 1} in {self.text!r}"


class ParameterSyntaxError(PathSyntaxError):
    """Raised when a call argument list cannot be split."""
    pass


class EmptyContextError(TagscopeError, IndexError):
    """Raised when popping or peeking an empty context stack."""
    pass


class ResolutionDepthError(TagscopeError, RecursionError):
    def __init__(self, depth: int):
        super().__init__(f"resolution depth limit exceeded ({depth})")
        self.depth = depth


class TemplateSyntaxError(TagscopeError, ValueError):
    """Raised by the renderer for unclosed or mismatched sections."""
    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message if position is None else f"{message} at offset {position}")
        self.position = position


# =================================================================
# Path AST
# =================================================================

class PathNode(ABC):
    """Abstract base class for every node of a parsed tag identifier."""

    def to_str_repr(self) -> str:
        from tagscope.tagscope_printer import Printer
        return Printer().pformat(self)

    def __str__(self) -> str:
        return self.to_str_repr()


class ArgumentNode(PathNode):
    """Abstract base class for literal call arguments."""
    pass


class StringLiteral(ArgumentNode):
    """A quoted string argument, e.g. `"Fred"` in `greet("Fred")`."""
    def __init__(self, value: str):
        self.value = value

    def __repr__(self) -> str:
        return f"StringLiteral({self.value!r})"

    def __eq__(self, other):
        return isinstance(other, StringLiteral) and self.value == other.value

    def __hash__(self):
        return hash(('str', self.value))


class NumberLiteral(ArgumentNode):
    """An integer or decimal argument, e.g. `2` or `-1.5`."""
    def __init__(self, value: Union[int, float]):
        self.value = value

    def __repr__(self) -> str:
        return f"NumberLiteral({self.value!r})"

    def __eq__(self, other):
        return (
            isinstance(other, NumberLiteral)
            and type(self.value) is type(other.value)
            and self.value == other.value
        )

    def __hash__(self):
        return hash(('num', self.value))


class ArrayLiteral(ArgumentNode):
    """An `array(...)` argument; each item is itself an argument node."""
    def __init__(self, items: List[Any]):
        self.items = list(items)

    def __repr__(self) -> str:
        return f"ArrayLiteral({self.items!r})"

    def __eq__(self, other):
        return isinstance(other, ArrayLiteral) and self.items == other.items

    def __hash__(self):
        return hash(('array', tuple(self.items)))


class Segment(PathNode):
    """One dot-separated component of a tag path, e.g. `getName(child)`.

    `args` is None when the segment was written without parentheses and a
    (possibly empty) list of argument nodes otherwise.
    """
    def __init__(self, name: str, args: Optional[List[Any]] = None):
        self.name = name
        self.args = None if args is None else list(args)

    @property
    def is_call(self) -> bool:
        return self.args is not None

    def __repr__(self) -> str:
        if self.args is None:
            return f"Segment<{self.name!r}>"
        return f"Segment<{self.name!r} args={self.args!r}>"

    def __eq__(self, other):
        return isinstance(other, Segment) and self.name == other.name and self.args == other.args

    def __hash__(self):
        return hash((self.name, None if self.args is None else tuple(self.args)))


class TagPath(PathNode):
    """A dotted tag identifier, an instruction to look up a value."""
    def __init__(self, segments: List[Segment]):
        if not segments:
            raise ValueError("TagPath must have at least one segment.")
        self.segments = list(segments)

    def __getitem__(self, key):
        return self.segments[key]

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def is_simple(self) -> bool:
        """True for a single segment written without call parentheses."""
        return len(self.segments) == 1 and not self.segments[0].is_call

    def __repr__(self) -> str:
        return f"<TagPath segments={self.segments!r}>"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TagPath):
            return NotImplemented
        return self.segments == other.segments

    def __hash__(self) -> int:
        return hash(tuple(self.segments))


class _DotPath(PathNode):
    """The reserved `.` path: the current top-of-stack frame, unresolved."""
    def __repr__(self):
        return "Dot<>"

# Singleton instance for the stateless `.` path
Dot = _DotPath()
