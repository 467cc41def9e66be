"""
The rendering Context: a stack of scope frames and the dotted-path resolver.
"""
import logging
from contextlib import contextmanager
from typing import Any, List, Sequence, Tuple, Union

from tagscope.tagscope_datatypes import (
    ABSENT, MISSING, Dot, TagPath, Segment, StringLiteral, NumberLiteral,
    ArrayLiteral, PathNode, EmptyContextError, ResolutionDepthError
)
from tagscope.tagscope_frames import as_frame
from tagscope.tagscope_parser import parse_path

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


class Context:
    """Rendering context stack.

    Frames are kept outermost first; lookups walk them innermost first and
    stop at the first frame that has the name (no merging across frames).
    The stack holds references to whatever the caller pushed, never copies.
    """

    def __init__(self, frame: Any = None, *, max_depth: int = DEFAULT_MAX_DEPTH):
        self._stack: List[Any] = []
        if frame is not None:
            self._stack.append(frame)
        self.max_depth = max_depth
        self._depth = 0

    # -----------------------------------------------------------------
    # Stack
    # -----------------------------------------------------------------

    def push(self, frame: Any):
        """Push a new frame onto the stack."""
        self._stack.append(frame)
        logger.debug("push frame %s (depth %d)", type(frame).__name__, len(self._stack))

    def pop(self) -> Any:
        """Pop and return the innermost frame."""
        if not self._stack:
            raise EmptyContextError("pop from an empty context")
        frame = self._stack.pop()
        logger.debug("pop frame %s (depth %d)", type(frame).__name__, len(self._stack))
        return frame

    def last(self) -> Any:
        """Return the innermost frame without removing it."""
        if not self._stack:
            raise EmptyContextError("empty context has no last frame")
        return self._stack[-1]

    peek = last

    @contextmanager
    def frame(self, value: Any):
        """Push `value` for the duration of a with-block."""
        self.push(value)
        try:
            yield value
        finally:
            self.pop()

    @property
    def frames(self) -> Tuple[Any, ...]:
        return tuple(self._stack)

    def __len__(self) -> int:
        return len(self._stack)

    def __iter__(self):
        return reversed(self._stack)

    def __repr__(self) -> str:
        kinds = ', '.join(type(f).__name__ for f in self._stack)
        return f"<Context frames=[{kinds}]>"

    # -----------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------

    def find(self, id: str, args: Sequence[Any] = ()) -> Any:
        """Find a variable in the context stack.

        Starting with the innermost frame and working back to the root, each
        frame is asked for `id`:

          * a record frame's callable member named `id` is invoked with `args`
            (it wins over a property of the same name),
          * else a record frame's property named `id` is returned,
          * else a mapping frame containing the key `id` returns its value.

        Returns ABSENT ('') when no frame has `id`.
        """
        value = self.find_in_stack(id, args)
        return ABSENT if value is MISSING else value

    def find_in_stack(self, id: str, args: Sequence[Any] = ()) -> Any:
        """Search every frame, innermost first. Returns MISSING on a miss."""
        return self._lookup(id, args, reversed(self._stack))

    def find_in_frame(self, id: str, args: Sequence[Any], value: Any) -> Any:
        """Search only `value`, ignoring the rest of the stack. Returns MISSING on a miss."""
        return self._lookup(id, args, (value,))

    def _lookup(self, id, args, frames) -> Any:
        for value in frames:
            with self.guard():
                found = as_frame(value).lookup(id, args)
            if found is not MISSING:
                return found
        logger.debug("%r not found", id)
        return MISSING

    @contextmanager
    def guard(self):
        """Counts one level of nested resolution on this context.

        Lookups, dotted paths and the renderer's lambda calls all enter it, so
        callables that resolve or render with this context again are bounded
        by `max_depth` and raise ResolutionDepthError past it.
        """
        if self._depth >= self.max_depth:
            raise ResolutionDepthError(self.max_depth)
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    # -----------------------------------------------------------------
    # Dotted paths
    # -----------------------------------------------------------------

    def find_dot(self, id: Union[str, PathNode]) -> Any:
        """Find a 'dot notation' variable in the context stack.

        Dot notation bubbles through scope differently than `find`: after the
        first segment is found in the stack, each later segment is searched
        for only within the value of the previous one. Given

            {'name': 'Fred', 'child': {'name': 'Bob'}}

        `child.name` looks for `name` inside `child` only, never falling back
        to the outer `name`.

        Segments may be called with arguments, `child.getFathersName(child)`.
        Arguments are always resolved against the entire stack, wherever the
        path has descended to.

        Returns ABSENT ('') as soon as a segment is not found, or is found
        holding ''; later segments and their arguments are then not evaluated.
        """
        path = parse_path(id) if isinstance(id, str) else id
        with self.guard():
            value = self._resolve_path(path)
        if value is MISSING:
            logger.debug("%s not found", path)
            return ABSENT
        return value

    def resolve(self, id: Union[str, PathNode]) -> Any:
        """Resolve a tag identifier: `find` for a plain name, `find_dot` otherwise."""
        path = parse_path(id) if isinstance(id, str) else id
        if isinstance(path, TagPath) and path.is_simple:
            return self.find(path.segments[0].name)
        return self.find_dot(path)

    def _resolve_path(self, path: PathNode) -> Any:
        if path is Dot:
            return self._stack[-1] if self._stack else MISSING
        first, rest = path.segments[0], path.segments[1:]
        value = self.find_in_stack(first.name, self._resolve_args(first))
        for segment in rest:
            # An empty value ends the path before later arguments are evaluated.
            if value is MISSING or (isinstance(value, str) and value == ABSENT):
                return value
            value = self.find_in_frame(segment.name, self._resolve_args(segment), value)
        return value

    def _resolve_args(self, segment: Segment) -> List[Any]:
        if not segment.args:
            return []
        return [self._resolve_arg(arg) for arg in segment.args]

    def _resolve_arg(self, arg: PathNode) -> Any:
        if isinstance(arg, (StringLiteral, NumberLiteral)):
            return arg.value
        if isinstance(arg, ArrayLiteral):
            return [self._resolve_arg(item) for item in arg.items]
        if isinstance(arg, TagPath) and arg.is_simple:
            return self.find(arg.segments[0].name)
        return self.find_dot(arg)


__all__ = [
    "Context",
    "DEFAULT_MAX_DEPTH",
]
