"""
A printer that formats tag path nodes back into canonical tag source.
"""
from tagscope.tagscope_datatypes import (
    TagPath, Segment, StringLiteral, NumberLiteral, ArrayLiteral, Dot
)


class Printer:
    """Formats path AST nodes into valid, normalized tag identifiers."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj) -> str:
        """Public entry point to format a node."""
        return self._get_handler(obj)(obj)

    def _get_handler(self, obj):
        if obj is Dot:
            return self._pformat_dot
        handler = self._handlers.get(type(obj))
        if handler is not None:
            return handler
        # Default to Python's repr for anything that is not a path node
        return repr

    def _create_handlers(self):
        return {
            TagPath: self._pformat_path,
            Segment: self._pformat_segment,
            StringLiteral: self._pformat_string,
            NumberLiteral: self._pformat_number,
            ArrayLiteral: self._pformat_array,
        }

    def _pformat_dot(self, obj):
        return "."

    def _pformat_path(self, obj):
        return ".".join(self._pformat_segment(s) for s in obj.segments)

    def _pformat_segment(self, obj):
        if obj.args is None:
            return obj.name
        return f"{obj.name}({self._pformat_args(obj.args)})"

    def _pformat_args(self, args):
        return ", ".join(self.pformat(a) for a in args)

    def _pformat_string(self, obj):
        escaped = obj.value.replace('\\', '\\\\').replace('"', '\\"')
        escaped = escaped.replace('\n', '\\n').replace('\t', '\\t').replace('\r', '\\r')
        return f'"{escaped}"'

    def _pformat_number(self, obj):
        return repr(obj.value)

    def _pformat_array(self, obj):
        return f"array({self._pformat_args(obj.items)})"
