"""
Splits the raw argument list of a tag call into individual argument strings.

`split_params('a(1,2), "x,y", 3')` -> `['a(1,2)', '"x,y"', '3']`

Arguments are returned exactly as written; turning them into literal or path
nodes is the parser's job.
"""
import logging
import re
from typing import List, Optional

from tagscope.tagscope_datatypes import ParameterSyntaxError

logger = logging.getLogger(__name__)

NUMBER_RE = re.compile(r'[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?', re.ASCII)
ARRAY_START_RE = re.compile(r'array\s*\(')
QUOTES = ('"', "'")
_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0'}


def is_identifier_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == '_')


def unquote(raw: str) -> str:
    """Returns the value of a quoted string literal, resolving backslash escapes."""
    body = raw[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == '\\' and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return ''.join(out)


def parse_number(raw: str):
    """Converts a number literal to int, or float when it has a fraction or exponent."""
    if any(c in raw for c in '.eE'):
        return float(raw)
    return int(raw)


class ParamScanner:
    """Character scanner over one argument list.

    Keeps an explicit parenthesis nesting counter; quoted strings are skipped
    as a unit so commas and parentheses inside them never split or nest.
    """

    def __init__(self, text: str, *, source: Optional[str] = None, offset: int = 0):
        self.text = text
        self.length = len(text)
        self.pos = 0
        # Errors are reported against the full tag text when one is given.
        self.source = text if source is None else source
        self.offset = offset

    def error(self, message: str, pos: Optional[int] = None) -> ParameterSyntaxError:
        at = self.pos if pos is None else pos
        return ParameterSyntaxError(message, self.source, self.offset + at)

    def scan(self) -> List[str]:
        params: List[str] = []
        expecting = False
        while True:
            self._skip_ws()
            if self.pos >= self.length:
                if expecting:
                    raise self.error("missing argument after ','")
                break
            start = self.pos
            ch = self.text[start]
            if ch == ',':
                raise self.error("empty argument")
            end = self._scan_param(start)
            params.append(self.text[start:end].strip().rstrip(','))
            self.pos = end
            self._skip_ws()
            if self.pos >= self.length:
                break
            if self.text[self.pos] != ',':
                raise self.error(f"expected ',' but found {self.text[self.pos]!r}")
            self.pos += 1
            expecting = True
        logger.debug("split %r into %d argument(s)", self.text, len(params))
        return params

    def _skip_ws(self):
        while self.pos < self.length and self.text[self.pos].isspace():
            self.pos += 1

    def _scan_param(self, start: int) -> int:
        """Returns the end offset of the argument that begins at `start`."""
        ch = self.text[start]
        match = NUMBER_RE.match(self.text, start)
        if match and self._is_boundary(match.end()):
            return match.end()
        if ch in QUOTES:
            return self._skip_string(start)
        if ARRAY_START_RE.match(self.text, start):
            return self._scan_array(start)
        if is_identifier_char(ch) or ch == '.':
            return self._scan_reference(start)
        raise self.error(f"unexpected character {ch!r}", start)

    def _is_boundary(self, pos: int) -> bool:
        if pos >= self.length:
            return True
        ch = self.text[pos]
        return ch == ',' or ch.isspace()

    def _skip_string(self, start: int) -> int:
        quote = self.text[start]
        i = start + 1
        while i < self.length:
            ch = self.text[i]
            if ch == '\\':
                i += 2
                continue
            if ch == quote:
                return i + 1
            i += 1
        raise self.error("unterminated string literal", start)

    def _scan_array(self, start: int) -> int:
        # Ends at the ')' that brings nesting back to where the argument began.
        i = self.text.index('(', start)
        nesting = 0
        while i < self.length:
            ch = self.text[i]
            if ch in QUOTES:
                i = self._skip_string(i)
                continue
            if ch == '(':
                nesting += 1
            elif ch == ')':
                nesting -= 1
                if nesting == 0:
                    return i + 1
            i += 1
        raise self.error("unterminated '(' in array literal", start)

    def _scan_reference(self, start: int) -> int:
        # Ends at ',' or ')' seen at nesting depth 0 relative to the argument.
        i = start
        nesting = 0
        open_at = []
        while i < self.length:
            ch = self.text[i]
            if ch in QUOTES:
                if nesting == 0:
                    raise self.error(f"unexpected character {ch!r}", i)
                i = self._skip_string(i)
                continue
            if ch == '(':
                nesting += 1
                open_at.append(i)
            elif ch == ')':
                if nesting == 0:
                    raise self.error("unbalanced ')'", i)
                nesting -= 1
                open_at.pop()
            elif ch == ',' and nesting == 0:
                return i
            i += 1
        if nesting:
            raise self.error("unterminated '('", open_at[-1])
        return i


def split_params(text: str, *, source: Optional[str] = None, offset: int = 0) -> List[str]:
    """Splits a comma separated argument list into raw argument strings.

    Empty (or all-whitespace) input yields an empty list. Malformed input
    raises ParameterSyntaxError.
    """
    if not text or not text.strip():
        return []
    return ParamScanner(text, source=source, offset=offset).scan()


__all__ = [
    "split_params",
    "unquote",
    "parse_number",
    "NUMBER_RE",
]
