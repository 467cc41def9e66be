"""
Lexer and parser for tag identifiers.

    path     := "." | segment ("." segment)*
    segment  := identifier ["(" [arglist] ")"]
    arglist  := arg ("," arg)*
    arg      := path | literal
    literal  := string | number | "array(" [arglist] ")"

`parse_path` turns the text of a tag into a TagPath (or the Dot singleton).
All syntax errors are raised here, before any lookup happens.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from tagscope.tagscope_datatypes import (
    TagPath, Segment, StringLiteral, NumberLiteral, ArrayLiteral, Dot,
    PathSyntaxError, PathNode
)
from tagscope.tagscope_params import (
    split_params, unquote, parse_number, is_identifier_char,
    NUMBER_RE, ARRAY_START_RE, QUOTES
)

logger = logging.getLogger(__name__)


@dataclass
class Token:
    kind: str      # 'name' | 'dot' | 'args' | 'end'
    text: str
    pos: int       # offset of the token in the full tag text


class PathLexer:
    """Splits a tag identifier into name, dot and argument-list tokens.

    An argument list token carries the raw text between the balanced
    parentheses; quoted strings inside it are skipped as a unit.
    """

    def __init__(self, text: str, *, source: Optional[str] = None, offset: int = 0):
        self.text = text
        self.source = text if source is None else source
        self.offset = offset
        self.pos = 0

    def error(self, message: str, pos: Optional[int] = None) -> PathSyntaxError:
        at = self.pos if pos is None else pos
        return PathSyntaxError(message, self.source, self.offset + at)

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            start = self.pos
            if ch.isspace():
                # Whitespace is only allowed around the whole identifier.
                rest = text[self.pos:]
                if rest.strip():
                    raise self.error("unexpected whitespace")
                break
            if is_identifier_char(ch):
                while self.pos < len(text) and is_identifier_char(text[self.pos]):
                    self.pos += 1
                tokens.append(Token('name', text[start:self.pos], self.offset + start))
            elif ch == '.':
                self.pos += 1
                tokens.append(Token('dot', '.', self.offset + start))
            elif ch == '(':
                close = self._find_close(start)
                tokens.append(Token('args', text[start + 1:close], self.offset + start + 1))
                self.pos = close + 1
            elif ch == ')':
                raise self.error("unbalanced ')'")
            else:
                raise self.error(f"unexpected character {ch!r}")
        tokens.append(Token('end', '', self.offset + len(text)))
        return tokens

    def _find_close(self, open_pos: int) -> int:
        nesting = 0
        i = open_pos
        text = self.text
        while i < len(text):
            ch = text[i]
            if ch in QUOTES:
                i = self._skip_string(i)
                continue
            if ch == '(':
                nesting += 1
            elif ch == ')':
                nesting -= 1
                if nesting == 0:
                    return i
            i += 1
        raise self.error("unterminated '('", open_pos)

    def _skip_string(self, start: int) -> int:
        quote = self.text[start]
        i = start + 1
        while i < len(self.text):
            if self.text[i] == '\\':
                i += 2
                continue
            if self.text[i] == quote:
                return i + 1
            i += 1
        raise self.error("unterminated string literal", start)


class PathParser:
    """Recursive-descent parser over PathLexer tokens."""

    def __init__(self, text: str, *, source: Optional[str] = None, offset: int = 0):
        self.text = text
        self.source = text if source is None else source
        self.offset = offset
        self.tokens: List[Token] = []
        self.index = 0

    def error(self, message: str, pos: int) -> PathSyntaxError:
        return PathSyntaxError(message, self.source, pos)

    def parse(self) -> Union[TagPath, PathNode]:
        stripped = self.text.strip()
        lead = len(self.text) - len(self.text.lstrip())
        if not stripped:
            raise self.error("empty tag identifier", self.offset)
        if stripped == '.':
            return Dot
        lexer = PathLexer(stripped, source=self.source, offset=self.offset + lead)
        self.tokens = lexer.tokenize()
        self.index = 0

        segments = [self._parse_segment()]
        while self._peek().kind == 'dot':
            self._advance()
            segments.append(self._parse_segment())
        tok = self._peek()
        if tok.kind != 'end':
            raise self.error(f"unexpected {tok.text!r}", tok.pos)
        return TagPath(segments)

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _parse_segment(self) -> Segment:
        tok = self._advance()
        if tok.kind != 'name':
            if tok.kind == 'dot':
                raise self.error("'.' is only valid as the whole path", tok.pos)
            raise self.error("expected identifier", tok.pos)
        if self._peek().kind != 'args':
            return Segment(tok.text)
        args_tok = self._advance()
        return Segment(tok.text, self._parse_args(args_tok.text, args_tok.pos))

    def _parse_args(self, inner: str, pos: int) -> List[PathNode]:
        raws = split_params(inner, source=self.source, offset=pos)
        args = []
        cursor = 0
        for raw in raws:
            at = inner.index(raw, cursor)
            cursor = at + len(raw)
            args.append(self._parse_arg(raw, pos + at))
        return args

    def _parse_arg(self, raw: str, pos: int) -> PathNode:
        if raw[0] in QUOTES:
            return StringLiteral(unquote(raw))
        if NUMBER_RE.fullmatch(raw):
            return NumberLiteral(parse_number(raw))
        match = ARRAY_START_RE.match(raw)
        if match:
            open_at = match.end() - 1
            items = self._parse_args(raw[open_at + 1:-1], pos + open_at + 1)
            return ArrayLiteral(items)
        return PathParser(raw, source=self.source, offset=pos).parse()


def parse_path(text: str) -> Union[TagPath, PathNode]:
    """Parses a tag identifier into a TagPath, or Dot for the bare `.` path."""
    path = PathParser(text).parse()
    logger.debug("parsed tag %r -> %s", text, path)
    return path


__all__ = [
    "parse_path",
    "PathLexer",
    "PathParser",
]
