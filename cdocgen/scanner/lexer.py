"""Regex-driven scanner for C sources with ``/** ... */`` documentation.

This is deliberately coarse: it splits text into symbol-tagged lexemes and
tracks the line and brace depth, nothing more.  The segmenter consumes it
through the small pull interface of :class:`Scanner` (``advance`` plus the
properties describing the current lexeme).
"""

from __future__ import annotations

import enum
import re
from typing import Iterator

from cdocgen.models import Source, Token
from cdocgen.symbols import (
    ATTRIBUTE_KEYWORDS,
    GENERIC_SYMBOLS,
    SEE_SYMBOLS,
    Symbol,
)


class _Mode(enum.Enum):
    CODE = "code"
    DOC = "doc"
    ARGS = "args"
    MATH = "math"


# ---------------------------------------------------------------------------
# Code patterns
# ---------------------------------------------------------------------------

_KEYWORDS: dict[str, Symbol] = {
    "static": Symbol.STATIC,
    "void": Symbol.VOID,
    "struct": Symbol.STRUCT,
    "union": Symbol.UNION,
    "enum": Symbol.ENUM,
    "typedef": Symbol.TYPEDEF,
}

_PUNCTUATION: dict[str, Symbol] = {
    "(": Symbol.LPAREN,
    ")": Symbol.RPAREN,
    "[": Symbol.LBRACK,
    "]": Symbol.RBRACK,
    ",": Symbol.COMMA,
    ";": Symbol.SEMI,
}

_WHITESPACE_RE = re.compile(r"[ \t\r\n\f\v]+")
_DOC_OPEN_RE = re.compile(r"/\*\*(?![*/])")
_COMMENT_RE = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)
_INCLUDE_RE = re.compile(r"#[ \t]*include[ \t]*\"([^\"\n]*)\"[^\n]*")
_MACRO_RE = re.compile(r"#(?:[^\n\\]|\\.)*", re.DOTALL)
_STRING_RE = re.compile(r"\"(?:[^\"\\\n]|\\.)*\"|'(?:[^'\\\n]|\\.)*'")
_NUMBER_RE = re.compile(r"\.?[0-9](?:[eEpP][+-]|[0-9A-Za-z_.])*")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_OPERATOR_RE = re.compile(
    r"\.\.\.|<<=|>>=|->|\+\+|--|<<|>>|[<>!=]=|&&|\|\||[-+*/%&|^]=|[^\s]"
)

# ---------------------------------------------------------------------------
# Doc patterns
# ---------------------------------------------------------------------------

_DOC_END_RE = re.compile(r"\*/")
_NEWLINE_RE = re.compile(r"\r?\n")
_GUTTER_RE = re.compile(r"[ \t]*\*(?!/)")
_BLANKS_RE = re.compile(r"[ \t\r\f\v]+")
_ATTRIBUTE_RE = re.compile(r"@([A-Za-z]+)")
_ESCAPE_RE = re.compile(r"\\[\\`@_&<>]")
_COMMAND_RE = re.compile(r"\\(url|cite)(?![A-Za-z])")
_SEE_RE = re.compile(r"<(fn|tag|typedef|data):([^>\s]+)>")
_WORD_RE = re.compile(r"(?:\*(?!/)|(?<=\w)_(?=\w)|[^\s\\`{}*_])+")
_ARG_RE = re.compile(r"(?:\*(?!/)|[^\s,\]*])+")
_MATH_RE = re.compile(r"(?:\*(?!/)|[^\s`*])+")

_ESCAPES: dict[str, Symbol] = {
    "\\\\": Symbol.ESCAPE_BACKSLASH,
    "\\`": Symbol.ESCAPE_BACKQUOTE,
    "\\@": Symbol.ESCAPE_AT,
    "\\_": Symbol.ESCAPE_UNDERSCORE,
    "\\&": Symbol.ESCAPE_AMPERSAND,
    "\\<": Symbol.ESCAPE_LT,
    "\\>": Symbol.ESCAPE_GT,
}


def _is_word_char(ch: str) -> bool:
    return ch.isalnum()


class Scanner:
    """Pull scanner over one :class:`Source`.

    After :meth:`advance` returns True, ``symbol``, ``start``, ``end``,
    ``line``, ``label`` and ``depth`` describe the current lexeme.
    """

    def __init__(self, source: Source) -> None:
        self.source = source
        self.symbol: Symbol | None = None
        self.start = 0
        self.end = 0
        self.line = 1
        self.depth = 0
        self._events = self._lex()

    @property
    def label(self) -> str:
        return self.source.label

    @property
    def lexeme(self) -> str:
        return self.source.text[self.start:self.end]

    def advance(self) -> bool:
        """Move to the next lexeme; False at end of input."""
        try:
            self.symbol, self.start, self.end, self.line, self.depth = next(
                self._events
            )
        except StopIteration:
            self.symbol = None
            return False
        return True

    def token(self, symbol: Symbol | None = None, empty: bool = False) -> Token:
        """A :class:`Token` for the current lexeme, optionally re-tagged."""
        return Token(
            symbol=symbol or self.symbol,
            source=self.source,
            start=self.start,
            length=0 if empty else self.end - self.start,
            line=self.line,
        )

    # -----------------------------------------------------------------------
    # Lexing
    # -----------------------------------------------------------------------

    def _lex(self) -> Iterator[tuple[Symbol, int, int, int, int]]:
        text = self.source.text
        pos = 0
        line = 1
        self._mode = _Mode.CODE
        self._depth = 0
        steps = {
            _Mode.CODE: self._code,
            _Mode.DOC: self._doc,
            _Mode.ARGS: self._args,
            _Mode.MATH: self._math,
        }
        while pos < len(text):
            events, end = steps[self._mode](text, pos)
            for symbol, start, stop in events:
                yield (symbol, start, stop,
                       line + text.count("\n", pos, start), self._depth)
            line += text.count("\n", pos, end)
            pos = end

    def _code(self, text: str, pos: int) -> tuple[list, int]:
        ch = text[pos]
        if m := _WHITESPACE_RE.match(text, pos):
            return [], m.end()
        if m := _DOC_OPEN_RE.match(text, pos):
            self._mode = _Mode.DOC
            return [(Symbol.DOC_BEGIN, pos, m.end())], m.end()
        if m := _COMMENT_RE.match(text, pos):
            return [], m.end()
        if m := _INCLUDE_RE.match(text, pos):
            return [(Symbol.LOCAL_INCLUDE, m.start(1), m.end(1))], m.end()
        if m := _MACRO_RE.match(text, pos):
            return [(Symbol.MACRO, pos, m.end())], m.end()
        if m := (_STRING_RE.match(text, pos) or _NUMBER_RE.match(text, pos)):
            return [(Symbol.CONSTANT, pos, m.end())], m.end()
        if m := _IDENT_RE.match(text, pos):
            return [(self._identifier(m.group(), m.end()), pos, m.end())], m.end()
        if ch == "{":
            self._depth += 1
            return [(Symbol.LBRACE, pos, pos + 1)], pos + 1
        if ch == "}":
            self._depth = max(self._depth - 1, 0)
            return [(Symbol.RBRACE, pos, pos + 1)], pos + 1
        if ch in _PUNCTUATION:
            return [(_PUNCTUATION[ch], pos, pos + 1)], pos + 1
        m = _OPERATOR_RE.match(text, pos)
        return [(Symbol.OPERATOR, pos, m.end())], m.end()

    def _doc(self, text: str, pos: int) -> tuple[list, int]:
        ch = text[pos]
        if m := _DOC_END_RE.match(text, pos):
            self._mode = _Mode.CODE
            return [(Symbol.DOC_END, pos, m.end())], m.end()
        if m := _NEWLINE_RE.match(text, pos):
            return [(Symbol.NEWLINE, pos, m.end())], self._skip_gutter(text, m.end())
        if m := _BLANKS_RE.match(text, pos):
            return [(Symbol.SPACE, pos, m.end())], m.end()
        if (m := _ATTRIBUTE_RE.match(text, pos)) and m.group(1) in ATTRIBUTE_KEYWORDS:
            events = [(ATTRIBUTE_KEYWORDS[m.group(1)], pos, m.end())]
            if text.startswith("[", m.end()):
                self._mode = _Mode.ARGS
                events.append((Symbol.DOC_LEFT, m.end(), m.end() + 1))
                return events, m.end() + 1
            return events, m.end()
        if m := _ESCAPE_RE.match(text, pos):
            return [(_ESCAPES[m.group()], pos, m.end())], m.end()
        if m := _COMMAND_RE.match(text, pos):
            symbol = Symbol.URL if m.group(1) == "url" else Symbol.CITE
            return [(symbol, pos, m.end())], m.end()
        if m := _SEE_RE.match(text, pos):
            return [(SEE_SYMBOLS[m.group(1)], pos, m.end())], m.end()
        if ch == "`":
            self._mode = _Mode.MATH
            return [(Symbol.MATH_BEGIN, pos, pos + 1)], pos + 1
        if ch == "{":
            return [(Symbol.DOC_LBRACE, pos, pos + 1)], pos + 1
        if ch == "}":
            return [(Symbol.DOC_RBRACE, pos, pos + 1)], pos + 1
        if ch == "_" and self._is_italics(text, pos):
            return [(Symbol.ITALICS, pos, pos + 1)], pos + 1
        if m := _WORD_RE.match(text, pos):
            return [(Symbol.WORD, pos, m.end())], m.end()
        return [(Symbol.WORD, pos, pos + 1)], pos + 1

    def _args(self, text: str, pos: int) -> tuple[list, int]:
        ch = text[pos]
        if m := _DOC_END_RE.match(text, pos):
            self._mode = _Mode.CODE
            return [(Symbol.DOC_END, pos, m.end())], m.end()
        if m := _WHITESPACE_RE.match(text, pos):
            if "\n" in m.group():
                return [], self._skip_gutter(text, m.end())
            return [], m.end()
        if ch == "]":
            self._mode = _Mode.DOC
            return [(Symbol.DOC_RIGHT, pos, pos + 1)], pos + 1
        if ch == ",":
            return [(Symbol.DOC_COMMA, pos, pos + 1)], pos + 1
        m = _ARG_RE.match(text, pos)
        end = m.end() if m else pos + 1
        return [(Symbol.DOC_ID, pos, end)], end

    def _math(self, text: str, pos: int) -> tuple[list, int]:
        if m := _DOC_END_RE.match(text, pos):
            self._mode = _Mode.CODE
            return [(Symbol.DOC_END, pos, m.end())], m.end()
        if text[pos] == "`":
            self._mode = _Mode.DOC
            return [(Symbol.MATH_END, pos, pos + 1)], pos + 1
        if m := _NEWLINE_RE.match(text, pos):
            return [(Symbol.NEWLINE, pos, m.end())], self._skip_gutter(text, m.end())
        if m := _BLANKS_RE.match(text, pos):
            return [(Symbol.SPACE, pos, m.end())], m.end()
        m = _MATH_RE.match(text, pos)
        end = m.end() if m else pos + 1
        return [(Symbol.WORD, pos, end)], end

    @staticmethod
    def _skip_gutter(text: str, pos: int) -> int:
        """Skip the leading `` * `` of a continuation line inside a comment."""
        if m := _GUTTER_RE.match(text, pos):
            return m.end()
        return pos

    def _identifier(self, word: str, end: int) -> Symbol:
        if word in _KEYWORDS:
            return _KEYWORDS[word]
        underscores = word.count("_")
        if (word.endswith("_") and underscores in GENERIC_SYMBOLS
                and self.source.text.startswith("(", end)):
            return GENERIC_SYMBOLS[underscores]
        return Symbol.ID

    @staticmethod
    def _is_italics(text: str, pos: int) -> bool:
        before = text[pos - 1] if pos > 0 else " "
        after = text[pos + 1] if pos + 1 < len(text) else " "
        return not (_is_word_char(before) and _is_word_char(after))


def tokenize(source: Source) -> list[Token]:
    """Every lexeme of *source* as a token; convenient for tests and debugging."""
    scanner = Scanner(source)
    tokens = []
    while scanner.advance():
        tokens.append(scanner.token())
    return tokens
