"""Doc-markup interpreter — expands inline commands through the style engine.

Each handler starts at one token, prints it (and whatever it consumes) and
returns the index of the next unconsumed token.  A handler that runs off the
end of the buffer, or into a paragraph break, before its closing construct
raises :class:`MarkupError`.
"""

from __future__ import annotations

import re
from typing import Sequence
from urllib.parse import quote_plus

from cdocgen.models import Finding, Severity, Token
from cdocgen.style import PLAIN_TEXT, Dialect, StyleStack, encode
from cdocgen.symbols import Symbol

SCHOLAR_URL = "https://scholar.google.ca/scholar?q="

_SEE_RE = re.compile(r"<(fn|tag|typedef|data):([^>\s]+)>")

_ESCAPED = {
    Symbol.ESCAPE_BACKSLASH: "\\",
    Symbol.ESCAPE_BACKQUOTE: "`",
    Symbol.ESCAPE_AT: "@",
    Symbol.ESCAPE_UNDERSCORE: "_",
    Symbol.ESCAPE_AMPERSAND: "&",
    Symbol.ESCAPE_LT: "<",
    Symbol.ESCAPE_GT: ">",
    Symbol.DOC_LBRACE: "{",
    Symbol.DOC_RBRACE: "}",
}

_GENERIC_ARITY = {
    Symbol.ID_ONE_GENERIC: 1,
    Symbol.ID_TWO_GENERICS: 2,
    Symbol.ID_THREE_GENERICS: 3,
}


class MarkupError(Exception):
    """A doc-markup command is missing its closing construct."""

    def __init__(self, expected: str, token: Token) -> None:
        super().__init__(f"expected: {expected}")
        self.expected = expected
        self.token = token

    def to_finding(self) -> Finding:
        return Finding(
            rule_id="MARKUP_MALFORMED",
            severity=Severity.ERROR,
            file_path=self.token.label,
            line=self.token.line,
            excerpt=self.token.snippet(),
            explanation=f"expected: {self.expected}",
            symbol=str(self.token.symbol),
        )


def see_target(token: Token) -> tuple[str, str]:
    """``<fn:name>`` -> ``("fn", "name")``."""
    m = _SEE_RE.fullmatch(token.text)
    if m is None:
        return "", token.text
    return m.group(1), m.group(2)


def render_tokens(tokens: Sequence[Token], style: StyleStack,
                  code: bool = False) -> None:
    """Print *tokens* through *style*.

    With *code*, literals are verbatim in the Markdown dialect (they land in
    a code block, where escapes would show).
    """
    tokens = list(tokens)
    i = 0
    while i < len(tokens):
        i = _render_one(tokens, i, style, code)


def _render_one(tokens: list[Token], i: int, style: StyleStack,
                code: bool) -> int:
    token = tokens[i]
    match token.symbol:
        case Symbol.SPACE:
            style.separate()
            return i + 1
        case Symbol.PARAGRAPH:
            style.pop_level()
            style.push("para")
            return i + 1
        case symbol if symbol in _ESCAPED:
            style.emit(_ESCAPED[symbol], symbol)
            return i + 1
        case symbol if symbol in _GENERIC_ARITY:
            return _generic(tokens, i, _GENERIC_ARITY[symbol], style, code)
        case Symbol.URL:
            return _url(tokens, i, style)
        case Symbol.CITE:
            return _cite(tokens, i, style)
        case Symbol.SEE_FN | Symbol.SEE_TAG | Symbol.SEE_TYPEDEF | Symbol.SEE_DATA:
            _see(token, style)
            return i + 1
        case Symbol.MATH_BEGIN:
            return _math(tokens, i, style)
        case Symbol.ITALICS:
            return _italics(tokens, i, style, code)
        case Symbol.MATH_END:
            raise MarkupError("`<math/code>`", token)
        case _:
            _literal(token, style, code)
            return i + 1


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _literal(token: Token, style: StyleStack, code: bool) -> None:
    if code:
        _verbatim(token.text, token.symbol, style)
    else:
        style.emit(token.text, token.symbol)


def _verbatim(text: str, symbol: Symbol | None, style: StyleStack) -> None:
    style.prepare(symbol)
    if style.dialect == Dialect.MD:
        style.write(text)
    else:
        style.write(encode(text, style.dialect))


def _generic(tokens: list[Token], i: int, arity: int, style: StyleStack,
             code: bool) -> int:
    """``A_B_(x,y)`` -> ``<A>x<B>y``."""
    token = tokens[i]
    expected = "generic(" + ",".join(["id"] * arity) + ")"
    types = token.text.split("_")
    if len(types) != arity + 1 or types[-1]:
        raise MarkupError(expected, token)
    j = i + 1
    if j >= len(tokens) or tokens[j].symbol != Symbol.LPAREN:
        raise MarkupError(expected, token)
    params: list[str] = []
    for n in range(arity):
        j += 1
        if j >= len(tokens) or tokens[j].symbol in (
                Symbol.COMMA, Symbol.LPAREN, Symbol.RPAREN):
            raise MarkupError(expected, token)
        params.append(tokens[j].text)
        j += 1
        closing = Symbol.RPAREN if n == arity - 1 else Symbol.COMMA
        if j >= len(tokens) or tokens[j].symbol != closing:
            raise MarkupError(expected, token)
    text = "".join(f"<{t}>{p}" for t, p in zip(types, params))
    if code:
        _verbatim(text, token.symbol, style)
    else:
        style.emit(text, token.symbol)
    return j + 1


def _braced(tokens: list[Token], i: int, expected: str) -> tuple[list[Token], int]:
    """Tokens between ``{`` and ``}`` following the command at *i*."""
    token = tokens[i]
    j = i + 1
    if j >= len(tokens) or tokens[j].symbol != Symbol.DOC_LBRACE:
        raise MarkupError(expected, token)
    inside: list[Token] = []
    j += 1
    while j < len(tokens) and tokens[j].symbol != Symbol.DOC_RBRACE:
        inside.append(tokens[j])
        j += 1
    if j >= len(tokens):
        raise MarkupError(expected, token)
    return inside, j + 1


def _link(style: StyleStack, href: str, text: str) -> None:
    style.prepare()
    if style.dialect == Dialect.HTML:
        href = encode(href, style.dialect).replace('"', "&quot;")
        style.write(f'<a href="{href}">{encode(text, style.dialect)}</a>')
    else:
        href = href.replace(" ", "%20").replace(")", "%29")
        style.write(f"[{encode(text, style.dialect)}]({href})")


def _url(tokens: list[Token], i: int, style: StyleStack) -> int:
    inside, after = _braced(tokens, i, "\\url{<url>}")
    # The symbol's meaning doesn't matter inside a url.
    url = "".join(t.text for t in inside if t.symbol != Symbol.SPACE)
    _link(style, url, url)
    return after


def _cite(tokens: list[Token], i: int, style: StyleStack) -> int:
    inside, after = _braced(tokens, i, "\\cite{<source>}")
    words = [t.text for t in inside if t.symbol != Symbol.SPACE and t.text]
    source = " ".join(words)
    _link(style, SCHOLAR_URL + quote_plus(source), source)
    return after


def _see(token: Token, style: StyleStack) -> None:
    kind, name = see_target(token)
    _link(style, f"#{kind}:{name}", name)


def _math(tokens: list[Token], i: int, style: StyleStack) -> int:
    """Math and code, verbatim up to the closing backquote."""
    j = i + 1
    inside: list[Token] = []
    while j < len(tokens) and tokens[j].symbol not in (
            Symbol.MATH_END, Symbol.PARAGRAPH):
        inside.append(tokens[j])
        j += 1
    if j >= len(tokens) or tokens[j].symbol != Symbol.MATH_END:
        raise MarkupError("`<math/code>`", tokens[i])
    style.push("code")
    for token in inside:
        if token.symbol == Symbol.SPACE:
            style.separate()
        else:
            _verbatim(token.text, None, style)
    style.pop()
    return j + 1


def _italics(tokens: list[Token], i: int, style: StyleStack,
             code: bool) -> int:
    j = i + 1
    # Emphasis never spans paragraphs.
    while j < len(tokens) and tokens[j].symbol not in (
            Symbol.ITALICS, Symbol.PARAGRAPH):
        j += 1
    if j >= len(tokens) or tokens[j].symbol != Symbol.ITALICS:
        raise MarkupError("_<italics>_", tokens[i])
    style.push("em")
    style.push(PLAIN_TEXT)
    render_tokens(tokens[i + 1:j], style, code)
    style.pop()
    style.pop()
    return j + 1
