"""Semantic classifier — decides what a run of code tokens declares.

Not a C parser: it looks at the top-level shape of the token run (leading
keywords, the first parenthesised list, braces) and picks a
:class:`~cdocgen.models.Division` plus the indices of the declared name
and each function parameter.
"""

from __future__ import annotations

import logging

from cdocgen.models import Division, Token, TokenBuffer
from cdocgen.symbols import GENERIC_SYMBOLS, Symbol

log = logging.getLogger(__name__)

_GENERICS = frozenset(GENERIC_SYMBOLS.values())
_TAG_KEYWORDS = frozenset({Symbol.STRUCT, Symbol.UNION, Symbol.ENUM})
_CLOSE = {Symbol.LPAREN: Symbol.RPAREN, Symbol.LBRACK: Symbol.RBRACK,
          Symbol.LBRACE: Symbol.RBRACE}


def classify(code: TokenBuffer) -> tuple[Division, list[int]]:
    """Return ``(division, [name_index, param_index, ...])`` for *code*.

    The index list may be empty; a non-empty list always starts with the
    declared name.
    """
    division, params = _classify(list(code))
    log.debug("classified %s %s", division, params)
    return division, params


def _classify(tokens: list[Token]) -> tuple[Division, list[int]]:
    if not tokens:
        return Division.PREAMBLE, []

    symbols = [t.symbol for t in tokens]

    if symbols[0] == Symbol.MACRO:
        if _is_define(tokens[0]):
            return Division.DATA, [0]
        return Division.PREAMBLE, []

    start = 1 if symbols[0] == Symbol.STATIC else 0

    if start < len(symbols) and symbols[start] == Symbol.TYPEDEF:
        name = _pointer_name(symbols, start)
        if name is None:
            name = _last_top_level_id(tokens, start)
        return Division.TYPEDEF, [name] if name is not None else []

    if (start + 1 < len(symbols) and symbols[start] in _TAG_KEYWORDS
            and symbols[start + 1] == Symbol.ID):
        after = start + 2
        if after >= len(symbols) or symbols[after] == Symbol.SEMI:
            return Division.TAG, [start + 1]
        if symbols[after] == Symbol.LBRACE:
            declarator = _id_after(symbols, _match(symbols, after))
            if declarator is None:
                return Division.TAG, [start + 1]
            return Division.DATA, [declarator]

    function = _function(tokens, start)
    if function is not None:
        return Division.FUNCTION, function

    name = _last_top_level_id(tokens, start)
    return Division.DATA, [name] if name is not None else []


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_define(token: Token) -> bool:
    words = token.text.lstrip("#").split()
    return len(words) >= 2 and words[0] == "define"


def _is_assign(token: Token) -> bool:
    return token.symbol == Symbol.OPERATOR and token.text == "="


def _match(symbols: list[Symbol], i: int) -> int:
    """Index of the bracket closing the one at *i*; the last index if unclosed."""
    opening, closing = symbols[i], _CLOSE[symbols[i]]
    level = 0
    for j in range(i, len(symbols)):
        if symbols[j] == opening:
            level += 1
        elif symbols[j] == closing:
            level -= 1
            if level == 0:
                return j
    return len(symbols) - 1


def _id_after(symbols: list[Symbol], i: int) -> int | None:
    for j in range(i + 1, len(symbols)):
        if symbols[j] == Symbol.ID:
            return j
    return None


def _last_top_level_id(tokens: list[Token], start: int) -> int | None:
    """Last depth-0 identifier before ``=``, ``[`` or ``;``."""
    symbols = [t.symbol for t in tokens]
    found = None
    i = start
    while i < len(tokens):
        symbol = symbols[i]
        if symbol in (Symbol.SEMI, Symbol.LBRACK) or _is_assign(tokens[i]):
            break
        if symbol in _CLOSE:
            i = _match(symbols, i) + 1
            continue
        if symbol == Symbol.ID:
            found = i
        i += 1
    return found


def _pointer_name(symbols: list[Symbol], start: int) -> int | None:
    """Name of a ``( * name`` function-pointer declarator."""
    i = start
    while i < len(symbols) - 2:
        if symbols[i] == Symbol.LBRACE:
            i = _match(symbols, i) + 1
            continue
        if (symbols[i] == Symbol.LPAREN and symbols[i + 1] == Symbol.OPERATOR
                and symbols[i + 2] == Symbol.ID):
            return i + 2
        i += 1
    return None


def _function(tokens: list[Token], start: int) -> list[int] | None:
    symbols = [t.symbol for t in tokens]
    i = start
    while i < len(symbols):
        symbol = symbols[i]
        if symbol in (Symbol.SEMI, Symbol.LBRACE) or _is_assign(tokens[i]):
            return None
        if symbol in _GENERICS and i + 1 < len(symbols) \
                and symbols[i + 1] == Symbol.LPAREN:
            lparen = _match(symbols, i + 1) + 1
        elif symbol == Symbol.ID:
            lparen = i + 1
        elif symbol in _CLOSE:
            i = _match(symbols, i) + 1
            continue
        else:
            i += 1
            continue
        if lparen < len(symbols) and symbols[lparen] == Symbol.LPAREN:
            rparen = _match(symbols, lparen)
            after = rparen + 1
            if after >= len(symbols) or symbols[after] in (
                    Symbol.SEMI, Symbol.LBRACE):
                return [i] + _parameters(symbols, lparen, rparen)
        i += 1
    return None


def _parameters(symbols: list[Symbol], lparen: int, rparen: int) -> list[int]:
    params: list[int] = []
    group: list[int] = []
    i = lparen + 1
    while i <= rparen:
        if i == rparen or symbols[i] == Symbol.COMMA:
            index = _group_name(symbols, group)
            if index is not None:
                params.append(index)
            group = []
        elif symbols[i] in _CLOSE:
            close = min(_match(symbols, i), rparen - 1)
            group.extend(range(i, close + 1))
            i = close
        else:
            group.append(i)
        i += 1
    return params


def _group_name(symbols: list[Symbol], group: list[int]) -> int | None:
    """The identifier a parameter group declares, if any."""
    for a, b, c in zip(group, group[1:], group[2:]):
        if (symbols[a] == Symbol.LPAREN and symbols[b] == Symbol.OPERATOR
                and symbols[c] == Symbol.ID):
            return c
    depth = 0
    found = None
    for i in group:
        if symbols[i] in _CLOSE:
            depth += 1
        elif symbols[i] in _CLOSE.values():
            depth -= 1
        elif depth == 0 and symbols[i] == Symbol.ID:
            found = i
    return found
