"""Lexical symbols shared by the scanner, segmenter and renderers.

Every token carries one :class:`Symbol`.  Symbols fall into three
categories that drive where the segmenter files a token:

* ``"~"`` — documentation text (doc buffer, attribute header or contents),
* ``"@"`` — an attribute marker that opens a new :class:`Attribute`,
* ``""``  — code.
"""

from __future__ import annotations

import enum


class Symbol(enum.Enum):
    # ---- code ----
    ID = enum.auto()
    CONSTANT = enum.auto()
    OPERATOR = enum.auto()
    COMMA = enum.auto()
    SEMI = enum.auto()
    LPAREN = enum.auto()
    RPAREN = enum.auto()
    LBRACK = enum.auto()
    RBRACK = enum.auto()
    LBRACE = enum.auto()
    RBRACE = enum.auto()
    STATIC = enum.auto()
    VOID = enum.auto()
    STRUCT = enum.auto()
    UNION = enum.auto()
    ENUM = enum.auto()
    TYPEDEF = enum.auto()
    MACRO = enum.auto()
    LOCAL_INCLUDE = enum.auto()
    ID_ONE_GENERIC = enum.auto()
    ID_TWO_GENERICS = enum.auto()
    ID_THREE_GENERICS = enum.auto()

    # ---- doc structure ----
    DOC_BEGIN = enum.auto()
    DOC_END = enum.auto()
    DOC_LEFT = enum.auto()
    DOC_RIGHT = enum.auto()
    DOC_COMMA = enum.auto()
    SPACE = enum.auto()
    NEWLINE = enum.auto()
    PARAGRAPH = enum.auto()

    # ---- doc text ----
    WORD = enum.auto()
    DOC_ID = enum.auto()
    ESCAPE_BACKSLASH = enum.auto()
    ESCAPE_BACKQUOTE = enum.auto()
    ESCAPE_AT = enum.auto()
    ESCAPE_UNDERSCORE = enum.auto()
    ESCAPE_AMPERSAND = enum.auto()
    ESCAPE_LT = enum.auto()
    ESCAPE_GT = enum.auto()
    DOC_LBRACE = enum.auto()
    DOC_RBRACE = enum.auto()
    URL = enum.auto()
    CITE = enum.auto()
    SEE_FN = enum.auto()
    SEE_TAG = enum.auto()
    SEE_TYPEDEF = enum.auto()
    SEE_DATA = enum.auto()
    MATH_BEGIN = enum.auto()
    MATH_END = enum.auto()
    ITALICS = enum.auto()

    # ---- attributes ----
    ATT_TITLE = enum.auto()
    ATT_PARAM = enum.auto()
    ATT_AUTHOR = enum.auto()
    ATT_STD = enum.auto()
    ATT_DEPEND = enum.auto()
    ATT_VERSION = enum.auto()
    ATT_SINCE = enum.auto()
    ATT_FIXME = enum.auto()
    ATT_DEPRECATED = enum.auto()
    ATT_LICENSE = enum.auto()
    ATT_RETURN = enum.auto()
    ATT_THROWS = enum.auto()
    ATT_IMPLEMENTS = enum.auto()
    ATT_ORDER = enum.auto()
    ATT_ALLOW = enum.auto()

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Attribute keywords
# ---------------------------------------------------------------------------

ATTRIBUTE_KEYWORDS: dict[str, Symbol] = {
    "title": Symbol.ATT_TITLE,
    "param": Symbol.ATT_PARAM,
    "author": Symbol.ATT_AUTHOR,
    "std": Symbol.ATT_STD,
    "depend": Symbol.ATT_DEPEND,
    "version": Symbol.ATT_VERSION,
    "since": Symbol.ATT_SINCE,
    "fixme": Symbol.ATT_FIXME,
    "deprecated": Symbol.ATT_DEPRECATED,
    "license": Symbol.ATT_LICENSE,
    "return": Symbol.ATT_RETURN,
    "throws": Symbol.ATT_THROWS,
    "implements": Symbol.ATT_IMPLEMENTS,
    "order": Symbol.ATT_ORDER,
    "allow": Symbol.ATT_ALLOW,
}

ATTRIBUTE_SYMBOLS: frozenset[Symbol] = frozenset(ATTRIBUTE_KEYWORDS.values())

SEE_SYMBOLS: dict[str, Symbol] = {
    "fn": Symbol.SEE_FN,
    "tag": Symbol.SEE_TAG,
    "typedef": Symbol.SEE_TYPEDEF,
    "data": Symbol.SEE_DATA,
}

GENERIC_SYMBOLS: dict[int, Symbol] = {
    1: Symbol.ID_ONE_GENERIC,
    2: Symbol.ID_TWO_GENERICS,
    3: Symbol.ID_THREE_GENERICS,
}

_DOC_TEXT: frozenset[Symbol] = frozenset({
    Symbol.WORD, Symbol.DOC_ID,
    Symbol.ESCAPE_BACKSLASH, Symbol.ESCAPE_BACKQUOTE, Symbol.ESCAPE_AT,
    Symbol.ESCAPE_UNDERSCORE, Symbol.ESCAPE_AMPERSAND, Symbol.ESCAPE_LT,
    Symbol.ESCAPE_GT, Symbol.DOC_LBRACE, Symbol.DOC_RBRACE,
    Symbol.URL, Symbol.CITE,
    Symbol.SEE_FN, Symbol.SEE_TAG, Symbol.SEE_TYPEDEF, Symbol.SEE_DATA,
    Symbol.MATH_BEGIN, Symbol.MATH_END, Symbol.ITALICS,
    Symbol.SPACE, Symbol.NEWLINE, Symbol.PARAGRAPH,
})


def mark(symbol: Symbol) -> str:
    """Return the filing category of *symbol*: ``"~"``, ``"@"`` or ``""``."""
    if symbol in _DOC_TEXT:
        return "~"
    if symbol in ATTRIBUTE_SYMBOLS:
        return "@"
    return ""


def attribute_name(symbol: Symbol) -> str:
    """``Symbol.ATT_PARAM`` -> ``"param"``."""
    return symbol.name[len("ATT_"):].lower()


# ---------------------------------------------------------------------------
# Implicit separation
# ---------------------------------------------------------------------------


def wants_separator_before(symbol: Symbol) -> bool:
    """Does *symbol* need a separator when the previous one left one pending?

    Only code renders through implicit separation; doc text carries explicit
    ``SPACE`` tokens.
    """
    match symbol:
        case (Symbol.ID | Symbol.CONSTANT | Symbol.OPERATOR | Symbol.STATIC
              | Symbol.VOID | Symbol.STRUCT | Symbol.UNION | Symbol.ENUM
              | Symbol.TYPEDEF | Symbol.MACRO | Symbol.LBRACE
              | Symbol.ID_ONE_GENERIC | Symbol.ID_TWO_GENERICS
              | Symbol.ID_THREE_GENERICS):
            return True
        case _:
            return False


def leaves_separator_after(symbol: Symbol) -> bool:
    """Does emitting *symbol* leave a separator pending for the next one?"""
    match symbol:
        case (Symbol.ID | Symbol.CONSTANT | Symbol.OPERATOR | Symbol.STATIC
              | Symbol.VOID
              | Symbol.STRUCT | Symbol.UNION | Symbol.ENUM | Symbol.TYPEDEF
              | Symbol.MACRO | Symbol.COMMA | Symbol.SEMI | Symbol.RPAREN
              | Symbol.RBRACK | Symbol.LBRACE | Symbol.RBRACE
              | Symbol.ID_ONE_GENERIC | Symbol.ID_TWO_GENERICS
              | Symbol.ID_THREE_GENERICS):
            return True
        case _:
            return False
