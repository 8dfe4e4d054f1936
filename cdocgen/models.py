"""Data models used throughout cdocgen."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from cdocgen.symbols import Symbol

# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------


class Severity(enum.IntEnum):
    """Diagnostic severity — ordered so higher value == more severe."""

    WARNING = 1
    ERROR = 2

    @classmethod
    def from_str(cls, label: str) -> Severity:
        return cls[label.upper()]

    def __str__(self) -> str:
        return self.name.lower()


# ---------------------------------------------------------------------------
# Finding
# ---------------------------------------------------------------------------


@dataclass
class Finding:
    """A single diagnostic about the input or the assembled document."""

    rule_id: str
    severity: Severity
    file_path: str
    line: int
    excerpt: str
    explanation: str
    symbol: str = ""

    def sort_key(self) -> tuple:
        """Deterministic sort: severity desc, file asc, line asc."""
        return (-self.severity.value, self.file_path, self.line)

    def format(self) -> str:
        """``label:line, symbol "snippet": message``."""
        loc = f"{self.file_path}:{self.line}"
        if self.symbol:
            loc += f", {self.symbol} \"{self.excerpt}\""
        return f"{loc}: {self.explanation}"


# ---------------------------------------------------------------------------
# Source text and tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Source:
    """Text of one input file; tokens reference it by offset."""

    label: str
    text: str
    path: str | None = None


@dataclass(frozen=True)
class Token:
    """Immutable view ``[start, start + length)`` into a :class:`Source`."""

    symbol: Symbol
    source: Source
    start: int
    length: int
    line: int

    @property
    def text(self) -> str:
        return self.source.text[self.start:self.start + self.length]

    @property
    def label(self) -> str:
        return self.source.label

    def same_text(self, other: Token) -> bool:
        """Exact, length-sensitive comparison of the raw spans."""
        return self.length == other.length and self.text == other.text

    def snippet(self, limit: int = 16) -> str:
        return self.text[:limit]

    def __str__(self) -> str:
        if self.symbol in (Symbol.SPACE, Symbol.PARAGRAPH):
            return "~" if self.symbol == Symbol.SPACE else "^"
        return f"{self.symbol}<{self.snippet(9)}>"


# Debug previews stay under this many characters.
PREVIEW_SIZE = 256


class TokenBuffer:
    """Append-only (save for :meth:`splice`) sequence of tokens.

    Indices into the buffer stay valid as it grows; a splice invalidates
    every index at or after its start.
    """

    def __init__(self, tokens: Iterable[Token] = ()) -> None:
        self._tokens: list[Token] = list(tokens)

    def append(self, token: Token) -> Token:
        self._tokens.append(token)
        return token

    def splice(self, start: int, stop: int,
               replacement: Iterable[Token] = ()) -> None:
        """Replace ``[start, stop)`` with *replacement*, in place.

        The segmenter never calls this; it collapses whitespace as it files.
        """
        if not 0 <= start <= stop <= len(self._tokens):
            raise IndexError(f"bad splice [{start}, {stop}) of {len(self)}")
        self._tokens[start:stop] = list(replacement)

    def __getitem__(self, index: int) -> Token:
        return self._tokens[index]

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __bool__(self) -> bool:
        return bool(self._tokens)

    @property
    def first(self) -> Token | None:
        return self._tokens[0] if self._tokens else None

    def preview(self, limit: int = PREVIEW_SIZE) -> tuple[str, bool]:
        """``[a, b, ...]`` in fewer than *limit* characters, for debug output.

        Returns ``(text, is_truncated)``; a truncated list ends ``...]``.
        """
        budget = limit - 1 - len("...]")
        out = "["
        for i, token in enumerate(self._tokens):
            piece = (", " if i else "") + str(token)
            if len(out) + len(piece) > budget:
                return out + "...]", True
            out += piece
        return out + "]", False


# ---------------------------------------------------------------------------
# Division
# ---------------------------------------------------------------------------


class Division(enum.Enum):
    """The role of a Segment in the document."""

    UNDECIDED = "undecided"
    PREAMBLE = "preamble"
    TAG = "tag"
    TYPEDEF = "typedef"
    DATA = "data"
    FUNCTION = "function"

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Attribute and Segment
# ---------------------------------------------------------------------------


@dataclass
class Attribute:
    """One ``@tag[header] contents`` instance."""

    token: Token
    header: TokenBuffer = field(default_factory=TokenBuffer)
    contents: TokenBuffer = field(default_factory=TokenBuffer)

    @property
    def symbol(self) -> Symbol:
        return self.token.symbol


@dataclass
class Segment:
    """A classified unit of source: doc text, code and attributes."""

    division: Division = Division.UNDECIDED
    doc: TokenBuffer = field(default_factory=TokenBuffer)
    code: TokenBuffer = field(default_factory=TokenBuffer)
    params: list[int] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)

    def attributes_of(self, symbol: Symbol) -> list[Attribute]:
        return [a for a in self.attributes if a.symbol == symbol]

    def has_attribute(self, symbol: Symbol) -> bool:
        return any(a.symbol == symbol for a in self.attributes)

    def param_token(self, index: int) -> Token | None:
        """The *index*-th recorded code token, or None if out of range/stale."""
        if index >= len(self.params):
            return None
        i = self.params[index]
        if i >= len(self.code):
            return None
        return self.code[i]

    def stale_params(self) -> list[int]:
        """Recorded indices that no longer fall inside ``code``."""
        return [i for i in self.params if i >= len(self.code)]

    @property
    def name_token(self) -> Token | None:
        return self.param_token(0)

    @property
    def parameters(self) -> list[Token]:
        """Declared parameter tokens (everything after the name)."""
        out = []
        for n in range(1, len(self.params)):
            token = self.param_token(n)
            if token is not None:
                out.append(token)
        return out

    @property
    def name(self) -> str:
        """Declared name, as written in the source.

        A generic name such as ``PT_(new)`` is the concatenation of the
        whole group; a ``#define`` is named by its macro identifier.
        """
        token = self.name_token
        if token is None:
            return ""
        if token.symbol == Symbol.MACRO:
            words = token.text.replace("#", " ").split()
            if len(words) >= 2 and words[0] == "define":
                return words[1].split("(", 1)[0]
            return token.text
        if token.symbol in (Symbol.ID_ONE_GENERIC, Symbol.ID_TWO_GENERICS,
                            Symbol.ID_THREE_GENERICS):
            parts = []
            i = self.params[0]
            while i < len(self.code):
                parts.append(self.code[i].text)
                if self.code[i].symbol == Symbol.RPAREN:
                    break
                i += 1
            return "".join(parts)
        return token.text

    @property
    def first_token(self) -> Token | None:
        """A representative token for diagnostics."""
        for candidate in (self.name_token, self.code.first, self.doc.first):
            if candidate is not None:
                return candidate
        return self.attributes[0].token if self.attributes else None

    def summary(self) -> str:
        return (f"Segment {self.division} {self.name or '(anonymous)'}: "
                f"code {self.code.preview()[0]} params {self.params} "
                f"doc {self.doc.preview()[0]} "
                f"attributes {[str(a.symbol) for a in self.attributes]}")


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


@dataclass
class Document:
    """Top-level store: owns every Segment and the diagnostics gathered."""

    segments: list[Segment] = field(default_factory=list)
    sources: list[Source] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    def new_segment(self) -> Segment:
        segment = Segment()
        self.segments.append(segment)
        return segment

    def truncate(self, size: int) -> None:
        """Discard, whole, every Segment added after the store had *size*."""
        del self.segments[size:]

    def of_division(self, division: Division) -> list[Segment]:
        return [s for s in self.segments if s.division == division]

    @property
    def labels(self) -> list[str]:
        return [s.label for s in self.sources]


# ---------------------------------------------------------------------------
# Check result (aggregate)
# ---------------------------------------------------------------------------


@dataclass
class CheckResult:
    """Complete diagnostic output of a cdocgen run."""

    inputs: list[str] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)
    segment_count: int = 0
    fail_on: str = "error"

    @property
    def all_findings(self) -> list[Finding]:
        return sorted(self.findings, key=lambda f: f.sort_key())
