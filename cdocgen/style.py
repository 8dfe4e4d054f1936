"""Style engine — nested output contexts with lazy delimiters.

Each pushed frame carries begin/separator/end text.  Nothing is written for
a frame until something is printed inside it, so an empty paragraph costs
nothing and the separator appears only between two items.

Say the stack is ``h1 > p`` and nothing has been printed: the output is
empty.  Printing ``foo`` gives ``<h1><p>foo``; popping twice gives
``<h1><p>foo</p>\\n\\n</h1>\\n\\n``.
"""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass

from cdocgen.symbols import Symbol, leaves_separator_after, wants_separator_before


class Dialect(str, enum.Enum):
    """Output dialect."""

    HTML = "html"
    MD = "md"

    @classmethod
    def from_str(cls, label: str) -> Dialect:
        return cls(label.lower())


@dataclass(frozen=True)
class StyleText:
    """Static description of a frame; block frames can stand alone."""

    name: str
    begin: str = ""
    sep: str = ""
    end: str = ""
    is_block: bool = False


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

PLAIN_TEXT = StyleText("text", "", " ", "")
HTML_TITLE = StyleText("title", "<title>", "", "</title>\n", True)

# name -> (html, md)
_STYLES: dict[str, tuple[StyleText, StyleText]] = {
    "div": (StyleText("div", "<div>", "", "</div>\n\n", True),
            StyleText("div", "", "", "\n\n", True)),
    "para": (StyleText("para", "<p>", " ", "</p>\n\n", True),
             StyleText("para", "", " ", "\n\n", True)),
    "code": (StyleText("code", "<code>", " ", "</code>"),
             StyleText("code", "`", " ", "`")),
    "pre": (StyleText("pre", "<pre>\n", "", "</pre>\n\n", True),
            StyleText("pre", "    ", "", "\n", True)),
    "preline": (StyleText("preline", "", "\n", "\n"),
                StyleText("preline", "", "\n    ", "\n")),
    "h1": (StyleText("h1", "<h1>", "", "</h1>\n\n", True),
           StyleText("h1", " # ", "", " #\n\n", True)),
    "h2": (StyleText("h2", "<h2>", "", "</h2>\n\n", True),
           StyleText("h2", " ## ", "", " ##\n\n", True)),
    "h3": (StyleText("h3", "<h3>", "", "</h3>\n\n", True),
           StyleText("h3", " ### ", "", " ###\n\n", True)),
    "dl": (StyleText("dl", "<dl>\n", "", "</dl>\n\n", True),
           StyleText("dl", "", "", "\n\n", True)),
    "em": (StyleText("em", "<em>", "", "</em>"),
           StyleText("em", "_", "", "_")),
}


def style_text(name: str, dialect: Dialect) -> StyleText:
    """The frame called *name* in *dialect*; KeyError if unknown."""
    html, md = _STYLES[name]
    return html if dialect == Dialect.HTML else md


def desc_text(title: str, dialect: Dialect) -> StyleText:
    """A definition item whose term is *title* (already encoded)."""
    if dialect == Dialect.HTML:
        return StyleText("desc", f"\t<dt>{title}</dt>\n\t<dd>", "", "</dd>\n")
    return StyleText("desc", f" - {title}  \n   ", "", "\n")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

_HTML_ENTITIES = {"<": "&lt;", ">": "&gt;", "&": "&amp;"}
_MD_SPECIAL = frozenset("\\`*_{}[]()#+-.!")


def _encode_char(ch: str, dialect: Dialect) -> str:
    if dialect == Dialect.HTML:
        return _HTML_ENTITIES.get(ch, ch)
    return "\\" + ch if ch in _MD_SPECIAL else ch


def encode(text: str, dialect: Dialect) -> str:
    """Escape *text* for *dialect*."""
    return "".join(_encode_char(ch, dialect) for ch in text)


# ---------------------------------------------------------------------------
# Stack
# ---------------------------------------------------------------------------


class Lazy(enum.Enum):
    BEGIN = "begin"
    ITEM = "item"
    SEPARATE = "separate"


@dataclass
class Frame:
    text: StyleText
    lazy: Lazy = Lazy.BEGIN


class StyleStack:
    """The stack of active frames and the stream they write to."""

    def __init__(self, dialect: Dialect = Dialect.HTML,
                 out: io.StringIO | None = None) -> None:
        self.dialect = dialect
        self.out = out if out is not None else io.StringIO()
        self.frames: list[Frame] = []
        self.is_before_sep = False

    def __len__(self) -> int:
        return len(self.frames)

    def style(self, name: str) -> StyleText:
        return style_text(name, self.dialect)

    def peek(self) -> StyleText | None:
        return self.frames[-1].text if self.frames else None

    def push(self, text: StyleText | str) -> None:
        if isinstance(text, str):
            text = self.style(text)
        self.frames.append(Frame(text))

    def pop(self) -> None:
        """Pop the top frame, closing it if anything was printed inside."""
        frame = self.frames.pop()
        if frame.lazy is Lazy.BEGIN:
            return
        self.out.write(frame.text.end)
        if self.frames:
            self.frames[-1].lazy = Lazy.SEPARATE

    def pop_level(self) -> None:
        """Pop until a block frame has been popped."""
        while self.frames:
            frame = self.frames[-1]
            self.pop()
            if frame.text.is_block:
                break

    def pop_push(self) -> None:
        """Close and reopen the top frame."""
        text = self.frames[-1].text
        self.pop()
        self.push(text)

    def unwind(self, depth: int) -> None:
        """Pop until at most *depth* frames remain."""
        while len(self.frames) > depth:
            self.pop()

    def prepare(self, symbol: Symbol | None = None) -> None:
        """Bring every frame to ITEM; call right before printing."""
        for frame in self.frames:
            if frame.lazy is Lazy.ITEM:
                continue
            if frame.lazy is Lazy.SEPARATE:
                self.out.write(frame.text.sep)
            else:
                self.out.write(frame.text.begin)
            frame.lazy = Lazy.ITEM
            self.is_before_sep = False
        if symbol is None:
            self.is_before_sep = False
            return
        # No explicit separation: is there an implied one?
        if self.is_before_sep and wants_separator_before(symbol) and self.frames:
            self.out.write(self.frames[-1].text.sep)
        self.is_before_sep = leaves_separator_after(symbol)

    def separate(self) -> None:
        """Deferred separator before the next item."""
        if self.frames and self.frames[-1].lazy is Lazy.ITEM:
            self.frames[-1].lazy = Lazy.SEPARATE

    def write(self, text: str) -> None:
        """Write *text* verbatim, no preparation."""
        self.out.write(text)

    def emit(self, text: str, symbol: Symbol | None = None) -> None:
        """Prepare, then write *text* encoded for the dialect."""
        self.prepare(symbol)
        self.out.write(encode(text, self.dialect))

    def getvalue(self) -> str:
        return self.out.getvalue()
