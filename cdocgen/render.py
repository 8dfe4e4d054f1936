"""Document renderer — drives the style engine over a culled Document."""

from __future__ import annotations

import logging

from cdocgen.markup import MarkupError, render_tokens
from cdocgen.models import Attribute, Division, Document, Finding, Segment
from cdocgen.style import (
    HTML_TITLE,
    PLAIN_TEXT,
    Dialect,
    StyleStack,
    desc_text,
    encode,
)
from cdocgen.symbols import Symbol

log = logging.getLogger(__name__)

# Sections, in output order.
SECTIONS: list[tuple[Division, str]] = [
    (Division.TYPEDEF, "Typedef Aliases"),
    (Division.TAG, "Struct, Union, and Enum Definitions"),
    (Division.DATA, "General Declarations"),
    (Division.FUNCTION, "Functions"),
]

ANCHORS = {
    Division.FUNCTION: "fn",
    Division.TAG: "tag",
    Division.TYPEDEF: "typedef",
    Division.DATA: "data",
}

PREAMBLE_ATTRIBUTES: list[tuple[Symbol, str]] = [
    (Symbol.ATT_AUTHOR, "Author"),
    (Symbol.ATT_STD, "Standard"),
    (Symbol.ATT_DEPEND, "Dependencies"),
    (Symbol.ATT_VERSION, "Version"),
    (Symbol.ATT_SINCE, "Since"),
    (Symbol.ATT_FIXME, "Fixme"),
    (Symbol.ATT_DEPRECATED, "Deprecated"),
]

SEGMENT_ATTRIBUTES: list[tuple[Symbol, str]] = [
    (Symbol.ATT_PARAM, "Parameter"),
    (Symbol.ATT_RETURN, "Return"),
    (Symbol.ATT_THROWS, "Throws"),
    (Symbol.ATT_IMPLEMENTS, "Implements"),
    (Symbol.ATT_ORDER, "Order"),
] + PREAMBLE_ATTRIBUTES


def render_document(document: Document,
                    dialect: Dialect = Dialect.HTML) -> tuple[str, list[Finding]]:
    """Render *document*; returns the text and any markup findings."""
    renderer = _Renderer(document, dialect)
    renderer.run()
    return renderer.style.getvalue(), renderer.findings


class _Renderer:
    def __init__(self, document: Document, dialect: Dialect) -> None:
        self.document = document
        self.dialect = dialect
        self.style = StyleStack(dialect)
        self.findings: list[Finding] = []

    def run(self) -> None:
        preamble = self.document.of_division(Division.PREAMBLE)
        title = self._title_attribute(preamble)
        if self.dialect == Dialect.HTML:
            self.style.write("<!DOCTYPE html>\n<html>\n<head>\n"
                             "<meta charset=\"UTF-8\">\n")
            self.style.push(HTML_TITLE)
            self.style.emit(self._plain_title(title))
            self.style.pop()
            self.style.write("</head>\n\n<body>\n\n")

        self._guarded(self._heading, title)
        for segment in preamble:
            self._guarded(self._preamble, segment)
        for division, heading in SECTIONS:
            segments = self.document.of_division(division)
            if not segments:
                continue
            self._plain_block("h2", heading)
            for segment in segments:
                self._guarded(self._segment, segment)
        self._license()

        self.style.unwind(0)
        if self.dialect == Dialect.HTML:
            self.style.write("</body>\n</html>\n")

    # -----------------------------------------------------------------------
    # Pieces
    # -----------------------------------------------------------------------

    def _guarded(self, render, item) -> None:
        """Run *render*; malformed markup abandons just that item."""
        depth = len(self.style)
        try:
            render(item)
        except MarkupError as exc:
            log.debug("markup error: %s", exc)
            self.findings.append(exc.to_finding())
            self.style.unwind(depth)

    @staticmethod
    def _title_attribute(preamble: list[Segment]) -> Attribute | None:
        for segment in preamble:
            for attribute in segment.attributes_of(Symbol.ATT_TITLE):
                return attribute
        return None

    def _plain_title(self, title: Attribute | None) -> str:
        if title is not None:
            return " ".join(t.text for t in title.contents if t.text)
        labels = self.document.labels
        return labels[0] if labels else ""

    def _heading(self, title: Attribute | None) -> None:
        if title is None:
            self._plain_block("h1", self._plain_title(None))
            return
        self.style.push("h1")
        self.style.push(PLAIN_TEXT)
        render_tokens(title.contents, self.style)
        self.style.pop()
        self.style.pop()

    def _plain_block(self, name: str, text: str) -> None:
        self.style.push(name)
        self.style.emit(text)
        self.style.pop()

    def _paragraphs(self, tokens) -> None:
        depth = len(self.style)
        self.style.push("para")
        render_tokens(tokens, self.style)
        self.style.unwind(depth)

    def _descriptions(self, segment: Segment,
                      kinds: list[tuple[Symbol, str]]) -> None:
        self.style.push("dl")
        for symbol, label in kinds:
            for attribute in segment.attributes_of(symbol):
                title = encode(label, self.dialect)
                if attribute.header:
                    header = ", ".join(t.text for t in attribute.header if t.text)
                    title += ": " + encode(header, self.dialect)
                self.style.push(desc_text(title, self.dialect))
                self.style.push(PLAIN_TEXT)
                render_tokens(attribute.contents, self.style)
                self.style.pop()
                self.style.pop()
        self.style.pop()

    def _preamble(self, segment: Segment) -> None:
        self._paragraphs(segment.doc)
        self._descriptions(segment, PREAMBLE_ATTRIBUTES)

    def _segment(self, segment: Segment) -> None:
        depth = len(self.style)
        self.style.push("div")
        if self.dialect == Dialect.HTML:
            self.style.prepare()
            anchor = f"{ANCHORS[segment.division]}:{segment.name}"
            self.style.write(f'<a id="{encode(anchor, self.dialect)}"></a>')
        self._plain_block("h3", segment.name)
        self.style.push("pre")
        self.style.push("preline")
        self.style.push(PLAIN_TEXT)
        render_tokens(segment.code, self.style, code=True)
        self.style.pop()
        self.style.pop()
        self.style.pop()
        self._paragraphs(segment.doc)
        self._descriptions(segment, SEGMENT_ATTRIBUTES)
        self.style.unwind(depth)

    def _license(self) -> None:
        licenses = [a for s in self.document.segments
                    for a in s.attributes_of(Symbol.ATT_LICENSE)]
        if not licenses:
            return
        self._plain_block("h2", "License")
        for attribute in licenses:
            self._guarded(self._paragraphs, attribute.contents)
