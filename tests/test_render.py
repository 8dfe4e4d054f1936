"""Tests for whole-document rendering."""

from markdown_it import MarkdownIt

from cdocgen.checker import cull
from cdocgen.models import Document, Source
from cdocgen.render import render_document
from cdocgen.scanner.scanner import scan_source
from cdocgen.scanner.segmenter import Segmenter
from cdocgen.style import Dialect

QUEUE = (
    "/** @title Queue\n"
    " * @license MIT */\n"
    "\n"
    "/** Makes a queue of `n` slots. @param[n] Capacity. */\n"
    "int queue_new(int n);\n"
)


def _document(text: str, label: str = "t.c") -> Document:
    document = Document()
    scan_source(Segmenter(document), Source(label, text))
    return document


def _rules(findings) -> list[str]:
    return [f.rule_id for f in findings]


def _inline_types(tokens) -> set[str]:
    out = set()
    for token in tokens:
        for child in token.children or []:
            out.add(child.type)
    return out


class TestHtml:
    def test_skeleton(self):
        text, findings = render_document(_document(QUEUE), Dialect.HTML)
        assert findings == []
        assert text.startswith("<!DOCTYPE html>\n<html>\n<head>\n")
        assert "<title>Queue</title>\n" in text
        assert "</head>\n\n<body>\n\n" in text
        assert text.endswith("</body>\n</html>\n")

    def test_function_segment(self):
        text, _ = render_document(_document(QUEUE), Dialect.HTML)
        assert "<h1>Queue</h1>" in text
        assert "<h2>Functions</h2>" in text
        assert '<div><a id="fn:queue_new"></a><h3>queue_new</h3>' in text
        assert "<pre>\nint queue_new(int n);\n</pre>" in text
        assert "<p>Makes a queue of <code>n</code> slots.</p>" in text
        assert "\t<dt>Parameter: n</dt>\n\t<dd>Capacity.</dd>\n" in text

    def test_license_section(self):
        text, _ = render_document(_document(QUEUE), Dialect.HTML)
        assert "<h2>License</h2>\n\n<p>MIT</p>" in text
        assert text.index("Functions") < text.index("License")

    def test_title_falls_back_to_first_label(self):
        text, _ = render_document(
            _document("/** X. */\nint x;", label="queue.h"), Dialect.HTML)
        assert "<title>queue.h</title>" in text
        assert "<h1>queue.h</h1>" in text

    def test_section_order(self):
        text, _ = render_document(_document(
            "/** F. */\nint f(void);\n"
            "/** D. */\nint d;\n"
            "/** T. */\ntypedef int T;\n"
        ), Dialect.HTML)
        typedefs = text.index("<h2>Typedef Aliases</h2>")
        data = text.index("<h2>General Declarations</h2>")
        functions = text.index("<h2>Functions</h2>")
        assert typedefs < data < functions
        assert "Struct, Union, and Enum Definitions" not in text

    def test_function_body_is_omitted(self):
        text, _ = render_document(
            _document("/** Less. */\nint less(int a, int b) { return a < b; }"),
            Dialect.HTML)
        assert "<pre>\nint less(int a, int b)\n</pre>" in text
        assert "return" not in text

    def test_malformed_markup_is_isolated(self):
        text, findings = render_document(_document(
            "/** Broken \\url{x */\nint f(void);\n"
            "/** Fine. */\nint g(void);\n"
        ), Dialect.HTML)
        [finding] = findings
        assert finding.rule_id == "MARKUP_MALFORMED"
        assert finding.explanation == "expected: \\url{<url>}"
        assert finding.line == 1
        assert "<h3>g</h3>" in text
        assert "<p>Fine.</p>" in text
        assert text.endswith("</body>\n</html>\n")

    def test_italics_across_paragraph_in_preamble(self):
        document = _document("/** @license MIT\n\n _a\n *\n * b_ c */\n")
        cull(document)
        text, findings = render_document(document, Dialect.HTML)
        assert _rules(findings) == ["MARKUP_MALFORMED"]
        assert findings[0].explanation == "expected: _<italics>_"
        assert "<h2>License</h2>\n\n<p>MIT</p>" in text
        assert text.endswith("</body>\n</html>\n")

    def test_italics_across_paragraph_in_declaration(self):
        text, findings = render_document(_document(
            "/** _a\n *\n * b_ c */\nint foo(int bar);\n"
        ), Dialect.HTML)
        assert _rules(findings) == ["MARKUP_MALFORMED"]
        assert "<h3>foo</h3>" in text
        # Nothing of the abandoned segment leaks past its section.
        assert text.endswith("</div>\n\n</body>\n</html>\n")


class TestMarkdown:
    def test_structure(self):
        text, findings = render_document(_document(QUEUE), Dialect.MD)
        assert findings == []
        tokens = MarkdownIt().parse(text)
        headings = [t.tag for t in tokens if t.type == "heading_open"]
        assert headings == ["h1", "h2", "h3", "h2"]
        [block] = [t for t in tokens if t.type == "code_block"]
        assert block.content == "int queue_new(int n);\n"

    def test_inline_markup(self):
        text, _ = render_document(_document(
            "/** An _important_ queue of `n` slots. */\nint queue_new(int n);\n"
        ), Dialect.MD)
        assert "An _important_ queue of `n` slots\\." in text
        types = _inline_types(MarkdownIt().parse(text))
        assert "em_open" in types
        assert "code_inline" in types

    def test_name_is_escaped_in_heading(self):
        text, _ = render_document(_document(QUEUE), Dialect.MD)
        assert " ### queue\\_new ###" in text
        assert "<a id=" not in text
