"""Tests for the keep filter and the consistency checks."""

from cdocgen.checker import (
    attribute_okay,
    check,
    check_license,
    check_links,
    check_segment,
    cull,
    is_static,
    keep_segment,
)
from cdocgen.models import Division, Document, Segment, Severity, Source, TokenBuffer
from cdocgen.scanner.lexer import tokenize
from cdocgen.scanner.scanner import scan_source
from cdocgen.scanner.segmenter import Segmenter


def _scan(text: str) -> Document:
    document = Document()
    scan_source(Segmenter(document), Source("t.c", text))
    return document


def _rules(findings) -> list[str]:
    return [f.rule_id for f in findings]


def _code(text: str) -> TokenBuffer:
    return TokenBuffer(tokenize(Source("t.c", text)))


class TestParams:
    def test_documented_param(self):
        [segment] = _scan("/** Doc. @param[bar] The bar. */\nint foo(int bar);").segments
        assert check_segment(segment) == []

    def test_extraneous_param(self):
        [segment] = _scan("/** Doc. @param[baz] Baz. */\nint foo(int bar);").segments
        findings = check_segment(segment)
        assert _rules(findings).count("PARAM_EXTRANEOUS") == 1
        extraneous = next(f for f in findings if f.rule_id == "PARAM_EXTRANEOUS")
        assert extraneous.excerpt == "baz"
        assert extraneous.explanation == "extraneous variable"
        assert extraneous.severity == Severity.WARNING

    def test_undocumented_param(self):
        [segment] = _scan("/** Nothing. */\nint foo(int bar, int qux);").segments
        findings = check_segment(segment)
        assert _rules(findings) == ["PARAM_UNDOCUMENTED", "PARAM_UNDOCUMENTED"]
        assert [f.excerpt for f in findings] == ["bar", "qux"]
        assert findings[0].line == 2

    def test_math_span_documents_param(self):
        [segment] = _scan("/** Returns `bar` doubled. */\nint foo(int bar);").segments
        assert check_segment(segment) == []

    def test_return_documents_param(self):
        [segment] = _scan("/** @return bar plus one. */\nint foo(int bar);").segments
        assert check_segment(segment) == []

    def test_one_header_names_several_params(self):
        [segment] = _scan(
            "/** @param[a, b] Operands. */\nint add(int a, int b);").segments
        assert check_segment(segment) == []

    def test_params_only_checked_on_functions(self):
        [segment] = _scan("/** A count. */\nint count;").segments
        assert check_segment(segment) == []


class TestAttributes:
    def test_param_needs_a_header(self):
        [segment] = _scan("/** @param bar */\nint foo(int bar);").segments
        findings = check_segment(segment)
        assert "ATTRIBUTE_USAGE" in _rules(findings)
        usage = next(f for f in findings if f.rule_id == "ATTRIBUTE_USAGE")
        assert usage.explanation.startswith("attribute param not okay")

    def test_empty_allow_is_okay(self):
        [segment] = _scan("/** @allow */\nstatic int x;").segments
        assert attribute_okay(segment.attributes[0])
        assert check_segment(segment) == []

    def test_author_without_contents(self):
        [segment] = _scan("/** Doc. @author */\nint x;").segments
        assert not attribute_okay(segment.attributes[0])

    def test_return_on_typedef_is_out_of_context(self):
        [segment] = _scan("/** @return Nothing. */\ntypedef int Foo;").segments
        assert segment.division == Division.TYPEDEF
        findings = check_segment(segment)
        assert _rules(findings) == ["ATTRIBUTE_CONTEXT"]
        assert "unused in typedef" in findings[0].explanation

    def test_title_belongs_to_preamble(self):
        document = _scan("/** @title Queue */\n/** Doc. @title Again */\nint x;")
        preamble, data = document.segments
        assert check_segment(preamble) == []
        assert _rules(check_segment(data)) == ["ATTRIBUTE_CONTEXT"]


class TestLicense:
    def test_license_present(self):
        document = _scan("/** @license MIT */\n/** X. */\nint x;")
        assert check_license(document) == []

    def test_license_missing(self):
        document = _scan("/** X. */\nint x;")
        [finding] = check_license(document)
        assert finding.rule_id == "LICENSE_MISSING"
        assert finding.file_path == "t.c"
        assert finding.severity == Severity.WARNING

    def test_license_duplicate(self):
        document = _scan("/** @license MIT */\n/** @license BSD */\n")
        [finding] = check_license(document)
        assert finding.rule_id == "LICENSE_DUPLICATE"
        assert finding.line == 2


class TestLinks:
    def test_resolved_link(self):
        document = _scan("/** See <fn:bar>. */\nint foo(void);\n"
                         "/** Bar. */\nvoid bar(void);")
        assert check_links(document) == []

    def test_broken_link(self):
        document = _scan("/** See <fn:nope>. */\nint foo(void);")
        [finding] = check_links(document)
        assert finding.rule_id == "LINK_BROKEN"
        assert finding.excerpt == "<fn:nope>"

    def test_link_division_matters(self):
        document = _scan("/** See <tag:foo>. */\nint foo(void);")
        assert _rules(check_links(document)) == ["LINK_BROKEN"]

    def test_links_in_attribute_contents(self):
        document = _scan("/** @return Like <fn:nope>. */\nint foo(void);")
        assert _rules(check_links(document)) == ["LINK_BROKEN"]


class TestCull:
    def test_is_static(self):
        assert is_static(_code("static int x;"))
        assert is_static(_code("int main(void)"))
        assert not is_static(_code("int x;"))
        assert not is_static(TokenBuffer())

    def test_static_without_allow_is_dropped(self):
        document = _scan("/** Hidden. */\nstatic int hidden(void);\n"
                         "/** Shown. @allow */\nstatic int shown(void);")
        assert cull(document) == 1
        assert [s.name for s in document.segments] == ["shown"]

    def test_undocumented_function_is_kept(self):
        document = _scan("int bare(void);\nint plain;")
        cull(document)
        assert [s.name for s in document.segments] == ["bare"]

    def test_nameless_segment_is_dropped(self):
        doc = _scan("/** Doc. */\nint x;").segments[0].doc
        assert not keep_segment(Segment(division=Division.DATA, doc=doc))
        assert keep_segment(Segment(division=Division.PREAMBLE, doc=doc))

    def test_empty_preamble_is_dropped(self):
        assert not keep_segment(Segment(division=Division.PREAMBLE))


def test_check_runs_every_pass():
    document = _scan("/** See <fn:nope>. */\nint foo(int bar);")
    rules = _rules(check(document))
    assert rules == ["PARAM_UNDOCUMENTED", "LINK_BROKEN", "LICENSE_MISSING"]
