"""Tests for the lazy style engine and dialect encoders."""

from cdocgen.style import (
    PLAIN_TEXT,
    Dialect,
    StyleStack,
    StyleText,
    desc_text,
    encode,
    style_text,
)
from cdocgen.symbols import Symbol

A = StyleText("a", "<a>", "|", "</a>", True)
B = StyleText("b", "<b>", ",", "</b>")


class TestLazyEmission:
    def test_untouched_frames_emit_nothing(self):
        style = StyleStack()
        style.push(A)
        style.push(B)
        style.pop()
        style.pop()
        assert style.getvalue() == ""

    def test_prepare_then_pop_has_no_separator(self):
        style = StyleStack()
        style.push(A)
        style.prepare()
        style.pop()
        assert style.getvalue() == "<a></a>"

    def test_nested_prepare(self):
        style = StyleStack()
        style.push(A)
        style.push(B)
        style.prepare()
        style.pop()
        style.pop()
        assert style.getvalue() == "<a><b></b></a>"

    def test_pop_forces_parent_separation(self):
        style = StyleStack()
        style.push(A)
        style.push(B)
        style.emit("x")
        style.pop()
        style.push(B)
        style.emit("y")
        style.unwind(0)
        assert style.getvalue() == "<a><b>x</b>|<b>y</b></a>"

    def test_separate_only_between_items(self):
        style = StyleStack()
        style.push(B)
        style.separate()
        style.emit("x")
        style.separate()
        style.emit("y")
        style.pop()
        assert style.getvalue() == "<b>x,y</b>"

    def test_pop_push_restarts_frame(self):
        style = StyleStack()
        style.push(A)
        style.push(B)
        style.emit("x")
        style.pop_push()
        style.emit("y")
        style.unwind(0)
        assert style.getvalue() == "<a><b>x</b>|<b>y</b></a>"

    def test_pop_level_stops_at_block(self):
        style = StyleStack()
        style.push(A)
        style.push(A)
        style.push(B)
        style.emit("x")
        style.pop_level()
        assert len(style) == 1
        assert style.getvalue() == "<a><a><b>x</b></a>"


class TestImplicitSeparation:
    def test_identifiers_are_spaced(self):
        style = StyleStack()
        style.push(PLAIN_TEXT)
        style.emit("int", Symbol.ID)
        style.emit("x", Symbol.ID)
        style.emit(";", Symbol.SEMI)
        assert style.getvalue() == "int x;"

    def test_parenthesis_is_not_spaced(self):
        style = StyleStack()
        style.push(PLAIN_TEXT)
        style.emit("f", Symbol.ID)
        style.emit("(", Symbol.LPAREN)
        style.emit("a", Symbol.ID)
        style.emit(")", Symbol.RPAREN)
        assert style.getvalue() == "f(a)"


class TestTables:
    def test_dialects_differ(self):
        assert style_text("para", Dialect.HTML).begin == "<p>"
        assert style_text("para", Dialect.MD).begin == ""
        assert style_text("h1", Dialect.MD).end == " #\n\n"

    def test_desc(self):
        assert desc_text("Author", Dialect.HTML).begin == "\t<dt>Author</dt>\n\t<dd>"
        assert desc_text("Author", Dialect.MD).end == "\n"

    def test_dialect_from_str(self):
        assert Dialect.from_str("MD") is Dialect.MD


class TestEncoding:
    def test_html(self):
        assert encode("a<b>&c", Dialect.HTML) == "a&lt;b&gt;&amp;c"

    def test_md(self):
        assert encode("a_b*c.", Dialect.MD) == "a\\_b\\*c\\."
        assert encode("<x>", Dialect.MD) == "<x>"
