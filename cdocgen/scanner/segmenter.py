"""Segmenter — files scanner notifications into Segments and Attributes.

The segmenter is a small state machine driven one lexeme at a time.  It
decides which buffer receives each token (segment doc or code, attribute
header or contents) and when the open Segment is finished ("cut").  A cut
caused by a token takes effect only after that token has been filed.

Whitespace is never filed directly; it is counted and, when the next
documentation token lands, replaced by at most one ``SPACE`` token or, for
two or more newlines, one ``PARAGRAPH`` token.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Callable

from cdocgen.models import (
    Attribute,
    Division,
    Document,
    Finding,
    Segment,
    Severity,
    Source,
    TokenBuffer,
)
from cdocgen.scanner.lexer import Scanner
from cdocgen.scanner.paths import read_source, resolve_include
from cdocgen.scanner.semantic import classify
from cdocgen.symbols import Symbol, mark

log = logging.getLogger(__name__)

Classifier = Callable[[TokenBuffer], "tuple[Division, list[int]]"]
Resolver = Callable[["str | Path | None", str], "Path | None"]
Reader = Callable[[Path], Source]

DEFAULT_MAX_INCLUDE_DEPTH = 16

# Code this many lines below the last doc comment does not belong to it.
_FAR_LINES = 2


class ScanError(Exception):
    """A notification arrived in a state that forbids it."""

    def __init__(self, label: str, line: int, symbol: str, snippet: str,
                 message: str) -> None:
        super().__init__(label, line, symbol, snippet, message)
        self.label = label
        self.line = line
        self.symbol = symbol
        self.snippet = snippet
        self.message = message

    def __str__(self) -> str:
        return f'{self.label}:{self.line}, {self.symbol} "{self.snippet}": {self.message}'

    def to_finding(self) -> Finding:
        return Finding(
            rule_id="SCAN_STATE",
            severity=Severity.ERROR,
            file_path=self.label,
            line=self.line,
            excerpt=self.snippet,
            explanation=self.message,
            symbol=self.symbol,
        )


class _Mode(enum.Enum):
    CODE = "code"
    DOC = "doc"
    ARGS = "args"


class Segmenter:
    """Builds the Segments of *document* from one or more scans."""

    def __init__(
        self,
        document: Document,
        classifier: Classifier = classify,
        resolver: Resolver = resolve_include,
        reader: Reader = read_source,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
    ) -> None:
        self.document = document
        self.classifier = classifier
        self.resolver = resolver
        self.reader = reader
        self.max_include_depth = max_include_depth
        self._includes: list[str | None] = []
        self.reset()

    def reset(self) -> None:
        """Forget the open Segment and return to code."""
        self.mode = _Mode.CODE
        self.last_doc_line = 0
        self.segment: Segment | None = None
        self.attribute: Attribute | None = None
        self.space = 0
        self.newline = 0
        self.is_code_ignored = False
        self.is_semantic_set = False

    # -----------------------------------------------------------------------
    # Driving
    # -----------------------------------------------------------------------

    def scan(self, source: Source) -> None:
        """Scan *source* to completion, appending to the document.

        Raises :class:`ScanError` on a state violation; Segments already
        filed stay in the store for the caller to keep or discard.
        """
        self.document.sources.append(source)
        self._includes.append(_key(source.path))
        scanner = Scanner(source)
        try:
            while scanner.advance():
                self.notify(scanner)
            if self.mode is not _Mode.CODE:
                raise ScanError(source.label, scanner.line, "END", "",
                                "documentation comment not terminated")
            if scanner.depth:
                raise ScanError(source.label, scanner.line, "END", "",
                                "braces do not match at end of file")
            self._cut()
        finally:
            self._includes.pop()

    def notify(self, scan: Scanner) -> None:
        """File the scanner's current lexeme."""
        symbol = scan.symbol
        is_deferred_cut = False

        match symbol:
            case Symbol.DOC_BEGIN:
                if self.mode is not _Mode.CODE:
                    raise self._error(scan, "sneak path; was expecting code")
                self.mode = _Mode.DOC
                self.attribute = None
                # Two docs on top of each other without code: the top one
                # belongs to the preamble.
                if self.segment is not None and not self.segment.code:
                    self._cut()
                return
            case Symbol.DOC_END:
                if self.mode is not _Mode.DOC:
                    raise self._error(scan, "sneak path; was expecting doc")
                self.mode = _Mode.CODE
                self.last_doc_line = scan.line
                return
            case Symbol.DOC_LEFT:
                if (self.mode is not _Mode.DOC or self.segment is None
                        or self.attribute is None):
                    raise self._error(
                        scan, "sneak path; was expecting doc with attribute")
                self.mode = _Mode.ARGS
                return
            case Symbol.DOC_RIGHT | Symbol.DOC_COMMA:
                if (self.mode is not _Mode.ARGS or self.segment is None
                        or self.attribute is None):
                    raise self._error(
                        scan, "sneak path; was expecting args with attribute")
                if symbol == Symbol.DOC_RIGHT:
                    self.mode = _Mode.DOC
                return
            case Symbol.SPACE:
                self.space += 1
                return
            case Symbol.NEWLINE:
                self.newline += 1
                return
            case Symbol.SEMI:
                # Break on global semicolons only.
                if scan.depth == 0 and self.segment is not None:
                    if not self.is_semantic_set:
                        self._classify(self.segment)
                    is_deferred_cut = True
            case Symbol.LBRACE:
                # A leading brace: a function body is not collected.
                if (scan.depth == 1 and not self.is_semantic_set
                        and self.segment is not None):
                    division, params = self.classifier(self.segment.code)
                    if division == Division.FUNCTION:
                        self._commit(self.segment, division, params)
                        self.is_code_ignored = True
            case Symbol.RBRACE:
                # Functions don't have ';' to end them.
                if (scan.depth == 0 and self.segment is not None
                        and self.segment.division == Division.FUNCTION):
                    is_deferred_cut = True
            case Symbol.LOCAL_INCLUDE:
                if self.mode is not _Mode.CODE:
                    raise self._error(scan, "include inside documentation")
                self._include(scan)
                return
            case _:
                pass

        category = mark(symbol)

        # Code that starts far away from docs goes in its own segment.
        if (self.segment is not None and category == ""
                and not self.segment.code and self.last_doc_line
                and self.last_doc_line + _FAR_LINES < scan.line):
            self._cut()

        # A preprocessor line standing alone is a statement of its own.
        if (symbol == Symbol.MACRO and scan.depth == 0
                and (self.segment is None or not self.segment.code)):
            is_deferred_cut = True

        if self.segment is None:
            self._open()

        match category:
            case "~":
                if self.mode is _Mode.CODE:
                    raise self._error(scan, "documentation text outside a comment")
                self._file_doc(scan)
            case "@":
                if self.mode is not _Mode.DOC:
                    raise self._error(scan, "attribute outside documentation")
                self.attribute = Attribute(token=scan.token())
                self.segment.attributes.append(self.attribute)
                self.space = self.newline = 0
            case _:
                if self.mode is not _Mode.CODE:
                    raise self._error(scan, "code inside documentation")
                if not self.is_code_ignored:
                    self.segment.code.append(scan.token())

        if is_deferred_cut:
            self._cut()

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _open(self) -> None:
        self.segment = self.document.new_segment()
        self.attribute = None
        self.space = self.newline = 0
        self.is_code_ignored = self.is_semantic_set = False

    def _file_doc(self, scan: Scanner) -> None:
        """Place a doc token, lazily materialising pending whitespace."""
        segment = self.segment
        if self.attribute is None:
            selected = segment.doc
        elif self.mode is _Mode.ARGS:
            selected = self.attribute.header
        else:
            selected = self.attribute.contents
        is_para = self.newline > 1
        is_space = bool(self.space or self.newline)
        is_doc_empty = not segment.doc
        is_selected_empty = not selected
        self.space = self.newline = 0
        if is_para:
            # A new paragraph leaves the attribute.
            self.attribute = None
            self.mode = _Mode.DOC
            selected = segment.doc
            if not is_doc_empty:
                selected.append(scan.token(Symbol.PARAGRAPH, empty=True))
        elif is_space and not is_selected_empty:
            selected.append(scan.token(Symbol.SPACE, empty=True))
        selected.append(scan.token())

    def _classify(self, segment: Segment) -> None:
        division, params = self.classifier(segment.code)
        self._commit(segment, division, params)

    def _commit(self, segment: Segment, division: Division,
                params: list[int]) -> None:
        segment.division = division
        segment.params = list(params)
        self.is_semantic_set = True

    def _cut(self) -> None:
        segment = self.segment
        if segment is None:
            return
        if segment.division == Division.UNDECIDED:
            if segment.code:
                self._classify(segment)
            else:
                segment.division = Division.PREAMBLE
        log.debug("cut %s", segment.summary())
        self.segment = None

    def _error(self, scan: Scanner, message: str) -> ScanError:
        return ScanError(scan.label, scan.line, str(scan.symbol),
                         scan.lexeme[:16], message)

    def _include_failed(self, scan: Scanner, message: str) -> None:
        self.document.findings.append(Finding(
            rule_id="INCLUDE_FAILED",
            severity=Severity.WARNING,
            file_path=scan.label,
            line=scan.line,
            excerpt=scan.lexeme[:16],
            explanation=message,
            symbol=str(scan.symbol),
        ))

    def _include(self, scan: Scanner) -> None:
        target = scan.lexeme
        including = self._includes[-1] if self._includes else None
        path = self.resolver(including, target)
        if path is None:
            self._include_failed(scan, f"couldn't resolve include \"{target}\"")
            return
        if _key(path) in self._includes:
            self._include_failed(scan, f"recursive include of \"{target}\"")
            return
        if len(self._includes) > self.max_include_depth:
            self._include_failed(
                scan, f"includes nested deeper than {self.max_include_depth}")
            return
        try:
            source = self.reader(path)
        except OSError as exc:
            self._include_failed(scan, f"couldn't read \"{target}\": {exc.strerror or exc}")
            return

        log.debug("including %s", path)
        self._cut()
        size = len(self.document.segments)
        try:
            self.scan(source)
        except ScanError as exc:
            self.document.findings.append(exc.to_finding())
            self.document.truncate(size)
            self.reset()
        self._cut()


def _key(path: str | Path | None) -> str | None:
    if path is None:
        return None
    return str(Path(path).resolve())
