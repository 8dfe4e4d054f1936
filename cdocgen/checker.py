"""Checker — keep filter and consistency warnings over a finished Document.

:func:`cull` is the only step that changes the Document; :func:`check` is
read-only and returns its findings.
"""

from __future__ import annotations

import logging
from typing import Iterator

from cdocgen.markup import see_target
from cdocgen.models import (
    Attribute,
    Division,
    Document,
    Finding,
    Segment,
    Severity,
    Token,
    TokenBuffer,
)
from cdocgen.style import Dialect, encode
from cdocgen.symbols import SEE_SYMBOLS, Symbol, attribute_name

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Keep filter
# ---------------------------------------------------------------------------


def is_static(code: TokenBuffer) -> bool:
    """Code starting with ``static``; ``int main(`` counts too."""
    if code and code[0].symbol == Symbol.STATIC:
        return True
    return (len(code) >= 3
            and code[0].symbol == Symbol.ID and code[0].text == "int"
            and code[1].symbol == Symbol.ID and code[1].text == "main"
            and code[2].symbol == Symbol.LPAREN)


def keep_segment(segment: Segment) -> bool:
    keep = False
    if segment.doc or segment.attributes or segment.division == Division.FUNCTION:
        if is_static(segment.code):
            keep = segment.has_attribute(Symbol.ATT_ALLOW)
        else:
            keep = True
    # Everything except the preamble has to have a name.
    if segment.division != Division.PREAMBLE and not segment.params:
        keep = False
    return keep


def cull(document: Document) -> int:
    """Discard Segments that won't be rendered; returns how many."""
    kept: list[Segment] = []
    for segment in document.segments:
        if keep_segment(segment):
            kept.append(segment)
        else:
            log.debug("erasing %s", segment.summary())
    erased = len(document.segments) - len(kept)
    document.segments[:] = kept
    return erased


# ---------------------------------------------------------------------------
# Attribute rules
# ---------------------------------------------------------------------------

# symbol -> (header, contents); True required, False forbidden, None either.
ATTRIBUTE_RULES: dict[Symbol, tuple[bool | None, bool | None]] = {
    Symbol.ATT_PARAM: (True, True),
    Symbol.ATT_THROWS: (True, True),
    Symbol.ATT_TITLE: (False, True),
    Symbol.ATT_AUTHOR: (False, True),
    Symbol.ATT_STD: (False, True),
    Symbol.ATT_DEPEND: (False, True),
    Symbol.ATT_VERSION: (False, True),
    Symbol.ATT_SINCE: (False, True),
    Symbol.ATT_FIXME: (False, True),
    Symbol.ATT_DEPRECATED: (False, True),
    Symbol.ATT_LICENSE: (False, True),
    Symbol.ATT_RETURN: (False, True),
    Symbol.ATT_IMPLEMENTS: (False, True),
    Symbol.ATT_ORDER: (False, True),
    Symbol.ATT_ALLOW: (False, None),
}

_GENERAL = frozenset({
    Symbol.ATT_AUTHOR, Symbol.ATT_STD, Symbol.ATT_DEPEND, Symbol.ATT_VERSION,
    Symbol.ATT_SINCE, Symbol.ATT_FIXME, Symbol.ATT_DEPRECATED,
    Symbol.ATT_LICENSE,
})

# Attributes that mean something in each division.
ATTRIBUTE_CONTEXT: dict[Division, frozenset[Symbol]] = {
    Division.PREAMBLE: _GENERAL | {Symbol.ATT_TITLE},
    Division.TAG: _GENERAL | {Symbol.ATT_PARAM, Symbol.ATT_ALLOW},
    Division.TYPEDEF: _GENERAL | {Symbol.ATT_PARAM, Symbol.ATT_ALLOW},
    Division.DATA: _GENERAL | {Symbol.ATT_ALLOW},
    Division.FUNCTION: _GENERAL | {
        Symbol.ATT_PARAM, Symbol.ATT_RETURN, Symbol.ATT_THROWS,
        Symbol.ATT_IMPLEMENTS, Symbol.ATT_ORDER, Symbol.ATT_ALLOW,
    },
}

_SEE_DIVISIONS = {
    SEE_SYMBOLS["fn"]: Division.FUNCTION,
    SEE_SYMBOLS["tag"]: Division.TAG,
    SEE_SYMBOLS["typedef"]: Division.TYPEDEF,
    SEE_SYMBOLS["data"]: Division.DATA,
}


def attribute_okay(attribute: Attribute) -> bool:
    """Header and contents presence against the rule for the attribute."""
    rule = ATTRIBUTE_RULES.get(attribute.symbol)
    if rule is None:
        return False
    header, contents = rule
    if header is not None and header != bool(attribute.header):
        return False
    if contents is not None and contents != bool(attribute.contents):
        return False
    return True


def _finding(rule_id: str, token: Token | None, explanation: str,
             severity: Severity = Severity.WARNING) -> Finding:
    if token is None:
        return Finding(rule_id=rule_id, severity=severity, file_path="",
                       line=0, excerpt="", explanation=explanation)
    return Finding(
        rule_id=rule_id,
        severity=severity,
        file_path=token.label,
        line=token.line,
        excerpt=token.snippet(),
        explanation=explanation,
        symbol=str(token.symbol),
    )


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def check(document: Document, dialect: Dialect = Dialect.HTML) -> list[Finding]:
    """Every consistency finding for *document*, in document order."""
    findings: list[Finding] = []
    for segment in document.segments:
        findings.extend(check_segment(segment))
    findings.extend(check_links(document, dialect))
    findings.extend(check_license(document))
    return findings


def check_segment(segment: Segment) -> list[Finding]:
    findings: list[Finding] = []
    for attribute in segment.attributes:
        name = attribute_name(attribute.symbol)
        if not attribute_okay(attribute):
            findings.append(_finding(
                "ATTRIBUTE_USAGE", attribute.token,
                f"attribute {name} not okay: "
                f"header {'present' if attribute.header else 'empty'}, "
                f"contents {'present' if attribute.contents else 'empty'}",
            ))
        allowed = ATTRIBUTE_CONTEXT.get(segment.division)
        if allowed is not None and attribute.symbol not in allowed:
            findings.append(_finding(
                "ATTRIBUTE_CONTEXT", attribute.token,
                f"attribute {name} unused in {segment.division}",
            ))
    if segment.stale_params():
        findings.append(_finding(
            "PARAM_INDEX_STALE", segment.first_token,
            f"parameter indices {segment.stale_params()} are out of range",
            Severity.ERROR,
        ))
    if segment.division == Division.FUNCTION:
        findings.extend(_check_params(segment))
    return findings


def _param_headers(segment: Segment) -> Iterator[Token]:
    for attribute in segment.attributes_of(Symbol.ATT_PARAM):
        for token in attribute.header:
            if token.symbol == Symbol.DOC_ID:
                yield token


def _math_tokens(doc: TokenBuffer) -> Iterator[Token]:
    is_math = False
    for token in doc:
        if token.symbol == Symbol.MATH_BEGIN:
            is_math = True
        elif token.symbol == Symbol.MATH_END:
            is_math = False
        elif is_math:
            yield token


def _check_params(segment: Segment) -> list[Finding]:
    findings: list[Finding] = []
    declared = segment.parameters
    for match in _param_headers(segment):
        if not any(match.same_text(p) for p in declared):
            findings.append(_finding(
                "PARAM_EXTRANEOUS", match, "extraneous variable"))
    documented = list(_param_headers(segment))
    documented.extend(_math_tokens(segment.doc))
    for attribute in segment.attributes_of(Symbol.ATT_RETURN):
        documented.extend(attribute.contents)
    for param in declared:
        if not any(param.same_text(d) for d in documented):
            findings.append(_finding(
                "PARAM_UNDOCUMENTED", param, "variable may be undocumented"))
    return findings


def _see_tokens(segment: Segment) -> Iterator[Token]:
    buffers = [segment.doc] + [a.contents for a in segment.attributes]
    for buffer in buffers:
        for token in buffer:
            if token.symbol in _SEE_DIVISIONS:
                yield token


def check_links(document: Document,
                dialect: Dialect = Dialect.HTML) -> list[Finding]:
    """Resolve every ``<fn:...>``-style reference against declared names."""
    findings: list[Finding] = []
    for segment in document.segments:
        for token in _see_tokens(segment):
            division = _SEE_DIVISIONS[token.symbol]
            _, name = see_target(token)
            wanted = encode(name, dialect)
            if not any(encode(s.name, dialect) == wanted
                       for s in document.of_division(division)):
                findings.append(_finding(
                    "LINK_BROKEN", token,
                    f"no {division} named \"{name}\""))
    return findings


def check_license(document: Document) -> list[Finding]:
    """Exactly one preamble Segment should carry a license."""
    licensed = [s for s in document.of_division(Division.PREAMBLE)
                if s.has_attribute(Symbol.ATT_LICENSE)]
    if not licensed:
        label = document.labels[0] if document.labels else ""
        finding = _finding("LICENSE_MISSING", None, "no license in preamble")
        finding.file_path = label
        return [finding]
    return [
        _finding("LICENSE_DUPLICATE",
                 segment.attributes_of(Symbol.ATT_LICENSE)[0].token,
                 "another preamble already carries a license")
        for segment in licensed[1:]
    ]
