"""Scanner driver — load files, feed the segmenter, isolate per-file failures."""

from __future__ import annotations

import logging
from pathlib import Path

from cdocgen.models import Document, Finding, Severity, Source
from cdocgen.scanner.paths import read_source
from cdocgen.scanner.segmenter import (
    DEFAULT_MAX_INCLUDE_DEPTH,
    ScanError,
    Segmenter,
)

log = logging.getLogger(__name__)


def scan_source(segmenter: Segmenter, source: Source) -> bool:
    """Scan one in-memory *source* into the segmenter's document.

    On a state violation every Segment the source added is discarded whole,
    the error becomes a finding and False is returned.
    """
    document = segmenter.document
    size = len(document.segments)
    try:
        segmenter.scan(source)
    except ScanError as exc:
        log.debug("%s: discarding %d segments", source.label,
                  len(document.segments) - size)
        document.findings.append(exc.to_finding())
        document.truncate(size)
        segmenter.reset()
        return False
    return True


def load_file(segmenter: Segmenter, path: str | Path) -> bool:
    """Read *path* and scan it; unreadable files become ``READ_FAILED``."""
    try:
        source = read_source(path)
    except OSError as exc:
        segmenter.document.findings.append(Finding(
            rule_id="READ_FAILED",
            severity=Severity.ERROR,
            file_path=str(path),
            line=0,
            excerpt="",
            explanation=f"couldn't read: {exc.strerror or exc}",
        ))
        return False
    log.debug("loading %s", path)
    return scan_source(segmenter, source)


def load_files(
    paths: list[str | Path],
    document: Document | None = None,
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
) -> Document:
    """Scan every file in *paths*, in order, into one Document."""
    document = document if document is not None else Document()
    segmenter = Segmenter(document, max_include_depth=max_include_depth)
    for path in paths:
        load_file(segmenter, path)
    return document
