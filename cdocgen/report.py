"""Report rendering — text and JSON diagnostics."""

from __future__ import annotations

import json
from typing import Any

import cdocgen
from cdocgen.models import CheckResult, Finding, Severity

# ---------------------------------------------------------------------------
# Text output
# ---------------------------------------------------------------------------

_SEV_COLORS = {
    Severity.ERROR: "\033[91m",    # red
    Severity.WARNING: "\033[93m",  # yellow
}
_RESET = "\033[0m"


def _sev_label(sev: Severity, color: bool = True) -> str:
    label = sev.name.upper()
    if color:
        return f"{_SEV_COLORS.get(sev, '')}{label}{_RESET}"
    return label


def render_text(result: CheckResult, color: bool = True) -> str:
    """Produce human-friendly text output."""
    lines: list[str] = []

    lines.append("=" * 60)
    lines.append("cdocgen Check Report")
    lines.append("=" * 60)
    lines.append(f"Inputs:   {', '.join(result.inputs)}")
    lines.append(f"Segments: {result.segment_count}")
    lines.append(f"Fail on:  {result.fail_on}")
    lines.append("")

    all_findings = result.all_findings
    if not all_findings:
        lines.append("No findings.")
    else:
        by_sev: dict[Severity, list[Finding]] = {}
        for f in all_findings:
            by_sev.setdefault(f.severity, []).append(f)

        for sev in (Severity.ERROR, Severity.WARNING):
            group = by_sev.get(sev, [])
            if not group:
                continue
            lines.append(f"-- {_sev_label(sev, color)} ({len(group)}) --")
            for f in group:
                loc = f"{f.file_path}:{f.line}" if f.line else f.file_path
                lines.append(f"  [{f.rule_id}] {loc}")
                if f.excerpt:
                    lines.append(f"    {f.symbol} \"{f.excerpt}\"")
                lines.append(f"    -> {f.explanation}")
            lines.append("")

    lines.append("-" * 60)
    count_err = sum(1 for f in all_findings if f.severity == Severity.ERROR)
    count_warn = sum(1 for f in all_findings if f.severity == Severity.WARNING)
    lines.append(f"Findings: {count_err} error, {count_warn} warning")
    lines.append("=" * 60)

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# JSON output
# ---------------------------------------------------------------------------

def _finding_to_dict(f: Finding) -> dict[str, Any]:
    return {
        "rule_id": f.rule_id,
        "severity": str(f.severity),
        "file": f.file_path,
        "line": f.line,
        "symbol": f.symbol,
        "excerpt": f.excerpt,
        "explanation": f.explanation,
    }


def render_json(result: CheckResult) -> str:
    """Produce stable JSON output (deterministic sorting)."""
    all_findings = result.all_findings
    doc: dict[str, Any] = {
        "tool": "cdocgen",
        "version": cdocgen.__version__,
        "inputs": list(result.inputs),
        "summary": {
            "total_findings": len(all_findings),
            "error": sum(1 for f in all_findings if f.severity == Severity.ERROR),
            "warning": sum(
                1 for f in all_findings if f.severity == Severity.WARNING
            ),
            "segments": result.segment_count,
            "fail_on": result.fail_on,
        },
        "findings": [_finding_to_dict(f) for f in all_findings],
    }
    return json.dumps(doc, indent=2, ensure_ascii=False)
