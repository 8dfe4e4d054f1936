"""Gate — exit codes from diagnostic severity."""

from __future__ import annotations

from cdocgen.models import Finding, Severity


def decide(findings: list[Finding], fail_on: str = "error") -> int:
    """Return the exit code for *findings*.

    Exit codes:
        0 — pass
        2 — a finding reached *fail_on*
    """
    threshold = Severity.from_str(fail_on)
    for f in findings:
        if f.severity >= threshold:
            return 2
    return 0


def filter_ignored(findings: list[Finding], ignore_rules: list[str]) -> list[Finding]:
    """Drop findings whose rule is in *ignore_rules*."""
    if not ignore_rules:
        return list(findings)
    ignored = set(ignore_rules)
    return [f for f in findings if f.rule_id not in ignored]
