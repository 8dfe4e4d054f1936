"""CLI — click-based command-line interface."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from cdocgen.checker import check as check_document
from cdocgen.checker import cull
from cdocgen.config import CdocgenConfig, load_config
from cdocgen.gate import decide, filter_ignored
from cdocgen.models import CheckResult, Finding
from cdocgen.render import render_document
from cdocgen.report import render_json, render_text
from cdocgen.scanner.scanner import load_files
from cdocgen.style import Dialect

_FAIL_ON = click.Choice(["warning", "error"], case_sensitive=False)


@click.group()
@click.option("--debug", is_flag=True, default=False,
              help="Log segmentation and culling on stderr.")
def main(debug: bool) -> None:
    """cdocgen — documentation generator for annotated C sources."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(name)s: %(message)s")


def _generate(files: tuple[str, ...], cfg: CdocgenConfig, dialect: Dialect,
              is_check: bool = True) -> tuple[str, CheckResult]:
    """Load, cull, check and render *files*."""
    document = load_files(list(files),
                          max_include_depth=cfg.scan.max_include_depth)
    cull(document)
    findings: list[Finding] = list(document.findings)
    if is_check:
        findings.extend(check_document(document, dialect))
    text, markup_findings = render_document(document, dialect)
    findings.extend(markup_findings)
    result = CheckResult(
        inputs=list(files),
        findings=filter_ignored(findings, cfg.check.ignore_rules),
        segment_count=len(document.segments),
        fail_on=cfg.check.fail_on,
    )
    return text, result


# ───────────────────────────────────────────────────────────────────
# render
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", default=None,
              type=click.Choice(["html", "md"], case_sensitive=False),
              help="Output dialect (default: html).")
@click.option("-o", "--output", "output", default=None, type=click.Path(),
              help="Write the document to a file instead of stdout.")
@click.option("--no-check", "no_check", is_flag=True, default=False,
              help="Skip the consistency checks.")
@click.option("--fail-on", "fail_on", default=None, type=_FAIL_ON,
              help="Minimum severity to fail on (default: error).")
@click.option("--config", "config_path", default=None,
              type=click.Path(exists=True, dir_okay=False),
              help="Explicit config file (skips project/user search).")
def render(
    files: tuple[str, ...],
    fmt: str | None,
    output: str | None,
    no_check: bool,
    fail_on: str | None,
    config_path: str | None,
) -> None:
    """Render FILES as one document."""
    cfg = load_config(input_path=files[0], config_path=config_path)

    # CLI flags override config values
    dialect = Dialect.from_str(fmt or cfg.render.format)
    if fail_on:
        cfg.check.fail_on = fail_on.lower()
    is_check = cfg.check.enabled and not no_check

    text, result = _generate(files, cfg, dialect, is_check)

    if output:
        Path(output).write_text(text)
        click.echo(f"Document written to {output}", err=True)
    else:
        click.echo(text, nl=False)

    for f in result.all_findings:
        click.echo(f.format(), err=True)

    sys.exit(decide(result.findings, cfg.check.fail_on))


# ───────────────────────────────────────────────────────────────────
# check
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", default="text",
              type=click.Choice(["text", "json"], case_sensitive=False),
              help="Report format.")
@click.option("--fail-on", "fail_on", default=None, type=_FAIL_ON,
              help="Minimum severity to fail on (default: error).")
@click.option("--config", "config_path", default=None,
              type=click.Path(exists=True, dir_okay=False),
              help="Explicit config file (skips project/user search).")
def check(
    files: tuple[str, ...],
    fmt: str,
    fail_on: str | None,
    config_path: str | None,
) -> None:
    """Check FILES and print the diagnostics report."""
    cfg = load_config(input_path=files[0], config_path=config_path)
    if fail_on:
        cfg.check.fail_on = fail_on.lower()

    _, result = _generate(files, cfg, Dialect.from_str(cfg.render.format))

    if fmt == "json":
        click.echo(render_json(result))
    else:
        click.echo(render_text(result, color=sys.stdout.isatty()))

    sys.exit(decide(result.findings, cfg.check.fail_on))
