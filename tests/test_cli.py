"""Integration tests for the render and check commands."""

import json

import pytest
from click.testing import CliRunner

import cdocgen.config as config_module
from cdocgen.cli import main

QUEUE = (
    "/** @title Queue\n"
    " * @license MIT */\n"
    "\n"
    "/** Makes a queue of `n` slots. @param[n] Capacity. */\n"
    "int queue_new(int n);\n"
)

UNLICENSED = "/** Counter. */\nint counter;\n"


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    (tmp_path / ".git").mkdir()
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH",
                        tmp_path / "no-user-config.yml")


@pytest.fixture
def queue(tmp_path):
    fp = tmp_path / "queue.h"
    fp.write_text(QUEUE)
    return str(fp)


@pytest.fixture
def unlicensed(tmp_path):
    fp = tmp_path / "counter.h"
    fp.write_text(UNLICENSED)
    return str(fp)


class TestRender:
    def test_html_to_stdout(self, queue):
        result = CliRunner().invoke(main, ["render", queue])
        assert result.exit_code == 0
        assert "<h3>queue_new</h3>" in result.output
        assert "<title>Queue</title>" in result.output

    def test_markdown(self, queue):
        result = CliRunner().invoke(main, ["render", "--format", "md", queue])
        assert result.exit_code == 0
        assert " ### queue\\_new ###" in result.output
        assert "<html>" not in result.output

    def test_output_file(self, queue, tmp_path):
        out = tmp_path / "queue.html"
        result = CliRunner().invoke(main, ["render", queue, "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_text().startswith("<!DOCTYPE html>")
        assert "Document written to" in result.output

    def test_warnings_pass_by_default(self, unlicensed):
        result = CliRunner().invoke(main, ["render", unlicensed])
        assert result.exit_code == 0
        assert "counter.h:0: no license in preamble" in result.output

    def test_fail_on_warning(self, unlicensed):
        result = CliRunner().invoke(
            main, ["render", "--fail-on", "warning", unlicensed])
        assert result.exit_code == 2

    def test_no_check(self, unlicensed):
        result = CliRunner().invoke(
            main, ["render", "--no-check", "--fail-on", "warning", unlicensed])
        assert result.exit_code == 0
        assert "no license" not in result.output

    def test_scan_error_fails(self, tmp_path):
        fp = tmp_path / "broken.h"
        fp.write_text("/** never closed\nint x;\n")
        result = CliRunner().invoke(main, ["render", str(fp)])
        assert result.exit_code == 2
        assert "documentation comment not terminated" in result.output

    def test_config_format_and_ignore(self, unlicensed, tmp_path):
        (tmp_path / ".cdocgen.yml").write_text(
            "render:\n  format: md\n"
            "check:\n  fail_on: warning\n  ignore_rules: [LICENSE_MISSING]\n")
        result = CliRunner().invoke(main, ["render", unlicensed])
        assert result.exit_code == 0
        assert " ### counter ###" in result.output

    def test_missing_input(self, tmp_path):
        result = CliRunner().invoke(main, ["render", str(tmp_path / "nope.h")])
        assert result.exit_code == 2
        assert "does not exist" in result.output


class TestCheck:
    def test_text_report(self, queue):
        result = CliRunner().invoke(main, ["check", queue])
        assert result.exit_code == 0
        assert "cdocgen Check Report" in result.output
        assert "No findings." in result.output

    def test_json_report(self, unlicensed):
        result = CliRunner().invoke(main, ["check", "--format", "json", unlicensed])
        assert result.exit_code == 0
        doc = json.loads(result.output)
        assert doc["summary"]["warning"] == 1
        assert doc["summary"]["segments"] == 1
        assert doc["findings"][0]["rule_id"] == "LICENSE_MISSING"

    def test_fail_on_warning(self, unlicensed):
        result = CliRunner().invoke(
            main, ["check", "--fail-on", "warning", unlicensed])
        assert result.exit_code == 2

    def test_several_files_make_one_document(self, queue, unlicensed):
        result = CliRunner().invoke(
            main, ["check", "--format", "json", queue, unlicensed])
        doc = json.loads(result.output)
        assert doc["inputs"] == [queue, unlicensed]
        assert doc["summary"]["total_findings"] == 0
        assert doc["summary"]["segments"] == 3
