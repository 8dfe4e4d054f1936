"""Tests for the config loader (.cdocgen.yml)."""

import pytest

import cdocgen.config as config_module
from cdocgen.config import CONFIG_FILENAME, load_config


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH",
                        tmp_path / "home" / "config.yml")


class TestDefaults:
    def test_no_config_file_returns_defaults(self, tmp_path):
        (tmp_path / ".git").mkdir()
        cfg = load_config(input_path=str(tmp_path / "a.c"))
        assert cfg.render.format == "html"
        assert cfg.check.enabled is True
        assert cfg.check.fail_on == "error"
        assert cfg.check.ignore_rules == []
        assert cfg.scan.max_include_depth == 16
        assert cfg.project_config_path is None
        assert cfg.user_config_path is None


class TestProjectConfig:
    def test_loads_full_config(self, tmp_path):
        (tmp_path / ".git").mkdir()
        config = tmp_path / CONFIG_FILENAME
        config.write_text("""\
render:
  format: md
check:
  enabled: false
  fail_on: warning
  ignore_rules:
    - LICENSE_MISSING
    - PARAM_UNDOCUMENTED
scan:
  max_include_depth: 4
""")
        cfg = load_config(input_path=str(tmp_path / "a.c"))
        assert cfg.render.format == "md"
        assert cfg.check.enabled is False
        assert cfg.check.fail_on == "warning"
        assert cfg.check.ignore_rules == ["LICENSE_MISSING", "PARAM_UNDOCUMENTED"]
        assert cfg.scan.max_include_depth == 4
        assert cfg.project_config_path == str(config)

    def test_found_in_parent_directory(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / CONFIG_FILENAME).write_text("render:\n  format: md\n")
        src = tmp_path / "src"
        src.mkdir()
        cfg = load_config(input_path=str(src / "a.c"))
        assert cfg.render.format == "md"

    def test_search_stops_at_git_root(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("render:\n  format: md\n")
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)
        cfg = load_config(input_path=str(repo / "a.c"))
        assert cfg.render.format == "html"

    def test_invalid_values_fall_back(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / CONFIG_FILENAME).write_text(
            "render:\n  format: pdf\ncheck:\n  fail_on: fatal\n"
            "scan:\n  max_include_depth: lots\n")
        cfg = load_config(input_path=str(tmp_path / "a.c"))
        assert cfg.render.format == "html"
        assert cfg.check.fail_on == "error"
        assert cfg.scan.max_include_depth == 16

    def test_single_ignore_rule_string(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / CONFIG_FILENAME).write_text(
            "check:\n  ignore_rules: LICENSE_MISSING\n")
        cfg = load_config(input_path=str(tmp_path / "a.c"))
        assert cfg.check.ignore_rules == ["LICENSE_MISSING"]

    def test_broken_yaml_returns_defaults(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / CONFIG_FILENAME).write_text("render: [unclosed\n")
        cfg = load_config(input_path=str(tmp_path / "a.c"))
        assert cfg.render.format == "html"


class TestUserConfig:
    def test_project_overrides_user(self, tmp_path, monkeypatch):
        user = tmp_path / "user.yml"
        user.write_text("render:\n  format: md\ncheck:\n  fail_on: warning\n")
        monkeypatch.setattr(config_module, "USER_CONFIG_PATH", user)
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)
        (repo / CONFIG_FILENAME).write_text("check:\n  fail_on: error\n")
        cfg = load_config(input_path=str(repo / "a.c"))
        assert cfg.render.format == "md"
        assert cfg.check.fail_on == "error"
        assert cfg.user_config_path == str(user)


class TestExplicitConfig:
    def test_explicit_path_skips_search(self, tmp_path, monkeypatch):
        user = tmp_path / "user.yml"
        user.write_text("render:\n  format: md\n")
        monkeypatch.setattr(config_module, "USER_CONFIG_PATH", user)
        explicit = tmp_path / "explicit.yml"
        explicit.write_text("check:\n  enabled: false\n")
        cfg = load_config(input_path=str(tmp_path), config_path=explicit)
        assert cfg.render.format == "html"
        assert cfg.check.enabled is False
        assert cfg.project_config_path == str(explicit)
