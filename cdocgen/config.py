"""Configuration loader for cdocgen.

Configuration is resolved in priority order: **project > user > defaults**.

1. **Project-level** — ``.cdocgen.yml`` in (or above) the first input's
   directory, up to the enclosing git work tree.
2. **User-level** — ``~/.cdocgen/config.yml``.
3. **Built-in defaults** — ``format: html``, ``fail_on: error``, etc.

Both files share the same format::

    render:
      format: md
    check:
      enabled: true
      fail_on: warning
      ignore_rules:
        - LICENSE_MISSING
    scan:
      max_include_depth: 16

Project-level values override user-level values.  CLI flags override both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from cdocgen.scanner.segmenter import DEFAULT_MAX_INCLUDE_DEPTH

CONFIG_FILENAME = ".cdocgen.yml"
USER_CONFIG_DIR = Path.home() / ".cdocgen"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yml"

_SECTIONS = ("render", "check", "scan")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class RenderConfig:
    format: str = "html"


@dataclass
class CheckConfig:
    enabled: bool = True
    fail_on: str = "error"
    ignore_rules: list[str] = field(default_factory=list)


@dataclass
class ScanConfig:
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH


@dataclass
class CdocgenConfig:
    """Top-level configuration container."""

    render: RenderConfig = field(default_factory=RenderConfig)
    check: CheckConfig = field(default_factory=CheckConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)

    # Where the effective config was loaded from (None = defaults only).
    project_config_path: str | None = None
    user_config_path: str | None = None


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(
    input_path: str | None = None,
    config_path: str | Path | None = None,
) -> CdocgenConfig:
    """Load merged configuration (project > user > defaults).

    Parameters
    ----------
    input_path:
        A file or directory to search from for ``.cdocgen.yml``.  When
        *None*, only the user-level file (and defaults) are considered.
    config_path:
        Explicit config file path.  When given, *only* this file is
        loaded (no project/user search).
    """
    if config_path is not None:
        raw = _load_yaml(Path(config_path).expanduser())
        cfg = _raw_to_config(raw)
        cfg.project_config_path = str(config_path)
        return cfg

    user_raw = _load_yaml(USER_CONFIG_PATH)
    user_source = str(USER_CONFIG_PATH) if user_raw else None

    project_raw: dict | None = None
    project_source: str | None = None
    if input_path is not None:
        project_path = _find_project_config(input_path)
        if project_path is not None:
            project_raw = _load_yaml(project_path)
            project_source = str(project_path)

    cfg = _raw_to_config(_merge_raw(project_raw, user_raw))
    cfg.project_config_path = project_source
    cfg.user_config_path = user_source
    return cfg


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _find_project_config(input_path: str) -> Path | None:
    """Search for ``.cdocgen.yml`` beside *input_path* and in ancestors."""
    p = Path(input_path).resolve()
    if not p.is_dir():
        p = p.parent
    candidates = [p / CONFIG_FILENAME]
    if not (p / ".git").exists():
        for parent in p.parents:
            candidates.append(parent / CONFIG_FILENAME)
            if (parent / ".git").exists():
                break
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path) -> dict | None:
    """Load a YAML file, returning *None* on missing/invalid files."""
    path = path.expanduser()
    if not path.is_file():
        return None
    try:
        raw = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError):
        return None
    return raw if isinstance(raw, dict) else None


def _merge_raw(project: dict | None, user: dict | None) -> dict:
    """Merge project and user raw dicts, section by section (project wins)."""
    base: dict = {}
    for raw in (user, project):
        if not raw:
            continue
        for key in _SECTIONS:
            section = raw.get(key)
            if isinstance(section, dict):
                base.setdefault(key, {}).update(section)
    return base


def _section(raw: dict, key: str) -> dict:
    section = raw.get(key, {})
    return section if isinstance(section, dict) else {}


def _raw_to_config(raw: dict | None) -> CdocgenConfig:
    """Convert a raw YAML dict to a ``CdocgenConfig``."""
    if not raw:
        return CdocgenConfig()

    render_raw = _section(raw, "render")
    check_raw = _section(raw, "check")
    scan_raw = _section(raw, "scan")

    fmt = str(render_raw.get("format", "html")).lower()
    fail_on = str(check_raw.get("fail_on", "error")).lower()
    try:
        depth = int(scan_raw.get("max_include_depth", DEFAULT_MAX_INCLUDE_DEPTH))
    except (TypeError, ValueError):
        depth = DEFAULT_MAX_INCLUDE_DEPTH

    return CdocgenConfig(
        render=RenderConfig(format=fmt if fmt in ("html", "md") else "html"),
        check=CheckConfig(
            enabled=bool(check_raw.get("enabled", True)),
            fail_on=fail_on if fail_on in ("warning", "error") else "error",
            ignore_rules=_as_list(check_raw.get("ignore_rules", [])),
        ),
        scan=ScanConfig(max_include_depth=depth),
    )


def _as_list(val: object) -> list[str]:
    """Coerce a value to a list of strings."""
    if isinstance(val, list):
        return [str(v) for v in val]
    if isinstance(val, str):
        return [val]
    return []
