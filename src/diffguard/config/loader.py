"""Load and merge configuration from .diffguard.toml and env vars."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from diffguard.config.schema import (
    AnnotateConfig,
    CoverageConfig,
    DiffConfig,
    DiffGuardConfig,
    GitHubConfig,
)
from diffguard.errors import DiffGuardError

CONFIG_FILENAME = ".diffguard.toml"


class ConfigError(DiffGuardError):
    """Raised when config is malformed or unreadable."""


def find_config_file(root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _split_list(val: str) -> list[str]:
    return [item.strip() for item in val.split(",") if item.strip()]


def _merge_env_overrides(cfg: DiffGuardConfig) -> None:
    """Apply GitHub Actions and DIFFGUARD_* environment variable overrides."""
    if val := os.environ.get("GITHUB_TOKEN"):
        cfg.github.token = val
    if val := os.environ.get("GITHUB_API_URL"):
        cfg.github.api_url = val
    if val := os.environ.get("DIFFGUARD_TOKEN"):
        cfg.github.token = val
    if val := os.environ.get("DIFFGUARD_CHECK_NAME"):
        cfg.diff.check_name = val
    if val := os.environ.get("DIFFGUARD_ERROR_SEVERITIES"):
        cfg.annotate.error_severities = _split_list(val)
    if val := os.environ.get("DIFFGUARD_INCLUDE"):
        cfg.diff.include.extend(_split_list(val))
    if val := os.environ.get("DIFFGUARD_COVERAGE_DIR"):
        cfg.coverage.tmp_dir = val
    if val := os.environ.get("DIFFGUARD_PAGE_SIZE"):
        try:
            cfg.github.page_size = int(val)
        except ValueError:
            pass


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    import dataclasses

    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


_INT_FIELDS = {"github": ("page_size", "max_workers")}
_NUMBER_FIELDS = {"github": ("timeout",)}
_STR_FIELDS = {
    "github": ("api_url",),
    "diff": ("check_name",),
    "annotate": ("suggestion_prefix",),
    "coverage": ("tmp_dir", "remote_dir"),
}
_LIST_FIELDS = {
    "diff": ("include", "exclude", "line_exclude"),
    "annotate": ("error_severities",),
    "coverage": ("include",),
}
_BOOL_FIELDS = {"annotate": ("fail_on_new",), "coverage": ("allow_partial",)}


def _check_types(cfg: DiffGuardConfig) -> None:
    """Raise ConfigError for any section value of the wrong type."""
    def values(table: Dict[str, tuple]):
        for section, names in table.items():
            for name in names:
                yield f"{section}.{name}", getattr(getattr(cfg, section), name)

    # bool is an int subclass, so exclude it explicitly
    for key, val in values(_INT_FIELDS):
        if isinstance(val, bool) or not isinstance(val, int):
            raise ConfigError(f"{key} must be an integer, got {val!r}")
    for key, val in values(_NUMBER_FIELDS):
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            raise ConfigError(f"{key} must be a number, got {val!r}")
    for key, val in values(_STR_FIELDS):
        if not isinstance(val, str):
            raise ConfigError(f"{key} must be a string, got {val!r}")
    for key, val in values(_LIST_FIELDS):
        if not isinstance(val, list) or not all(isinstance(v, str) for v in val):
            raise ConfigError(f"{key} must be a list of strings, got {val!r}")
    for key, val in values(_BOOL_FIELDS):
        if not isinstance(val, bool):
            raise ConfigError(f"{key} must be true or false, got {val!r}")
    token = cfg.github.token
    if token is not None and not isinstance(token, str):
        raise ConfigError("github.token must be a string")


def _validate(cfg: DiffGuardConfig) -> None:
    _check_types(cfg)
    if cfg.github.timeout <= 0:
        raise ConfigError("github.timeout must be positive")
    if not 1 <= cfg.github.page_size <= 100:
        raise ConfigError(f"github.page_size must be between 1 and 100, got {cfg.github.page_size}")
    if cfg.github.max_workers < 1:
        raise ConfigError("github.max_workers must be at least 1")
    if not cfg.diff.check_name:
        raise ConfigError("diff.check_name must not be empty")


def load_config(
    root: Path,
    config_override: Optional[str] = None,
) -> DiffGuardConfig:
    """Load, validate, and return a DiffGuardConfig."""
    config_path = find_config_file(root, config_override)

    if config_path is None:
        cfg = DiffGuardConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = DiffGuardConfig(
            version=raw.get("version", "1.0"),
            github=_build_section(raw, GitHubConfig, "github"),
            diff=_build_section(raw, DiffConfig, "diff"),
            annotate=_build_section(raw, AnnotateConfig, "annotate"),
            coverage=_build_section(raw, CoverageConfig, "coverage"),
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg
