"""Read static-analysis findings from a JSON or YAML file."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml

from diffguard.errors import FindingsError
from diffguard.findings.models import Finding


def load_findings(path: Path) -> List[Finding]:
    """Load findings from *path*.

    Two shapes are accepted: a flat list of
    ``{severity, message, file, start, end}`` objects, or semgrep's native
    ``--json`` report with a top-level ``results`` list.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise FindingsError(f"Cannot read findings file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise FindingsError(f"Failed to parse findings file {path}: {exc}") from exc
    return parse_findings(data)


def parse_findings(data: Any) -> List[Finding]:
    if data is None:
        return []
    if isinstance(data, dict) and "results" in data:
        return [_from_semgrep(entry) for entry in data["results"] or []]
    if isinstance(data, list):
        return [_from_flat(entry) for entry in data]
    raise FindingsError("Findings must be a list or a semgrep report with 'results'")


def _from_flat(entry: Dict[str, Any]) -> Finding:
    try:
        start = int(entry["start"])
        return Finding(
            file=str(entry["file"]),
            start_line=start,
            end_line=int(entry.get("end", start)),
            message=str(entry.get("message", "")),
            severity=str(entry.get("severity", "")),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise FindingsError(f"Malformed finding {entry!r}: {exc}") from exc


def _from_semgrep(entry: Dict[str, Any]) -> Finding:
    try:
        extra = entry.get("extra", {})
        start = int(entry["start"]["line"])
        return Finding(
            file=str(entry["path"]),
            start_line=start,
            end_line=int(entry.get("end", {}).get("line", start)),
            message=str(extra.get("message", "")),
            severity=str(extra.get("severity", "")),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise FindingsError(f"Malformed semgrep result: {exc}") from exc
