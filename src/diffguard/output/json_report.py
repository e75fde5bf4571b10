"""JSON reporter for CI workflow steps."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from diffguard.findings.models import AnnotationResult, ClassifiedFinding
from diffguard.git.models import DiffReport


def _finding_dict(item: ClassifiedFinding) -> Dict[str, Any]:
    f = item.finding
    return {
        "file": f.file,
        "line": item.line,
        "start": f.start_line,
        "end": f.end_line,
        "severity": f.severity,
        "message": f.message,
        "bucket": item.bucket.value,
    }


def annotation_to_dict(result: AnnotationResult, *, details: bool = False) -> Dict[str, Any]:
    """Convert AnnotationResult to a JSON-serialisable dict."""
    data = result.to_dict()
    if details:
        findings: List[Dict[str, Any]] = []
        for split in (result.errors, result.warnings):
            for item in split.current + split.previous + split.outside:
                findings.append(_finding_dict(item))
        data["findings"] = findings
    return data


def render_diff(report: DiffReport) -> str:
    """Return the diff report in the shape later workflow steps consume."""
    return json.dumps(report.to_dict(), indent=2)


def render_annotation(result: AnnotationResult, *, details: bool = False) -> str:
    return json.dumps(annotation_to_dict(result, details=details), indent=2)
