"""Finding models, loading, classification, and comment publishing."""

from diffguard.findings.classifier import classify, match_line, partition
from diffguard.findings.loader import load_findings, parse_findings
from diffguard.findings.models import (
    AnnotationResult,
    Bucket,
    ClassifiedFinding,
    Finding,
    SplitResult,
)
from diffguard.findings.publisher import CommentPublisher

__all__ = [
    "AnnotationResult",
    "Bucket",
    "ClassifiedFinding",
    "CommentPublisher",
    "Finding",
    "SplitResult",
    "classify",
    "load_findings",
    "match_line",
    "parse_findings",
    "partition",
]
