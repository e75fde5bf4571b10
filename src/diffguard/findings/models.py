"""Finding data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class Bucket(str, Enum):
    IN_DIFF_CURRENT = "in_diff_current"
    IN_DIFF_PREVIOUS = "in_diff_previous"
    OUTSIDE_DIFF = "outside_diff"


@dataclass(frozen=True)
class Finding:
    """A static-analysis result as reported by the analyzer."""

    file: str
    start_line: int
    end_line: int
    message: str
    severity: str


@dataclass(frozen=True)
class ClassifiedFinding:
    """A Finding placed in a bucket, with the line a comment should go on."""

    finding: Finding
    line: int
    bucket: Bucket

    @property
    def file(self) -> str:
        return self.finding.file

    @property
    def message(self) -> str:
        return self.finding.message


@dataclass
class SplitResult:
    """Findings of one severity partition, split by bucket."""

    current: List[ClassifiedFinding] = field(default_factory=list)
    previous: List[ClassifiedFinding] = field(default_factory=list)
    outside: List[ClassifiedFinding] = field(default_factory=list)

    def add(self, item: ClassifiedFinding) -> None:
        if item.bucket == Bucket.IN_DIFF_CURRENT:
            self.current.append(item)
        elif item.bucket == Bucket.IN_DIFF_PREVIOUS:
            self.previous.append(item)
        else:
            self.outside.append(item)

    @property
    def in_diff(self) -> bool:
        return bool(self.current or self.previous)


@dataclass
class AnnotationResult:
    """Outcome of publishing review comments for one run."""

    new_comments: int = 0
    unaddressed_comments: int = 0
    new_suggestions: int = 0
    errors: SplitResult = field(default_factory=SplitResult)
    warnings: SplitResult = field(default_factory=SplitResult)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previousScan": {"unAddressedComments": self.unaddressed_comments},
            "currentScan": {"newComments": self.new_comments},
        }
