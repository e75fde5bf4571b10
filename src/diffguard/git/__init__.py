"""Diff layer — patch parsing and the pull-request diff builder."""

from diffguard.git.builder import DiffBuilder, coverage_directory_extractor
from diffguard.git.diff_parser import PatchParser, changed_lines, parse_files
from diffguard.git.models import DiffLine, DiffReport, FileSkipped, UnifiedDiff

__all__ = [
    "DiffBuilder",
    "DiffLine",
    "DiffReport",
    "FileSkipped",
    "PatchParser",
    "UnifiedDiff",
    "changed_lines",
    "coverage_directory_extractor",
    "parse_files",
]
