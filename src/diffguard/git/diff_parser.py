"""Per-file patch parser.

GitHub returns each changed file's patch as bare hunks (no ``diff --git``
or ``---``/``+++`` headers). The parser tracks the target-file line number
through each hunk and yields the added lines.
"""

from __future__ import annotations

import logging
import re
from fnmatch import fnmatch
from typing import Callable, Generator, Iterable, List, Optional, Sequence

from diffguard.git.models import DiffLine, FileSkipped, UnifiedDiff
from diffguard.github.models import PullRequestFile

logger = logging.getLogger(__name__)

FileFilter = Callable[[str], bool]
LineFilter = Callable[[str], bool]

_HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")
_NO_NEWLINE_RE = re.compile(r"^\\ No newline at end of file$")


class PatchParser:
    """Parse one file's patch and yield its added lines.

    Usage::

        for line in PatchParser("a.go", patch).parse():
            print(line.line_no, line.content)
    """

    def __init__(self, path: str, patch: Optional[str]) -> None:
        self.path = path
        # Only "\n" separates patch lines; form feeds and U+2028 stay in the content
        self._lines = patch.split("\n") if patch else []
        if self._lines and not self._lines[-1]:
            self._lines.pop()

    @property
    def is_empty(self) -> bool:
        # A single line cannot hold both a hunk header and a change.
        return len(self._lines) <= 1

    def parse(self) -> Generator[DiffLine, None, None]:
        """Yield a DiffLine for every '+' line, numbered in the new file."""
        if self.is_empty:
            return

        line_no: Optional[int] = None
        for raw_line in self._lines:
            hm = _HUNK_HEADER_RE.match(raw_line)
            if hm:
                line_no = int(hm.group(1))
                continue

            if line_no is None:
                # Content before the first hunk header is not part of any hunk
                continue

            if raw_line.startswith("-") or _NO_NEWLINE_RE.match(raw_line):
                continue

            if raw_line.startswith("+"):
                yield DiffLine(
                    file=self.path,
                    line_no=line_no,
                    content=raw_line[1:].rstrip("\r"),
                )
            line_no += 1


def changed_lines(patch: Optional[str], line_filter: Optional[LineFilter] = None) -> List[int]:
    """Return the new-file line numbers of added lines accepted by *line_filter*."""
    return [
        dl.line_no
        for dl in PatchParser("", patch).parse()
        if line_filter is None or line_filter(dl.content)
    ]


def parse_files(
    files: Iterable[PullRequestFile],
    file_filter: Optional[FileFilter] = None,
    line_filter: Optional[LineFilter] = None,
) -> UnifiedDiff:
    """Build a UnifiedDiff from a list of changed files."""
    diff: UnifiedDiff = {}
    for f in files:
        skipped = _parse_file(f, diff, file_filter, line_filter)
        if skipped is not None:
            logger.debug("Skipped %s (%s)", skipped.path, skipped.reason)
    return diff


def _parse_file(
    f: PullRequestFile,
    diff: UnifiedDiff,
    file_filter: Optional[FileFilter],
    line_filter: Optional[LineFilter],
) -> Optional[FileSkipped]:
    if file_filter is not None and not file_filter(f.filename):
        return FileSkipped(path=f.filename, reason="filtered")

    parser = PatchParser(f.filename, f.patch)
    if parser.is_empty:
        return FileSkipped(path=f.filename, reason="no_patch")

    lines = diff.setdefault(f.filename, [])
    seen = set(lines)
    for dl in parser.parse():
        if line_filter is not None and not line_filter(dl.content):
            continue
        if dl.line_no not in seen:
            seen.add(dl.line_no)
            lines.append(dl.line_no)

    if not lines:
        del diff[f.filename]
        return FileSkipped(path=f.filename, reason="no_additions")
    return None


# ---- filter factories ----


def glob_file_filter(include: Sequence[str], exclude: Sequence[str] = ()) -> FileFilter:
    """Accept paths matching any *include* glob (all if empty) and no *exclude* glob."""

    def accept(path: str) -> bool:
        if include and not any(fnmatch(path, g) for g in include):
            return False
        return not any(fnmatch(path, g) for g in exclude)

    return accept


def regex_line_filter(exclude_patterns: Sequence[str]) -> Optional[LineFilter]:
    """Reject added lines whose content matches any of *exclude_patterns*."""
    if not exclude_patterns:
        return None
    compiled = [re.compile(p) for p in exclude_patterns]

    def accept(content: str) -> bool:
        return not any(p.search(content) for p in compiled)

    return accept
