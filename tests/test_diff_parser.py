"""Tests for the per-file patch parser."""

from diffguard.git.diff_parser import (
    PatchParser,
    changed_lines,
    glob_file_filter,
    parse_files,
    regex_line_filter,
)
from diffguard.github.models import PullRequestFile

from conftest import added_patch


class TestChangedLines:
    def test_added_lines_numbered_in_new_file(self, sample_patch):
        assert changed_lines(sample_patch) == [2, 3, 22, 23]

    def test_content_stripped_of_prefix(self, sample_patch):
        lines = list(PatchParser("main.go", sample_patch).parse())
        assert lines[0].content == "var a = 2"
        assert lines[0].file == "main.go"

    def test_deleted_lines_never_reported(self):
        patch = (
            "@@ -1,4 +1,2 @@\n"
            " keep\n"
            "-gone one\n"
            "-gone two\n"
            "+new\n"
            " keep too\n"
        )
        assert changed_lines(patch) == [2]

    def test_count_matches_added_lines(self):
        patch = added_patch(10, ["a", "b", "c"])
        assert changed_lines(patch) == [10, 11, 12]

    def test_hunk_header_resets_counter(self):
        patch = (
            "@@ -5,0 +5,1 @@\n"
            "+line at 5\n"
            "@@ -20,0 +21,1 @@\n"
            "+line at 21\n"
        )
        assert changed_lines(patch) == [5, 21]

    def test_single_line_hunk_header(self):
        """Hunk header without comma implies count=1."""
        patch = "@@ -1 +1 @@\n-old\n+replaced line"
        assert changed_lines(patch) == [1]

    def test_no_newline_marker_ignored(self):
        patch = (
            "@@ -1,1 +1,2 @@\n"
            " first\n"
            "\\ No newline at end of file\n"
            "+second\n"
        )
        assert changed_lines(patch) == [2]

    def test_crlf_content(self):
        lines = list(PatchParser("f", "@@ -0,0 +1,1 @@\r\n+hello\r\n").parse())
        assert lines[0].content == "hello"

    def test_form_feed_inside_added_line(self):
        lines = list(PatchParser("f", "@@ -0,0 +1,2 @@\n+a\x0cb\n+c").parse())
        assert [l.line_no for l in lines] == [1, 2]
        assert lines[0].content == "a\x0cb"

    def test_line_separator_inside_context_line(self):
        assert changed_lines("@@ -1,1 +1,2 @@\n x\u2028y\n+new") == [2]

    def test_trailing_newline_adds_no_line(self):
        assert PatchParser("f", "@@ -1 +1 @@\n").is_empty


class TestEmptyPatches:
    def test_none_patch(self):
        assert changed_lines(None) == []

    def test_empty_patch(self):
        assert changed_lines("") == []

    def test_single_line_patch(self):
        assert PatchParser("f", "@@ -1 +1 @@").is_empty
        assert changed_lines("@@ -1 +1 @@") == []


class TestLineFilter:
    def test_filter_excludes_but_counter_advances(self):
        patch = added_patch(1, ["// comment", "code()", "// another", "more()"])
        keep_code = regex_line_filter([r"^\s*//"])
        assert changed_lines(patch, keep_code) == [2, 4]

    def test_no_patterns_means_no_filter(self):
        assert regex_line_filter([]) is None


class TestParseFiles:
    def test_builds_unified_diff(self, sample_patch):
        files = [
            PullRequestFile("main.go", patch=sample_patch),
            PullRequestFile("img.png", patch=None),
            PullRequestFile("moved.go", status="renamed", patch=""),
        ]
        assert parse_files(files) == {"main.go": [2, 3, 22, 23]}

    def test_deletion_only_file_omitted(self):
        files = [PullRequestFile("old.go", patch="@@ -1,2 +0,0 @@\n-a\n-b")]
        assert parse_files(files) == {}

    def test_file_filter(self):
        files = [
            PullRequestFile("adapters/a.go", patch=added_patch(1, ["x"])),
            PullRequestFile("vendor/b.go", patch=added_patch(1, ["y"])),
            PullRequestFile("README.md", patch=added_patch(1, ["z"])),
        ]
        only_go = glob_file_filter(["*.go"], ["vendor/*"])
        assert parse_files(files, file_filter=only_go) == {"adapters/a.go": [1]}

    def test_empty_include_accepts_everything(self):
        accept = glob_file_filter([])
        assert accept("anything/at/all.txt")
