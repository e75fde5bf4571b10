"""Tests for the CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from diffguard import cli
from diffguard.cli import app

from conftest import HEAD_SHA, added_patch

runner = CliRunner()

CONTEXT_ARGS = ["--repo", "acme/widgets", "--pr", "7", "--head-sha", HEAD_SHA]


@pytest.fixture
def patched_client(fake_github, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setattr(cli, "_make_client", lambda cfg: fake_github.client())
    return fake_github


@pytest.fixture
def findings_file(tmp_path: Path) -> Path:
    path = tmp_path / "findings.json"
    path.write_text(json.dumps([
        {"severity": "High", "message": "unchecked error", "file": "a.go", "start": 11, "end": 11},
        {"severity": "Medium", "message": "naming", "file": "a.go", "start": 12, "end": 12},
        {"severity": "High", "message": "elsewhere", "file": "a.go", "start": 90, "end": 90},
    ]))
    return path


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "diffguard" in result.output


class TestInit:
    def test_creates_config(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert (tmp_path / ".diffguard.toml").exists()

    def test_generated_config_loads(self, tmp_path: Path, monkeypatch):
        from diffguard.config.loader import load_config

        monkeypatch.chdir(tmp_path)
        runner.invoke(app, ["init"])
        assert load_config(tmp_path).diff.check_name == "semgrep"

    def test_refuses_overwrite(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".diffguard.toml").write_text("existing")
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1


class TestBuildDiff:
    def test_writes_report(self, patched_client, tmp_path: Path):
        patched_client.set_pull_files({"a.go": added_patch(10, ["x", "y", "z"])})
        out = tmp_path / "diff.json"
        result = runner.invoke(app, ["build-diff", *CONTEXT_ARGS, "--event", "opened", "-o", str(out)])
        assert result.exit_code == 0
        data = json.loads(out.read_text())
        assert data["pullRequest"]["diff"] == {"a.go": [10, 11, 12]}
        assert data["pullRequest"]["hasChanges"] is True

    def test_malformed_config_exit_2(self, patched_client, tmp_path: Path):
        (tmp_path / ".diffguard.toml").write_text('[github]\npage_size = "many"\n')
        result = runner.invoke(app, ["build-diff", *CONTEXT_ARGS, "--event", "opened"])
        assert result.exit_code == 2

    def test_unsupported_event(self, patched_client):
        result = runner.invoke(app, ["build-diff", *CONTEXT_ARGS, "--event", "closed"])
        assert result.exit_code == 2

    def test_api_error_exit_2(self, patched_client):
        patched_client.fail_paths["/repos/acme/widgets/pulls/7/files"] = 500
        result = runner.invoke(app, ["build-diff", *CONTEXT_ARGS, "--event", "opened"])
        assert result.exit_code == 2


class TestAnnotate:
    def test_posts_and_fails_on_new(self, patched_client, findings_file, tmp_path: Path):
        patched_client.set_pull_files({"a.go": added_patch(10, ["x", "y", "z"])})
        out = tmp_path / "result.json"
        result = runner.invoke(app, [
            "annotate", "--findings", str(findings_file), *CONTEXT_ARGS,
            "--event", "opened", "-o", str(out),
        ])
        assert result.exit_code == 1
        assert json.loads(out.read_text())["currentScan"]["newComments"] == 1
        bodies = [c["body"] for c in patched_client.review_comments]
        assert bodies == ["unchecked error", "Consider this as a suggestion. naming"]

    def test_uses_saved_diff(self, patched_client, findings_file, tmp_path: Path):
        diff = tmp_path / "diff.json"
        diff.write_text(json.dumps({
            "pullRequest": {"hasChanges": True, "files": "a.go", "diff": {"a.go": [11, 20]}},
            "uncheckedCommits": {"diff": {"a.go": [20]}},
        }))
        out = tmp_path / "result.json"
        result = runner.invoke(app, [
            "annotate", "--findings", str(findings_file), "--diff", str(diff),
            *CONTEXT_ARGS, "--event", "synchronize", "-o", str(out),
        ])
        assert result.exit_code == 0
        assert json.loads(out.read_text()) == {
            "previousScan": {"unAddressedComments": 1},
            "currentScan": {"newComments": 0},
        }
        # diff supplied, so no PR file listing
        assert patched_client.calls("GET", "/files") == 0

    def test_dry_run(self, patched_client, findings_file, tmp_path: Path):
        patched_client.set_pull_files({"a.go": added_patch(10, ["x", "y", "z"])})
        result = runner.invoke(app, [
            "annotate", "--findings", str(findings_file), *CONTEXT_ARGS,
            "--event", "opened", "--dry-run", "-o", str(tmp_path / "r.json"),
        ])
        assert result.exit_code == 1
        assert patched_client.review_comments == []

    def test_fail_on_new_disabled(self, patched_client, findings_file, tmp_path: Path):
        (tmp_path / ".diffguard.toml").write_text("[annotate]\nfail_on_new = false\n")
        patched_client.set_pull_files({"a.go": added_patch(10, ["x", "y", "z"])})
        result = runner.invoke(app, [
            "annotate", "--findings", str(findings_file), *CONTEXT_ARGS,
            "--event", "opened", "-o", str(tmp_path / "r.json"),
        ])
        assert result.exit_code == 0

    def test_missing_findings_file(self, patched_client, tmp_path: Path):
        result = runner.invoke(app, [
            "annotate", "--findings", str(tmp_path / "nope.json"), *CONTEXT_ARGS, "--event", "opened",
        ])
        assert result.exit_code == 2

    def test_bad_format(self, patched_client, findings_file):
        result = runner.invoke(app, [
            "annotate", "--findings", str(findings_file), *CONTEXT_ARGS,
            "--event", "opened", "--format", "xml",
        ])
        assert result.exit_code == 2


class TestCoverage:
    def test_posts_for_changed_directories(self, patched_client, tmp_path: Path):
        reports = tmp_path / "cov"
        reports.mkdir()
        (reports / "router.txt").write_text("coverage: 80.0%")
        patched_client.set_pull_files({"router/router.go": added_patch(1, ["x"])})

        result = runner.invoke(app, [
            "coverage", "--tmp-dir", str(reports), *CONTEXT_ARGS, "--event", "opened",
        ])
        assert result.exit_code == 0
        assert "coverage: 80.0%" in patched_client.issue_comments[0]["body"]

    def test_any_event_kind(self, patched_client, tmp_path: Path):
        (tmp_path / "router.txt").write_text("coverage: 80.0%")
        result = runner.invoke(app, [
            "coverage", "--dir", "router", "--tmp-dir", str(tmp_path), *CONTEXT_ARGS, "--event", "reopened",
        ])
        assert result.exit_code == 0
        assert len(patched_client.issue_comments) == 1

    def test_missing_report_posts_nothing(self, patched_client, tmp_path: Path):
        result = runner.invoke(app, [
            "coverage", "--dir", "router", "--tmp-dir", str(tmp_path), *CONTEXT_ARGS, "--event", "opened",
        ])
        assert result.exit_code == 2
        assert patched_client.issue_comments == []


class TestCheckPermission:
    def test_write_allowed(self, patched_client):
        patched_client.permissions["octocat"] = "write"
        result = runner.invoke(app, ["check-permission", "octocat", "--repo", "acme/widgets"])
        assert result.exit_code == 0

    def test_read_denied(self, patched_client):
        patched_client.permissions["octocat"] = "read"
        result = runner.invoke(app, ["check-permission", "octocat", "--repo", "acme/widgets"])
        assert result.exit_code == 1
