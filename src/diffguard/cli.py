"""diffguard CLI — Typer application with build-diff, annotate, coverage,
check-permission, and init commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from diffguard import __version__
from diffguard.errors import DiffGuardError

app = typer.Typer(
    name="diffguard",
    help="Annotate pull requests with static-analysis findings on changed lines.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=debug, rich_tracebacks=True)],
        force=True,
    )


def _fail(label: str, exc: Exception) -> typer.Exit:
    console.print(f"[bold red]{label}:[/bold red] {exc}")
    return typer.Exit(code=2)


def _load_config(config: Optional[str]):
    from diffguard.config.loader import ConfigError, load_config

    try:
        return load_config(Path.cwd(), config)
    except ConfigError as exc:
        raise _fail("Config error", exc) from exc


def _make_client(cfg):
    """Create the GitHub client for a command run."""
    from diffguard.github.client import GitHubClient

    if not cfg.github.token:
        console.print("[yellow]⚠[/yellow]  No GITHUB_TOKEN set; API calls are unauthenticated")
    return GitHubClient.from_config(cfg.github)


def _load_context(repo, pr, event, head_sha, event_path, require_event=True):
    from diffguard.github.event import load_context

    try:
        return load_context(
            repository=repo,
            number=pr,
            event=event,
            head_sha=head_sha,
            event_path=event_path,
            require_event=require_event,
        )
    except DiffGuardError as exc:
        raise _fail("Event error", exc) from exc


def _write_report(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
    else:
        print(text)


# ── build-diff ────────────────────────────────────────────────────────────────


@app.command("build-diff")
def build_diff(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .diffguard.toml"),
    repo: Optional[str] = typer.Option(None, "--repo", help="owner/name (default: GITHUB_REPOSITORY)"),
    pr: Optional[int] = typer.Option(None, "--pr", help="Pull request number"),
    event: Optional[str] = typer.Option(None, "--event", help="opened | synchronize"),
    head_sha: Optional[str] = typer.Option(None, "--head-sha", help="Head commit SHA"),
    event_path: Optional[str] = typer.Option(None, "--event-path", help="Event payload JSON"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write report to file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
) -> None:
    """Compute changed lines for the PR and its unscanned commits (JSON)."""
    from diffguard.git.builder import DiffBuilder
    from diffguard.output import json_report

    _configure_logging(verbose, debug)
    cfg = _load_config(config)
    ctx = _load_context(repo, pr, event, head_sha, event_path)

    try:
        with _make_client(cfg) as client:
            builder = DiffBuilder.from_config(client, ctx, cfg.diff, cfg.github.max_workers)
            report = builder.build_diff()
    except DiffGuardError as exc:
        raise _fail("GitHub error", exc) from exc

    _write_report(json_report.render_diff(report), output)


# ── annotate ──────────────────────────────────────────────────────────────────


@app.command()
def annotate(
    findings: str = typer.Option(..., "--findings", "-f", help="Findings file (JSON or YAML)"),
    diff: Optional[str] = typer.Option(None, "--diff", "-d", help="Report from build-diff (rebuilt if omitted)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .diffguard.toml"),
    repo: Optional[str] = typer.Option(None, "--repo", help="owner/name (default: GITHUB_REPOSITORY)"),
    pr: Optional[int] = typer.Option(None, "--pr", help="Pull request number"),
    event: Optional[str] = typer.Option(None, "--event", help="opened | synchronize"),
    head_sha: Optional[str] = typer.Option(None, "--head-sha", help="Head commit SHA"),
    event_path: Optional[str] = typer.Option(None, "--event-path", help="Event payload JSON"),
    format: str = typer.Option("json", "--format", help="Output format: json | terminal"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write JSON result to file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Classify without posting comments"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
) -> None:
    """Post review comments for findings on lines changed by unscanned commits."""
    import json

    from diffguard.findings.loader import load_findings
    from diffguard.findings.publisher import CommentPublisher
    from diffguard.git.builder import DiffBuilder
    from diffguard.git.models import DiffReport
    from diffguard.output import json_report, terminal

    if format not in ("json", "terminal"):
        console.print(f"[bold red]Invalid format:[/bold red] {format}")
        raise typer.Exit(code=2)

    _configure_logging(verbose, debug)
    cfg = _load_config(config)
    ctx = _load_context(repo, pr, event, head_sha, event_path)

    try:
        found = load_findings(Path(findings))
    except DiffGuardError as exc:
        raise _fail("Findings error", exc) from exc

    report: Optional[DiffReport] = None
    if diff:
        try:
            report = DiffReport.from_dict(json.loads(Path(diff).read_text(encoding="utf-8")))
        except (OSError, ValueError, AttributeError) as exc:
            raise _fail("Diff report error", exc) from exc

    try:
        with _make_client(cfg) as client:
            if report is None:
                builder = DiffBuilder.from_config(client, ctx, cfg.diff, cfg.github.max_workers)
                report = builder.build_diff()
            publisher = CommentPublisher.from_config(client, ctx, report, cfg.annotate, dry_run=dry_run)
            result = publisher.publish(found)
    except DiffGuardError as exc:
        raise _fail("GitHub error", exc) from exc

    if format == "terminal":
        terminal.render(result, dry_run=dry_run, console=console)
        if output:
            _write_report(json_report.render_annotation(result, details=True), output)
    else:
        _write_report(json_report.render_annotation(result), output)

    if cfg.annotate.fail_on_new and result.new_comments > 0:
        raise typer.Exit(code=1)


# ── coverage ──────────────────────────────────────────────────────────────────


@app.command()
def coverage(
    directory: Optional[List[str]] = typer.Option(None, "--dir", help="Directory to report (repeatable)"),
    tmp_dir: Optional[str] = typer.Option(None, "--tmp-dir", help="Directory holding <dir>.txt reports"),
    remote_dir: Optional[str] = typer.Option(None, "--remote-dir", help="coverage-preview subdirectory"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .diffguard.toml"),
    repo: Optional[str] = typer.Option(None, "--repo", help="owner/name (default: GITHUB_REPOSITORY)"),
    pr: Optional[int] = typer.Option(None, "--pr", help="Pull request number"),
    event: Optional[str] = typer.Option(None, "--event", help="any pull request action"),
    head_sha: Optional[str] = typer.Option(None, "--head-sha", help="Head commit SHA"),
    event_path: Optional[str] = typer.Option(None, "--event-path", help="Event payload JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
) -> None:
    """Post a coverage summary comment for the directories the PR touches."""
    from diffguard.coverage.summary import CoverageReporter
    from diffguard.git.builder import DiffBuilder, coverage_directory_extractor

    _configure_logging(verbose, debug)
    cfg = _load_config(config)
    if tmp_dir:
        cfg.coverage.tmp_dir = tmp_dir
    if remote_dir:
        cfg.coverage.remote_dir = remote_dir
    ctx = _load_context(repo, pr, event, head_sha, event_path, require_event=False)

    try:
        with _make_client(cfg) as client:
            directories = list(directory or [])
            if not directories:
                builder = DiffBuilder.from_config(client, ctx, cfg.diff)
                directories = builder.directories(coverage_directory_extractor(cfg.coverage))
            if not directories:
                console.print("[dim]No directories with coverage to report.[/dim]")
                raise typer.Exit(code=0)
            CoverageReporter.from_config(client, ctx, cfg.coverage).post(directories)
    except DiffGuardError as exc:
        raise _fail("Coverage error", exc) from exc

    console.print(f"[green]✓[/green] Posted coverage summary for {len(directories)} director(ies)")


# ── check-permission ──────────────────────────────────────────────────────────


@app.command("check-permission")
def check_permission(
    user: str = typer.Argument(..., help="GitHub username"),
    repo: Optional[str] = typer.Option(None, "--repo", envvar="GITHUB_REPOSITORY", help="owner/name"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .diffguard.toml"),
) -> None:
    """Exit 0 if USER has write or admin access to the repository, else 1."""
    from diffguard.github.permissions import has_write_permission

    cfg = _load_config(config)
    if not repo or "/" not in repo:
        console.print("[bold red]Error:[/bold red] repository must be given as owner/name")
        raise typer.Exit(code=2)
    owner, name = repo.split("/", 1)

    try:
        with _make_client(cfg) as client:
            allowed = has_write_permission(client, owner, name, user)
    except DiffGuardError as exc:
        raise _fail("GitHub error", exc) from exc

    if allowed:
        console.print(f"[green]✓[/green] {user} has write access to {repo}")
        raise typer.Exit(code=0)
    console.print(f"[red]✗[/red] {user} does not have write access to {repo}")
    raise typer.Exit(code=1)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .diffguard.toml in the current directory."""
    from diffguard.config.defaults import DEFAULT_TOML
    from diffguard.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"diffguard {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """diffguard — annotate pull requests with findings on the lines they change."""
