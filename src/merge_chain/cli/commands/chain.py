"""Chain merge command implementations.

Every command resolves the repository, loads ``.merge-chain.yaml`` and hands
off to the merge package. ``ChainError`` is reported in one place and turned
into exit code 1.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer
from rich.markup import escape

from merge_chain.cli.ui import StepTracker, console, print_error
from merge_chain.core.branches import ChapterRange, branch_name
from merge_chain.core.config import ChainConfig, load_config
from merge_chain.core.git_ops import find_git_dir, find_repo_root
from merge_chain.core.git_preflight import run_git_preflight
from merge_chain.core.vcs import ChainGateway, GitGateway
from merge_chain.errors import ChainError
from merge_chain.merge.executor import ChainMerger, ChainResult, InterruptReason
from merge_chain.merge.remote import push_branches, sync_branches

T = TypeVar("T")

USAGE = """\
Usage:
  merge-chain start <start_branch_id> <end_branch_id>   # Start merging
  merge-chain continue                                  # Continue interrupted merge
  merge-chain abort                                     # Abort interrupted merge
  merge-chain status                                    # Check current merge status
  merge-chain sync <start_branch_id> <end_branch_id>    # Sync branches from remote
  merge-chain push <remote> <start_branch_id> <end_branch_id>  # Push local branches to remote
  merge-chain help                                      # Show detailed help information

Examples:
  merge-chain sync 1 8          # Sync ch1 to ch8 from remote (for new clones)
  merge-chain start 3 8         # Start merging from ch3 to ch8
  merge-chain push origin 3 8   # Push ch3 to ch8 to origin remote
  merge-chain status            # Check current merge progress
  merge-chain continue          # Continue merge after resolving conflicts

Merge message format: 'Merge ch{source} to ch{target}: {original message}'"""

HELP_TEXT = """\
Git Branch Chain Merge Tool
===========================

This tool keeps linear commit relationships across numbered chapter branches.
When you commit to branch ch<k>, it merges that commit into every branch
with a number greater than k, one after another.

Command descriptions:
  start <start_id> <end_id>          Start chain merge from ch<start_id> to ch<end_id>
  continue                           Continue interrupted merge process
  abort                              Abort current merge process
  status [--json]                    Show current merge status and progress
  sync <start_id> <end_id>           Create local branches from the remote (for new clones)
  push <remote> <start_id> <end_id>  Push local branches to the given remote
  help                               Show this help information

Git operations done by the tool, for each target branch (start+1 .. end):
  1. git checkout ch{target}
  2. git merge --no-ff ch{source} -m "Merge..."
  3. If conflict: save state and exit for manual resolution
  4. If success: continue to the next branch
  A target that already contains its source is skipped.

Workflow:
  For newly cloned repositories:
  0. Run 'merge-chain sync 1 8' to create local branches from the remote

  Normal workflow:
  1. Commit code to a branch (e.g. ch3)
  2. Run 'merge-chain start 3 8' to start merging
  3. If conflicts occur, resolve them and run 'merge-chain continue'
  4. Repeat step 3 until all branches are merged
  5. Run 'merge-chain push origin 3 8' to push the merged branches

Conflict resolution (when a merge fails):
  1. Edit the conflicted files
  2. Stage each resolved file with 'git add <file>'
  3. Complete the merge commit with 'git commit'
  4. Run 'merge-chain continue' to resume the chain merge

Merge message format:
  'Merge ch{source} to ch{target}: {original commit message}'

  Example: 'Merge ch3 to ch4: Add user authentication feature'

State file:
  '.merge_chain_state.json' in the git directory (.git/) records the progress
  of an interrupted merge. It is deleted when the merge completes or is
  aborted. Set 'state_file' in .merge-chain.yaml to use another name."""


def print_usage() -> None:
    console.print(USAGE, markup=False, highlight=False)


def _build_gateway(repo_root: Path) -> ChainGateway:
    return GitGateway(repo_root)


@dataclass
class _Context:
    repo_root: Path
    state_dir: Path
    config: ChainConfig
    gateway: ChainGateway

    def merger(self) -> ChainMerger:
        return ChainMerger(self.gateway, self.state_dir, self.config.state_file, console=console)


def _load_context() -> _Context:
    repo_root = find_repo_root()
    return _Context(
        repo_root=repo_root,
        state_dir=find_git_dir(repo_root),
        config=load_config(repo_root),
        gateway=_build_gateway(repo_root),
    )


def _merger() -> ChainMerger:
    return _load_context().merger()


def _run_or_exit(fn: Callable[[], T]) -> T:
    try:
        return fn()
    except ChainError as exc:
        print_error(str(exc), exc.hint)
        raise typer.Exit(1) from exc


def _require_args(*values: Optional[str]) -> None:
    if any(value is None for value in values):
        print_usage()
        raise typer.Exit(1)


def _preflight(ctx: _Context, remote: str | None = None, allow_location: bool = False) -> None:
    preflight = run_git_preflight(
        ctx.repo_root, ctx.gateway, remote=remote, allow_location=allow_location
    )
    for warning in preflight.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning.message)}")
    if preflight.passed:
        return
    issue = preflight.first_error
    print_error(issue.message, issue.remediation)
    if issue.command:
        console.print(f"   {escape(issue.command)}")
    raise typer.Exit(1)


def _report_result(result: ChainResult) -> None:
    session = result.session
    first, last = branch_name(session.start), branch_name(session.end)

    if result.success:
        console.print()
        console.print("[bold green]All branches merged successfully![/bold green]")
        console.print(f"Merge range: {first} -> {last}")
        console.print(f"Original commit: {escape(session.origin_message)}")
        if result.skipped:
            console.print(f"[dim]Already up to date: {', '.join(result.skipped)}[/dim]")
        console.print(f"Current branch: {escape(result.head or '(detached)')}")
        console.print()
        console.print("To push all merged branches to remote, run:")
        console.print(f"   merge-chain push origin {session.start} {session.end}")
        return

    console.print()
    if result.reason is InterruptReason.MERGE_CONFLICT:
        console.print(f"[red]✗[/red] Conflict occurred in {result.failed_branch}")
        if result.detail:
            console.print(escape(result.detail), style="dim")
        console.print("Please follow these steps to resolve:")
        console.print("1. Manually resolve conflict files")
        console.print("2. Run 'git add <file>...' for each resolved file")
        console.print("3. Run 'git commit' to commit the merge")
        console.print("4. Run 'merge-chain continue' to continue the merge process")
    else:
        print_error(result.error or "Chain merge interrupted")
        if result.detail:
            console.print(escape(result.detail), style="dim")
        if result.reason is InterruptReason.BRANCH_MISSING:
            console.print(
                f"Create the branch (e.g. 'merge-chain sync {session.start} {session.end}'), "
                "then run 'merge-chain continue'."
            )
        else:
            console.print(
                "Commit or stash local changes, then run 'merge-chain continue'."
            )
    console.print()
    console.print("Or run 'merge-chain abort' to abort the merge")
    console.print("Or run 'merge-chain status' to check current status")
    raise typer.Exit(1)


def start(
    start_id: Optional[str] = typer.Argument(None, help="Chapter number holding the new commit"),
    end_id: Optional[str] = typer.Argument(None, help="Last chapter number to merge into"),
) -> None:
    """Start a chain merge from ch<start_id> to ch<end_id>."""
    _require_args(start_id, end_id)

    def _run() -> None:
        chapter_range = ChapterRange.for_merge(start_id, end_id)
        ctx = _load_context()
        _preflight(ctx)
        merger = ctx.merger()
        _report_result(merger.start(chapter_range.start, chapter_range.end))

    _run_or_exit(_run)


def continue_() -> None:
    """Continue an interrupted chain merge."""
    _run_or_exit(lambda: _report_result(_merger().resume()))


def abort() -> None:
    """Abort the interrupted chain merge (no git rollback)."""

    def _run() -> None:
        if _merger().abort():
            console.print("Interrupted merge has been aborted.")
        else:
            console.print("No interrupted state found, nothing to abort.")

    _run_or_exit(_run)


def status(
    as_json: bool = typer.Option(False, "--json", help="Render status as JSON"),
) -> None:
    """Show the current chain merge status and progress."""

    def _run() -> None:
        report = _merger().status()
        if as_json:
            typer.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
            return

        session = report.session
        if session is None:
            console.print("Merge status: No merge in progress")
            console.print(f"Current branch: {escape(report.current_branch or '(detached)')}")
            return

        console.print("Merge status: In progress")
        console.print(f"Start branch: {branch_name(session.start)}")
        console.print(f"End branch: {branch_name(session.end)}")
        console.print(f"Original message: {escape(session.origin_message)}")
        console.print(f"Current progress: Preparing to merge to {session.current_target}")
        console.print(f"Remaining branches: {session.remaining}")
        if session.next_index > session.start + 1:
            console.print(
                f"Completed: {branch_name(session.start)} -> {branch_name(session.next_index - 1)}"
            )
        if session.next_index <= session.end:
            console.print(f"Pending: {session.current_target} -> {branch_name(session.end)}")
        if session.last_error:
            console.print(f"[dim]Last interruption: {escape(session.last_error)}[/dim]")

    _run_or_exit(_run)


def sync(
    start_id: Optional[str] = typer.Argument(None, help="First chapter number"),
    end_id: Optional[str] = typer.Argument(None, help="Last chapter number"),
    remote: Optional[str] = typer.Option(None, "--remote", help="Remote to sync from (default from config, else origin)"),
) -> None:
    """Create missing local chapter branches from the remote."""
    _require_args(start_id, end_id)

    def _run() -> None:
        chapter_range = ChapterRange.for_transfer(start_id, end_id)
        ctx = _load_context()
        source = remote or ctx.config.remote
        _preflight(ctx, remote=source)

        tracker = StepTracker(f"Sync {branch_name(chapter_range.start)}..{branch_name(chapter_range.end)} from {source}")
        for name in chapter_range.branches():
            tracker.add(name)

        def _progress(name: str, outcome: str, detail: str) -> None:
            if outcome == "created":
                tracker.complete(name, detail)
            elif outcome == "exists":
                tracker.skip(name, detail)
            else:
                tracker.warn(name, detail)

        console.print("Fetching remote branch information...")
        report = sync_branches(ctx.gateway, chapter_range, source, on_progress=_progress)
        console.print(tracker.render())
        for name in report.missing:
            console.print(
                f"[yellow]Warning:[/yellow] Remote branch {source}/{name} does not exist, skipping"
            )
        console.print("Branch synchronization completed!")

    _run_or_exit(_run)


def push(
    remote: Optional[str] = typer.Argument(None, help="Remote to push to"),
    start_id: Optional[str] = typer.Argument(None, help="First chapter number"),
    end_id: Optional[str] = typer.Argument(None, help="Last chapter number"),
) -> None:
    """Push a range of chapter branches to a remote."""
    _require_args(remote, start_id, end_id)

    def _run() -> None:
        chapter_range = ChapterRange.for_transfer(start_id, end_id)
        ctx = _load_context()
        _preflight(ctx, remote=remote, allow_location=True)

        tracker = StepTracker(f"Push {branch_name(chapter_range.start)}..{branch_name(chapter_range.end)} to {remote}")
        for name in chapter_range.branches():
            tracker.add(name)

        def _progress(name: str, outcome: str, detail: str) -> None:
            if outcome == "pushed":
                tracker.complete(name, detail)
            else:
                tracker.error(name, detail)

        report = push_branches(
            ctx.gateway,
            chapter_range,
            remote,
            ctx.state_dir,
            ctx.config.state_file,
            on_progress=_progress,
        )
        console.print(tracker.render())
        console.print()
        if report.success:
            console.print("[bold green]All branches pushed successfully![/bold green]")
            return

        console.print("[yellow]Push completed with some failures:[/yellow]")
        for failure in report.failures:
            console.print(f"  - {failure}")
        console.print()
        console.print("Please check the failed branches and try again if needed.")
        raise typer.Exit(1)

    _run_or_exit(_run)


def show_help() -> None:
    """Show detailed help information."""
    console.print(HELP_TEXT, markup=False, highlight=False)


__all__ = ["abort", "continue_", "print_usage", "push", "show_help", "start", "status", "sync"]
