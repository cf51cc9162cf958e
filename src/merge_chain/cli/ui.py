"""Reusable UI helpers for merge-chain console output."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

console = Console()

_SYMBOLS = {
    "pending": "[green dim]○[/green dim]",
    "done": "[green]●[/green]",
    "warning": "[yellow]●[/yellow]",
    "error": "[red]●[/red]",
    "skipped": "[yellow]○[/yellow]",
}


class StepTracker:
    """Track per-branch steps of a range operation and render them as a Rich tree."""

    def __init__(self, title: str):
        self.title = title
        self.steps: list[dict[str, str]] = []  # {key, label, status, detail}

    def add(self, key: str, label: str | None = None):
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label or key, "status": "pending", "detail": ""})

    def complete(self, key: str, detail: str = ""):
        self._update(key, status="done", detail=detail)

    def warn(self, key: str, detail: str = ""):
        self._update(key, status="warning", detail=detail)

    def error(self, key: str, detail: str = ""):
        self._update(key, status="error", detail=detail)

    def skip(self, key: str, detail: str = ""):
        self._update(key, status="skipped", detail=detail)

    def count(self, status: str) -> int:
        return sum(1 for s in self.steps if s["status"] == status)

    def _update(self, key: str, status: str, detail: str):
        for s in self.steps:
            if s["key"] == key:
                s["status"] = status
                if detail:
                    s["detail"] = detail
                return
        self.steps.append({"key": key, "label": key, "status": status, "detail": detail})

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{escape(self.title)}[/cyan]", guide_style="grey50")
        for step in self.steps:
            label = escape(step["label"])
            detail_text = escape(step["detail"].strip())
            symbol = _SYMBOLS.get(step["status"], " ")

            if step["status"] == "pending":
                line = f"{symbol} [bright_black]{label}[/bright_black]"
            elif detail_text:
                line = f"{symbol} [white]{label}[/white] [bright_black]({detail_text})[/bright_black]"
            else:
                line = f"{symbol} [white]{label}[/white]"
            tree.add(line)
        return tree


def print_error(message: str, hint: str | None = None, out: Console | None = None) -> None:
    """Print an operator-facing error with its optional next step."""
    target = out or console
    target.print(f"[red]Error:[/red] {escape(message)}")
    if hint:
        target.print(f"[yellow]Hint:[/yellow] {escape(hint)}")
