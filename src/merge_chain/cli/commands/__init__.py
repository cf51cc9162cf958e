"""CLI command modules for merge-chain.

``register_commands`` attaches every verb to the root typer app.
"""

from __future__ import annotations

import typer

from . import chain


def register_commands(app: typer.Typer) -> None:
    app.command("start")(chain.start)
    app.command("continue")(chain.continue_)
    app.command("abort")(chain.abort)
    app.command("status")(chain.status)
    app.command("sync")(chain.sync)
    app.command("push")(chain.push)
    app.command("help")(chain.show_help)


__all__ = ["register_commands"]
