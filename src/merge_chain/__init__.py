"""
merge-chain - propagate a chapter commit through a numbered branch chain.

Usage:
    merge-chain start 3 8
    merge-chain continue
    merge-chain status
"""

from __future__ import annotations

import logging

import click
import typer
from typer.core import TyperGroup

from merge_chain.cli.commands import register_commands
from merge_chain.cli.commands.chain import print_usage

__version__ = "0.1.0"


class ChainGroup(TyperGroup):
    """Root group that answers unknown verbs and bad arity with the short usage."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError:
            print_usage()
            ctx.exit(1)


app = typer.Typer(
    name="merge-chain",
    help="Propagate a commit through a chain of chapter branches (ch1, ch2, ...).",
    add_completion=False,
    invoke_without_command=True,
    cls=ChainGroup,
)


@app.callback()
def callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every git command"),
):
    """Print the short usage when no command is given."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        print_usage()
        raise typer.Exit(1)


register_commands(app)


def main():
    app()


if __name__ == "__main__":
    main()
