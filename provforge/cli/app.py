"""Main Typer application — imports and registers all CLI commands.

Entry point: ``provforge`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from provforge.cli.commands.destroy import destroy_cmd
from provforge.cli.commands.lineage import lineage_cmd
from provforge.cli.commands.list_cmd import list_cmd
from provforge.cli.commands.mint import mint_cmd
from provforge.cli.commands.show import show_cmd
from provforge.config import config

app = typer.Typer(
    name="provforge",
    help="Provforge: immutable provenance records for content packages.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="mint", help="Mint a record and send it to the sender.")(mint_cmd)
app.command(name="show", help="Show a live record.")(show_cmd)
app.command(name="list", help="List live records.")(list_cmd)
app.command(name="destroy", help="Destroy a record you own.")(destroy_cmd)
app.command(name="lineage", help="Walk a record's parent chain.")(lineage_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(config.log_level, "--log-level", help="Logging level."),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
