"""
Root Typer application for the relkeep CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from relkeep.cli.associations import children_app, grandchildren_app, holds_app, parents_app
from relkeep.cli.db import app as db_app
from relkeep.cli.entities import app as entities_app
from relkeep.core.logging import configure_logging
from relkeep.core.settings import get_settings

app = Typer(
    name="relkeep",
    help="relkeep — named entities with cascading and restricting associations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("relkeep")
        except PackageNotFoundError:
            from relkeep import __version__ as v
        typer.echo(f"relkeep {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """relkeep CLI — manage entities, their children, grandchildren and holds."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        service=settings.service_name,
    )


app.add_typer(db_app, name="db", help="Database operations.")
app.add_typer(parents_app, name="parents", help="Parent records.")
app.add_typer(entities_app, name="entities", help="Entity management.")
app.add_typer(children_app, name="children", help="Children owned by an entity.")
app.add_typer(grandchildren_app, name="grandchildren", help="Grandchildren owned by a child.")
app.add_typer(holds_app, name="holds", help="Holds that block entity deletion.")
