"""
CLI: ``relkeep db`` — database management commands.
"""

from __future__ import annotations

import typer

from relkeep.cli.utils import console, resolve_database_url

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    database: str | None = typer.Option(None, "--database", "-d", help="Database path or URL"),
) -> None:
    """Create the relkeep tables."""
    from relkeep.core.orm.session import create_relkeep_engine, init_db

    engine = create_relkeep_engine(resolve_database_url(database))
    try:
        tables = init_db(engine)
    finally:
        engine.dispose()
    console.print(f"[green]Initialised[/green] {len(tables)} tables: {', '.join(tables)}")
