"""
CLI: ``relkeep entities`` — create, rename, inspect and delete entities.
"""

from __future__ import annotations

import typer

from relkeep.cli.utils import operation_context, output_paged, output_result

app = typer.Typer(no_args_is_help=True)


@app.command("create")
def create_cmd(
    name: str = typer.Argument(..., help="Unique entity name"),
    parent_id: int = typer.Option(..., "--parent", "-p", help="Parent id"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Create an entity under a parent."""
    from relkeep.ops.entities import create_entity

    with operation_context(database) as ctx:
        result = create_entity(ctx, name, parent_id)
        output_result(result, as_json=json_out, title="Entity Created")


@app.command("rename")
def rename_cmd(
    entity_id: int = typer.Argument(..., help="Entity id"),
    new_name: str = typer.Argument(..., help="New unique name"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Rename an entity."""
    from relkeep.ops.entities import rename_entity

    with operation_context(database) as ctx:
        result = rename_entity(ctx, entity_id, new_name)
        output_result(result, as_json=json_out, title="Entity Renamed")


@app.command("show")
def show_cmd(
    entity_id: int = typer.Argument(..., help="Entity id"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one entity with its associations."""
    from relkeep.ops.entities import get_entity

    with operation_context(database) as ctx:
        result = get_entity(ctx, entity_id)
        output_result(result, as_json=json_out, title="Entity")


@app.command("list")
def list_cmd(
    limit: int = typer.Option(50, "--limit", "-n"),
    offset: int = typer.Option(0, "--offset"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List entities."""
    from relkeep.ops.entities import list_entities

    with operation_context(database) as ctx:
        result = list_entities(ctx, limit=limit, offset=offset)
        output_paged(result, as_json=json_out, title="Entities")


@app.command("delete")
def delete_cmd(
    entity_id: int = typer.Argument(..., help="Entity id"),
    database: str | None = typer.Option(None, "--database", "-d"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be deleted"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Delete an entity with its children and grandchildren (refused while it has holds)."""
    from relkeep.ops.entities import delete_entity

    with operation_context(database, dry_run=dry_run) as ctx:
        result = delete_entity(ctx, entity_id)
        output_result(result, as_json=json_out, title="Deletion Plan" if dry_run else "Entity Deleted")


@app.command("grandchildren")
def grandchildren_cmd(
    entity_id: int = typer.Argument(..., help="Entity id"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List grandchildren reachable through the entity's children."""
    from relkeep.ops.entities import list_grandchildren

    with operation_context(database) as ctx:
        result = list_grandchildren(ctx, entity_id)
        output_result(result, as_json=json_out, title="Grandchildren")
