"""
CLI: ``relkeep parents|children|grandchildren|holds`` — manage the records
an entity belongs to, owns, and is held by.
"""

from __future__ import annotations

import typer

from relkeep.cli.utils import operation_context, output_result

parents_app = typer.Typer(no_args_is_help=True)
children_app = typer.Typer(no_args_is_help=True)
grandchildren_app = typer.Typer(no_args_is_help=True)
holds_app = typer.Typer(no_args_is_help=True)


@parents_app.command("create")
def create_parent_cmd(
    name: str = typer.Argument(..., help="Parent name"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Create a parent record."""
    from relkeep.ops.entities import create_parent

    with operation_context(database) as ctx:
        output_result(create_parent(ctx, name), as_json=json_out, title="Parent Created")


@children_app.command("add")
def add_child_cmd(
    entity_id: int = typer.Argument(..., help="Owning entity id"),
    label: str | None = typer.Option(None, "--label", "-l"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Add a child to an entity."""
    from relkeep.ops.entities import add_child

    with operation_context(database) as ctx:
        output_result(add_child(ctx, entity_id, label), as_json=json_out, title="Child Added")


@children_app.command("remove")
def remove_child_cmd(
    child_id: int = typer.Argument(..., help="Child id"),
    database: str | None = typer.Option(None, "--database", "-d"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Remove a child and its grandchildren."""
    from relkeep.ops.entities import remove_child

    with operation_context(database, dry_run=dry_run) as ctx:
        output_result(remove_child(ctx, child_id), as_json=json_out, title="Child Removed")


@grandchildren_app.command("add")
def add_grandchild_cmd(
    child_id: int = typer.Argument(..., help="Owning child id"),
    label: str | None = typer.Option(None, "--label", "-l"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Add a grandchild to a child."""
    from relkeep.ops.entities import add_grandchild

    with operation_context(database) as ctx:
        output_result(
            add_grandchild(ctx, child_id, label), as_json=json_out, title="Grandchild Added"
        )


@holds_app.command("add")
def add_hold_cmd(
    entity_id: int = typer.Argument(..., help="Held entity id"),
    label: str | None = typer.Option(None, "--label", "-l"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Place a hold on an entity; held entities cannot be deleted."""
    from relkeep.ops.entities import add_hold

    with operation_context(database) as ctx:
        output_result(add_hold(ctx, entity_id, label), as_json=json_out, title="Hold Added")


@holds_app.command("remove")
def remove_hold_cmd(
    hold_id: int = typer.Argument(..., help="Hold id"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Release a hold."""
    from relkeep.ops.entities import remove_hold

    with operation_context(database) as ctx:
        output_result(remove_hold(ctx, hold_id), as_json=json_out, title="Hold Removed")
