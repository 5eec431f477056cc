"""Tests for ``relkeep.cli.entities`` and the association commands."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from relkeep.cli.associations import children_app, holds_app
from relkeep.cli.entities import app
from relkeep.ops.responses import DeletionSummary, EntitySummary, GrandchildSummary

runner = CliRunner()


def _make_paged(data, total):
    from relkeep.ops.result import PagedResult
    return PagedResult.from_items(data, total)


def _make_ok(data):
    from relkeep.ops.result import OperationResult
    return OperationResult.ok(data)


def _make_error(message="Failed", code="NOT_FOUND"):
    from relkeep.ops.result import OperationError, OperationResult
    return OperationResult(success=False, error=OperationError(code=code, message=message))


class TestEntitiesCreate:
    @patch("relkeep.ops.entities.create_entity")
    @patch("relkeep.cli.entities.operation_context")
    def test_create(self, mock_ctx, mock_create):
        mock_create.return_value = _make_ok(EntitySummary(id=1, name="alpha", parent_id=1))
        result = runner.invoke(app, ["create", "alpha", "--parent", "1"])
        assert result.exit_code == 0
        assert "alpha" in result.output
        assert mock_create.call_args.args[1:] == ("alpha", 1)

    @patch("relkeep.ops.entities.create_entity")
    @patch("relkeep.cli.entities.operation_context")
    def test_create_validation_error(self, mock_ctx, mock_create):
        mock_create.return_value = _make_error(
            "name has already been taken", code="VALIDATION_FAILED"
        )
        result = runner.invoke(app, ["create", "alpha", "-p", "1"])
        assert result.exit_code == 1
        assert "VALIDATION_FAILED" in result.output

    def test_create_requires_parent(self):
        result = runner.invoke(app, ["create", "alpha"])
        assert result.exit_code != 0


class TestEntitiesList:
    @patch("relkeep.ops.entities.list_entities")
    @patch("relkeep.cli.entities.operation_context")
    def test_list_empty(self, mock_ctx, mock_list):
        mock_list.return_value = _make_paged([], 0)
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "No items" in result.output

    @patch("relkeep.ops.entities.list_entities")
    @patch("relkeep.cli.entities.operation_context")
    def test_list_passes_paging(self, mock_ctx, mock_list):
        mock_list.return_value = _make_paged([EntitySummary(id=1, name="a", parent_id=1)], 1)
        result = runner.invoke(app, ["list", "-n", "5", "--offset", "10"])
        assert result.exit_code == 0
        assert mock_list.call_args.kwargs == {"limit": 5, "offset": 10}


class TestEntitiesDelete:
    @patch("relkeep.ops.entities.delete_entity")
    @patch("relkeep.cli.entities.operation_context")
    def test_delete_restricted(self, mock_ctx, mock_delete):
        mock_delete.return_value = _make_error(
            "Cannot delete relkeep_entities record because of dependent holds",
            code="DELETE_RESTRICTED",
        )
        result = runner.invoke(app, ["delete", "1"])
        assert result.exit_code == 1
        assert "DELETE_RESTRICTED" in result.output

    @patch("relkeep.ops.entities.delete_entity")
    @patch("relkeep.cli.entities.operation_context")
    def test_delete_dry_run_flag(self, mock_ctx, mock_delete):
        mock_ctx.return_value.__enter__.return_value = MagicMock()
        mock_delete.return_value = _make_ok(
            DeletionSummary(table="relkeep_entities", id=1, dry_run=True)
        )
        result = runner.invoke(app, ["delete", "1", "--dry-run"])
        assert result.exit_code == 0
        assert mock_ctx.call_args.kwargs == {"dry_run": True}


class TestEntitiesGrandchildren:
    @patch("relkeep.ops.entities.list_grandchildren")
    @patch("relkeep.cli.entities.operation_context")
    def test_grandchildren(self, mock_ctx, mock_list):
        mock_list.return_value = _make_ok([GrandchildSummary(id=3, child_id=1, label="b1")])
        result = runner.invoke(app, ["grandchildren", "1"])
        assert result.exit_code == 0
        assert "b1" in result.output


class TestAssociationCommands:
    @patch("relkeep.ops.entities.remove_child")
    @patch("relkeep.cli.associations.operation_context")
    def test_remove_child_missing(self, mock_ctx, mock_remove):
        mock_remove.return_value = _make_error("Child 9 not found")
        result = runner.invoke(children_app, ["remove", "9"])
        assert result.exit_code == 1
        assert "NOT_FOUND" in result.output

    @patch("relkeep.ops.entities.add_hold")
    @patch("relkeep.cli.associations.operation_context")
    def test_add_hold_label(self, mock_ctx, mock_add):
        mock_add.return_value = _make_ok({"id": 1})
        result = runner.invoke(holds_app, ["add", "4", "--label", "legal"])
        assert result.exit_code == 0
        assert mock_add.call_args.args[1:] == (4, "legal")
