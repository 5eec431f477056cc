"""Tests for the deletion policy registry and planner."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from relkeep.core.errors import RestrictedDeletionError
from relkeep.core.orm import ChildTable, EntityTable, GrandchildTable, HoldTable
from relkeep.core.policies import (
    ASSOCIATIONS,
    Association,
    DeletePolicy,
    DeletionPlan,
    associations_for,
    execute_plan,
    plan_deletion,
)


class TestRegistry:
    def test_entity_policies(self):
        policies = {a.name: a.policy for a in associations_for(EntityTable)}
        assert policies == {
            "children": DeletePolicy.CASCADE,
            "grandchildren": DeletePolicy.IGNORE,
            "holds": DeletePolicy.RESTRICT,
        }

    def test_child_cascades_to_grandchildren(self):
        (association,) = associations_for(ChildTable)
        assert association.target is GrandchildTable
        assert association.policy is DeletePolicy.CASCADE

    def test_leaf_tables_have_no_associations(self):
        assert associations_for(GrandchildTable) == ()
        assert associations_for(HoldTable) == ()

    def test_only_ignore_may_omit_foreign_key(self):
        with pytest.raises(ValueError, match="needs a foreign key"):
            Association("holds", HoldTable, None, DeletePolicy.RESTRICT)

    def test_registry_keys(self):
        assert set(ASSOCIATIONS) == {EntityTable, ChildTable}

    def test_policy_values(self):
        assert [p.value for p in DeletePolicy] == ["cascade", "restrict", "ignore"]


class TestPlanDeletion:
    def test_plan_orders_dependents_first(self, session, family):
        plan = plan_deletion(session, family.entity)

        doomed = plan.doomed
        assert doomed[-1] is family.entity
        assert doomed.index(family.b1) < doomed.index(family.a1)
        assert doomed.index(family.b3) < doomed.index(family.a2)
        assert len(doomed) == 6

    def test_plan_collects_blockers(self, repo, session, family):
        repo.add_hold(family.entity)
        repo.add_hold(family.entity)

        plan = plan_deletion(session, family.entity)

        assert not plan.allowed
        assert plan.blockers == {"holds": 2}

    def test_plan_sees_rows_not_loaded_on_the_instance(self, session, family):
        session.add(GrandchildTable(child_id=family.a2.id, label="late"))
        session.commit()

        plan = plan_deletion(session, family.entity)

        assert plan.counts()["relkeep_grandchildren"] == 4

    def test_plan_for_child(self, session, family):
        plan = plan_deletion(session, family.a1)
        assert plan.counts() == {"relkeep_grandchildren": 2, "relkeep_children": 1}

    def test_to_dict(self, session, family):
        d = plan_deletion(session, family.entity).to_dict()

        assert d["table"] == "relkeep_entities"
        assert d["id"] == family.entity.id
        assert d["allowed"] is True
        assert d["deletes"]["relkeep_children"] == 2
        assert d["blockers"] == {}


class TestExecutePlan:
    def test_blocked_plan_raises_before_mutation(self, session, family):
        plan = DeletionPlan(
            root=family.entity, doomed=[family.b1, family.entity], blockers={"holds": 1}
        )

        with pytest.raises(RestrictedDeletionError, match="dependent holds"):
            execute_plan(session, plan)

        assert family.b1 not in session.deleted
        assert family.entity not in session.deleted

    def test_execute_deletes_all_rows(self, session, family):
        execute_plan(session, plan_deletion(session, family.entity))
        session.commit()

        assert session.scalar(select(func.count()).select_from(GrandchildTable)) == 0
        assert session.scalar(select(func.count()).select_from(EntityTable)) == 0
