"""
Unit tests for the role reconciler.

Tests focus on:
- Plan ordering (removals before addition)
- Idempotence for an unchanged tier
- Independent, fail-soft execution of operations
"""
import pytest
from unittest.mock import AsyncMock

from app.services.platform.gateway import CallResult
from app.services.roles.service import (
    RoleAction,
    RoleOperation,
    apply_role_plan,
    plan_role_changes,
    reconcile_member_tier,
)

TIER_NAMES = ("Starter", "Recruiter", "Leader", "Captain", "Commander", "Champion", "Legend")


class TestPlanRoleChanges:
    """Tests for plan_role_changes function"""

    def test_upgrade_removes_then_adds(self, policy):
        """Recruiter+Starter holder moving to Leader"""
        plan = plan_role_changes(["Recruiter", "Starter"], policy.get("Leader"), TIER_NAMES)

        assert plan == [
            RoleOperation(RoleAction.REMOVE, "Recruiter"),
            RoleOperation(RoleAction.REMOVE, "Starter"),
            RoleOperation(RoleAction.ENSURE_EXISTS, "Leader", policy.get("Leader").color),
            RoleOperation(RoleAction.ADD, "Leader"),
        ]

    def test_unchanged_tier_is_empty(self, policy):
        """Already holding exactly the target tier"""
        assert plan_role_changes(["Leader"], policy.get("Leader"), TIER_NAMES) == []

    def test_non_tier_roles_untouched(self, policy):
        """Roles outside the tier table are never removed"""
        plan = plan_role_changes(["Moderator", "Leader", "Booster"], policy.get("Leader"), TIER_NAMES)

        assert plan == []

    def test_no_tier_only_removes(self):
        """Count below every threshold strips tier roles and adds nothing"""
        plan = plan_role_changes(["Starter", "Moderator"], None, TIER_NAMES)

        assert plan == [RoleOperation(RoleAction.REMOVE, "Starter")]

    def test_no_tier_no_roles(self):
        """Nothing held, nothing to do"""
        assert plan_role_changes([], None, TIER_NAMES) == []

    def test_first_tier(self, policy):
        """No roles held, reaching Starter"""
        plan = plan_role_changes([], policy.get("Starter"), TIER_NAMES)

        assert [op.action for op in plan] == [RoleAction.ENSURE_EXISTS, RoleAction.ADD]
        assert plan[0].color == policy.get("Starter").color

    def test_downgrade(self, policy):
        """Leader holder dropping back to Recruiter after a leave"""
        plan = plan_role_changes(["Leader"], policy.get("Recruiter"), TIER_NAMES)

        assert plan == [
            RoleOperation(RoleAction.REMOVE, "Leader"),
            RoleOperation(RoleAction.ENSURE_EXISTS, "Recruiter", policy.get("Recruiter").color),
            RoleOperation(RoleAction.ADD, "Recruiter"),
        ]

    def test_target_held_with_extra_tier(self, policy):
        """Stale extra tier role is removed, target not re-added"""
        plan = plan_role_changes(["Leader", "Starter"], policy.get("Leader"), TIER_NAMES)

        assert plan == [RoleOperation(RoleAction.REMOVE, "Starter")]

    def test_duplicate_held_names_removed_once(self, policy):
        """Two roles sharing a tier name yield one removal"""
        plan = plan_role_changes(["Starter", "Starter"], policy.get("Leader"), TIER_NAMES)

        assert plan.count(RoleOperation(RoleAction.REMOVE, "Starter")) == 1


class TestApplyRolePlan:
    """Tests for apply_role_plan function"""

    @pytest.mark.asyncio
    async def test_creates_missing_role(self, mock_gateway, policy):
        """ensure_exists creates the role with the tier color when the catalog lacks it"""
        mock_gateway.role_exists = AsyncMock(return_value=CallResult.success(False))
        plan = plan_role_changes([], policy.get("Leader"), TIER_NAMES)

        report = await apply_role_plan(mock_gateway, "g1", "m1", plan, policy.get("Leader"))

        assert report.ok is True
        mock_gateway.create_role.assert_awaited_once_with("g1", "Leader", policy.get("Leader").color)
        mock_gateway.add_role.assert_awaited_once_with("g1", "m1", "Leader")

    @pytest.mark.asyncio
    async def test_existing_role_not_recreated(self, mock_gateway, policy):
        """Catalog already has the role"""
        plan = plan_role_changes([], policy.get("Leader"), TIER_NAMES)

        await apply_role_plan(mock_gateway, "g1", "m1", plan)

        mock_gateway.create_role.assert_not_awaited()
        mock_gateway.add_role.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_other_operations(self, mock_gateway, policy):
        """A forbidden removal is reported; the rest still runs"""
        mock_gateway.remove_role = AsyncMock(side_effect=[
            CallResult.failure("forbidden"),
            CallResult.success(None),
        ])
        plan = plan_role_changes(["Recruiter", "Starter"], policy.get("Leader"), TIER_NAMES)

        report = await apply_role_plan(mock_gateway, "g1", "m1", plan, policy.get("Leader"))

        assert mock_gateway.remove_role.await_count == 2
        mock_gateway.add_role.assert_awaited_once_with("g1", "m1", "Leader")
        assert report.ok is False
        assert [outcome.operation.role_name for outcome in report.failed] == ["Recruiter"]
        assert report.failed[0].result.error == "forbidden"

    @pytest.mark.asyncio
    async def test_catalog_lookup_failure_reported(self, mock_gateway, policy):
        """ensure_exists fails when the catalog cannot be read; add is still attempted"""
        mock_gateway.role_exists = AsyncMock(return_value=CallResult.failure("timeout"))
        mock_gateway.add_role = AsyncMock(return_value=CallResult.failure("role_not_found"))
        plan = plan_role_changes([], policy.get("Starter"), TIER_NAMES)

        report = await apply_role_plan(mock_gateway, "g1", "m1", plan)

        mock_gateway.create_role.assert_not_awaited()
        assert [outcome.result.error for outcome in report.failed] == ["timeout", "role_not_found"]

    @pytest.mark.asyncio
    async def test_create_failure_reported(self, mock_gateway, policy):
        """Permission denied on role creation"""
        mock_gateway.role_exists = AsyncMock(return_value=CallResult.success(False))
        mock_gateway.create_role = AsyncMock(return_value=CallResult.failure("forbidden"))
        plan = plan_role_changes([], policy.get("Starter"), TIER_NAMES)

        report = await apply_role_plan(mock_gateway, "g1", "m1", plan)

        assert report.failed[0].operation.action is RoleAction.ENSURE_EXISTS


class TestReconcileMemberTier:
    """Tests for reconcile_member_tier function"""

    @pytest.mark.asyncio
    async def test_member_roles_unavailable(self, mock_gateway, policy):
        """Member left or cannot be fetched: nothing attempted"""
        mock_gateway.fetch_member_roles = AsyncMock(return_value=CallResult.failure("not_found"))

        report = await reconcile_member_tier(mock_gateway, "g1", "m1", policy.get("Leader"), TIER_NAMES)

        assert report is None
        mock_gateway.add_role.assert_not_awaited()
        mock_gateway.remove_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_in_sync_member(self, mock_gateway, policy):
        """Second reconciliation with an unchanged tier performs no calls"""
        mock_gateway.fetch_member_roles = AsyncMock(return_value=CallResult.success(["Leader"]))

        report = await reconcile_member_tier(mock_gateway, "g1", "m1", policy.get("Leader"), TIER_NAMES)

        assert report.outcomes == []
        assert report.target == "Leader"
        mock_gateway.role_exists.assert_not_awaited()
        mock_gateway.add_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_applies_plan(self, mock_gateway, policy):
        """Fetched roles drive the plan"""
        mock_gateway.fetch_member_roles = AsyncMock(return_value=CallResult.success(["Starter"]))

        report = await reconcile_member_tier(mock_gateway, "g1", "m1", policy.get("Recruiter"), TIER_NAMES)

        mock_gateway.remove_role.assert_awaited_once_with("g1", "m1", "Starter")
        mock_gateway.add_role.assert_awaited_once_with("g1", "m1", "Recruiter")
        assert report.ok is True
