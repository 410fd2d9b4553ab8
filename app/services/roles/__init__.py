"""
Role Service Layer

Tier-role reconciliation: pure planning plus fail-soft execution.
"""

from app.services.roles.service import (
    RoleAction,
    RoleOperation,
    OperationOutcome,
    ReconciliationReport,
    plan_role_changes,
    apply_role_plan,
    reconcile_member_tier,
)

__all__ = [
    "RoleAction",
    "RoleOperation",
    "OperationOutcome",
    "ReconciliationReport",
    "plan_role_changes",
    "apply_role_plan",
    "reconcile_member_tier",
]
