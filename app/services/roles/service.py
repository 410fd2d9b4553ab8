"""
Role Reconciler

Brings a member's tier roles in sync with their resolved tier.

Planning is pure: given the roles a member holds, the target tier and the
names of every tier, produce an ordered list of operations:
    1. remove(name) for each held tier role other than the target
    2. ensure_exists(target) and add(target) if the target is not already held
No target tier → removals only. An unchanged tier → empty plan.

Execution runs each operation against the platform independently: a failed
operation is recorded and logged, and the remaining operations still run.
The platform's role catalog is authoritative; nothing about role identities
is cached between invocations.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from app.core.structured_logger import log_event
from app.services.platform.gateway import CallResult, CommunityGateway
from app.services.tiers.service import Tier

logger = logging.getLogger(__name__)


class RoleAction(str, Enum):
    REMOVE = "remove"
    ENSURE_EXISTS = "ensure_exists"
    ADD = "add"


@dataclass(frozen=True)
class RoleOperation:
    action: RoleAction
    role_name: str
    color: Optional[int] = None


@dataclass(frozen=True)
class OperationOutcome:
    operation: RoleOperation
    result: CallResult


@dataclass
class ReconciliationReport:
    """Per-member result of applying a role plan."""
    community_id: str
    member_id: str
    target: Optional[str]
    outcomes: List[OperationOutcome] = field(default_factory=list)

    @property
    def failed(self) -> List[OperationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.result.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def plan_role_changes(
    current_roles: Iterable[str],
    target: Optional[Tier],
    tier_names: Sequence[str],
) -> List[RoleOperation]:
    """
    Compute the role operations that bring a member to the target tier.

    Args:
        current_roles: Role names the member holds, in platform order
        target: Resolved tier, or None for "no tier"
        tier_names: Every tier name in the policy

    Returns:
        Ordered operations; removals always precede the addition.
    """
    recognized = set(tier_names)
    target_name = target.name if target is not None else None
    held = list(dict.fromkeys(current_roles))

    plan = [
        RoleOperation(RoleAction.REMOVE, name)
        for name in held
        if name in recognized and name != target_name
    ]

    if target is not None and target_name not in held:
        plan.append(RoleOperation(RoleAction.ENSURE_EXISTS, target.name, target.color))
        plan.append(RoleOperation(RoleAction.ADD, target.name))
    return plan


async def _execute(
    gateway: CommunityGateway,
    community_id: str,
    member_id: str,
    operation: RoleOperation,
) -> CallResult:
    if operation.action is RoleAction.REMOVE:
        return await gateway.remove_role(community_id, member_id, operation.role_name)

    if operation.action is RoleAction.ENSURE_EXISTS:
        exists = await gateway.role_exists(community_id, operation.role_name)
        if not exists.ok:
            return exists
        if exists.value:
            return CallResult.success(False)
        created = await gateway.create_role(community_id, operation.role_name, operation.color or 0)
        if created.ok:
            logger.info("TIER_ROLE_CREATED [community=%s, role=%s]", community_id, operation.role_name)
            return CallResult.success(True)
        return created

    return await gateway.add_role(community_id, member_id, operation.role_name)


async def apply_role_plan(
    gateway: CommunityGateway,
    community_id: str,
    member_id: str,
    plan: Sequence[RoleOperation],
    target: Optional[Tier] = None,
) -> ReconciliationReport:
    """Run every planned operation, collecting outcomes; never raises for platform failures."""
    report = ReconciliationReport(
        community_id=community_id,
        member_id=member_id,
        target=target.name if target is not None else None,
    )
    for operation in plan:
        result = await _execute(gateway, community_id, member_id, operation)
        report.outcomes.append(OperationOutcome(operation, result))
        if not result.ok:
            log_event(
                logger,
                component="roles",
                operation=operation.action.value,
                correlation_id=f"{community_id}:{member_id}",
                outcome="failed",
                reason=f"role={operation.role_name} error={result.error}",
                level="warning",
            )
    return report


async def reconcile_member_tier(
    gateway: CommunityGateway,
    community_id: str,
    member_id: str,
    target: Optional[Tier],
    tier_names: Sequence[str],
) -> Optional[ReconciliationReport]:
    """
    Fetch the member's roles, plan, and apply.

    Returns:
        The report, or None when the member's roles could not be fetched
        (member left, permission gap) and nothing was attempted.
    """
    roles = await gateway.fetch_member_roles(community_id, member_id)
    if not roles.ok:
        log_event(
            logger,
            component="roles",
            operation="fetch_member_roles",
            correlation_id=f"{community_id}:{member_id}",
            outcome="failed",
            reason=roles.error,
            level="warning",
        )
        return None

    plan = plan_role_changes(roles.value or [], target, tier_names)
    if not plan:
        logger.debug("TIER_ROLE_IN_SYNC [community=%s, member=%s]", community_id, member_id)
        return ReconciliationReport(community_id, member_id, target.name if target else None)

    report = await apply_role_plan(gateway, community_id, member_id, plan, target)
    log_event(
        logger,
        component="roles",
        operation="reconcile",
        correlation_id=f"{community_id}:{member_id}",
        outcome="success" if report.ok else "degraded",
        reason=f"target={report.target} operations={len(plan)} failed={len(report.failed)}",
    )
    return report
