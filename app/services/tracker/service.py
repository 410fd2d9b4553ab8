"""
Referral Tracker Service

The single service object that owns all shared mutable state:
- the referral forest (ReferralGraph, persisted through ReferralStore)
- the per-community invite snapshot cache

Serialization discipline: one asyncio.Lock guards every read and write of
that state. Each event (join, leave, priming, command query) runs its
state-touching section while holding the lock, so handlers execute one
after another even though they suspend on platform calls. Platform calls
made under the lock are bounded by the gateway timeout, so a stuck call
delays later events but never blocks them indefinitely.

Flow per join:  invites fetch → attribution → record_referral (+save)
                → downstream count → announcement → tier role reconciliation
Flow per leave: remove_member (+save) → downstream count of former referrer
                → tier role reconciliation → announcement

No discord imports: the platform is reached only through CommunityGateway.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from app.core.structured_logger import log_event
from app.i18n import get_text
from app.services.platform.gateway import CommunityGateway
from app.services.referrals.attribution import UNRESOLVED, Attribution, InviteSnapshotCache
from app.services.referrals.graph import ReferralGraph
from app.services.referrals.leaderboard import (
    DEFAULT_LEADERBOARD_SIZE,
    ReferralStats,
    build_leaderboard,
    get_referral_stats,
)
from app.services.roles.service import ReconciliationReport, reconcile_member_tier
from app.services.tiers.service import Tier, TierPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinOutcome:
    member_id: str
    attribution: Attribution
    referrer_id: Optional[str] = None
    total: Optional[int] = None
    tier: Optional[Tier] = None
    roles: Optional[ReconciliationReport] = None

    @property
    def recorded(self) -> bool:
        return self.referrer_id is not None


@dataclass(frozen=True)
class LeaveOutcome:
    member_id: str
    referrer_id: Optional[str] = None
    total: Optional[int] = None
    tier: Optional[Tier] = None
    roles: Optional[ReconciliationReport] = None


class ReferralTracker:
    """Invite attribution, referral forest maintenance and tier-role sync."""

    def __init__(
        self,
        graph: ReferralGraph,
        gateway: CommunityGateway,
        policy: Optional[TierPolicy] = None,
        leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE,
    ):
        self.graph = graph
        self.gateway = gateway
        self.policy = policy or TierPolicy.from_table()
        self.leaderboard_size = leaderboard_size
        self.snapshots = InviteSnapshotCache()
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Invite snapshot priming
    # ------------------------------------------------------------------

    async def prime_communities(self, community_ids: Iterable[str]) -> Dict[str, bool]:
        """Cache the current invite snapshot of every community (ready event)."""
        results = {}
        for community_id in community_ids:
            results[community_id] = await self.prime_community(community_id)
        primed = sum(1 for ok in results.values() if ok)
        log_event(
            logger,
            component="tracker",
            operation="prime_communities",
            outcome="success" if primed == len(results) else "degraded",
            reason=f"primed={primed} total={len(results)}",
        )
        return results

    async def prime_community(self, community_id: str) -> bool:
        async with self._lock:
            fetched = await self.gateway.fetch_invites(community_id)
            if not fetched.ok:
                logger.warning(
                    "INVITE_PRIME_FAILED [community=%s, error=%s]",
                    community_id, fetched.error
                )
                return False
            self.snapshots.replace(community_id, fetched.value)
            logger.info("INVITE_PRIMED [community=%s, invites=%s]", community_id, len(fetched.value))
            return True

    async def forget_community(self, community_id: str) -> None:
        async with self._lock:
            self.snapshots.drop(community_id)
        logger.info("INVITE_CACHE_DROPPED [community=%s]", community_id)

    # ------------------------------------------------------------------
    # Membership events
    # ------------------------------------------------------------------

    async def handle_member_join(self, community_id: str, member_id: str) -> JoinOutcome:
        correlation_id = f"{community_id}:{member_id}"
        async with self._lock:
            attribution = await self._attribute(community_id)
            referrer_id = attribution.inviter_id

            if referrer_id is None:
                log_event(
                    logger,
                    component="tracker",
                    operation="member_join",
                    correlation_id=correlation_id,
                    outcome="skipped",
                    reason="referrer_unknown" if attribution.resolved else "invite_unresolved",
                    message=f"INVITE_UNRESOLVED [community={community_id}, member={member_id}, code={attribution.code}]",
                )
                return JoinOutcome(member_id=member_id, attribution=attribution)

            if referrer_id == member_id:
                logger.info("REFERRAL_SELF_SKIPPED [community=%s, member=%s]", community_id, member_id)
                return JoinOutcome(member_id=member_id, attribution=attribution)

            self.graph.record_referral(member_id, referrer_id)
            total = self.graph.downstream_count(referrer_id)
            tier = self.policy.resolve(total)

            await self._announce(
                community_id,
                get_text("announce.member_joined", member_id=member_id, inviter_id=referrer_id, total=total),
            )
            roles = await self._sync_tier_role(community_id, referrer_id, tier)

        log_event(
            logger,
            component="tracker",
            operation="member_join",
            correlation_id=correlation_id,
            outcome="success",
            reason=f"referrer={referrer_id} code={attribution.code} total={total} tier={tier.name if tier else None}",
        )
        return JoinOutcome(
            member_id=member_id,
            attribution=attribution,
            referrer_id=referrer_id,
            total=total,
            tier=tier,
            roles=roles,
        )

    async def handle_member_leave(self, community_id: str, member_id: str) -> LeaveOutcome:
        correlation_id = f"{community_id}:{member_id}"
        async with self._lock:
            referrer_id = self.graph.remove_member(member_id)
            if referrer_id is None:
                log_event(
                    logger,
                    component="tracker",
                    operation="member_leave",
                    correlation_id=correlation_id,
                    outcome="skipped",
                    reason="no_referrer",
                    level="debug",
                )
                return LeaveOutcome(member_id=member_id)

            total = self.graph.downstream_count(referrer_id)
            tier = self.policy.resolve(total)
            roles = await self._sync_tier_role(community_id, referrer_id, tier)
            await self._announce(
                community_id,
                get_text("announce.member_left", member_id=member_id, inviter_id=referrer_id, total=total),
            )

        log_event(
            logger,
            component="tracker",
            operation="member_leave",
            correlation_id=correlation_id,
            outcome="success",
            reason=f"referrer={referrer_id} total={total} tier={tier.name if tier else None}",
        )
        return LeaveOutcome(member_id=member_id, referrer_id=referrer_id, total=total, tier=tier, roles=roles)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def invites_report(self, member_id: str) -> ReferralStats:
        async with self._lock:
            return get_referral_stats(self.graph, member_id)

    async def leaderboard_report(self) -> List[ReferralStats]:
        async with self._lock:
            return build_leaderboard(self.graph, self.leaderboard_size)

    def health(self) -> Dict[str, object]:
        """Read-only status for the health endpoint (no lock: plain attribute reads)."""
        store = self.graph.store
        return {
            "store_ready": store.load_ok is not False,
            "last_save_ok": store.last_save_ok,
            "members_tracked": len(self.graph),
            "communities_primed": len(self.snapshots),
        }

    # ------------------------------------------------------------------
    # Internals (called with the lock held)
    # ------------------------------------------------------------------

    async def _attribute(self, community_id: str) -> Attribution:
        fetched = await self.gateway.fetch_invites(community_id)
        if not fetched.ok:
            # No fresh snapshot: keep the cached one for the next join
            logger.warning("INVITE_FETCH_FAILED [community=%s, error=%s]", community_id, fetched.error)
            return UNRESOLVED
        return self.snapshots.consume(community_id, fetched.value)

    async def _sync_tier_role(
        self,
        community_id: str,
        member_id: str,
        tier: Optional[Tier],
    ) -> Optional[ReconciliationReport]:
        return await reconcile_member_tier(self.gateway, community_id, member_id, tier, self.policy.names)

    async def _announce(self, community_id: str, text: str) -> None:
        result = await self.gateway.send_announcement(community_id, text)
        if not result.ok:
            logger.warning("ANNOUNCEMENT_SKIPPED [community=%s, error=%s]", community_id, result.error)
