"""
Attribution Resolver

Determines which invite link a new member consumed by diffing a community's
invite snapshot taken before the join against one fetched after it.

Policy: the first code (in the fresh snapshot's order) whose use-count strictly
increased wins. Codes missing from the previous snapshot count as 0 uses. When
more than one code increased (concurrent joins between two fetches) the result
is flagged ambiguous and still resolved to the first candidate; this is a known
approximation, not a guaranteed-correct attribution.

All functions are pure business logic - no discord imports.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InviteUse:
    """Use-count and creator of a single invite code."""
    uses: int
    inviter_id: Optional[str] = None


# invite code → InviteUse, in platform enumeration order
InviteSnapshot = Dict[str, InviteUse]


@dataclass(frozen=True)
class Attribution:
    """
    Outcome of invite attribution.

    Attributes:
        code: Invite code whose use-count increased (None if unresolved)
        inviter_id: Creator of that invite (None if unresolved or the invite has no creator)
        candidates: Every code whose use-count increased, in snapshot order
    """
    code: Optional[str] = None
    inviter_id: Optional[str] = None
    candidates: Tuple[str, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.code is not None

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


UNRESOLVED = Attribution()


def resolve_used_invite(
    previous: Mapping[str, InviteUse],
    current: Mapping[str, InviteUse],
) -> Attribution:
    """
    Find the invite whose use-count strictly increased between two snapshots.

    Args:
        previous: Snapshot cached before the join
        current: Snapshot fetched after the join

    Returns:
        Attribution; UNRESOLVED when no code increased (vanity URL, invite expired
        on use, missing permissions).
    """
    candidates = []
    for code, invite in current.items():
        old = previous.get(code)
        old_uses = old.uses if old is not None else 0
        if invite.uses > old_uses:
            candidates.append(code)

    if not candidates:
        return UNRESOLVED

    chosen = candidates[0]
    return Attribution(
        code=chosen,
        inviter_id=current[chosen].inviter_id,
        candidates=tuple(candidates),
    )


class InviteSnapshotCache:
    """
    Per-community invite snapshots, held in memory only.

    Not thread-safe; the owning ReferralTracker serializes access.
    """

    def __init__(self):
        self._snapshots: Dict[str, InviteSnapshot] = {}

    def __contains__(self, community_id) -> bool:
        return community_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def get(self, community_id: str) -> Optional[InviteSnapshot]:
        return self._snapshots.get(community_id)

    def replace(self, community_id: str, snapshot: Mapping[str, InviteUse]) -> None:
        self._snapshots[community_id] = dict(snapshot)

    def drop(self, community_id: str) -> None:
        self._snapshots.pop(community_id, None)

    def consume(self, community_id: str, fresh: Mapping[str, InviteUse]) -> Attribution:
        """
        Resolve a join against the cached snapshot, then cache the fresh one.

        The fresh snapshot replaces the cached one regardless of the outcome.
        A community without a cached snapshot (priming failed or never ran)
        has no baseline: the join is unresolved and the fresh snapshot becomes
        the baseline for the next join.
        """
        previous = self._snapshots.get(community_id)
        self.replace(community_id, fresh)
        if previous is None:
            logger.warning("INVITE_UNPRIMED [community=%s, invites=%s]", community_id, len(fresh))
            return UNRESOLVED

        attribution = resolve_used_invite(previous, fresh)

        if attribution.ambiguous:
            logger.warning(
                "INVITE_AMBIGUOUS [community=%s, candidates=%s, chosen=%s]",
                community_id, ",".join(attribution.candidates), attribution.code
            )
        return attribution
