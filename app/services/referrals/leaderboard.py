"""
Leaderboard / Query Service

Read-only aggregation over the referral forest for ranked reporting.
"""

from dataclasses import dataclass
from typing import List

from app.services.referrals.graph import ReferralGraph

DEFAULT_LEADERBOARD_SIZE = 10


@dataclass(frozen=True)
class ReferralStats:
    """Transitive and direct referral counts of one member."""
    member_id: str
    total: int
    direct: int


def get_referral_stats(graph: ReferralGraph, member_id: str) -> ReferralStats:
    """Counts for a member; unknown members have zero of both."""
    return ReferralStats(
        member_id=member_id,
        total=graph.downstream_count(member_id),
        direct=graph.direct_count(member_id),
    )


def build_leaderboard(graph: ReferralGraph, limit: int = DEFAULT_LEADERBOARD_SIZE) -> List[ReferralStats]:
    """
    Top members by descending transitive count.

    Ties keep the mapping's enumeration order (sorted() is stable).
    """
    if limit <= 0:
        return []
    stats = [get_referral_stats(graph, member_id) for member_id in graph.members()]
    stats.sort(key=lambda entry: entry.total, reverse=True)
    return stats[:limit]
