"""
Referral Service Layer

Referral forest persistence, invite attribution, downstream counting and ranking.
"""

from app.services.referrals.models import ReferralRecord, normalize_document
from app.services.referrals.store import ReferralStore
from app.services.referrals.graph import ReferralGraph
from app.services.referrals.attribution import (
    Attribution,
    InviteSnapshot,
    InviteSnapshotCache,
    InviteUse,
    resolve_used_invite,
)
from app.services.referrals.leaderboard import ReferralStats, build_leaderboard, get_referral_stats
from app.services.referrals.exceptions import ReferralServiceError, InvalidMemberIdError

__all__ = [
    "ReferralRecord",
    "normalize_document",
    "ReferralStore",
    "ReferralGraph",
    "Attribution",
    "InviteSnapshot",
    "InviteSnapshotCache",
    "InviteUse",
    "resolve_used_invite",
    "ReferralStats",
    "build_leaderboard",
    "get_referral_stats",
    "ReferralServiceError",
    "InvalidMemberIdError",
]
