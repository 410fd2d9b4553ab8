"""
Tier Service Layer

Static tier table and count → tier resolution.
"""

from app.services.tiers.service import Tier, TierPolicy
from app.services.tiers.exceptions import TierPolicyError, InvalidTierTableError

__all__ = [
    "Tier",
    "TierPolicy",
    "TierPolicyError",
    "InvalidTierTableError",
]
