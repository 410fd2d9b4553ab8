"""
Tier Policy

Resolves a downstream referral count to a single named tier.
The table is static configuration: validated once on construction, never mutated.

All functions are pure business logic - no discord imports.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from app.constants.tiers import REFERRAL_TIERS
from app.services.tiers.exceptions import InvalidTierTableError


@dataclass(frozen=True)
class Tier:
    """
    A named bracket keyed by a minimum downstream count.

    Attributes:
        minimum_count: Smallest count (inclusive) that resolves to this tier
        name: Role name used on the platform
        color: RGB display color used when the role is created
    """
    minimum_count: int
    name: str
    color: int = 0


class TierPolicy:
    """
    Ordered tier table.

    Tiers are kept sorted by minimum_count descending, so resolution
    returns the highest tier whose minimum the count reaches.
    """

    def __init__(self, tiers: Iterable[Tier]):
        ordered = sorted(tiers, key=lambda tier: tier.minimum_count, reverse=True)
        _validate(ordered)
        self._tiers: Tuple[Tier, ...] = tuple(ordered)

    @classmethod
    def from_table(cls, table=REFERRAL_TIERS) -> "TierPolicy":
        """Build a policy from (minimum_count, name, color) rows."""
        return cls(Tier(minimum_count, name, color) for minimum_count, name, color in table)

    @property
    def tiers(self) -> Tuple[Tier, ...]:
        return self._tiers

    @property
    def names(self) -> Tuple[str, ...]:
        """Tier names in ascending threshold order."""
        return tuple(tier.name for tier in reversed(self._tiers))

    def resolve(self, count: int) -> Optional[Tier]:
        """
        Return the first tier (descending) whose minimum_count <= count.

        Returns None when count is below every threshold, including zero.
        """
        for tier in self._tiers:
            if tier.minimum_count <= count:
                return tier
        return None

    def get(self, name: str) -> Optional[Tier]:
        for tier in self._tiers:
            if tier.name == name:
                return tier
        return None


def _validate(tiers) -> None:
    seen_names = set()
    seen_minimums = set()
    for tier in tiers:
        if not isinstance(tier.minimum_count, int) or tier.minimum_count < 0:
            raise InvalidTierTableError(f"Invalid minimum_count for tier {tier.name!r}: {tier.minimum_count!r}")
        if not tier.name or not tier.name.strip():
            raise InvalidTierTableError("Tier name must not be blank")
        if tier.name in seen_names:
            raise InvalidTierTableError(f"Duplicate tier name: {tier.name}")
        if tier.minimum_count in seen_minimums:
            raise InvalidTierTableError(f"Duplicate minimum_count: {tier.minimum_count}")
        seen_names.add(tier.name)
        seen_minimums.add(tier.minimum_count)
