"""
Tier Policy Domain Exceptions

All exceptions raised by the tier policy layer.
"""


class TierPolicyError(Exception):
    """Base exception for tier policy errors"""
    pass


class InvalidTierTableError(TierPolicyError):
    """Raised when the tier table has a negative minimum, a blank name or duplicates"""
    pass
