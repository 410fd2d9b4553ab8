"""
Referral Service Domain Exceptions

All exceptions raised by the referral service layer.
"""


class ReferralServiceError(Exception):
    """Base exception for referral service errors"""
    pass


class InvalidMemberIdError(ReferralServiceError):
    """Raised when a member identity is empty or not a string"""
    pass
