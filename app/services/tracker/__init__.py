"""
Tracker Service Layer

Owns the referral forest and invite snapshots; serializes every event.
"""

from app.services.tracker.service import ReferralTracker, JoinOutcome, LeaveOutcome

__all__ = [
    "ReferralTracker",
    "JoinOutcome",
    "LeaveOutcome",
]
