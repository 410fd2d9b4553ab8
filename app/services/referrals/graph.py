"""
Referral Graph Engine

Maintains the referral forest (each member points to at most one referrer)
and computes transitive downstream counts.

Rules:
- Both sides of every edge are kept consistent on every mutation:
  referred_members of X == members whose referred_by is X
- Every mutation is followed by a save before the call returns
- Leaving members are never cascaded: their former children keep a
  referred_by pointing at the deleted identity, and the orphaned subtree
  stays intact when traversal starts inside it
- Traversal is an explicit worklist with a per-call visited set, so a
  corrupted store containing a cycle terminates and never double-counts

All functions are pure business logic - no discord imports.
"""

import logging
from typing import Dict, Iterator, Optional, Tuple

from app.services.referrals.exceptions import InvalidMemberIdError
from app.services.referrals.models import ReferralRecord
from app.services.referrals.store import ReferralStore

logger = logging.getLogger(__name__)


def _require_id(member_id) -> str:
    if not isinstance(member_id, str) or not member_id.strip():
        raise InvalidMemberIdError(f"Invalid member id: {member_id!r}")
    return member_id


class ReferralGraph:
    """
    In-memory referral forest backed by a ReferralStore.

    Only this class mutates the forest. Callers serialize access
    (see ReferralTracker); the engine itself holds no lock.
    """

    def __init__(self, store: ReferralStore, records: Optional[Dict[str, ReferralRecord]] = None):
        self._store = store
        self._records: Dict[str, ReferralRecord] = records if records is not None else {}

    @classmethod
    def load(cls, store: ReferralStore) -> "ReferralGraph":
        return cls(store, store.load())

    @property
    def store(self) -> ReferralStore:
        return self._store

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, member_id) -> bool:
        return member_id in self._records

    def get(self, member_id: str) -> Optional[ReferralRecord]:
        return self._records.get(member_id)

    def members(self) -> Iterator[str]:
        """Member identities in mapping enumeration order."""
        return iter(list(self._records))

    def snapshot(self) -> Dict[str, Tuple[Optional[str], Tuple[str, ...]]]:
        """Immutable view of the forest: id → (referred_by, referred_members)."""
        return {
            member_id: (record.referred_by, tuple(record.referred_members))
            for member_id, record in self._records.items()
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def record_referral(self, new_member: str, referrer: str) -> bool:
        """
        Attach new_member under referrer.

        Creates new_member's record if missing; on rejoin overwrites referred_by
        and detaches the member from its previous referrer. Ensures referrer's
        record exists and lists new_member exactly once.

        Returns:
            True if the forest changed (and was saved), False for a repeated call.
        """
        _require_id(new_member)
        _require_id(referrer)
        changed = False

        record = self._records.get(new_member)
        if record is None:
            record = ReferralRecord(referred_by=referrer)
            self._records[new_member] = record
            changed = True
        elif record.referred_by != referrer:
            previous = record.referred_by
            if previous is not None:
                previous_record = self._records.get(previous)
                if previous_record is not None and new_member in previous_record.referred_members:
                    previous_record.referred_members.remove(new_member)
            logger.info(
                "REFERRAL_REASSIGNED [member=%s, previous_referrer=%s, referrer=%s]",
                new_member, previous, referrer
            )
            record.referred_by = referrer
            changed = True

        referrer_record = self._records.get(referrer)
        if referrer_record is None:
            referrer_record = ReferralRecord()
            self._records[referrer] = referrer_record
            changed = True
        if new_member not in referrer_record.referred_members:
            referrer_record.referred_members.append(new_member)
            changed = True

        if changed:
            logger.info("REFERRAL_RECORDED [member=%s, referrer=%s]", new_member, referrer)
            self._persist()
        else:
            logger.debug("REFERRAL_UNCHANGED [member=%s, referrer=%s]", new_member, referrer)
        return changed

    def remove_member(self, member_id: str) -> Optional[str]:
        """
        Remove a departing member that has a referrer.

        Prunes the edge from the referrer and deletes the member's own record.
        Members without a referrer keep their record, so the structure under
        them stays reachable. Children are never reassigned or deleted.

        Returns:
            The former referrer's identity, or None if nothing was removed.
        """
        _require_id(member_id)
        record = self._records.get(member_id)
        if record is None or record.referred_by is None:
            logger.debug("REFERRAL_REMOVE_SKIPPED [member=%s, reason=no_referrer]", member_id)
            return None

        referrer = record.referred_by
        referrer_record = self._records.get(referrer)
        if referrer_record is not None and member_id in referrer_record.referred_members:
            referrer_record.referred_members.remove(member_id)

        del self._records[member_id]
        logger.info(
            "REFERRAL_REMOVED [member=%s, referrer=%s, orphaned_children=%s]",
            member_id, referrer, len(record.referred_members)
        )
        self._persist()
        return referrer

    def _persist(self) -> bool:
        return self._store.save(self._records)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def direct_count(self, member_id: str) -> int:
        record = self._records.get(member_id)
        return len(record.referred_members) if record is not None else 0

    def downstream_count(self, member_id: str) -> int:
        """
        Number of distinct members reachable from member_id via referred_members.

        Depth-first over an explicit stack. Each member is counted the first
        time it is reached and expanded at most once; the start member is
        expanded up front and counted only if a cycle leads back to it
        (A↔B counts 2 from either side). Identities without a record are leaves.
        """
        expanded = {member_id}
        reached = set()
        stack = [member_id]
        while stack:
            current = stack.pop()
            record = self._records.get(current)
            if record is None:
                continue
            for child in record.referred_members:
                if child in reached:
                    continue
                reached.add(child)
                if child not in expanded:
                    expanded.add(child)
                    stack.append(child)
        return len(reached)
