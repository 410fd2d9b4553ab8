"""
Referral record model and persisted-document normalization.

Document format (compatible with the original invites.json):
    {
        "<member_id>": {"invited": ["<member_id>", ...], "invited_by": "<member_id>" | null},
        ...
    }
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ReferralRecord:
    """
    Referral state of a single member.

    Attributes:
        referred_by: Identity of the referrer (None for roots / unknown)
        referred_members: Identities this member referred directly, in join order, no duplicates
    """
    referred_by: Optional[str] = None
    referred_members: List[str] = field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        return {
            "invited": list(self.referred_members),
            "invited_by": self.referred_by,
        }


def _normalize_id(value: Any) -> Optional[str]:
    """Coerce a persisted identity to a non-empty string, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def normalize_record(member_id: str, raw: Any) -> Optional[ReferralRecord]:
    """
    Validate one persisted record and repair what can be repaired.

    - non-object records are discarded (None)
    - invited_by must be an identity other than the member itself
    - invited entries that are not identities are dropped, duplicates collapsed
    """
    if not isinstance(raw, dict):
        logger.warning("STORE_RECORD_DISCARDED [member=%s, reason=not_an_object]", member_id)
        return None

    referred_by = _normalize_id(raw.get("invited_by"))
    if referred_by == member_id:
        logger.warning("STORE_RECORD_REPAIRED [member=%s, reason=self_referrer]", member_id)
        referred_by = None

    raw_invited = raw.get("invited")
    if raw_invited is None:
        raw_invited = []
    if not isinstance(raw_invited, list):
        logger.warning("STORE_RECORD_REPAIRED [member=%s, reason=invited_not_a_list]", member_id)
        raw_invited = []

    referred_members: List[str] = []
    for entry in raw_invited:
        child_id = _normalize_id(entry)
        if child_id is None:
            logger.warning("STORE_RECORD_REPAIRED [member=%s, reason=invalid_child_id]", member_id)
            continue
        if child_id in referred_members:
            logger.warning("STORE_RECORD_REPAIRED [member=%s, reason=duplicate_child, child=%s]", member_id, child_id)
            continue
        referred_members.append(child_id)

    return ReferralRecord(referred_by=referred_by, referred_members=referred_members)


def normalize_document(document: Any) -> Dict[str, ReferralRecord]:
    """
    Convert a parsed document into the strict record mapping.

    A top-level value that is not an object yields an empty mapping.
    Enumeration order of the document is preserved.
    """
    if not isinstance(document, dict):
        logger.error("STORE_DOCUMENT_INVALID [reason=top_level_not_an_object, type=%s]", type(document).__name__)
        return {}

    records: Dict[str, ReferralRecord] = {}
    for raw_id, raw_record in document.items():
        member_id = _normalize_id(raw_id)
        if member_id is None:
            logger.warning("STORE_RECORD_DISCARDED [member=%r, reason=invalid_member_id]", raw_id)
            continue
        record = normalize_record(member_id, raw_record)
        if record is not None:
            records[member_id] = record
    _reconcile_edges(records)
    return records


def _reconcile_edges(records: Dict[str, ReferralRecord]) -> None:
    """
    Make both sides of every edge agree, in place.

    Documents written before rejoins moved edges can list a member under
    several referrers. A child is kept in X's list only when it has no record
    (it left) or its record names X as referrer. A member whose referrer has a
    record that does not list it is appended to that list.
    """
    for member_id, record in records.items():
        kept = []
        for child_id in record.referred_members:
            child = records.get(child_id)
            if child is not None and child.referred_by != member_id:
                logger.warning(
                    "STORE_RECORD_REPAIRED [member=%s, reason=child_claimed_elsewhere, child=%s, child_referrer=%s]",
                    member_id, child_id, child.referred_by
                )
                continue
            kept.append(child_id)
        record.referred_members = kept

    for member_id, record in records.items():
        referrer = records.get(record.referred_by) if record.referred_by is not None else None
        if referrer is not None and member_id not in referrer.referred_members:
            logger.warning(
                "STORE_RECORD_REPAIRED [member=%s, reason=missing_from_referrer, referrer=%s]",
                member_id, record.referred_by
            )
            referrer.referred_members.append(member_id)


def serialize_records(records: Dict[str, ReferralRecord]) -> Dict[str, Any]:
    return {member_id: record.to_document() for member_id, record in records.items()}
