"""
Referral Store

Durable mapping member identity → ReferralRecord, kept in a single
human-readable JSON document that is rewritten in full on every save.

Failure policy (best-effort persistence):
- missing document → empty mapping, not an error
- malformed document → logged, empty mapping (process keeps running)
- write failure → logged, reported via return value; in-memory state stays authoritative

Writes go to a temporary file in the same directory followed by os.replace(),
so a crash mid-write never corrupts the previously committed document.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from typing import Dict, Optional

from app.core.structured_logger import log_event
from app.services.referrals.models import ReferralRecord, normalize_document, serialize_records

logger = logging.getLogger(__name__)


class ReferralStore:
    """JSON-document persistence for the referral forest."""

    def __init__(self, path: str):
        self.path = path
        # None until the first load attempt
        self.load_ok: Optional[bool] = None
        self.last_save_ok: Optional[bool] = None
        self.last_saved_at: Optional[datetime] = None

    def load(self) -> Dict[str, ReferralRecord]:
        """
        Read and normalize the persisted document.

        Returns:
            Mapping in document enumeration order. Never raises for I/O or parse errors.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            logger.info("STORE_EMPTY [path=%s, reason=document_missing]", self.path)
            self.load_ok = True
            return {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            log_event(
                logger,
                component="store",
                operation="load",
                outcome="failed",
                reason=f"{type(e).__name__}: {str(e)[:200]}",
                level="error",
                message=f"STORE_LOAD_FAILED path={self.path}, starting with empty store",
            )
            self.load_ok = False
            return {}

        if not isinstance(document, dict):
            log_event(
                logger,
                component="store",
                operation="load",
                outcome="failed",
                reason=f"top-level {type(document).__name__}",
                level="error",
                message=f"STORE_LOAD_FAILED path={self.path}, starting with empty store",
            )
            self.load_ok = False
            return {}

        records = normalize_document(document)
        self.load_ok = True
        logger.info("STORE_LOADED [path=%s, records=%s]", self.path, len(records))
        return records

    def save(self, records: Dict[str, ReferralRecord]) -> bool:
        """
        Persist the full mapping atomically.

        Returns:
            True on success, False if the write failed (already logged).
        """
        tmp_path = None
        try:
            payload = json.dumps(serialize_records(records), indent=2)
            directory = os.path.dirname(os.path.abspath(self.path))
            fd, tmp_path = tempfile.mkstemp(prefix=".invites-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            log_event(
                logger,
                component="store",
                operation="save",
                outcome="failed",
                reason=f"{type(e).__name__}: {str(e)[:200]}",
                level="error",
                message=f"STORE_SAVE_FAILED path={self.path}, in-memory state kept",
            )
            self.last_save_ok = False
            return False
        finally:
            if tmp_path is not None:
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_path)

        self.last_save_ok = True
        self.last_saved_at = datetime.now(timezone.utc)
        logger.debug("STORE_SAVED [path=%s, records=%s]", self.path, len(records))
        return True
