"""
Community platform gateway contract.

The tracker talks to the chat platform only through this interface.
Every call returns a CallResult instead of raising: external failures
(permission denial, entity not found, network error, timeout) are expected
outcomes that the caller inspects and logs.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from app.services.referrals.attribution import InviteSnapshot


@dataclass(frozen=True)
class CallResult:
    """
    Outcome of a single external platform call.

    Attributes:
        ok: True if the call succeeded
        value: Return value on success
        error: Short reason on failure (e.g. "forbidden", "not_found", "timeout")
    """
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "CallResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "CallResult":
        return cls(ok=False, error=error)


class CommunityGateway(Protocol):
    """Outbound calls to the platform collaborator."""

    async def fetch_invites(self, community_id: str) -> CallResult:
        """value: InviteSnapshot"""
        ...

    async def fetch_member_roles(self, community_id: str, member_id: str) -> CallResult:
        """value: list of role names currently held by the member"""
        ...

    async def role_exists(self, community_id: str, role_name: str) -> CallResult:
        """value: bool, read from the community's role catalog"""
        ...

    async def create_role(self, community_id: str, role_name: str, color: int) -> CallResult:
        ...

    async def add_role(self, community_id: str, member_id: str, role_name: str) -> CallResult:
        ...

    async def remove_role(self, community_id: str, member_id: str, role_name: str) -> CallResult:
        ...

    async def send_announcement(self, community_id: str, text: str) -> CallResult:
        ...


__all__ = ["CallResult", "CommunityGateway", "InviteSnapshot"]
