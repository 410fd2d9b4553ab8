"""
discord.py implementation of CommunityGateway.

Community ids are guild ids and member ids are user ids, both carried as
decimal strings. The role catalog is fetched from the API on every lookup
rather than trusted from the client cache.
"""

import logging
from typing import Optional

import discord

from app.services.platform.gateway import CallResult
from app.services.referrals.attribution import InviteUse
from app.utils.discord_safe import DEFAULT_CALL_TIMEOUT, safe_call

logger = logging.getLogger(__name__)

ROLE_REASON = "Invite tracker tier role"


def _snowflake(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class DiscordGateway:
    """Outbound Discord calls, each returning a CallResult."""

    def __init__(
        self,
        client: discord.Client,
        announce_channel: str,
        timeout: float = DEFAULT_CALL_TIMEOUT,
    ):
        self.client = client
        self.announce_channel = announce_channel
        self.timeout = timeout

    def _guild(self, community_id: str) -> Optional[discord.Guild]:
        guild_id = _snowflake(community_id)
        if guild_id is None:
            return None
        return self.client.get_guild(guild_id)

    async def _member(self, guild: discord.Guild, member_id: str) -> CallResult:
        user_id = _snowflake(member_id)
        if user_id is None:
            return CallResult.failure("invalid_member_id")
        member = guild.get_member(user_id)
        if member is not None:
            return CallResult.success(member)
        return await safe_call(
            "fetch_member",
            lambda: guild.fetch_member(user_id),
            timeout=self.timeout,
            correlation_id=f"{guild.id}:{member_id}",
        )

    async def _find_role(self, guild: discord.Guild, role_name: str) -> CallResult:
        fetched = await safe_call(
            "fetch_roles",
            guild.fetch_roles,
            timeout=self.timeout,
            correlation_id=str(guild.id),
        )
        if not fetched.ok:
            return fetched
        return CallResult.success(discord.utils.get(fetched.value, name=role_name))

    async def fetch_invites(self, community_id: str) -> CallResult:
        guild = self._guild(community_id)
        if guild is None:
            return CallResult.failure("guild_not_found")
        fetched = await safe_call(
            "fetch_invites",
            guild.invites,
            timeout=self.timeout,
            correlation_id=community_id,
        )
        if not fetched.ok:
            return fetched
        snapshot = {
            invite.code: InviteUse(
                uses=invite.uses or 0,
                inviter_id=str(invite.inviter.id) if invite.inviter is not None else None,
            )
            for invite in fetched.value
        }
        return CallResult.success(snapshot)

    async def fetch_member_roles(self, community_id: str, member_id: str) -> CallResult:
        guild = self._guild(community_id)
        if guild is None:
            return CallResult.failure("guild_not_found")
        member = await self._member(guild, member_id)
        if not member.ok:
            return member
        return CallResult.success([role.name for role in member.value.roles if not role.is_default()])

    async def role_exists(self, community_id: str, role_name: str) -> CallResult:
        guild = self._guild(community_id)
        if guild is None:
            return CallResult.failure("guild_not_found")
        found = await self._find_role(guild, role_name)
        if not found.ok:
            return found
        return CallResult.success(found.value is not None)

    async def create_role(self, community_id: str, role_name: str, color: int) -> CallResult:
        guild = self._guild(community_id)
        if guild is None:
            return CallResult.failure("guild_not_found")
        return await safe_call(
            "create_role",
            lambda: guild.create_role(name=role_name, colour=discord.Colour(color), reason=ROLE_REASON),
            timeout=self.timeout,
            correlation_id=f"{community_id}:{role_name}",
        )

    async def add_role(self, community_id: str, member_id: str, role_name: str) -> CallResult:
        guild = self._guild(community_id)
        if guild is None:
            return CallResult.failure("guild_not_found")
        found = await self._find_role(guild, role_name)
        if not found.ok:
            return found
        if found.value is None:
            return CallResult.failure("role_not_found")
        member = await self._member(guild, member_id)
        if not member.ok:
            return member
        role = found.value
        return await safe_call(
            "add_role",
            lambda: member.value.add_roles(role, reason=ROLE_REASON),
            timeout=self.timeout,
            correlation_id=f"{community_id}:{member_id}",
        )

    async def remove_role(self, community_id: str, member_id: str, role_name: str) -> CallResult:
        guild = self._guild(community_id)
        if guild is None:
            return CallResult.failure("guild_not_found")
        member = await self._member(guild, member_id)
        if not member.ok:
            return member
        role = discord.utils.get(member.value.roles, name=role_name)
        if role is None:
            return CallResult.success(False)
        return await safe_call(
            "remove_role",
            lambda: member.value.remove_roles(role, reason=ROLE_REASON),
            timeout=self.timeout,
            correlation_id=f"{community_id}:{member_id}",
        )

    async def send_announcement(self, community_id: str, text: str) -> CallResult:
        guild = self._guild(community_id)
        if guild is None:
            return CallResult.failure("guild_not_found")
        channel = discord.utils.get(guild.text_channels, name=self.announce_channel)
        if channel is None:
            return CallResult.failure("channel_not_found")
        return await safe_call(
            "send_announcement",
            lambda: channel.send(text),
            timeout=self.timeout,
            correlation_id=community_id,
        )
