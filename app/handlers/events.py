"""
Discord event wiring.

Translates gateway events into ReferralTracker calls:
    on_ready          → prime invite snapshots for every guild
    on_guild_join     → prime the new guild
    on_guild_remove   → drop the guild's snapshot
    on_member_join    → attribute, record, announce, sync tier role
    on_member_remove  → prune, sync former referrer's tier role, announce
    on_message        → text commands

Every handler runs inside event_boundary: no exception escapes to the client.
"""
import logging
from typing import Optional

import discord

from app.core.error_boundary import event_boundary
from app.handlers.commands import DEFAULT_PREFIX, handle_command
from app.services.platform.discord_gateway import DiscordGateway
from app.services.referrals.graph import ReferralGraph
from app.services.referrals.leaderboard import DEFAULT_LEADERBOARD_SIZE
from app.services.tiers.service import TierPolicy
from app.services.tracker.service import ReferralTracker
from app.utils.discord_safe import DEFAULT_CALL_TIMEOUT, safe_call

logger = logging.getLogger(__name__)


def build_intents() -> discord.Intents:
    """Guilds, invites, members (privileged) and message content (privileged)."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.invites = True
    intents.members = True
    intents.messages = True
    intents.message_content = True
    return intents


class InviteTrackerClient(discord.Client):
    """Discord client owning the gateway adapter and the tracker service."""

    def __init__(
        self,
        *,
        graph: ReferralGraph,
        announce_channel: str,
        command_prefix: str = DEFAULT_PREFIX,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
        leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE,
        policy: Optional[TierPolicy] = None,
        **options,
    ):
        options.setdefault("intents", build_intents())
        super().__init__(**options)
        self.command_prefix = command_prefix
        self.call_timeout = call_timeout
        self.gateway = DiscordGateway(self, announce_channel, timeout=call_timeout)
        self.tracker = ReferralTracker(graph, self.gateway, policy, leaderboard_size)

    @event_boundary("ready")
    async def on_ready(self):
        logger.info("✅ Logged in as %s (guilds=%s)", self.user, len(self.guilds))
        await self.tracker.prime_communities([str(guild.id) for guild in self.guilds])

    @event_boundary("guild_join")
    async def on_guild_join(self, guild: discord.Guild):
        logger.info("GUILD_JOINED [guild=%s]", guild.id)
        await self.tracker.prime_community(str(guild.id))

    @event_boundary("guild_remove")
    async def on_guild_remove(self, guild: discord.Guild):
        logger.info("GUILD_REMOVED [guild=%s]", guild.id)
        await self.tracker.forget_community(str(guild.id))

    @event_boundary("member_join")
    async def on_member_join(self, member: discord.Member):
        await self.tracker.handle_member_join(str(member.guild.id), str(member.id))

    @event_boundary("member_remove")
    async def on_member_remove(self, member: discord.Member):
        await self.tracker.handle_member_leave(str(member.guild.id), str(member.id))

    @event_boundary("message")
    async def on_message(self, message: discord.Message):
        if message.author.bot or message.guild is None:
            return
        reply = await handle_command(
            self.tracker,
            str(message.author.id),
            message.content,
            self.command_prefix,
        )
        if reply is None:
            return
        result = await safe_call(
            "send_reply",
            lambda: message.reply(reply, mention_author=False),
            timeout=self.call_timeout,
            correlation_id=f"{message.guild.id}:{message.author.id}",
        )
        if not result.ok:
            logger.warning("COMMAND_REPLY_FAILED [guild=%s, error=%s]", message.guild.id, result.error)

    async def on_error(self, event_method: str, *args, **kwargs):
        # Called by discord.py inside the except block of a failed dispatch
        logger.exception("CLIENT_EVENT_ERROR [event=%s]", event_method)
