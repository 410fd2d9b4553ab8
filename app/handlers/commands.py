"""
Text command surface.

Commands (prefix configurable, command name case-insensitive):
    invites [@mention]: total (transitive) and direct counts for the mentioned
                       member, or the invoker when no valid mention is given
    leaderboard: top members by total count

Unrecognized commands are ignored (no reply).
"""
import logging
import re
from typing import List, Optional, Tuple

from app.i18n import get_text
from app.services.tracker.service import ReferralTracker

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "!"
MENTION_RE = re.compile(r"^<@!?(\d+)>$")


def parse_command(content: str, prefix: str = DEFAULT_PREFIX) -> Optional[Tuple[str, List[str]]]:
    """Split "<prefix>name args..." into (lowercased name, args); None if not a command."""
    if not content or not prefix or not content.startswith(prefix):
        return None
    parts = content[len(prefix):].split()
    if not parts:
        return None
    return parts[0].lower(), parts[1:]


def parse_mention(args: List[str]) -> Optional[str]:
    """Member id from the first argument if it is a user mention."""
    if not args:
        return None
    match = MENTION_RE.match(args[0])
    return match.group(1) if match else None


async def cmd_invites(tracker: ReferralTracker, invoker_id: str, args: List[str]) -> str:
    target_id = parse_mention(args) or invoker_id
    stats = await tracker.invites_report(target_id)
    if target_id == invoker_id:
        return get_text("invites.self", total=stats.total, direct=stats.direct)
    return get_text("invites.other", member_id=target_id, total=stats.total, direct=stats.direct)


async def cmd_leaderboard(tracker: ReferralTracker, invoker_id: str, args: List[str]) -> str:
    entries = await tracker.leaderboard_report()
    if not entries:
        return get_text("leaderboard.empty")
    lines = [get_text("leaderboard.title")]
    for rank, entry in enumerate(entries, start=1):
        lines.append(get_text(
            "leaderboard.entry",
            rank=rank,
            member_id=entry.member_id,
            total=entry.total,
            direct=entry.direct,
        ))
    return "\n".join(lines)


COMMANDS = {
    "invites": cmd_invites,
    "leaderboard": cmd_leaderboard,
}


async def handle_command(
    tracker: ReferralTracker,
    invoker_id: str,
    content: str,
    prefix: str = DEFAULT_PREFIX,
) -> Optional[str]:
    """
    Dispatch a text message to its command.

    Returns:
        Reply text, or None when the message is not a known command.
    """
    parsed = parse_command(content, prefix)
    if parsed is None:
        return None
    name, args = parsed
    command = COMMANDS.get(name)
    if command is None:
        return None
    logger.info("COMMAND_RECEIVED [command=%s, invoker=%s]", name, invoker_id)
    return await command(tracker, invoker_id, args)
