"""
Handlers module - Discord event wiring and text commands.
"""
from .commands import handle_command, parse_command, parse_mention
from .events import InviteTrackerClient, build_intents

__all__ = [
    "handle_command",
    "parse_command",
    "parse_mention",
    "InviteTrackerClient",
    "build_intents",
]
