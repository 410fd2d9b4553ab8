"""
Platform Service Layer

Gateway contract for the chat platform. The discord.py implementation lives in
app.services.platform.discord_gateway and is imported only by app.handlers.events.
"""

from app.services.platform.gateway import CallResult, CommunityGateway

__all__ = [
    "CallResult",
    "CommunityGateway",
]
