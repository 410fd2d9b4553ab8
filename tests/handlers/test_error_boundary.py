"""
Unit tests for the event error boundary and i18n fallbacks.
"""
import asyncio

import pytest

from app.core.error_boundary import event_boundary
from app.i18n import get_text


class TestEventBoundary:
    """Tests for event_boundary decorator"""

    @pytest.mark.asyncio
    async def test_returns_handler_value(self):
        """Successful handlers are transparent"""
        @event_boundary("test")
        async def handler(value):
            return value * 2

        assert await handler(21) == 42

    @pytest.mark.asyncio
    async def test_exception_is_contained(self, caplog):
        """A failing handler logs and returns None"""
        @event_boundary("member_join")
        async def handler():
            raise ValueError("broken")

        with caplog.at_level("ERROR"):
            assert await handler() is None
        assert "UNHANDLED_HANDLER_EXCEPTION" in caplog.text

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """CancelledError passes through"""
        @event_boundary("test")
        async def handler():
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await handler()

    def test_preserves_name(self):
        """discord.py dispatches by coroutine name"""
        @event_boundary("ready")
        async def on_ready():
            return None

        assert on_ready.__name__ == "on_ready"


class TestGetText:
    """Tests for get_text function"""

    def test_formats_placeholders(self):
        """Announcement text is filled in"""
        text = get_text("announce.member_left", member_id="B", inviter_id="A", total=0)

        assert text == "👋 <@B> left. <@A> now has **0** invites."

    def test_missing_key_returns_key(self):
        """Unknown keys never raise"""
        assert get_text("no.such.key") == "no.such.key"

    def test_missing_placeholder_returns_template(self):
        """Format errors fall back to the raw template"""
        assert get_text("invites.self", total=1) == "📨 You have **{total}** total invites ({direct} direct)."

    def test_unknown_language_falls_back(self):
        """Only English ships"""
        assert get_text("leaderboard.empty", language="xx") == "No invites have been tracked yet."
