"""
Unit tests for safe_call: every failure mode maps to a CallResult.
"""
import asyncio

import discord
import pytest
from unittest.mock import MagicMock

from app.utils.discord_safe import safe_call


def http_response(status):
    return MagicMock(status=status, reason="error")


class TestSafeCall:
    """Tests for safe_call function"""

    @pytest.mark.asyncio
    async def test_success(self):
        """Value is wrapped"""
        async def call():
            return 42

        result = await safe_call("op", call)

        assert result.ok is True
        assert result.value == 42

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Slow call is abandoned, not retried"""
        calls = []

        async def call():
            calls.append(1)
            await asyncio.sleep(10)

        result = await safe_call("op", call, timeout=0.01)

        assert result.ok is False
        assert result.error == "timeout"
        assert calls == [1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc, expected", [
        (discord.Forbidden(http_response(403), "Missing Permissions"), "forbidden"),
        (discord.NotFound(http_response(404), "Unknown Member"), "not_found"),
        (discord.HTTPException(http_response(500), "Internal"), "http_500"),
        (RuntimeError("boom"), "unexpected_error"),
    ])
    async def test_errors_mapped(self, exc, expected):
        """Platform errors become failure reasons"""
        async def call():
            raise exc

        result = await safe_call("op", call)

        assert result.ok is False
        assert result.error == expected

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """CancelledError is never swallowed"""
        async def call():
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await safe_call("op", call)
