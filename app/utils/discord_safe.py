"""
Centralized safe wrapper for Discord API calls.

Every external call is awaited under a timeout and its outcome returned as
a CallResult. Handles discord.Forbidden (missing permissions), discord.NotFound
(member/role/channel gone), other HTTP errors and timeouts. Fail-fast: no retries.
Never swallows CancelledError.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import discord

from app.services.platform.gateway import CallResult

logger = logging.getLogger(__name__)

DEFAULT_CALL_TIMEOUT = 10.0


async def safe_call(
    operation: str,
    call: Callable[[], Awaitable[Any]],
    *,
    timeout: float = DEFAULT_CALL_TIMEOUT,
    correlation_id: Optional[str] = None,
) -> CallResult:
    """
    Await call() with graceful error handling.

    Returns:
        CallResult.success(value) on success, CallResult.failure(reason) on any handled failure.
    """
    try:
        value = await asyncio.wait_for(call(), timeout=timeout)
        return CallResult.success(value)

    except asyncio.CancelledError:
        raise

    except asyncio.TimeoutError:
        logger.warning(f"SAFE_CALL_TIMEOUT op={operation} ref={correlation_id} timeout={timeout}s")
        return CallResult.failure("timeout")

    except discord.Forbidden as e:
        logger.warning(f"SAFE_CALL_FORBIDDEN op={operation} ref={correlation_id} code={e.code}")
        return CallResult.failure("forbidden")

    except discord.NotFound as e:
        logger.warning(f"SAFE_CALL_NOT_FOUND op={operation} ref={correlation_id} code={e.code}")
        return CallResult.failure("not_found")

    except discord.HTTPException as e:
        logger.error(f"SAFE_CALL_HTTP_ERROR op={operation} ref={correlation_id} status={e.status} text={str(e.text)[:200]}")
        return CallResult.failure(f"http_{e.status}")

    except Exception:
        logger.exception(f"SAFE_CALL_UNKNOWN_ERROR op={operation} ref={correlation_id}")
        return CallResult.failure("unexpected_error")
