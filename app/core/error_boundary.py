"""
Global event error boundary.

Ensures no event handler exception can stop the Discord event stream.
Never swallows CancelledError.

- event_boundary(operation): decorator for discord.py event coroutines
- install_loop_exception_handler(loop): logs exceptions of tasks nobody awaited
"""
import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Dict

from app.core.structured_logger import log_event

logger = logging.getLogger(__name__)


def event_boundary(operation: str):
    """
    Wrap an event handler in a strict error boundary.

    Catches all exceptions except CancelledError, logs them with a traceback
    and returns None. The event stream keeps running.
    """

    def decorator(handler: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(handler)
        async def wrapper(*args, **kwargs):
            try:
                return await handler(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log_event(
                    logger,
                    component="handler",
                    operation=operation,
                    outcome="failed",
                    reason=f"{type(e).__name__}: {str(e)[:200]}",
                    level="error",
                )
                logger.exception("UNHANDLED_HANDLER_EXCEPTION [operation=%s]", operation)
                return None

        return wrapper

    return decorator


def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    exception = context.get("exception")
    message = context.get("message", "unhandled exception in event loop")
    log_event(
        logger,
        component="event_loop",
        operation="unhandled_exception",
        outcome="failed",
        reason=f"{type(exception).__name__}: {str(exception)[:200]}" if exception else message,
        level="error",
    )
    if exception is not None:
        logger.error("UNHANDLED_LOOP_EXCEPTION: %s", message, exc_info=exception)


def install_loop_exception_handler(loop: asyncio.AbstractEventLoop) -> None:
    """Log unhandled task exceptions instead of terminating or dropping them silently."""
    loop.set_exception_handler(_loop_exception_handler)
