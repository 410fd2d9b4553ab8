"""
Structured logging normalization.

Single contract for lifecycle and outcome logs:
- component
- operation
- correlation_id (optional; community:member or event name)
- outcome (success | degraded | failed | skipped)
- duration_ms (optional, omitted if None)
- reason (optional)

Do not log the bot token or message contents.
"""
from logging import Logger
from typing import Optional


def log_event(
    logger: Logger,
    *,
    component: str,
    operation: str,
    correlation_id: Optional[str] = None,
    outcome: str,
    duration_ms: Optional[int] = None,
    reason: Optional[str] = None,
    level: str = "info",
    message: Optional[str] = None,
) -> None:
    """
    Emit structured log event.

    Args:
        logger: Logger instance
        component: Component name (e.g., "tracker", "store", "roles", "platform")
        operation: Operation name (e.g., "member_join", "save", "reconcile")
        correlation_id: Community/member identifier (optional)
        outcome: Outcome (e.g., "success", "failed", "skipped")
        duration_ms: Duration in milliseconds (omitted if None)
        reason: Short explanation (optional)
        level: Log level ("info", "warning", "error", "critical", "debug")
        message: Optional override message
    """
    extra: dict = {
        "component": component,
        "operation": operation,
        "outcome": outcome,
    }
    if correlation_id is not None:
        extra["correlation_id"] = str(correlation_id)
    if duration_ms is not None:
        extra["duration_ms"] = duration_ms
    if reason is not None:
        extra["reason"] = reason

    if message is None:
        message = f"{component} {operation} outcome={outcome}"
        if correlation_id is not None:
            message += f" correlation_id={correlation_id}"
        if reason is not None:
            message += f" reason={reason}"
    log_method = getattr(logger, level.lower(), logger.info)
    log_method(message, extra=extra)
