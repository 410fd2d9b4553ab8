"""
HTTP Health Check Server

Exposes /health endpoint for the hosting platform.
Endpoint reads in-memory status only and always responds with HTTP 200.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from aiohttp import web

from app.core.runtime_context import get_uptime_seconds
from app.services.tracker.service import ReferralTracker

logger = logging.getLogger(__name__)

TRACKER_KEY = web.AppKey("tracker", ReferralTracker)


def build_health_payload(tracker: Optional[ReferralTracker]) -> Dict[str, Any]:
    """
    Response format:
        {
            "status": "ok" | "degraded",
            "store_ready": bool,
            "last_save_ok": bool | null,
            "members_tracked": int,
            "communities_primed": int,
            "uptime_seconds": int | null,
            "timestamp": "2024-01-01T12:00:00Z"
        }

    "degraded" when the store failed to load or the last save failed.
    """
    if tracker is None:
        status_data: Dict[str, Any] = {
            "store_ready": False,
            "last_save_ok": None,
            "members_tracked": 0,
            "communities_primed": 0,
        }
    else:
        status_data = tracker.health()

    healthy = status_data["store_ready"] and status_data["last_save_ok"] is not False
    return {
        "status": "ok" if healthy else "degraded",
        **status_data,
        "uptime_seconds": get_uptime_seconds(),
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }


async def health_handler(request: web.Request) -> web.Response:
    try:
        tracker = request.app.get(TRACKER_KEY)
        return web.json_response(build_health_payload(tracker), status=200)
    except Exception as e:
        logger.exception(f"Error in health endpoint: {e}")
        return web.json_response(
            {
                "status": "degraded",
                "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
                "error": "Health check error",
            },
            status=200,
        )


async def root_handler(request: web.Request) -> web.Response:
    return web.json_response({"service": "invite-referral-tracker", "health": "/health"})


def create_health_app(tracker: Optional[ReferralTracker] = None) -> web.Application:
    app = web.Application()
    if tracker is not None:
        app[TRACKER_KEY] = tracker
    app.router.add_get("/health", health_handler)
    app.router.add_get("/", root_handler)
    return app


async def start_health_server(
    tracker: Optional[ReferralTracker] = None,
    host: str = "0.0.0.0",
    port: int = 8080,
) -> web.AppRunner:
    """
    Start the HTTP server for health checks.

    Returns:
        AppRunner for shutdown (runner.cleanup()).
    """
    runner = web.AppRunner(create_health_app(tracker))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Health check server started on http://{host}:{port}/health")
    return runner


async def health_server_task(
    tracker: Optional[ReferralTracker] = None,
    host: str = "0.0.0.0",
    port: int = 8080,
):
    """Background task: run the health server until cancelled."""
    runner = None
    try:
        runner = await start_health_server(tracker, host, port)
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        logger.info("Health server task cancelled")
        raise
    finally:
        if runner is not None:
            try:
                await runner.cleanup()
                logger.info("Health server stopped")
            except Exception as e:
                logger.error(f"Error stopping health server: {e}")
