import asyncio
import hashlib
import logging
import os
from datetime import datetime, timezone

import config

# Configure logging FIRST (before any other imports that may log)
# Routes INFO/WARNING → stdout, ERROR/CRITICAL → stderr
from app.core.logging_config import setup_logging, stop_logging
setup_logging(config.LOG_LEVEL)

import discord

import health_server
from app.core.error_boundary import install_loop_exception_handler
from app.core.runtime_context import set_bot_start_time
from app.core.structured_logger import log_event
from app.handlers.events import InviteTrackerClient
from app.services.referrals.graph import ReferralGraph
from app.services.referrals.store import ReferralStore
from app.services.tiers.service import TierPolicy

# ====================================================================================
# LOGGING CONTRACT
# ====================================================================================
# Standard log fields (see app.core.structured_logger):
# - component        (tracker / store / roles / platform / handler / health / shutdown)
# - operation        (what is happening)
# - correlation_id   (community_id:member_id for membership events)
# - outcome          (success | degraded | failed | skipped)
# - reason           (short explanation)
#
# FAILURE TAXONOMY:
# - platform failure   (permission denial, entity not found, timeout) → logged, operation skipped
# - persistence failure (malformed document, write error) → logged, in-memory state kept
# - attribution miss   (no invite use-count increased) → join not recorded
#
# SECURITY:
# - DO NOT log the bot token or message contents
# ====================================================================================

logger = logging.getLogger(__name__)


async def main():
    install_loop_exception_handler(asyncio.get_running_loop())

    set_bot_start_time(datetime.now(timezone.utc))
    logger.info("BOT_INSTANCE_STARTED pid=%s env=%s", os.getpid(), config.APP_ENV.upper())
    bot_token_hash = hashlib.sha256(config.BOT_TOKEN.encode()).hexdigest()[:8]
    logger.info("BOT_TOKEN_HASH=%s (first 8 chars of sha256)", bot_token_hash)

    # Store failures never stop startup: a malformed document degrades to an empty forest
    store = ReferralStore(config.DATA_FILE)
    graph = ReferralGraph.load(store)
    if store.load_ok:
        logger.info("✅ Referral store loaded (%s members)", len(graph))
    else:
        logger.error("❌ REFERRAL STORE LOAD FAILED, RUNNING WITH EMPTY FOREST")

    client = InviteTrackerClient(
        graph=graph,
        announce_channel=config.ANNOUNCE_CHANNEL,
        command_prefix=config.COMMAND_PREFIX,
        call_timeout=config.PLATFORM_CALL_TIMEOUT,
        leaderboard_size=config.LEADERBOARD_SIZE,
        policy=TierPolicy.from_table(),
    )

    background_tasks = []
    if config.HEALTH_SERVER_ENABLED:
        health_task = asyncio.create_task(
            health_server.health_server_task(
                client.tracker,
                host=config.HEALTH_SERVER_HOST,
                port=config.HEALTH_SERVER_PORT,
            )
        )
        background_tasks.append(health_task)
        logger.info(
            "Health check HTTP server starting on http://%s:%s/health",
            config.HEALTH_SERVER_HOST, config.HEALTH_SERVER_PORT
        )

    try:
        log_event(logger, component="gateway", operation="client_start", outcome="success")
        await client.start(config.BOT_TOKEN)
    except discord.LoginFailure:
        log_event(
            logger,
            component="gateway",
            operation="login",
            outcome="failed",
            reason="invalid bot token",
            level="critical",
        )
        raise SystemExit(1)
    except discord.PrivilegedIntentsRequired:
        log_event(
            logger,
            component="gateway",
            operation="login",
            outcome="failed",
            reason="members/message_content intents are not enabled in the Developer Portal",
            level="critical",
        )
        raise SystemExit(1)
    finally:
        log_event(logger, component="shutdown", operation="shutdown_start", outcome="success")

        for task in background_tasks:
            if not task.done():
                task.cancel()
        for task in background_tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"Error during shutdown of task {task.get_name()}: {e}")

        if not client.is_closed():
            try:
                await client.close()
                logger.info("Discord client closed")
            except Exception as e:
                logger.debug(f"Error closing Discord client: {e}")

        log_event(logger, component="shutdown", operation="shutdown_completed", outcome="success")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped")
    finally:
        stop_logging()
