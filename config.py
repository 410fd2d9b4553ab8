import os
import sys

# ====================================================================================
# ENVIRONMENT CONFIGURATION: PROD / STAGE / LOCAL isolation via prefixes
# ====================================================================================
# Every variable is read with the environment prefix:
#   - PROD: PROD_BOT_TOKEN, PROD_DATA_FILE, PROD_ANNOUNCE_CHANNEL
#   - STAGE: STAGE_BOT_TOKEN, STAGE_DATA_FILE, STAGE_ANNOUNCE_CHANNEL
#   - LOCAL: LOCAL_BOT_TOKEN, LOCAL_DATA_FILE, LOCAL_ANNOUNCE_CHANNEL
#
# A STAGE bot therefore cannot pick up PROD_BOT_TOKEN by accident.
# ====================================================================================

APP_ENV = os.getenv("APP_ENV", "prod").lower()
if APP_ENV not in ("prod", "stage", "local"):
    print(f"ERROR: Invalid APP_ENV={APP_ENV}. Must be one of: prod, stage, local", file=sys.stderr)
    sys.exit(1)

IS_LOCAL = APP_ENV == "local"
IS_STAGE = APP_ENV == "stage"
IS_PROD = APP_ENV == "prod"


def env(key: str, default: str = "") -> str:
    """
    Read an environment variable with the environment prefix.

    Example:
        env("BOT_TOKEN") -> value of STAGE_BOT_TOKEN (if APP_ENV=stage)
        env("DATA_FILE", default="invites.json") -> "invites.json" if not set
    """
    env_key = f"{APP_ENV.upper()}_{key}"
    return os.getenv(env_key, default)


def _env_int(key: str, default: int) -> int:
    raw = env(key, default=str(default))
    try:
        return int(raw)
    except ValueError:
        print(f"ERROR: {APP_ENV.upper()}_{key} must be an integer, got: {raw}", file=sys.stderr)
        sys.exit(1)


def _env_float(key: str, default: float) -> float:
    raw = env(key, default=str(default))
    try:
        return float(raw)
    except ValueError:
        print(f"ERROR: {APP_ENV.upper()}_{key} must be a number, got: {raw}", file=sys.stderr)
        sys.exit(1)


# Unprefixed secrets are forbidden
_direct_usage_vars = ["BOT_TOKEN"]
for var in _direct_usage_vars:
    if os.getenv(var):
        print(f"ERROR: Direct usage of {var} is FORBIDDEN!", file=sys.stderr)
        print(f"ERROR: Use {APP_ENV.upper()}_{var} instead (via env('{var}'))", file=sys.stderr)
        sys.exit(1)

print(f"INFO: Config loaded for environment: {APP_ENV.upper()}", flush=True)

# ====================================================================================
# SECRETS (validated at startup, never logged)
# ====================================================================================

# Discord bot token (Developer Portal → Bot)
BOT_TOKEN = env("BOT_TOKEN")
if not BOT_TOKEN:
    print(f"ERROR: {APP_ENV.upper()}_BOT_TOKEN environment variable is not set!", file=sys.stderr)
    sys.exit(1)
print(f"INFO: Using BOT_TOKEN from {APP_ENV.upper()}_BOT_TOKEN", flush=True)

# ====================================================================================
# REFERRAL TRACKING
# ====================================================================================

# Persisted referral document (rewritten in full on every change)
DATA_FILE = env("DATA_FILE", default="invites.json")

# Text channel (by name) receiving join/leave announcements
ANNOUNCE_CHANNEL = env("ANNOUNCE_CHANNEL", default="bot-logs")

# Text command prefix: "!invites", "!leaderboard"
COMMAND_PREFIX = env("COMMAND_PREFIX", default="!")

LEADERBOARD_SIZE = _env_int("LEADERBOARD_SIZE", 10)

# Upper bound (seconds) for every Discord API call; failures are not retried
PLATFORM_CALL_TIMEOUT = _env_float("PLATFORM_CALL_TIMEOUT", 10.0)

# ====================================================================================
# OPERATIONS
# ====================================================================================

LOG_LEVEL = env("LOG_LEVEL", default="INFO").upper()

HEALTH_SERVER_ENABLED = env("HEALTH_SERVER_ENABLED", default="true").lower() == "true"
HEALTH_SERVER_HOST = env("HEALTH_SERVER_HOST", default="0.0.0.0")
# Hosting platforms inject PORT
HEALTH_SERVER_PORT = int(os.getenv("PORT") or env("HEALTH_SERVER_PORT") or "8080")

print(f"INFO: DATA_FILE={DATA_FILE} ANNOUNCE_CHANNEL={ANNOUNCE_CHANNEL} COMMAND_PREFIX={COMMAND_PREFIX}", flush=True)
