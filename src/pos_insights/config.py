"""Unified configuration for POS Insights.

Configuration is resolved once (at process start or by the caller) and passed
explicitly into the client, aggregator, comparator and ranker. Nothing in the
aggregation code reads the environment.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from pos_insights.channels import DEFAULT_CHANNELS, load_channel_map
from pos_insights.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.lightspeedapp.com/API/Account"
DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_BUSINESS_NAME = "Phyc Analyzer / Shop 6"

# Local-development fallback files (see PosConfig.from_files)
BOT_CONFIG_FILE = "bot-config.json"
TOKEN_FILE = "lightspeed-token.txt"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class PosConfig:
    """Credentials and query settings for the Lightspeed Retail API.

    Attributes:
        account_id: Lightspeed account ID (path segment of every request).
        shop_id: Shop to scope sale queries to.
        token: OAuth bearer token.
        base_url: API root, without the account segment.
        timezone: IANA name of the business timezone used for day windows
            and hourly buckets.
        timeout: Per-request timeout in seconds.
        retries: Retry attempts per request (0 = single attempt).
        page_limit: Records requested per page when paginating.
        channels: Ordered channel name -> name patterns table.
    """

    account_id: str
    shop_id: str
    token: str
    base_url: str = DEFAULT_BASE_URL
    timezone: str = DEFAULT_TIMEZONE
    timeout: float = 30.0
    retries: int = 0
    page_limit: int = 100
    channels: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_CHANNELS))

    @classmethod
    def from_env(cls) -> PosConfig:
        """Create PosConfig from LIGHTSPEED_* and related environment variables.

        Raises:
            ConfigurationError: If LIGHTSPEED_ACCOUNT_ID, LIGHTSPEED_SHOP_ID or
                LIGHTSPEED_TOKEN is missing, or a numeric setting is invalid.

        """
        required = {
            "LIGHTSPEED_ACCOUNT_ID": os.environ.get("LIGHTSPEED_ACCOUNT_ID"),
            "LIGHTSPEED_SHOP_ID": os.environ.get("LIGHTSPEED_SHOP_ID"),
            "LIGHTSPEED_TOKEN": os.environ.get("LIGHTSPEED_TOKEN"),
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

        return cls(
            account_id=str(required["LIGHTSPEED_ACCOUNT_ID"]),
            shop_id=str(required["LIGHTSPEED_SHOP_ID"]),
            token=str(required["LIGHTSPEED_TOKEN"]).strip(),
            base_url=os.environ.get("LIGHTSPEED_BASE_URL") or DEFAULT_BASE_URL,
            timezone=os.environ.get("BUSINESS_TIMEZONE") or DEFAULT_TIMEZONE,
            timeout=_env_float("POS_TIMEOUT", 30.0),
            retries=_env_int("POS_RETRIES", 0),
            channels=load_channel_map(os.environ.get("POS_CHANNELS_JSON")),
        )

    @classmethod
    def from_files(cls, config_dir: str | Path) -> PosConfig:
        """Create PosConfig from bot-config.json and lightspeed-token.txt.

        bot-config.json is expected to look like:

            {"shop_config": {"account_id": "12345", "shop_id": "1"}}

        Args:
            config_dir: Directory holding both files.

        Raises:
            ConfigurationError: If either file is missing or malformed.

        """
        config_dir = Path(config_dir)
        config_path = config_dir / BOT_CONFIG_FILE
        token_path = config_dir / TOKEN_FILE

        if not config_path.exists() or not token_path.exists():
            raise ConfigurationError(f"{BOT_CONFIG_FILE} and {TOKEN_FILE} are required in {config_dir}")

        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
            shop_config = data["shop_config"]
            account_id = str(shop_config["account_id"])
            shop_id = str(shop_config["shop_id"])
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ConfigurationError(f"Invalid {config_path}: {e}") from e

        token = token_path.read_text(encoding="utf-8").strip()
        if not token:
            raise ConfigurationError(f"{token_path} is empty")

        return cls(
            account_id=account_id,
            shop_id=shop_id,
            token=token,
            timezone=os.environ.get("BUSINESS_TIMEZONE") or DEFAULT_TIMEZONE,
            channels=load_channel_map(os.environ.get("POS_CHANNELS_JSON")),
        )


def load_pos_config(config_dir: str | Path | None = None) -> PosConfig | None:
    """Resolve POS configuration from the environment, then from files.

    Returns None when neither source is available, so callers can run
    without live sales data.

    Args:
        config_dir: Optional directory for the file-based fallback.

    Returns:
        PosConfig, or None if POS access is not configured.

    """
    try:
        config = PosConfig.from_env()
        logger.info("Loaded Lightspeed config from environment variables")
        return config
    except ConfigurationError as e:
        logger.debug("Lightspeed environment config unavailable: %s", e)

    if config_dir is not None:
        try:
            config = PosConfig.from_files(config_dir)
            logger.info("Loaded Lightspeed config from %s", config_dir)
            return config
        except ConfigurationError as e:
            logger.debug("Lightspeed file config unavailable: %s", e)

    logger.warning("Lightspeed config not found, sales queries will be disabled")
    return None


@dataclass
class AssistantConfig:
    """Settings for the language-model side of the assistant.

    Attributes:
        api_key: Anthropic API key (None disables narrative answers).
        model: Model name sent with each request.
        max_tokens: Response token cap.
        business_name: Shown in the system prompt.
        timezone: IANA business timezone for "current time" in prompts.
        timeout: Per-request timeout in seconds.
    """

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    max_tokens: int = 4096
    business_name: str = DEFAULT_BUSINESS_NAME
    timezone: str = DEFAULT_TIMEZONE
    timeout: float = 60.0

    @classmethod
    def from_env(cls) -> AssistantConfig:
        """Create AssistantConfig from ANTHROPIC_API_KEY and related variables."""
        return cls(
            api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
            model=os.environ.get("CLAUDE_MODEL") or DEFAULT_MODEL,
            max_tokens=_env_int("CLAUDE_MAX_TOKENS", 4096),
            business_name=os.environ.get("BUSINESS_NAME") or DEFAULT_BUSINESS_NAME,
            timezone=os.environ.get("BUSINESS_TIMEZONE") or DEFAULT_TIMEZONE,
            timeout=_env_float("LLM_TIMEOUT", 60.0),
        )
