"""Scraper utilities: resource filtering, block detection, normalization, retries."""

from .block_detector import BLOCK_SIGNALS, is_blocked
from .normalizer import PriceNormalizer, is_in_stock
from .resource_filter import BLOCKED_RESOURCE_TYPES, handle_route, should_abort
from .user_agents import USER_AGENTS, get_random_user_agent
from .retry import db_retry, http_retry, log_retry


__all__ = [
    # Block detection
    "BLOCK_SIGNALS",
    "is_blocked",
    # Normalization
    "PriceNormalizer",
    "is_in_stock",
    # Resource filtering
    "BLOCKED_RESOURCE_TYPES",
    "handle_route",
    "should_abort",
    # User agents
    "USER_AGENTS",
    "get_random_user_agent",
    # Retry decorators
    "db_retry",
    "http_retry",
    "log_retry",
]
