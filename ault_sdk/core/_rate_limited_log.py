"""
Thread-safe rate-limited logging.

Retry loops can emit the same warning many times per second against a
flapping endpoint; this keeps one copy per message and level per interval.
"""
import logging
import threading
from typing import Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

_log_cache: TTLCache = TTLCache(maxsize=100, ttl=3600)
_log_cache_lock = threading.RLock()


def rate_limited_log(
    message: str,
    level: str = "warning",
    interval: int = 60,
    logger_instance: Optional[logging.Logger] = None,
) -> bool:
    """
    Log ``message`` unless the same message was logged within ``interval`` seconds.

    Args:
        message: Message to log
        level: Log level name (debug, info, warning, error, critical)
        interval: Suppression window in seconds
        logger_instance: Logger to use (defaults to this module's logger)

    Returns:
        True if the message was emitted, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = (level, message, interval)

    with _log_cache_lock:
        if key in _log_cache:
            expires_at = _log_cache[key]
            if _log_cache.timer() < expires_at:
                return False
        log_method(message)
        _log_cache[key] = _log_cache.timer() + interval
        return True


def reset_rate_limited_log() -> None:
    """Forget every suppressed message."""
    with _log_cache_lock:
        _log_cache.clear()
