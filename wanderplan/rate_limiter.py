"""
In-memory fixed-window rate limiting utilities

Counters live in this process only: they reset on restart and are not shared
between workers. Run a single worker (or put a shared limiter in front) when
limits must hold across instances.
"""

import logging
import math
import time
from threading import Lock
from typing import Optional

from fastapi import Request

from .errors import api_error

logger = logging.getLogger(__name__)

# Format: {key: {'count': int, 'reset_time': float}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

# Configuration
MEMORY_CACHE_CLEANUP_INTERVAL = 60  # Clean up expired entries every 60 seconds
last_cleanup_time = 0.0

# Named limits used across the API: (limit, window_seconds)
LOGIN_LIMIT = (5, 15 * 60)
LEAD_SUBMISSION_LIMIT = (10, 15 * 60)
PASSWORD_RESET_LIMIT = (3, 60 * 60)
INVOICE_CREATE_LIMIT = (60, 60 * 60)
PROPOSAL_CREATE_LIMIT = (60, 60 * 60)


def cleanup_expired_cache(force: bool = False):
    """Remove expired entries from memory cache"""
    global last_cleanup_time
    current_time = time.time()

    if not force and current_time - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired_keys = [
            k for k, v in memory_cache.items() if current_time >= v.get("reset_time", 0)
        ]
        for k in expired_keys:
            del memory_cache[k]

        if expired_keys:
            logger.debug(f"🧹 Cleaned up {len(expired_keys)} expired rate limit entries")

    last_cleanup_time = current_time


def _entry(key: str, window_seconds: int, current_time: float) -> dict:
    """Return the live window for key, opening a new one if missing or expired (lock held)"""
    cache_entry = memory_cache.get(key)
    if cache_entry is None or current_time >= cache_entry["reset_time"]:
        cache_entry = {"count": 0, "reset_time": current_time + window_seconds}
        memory_cache[key] = cache_entry
    return cache_entry


def check_rate_limit(key: str, limit: int, window_seconds: int) -> tuple[bool, int, int]:
    """Count a request against key and report whether it is allowed

    Args:
        key: Identifier for this limit (e.g. "leads:203.0.113.7")
        limit: Maximum number of requests allowed per window
        window_seconds: Window length in seconds

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    current_time = time.time()
    cleanup_expired_cache()

    with cache_lock:
        cache_entry = _entry(key, window_seconds, current_time)
        is_allowed = cache_entry["count"] < limit
        if is_allowed:
            cache_entry["count"] += 1

        ttl = math.ceil(cache_entry["reset_time"] - current_time)
        return is_allowed, cache_entry["count"], max(0, ttl)


def record_failed_attempt(key: str, window_seconds: int) -> int:
    """Increment a failure counter (e.g. bad logins) and return the new count"""
    current_time = time.time()
    with cache_lock:
        cache_entry = _entry(key, window_seconds, current_time)
        cache_entry["count"] += 1
        return cache_entry["count"]


def get_rate_limit_status(key: str, limit: int) -> tuple[int, int]:
    """Return (remaining, ttl_seconds) for key without counting a request"""
    current_time = time.time()
    with cache_lock:
        cache_entry = memory_cache.get(key)
        if cache_entry is None or current_time >= cache_entry["reset_time"]:
            return limit, 0
        ttl = math.ceil(cache_entry["reset_time"] - current_time)
        return max(0, limit - cache_entry["count"]), max(0, ttl)


def reset_rate_limit(key: Optional[str] = None) -> None:
    """Forget one key, or every key when called without arguments"""
    with cache_lock:
        if key is None:
            memory_cache.clear()
        else:
            memory_cache.pop(key, None)


def get_client_ip(request: Request) -> str:
    """Client IP, honouring the first X-Forwarded-For hop"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def rate_limit_exceeded(retry_after: int, message: Optional[str] = None):
    """Build the 429 error; message may use {minutes} and {seconds} placeholders"""
    minutes = max(1, math.ceil(retry_after / 60))
    text = (message or "Too many requests. Please try again in {minutes} minutes.").format(
        minutes=minutes, seconds=retry_after
    )
    return api_error(
        429,
        text,
        code="RATE_LIMIT_EXCEEDED",
        headers={"Retry-After": str(retry_after)},
    )


async def rate_limit_dependency(
    request: Request,
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    use_ip: bool = True,
    message: Optional[str] = None,
):
    """
    FastAPI dependency for rate limiting

    Args:
        request: FastAPI request object
        limit: Maximum requests allowed
        window_seconds: Time window in seconds
        key_prefix: Prefix for the counter key
        use_ip: If True, use client IP in key (per-IP limit), otherwise global
        message: Optional 429 message template
    """
    if use_ip:
        client_ip = get_client_ip(request)
        key = f"{key_prefix}:{client_ip}"
        logger.debug(f"🔍 Rate limit check for {key_prefix} - IP: {client_ip}")
    else:
        key = f"{key_prefix}:global"

    is_allowed, current_count, ttl = check_rate_limit(key, limit, window_seconds)

    if not is_allowed:
        logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit} requests used")
        raise rate_limit_exceeded(ttl, message)

    request.state.rate_limit_remaining = limit - current_count
    request.state.rate_limit_limit = limit
    request.state.rate_limit_reset = int(time.time()) + ttl


def create_rate_limiter(
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    use_ip: bool = True,
    message: Optional[str] = None,
):
    """
    Create a rate limiter dependency with specific parameters

    Example usage:
        lead_rate_limit = create_rate_limiter(limit=10, window_seconds=900, key_prefix="leads")

        @router.post("/{slug}/leads")
        async def submit_lead(slug: str, _: None = Depends(lead_rate_limit)):
            ...
    """

    async def rate_limiter(request: Request):
        return await rate_limit_dependency(
            request, limit, window_seconds, key_prefix, use_ip, message
        )

    return rate_limiter
