"""Rate-limit handling shared by embedding and chat providers.

Providers raise RateLimitedError on HTTP 429 with whatever backoff hint the
server gave. ``call_with_retry`` waits that long (capped) and tries again,
up to the configured number of attempts.
"""

import logging
import re
import time
from collections.abc import Callable, Mapping
from typing import TypeVar

import httpx

from ragamuffin.config import RetryConfig
from ragamuffin.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# "Please try again in 20s" / "try again in 850ms" / "try again in 1.5 seconds"
_TRY_AGAIN_PATTERN = re.compile(
    r"try again in\s+(\d+(?:\.\d+)?)\s*(ms|milliseconds?|s|sec|seconds?)\b",
    re.IGNORECASE,
)


def parse_retry_after(headers: Mapping[str, str] | None = None, message: str = "") -> float | None:
    """Extract a suggested backoff in seconds from a rate-limited response.

    Checks, in order: ``retry-after-ms``, ``Retry-After`` (seconds), then a
    "try again in N s/ms" phrase in the message body.

    Returns:
        Seconds to wait, or None if no hint was found.
    """
    if headers:
        lowered = {k.lower(): v for k, v in headers.items()}
        raw_ms = lowered.get("retry-after-ms")
        if raw_ms:
            try:
                return float(raw_ms) / 1000.0
            except ValueError:
                logger.debug(f"Ignoring unparseable retry-after-ms header: {raw_ms}")
        raw = lowered.get("retry-after")
        if raw:
            try:
                return float(raw)
            except ValueError:
                # HTTP-date form is not worth supporting
                logger.debug(f"Ignoring non-numeric Retry-After header: {raw}")

    match = _TRY_AGAIN_PATTERN.search(message or "")
    if match:
        value = float(match.group(1))
        return value / 1000.0 if match.group(2).lower().startswith("m") else value
    return None


def rate_limited_from_response(response: httpx.Response, provider: str) -> RateLimitedError:
    """Build a RateLimitedError from a 429 response."""
    body = response.text
    return RateLimitedError(
        f"Rate limited by provider: {body[:200]}",
        provider=provider,
        retry_after=parse_retry_after(response.headers, body),
    )


def compute_delay(error: RateLimitedError, attempt: int, policy: RetryConfig) -> float:
    """Seconds to wait before retry number ``attempt`` (0-based)."""
    if error.retry_after is not None:
        delay = error.retry_after
    else:
        delay = policy.default_delay_seconds * (2**attempt)
    return max(0.0, min(delay, policy.max_delay_seconds))


def call_with_retry(
    func: Callable[[], T],
    policy: RetryConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Invoke func, retrying on RateLimitedError.

    Only rate limiting is retried; every other error propagates at once.

    Args:
        func: Zero-argument callable performing one provider call.
        policy: Retry bounds.
        sleep: Wait function (injectable for tests).

    Returns:
        Whatever func returns.

    Raises:
        RateLimitedError: If the final attempt is still rate limited.
    """
    for attempt in range(policy.max_attempts):
        try:
            return func()
        except RateLimitedError as e:
            if attempt + 1 >= policy.max_attempts:
                logger.warning(f"Still rate limited after {policy.max_attempts} attempts ({e.provider})")
                raise
            delay = compute_delay(e, attempt, policy)
            logger.info(f"Rate limited by {e.provider}; retrying in {delay:.1f}s")
            sleep(delay)
    # max_attempts >= 1 is validated, so the loop always returns or raises
    raise AssertionError("unreachable")
