# =============================================================================
# core/fallback.py  —  Ordered Fallback Tiers
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Every adapter operation is a short, ORDERED list of tiers:
#
#       live backend  →  (secondary backend)  →  static mock generator
#
#   `first_success()` awaits each tier in turn and returns the first result
#   that comes back without raising.  All tiers of one operation return the
#   same record type, so the caller never knows (or cares) which tier
#   answered.
#
# WHAT COUNTS AS A TIER FAILURE:
#   - UpstreamUnavailable (network error, timeout, non-2xx, bad JSON)
#   - Attribute/Key/Type/ValueError while mapping a payload into records
#   A MalformedArgument is NOT a tier failure: bad input is bad for every
#   tier, so it propagates immediately.
# =============================================================================

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Sequence, TypeVar
import logging

from core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TIER_FAILURES = (UpstreamUnavailable, AttributeError, KeyError, TypeError, ValueError)


@dataclass(frozen=True)
class Tier(Generic[T]):
    """One attempt in a fallback chain."""

    name: str                                  # "live", "ledger", "mock", ...
    fetch: Callable[[], Awaitable[T]]


async def first_success(label: str, tiers: Sequence[Tier[T]]) -> T:
    """Run `tiers` in order and return the first successful result.

    Args:
        label: Operation name for log messages (e.g. "get_token_pairs").
        tiers: The ordered attempts.  Must not be empty.

    Returns:
        The value produced by the first tier that did not fail.

    Raises:
        UpstreamUnavailable: if every tier failed; the message names the
            last failure.
        MalformedArgument: raised by a tier, unchanged.
    """
    if not tiers:
        raise ValueError(f"{label}: no fallback tiers configured")

    last_error: Exception | None = None
    for tier in tiers:
        try:
            result = await tier.fetch()
        except _TIER_FAILURES as exc:
            logger.warning("%s: %s tier failed (%s)", label, tier.name, exc)
            last_error = exc
            continue
        logger.debug("%s: served by %s tier", label, tier.name)
        return result

    raise UpstreamUnavailable(
        f"{label}: all {len(tiers)} tiers failed; last error: {last_error}",
        source=tiers[-1].name,
    )
