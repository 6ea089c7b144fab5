import math
from typing import NamedTuple, Optional

import structlog

from .enums import Grade, IntervalSource
from ..config import (
    FALLBACK_WEIGHT,
    MIN_INTERVAL_MS,
    MS_PER_DAY,
    RESULT_SCORES,
    STRENGTH_WINDOW,
)
from ..utils.time import now_ms

logger = structlog.get_logger()

# 1/1 for the most recent review down to 1/10 for the oldest in the window
STRENGTH_WEIGHTS = [1 / (i + 1) for i in range(STRENGTH_WINDOW)]


class IntervalEstimate(NamedTuple):
    value: int
    source: IntervalSource


def _usable(value) -> bool:
    # Falsy, NaN, infinite, negative and non-numeric values never leave this module.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _elapsed(later, earlier) -> Optional[float]:
    if later is None or earlier is None:
        return None
    return later - earlier


def resolve_interval(card, now: Optional[int] = None) -> IntervalEstimate:
    """
    Work out the interval currently governing ``card``.

    Rules are tried in order and the first usable one wins:
    the last review's stored interval, then whenDue minus the last review
    timestamp (legacy reviews carry no interval), then the time elapsed since
    the last review or creation, then MIN_INTERVAL.
    """
    reviews = card.reviews or []
    last = reviews[-1] if reviews else None

    if last is not None and _usable(last.interval):
        return IntervalEstimate(int(last.interval), IntervalSource.STORED)

    if last is not None and card.when_due:
        reconstructed = _elapsed(card.when_due, last.timestamp)
        if _usable(reconstructed):
            return IntervalEstimate(int(reconstructed), IntervalSource.DUE_DATE)

    if now is None:
        now = now_ms()
    since = _elapsed(now, last.timestamp) if last is not None else _elapsed(now, card.created_at or None)
    if _usable(since):
        return IntervalEstimate(int(since), IntervalSource.ELAPSED)

    return IntervalEstimate(MIN_INTERVAL_MS, IntervalSource.MINIMUM)


def get_interval(card, now: Optional[int] = None) -> int:
    return resolve_interval(card, now).value


def calculate_next_interval(result, card, timestamp: Optional[int] = None) -> int:
    """
    Milliseconds from ``timestamp`` until ``card`` is next due after being
    graded ``result``. ``card`` is the state before the review is appended.
    """
    if timestamp is None:
        timestamp = now_ms()

    grade = Grade.parse(result)

    # Always go to minimum interval
    if grade is Grade.AGAIN:
        return MIN_INTERVAL_MS

    if grade is None:
        logger.warning("unrecognized_grade", result=str(result))
        return MIN_INTERVAL_MS

    previous = get_interval(card, now=timestamp)

    reviews = card.reviews or []
    if reviews:
        since = _elapsed(timestamp, reviews[-1].timestamp)
    else:
        since = _elapsed(timestamp, card.created_at or None)
    if since is None or not math.isfinite(since):
        since = MIN_INTERVAL_MS

    # 0.5x MIN(last interval, time since last review)
    if grade is Grade.HARD:
        proposed = min(previous, since) * 0.5

    # 1x last interval; elapsed time is not considered
    elif grade is Grade.GOOD:
        proposed = previous

    # Early review: grow by twice the elapsed time instead of doubling
    elif since < previous:
        proposed = previous + 2 * since

    # 2x MAX(last interval, time since last review)
    else:
        proposed = max(previous, since) * 2

    return int(max(proposed, MIN_INTERVAL_MS))


def calculate_learning_strength(card) -> float:
    """Recency-weighted average of the last reviews' scores, as a percentage."""
    reviews = card.reviews or []
    if not reviews:
        return 0

    recent = reviews[-STRENGTH_WINDOW:]
    weighted_sum = 0.0
    total_weight = 0.0
    for index, review in enumerate(recent):
        from_end = len(recent) - 1 - index
        weight = STRENGTH_WEIGHTS[from_end] if from_end < len(STRENGTH_WEIGHTS) else FALLBACK_WEIGHT
        grade = Grade.parse(review.result)
        score = RESULT_SCORES[grade.value] if grade is not None else 0.0
        weighted_sum += score * weight
        total_weight += weight

    return weighted_sum / total_weight * 100


def get_per_day_review_rate(card, now: Optional[int] = None) -> float:
    """How many times a day the card comes up at its current interval."""
    interval = get_interval(card, now)
    if not interval:
        logger.error("interval_missing", card_id=getattr(card, "card_id", None))
        return 0

    days = interval / MS_PER_DAY
    if days > 0:
        return 1 / days
    return 0
