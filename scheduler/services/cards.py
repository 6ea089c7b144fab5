from typing import Iterable, List, NamedTuple, Optional

import structlog

from ..domain.enums import CardStatus
from ..domain.logic import calculate_learning_strength, get_per_day_review_rate
from ..utils.time import now_ms

logger = structlog.get_logger()

FILTERS = ("all", "new", "due", "learned", "flagged", "starred")
SORT_KEYS = ("default", "reviews", "mastery", "burden")


class CollectionMetrics(NamedTuple):
    avg_mastery: float
    total_burden: float
    due_count: int
    new_count: int
    learned_count: int


def card_status(card, now: Optional[int] = None) -> CardStatus:
    if not card.reviews:
        return CardStatus.NEW
    if now is None:
        now = now_ms()
    if card.when_due is not None and card.when_due > now:
        return CardStatus.LEARNED
    return CardStatus.DUE


def filter_cards(cards: Iterable, by: str = "all", now: Optional[int] = None) -> List:
    if now is None:
        now = now_ms()
    cards = list(cards)
    if by == "flagged":
        return [c for c in cards if c.is_flagged]
    if by == "starred":
        return [c for c in cards if c.is_starred]
    if by in (CardStatus.NEW.value, CardStatus.DUE.value, CardStatus.LEARNED.value):
        return [c for c in cards if card_status(c, now) == by]
    return cards


def sort_cards(cards: Iterable, by: str = "default", descending: bool = True,
               now: Optional[int] = None) -> List:
    if now is None:
        now = now_ms()
    keys = {
        "reviews": lambda c: len(c.reviews),
        "mastery": calculate_learning_strength,
        "burden": lambda c: get_per_day_review_rate(c, now),
    }
    if by not in keys:
        return list(cards)
    return sorted(cards, key=keys[by], reverse=descending)


def collection_metrics(cards: Iterable, now: Optional[int] = None) -> CollectionMetrics:
    """Aggregate mastery and burden for a deck or folder."""
    cards = list(cards)
    if not cards:
        return CollectionMetrics(0, 0, 0, 0, 0)
    if now is None:
        now = now_ms()

    avg_mastery = sum(calculate_learning_strength(c) for c in cards) / len(cards)
    # New cards have no schedule yet, so they add no burden
    total_burden = sum(get_per_day_review_rate(c, now) for c in cards if c.reviews)

    statuses = [card_status(c, now) for c in cards]
    return CollectionMetrics(
        avg_mastery=avg_mastery,
        total_burden=total_burden,
        due_count=statuses.count(CardStatus.DUE),
        new_count=statuses.count(CardStatus.NEW),
        learned_count=statuses.count(CardStatus.LEARNED),
    )


def repair_created_at(card, now: Optional[int] = None):
    """Fill a missing created_at from the earliest known timestamp on the card."""
    if card.created_at:
        return card
    timestamps = [card.when_due] if card.when_due else []
    timestamps += [r.timestamp for r in card.reviews if r.timestamp]
    card.created_at = min(timestamps) if timestamps else (now if now is not None else now_ms())
    logger.info("created_at_repaired", card_id=card.card_id, created_at=card.created_at)
    return card
