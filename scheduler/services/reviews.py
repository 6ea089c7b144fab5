import structlog

from ..domain.enums import Grade
from ..domain.logic import calculate_next_interval, resolve_interval
from ..domain.models import Review
from ..utils.time import now_ms, to_utc_iso, pretty_print_interval

logger = structlog.get_logger()


class SchedulerError(ValueError):
    pass


class InvalidGradeError(SchedulerError):
    def __init__(self, result):
        super().__init__(f"Unknown review result: {result!r}")
        self.result = result


def record_review(card, result, timestamp=None, review_duration=None, review_id=None) -> Review:
    """
    Grade ``card``: append a Review carrying the computed interval and move
    ``card.when_due`` to ``timestamp + interval``. Returns the new Review.
    """
    grade = Grade.parse(result)
    if grade is None:
        raise InvalidGradeError(result)

    # One timestamp for both the interval and the review record
    if timestamp is None:
        timestamp = now_ms()

    previous = resolve_interval(card, now=timestamp)
    logger.info("review_received",
        card_id=card.card_id,
        result=grade.value,
        timestamp=timestamp,
        review_count=len(card.reviews),
        previous_interval=previous.value,
        previous_interval_source=previous.source.value,
    )

    interval = calculate_next_interval(grade, card, timestamp)
    review = Review(
        review_id=review_id or str(timestamp),
        timestamp=timestamp,
        result=grade,
        interval=interval,
        review_duration=review_duration,
    )

    card.reviews.append(review)
    card.when_due = timestamp + interval

    logger.info("review_scheduled",
        card_id=card.card_id,
        result=grade.value,
        interval_ms=interval,
        interval_label=pretty_print_interval(interval),
        when_due_utc=to_utc_iso(card.when_due),
    )

    return review


def preview_intervals(card, timestamp=None) -> dict:
    """Next interval for each grade, without touching the card."""
    if timestamp is None:
        timestamp = now_ms()
    return {grade: calculate_next_interval(grade, card, timestamp) for grade in Grade}
