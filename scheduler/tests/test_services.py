import pytest

from scheduler.config import MIN_INTERVAL_MS, MS_PER_DAY
from scheduler.domain.enums import CardStatus, Grade
from scheduler.domain.models import Card, Review
from scheduler.services.cards import (
    card_status,
    collection_metrics,
    filter_cards,
    repair_created_at,
    sort_cards,
)
from scheduler.services.reviews import (
    InvalidGradeError,
    SchedulerError,
    preview_intervals,
    record_review,
)
from scheduler.utils.time import pretty_print_due, pretty_print_interval, to_utc_iso

T = 1_700_000_000_000
HOUR = 60 * 60 * 1000


def new_card(card_id="c1", **kwargs):
    kwargs.setdefault("created_at", T)
    kwargs.setdefault("when_due", T)
    return Card(card_id=card_id, front="front", back="back", **kwargs)


def learned_card(card_id, interval, when_due, results=("good",), **kwargs):
    reviews = [
        Review(review_id=f"{card_id}-{i}", timestamp=T + i, result=r, interval=interval)
        for i, r in enumerate(results)
    ]
    return Card(card_id=card_id, created_at=T, when_due=when_due, reviews=reviews, **kwargs)


# record_review

def test_record_review_appends_review_and_moves_due_date():
    card = new_card()
    review = record_review(card, "good", timestamp=T + 1000, review_duration=4200)

    assert card.reviews == [review]
    assert review.timestamp == T + 1000
    assert review.result is Grade.GOOD
    assert review.interval == MIN_INTERVAL_MS
    assert review.review_duration == 4200
    assert review.review_id == str(T + 1000)
    assert card.when_due == T + 1000 + MIN_INTERVAL_MS


def test_successive_reviews_use_stored_interval():
    card = new_card()
    record_review(card, "easy", timestamp=T + HOUR)
    first = card.reviews[-1].interval
    assert first == 2 * HOUR

    record_review(card, "good", timestamp=card.when_due)
    assert card.reviews[-1].interval == first
    assert len(card.reviews) == 2


def test_record_review_keeps_earlier_reviews_untouched():
    card = learned_card("c1", interval=HOUR, when_due=T + HOUR)
    original = card.reviews[0]
    record_review(card, "again", timestamp=T + 2 * HOUR, review_id="r-next")
    assert card.reviews[0] is original
    assert card.reviews[-1].review_id == "r-next"
    assert card.when_due == T + 2 * HOUR + MIN_INTERVAL_MS


def test_record_review_rejects_unknown_grade():
    card = new_card()
    with pytest.raises(InvalidGradeError) as exc:
        record_review(card, "meh", timestamp=T)
    assert isinstance(exc.value, SchedulerError)
    assert exc.value.result == "meh"
    assert card.reviews == []
    assert card.when_due == T


def test_preview_intervals_covers_every_grade_without_mutation():
    card = learned_card("c1", interval=10_000_000, when_due=T + 10_000_000)
    preview = preview_intervals(card, timestamp=T + 1_000_000)
    assert preview == {
        Grade.AGAIN: MIN_INTERVAL_MS,
        Grade.HARD: MIN_INTERVAL_MS,
        Grade.GOOD: 10_000_000,
        Grade.EASY: 12_000_000,
    }
    assert len(card.reviews) == 1


# card collections

def test_card_status():
    now = T + HOUR
    assert card_status(new_card(), now) is CardStatus.NEW
    assert card_status(learned_card("d", HOUR, when_due=now), now) is CardStatus.DUE
    assert card_status(learned_card("l", HOUR, when_due=now + 1), now) is CardStatus.LEARNED


def test_filter_cards():
    now = T + HOUR
    fresh = new_card("n", is_flagged=True)
    due = learned_card("d", HOUR, when_due=T, is_starred=True)
    later = learned_card("l", HOUR, when_due=now + HOUR)
    cards = [fresh, due, later]

    assert filter_cards(cards, "all", now) == cards
    assert filter_cards(cards, "new", now) == [fresh]
    assert filter_cards(cards, "due", now) == [due]
    assert filter_cards(cards, "learned", now) == [later]
    assert filter_cards(cards, "flagged", now) == [fresh]
    assert filter_cards(cards, "starred", now) == [due]


def test_sort_cards_by_mastery_burden_and_reviews():
    weak = learned_card("weak", MS_PER_DAY, T + MS_PER_DAY, results=("again", "hard"))
    strong = learned_card("strong", 4 * MS_PER_DAY, T + MS_PER_DAY, results=("easy",))
    busy = learned_card("busy", HOUR, T + HOUR, results=("good", "good", "good"))
    cards = [weak, strong, busy]

    assert sort_cards(cards, "mastery", now=T) == [strong, busy, weak]
    assert sort_cards(cards, "mastery", descending=False, now=T) == [weak, busy, strong]
    assert sort_cards(cards, "burden", now=T) == [busy, weak, strong]
    assert sort_cards(cards, "reviews", now=T) == [busy, weak, strong]
    assert sort_cards(cards, "default", now=T) == cards


def test_collection_metrics():
    now = T + HOUR
    cards = [
        new_card("n"),
        learned_card("d", MS_PER_DAY, when_due=T, results=("easy",)),
        learned_card("l", 2 * MS_PER_DAY, when_due=now + HOUR, results=("good",)),
    ]
    metrics = collection_metrics(cards, now)

    assert metrics.avg_mastery == pytest.approx((0 + 100 + 75) / 3)
    assert metrics.total_burden == pytest.approx(1.0 + 0.5)
    assert (metrics.due_count, metrics.new_count, metrics.learned_count) == (1, 1, 1)


def test_collection_metrics_for_empty_collection():
    assert collection_metrics([]) == (0, 0, 0, 0, 0)


def test_repair_created_at_uses_earliest_timestamp():
    card = learned_card("c1", HOUR, when_due=T + 5 * HOUR)
    card.created_at = None
    repair_created_at(card)
    assert card.created_at == T

    bare = Card(card_id="x", when_due=T + 10)
    assert repair_created_at(bare).created_at == T + 10

    empty = Card(card_id="y")
    assert repair_created_at(empty, now=T + 99).created_at == T + 99


def test_repair_created_at_leaves_existing_value():
    card = new_card(created_at=T - 5)
    assert repair_created_at(card, now=T).created_at == T - 5


# time helpers

@pytest.mark.parametrize("interval, label", [
    (3 * MS_PER_DAY, "3 days"),
    (int(2.5 * MS_PER_DAY), "3 days"),
    (MS_PER_DAY, "24 hours"),
    (2 * HOUR, "2 hours"),
    (HOUR, "60 minutes"),
    (MIN_INTERVAL_MS, "10 minutes"),
    (60_000, "60 seconds"),
    (1000, "1 second"),
    (0, "0 seconds"),
])
def test_pretty_print_interval(interval, label):
    assert pretty_print_interval(interval) == label


def test_pretty_print_due():
    assert pretty_print_due(T + 2 * HOUR, now=T) == "Due in 2 hours"


def test_to_utc_iso():
    assert to_utc_iso(0) == "1970-01-01T00:00:00+00:00"


# wire format

def test_card_round_trips_stored_json():
    stored = {
        "cardId": "abc",
        "front": "hola",
        "back": "hello",
        "createdAt": T,
        "whenDue": T + HOUR,
        "isStarred": True,
        "reviews": [
            {"reviewId": "1", "timestamp": T, "result": "good"},
            {"reviewId": "2", "timestamp": T + 5, "result": "easy", "interval": HOUR, "reviewDuration": 900},
        ],
    }
    card = Card.from_dict(stored)
    assert card.reviews[0].interval is None
    assert card.reviews[1].result is Grade.EASY
    assert card.to_dict() == stored


def test_card_from_dict_tolerates_missing_fields():
    card = Card.from_dict({"cardId": "abc"})
    assert card.reviews == []
    assert card.created_at is None
    assert card.when_due is None


def test_review_without_timestamp_stays_unset():
    stored = {"cardId": "abc", "reviews": [{"reviewId": "1", "result": "good", "interval": 10_000_000}]}
    card = Card.from_dict(stored)

    assert card.reviews[0].timestamp is None
    assert card.to_dict()["reviews"] == stored["reviews"]
    # Elapsed time falls back to the minimum instead of counting from the epoch
    assert preview_intervals(card, timestamp=T)[Grade.EASY] == 10_000_000 + 2 * MIN_INTERVAL_MS
    assert preview_intervals(card, timestamp=T)[Grade.HARD] == MIN_INTERVAL_MS
