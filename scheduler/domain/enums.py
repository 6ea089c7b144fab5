from enum import Enum


class Grade(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def parse(cls, value):
        """Return the matching Grade, or None for anything outside the fixed set."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class CardStatus(str, Enum):
    NEW = "new"
    DUE = "due"
    LEARNED = "learned"


class IntervalSource(str, Enum):
    STORED = "stored"        # last review's interval field
    DUE_DATE = "due_date"    # whenDue - last review timestamp
    ELAPSED = "elapsed"      # now - last review (or createdAt)
    MINIMUM = "minimum"      # MIN_INTERVAL floor


GRADE_LABELS = {
    Grade.AGAIN: "Again",
    Grade.HARD: "Hard",
    Grade.GOOD: "Good",
    Grade.EASY: "Easy",
}
