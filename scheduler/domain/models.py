from dataclasses import dataclass, field
from typing import List, Optional, Union

from .enums import Grade


@dataclass(frozen=True)
class Review:
    """One grading event. Never modified after it is appended to a card."""
    review_id: str
    timestamp: Optional[int]                # absent on some legacy records
    result: Union[Grade, str]
    interval: Optional[int] = None          # ms applied at this review; absent on legacy records
    review_duration: Optional[int] = None   # ms spent on the card, not used for scheduling

    @classmethod
    def from_dict(cls, data: dict) -> "Review":
        result = data.get("result")
        return cls(
            review_id=str(data.get("reviewId", "")),
            timestamp=data.get("timestamp"),
            result=Grade.parse(result) or result,
            interval=data.get("interval"),
            review_duration=data.get("reviewDuration"),
        )

    def to_dict(self) -> dict:
        out = {
            "reviewId": self.review_id,
            "result": self.result.value if isinstance(self.result, Grade) else self.result,
        }
        if self.timestamp is not None:
            out["timestamp"] = self.timestamp
        if self.interval is not None:
            out["interval"] = self.interval
        if self.review_duration is not None:
            out["reviewDuration"] = self.review_duration
        return out


@dataclass
class Card:
    card_id: str
    front: str = ""
    back: str = ""
    created_at: Optional[int] = None
    when_due: Optional[int] = None
    reviews: List[Review] = field(default_factory=list)
    is_starred: bool = False
    is_flagged: bool = False
    partner_card_id: Optional[str] = None

    @property
    def last_review(self) -> Optional[Review]:
        return self.reviews[-1] if self.reviews else None

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        return cls(
            card_id=str(data.get("cardId", "")),
            front=data.get("front") or "",
            back=data.get("back") or "",
            created_at=data.get("createdAt"),
            when_due=data.get("whenDue"),
            reviews=[Review.from_dict(r) for r in data.get("reviews") or []],
            is_starred=bool(data.get("isStarred", False)),
            is_flagged=bool(data.get("isFlagged", False)),
            partner_card_id=data.get("partnerCardId"),
        )

    def to_dict(self) -> dict:
        out = {
            "cardId": self.card_id,
            "front": self.front,
            "back": self.back,
            "reviews": [r.to_dict() for r in self.reviews],
        }
        if self.created_at is not None:
            out["createdAt"] = self.created_at
        if self.when_due is not None:
            out["whenDue"] = self.when_due
        if self.is_starred:
            out["isStarred"] = True
        if self.is_flagged:
            out["isFlagged"] = True
        if self.partner_card_id is not None:
            out["partnerCardId"] = self.partner_card_id
        return out
