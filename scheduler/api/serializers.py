from rest_framework import serializers

from ..domain.enums import Grade
from ..domain.models import Card, Review
from ..services.cards import FILTERS, SORT_KEYS

GRADE_CHOICES = [g.value for g in Grade]


class MillisecondsField(serializers.FloatField):
    """Epoch time or duration in ms. Older records hold fractional values."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return int(value) if value.is_integer() else value


class ReviewSerializer(serializers.Serializer):
    reviewId = serializers.CharField(source="review_id", default="", allow_blank=True)
    timestamp = MillisecondsField(min_value=0, required=False, allow_null=True)
    # History is scored as stored; unknown results count as no progress
    result = serializers.CharField(allow_blank=True)
    interval = MillisecondsField(min_value=0, required=False, allow_null=True)
    reviewDuration = MillisecondsField(
        source="review_duration", min_value=0, required=False, allow_null=True
    )


class CardSerializer(serializers.Serializer):
    """Validates the stored camelCase card JSON; legacy fields may be missing."""
    cardId = serializers.CharField(source="card_id")
    front = serializers.CharField(default="", allow_blank=True, trim_whitespace=False)
    back = serializers.CharField(default="", allow_blank=True, trim_whitespace=False)
    createdAt = MillisecondsField(source="created_at", required=False, allow_null=True)
    whenDue = MillisecondsField(source="when_due", required=False, allow_null=True)
    reviews = ReviewSerializer(many=True, default=list)
    isStarred = serializers.BooleanField(source="is_starred", default=False)
    isFlagged = serializers.BooleanField(source="is_flagged", default=False)
    partnerCardId = serializers.CharField(
        source="partner_card_id", required=False, allow_null=True
    )

    def create(self, validated_data):
        return build_card(validated_data)


def build_review(data) -> Review:
    data = dict(data)
    result = data.pop("result")
    data.setdefault("timestamp", None)
    return Review(result=Grade.parse(result) or result, **data)


def build_card(data) -> Card:
    data = dict(data)
    reviews = [build_review(r) for r in data.pop("reviews", [])]
    return Card(reviews=reviews, **data)


class ReviewInSerializer(serializers.Serializer):
    card = CardSerializer()
    result = serializers.ChoiceField(choices=GRADE_CHOICES)
    timestamp = serializers.IntegerField(min_value=0, required=False)
    reviewDuration = serializers.IntegerField(
        source="review_duration", min_value=0, required=False, allow_null=True
    )


class MetricsQuerySerializer(serializers.Serializer):
    cards = CardSerializer(many=True)
    now = serializers.IntegerField(min_value=0, required=False)
    sortBy = serializers.ChoiceField(source="sort_by", choices=SORT_KEYS, default="default")
    filterBy = serializers.ChoiceField(source="filter_by", choices=FILTERS, default="all")
    descending = serializers.BooleanField(default=True)
