from rest_framework import views, status
from rest_framework.response import Response
import structlog
import uuid
from ..domain.enums import GRADE_LABELS, Grade
from ..domain.logic import (
    calculate_learning_strength,
    get_per_day_review_rate,
    resolve_interval,
)
from ..services.cards import card_status, collection_metrics, filter_cards, sort_cards
from ..services.reviews import record_review
from ..utils.time import now_ms, pretty_print_due, pretty_print_interval, to_utc_iso
from .serializers import MetricsQuerySerializer, ReviewInSerializer, build_card

base_logger = structlog.get_logger()


class ReviewView(views.APIView):
    def post(self, request):
        # Create a unique request_id
        request_id = str(uuid.uuid4())
        logger = base_logger.bind(request_id=request_id)

        s = ReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        card = build_card(s.validated_data["card"])
        grade = Grade(s.validated_data["result"])
        timestamp = s.validated_data.get("timestamp")
        duration = s.validated_data.get("review_duration")

        review = record_review(card, grade, timestamp=timestamp, review_duration=duration)

        logger.info(
            "review_api_response",
            card_id=card.card_id,
            result=grade.value,
            interval_ms=review.interval,
            when_due_utc=to_utc_iso(card.when_due),
            status=status.HTTP_201_CREATED,
        )

        return Response(
            {
                "card": card.to_dict(),
                "review": review.to_dict(),
                "interval": review.interval,
                "intervalLabel": pretty_print_interval(review.interval),
                "resultLabel": GRADE_LABELS[grade],
                "whenDue": card.when_due,
                "whenDueUtc": to_utc_iso(card.when_due),
            },
            status=status.HTTP_201_CREATED,
        )


class CardMetricsView(views.APIView):
    def post(self, request):
        # Create a unique request_id
        request_id = str(uuid.uuid4())
        logger = base_logger.bind(request_id=request_id)

        qs = MetricsQuerySerializer(data=request.data)
        qs.is_valid(raise_exception=True)
        data = qs.validated_data
        now = data.get("now")
        if now is None:
            now = now_ms()

        cards = [build_card(c) for c in data["cards"]]
        metrics = collection_metrics(cards, now)
        shown = sort_cards(
            filter_cards(cards, data["filter_by"], now),
            data["sort_by"],
            descending=data["descending"],
            now=now,
        )

        results = []
        for card in shown:
            interval = resolve_interval(card, now)
            results.append({
                "cardId": card.card_id,
                "status": card_status(card, now).value,
                "interval": interval.value,
                "intervalSource": interval.source.value,
                "intervalLabel": pretty_print_interval(interval.value),
                "learningStrength": calculate_learning_strength(card),
                "perDayReviewRate": get_per_day_review_rate(card, now),
                "dueLabel": pretty_print_due(card.when_due, now) if card.when_due else None,
            })

        logger.info(
            "card_metrics_api_response",
            card_count=len(cards),
            shown_count=len(results),
            sort_by=data["sort_by"],
            filter_by=data["filter_by"],
        )

        return Response(
            {
                "now": now,
                "cards": results,
                "avgMastery": metrics.avg_mastery,
                "totalBurden": metrics.total_burden,
                "dueCount": metrics.due_count,
                "newCount": metrics.new_count,
                "learnedCount": metrics.learned_count,
            }
        )
