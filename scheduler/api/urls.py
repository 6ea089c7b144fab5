from django.urls import path
from .views import ReviewView, CardMetricsView

urlpatterns = [
    path("reviews", ReviewView.as_view(), name="review"),
    path("cards/metrics", CardMetricsView.as_view(), name="card-metrics"),
]
