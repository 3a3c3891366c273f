# apps/domains/attempts/urls.py
from django.urls import path

from .views import (
    AttemptAnswersView,
    AttemptDetailView,
    AttemptExtendTimeView,
    AttemptPauseView,
    AttemptResumeView,
    AttemptStartView,
    AttemptStatsView,
    AttemptSubmitView,
    AttemptTerminateView,
    MyActiveAttemptsView,
    MyCompletedAttemptsView,
)

urlpatterns = [
    path("", AttemptStartView.as_view(), name="attempt-start"),

    # me/ 는 <attempt_id>/ 보다 먼저
    path("me/active/", MyActiveAttemptsView.as_view(), name="attempt-me-active"),
    path("me/completed/", MyCompletedAttemptsView.as_view(), name="attempt-me-completed"),

    # attempt_id 는 문자열로 받는다 (형식 오류 = 404, 상태 머신에서 처리)
    path("<str:attempt_id>/", AttemptDetailView.as_view(), name="attempt-detail"),
    path("<str:attempt_id>/pause/", AttemptPauseView.as_view(), name="attempt-pause"),
    path("<str:attempt_id>/resume/", AttemptResumeView.as_view(), name="attempt-resume"),
    path("<str:attempt_id>/extend-time/", AttemptExtendTimeView.as_view(), name="attempt-extend-time"),
    path("<str:attempt_id>/answers/", AttemptAnswersView.as_view(), name="attempt-answers"),
    path("<str:attempt_id>/submit/", AttemptSubmitView.as_view(), name="attempt-submit"),
    path("<str:attempt_id>/terminate/", AttemptTerminateView.as_view(), name="attempt-terminate"),
    path("<str:attempt_id>/stats/", AttemptStatsView.as_view(), name="attempt-stats"),
]
