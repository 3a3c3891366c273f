from .attempt_views import (  # noqa: F401
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
