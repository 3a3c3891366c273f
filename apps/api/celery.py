# apps/api/celery.py

from celery import Celery

# ❗ settings는 여기서 지정하지 않는다
# DJANGO_SETTINGS_MODULE은 반드시 외부에서 주입 (worker: settings.worker)

app = Celery("examhall")

app.config_from_object(
    "django.conf:settings",
    namespace="CELERY",
)

# ✅ INSTALLED_APPS 기준 자동 탐색 (apps.domains.attempts.tasks)
app.autodiscover_tasks()
