# celery autodiscover_tasks 는 <app>.tasks 모듈을 import 한다
from .sweeper_tasks import sweep_overdue_attempts_task  # noqa: F401
