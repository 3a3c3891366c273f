# apps/api/config/settings/test.py
# pytest-django 전용: SQLite in-memory, Celery eager, Redis 미사용

from .base import *

DEBUG = False
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

LOGGING["root"]["level"] = "WARNING"
LOGGING["loggers"]["examhall"]["level"] = "WARNING"

REDIS_URL = None
REDIS_HOST = None
