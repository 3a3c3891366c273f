#!/usr/bin/env python
"""Django 관리 명령 진입점 (runserver / migrate / sweep_overdue_attempts ...)."""
import os
import sys
from pathlib import Path


def main():
    # 저장소 루트: apps / examhall / libs 를 최상위 패키지로 import
    base_dir = Path(__file__).resolve().parent
    if str(base_dir) not in sys.path:
        sys.path.insert(0, str(base_dir))

    os.environ.setdefault(
        "DJANGO_SETTINGS_MODULE",
        "apps.api.config.settings.dev",
    )

    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
