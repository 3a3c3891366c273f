# PATH: apps/domains/attempts/management/commands/sweep_overdue_attempts.py
"""
시간 초과 attempt 강제 만료 (expired).

- in_progress 이면서 경과 시간 > remaining_time 인 attempt 대상
- paused attempt는 시계가 멈춰 있으므로 대상 아님
- Celery beat 없이 cron으로 돌릴 때 사용

사용:
  python manage.py sweep_overdue_attempts
  python manage.py sweep_overdue_attempts --dry-run
"""
from django.core.management.base import BaseCommand

from apps.domains.attempts.services.wiring import build_overdue_sweeper


class Command(BaseCommand):
    help = "시간이 초과된 진행 중 attempt를 expired 로 전환합니다."

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=None,
            help="한 번에 처리할 최대 attempt 수 (기본: settings.ATTEMPT_SWEEP_BATCH_LIMIT)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="실제 만료 없이 대상만 출력",
        )

    def handle(self, *args, **options):
        sweeper = build_overdue_sweeper(batch_limit=options["limit"])

        if options["dry_run"]:
            attempt_ids = sweeper.find_overdue()
            if not attempt_ids:
                self.stdout.write("만료 대상 없음")
                return
            self.stdout.write(f"만료 대상: {len(attempt_ids)}건")
            for attempt_id in attempt_ids[:5]:
                self.stdout.write(f"  - {attempt_id}")
            if len(attempt_ids) > 5:
                self.stdout.write(f"  ... 외 {len(attempt_ids) - 5}건")
            self.stdout.write(self.style.WARNING("--dry-run: 실제 만료하지 않음"))
            return

        report = sweeper.sweep()
        self.stdout.write(
            self.style.SUCCESS(
                f"만료 완료: {len(report.expired)}건 "
                f"(대상 {report.scanned}, 건너뜀 {len(report.skipped)}, 실패 {len(report.failed)})"
            )
        )
