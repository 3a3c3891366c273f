# PATH: apps/domains/attempts/migrations/0002_attempt_carry_and_deadline.py
from datetime import timedelta

from django.db import migrations, models


def backfill_deadline_at(apps, schema_editor):
    """
    진행 중 attempt의 deadline_at 채움 (기존 row는 이월 밀리초 0)
    """
    ExamAttempt = apps.get_model("attempts", "ExamAttempt")

    rows = ExamAttempt.objects.filter(status="in_progress", start_time__isnull=False)
    for attempt in rows.iterator():
        attempt.deadline_at = attempt.start_time + timedelta(seconds=attempt.remaining_time or 0)
        attempt.save(update_fields=["deadline_at"])


class Migration(migrations.Migration):

    dependencies = [
        ("attempts", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="examattempt",
            name="elapsed_carry_ms",
            field=models.PositiveIntegerField(default=0, help_text="초 단위로 차감되지 않은 사용 시간(ms)"),
        ),
        migrations.AddField(
            model_name="examattempt",
            name="deadline_at",
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.RemoveIndex(
            model_name="examattempt",
            name="idx_attempt_status_start",
        ),
        migrations.AddIndex(
            model_name="examattempt",
            index=models.Index(fields=["status", "deadline_at"], name="idx_attempt_status_deadline"),
        ),
        migrations.RunPython(backfill_deadline_at, migrations.RunPython.noop),
    ]
