# apps/domains/attempts/migrations/0001_initial.py
import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ExamAttempt",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                ("exam_id", models.CharField(db_index=True, max_length=64)),
                ("attempt_number", models.PositiveIntegerField(default=1)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("in_progress", "In progress"),
                            ("paused", "Paused"),
                            ("completed", "Completed"),
                            ("expired", "Expired"),
                            ("terminated", "Terminated"),
                        ],
                        db_index=True,
                        default="in_progress",
                        max_length=20,
                    ),
                ),
                ("start_time", models.DateTimeField(blank=True, null=True)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                ("remaining_time", models.PositiveIntegerField(default=0, help_text="남은 시간(초)")),
                ("score", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                ("correct_answers", models.PositiveIntegerField(default=0)),
                ("wrong_answers", models.PositiveIntegerField(default=0)),
                ("last_question_id", models.CharField(blank=True, max_length=64, null=True)),
                ("cheating_detected", models.BooleanField(default=False)),
                ("ip_address", models.CharField(blank=True, max_length=45, null=True)),
                ("device_info", models.CharField(blank=True, max_length=255, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
            ],
            options={
                "db_table": "attempts_exam_attempt",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="AttemptAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("question_id", models.CharField(max_length=64)),
                ("submitted_value", models.TextField(blank=True, default="")),
                ("is_correct", models.BooleanField(default=False)),
                ("score", models.DecimalField(decimal_places=2, default=0, max_digits=7)),
                ("max_score", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                ("time_spent", models.PositiveIntegerField(blank=True, help_text="초", null=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("sequence", models.PositiveIntegerField(default=0)),
                (
                    "attempt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answers",
                        to="attempts.examattempt",
                    ),
                ),
            ],
            options={
                "db_table": "attempts_attempt_answer",
                "ordering": ["sequence", "id"],
                "unique_together": {("attempt", "question_id")},
            },
        ),
        migrations.AddConstraint(
            model_name="examattempt",
            constraint=models.UniqueConstraint(
                fields=("user_id", "exam_id", "attempt_number"),
                name="uniq_attempt_user_exam_number",
            ),
        ),
        migrations.AddIndex(
            model_name="examattempt",
            index=models.Index(fields=["user_id", "exam_id"], name="idx_attempt_user_exam"),
        ),
        migrations.AddIndex(
            model_name="examattempt",
            index=models.Index(fields=["status", "start_time"], name="idx_attempt_status_start"),
        ),
    ]
