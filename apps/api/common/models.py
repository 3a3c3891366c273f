# PATH: apps/api/common/models.py
from django.db import models


class TimestampModel(models.Model):
    """
    생성 / 수정 시간 자동 기록 추상 모델
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class BaseModel(TimestampModel):
    """
    모든 모델이 상속하는 공통 베이스 모델.

    - 공통 타임스탬프 포함
    """
    class Meta:
        abstract = True


class AliveManager(models.Manager):
    """soft delete 되지 않은 행만."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class SoftDeleteModel(BaseModel):
    """
    물리 삭제 대신 deleted_at 기록.

    - objects: 살아있는 행만
    - all_objects: 삭제 포함 (유니크 번호 계산 등)
    """
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = AliveManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    def soft_delete(self, now=None):
        from django.utils import timezone

        self.deleted_at = now or timezone.now()
        self.save(update_fields=["deleted_at", "updated_at"])
