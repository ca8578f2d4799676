# apps/tasks/models.py
from django.db import models
from django.utils import timezone
from apps.tasks.domain.entities import TaskStatus


class Task(models.Model):
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    title = models.CharField(max_length=200)
    description = models.TextField()

    # Używamy TextChoices dla wygody w Adminie, ale mapujemy to na Enum domenowy
    class StatusChoices(models.TextChoices):
        PENDING = TaskStatus.PENDING.value, 'Pending'
        IN_PROGRESS = TaskStatus.IN_PROGRESS.value, 'In progress'
        COMPLETED = TaskStatus.COMPLETED.value, 'Completed'

    status = models.CharField(
        max_length=20,
        choices=StatusChoices.choices,
        default=StatusChoices.PENDING
    )

    completed_at = models.DateTimeField(null=True, blank=True)

    # default zamiast auto_now_add, żeby kompensacja mogła odtworzyć zadanie 1:1
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['project', 'status'], name='task_project_status_idx'),
        ]

    def __str__(self):
        return self.title
