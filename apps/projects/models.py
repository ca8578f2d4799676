# apps/projects/models.py
from django.db import models
from django.db.models import F, Q
from django.conf import settings
from django.utils import timezone


class Project(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='projects')
    title = models.CharField(max_length=200)
    description = models.TextField()

    # Liczniki zdenormalizowane, zmieniane tylko przez F() w repozytorium
    task_count = models.PositiveIntegerField(default=0)
    completed_tasks = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(default=timezone.now)

    # Tombstone ustawiany na początku kaskadowego usuwania
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=Q(completed_tasks__lte=F('task_count')),
                name='project_completed_lte_task_count',
            ),
        ]

    def __str__(self):
        return self.title
