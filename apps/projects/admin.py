from django.contrib import admin
from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('title', 'user', 'task_count', 'completed_tasks', 'created_at', 'deleted_at')
    list_filter = ('deleted_at',)
    search_fields = ('title',)
    # Liczniki tylko do odczytu (naprawa: manage.py reconcile_counters --fix)
    readonly_fields = ('task_count', 'completed_tasks', 'deleted_at')
