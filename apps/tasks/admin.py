from django.contrib import admin
from .models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'project', 'status', 'completed_at', 'created_at')
    list_filter = ('status',)
    search_fields = ('title',)
    # Status zmieniamy przez API, żeby liczniki projektu się zgadzały
    readonly_fields = ('project', 'status', 'completed_at')

    def has_add_permission(self, request):
        return False
