from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from apps.projects.adapters.orm_repositories import DjangoProjectRepository
from apps.projects.application.services import reconcile_project
from apps.tasks.adapters.orm_repositories import DjangoTaskRepository


class Command(BaseCommand):
    help = 'Porównuje liczniki projektów (taskCount/completedTasks) z faktycznymi zadaniami'

    def add_arguments(self, parser):
        parser.add_argument('--fix', action='store_true', help='Zapisz przeliczone liczniki')

    def handle(self, *args, **options):
        drifted = async_to_sync(self._reconcile)(options['fix'])

        if not drifted:
            self.stdout.write(self.style.SUCCESS('Wszystkie liczniki są spójne.'))
            return

        verb = 'Naprawiono' if options['fix'] else 'Wykryto rozjazd w'
        self.stdout.write(self.style.WARNING(f'{verb} {len(drifted)} projektach.'))
        for p in drifted:
            self.stdout.write(f"- {p.title} (#{p.id}): {p.completed_tasks}/{p.task_count}")

    async def _reconcile(self, fix):
        projects = DjangoProjectRepository()
        tasks = DjangoTaskRepository()

        drifted = []
        for project in await projects.list_all():
            result, was_drifted = await reconcile_project(projects, tasks, project, fix=fix)
            if was_drifted:
                drifted.append(result if fix else project)
        return drifted
