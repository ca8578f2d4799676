# apps/tasks/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('tasks/<str:pk>', views.task_detail_view, name='task_detail'),
]
