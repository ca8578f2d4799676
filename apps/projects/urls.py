from django.urls import path
from . import views

urlpatterns = [
    path('projects', views.project_list_view, name='project_list'),
    path('projects/<str:pk>', views.project_detail_view, name='project_detail'),
    path('projects/<str:pk>/tasks', views.project_tasks_view, name='project_tasks'),
    path('projects/<str:pk>/reconcile', views.project_reconcile_view, name='project_reconcile'),
]
