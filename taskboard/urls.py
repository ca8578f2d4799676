# taskboard/urls.py
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path('admin/', admin.site.urls),
    # Tutaj podpinamy nasze aplikacje (API JSON):
    path('api/', include('apps.core.urls')),
    path('api/', include('apps.projects.urls')),
    path('api/', include('apps.tasks.urls')),
]
