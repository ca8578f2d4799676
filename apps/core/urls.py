from django.urls import path
from . import views

urlpatterns = [
    path('auth/register', views.register_view, name='register'),
    path('auth/login', views.login_view, name='login'),
    path('users/me', views.me_view, name='me'),
    path('users/profile', views.profile_view, name='profile'),
    path('users/change-password', views.change_password_view, name='change_password'),
]
