# apps/core/forms.py
from django import forms

PASSWORD_MIN_LENGTH = 6


class RegisterForm(forms.Form):
    name = forms.CharField(max_length=150, error_messages={'required': "Name is required"})
    email = forms.EmailField(error_messages={
        'required': "Please include a valid email",
        'invalid': "Please include a valid email",
    })
    password = forms.CharField(min_length=PASSWORD_MIN_LENGTH, strip=False, error_messages={
        'required': "Password must be at least 6 characters",
        'min_length': "Password must be at least 6 characters",
    })
    country = forms.CharField(max_length=100, error_messages={'required': "Country is required"})


class LoginForm(forms.Form):
    email = forms.EmailField(error_messages={
        'required': "Please include a valid email",
        'invalid': "Please include a valid email",
    })
    password = forms.CharField(strip=False, error_messages={'required': "Password is required"})


class ProfileForm(forms.Form):
    name = forms.CharField(max_length=150, error_messages={'required': "Name is required"})
    email = forms.EmailField(error_messages={
        'required': "Please include a valid email",
        'invalid': "Please include a valid email",
    })
    country = forms.CharField(max_length=100, error_messages={'required': "Country is required"})


class ChangePasswordForm(forms.Form):
    currentPassword = forms.CharField(strip=False, error_messages={
        'required': "Current password is required",
    })
    newPassword = forms.CharField(min_length=PASSWORD_MIN_LENGTH, strip=False, error_messages={
        'required': "New password must be at least 6 characters",
        'min_length': "New password must be at least 6 characters",
    })
