# apps/projects/forms.py
from django import forms


class ProjectForm(forms.Form):
    title = forms.CharField(max_length=200, error_messages={'required': "Title is required"})
    description = forms.CharField(strip=False, error_messages={'required': "Description is required"})

    def clean_description(self):
        description = self.cleaned_data['description']
        if not description.strip():
            raise forms.ValidationError("Description is required")
        return description


class NewTaskForm(ProjectForm):
    """Zadanie tworzone w projekcie: te same wymagane pola co projekt."""
