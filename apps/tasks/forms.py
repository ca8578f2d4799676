#apps/tasks/forms.py
from django import forms
from apps.tasks.domain.entities import TaskStatus


class TaskUpdateForm(forms.Form):
    # Wszystkie pola opcjonalne: zmieniamy tylko to, co przyszło w żądaniu
    title = forms.CharField(max_length=200, required=False)
    description = forms.CharField(required=False, strip=False)
    status = forms.ChoiceField(
        choices=[(s.value, s.value) for s in TaskStatus],
        required=False,
        error_messages={'invalid_choice': "Status must be one of: Pending, InProgress, Completed"},
    )

    def present_fields(self) -> dict:
        """Pola obecne w żądaniu (po walidacji), reszta = None. null w JSON = brak pola."""
        return {
            name: self.cleaned_data.get(name) if self.data.get(name) is not None else None
            for name in ('title', 'description', 'status')
        }
