# apps/board/forms.py

"""
Request parsing for the JSON API

Forms only check shape (required fields, types, formats). Business rules
such as uniqueness or future deadlines stay in the hierarchy service.
"""

from django import forms

from apps.core.models import Methodology


def _required(field):
    return {'required': f'{field} is required'}


class PatchForm(forms.Form):
    """
    Partial update: only the keys present in the request body are applied

    `changes()` returns the cleaned values of those keys, everything else
    is left out so the service sees it as "not supplied".
    """

    def clean(self):
        cleaned_data = super().clean()
        if not any(name in self.data for name in self.fields):
            raise forms.ValidationError('at least one field is required')
        return cleaned_data

    def changes(self):
        return {
            name: self.cleaned_data.get(name)
            for name in self.fields
            if name in self.data
        }


# === BOARDS ===

class BoardCreateForm(forms.Form):
    title = forms.CharField(max_length=200, error_messages=_required('title'))
    description = forms.CharField(error_messages=_required('description'))
    category = forms.CharField(max_length=100, error_messages=_required('category'))
    methodology = forms.ChoiceField(
        choices=Methodology.choices,
        error_messages={
            'required': 'methodology is required',
            'invalid_choice': 'methodology must be kanban or simple',
        }
    )


class BoardUpdateForm(PatchForm):
    title = forms.CharField(max_length=200, required=False, strip=False)
    description = forms.CharField(required=False, strip=False)
    progress = forms.IntegerField(min_value=0, max_value=100, required=False)
    favorite = forms.NullBooleanField(required=False)


# === COLUMNS ===

class ColumnCreateForm(forms.Form):
    name = forms.CharField(max_length=100, error_messages=_required('name'))


class ColumnUpdateForm(PatchForm):
    name = forms.CharField(max_length=100, required=False, strip=False)


# === TASKS ===

class TaskCreateForm(forms.Form):
    title = forms.CharField(max_length=200, error_messages=_required('title'))
    description = forms.CharField(error_messages=_required('description'))
    deadline = forms.DateTimeField(
        error_messages={
            'required': 'deadline is required',
            'invalid': 'invalid deadline format',
        }
    )
    in_calendar = forms.BooleanField(required=False)


class TaskUpdateForm(PatchForm):
    title = forms.CharField(max_length=200, required=False, strip=False)
    description = forms.CharField(required=False, strip=False)
    deadline = forms.DateTimeField(
        required=False,
        error_messages={'invalid': 'invalid deadline format'}
    )


class TaskMoveForm(forms.Form):
    new_column_id = forms.UUIDField(
        error_messages={
            'required': 'new_column_id is required',
            'invalid': 'invalid column ID',
        }
    )
