"""
Request form tests
"""

from apps.board.forms import BoardUpdateForm, TaskCreateForm, TaskMoveForm


class TestPatchForms:

    def test_only_present_keys_are_changes(self):
        form = BoardUpdateForm({'favorite': False})
        assert form.is_valid()
        assert form.changes() == {'favorite': False}

    def test_empty_patch_is_invalid(self):
        form = BoardUpdateForm({})
        assert not form.is_valid()
        assert form.errors['__all__'] == ['at least one field is required']

    def test_blank_title_is_passed_through(self):
        # Blank values are the service's call, not the form's
        form = BoardUpdateForm({'title': ''})
        assert form.is_valid()
        assert form.changes() == {'title': ''}


class TestTaskForms:

    def test_iso_deadline_with_offset(self):
        form = TaskCreateForm({
            'title': 't', 'description': 'd', 'deadline': '2030-01-02T03:04:05+02:00',
        })
        assert form.is_valid(), form.errors
        assert form.cleaned_data['deadline'].utcoffset() is not None
        assert form.cleaned_data['in_calendar'] is False

    def test_in_calendar_accepts_json_booleans(self):
        form = TaskCreateForm({
            'title': 't', 'description': 'd', 'deadline': '2030-01-02T03:04:05Z', 'in_calendar': True,
        })
        assert form.is_valid(), form.errors
        assert form.cleaned_data['in_calendar'] is True

    def test_move_requires_uuid(self):
        form = TaskMoveForm({'new_column_id': 'nope'})
        assert not form.is_valid()
        assert form.errors['new_column_id'] == ['invalid column ID']
