"""Tests for the relationship editor controller."""

from dataclasses import replace

import pytest

from timeline_editors.controllers.relationship_editor import (
    FormPhase, RelationshipEditorController, SubmitOutcome, arrow_for,
    collect_form_data, form_from_record
)
from timeline_editors.errors import InitializationFailure, TransportFailure
from timeline_editors.models.relationship import RelationshipFormState, RelationshipRecord
from tests.conftest import editor_data


def never_confirm(question):
    raise AssertionError(f"Unexpected duplicate question: {question}")


@pytest.fixture
def controller(fake_bridge):
    controller = RelationshipEditorController(fake_bridge)
    controller.initialize()
    return controller


def stored_relationship(**overrides):
    data = {
        'id': 42,
        'character_1_id': 1,
        'character_2_id': 2,
        'relationship_type': 'mentor',
        'custom_relationship_type': None,
        'relationship_degree': 'second',
        'relationship_modifier': 'former',
        'relationship_strength': 80,
        'is_bidirectional': True,
        'notes': 'Met at the academy',
        'timeline_id': 7,
    }
    data.update(overrides)
    return data


def test_initialize_builds_session(controller, fake_bridge):
    session = controller.session
    assert session.character1_name == 'Alice'
    assert session.character2_name == 'Bob'
    assert session.accent_color == '#aa3366'
    assert session.save_button_text == 'Save Relationship'
    assert fake_bridge.calls_to('get-character-relationships-between') == [
        ({'character1Id': 1, 'character2Id': 2, 'timelineId': 7},)
    ]
    assert set(fake_bridge.listeners) == {'character-created', 'character-updated'}


def test_initialize_fails_without_data(fake_bridge):
    fake_bridge.replies['get-relationship-editor-data'] = None
    with pytest.raises(InitializationFailure):
        RelationshipEditorController(fake_bridge).initialize()


def test_failed_relationship_lookup_means_no_relationships(fake_bridge):
    fake_bridge.replies['get-character-relationships-between'] = TransportFailure("db down")
    controller = RelationshipEditorController(fake_bridge)
    controller.initialize()
    assert controller.session.existing_relationships == []


def test_missing_names_and_color_fall_back(fake_bridge):
    data = editor_data()
    data['character1'] = {'id': 1}
    data['character2'] = {'id': 2}
    fake_bridge.replies['get-relationship-editor-data'] = data
    controller = RelationshipEditorController(fake_bridge)
    session = controller.initialize()
    assert session.character1_name == 'Character 1'
    assert session.character2_name == 'Character 2'
    assert session.accent_color == '#2d5016'


def test_type_change_applies_directionality(controller):
    form = controller.on_type_changed(RelationshipFormState(), 'sibling')
    assert form.is_bidirectional is True
    form = controller.on_type_changed(form, 'parent')
    assert form.is_bidirectional is False


def test_type_change_keeps_flag_for_custom_and_clears_text_otherwise(controller):
    form = RelationshipFormState(is_bidirectional=True, custom_relationship_type='Frenemies')
    form = controller.on_type_changed(form, 'custom')
    assert form.is_bidirectional is True
    assert form.custom_relationship_type == 'Frenemies'
    form = controller.on_type_changed(form, 'friend')
    assert form.custom_relationship_type == ''


def test_new_sibling_is_saved_bidirectional(controller, fake_bridge):
    form = controller.on_type_changed(controller.initial_form(), 'sibling')
    result = controller.submit(form, never_confirm)

    assert result.outcome is SubmitOutcome.CLOSED
    (payload,), = fake_bridge.calls_to('create-character-relationship')
    assert payload['relationship_type'] == 'sibling'
    assert payload['is_bidirectional'] is True
    assert payload['relationship_strength'] == 50
    assert payload['character_1_id'] == 1
    assert payload['character_2_id'] == 2
    assert payload['timeline_id'] == 7
    assert 'id' not in payload
    assert fake_bridge.calls_to('refresh-character-manager') == [()]
    assert controller.phase is FormPhase.CLOSED


def test_missing_type_is_invalid(controller, fake_bridge):
    result = controller.submit(RelationshipFormState(), never_confirm)
    assert result.outcome is SubmitOutcome.INVALID
    assert result.message == 'Please select a relationship type.'
    assert result.field == 'relationship_type'
    assert fake_bridge.calls_to('create-character-relationship') == []
    assert controller.phase is FormPhase.IDLE


def test_custom_type_needs_text(controller):
    result = controller.submit(RelationshipFormState(relationship_type='other'), never_confirm)
    assert result.outcome is SubmitOutcome.INVALID
    assert result.message == 'Please enter a custom relationship type.'
    assert result.field == 'custom_relationship_type'


def test_custom_type_text_too_short(controller):
    form = RelationshipFormState(relationship_type='custom', custom_relationship_type='x')
    result = controller.submit(form, never_confirm)
    assert result.outcome is SubmitOutcome.INVALID
    assert result.field == 'custom_relationship_type'


def test_duplicate_rival_asks_and_can_be_declined(fake_bridge):
    fake_bridge.replies['get-character-relationships-between'] = {
        'success': True,
        'relationships': [stored_relationship(relationship_type='rival')],
    }
    controller = RelationshipEditorController(fake_bridge)
    controller.initialize()
    questions = []

    def decline(question):
        questions.append(question)
        return False

    result = controller.submit(RelationshipFormState(relationship_type='rival'), decline)

    assert result.outcome is SubmitOutcome.DECLINED
    assert len(questions) == 1
    assert '"rival"' in questions[0]
    assert fake_bridge.calls_to('create-character-relationship') == []
    assert controller.phase is FormPhase.IDLE


def test_duplicate_accepted_is_saved(fake_bridge):
    fake_bridge.replies['get-character-relationships-between'] = {
        'success': True,
        'relationships': [stored_relationship(relationship_type='rival')],
    }
    controller = RelationshipEditorController(fake_bridge)
    controller.initialize()

    result = controller.submit(RelationshipFormState(relationship_type='rival'), lambda question: True)
    assert result.outcome is SubmitOutcome.CLOSED
    assert len(fake_bridge.calls_to('create-character-relationship')) == 1


def test_reverse_relationship_is_not_a_duplicate(fake_bridge):
    fake_bridge.replies['get-character-relationships-between'] = {
        'success': True,
        'relationships': [stored_relationship(character_1_id=2, character_2_id=1, relationship_type='sibling')],
    }
    controller = RelationshipEditorController(fake_bridge)
    controller.initialize()

    result = controller.submit(RelationshipFormState(relationship_type='sibling'), never_confirm)
    assert result.outcome is SubmitOutcome.CLOSED


def test_zero_strength_is_kept(controller, fake_bridge):
    form = RelationshipFormState(relationship_type='enemy', relationship_strength=0)
    controller.submit(form, never_confirm)
    (payload,), = fake_bridge.calls_to('create-character-relationship')
    assert payload['relationship_strength'] == 0


def test_absent_strength_defaults_to_fifty(controller, fake_bridge):
    form = RelationshipFormState(relationship_type='enemy', relationship_strength=None)
    controller.submit(form, never_confirm)
    (payload,), = fake_bridge.calls_to('create-character-relationship')
    assert payload['relationship_strength'] == 50


def test_host_failure_reports_error_and_stays_open(controller, fake_bridge):
    fake_bridge.replies['create-character-relationship'] = {'success': False, 'error': 'disk full'}
    result = controller.submit(RelationshipFormState(relationship_type='friend'), never_confirm)

    assert result.outcome is SubmitOutcome.FAILED
    assert result.message == 'Error saving relationship: disk full'
    assert fake_bridge.calls_to('refresh-character-manager') == []
    assert controller.phase is FormPhase.IDLE


def test_host_failure_without_message_uses_default(controller, fake_bridge):
    fake_bridge.replies['create-character-relationship'] = {'success': False}
    result = controller.submit(RelationshipFormState(relationship_type='friend'), never_confirm)
    assert result.message == 'Error saving relationship: Failed to save relationship'


def test_submit_while_busy_is_ignored(controller, fake_bridge):
    controller.phase = FormPhase.SUBMITTING
    result = controller.submit(RelationshipFormState(relationship_type='friend'), never_confirm)
    assert result.outcome is SubmitOutcome.BUSY
    assert fake_bridge.calls_to('create-character-relationship') == []


def test_closed_editor_does_not_submit_again(controller, fake_bridge):
    controller.submit(RelationshipFormState(relationship_type='friend'), never_confirm)
    result = controller.submit(RelationshipFormState(relationship_type='friend'), never_confirm)
    assert result.outcome is SubmitOutcome.BUSY
    assert len(fake_bridge.calls_to('create-character-relationship')) == 1


def test_edit_sends_update_with_id_and_skips_duplicate_check(fake_bridge):
    stored = stored_relationship()
    fake_bridge.replies['get-relationship-editor-data'] = editor_data(stored)
    fake_bridge.replies['get-character-relationships-between'] = {'success': True, 'relationships': [stored]}
    controller = RelationshipEditorController(fake_bridge)
    session = controller.initialize()
    assert session.is_edit
    assert session.save_button_text == 'Update Relationship'

    form = controller.initial_form()
    result = controller.submit(form, never_confirm)

    assert result.outcome is SubmitOutcome.CLOSED
    (params,), = fake_bridge.calls_to('update-character-relationship')
    assert params['id'] == 42
    assert params['relationship']['relationship_type'] == 'mentor'
    assert params['relationship']['is_bidirectional'] is True
    assert fake_bridge.calls_to('create-character-relationship') == []


@pytest.mark.parametrize("overrides", [
    {},
    {'relationship_type': 'custom', 'custom_relationship_type': 'Frenemies', 'is_bidirectional': False},
    {'relationship_type': 'other', 'custom_relationship_type': 'Pen pals', 'relationship_degree': None,
     'relationship_modifier': None, 'notes': None, 'relationship_strength': 0},
])
def test_edit_form_round_trips_the_record(controller, overrides):
    record = RelationshipRecord.from_payload(stored_relationship(**overrides))

    again = collect_form_data(controller.session, form_from_record(record))

    assert again == replace(record, id=None)


def test_collect_form_data_trims_and_drops_custom_text_for_known_types(controller):
    form = RelationshipFormState(relationship_type='friend', custom_relationship_type='  stray ', notes='  ')
    record = collect_form_data(controller.session, form)
    assert record.custom_relationship_type is None
    assert record.notes is None

    form = RelationshipFormState(relationship_type='custom', custom_relationship_type='  Frenemies ')
    assert collect_form_data(controller.session, form).custom_relationship_type == 'Frenemies'


def test_character_changes_refresh_the_character_manager(controller, fake_bridge):
    fake_bridge.emit('character-created')
    fake_bridge.emit('character-updated', {'id': 1})
    assert len(fake_bridge.calls_to('refresh-character-manager')) == 2


def test_close_drops_subscriptions(controller, fake_bridge):
    controller.close()
    assert fake_bridge.listeners == {'character-created': [], 'character-updated': []}
    fake_bridge.emit('character-created')
    assert fake_bridge.calls_to('refresh-character-manager') == []


def test_arrow():
    assert arrow_for(True) == '↔'
    assert arrow_for(False) == '→'
