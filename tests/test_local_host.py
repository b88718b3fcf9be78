"""Tests for the SQLite-backed local host and the editors running against it."""

import pytest

from timeline_editors.controllers import ItemEditorController, RelationshipEditorController, SubmitOutcome
from timeline_editors.host.local_host import validate_relationship_data
from timeline_editors.models.item import ItemFormState
from timeline_editors.models.relationship import RelationshipFormState


def relationship_payload(seed, **overrides):
    data = {
        'character_1_id': seed['alice'],
        'character_2_id': seed['bob'],
        'relationship_type': 'friend',
        'custom_relationship_type': None,
        'relationship_degree': None,
        'relationship_modifier': None,
        'relationship_strength': 50,
        'is_bidirectional': True,
        'notes': None,
        'timeline_id': seed['timeline'],
    }
    data.update(overrides)
    return data


@pytest.mark.parametrize("overrides", [
    {'relationship_type': 'dragon'},
    {'relationship_type': 'custom'},
    {'relationship_type': 'custom', 'custom_relationship_type': 'x'},
    {'relationship_type': 'friend', 'custom_relationship_type': 'Pals'},
    {'relationship_strength': 101},
])
def test_validate_relationship_data_rejects(overrides):
    data = {'relationship_type': 'friend', 'relationship_strength': 50}
    data.update(overrides)
    with pytest.raises(ValueError):
        validate_relationship_data(data)


def test_editor_data_requires_staged_request(local_host):
    assert local_host.bridge.invoke('get-relationship-editor-data') is None


def test_editor_data_for_new_relationship(seeded_host):
    seed = seeded_host.seed
    seeded_host.open_relationship_editor(seed['alice'], seed['bob'], seed['timeline'])
    data = seeded_host.bridge.invoke('get-relationship-editor-data')
    assert data['character1']['name'] == 'Alice'
    assert data['character1']['color'] == '#aa3366'
    assert data['character2']['name'] == 'Bob'
    assert data['isEdit'] is False
    assert data['timelineId'] == seed['timeline']


def test_create_and_list_relationships(seeded_host):
    seed = seeded_host.seed
    bridge = seeded_host.bridge
    weak = bridge.invoke('create-character-relationship', relationship_payload(seed, relationship_strength=10))
    strong = bridge.invoke('create-character-relationship', relationship_payload(
        seed, character_1_id=seed['bob'], character_2_id=seed['alice'],
        relationship_type='rival', relationship_strength=90))
    assert weak['success'] and strong['success']

    result = bridge.invoke('get-character-relationships-between', {
        'character1Id': seed['alice'], 'character2Id': seed['bob'], 'timelineId': seed['timeline'],
    })
    assert [rel['relationship_type'] for rel in result['relationships']] == ['rival', 'friend']
    assert result['relationships'][0]['character_1_name'] == 'Bob'


def test_create_rejects_unknown_character(seeded_host):
    result = seeded_host.bridge.invoke(
        'create-character-relationship', relationship_payload(seeded_host.seed, character_2_id=999))
    assert result['success'] is False
    assert 'Unknown character' in result['error']


def test_update_missing_relationship(seeded_host):
    result = seeded_host.bridge.invoke('update-character-relationship', {
        'id': 12345, 'relationship': relationship_payload(seeded_host.seed),
    })
    assert result == {'success': False, 'error': 'Relationship 12345 not found'}


def test_relationship_editor_end_to_end(seeded_host):
    seed = seeded_host.seed
    seeded_host.open_relationship_editor(seed['alice'], seed['bob'], seed['timeline'])
    controller = RelationshipEditorController(seeded_host.bridge)
    controller.initialize()

    form = controller.on_type_changed(controller.initial_form(), 'sibling')
    result = controller.submit(form, lambda question: False)
    assert result.outcome is SubmitOutcome.CLOSED
    assert seeded_host.refresh_count == 1

    # A second editor sees the first relationship as a duplicate
    second = RelationshipEditorController(seeded_host.bridge)
    second.initialize()
    questions = []
    result = second.submit(RelationshipFormState(relationship_type='sibling'),
                           lambda question: questions.append(question) or False)
    assert result.outcome is SubmitOutcome.DECLINED
    assert len(questions) == 1


def test_relationship_edit_end_to_end(seeded_host):
    seed = seeded_host.seed
    created = seeded_host.bridge.invoke('create-character-relationship', relationship_payload(seed))
    seeded_host.open_relationship_editor(seed['alice'], seed['bob'], seed['timeline'], created['id'])

    controller = RelationshipEditorController(seeded_host.bridge)
    session = controller.initialize()
    assert session.is_edit
    form = controller.initial_form()
    assert form.relationship_type == 'friend'
    assert form.is_bidirectional is True

    form.relationship_strength = 0
    assert controller.submit(form, lambda question: False).outcome is SubmitOutcome.CLOSED

    result = seeded_host.bridge.invoke('get-character-relationships-between', {
        'character1Id': seed['alice'], 'character2Id': seed['bob'], 'timelineId': seed['timeline'],
    })
    assert result['relationships'][0]['relationship_strength'] == 0


def test_character_changes_reach_open_editor(seeded_host):
    seed = seeded_host.seed
    seeded_host.open_relationship_editor(seed['alice'], seed['bob'], seed['timeline'])
    controller = RelationshipEditorController(seeded_host.bridge)
    controller.initialize()

    seeded_host.update_character(seed['alice'], name='Alicia')
    seeded_host.create_character('Carol', seed['timeline'])
    assert seeded_host.refresh_count == 2

    controller.close()
    seeded_host.create_character('Dave', seed['timeline'])
    assert seeded_host.refresh_count == 2


def test_item_editor_end_to_end(seeded_host, item_view):
    seed = seeded_host.seed
    seeded_host.create_story('The Beginning', seed['timeline'])

    controller = ItemEditorController(seeded_host.bridge)
    controller.bind_view(item_view)
    controller.set_item(None)
    controller.set_position(1204, 2)

    controller.handle_story_input('the beginning')
    assert item_view.suggestions == ['The Beginning']
    assert controller.form.story_id != ''

    form = ItemFormState(title='Coronation', year=1204, subtick=2, story='the beginning',
                         story_id=controller.form.story_id, tags=['royal'])
    assert controller.save(form) is True

    item = seeded_host.bridge.invoke('get-item', 1)
    assert item['title'] == 'Coronation'
    assert item['tags'] == ['royal']
    assert item['subtick'] == 2
    assert item['timeline_id'] == seed['timeline']

    editor = ItemEditorController(seeded_host.bridge)
    editor.bind_view(item_view)
    assert editor.load_item(item['id']) is True
    assert item_view.form.title == 'Coronation'
    form = ItemFormState.from_item(item)
    form.title = 'Coronation of the King'
    editor.save(form)
    assert seeded_host.bridge.invoke('get-item', item['id'])['title'] == 'Coronation of the King'


def test_item_without_title_is_rejected_by_host(seeded_host):
    result = seeded_host.bridge.invoke('add-timeline-item', {'title': '  '})
    assert result['success'] is False
