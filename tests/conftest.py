"""Shared fixtures for the Timeline Editors tests."""

import pytest

from timeline_editors.host import Database, LocalHost
from tests.fakes import FakeBridge, RecordingItemView

ALICE = {'id': 1, 'name': 'Alice', 'color': '#aa3366'}
BOB = {'id': 2, 'name': 'Bob', 'color': '#3366aa'}


def editor_data(relationship=None):
    return {
        'character1': dict(ALICE),
        'character2': dict(BOB),
        'isEdit': relationship is not None,
        'relationship': relationship,
        'timelineId': 7,
    }


@pytest.fixture
def fake_bridge():
    return FakeBridge({
        'get-relationship-editor-data': editor_data(),
        'get-character-relationships-between': {'success': True, 'relationships': []},
        'create-character-relationship': {'success': True, 'id': 100},
        'update-character-relationship': {'success': True},
        'refresh-character-manager': {'success': True},
    })


@pytest.fixture
def item_view():
    return RecordingItemView()


@pytest.fixture
def local_host():
    database = Database(':memory:')
    database.create_tables()
    return LocalHost(database)


@pytest.fixture
def seeded_host(local_host):
    timeline_id = local_host.create_timeline("Saga")
    alice_id = local_host.create_character("Alice", timeline_id, color="#aa3366")
    bob_id = local_host.create_character("Bob", timeline_id)
    local_host.seed = {'timeline': timeline_id, 'alice': alice_id, 'bob': bob_id}
    return local_host
