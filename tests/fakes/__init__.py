"""Test doubles for the Timeline Editors tests."""

from tests.fakes.fake_host import FakeBridge, RecordingItemView

__all__ = ['FakeBridge', 'RecordingItemView']
