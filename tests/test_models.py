"""
Tests for models, the entity store and the event bus.
"""

import pytest
import os
import sys
import json
from datetime import datetime, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.events import EventBus
from core.store import StateManager
from models.check_result import CheckReport
from models.entity import RepoRef, TrackedEntity, UpstreamConfig


class TestRepoRef:
    """Tests for owner/repo parsing."""

    def test_parse(self):
        ref = RepoRef.parse('acme/widget')
        assert ref.owner == 'acme'
        assert ref.repo == 'widget'
        assert str(ref) == 'acme/widget'

    @pytest.mark.parametrize('value', ['justaname', '', None, 'a/b/c', '/b', 'a/', 1234, True])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError, match='owner/repo'):
            RepoRef.parse(value)


class TestTrackedEntity:
    """Tests for entity configuration parsing."""

    def test_from_dict(self, sample_config):
        entity = TrackedEntity.from_dict('widget', sample_config['widget'])

        assert entity.name == 'Widget'
        assert entity.is_tracked
        assert entity.upstream.repo == 'acme/widget'
        assert entity.upstream.current_version == 'v2.0'
        assert entity.upstream.prerelease is True
        assert entity.upstream.latest_version is None

    def test_without_upstream(self, sample_config):
        entity = TrackedEntity.from_dict('plain', sample_config['plain'])

        assert entity.upstream is None
        assert entity.is_tracked is False

    def test_upstream_round_trip_keeps_checked_at(self):
        checked_at = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)
        config = UpstreamConfig(repo='acme/widget', latest_version='v1', checked_at=checked_at)

        restored = UpstreamConfig.from_dict(config.to_dict())

        assert restored.checked_at == checked_at
        assert restored.latest_version == 'v1'


class TestCheckReport:
    """Tests for CheckReport model."""

    def test_status(self):
        entity = TrackedEntity('widget', upstream=UpstreamConfig(repo='acme/widget'))

        assert CheckReport(entity, changed=True).status == 'updated'
        assert CheckReport(entity).status == 'unchanged'
        assert CheckReport(entity, error='boom').status == 'error'
        assert CheckReport(entity, error='boom').is_success is False

    def test_is_behind(self):
        upstream = UpstreamConfig(repo='acme/widget', current_version='v1', latest_version='v2')
        entity = TrackedEntity('widget', upstream=upstream)

        assert CheckReport(entity).is_behind is True

        upstream.latest_version = 'v1'
        assert CheckReport(entity).is_behind is False

        upstream.current_version = None
        assert CheckReport(entity).is_behind is False

    def test_to_dict(self):
        upstream = UpstreamConfig(repo='acme/widget', latest_version='v2', latest_url='https://u')
        report = CheckReport(TrackedEntity('widget', 'Widget', upstream), changed=True, previous_version='v1')

        data = report.to_dict()

        assert data['repo'] == 'acme/widget'
        assert data['previous_version'] == 'v1'
        assert data['latest_version'] == 'v2'
        assert data['changed'] is True
        assert data['error'] is None

    def test_str_shows_status_and_versions(self):
        upstream = UpstreamConfig(repo='acme/widget', latest_version='v2')
        entity = TrackedEntity('widget', 'Widget', upstream)

        updated = str(CheckReport(entity, changed=True, previous_version='v1'))
        failed = str(CheckReport(entity, error='boom'))

        assert updated.startswith('[UPDATED] Widget (acme/widget)')
        assert 'Latest:   v2' in updated
        assert 'Previous: v1' in updated
        assert failed.startswith('[ERROR: boom] Widget')


class TestStateManager:
    """Tests for the JSON backed entity store."""

    def test_persists_and_restores_upstream_state(self, temp_state_file):
        entity = TrackedEntity('widget', upstream=UpstreamConfig(repo='acme/widget'))
        manager = StateManager([entity], temp_state_file)

        entity.upstream.latest_version = 'v1.2.3'
        entity.upstream.latest_url = 'https://github.com/acme/widget/releases/tag/v1.2.3'
        entity.upstream.checked_at = datetime(2025, 1, 15, tzinfo=timezone.utc)
        manager.update_entity(entity)

        fresh = TrackedEntity('widget', upstream=UpstreamConfig(repo='acme/widget', prerelease=True))
        reloaded = StateManager([fresh], temp_state_file)

        restored = reloaded.get_entity('widget')
        assert restored.upstream.latest_version == 'v1.2.3'
        assert restored.upstream.checked_at.year == 2025
        # configuration wins over persisted state
        assert restored.upstream.prerelease is True

    def test_tracked_entities_only(self):
        manager = StateManager([
            TrackedEntity('widget', upstream=UpstreamConfig(repo='acme/widget')),
            TrackedEntity('plain'),
        ])

        assert [e.id for e in manager.get_tracked_entities()] == ['widget']
        assert len(manager.get_entities()) == 2

    def test_corrupt_state_file_is_ignored(self, temp_state_file):
        with open(temp_state_file, 'w') as f:
            f.write('{not json')

        manager = StateManager(
            [TrackedEntity('widget', upstream=UpstreamConfig(repo='acme/widget'))],
            temp_state_file
        )

        assert manager.get_entity('widget').upstream.latest_version is None

    @pytest.mark.parametrize('saved', [
        {'widget': {'latest_version': 'v1', 'checked_at': 'not-a-date'}},
        {'widget': 'oops'},
        ['not', 'an', 'object'],
    ])
    def test_malformed_saved_state_is_ignored(self, saved, temp_state_file):
        with open(temp_state_file, 'w') as f:
            json.dump(saved, f)

        manager = StateManager(
            [
                TrackedEntity('widget', upstream=UpstreamConfig(repo='acme/widget')),
                TrackedEntity('gadget', upstream=UpstreamConfig(repo='acme/gadget')),
            ],
            temp_state_file
        )

        widget = manager.get_entity('widget')
        assert widget.upstream.latest_version is None
        assert widget.upstream.checked_at is None
        assert len(manager.get_tracked_entities()) == 2

    def test_memory_only(self):
        manager = StateManager([TrackedEntity('widget', upstream=UpstreamConfig(repo='acme/widget'))])
        manager.update_entity(TrackedEntity('other', upstream=UpstreamConfig(repo='acme/other')))

        assert manager.get_entity('other') is not None

    def test_state_file_holds_only_checker_fields(self, temp_state_file):
        entity = TrackedEntity('widget', upstream=UpstreamConfig(repo='acme/widget', latest_version='v1'))
        StateManager([entity], temp_state_file).update_entity(entity)

        with open(temp_state_file, encoding='utf-8') as f:
            state = json.load(f)

        assert set(state['widget']) == {'latest_version', 'latest_url', 'checked_at', 'error'}


class TestEventBus:
    """Tests for the in-process event bus."""

    def test_delivers_in_registration_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe('topic', lambda p: calls.append(('first', p)))
        bus.subscribe('topic', lambda p: calls.append(('second', p)))
        bus.subscribe('other', lambda p: calls.append(('other', p)))

        bus.publish('topic', 42)

        assert calls == [('first', 42), ('second', 42)]

    def test_raising_handler_is_isolated(self):
        bus = EventBus()
        calls = []

        def broken(payload):
            raise ValueError('bad subscriber')

        bus.subscribe('topic', broken)
        bus.subscribe('topic', calls.append)

        bus.publish('topic', 'payload')

        assert calls == ['payload']

    def test_unsubscribe(self):
        bus = EventBus()
        calls = []
        bus.subscribe('topic', calls.append)
        bus.unsubscribe('topic', calls.append)

        bus.publish('topic', 1)

        assert calls == []


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
