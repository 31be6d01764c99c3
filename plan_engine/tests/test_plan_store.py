#!/usr/bin/env python3
"""
Tests for plan persistence adapters.

Run with: pytest plan_engine/tests/test_plan_store.py -v
"""

import pytest

from plan_engine.calendar_events import project_events
from plan_engine.plan_store import (
    JsonFilePlanStore,
    MemoryPlanStore,
    PlanStoreError,
    load_events,
    load_plan,
    save_events,
    save_plan,
)


@pytest.fixture(params=['memory', 'json'])
def store(request, tmp_path):
    if request.param == 'memory':
        return MemoryPlanStore()
    return JsonFilePlanStore(tmp_path / 'store')


class TestPlanStore:

    def test_missing_key_is_none(self, store):
        assert store.load('training_plan') is None

    def test_save_and_load(self, store):
        store.save('notes', {'weeks': [1, 2, 3]})
        assert store.load('notes') == {'weeks': [1, 2, 3]}
        assert store.keys() == ['notes']

    def test_last_write_wins(self, store):
        store.save('notes', {'v': 1})
        store.save('notes', {'v': 2})
        assert store.load('notes') == {'v': 2}

    def test_delete(self, store):
        store.save('notes', {})
        assert store.delete('notes') is True
        assert store.delete('notes') is False
        assert store.load('notes') is None

    @pytest.mark.parametrize('key', ['', '../etc/passwd', 'UPPER', '-lead', 'a/b', 'x' * 80, None])
    def test_invalid_keys(self, store, key):
        with pytest.raises(PlanStoreError):
            store.save(key, {})

    def test_plan_round_trip(self, store, performance_plan):
        save_plan(store, performance_plan)
        assert load_plan(store) == performance_plan

    def test_events_round_trip(self, store, performance_plan):
        events = project_events(performance_plan)
        save_events(store, events)
        assert load_events(store) == events

    def test_no_events_is_empty_list(self, store):
        assert load_events(store) == []

    def test_malformed_plan(self, store):
        store.save('training_plan', {'goal': 'general'})
        with pytest.raises(PlanStoreError):
            load_plan(store)

    def test_plan_with_non_object_day(self, store, performance_plan):
        data = performance_plan.to_dict()
        data['weeks'][0]['schedule'][0] = 'rest'
        store.save('training_plan', data)
        with pytest.raises(PlanStoreError):
            load_plan(store)

    def test_plan_with_zero_length_segment(self, store, performance_plan):
        data = performance_plan.to_dict()
        day = next(d for w in data['weeks'] for d in w['schedule'] if d['workout'])
        day['workout']['segments'][0]['duration'] = 0
        store.save('training_plan', data)
        with pytest.raises(PlanStoreError):
            load_plan(store)

    def test_malformed_events(self, store):
        store.save('calendar_events', ['not-an-event'])
        with pytest.raises(PlanStoreError):
            load_events(store)


class TestMemoryPlanStore:

    def test_payloads_are_copied(self):
        store = MemoryPlanStore()
        payload = {'weeks': [1]}
        store.save('notes', payload)
        payload['weeks'].append(2)
        loaded = store.load('notes')
        loaded['weeks'].append(3)
        assert store.load('notes') == {'weeks': [1]}


class TestJsonFilePlanStore:

    def test_writes_json_file(self, tmp_path):
        store = JsonFilePlanStore(tmp_path)
        store.save('training_plan', {'goal': 'general'})
        assert (tmp_path / 'training_plan.json').exists()
        assert not list(tmp_path.glob('.*.tmp'))

    def test_corrupt_file(self, tmp_path):
        (tmp_path / 'training_plan.json').write_text('{not json')
        with pytest.raises(PlanStoreError):
            JsonFilePlanStore(tmp_path).load('training_plan')

    def test_invalid_utf8_file(self, tmp_path):
        (tmp_path / 'training_plan.json').write_bytes(b'{"goal": "\xff\xfe"}')
        with pytest.raises(PlanStoreError):
            JsonFilePlanStore(tmp_path).load('training_plan')

    def test_unserializable_payload(self, tmp_path):
        store = JsonFilePlanStore(tmp_path)
        with pytest.raises(PlanStoreError):
            store.save('notes', {'bad': object()})
        assert not (tmp_path / 'notes.json').exists()

    def test_keys_of_missing_directory(self, tmp_path):
        assert JsonFilePlanStore(tmp_path / 'nowhere').keys() == []
