"""Tests for the memory and JSON file stores."""

import pytest

from route_analyzer.core.exceptions import StorageError
from route_analyzer.storage import JsonFileStore, MemoryStore, SHARP_TURNS


def turn(route_key, lat, lng, risk=7):
    return {'routeKey': route_key, 'location': {'lat': lat, 'lng': lng}, 'riskScore': risk}


@pytest.fixture(params=['memory', 'json'])
def any_store(request, tmp_path):
    if request.param == 'memory':
        return MemoryStore()
    return JsonFileStore(tmp_path / "store")


class TestStores:
    def test_insert_and_find(self, any_store):
        any_store.insert_many(SHARP_TURNS, [turn('A', 10.0, 76.0), turn('B', 11.0, 77.0)])
        assert any_store.find_by_route(SHARP_TURNS, 'A') == [turn('A', 10.0, 76.0)]
        assert any_store.find_by_route(SHARP_TURNS, 'missing') == []

    def test_replace_route(self, any_store):
        any_store.insert_many(SHARP_TURNS, [turn('A', 10.0, 76.0), turn('A', 10.1, 76.1)])
        any_store.insert_many(SHARP_TURNS, [turn('B', 11.0, 77.0)])

        assert any_store.replace_route(SHARP_TURNS, 'A', [turn('A', 10.2, 76.2, risk=9)]) == 1
        assert any_store.find_by_route(SHARP_TURNS, 'A') == [turn('A', 10.2, 76.2, risk=9)]
        assert len(any_store.find_by_route(SHARP_TURNS, 'B')) == 1

    def test_replace_with_nothing_clears(self, any_store):
        any_store.insert_many(SHARP_TURNS, [turn('A', 10.0, 76.0)])
        assert any_store.replace_route(SHARP_TURNS, 'A', []) == 0
        assert any_store.find_by_route(SHARP_TURNS, 'A') == []

    def test_delete_counts(self, any_store):
        any_store.insert_many(SHARP_TURNS, [turn('A', 10.0, 76.0), turn('A', 10.1, 76.1)])
        assert any_store.delete_by_route(SHARP_TURNS, 'A') == 2
        assert any_store.delete_by_route(SHARP_TURNS, 'A') == 0

    def test_find_near(self, any_store):
        any_store.insert_many(SHARP_TURNS, [
            turn('A', 10.01, 76.0),
            turn('B', 10.0, 76.001),
            turn('C', 12.0, 78.0),
            {'routeKey': 'D', 'riskScore': 5},
        ])
        near = any_store.find_near(SHARP_TURNS, 10.0, 76.0, max_distance_km=5)
        assert [d['routeKey'] for d in near] == ['B', 'A']

    def test_ping(self, any_store):
        assert any_store.ping() is True


class TestMemoryStore:
    def test_returned_documents_are_copies(self):
        store = MemoryStore()
        store.insert_many(SHARP_TURNS, [turn('A', 10.0, 76.0)])
        store.find_by_route(SHARP_TURNS, 'A')[0]['riskScore'] = 1
        assert store.find_by_route(SHARP_TURNS, 'A')[0]['riskScore'] == 7


class TestJsonFileStore:
    def test_layout_and_sanitized_keys(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.insert_many(SHARP_TURNS, [turn('D01/42 x', 10.0, 76.0)])
        assert (tmp_path / SHARP_TURNS / "D01_42_x.json").exists()
        assert store.find_by_route(SHARP_TURNS, 'D01/42 x')[0]['routeKey'] == 'D01/42 x'

    def test_persists_across_instances(self, tmp_path):
        JsonFileStore(tmp_path).insert_many(SHARP_TURNS, [turn('A', 10.0, 76.0)])
        assert len(JsonFileStore(tmp_path).find_by_route(SHARP_TURNS, 'A')) == 1

    def test_corrupt_file(self, tmp_path):
        (tmp_path / SHARP_TURNS).mkdir()
        (tmp_path / SHARP_TURNS / "A.json").write_text("{not json")
        with pytest.raises(StorageError) as exc:
            JsonFileStore(tmp_path).find_by_route(SHARP_TURNS, 'A')
        assert exc.value.to_dict()['error'] == 'storage_error'

    def test_ping_unusable_root(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        assert JsonFileStore(blocker / "store").ping() is False
