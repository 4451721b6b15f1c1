import json

import pytest
from django.core.exceptions import ValidationError

from quan_ly_phieu_bau.storage import MemoryStorage, SessionStorage, doc_danh_sach, ghi_danh_sach
from quan_ly_phieu_bau.tally import STORAGE_KEY, TallyStore


class BrokenStorage:
    def get(self, key):
        return None

    def set(self, key, value):
        raise OSError('disk full')


def luu_tru(records=None):
    storage = MemoryStorage()
    if records is not None:
        storage.set(STORAGE_KEY, json.dumps(records))
    return storage


class TestAdd:

    def test_new_name_gets_one_vote(self):
        store = TallyStore(luu_tru())
        record, created = store.add('Alice')
        assert created is True
        assert record == {'name': 'Alice', 'votes': 1}

    def test_case_insensitive_duplicate_increments(self):
        store = TallyStore(luu_tru())
        store.add('Alice')
        record, created = store.add('alice')
        assert created is False
        assert store.records == [{'name': 'Alice', 'votes': 2}]
        assert record is store.records[0]

    def test_name_is_trimmed(self):
        store = TallyStore(luu_tru())
        store.add('  Bob  ')
        assert store.records == [{'name': 'Bob', 'votes': 1}]

    @pytest.mark.parametrize('name', ['', '   ', None])
    def test_empty_name_is_rejected(self, name):
        storage = luu_tru()
        store = TallyStore(storage)
        with pytest.raises(ValidationError):
            store.add(name)
        assert store.records == []
        assert storage.get(STORAGE_KEY) is None

    def test_counts_match_distinct_names(self):
        store = TallyStore(luu_tru())
        for name in ['An', 'an', 'Bình', 'AN', 'bình', 'Chi']:
            store.add(name)
        assert store.records == [
            {'name': 'An', 'votes': 3},
            {'name': 'Bình', 'votes': 2},
            {'name': 'Chi', 'votes': 1},
        ]

    def test_every_mutation_is_flushed(self):
        storage = luu_tru()
        TallyStore(storage).add('Alice')
        assert json.loads(storage.get(STORAGE_KEY)) == [{'name': 'Alice', 'votes': 1}]


class TestAdjust:

    def test_increment_and_decrement(self):
        store = TallyStore(luu_tru([{'name': 'A', 'votes': 2}]))
        assert store.adjust('A', 1)['votes'] == 3
        assert store.adjust('A', -2)['votes'] == 1

    def test_never_negative(self):
        store = TallyStore(luu_tru([{'name': 'A', 'votes': 0}]))
        assert store.adjust('A', -1) == {'name': 'A', 'votes': 0}

    @pytest.mark.parametrize('votes,delta', [(0, -5), (3, -3), (3, -10), (2, 4)])
    def test_result_is_clamped_sum(self, votes, delta):
        store = TallyStore(luu_tru([{'name': 'A', 'votes': votes}]))
        assert store.adjust('A', delta)['votes'] == max(0, votes + delta)

    def test_exact_name_match_only(self):
        storage = luu_tru([{'name': 'Alice', 'votes': 1}])
        store = TallyStore(storage)
        assert store.adjust('alice', 1) is None
        assert store.records == [{'name': 'Alice', 'votes': 1}]


class TestRemoveAndReset:

    def test_remove(self):
        store = TallyStore(luu_tru([{'name': 'A', 'votes': 1}, {'name': 'B', 'votes': 2}]))
        assert store.remove('A') is True
        assert store.records == [{'name': 'B', 'votes': 2}]

    def test_remove_missing_is_noop(self):
        store = TallyStore(luu_tru([{'name': 'A', 'votes': 1}]))
        assert store.remove('Z') is False
        assert len(store.records) == 1

    def test_reset_requires_confirmation(self):
        store = TallyStore(luu_tru([{'name': 'A', 'votes': 1}]))
        with pytest.raises(ValidationError):
            store.reset_all()
        assert len(store.records) == 1

    def test_reset_then_adjust_and_remove_are_noops(self):
        storage = luu_tru([{'name': 'A', 'votes': 1}])
        store = TallyStore(storage)
        store.reset_all(confirmed=True)
        assert store.adjust('A', 1) is None
        assert store.remove('A') is False
        assert store.records == []
        assert json.loads(storage.get(STORAGE_KEY)) == []


class TestPersistence:

    def test_loads_existing_collection_on_construct(self):
        store = TallyStore(luu_tru([{'name': 'A', 'votes': 4}]))
        assert store.records == [{'name': 'A', 'votes': 4}]

    @pytest.mark.parametrize('raw', [None, '', 'null', 'undefined', '{not json', '{"name": "A"}', '42'])
    def test_malformed_or_absent_value_is_empty(self, raw):
        storage = MemoryStorage({STORAGE_KEY: raw})
        assert TallyStore(storage).records == []

    def test_malformed_items_are_dropped(self):
        raw = json.dumps([{'name': 'A', 'votes': 2}, 'x', {'votes': 3}, {'name': 'B'}])
        assert doc_danh_sach(raw) == [{'name': 'A', 'votes': 2}, {'name': 'B', 'votes': 0}]

    def test_whole_number_float_votes_are_kept(self):
        raw = json.dumps([{'name': 'A', 'votes': 3.0}, {'name': 'B', 'votes': 2.5}, {'name': 'C', 'votes': 'x'}])
        assert doc_danh_sach(raw) == [{'name': 'A', 'votes': 3}, {'name': 'B', 'votes': 0}, {'name': 'C', 'votes': 0}]
        assert isinstance(doc_danh_sach(raw)[0]['votes'], int)

    def test_round_trip_preserves_order(self):
        records = [{'name': 'Zed', 'votes': 1}, {'name': 'Ánh', 'votes': 7}, {'name': 'Bảo', 'votes': 0}]
        assert doc_danh_sach(ghi_danh_sach(records)) == records

    def test_failed_flush_keeps_in_memory_change(self):
        store = TallyStore(BrokenStorage())
        record, _ = store.add('Alice')
        assert record == {'name': 'Alice', 'votes': 1}
        assert store.records == [{'name': 'Alice', 'votes': 1}]

    def test_session_storage_wraps_mapping(self):
        session = {}
        storage = SessionStorage(session)
        TallyStore(storage).add('Alice')
        assert json.loads(session[STORAGE_KEY]) == [{'name': 'Alice', 'votes': 1}]


class TestSuggest:

    def test_substring_case_insensitive(self):
        store = TallyStore(luu_tru([{'name': 'Nguyễn An', 'votes': 1}, {'name': 'Trần Bình', 'votes': 1}]))
        assert store.suggest('an') == ['Nguyễn An']

    def test_empty_query(self):
        store = TallyStore(luu_tru([{'name': 'A', 'votes': 1}]))
        assert store.suggest('') == []

    def test_limited_to_ten(self):
        store = TallyStore(luu_tru([{'name': f'Ten {i}', 'votes': 1} for i in range(15)]))
        assert store.suggest('ten') == [f'Ten {i}' for i in range(10)]
