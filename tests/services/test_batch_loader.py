"""
Batch Loader and Repository Tests
=================================

Chunked ``IN (...)`` loading and store selection in ActivityRepository.
"""

from datetime import date, datetime
from unittest.mock import Mock

import pytest

from models.domain.local_store import LoginEvent
from models.domain.shared_store import Material, MaterialView, User
from services.activity.batch_loader import BatchLoader, chunked, unique_keys
from services.activity.repository import ActivityRepository


class TestChunking:
    """Key chunking helpers."""

    def test_chunked_preserves_order(self):
        assert list(chunked(["a", "b", "c", "d", "e"], 2)) == [["a", "b"], ["c", "d"], ["e"]]

    def test_chunked_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            list(chunked(["a"], 0))

    def test_unique_keys_keeps_first_seen_order(self):
        assert unique_keys(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestBatchLoader:
    """Merging rows from several chunked queries."""

    def test_one_query_per_chunk(self):
        row = Mock(key="u1", count=3)
        build_query = Mock()
        build_query.return_value.all.return_value = [row]

        loader = BatchLoader(chunk_size=2)
        result = loader.load_map(build_query, ["u1", "u2", "u3"])

        assert build_query.call_count == 2
        build_query.assert_any_call(["u1", "u2"])
        build_query.assert_any_call(["u3"])
        assert result == {"u1": 3}

    def test_load_lists_truncates_per_key(self):
        rows = [Mock(key="u1", n=i) for i in range(5)] + [Mock(key="u2", n=9)]
        build_query = Mock()
        build_query.return_value.all.return_value = rows

        result = BatchLoader().load_lists(build_query, ["u1", "u2"], limit_per_key=3)

        assert [row.n for row in result["u1"]] == [0, 1, 2]
        assert [row.n for row in result["u2"]] == [9]

    def test_no_keys_runs_no_query(self):
        build_query = Mock()
        assert BatchLoader().load_map(build_query, []) == {}
        build_query.assert_not_called()


class TestActivityRepository:
    """Queries routed to the right store."""

    def test_session_for_picks_store_by_model(self, repo, shared_db, local_db):
        assert repo.session_for(LoginEvent) is local_db
        assert repo.session_for(LoginEvent.date) is local_db
        assert repo.session_for(MaterialView) is shared_db
        assert repo.session_for(User.sid) is shared_db

    def test_grouped_counts_match_across_chunk_sizes(self, shared_db, local_db, seed):
        for index in range(7):
            seed.login(f"u{index}", *(["2024-03-01"] * (index + 1)))
        sids = [f"u{index}" for index in range(8)]

        small = ActivityRepository(shared_db, local_db, BatchLoader(chunk_size=3))
        large = ActivityRepository(shared_db, local_db, BatchLoader(chunk_size=500))

        expected = {f"u{index}": index + 1 for index in range(7)}
        assert small.count_grouped_by_user(LoginEvent.user_sid, sids) == expected
        assert large.count_grouped_by_user(LoginEvent.user_sid, sids) == expected

    def test_count_groups_having_counts_distinct_dates(self, repo, seed):
        seed.login("alice", "2024-03-01", "2024-03-01", "2024-03-02")
        seed.login("bob", "2024-03-01", "2024-03-02", "2024-03-03")

        assert repo.count_groups_having(LoginEvent.user_sid, LoginEvent.date, 3) == 1
        assert repo.count_groups_having(LoginEvent.user_sid, LoginEvent.date, 2) == 2

    def test_range_query_on_date_column_rejects_instant(self, repo):
        with pytest.raises(TypeError):
            repo.count_in_range(MaterialView.view_date, datetime(2024, 3, 1), date(2024, 3, 2))

    def test_range_query_on_instant_column_rejects_date(self, repo):
        with pytest.raises(TypeError):
            repo.range_query([Material.created_at], Material.created_at, date(2024, 3, 1), date(2024, 3, 2))

    def test_count_in_range_inclusive_and_exclusive(self, repo, seed):
        seed.view("alice", "m1", "2024-03-01")
        seed.view("alice", "m1", "2024-03-02")
        seed.view("alice", "m1", "2024-03-03")

        inclusive = repo.count_in_range(MaterialView.view_date, date(2024, 3, 1), date(2024, 3, 2))
        exclusive = repo.count_in_range(
            MaterialView.view_date, date(2024, 3, 1), date(2024, 3, 2), end_exclusive=True
        )
        assert inclusive == 2
        assert exclusive == 1
