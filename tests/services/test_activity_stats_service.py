"""
Activity Stats Service Tests
============================

Facade behaviour: assembled responses and translation of datastore
failures into StatsQueryError.
"""

from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import OperationalError

from models.common import Period
from models.responses import OverallStats
from services.activity import ActivityStatsService, StatsQueryError, UserNotFoundError


def _failing_session():
    session = Mock()
    session.query.side_effect = OperationalError("SELECT 1", {}, Exception("disk I/O error"))
    return session


class TestOverallActivity:
    """type=overall assembly."""

    def test_response_shape(self, shared_db, local_db, seed, now):
        seed.user("alice")
        seed.view("alice", "m1", "2024-03-15")

        result = ActivityStatsService(shared_db, local_db, now=now).get_overall_activity()
        payload = result.model_dump(by_alias=True, mode="json")

        assert set(payload) == {"overallStats", "userRankings", "userDistribution"}
        assert payload["overallStats"]["totalViews"] == 1
        assert payload["userRankings"][0]["userSid"] == "alice"
        assert payload["userDistribution"][0]["activityLevel"] == "high"

    def test_local_store_failure_fails_whole_request(self, shared_db):
        service = ActivityStatsService(shared_db, _failing_session())

        with pytest.raises(StatsQueryError) as exc_info:
            service.get_overall_activity()

        assert exc_info.value.module == "services.activity.overall_stats"
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert "disk I/O error" not in exc_info.value.message

    def test_local_store_failure_during_rankings(self, shared_db, seed, now):
        seed.user("alice")
        service = ActivityStatsService(shared_db, _failing_session(), now=now)

        with patch(
            "services.activity.activity_stats_service.collect_overall_stats",
            return_value=OverallStats()
        ):
            with pytest.raises(StatsQueryError) as exc_info:
                service.get_overall_activity()

        assert exc_info.value.module == "services.activity.rankings"
        assert exc_info.value.error_code == "INTERNAL_ERROR"


class TestIndividualActivity:
    """type=individual assembly."""

    def test_unknown_user_is_not_wrapped(self, shared_db, local_db, now):
        service = ActivityStatsService(shared_db, local_db, now=now)

        with pytest.raises(UserNotFoundError) as exc_info:
            service.get_individual_activity("nobody")

        assert exc_info.value.message == "User not found"
        assert exc_info.value.error_code == "USER_NOT_FOUND"

    def test_period_echoed(self, shared_db, local_db, seed, now):
        seed.user("alice")

        result = ActivityStatsService(shared_db, local_db, now=now).get_individual_activity(
            "alice", period=Period.THREE_MONTHS
        )

        assert result.model_dump(by_alias=True, mode="json")["period"] == "3months"
        assert result.user.user_sid == "alice"

    def test_shared_store_failure(self, local_db):
        service = ActivityStatsService(_failing_session(), local_db)

        with pytest.raises(StatsQueryError) as exc_info:
            service.get_individual_activity("alice")

        assert exc_info.value.module == "services.activity.time_series"


class TestCorruptStoreValues:
    """Values the driver cannot convert are reported like any other store failure."""

    def test_malformed_timestamp(self, shared_db, local_db, seed, now, caplog):
        seed.user("alice")
        seed.raw_material("m-bad", "alice", "2024-03-10 garbage")
        service = ActivityStatsService(shared_db, local_db, now=now)

        with caplog.at_level("ERROR", logger="services.activity.activity_stats_service"):
            with pytest.raises(StatsQueryError) as exc_info:
                service.get_individual_activity(
                    "alice", period=Period.CUSTOM, start_date="2024-03-01", end_date="2024-03-31"
                )

        assert exc_info.value.module == "services.activity.time_series"
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "services.activity.time_series" in caplog.text
