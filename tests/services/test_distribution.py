"""
Activity Distribution Tests
===========================

Score thresholds and relative classification of viewing users.
"""

import pytest

from models.common import ActivityLevel
from services.activity.distribution import (
    activity_score,
    build_user_distribution,
    classify_activity_level,
)


class TestClassifyActivityLevel:
    """Strict threshold comparisons."""

    @pytest.mark.parametrize("score, expected", [
        (1.0, ActivityLevel.HIGH),
        (0.71, ActivityLevel.HIGH),
        (0.7, ActivityLevel.MEDIUM),
        (0.41, ActivityLevel.MEDIUM),
        (0.4, ActivityLevel.LOW),
        (0.0, ActivityLevel.LOW),
    ])
    def test_default_thresholds(self, score, expected):
        assert classify_activity_level(score) == expected

    def test_custom_thresholds(self):
        assert classify_activity_level(0.6, high=0.5, medium=0.2) == ActivityLevel.HIGH


class TestActivityScore:
    """Ratios against the most active user."""

    def test_top_user_scores_one(self):
        assert activity_score(10, 4, 10, 4) == 1.0

    def test_zero_maximum_does_not_divide_by_zero(self):
        assert activity_score(0, 0, 0, 0) == 0.0

    def test_invariant_under_scaling(self):
        assert activity_score(3, 2, 10, 5) == activity_score(30, 20, 100, 50)


class TestBuildUserDistribution:
    """Classification over in-memory stores."""

    def test_only_active_users_with_views(self, repo, seed):
        seed.user("alice")
        seed.user("bob")
        seed.user("carol", is_active=False)
        seed.view("alice", "m1", "2024-03-01")
        seed.view("carol", "m1", "2024-03-01")

        entries = build_user_distribution(repo)

        assert [entry.user_sid for entry in entries] == ["alice"]
        assert entries[0].display_name == "Alice"

    def test_levels_relative_to_most_active(self, repo, seed):
        for sid in ("alice", "bob", "carol"):
            seed.user(sid)
        # alice: 10 views over 5 materials (score 1.0)
        for index in range(10):
            seed.view("alice", f"m{index % 5}", f"2024-03-{index + 1:02d}")
        # bob: 6 views over 3 materials (score 0.6)
        for index in range(6):
            seed.view("bob", f"m{index % 3}", f"2024-03-{index + 1:02d}")
        # carol: 1 view over 1 material (score 0.15)
        seed.view("carol", "m0", "2024-03-01")

        levels = {entry.user_sid: entry.activity_level for entry in build_user_distribution(repo)}

        assert levels == {
            "alice": ActivityLevel.HIGH,
            "bob": ActivityLevel.MEDIUM,
            "carol": ActivityLevel.LOW,
        }

    def test_empty_store(self, repo):
        assert build_user_distribution(repo) == []

    def test_serialises_activity_level(self, repo, seed):
        seed.user("alice")
        seed.view("alice", "m1", "2024-03-01")

        payload = build_user_distribution(repo)[0].model_dump(by_alias=True, mode="json")

        assert payload == {
            "userSid": "alice",
            "displayName": "Alice",
            "viewCount": 1,
            "uniqueMaterialCount": 1,
            "activityLevel": "high",
        }
