"""
Overall Stats Tests
===================

Global totals across the shared and local stores.
"""

from services.activity.overall_stats import average_views_per_user, collect_overall_stats


class TestAverageViewsPerUser:
    """Integer average with a zero-user guard."""

    def test_floors_result(self):
        assert average_views_per_user(7, 2) == 3

    def test_zero_users(self):
        assert average_views_per_user(10, 0) == 0


class TestCollectOverallStats:
    """End-to-end totals over in-memory stores."""

    def test_empty_stores(self, repo):
        stats = collect_overall_stats(repo)

        assert stats.total_logins == 0
        assert stats.total_views == 0
        assert stats.total_users == 0
        assert stats.avg_views_per_user == 0
        assert stats.active_user_count == 0
        assert stats.total_materials == 0

    def test_totals(self, repo, seed):
        seed.user("alice")
        seed.user("bob")
        seed.user("carol", is_active=False)
        seed.material(material_id="m1")
        seed.material(material_id="m2", is_published=False)
        seed.view("alice", "m1", "2024-03-01")
        seed.view("alice", "m1", "2024-03-02")
        seed.view("bob", "m1", "2024-03-02")
        seed.login("alice", "2024-03-01", "2024-03-02")

        stats = collect_overall_stats(repo)

        assert stats.total_logins == 2
        assert stats.total_views == 3
        assert stats.total_users == 2
        assert stats.avg_views_per_user == 1
        assert stats.total_materials == 1

    def test_active_user_needs_five_distinct_days(self, repo, seed):
        seed.login("alice", "2024-03-01", "2024-03-02", "2024-03-03", "2024-03-04")
        assert collect_overall_stats(repo).active_user_count == 0

        seed.login("alice", "2024-03-05")
        assert collect_overall_stats(repo).active_user_count == 1

    def test_duplicate_same_day_logins_do_not_count(self, repo, seed):
        seed.login("bob", *(["2024-03-01"] * 10))
        assert collect_overall_stats(repo).active_user_count == 0

    def test_threshold_is_configurable(self, repo, seed):
        seed.login("alice", "2024-03-01", "2024-03-02")
        assert collect_overall_stats(repo, active_user_min_days=2).active_user_count == 1

    def test_serialises_camel_case(self, repo):
        payload = collect_overall_stats(repo).model_dump(by_alias=True)
        assert set(payload) == {
            "totalLogins", "totalViews", "avgViewsPerUser",
            "activeUserCount", "totalMaterials", "totalUsers",
        }
