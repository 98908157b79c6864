"""Activity analytics configuration settings.

This module provides the datastore locations and the product-policy
constants used by the activity statistics aggregation (active-user
threshold, activity tier cutoffs, ranking window sizes).
"""
import logging
from typing import TYPE_CHECKING, Any

logger = logging.getLogger(__name__)

DEFAULT_SHARED_DATABASE_URL = "sqlite:///data/shared.db"
DEFAULT_LOCAL_DATABASE_URL = "sqlite:///data/local/activity-aggregator.db"


class ActivityConfigMixin:
    """Mixin class for activity analytics configuration properties.

    This mixin expects the class to inherit from BaseConfig or provide
    a _get_cached_value method.
    """
    if TYPE_CHECKING:
        def _get_cached_value(self, _key: str, _default: Any = None) -> Any:
            """Type stub: method provided by BaseConfig."""
            return _default

    def _get_int(self, key: str, default: int, minimum: int = 0) -> int:
        try:
            val = int(self._get_cached_value(key, str(default)))
            if val < minimum:
                logger.warning("%s %s below minimum %s, using %s", key, val, minimum, default)
                return default
            return val
        except (ValueError, TypeError):
            logger.warning("Invalid %s, using %s", key, default)
            return default

    def _get_ratio(self, key: str, default: float) -> float:
        try:
            val = float(self._get_cached_value(key, str(default)))
            if not 0.0 <= val <= 1.0:
                logger.warning("%s %s outside [0, 1], using %s", key, val, default)
                return default
            return val
        except (ValueError, TypeError):
            logger.warning("Invalid %s, using %s", key, default)
            return default

    @property
    def SHARED_DATABASE_URL(self) -> str:
        """Shared (multi-user) store holding users, materials and material views."""
        return self._get_cached_value('SHARED_DATABASE_URL', DEFAULT_SHARED_DATABASE_URL)

    @property
    def LOCAL_DATABASE_URL(self) -> str:
        """Per-device store holding login events."""
        return self._get_cached_value('LOCAL_DATABASE_URL', DEFAULT_LOCAL_DATABASE_URL)

    @property
    def ACTIVE_USER_MIN_DAYS(self) -> int:
        """
        Distinct login days required to count a user as active.

        Default: 5
        """
        return self._get_int('ACTIVE_USER_MIN_DAYS', 5, minimum=1)

    @property
    def ACTIVITY_LEVEL_HIGH_THRESHOLD(self) -> float:
        """Activity score strictly above this is tier 'high'. Default: 0.7"""
        return self._get_ratio('ACTIVITY_LEVEL_HIGH_THRESHOLD', 0.7)

    @property
    def ACTIVITY_LEVEL_MEDIUM_THRESHOLD(self) -> float:
        """Activity score strictly above this is tier 'medium'. Default: 0.4"""
        medium = self._get_ratio('ACTIVITY_LEVEL_MEDIUM_THRESHOLD', 0.4)
        high = self.ACTIVITY_LEVEL_HIGH_THRESHOLD
        if medium > high:
            logger.warning(
                "ACTIVITY_LEVEL_MEDIUM_THRESHOLD %s above high threshold %s, using %s",
                medium, high, high
            )
            return high
        return medium

    @property
    def RANKING_DAILY_SERIES_DAYS(self) -> int:
        """Days of per-user daily view history attached to each ranking row."""
        return self._get_int('RANKING_DAILY_SERIES_DAYS', 30, minimum=1)

    @property
    def TOP_MATERIALS_LIMIT(self) -> int:
        """Number of most-viewed materials reported per user."""
        return self._get_int('TOP_MATERIALS_LIMIT', 10, minimum=1)
