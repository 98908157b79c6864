"""Activity Analytics Configuration Module.

This module provides centralized configuration management for the activity
analytics service. It handles environment variable loading and provides a
clean interface for accessing configuration values throughout the application.

Features:
- Environment variable loading with .env support
- Property-based configuration access for real-time updates
- Default values for all configuration options

Environment Variables:
- SHARED_DATABASE_URL / LOCAL_DATABASE_URL: the two embedded datastores
- See env.example for complete configuration options

Usage:
    from config.settings import config
    min_days = config.ACTIVE_USER_MIN_DAYS

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""
import logging

from dotenv import load_dotenv

from config.base_config import BaseConfig
from config.activity_config import ActivityConfigMixin

logger = logging.getLogger(__name__)

load_dotenv()  # Load environment variables from .env file


class Config(
    BaseConfig,
    ActivityConfigMixin
):
    """
    Centralized configuration management for the activity analytics service.

    Combines all configuration mixins to provide a unified interface
    for accessing configuration values throughout the application.
    """


# Create global configuration instance
config = Config()
