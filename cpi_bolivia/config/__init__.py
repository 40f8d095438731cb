"""
Configuration Module
設定・コンフィグレーション管理
"""

from .settings import (
    CityConfig,
    BasketConfig,
    CITIES,
    CATEGORY_MAPPING,
    CATEGORY_WEIGHTS,
    DEFAULT_BASKET,
    BASE_INDEX,
    RENORMALIZATION_THRESHOLD,
    YOY_TOLERANCE_DAYS,
    YOY_SERIES_TOLERANCE_DAYS,
    KNOWN_ERROR_DATES,
    GITHUB_SETTINGS,
    FETCH_SETTINGS,
    DEFAULT_SETTINGS,
    CHART_CONFIG
)

__all__ = [
    'CityConfig',
    'BasketConfig',
    'CITIES',
    'CATEGORY_MAPPING',
    'CATEGORY_WEIGHTS',
    'DEFAULT_BASKET',
    'BASE_INDEX',
    'RENORMALIZATION_THRESHOLD',
    'YOY_TOLERANCE_DAYS',
    'YOY_SERIES_TOLERANCE_DAYS',
    'KNOWN_ERROR_DATES',
    'GITHUB_SETTINGS',
    'FETCH_SETTINGS',
    'DEFAULT_SETTINGS',
    'CHART_CONFIG'
]
