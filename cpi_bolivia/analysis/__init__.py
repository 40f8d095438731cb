"""
Analysis Module
全国指数・寄与度分析モジュール
"""

from .contribution import (
    latest_category_contributions,
    calculate_contribution_history,
    get_latest_contribution_summary
)

from .national import (
    aggregate_national_index,
    compute_yoy_inflation,
    compute_yoy_series,
    find_year_ago_point
)

from .pipeline import (
    build_city_series,
    build_cpi_dataset
)

__all__ = [
    'latest_category_contributions',
    'calculate_contribution_history',
    'get_latest_contribution_summary',
    'aggregate_national_index',
    'compute_yoy_inflation',
    'compute_yoy_series',
    'find_year_ago_point',
    'build_city_series',
    'build_cpi_dataset'
]
