"""
Visualization Module
可視化・チャート作成モジュール
"""

from .charts import (
    add_error_date_markers,
    create_national_trend_chart,
    create_regional_comparison_chart,
    create_yoy_trend_chart,
    create_mom_inflation_chart,
    create_category_contribution_chart,
    create_contribution_history_chart
)

__all__ = [
    'add_error_date_markers',
    'create_national_trend_chart',
    'create_regional_comparison_chart',
    'create_yoy_trend_chart',
    'create_mom_inflation_chart',
    'create_category_contribution_chart',
    'create_contribution_history_chart'
]
