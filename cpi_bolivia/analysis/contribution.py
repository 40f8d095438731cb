"""
CPI Contribution Analysis Module
公式カテゴリ別の寄与度分析を行う関数群
"""

import pandas as pd

from ..config.settings import CATEGORY_WEIGHTS, CITIES


def latest_category_contributions(city_series, date, cities=CITIES):
    """
    指定日の全国カテゴリ寄与度（都市ウェイトで加重して合算）

    全国指数と異なり、一部の都市が欠けていても割り戻しは行わない。

    Args:
        city_series: 都市ID → CityIndexPoint のリスト
    """
    contributions = {}
    for city in cities:
        point = next((p for p in city_series.get(city.id, ()) if p.date == date), None)
        if point is None:
            continue
        for category, value in point.category_contributions.items():
            contributions[category] = contributions.get(category, 0.0) + value * city.weight
    return contributions


def calculate_contribution_history(dataset, cities=CITIES):
    """全期間の全国カテゴリ寄与度をDataFrameで返す（チャート用）"""
    city_weights = {city.name: city.weight for city in cities}

    contribution_data = []
    for point in dataset.points:
        totals = {}
        for city_name, series in dataset.city_series.items():
            weight = city_weights.get(city_name)
            if weight is None:
                continue
            city_point = next((p for p in series if p.date == point.date), None)
            if city_point is None:
                continue
            for category, value in city_point.category_contributions.items():
                totals[category] = totals.get(category, 0.0) + value * weight

        for category, value in totals.items():
            contribution_data.append({
                'DATE': pd.to_datetime(point.date, errors='coerce'),
                'Category': category,
                'Contribution': value,
                'Weight': CATEGORY_WEIGHTS.get(category, 0.0),
            })

    return pd.DataFrame(contribution_data, columns=['DATE', 'Category', 'Contribution', 'Weight'])


def get_latest_contribution_summary(contributions):
    """最新日の寄与度サマリー（構成比付き）を取得"""
    if not contributions:
        return {}

    total = sum(contributions.values())
    summary = {}
    for category, value in sorted(contributions.items(), key=lambda item: item[1], reverse=True):
        summary[category] = {
            'contribution': value,
            'share': (value / total) * 100 if total > 0 else 0.0,
            'weight': CATEGORY_WEIGHTS.get(category, 0.0),
        }
    return summary
