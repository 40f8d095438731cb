"""
National CPI Aggregation Module
都市別指数を加重平均して全国指数・前月比・前年同期比を計算
"""

import pandas as pd

from ..config.settings import (
    CITIES,
    RENORMALIZATION_THRESHOLD,
    YOY_SERIES_TOLERANCE_DAYS,
    YOY_TOLERANCE_DAYS,
)
from ..data.models import CPIDataset, NationalIndexPoint
from ..data.processor import compute_period_inflation
from ..logging_setup import get_logger
from .contribution import latest_category_contributions

logger = get_logger(__name__)


def _to_timestamp(date_str):
    ts = pd.to_datetime(date_str, errors='coerce')
    if pd.isna(ts):
        return None
    return ts


def find_year_ago_point(points, reference_date, tolerance_days=YOY_TOLERANCE_DAYS):
    """
    基準日のちょうど1年前に最も近いポイントを探す

    許容日数（両端含む）を超えるポイントは対象外。同じ距離なら先に見つかった方を採用。
    """
    reference = _to_timestamp(reference_date)
    if reference is None:
        return None

    target = reference - pd.DateOffset(years=1)
    tolerance = pd.Timedelta(days=tolerance_days)

    closest = None
    min_diff = None
    for point in points:
        ts = _to_timestamp(point.date)
        if ts is None:
            continue
        diff = abs(ts - target)
        if diff <= tolerance and (min_diff is None or diff < min_diff):
            min_diff = diff
            closest = point

    return closest


def compute_yoy_inflation(points, tolerance_days=YOY_TOLERANCE_DAYS):
    """最新ポイントの前年同期比(%)。1年前の基準点がなければ0"""
    if not points:
        return 0.0

    latest = points[-1]
    closest = find_year_ago_point(points, latest.date, tolerance_days)
    if closest is None or closest.index_value <= 0:
        return 0.0

    return ((latest.index_value / closest.index_value) - 1) * 100


def compute_yoy_series(points, tolerance_days=YOY_SERIES_TOLERANCE_DAYS):
    """全ポイントの前年同期比系列（チャート用、基準点のない日は除外）"""
    rows = []
    for point in points:
        closest = find_year_ago_point(points, point.date, tolerance_days)
        if closest is not None and closest.index_value > 0:
            rows.append({
                'date': point.date,
                'yoy': ((point.index_value / closest.index_value) - 1) * 100,
            })

    df = pd.DataFrame(rows, columns=['date', 'yoy'])
    if not df.empty:
        df['DATE'] = pd.to_datetime(df['date'], errors='coerce')
    return df


def combine_city_indices(date, city_lookup, cities=CITIES):
    """
    1日分の全国指数を計算

    Returns:
        (全国指数, 都市名 → 指数)
        一部の都市しかデータがない場合はウェイト合計で割り戻す。
    """
    national = 0.0
    used_weight = 0.0
    city_values = {}

    for city in cities:
        point = city_lookup.get(city.id, {}).get(date)
        if point is not None and point.is_valid:
            national += point.index_value * city.weight
            used_weight += city.weight
            city_values[city.name] = point.index_value

    if 0 < used_weight < RENORMALIZATION_THRESHOLD:
        national = national / used_weight

    return national, city_values


def aggregate_national_index(city_series, cities=CITIES):
    """
    都市別の指数系列から全国指数データセットを作成

    Args:
        city_series: 都市ID → CityIndexPoint のリスト
        cities: CityConfig のタプル（ウェイト付き）
    """
    configured_ids = {city.id for city in cities}
    city_lookup = {
        city_id: {p.date: p for p in points}
        for city_id, points in city_series.items()
        if city_id in configured_ids
    }

    # いずれかの都市に有効なデータがある日付
    all_dates = sorted({
        date
        for points in city_lookup.values()
        for date, point in points.items()
        if point.is_valid
    })

    values = []
    breakdowns = []
    for date in all_dates:
        national, city_values = combine_city_indices(date, city_lookup, cities)
        values.append(national)
        breakdowns.append(city_values)

    inflation = compute_period_inflation(values)

    points = tuple(
        NationalIndexPoint(
            date=date,
            index_value=value,
            mom_inflation_pct=mom,
            city_index_values=breakdown,
        )
        for date, value, mom, breakdown in zip(all_dates, values, inflation, breakdowns)
    )

    city_trends = {
        city.name: tuple(city_series[city.id])
        for city in cities
        if city.id in city_series
    }

    if not points:
        logger.warning("No national CPI points could be computed")
        return CPIDataset(city_series=city_trends)

    latest = points[-1]
    yoy = compute_yoy_inflation(points)
    logger.info(
        "National CPI %.2f on %s (MoM %.2f%%, YoY %.2f%%)",
        latest.index_value, latest.date, latest.mom_inflation_pct, yoy,
    )

    return CPIDataset(
        points=points,
        current_index_value=latest.index_value,
        current_mom_inflation=latest.mom_inflation_pct,
        yoy_inflation=yoy,
        most_recent_date=latest.date,
        current_category_contributions=latest_category_contributions(
            city_series, latest.date, cities
        ),
        city_series=city_trends,
    )
