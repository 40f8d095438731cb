"""
CPI Data Processor Module
価格レコードの集計、バスケット価格・都市別指数の計算を行う関数群
"""

import numpy as np
import pandas as pd

from ..config.settings import BASE_INDEX, DEFAULT_BASKET
from .models import CityIndexPoint, DailyCategoryPrice, DayStatus


def geometric_mean(prices):
    """幾何平均 exp(mean(log(p)))"""
    values = np.asarray(list(prices), dtype=float)
    if values.size == 0:
        raise ValueError("geometric_mean() requires at least one price")
    return float(np.exp(np.log(values).mean()))


def compute_period_inflation(values):
    """
    直前のポイントに対する変化率(%)を計算

    直前の値が0以下の場合は0とする。先頭は常に0。
    暦上の1ヶ月ではなく、系列内の直前ポイントとの比較である点に注意。
    """
    values = list(values)
    inflation = [0.0] * len(values)
    for i in range(1, len(values)):
        prev = values[i - 1]
        if prev > 0:
            inflation[i] = ((values[i] - prev) / prev) * 100
    return inflation


def records_to_frame(records):
    """RawPriceRecord のリストをDataFrameに変換"""
    return pd.DataFrame(
        [
            {
                'date': r.date,
                'product': r.product,
                'raw_category': r.raw_category,
                'price': r.price,
            }
            for r in records
        ],
        columns=['date', 'product', 'raw_category', 'price'],
    )


def aggregate_category_prices(records):
    """日付×スーパーカテゴリごとの幾何平均価格を計算"""
    df = records_to_frame(records)
    if df.empty:
        return []

    # 日付なし・価格0以下のレコードは除外
    df = df[df['date'].notna() & (df['date'] != '')]
    df = df[df['price'] > 0]
    if df.empty:
        return []

    grouped = df.groupby(['date', 'raw_category'], sort=True)['price'].agg(geometric_mean)

    return [
        DailyCategoryPrice(date=date, raw_category=category, geometric_mean_price=float(value))
        for (date, category), value in grouped.items()
    ]


def calculate_basket_values(daily_prices, basket=DEFAULT_BASKET):
    """
    日次のバスケット価格 P と公式カテゴリ別の内訳を計算

    Returns:
        (P: 日付インデックスのSeries, details: 日付 → {公式カテゴリ: 寄与額})
    """
    df = pd.DataFrame(
        [
            {
                'date': dp.date,
                'raw_category': dp.raw_category,
                'price': dp.geometric_mean_price,
            }
            for dp in daily_prices
        ],
        columns=['date', 'raw_category', 'price'],
    )
    if df.empty:
        return pd.Series(dtype=float), {}

    # 対応表にないカテゴリは寄与なし（意図的な除外）
    df['official'] = df['raw_category'].map(basket.official_category)
    df['contribution'] = df['official'].map(
        lambda cat: basket.category_weights.get(cat, 0.0) if cat else 0.0
    ) * df['price']

    basket_values = df.groupby('date', sort=True)['contribution'].sum()

    details = {date: {} for date in basket_values.index}
    mapped = df.dropna(subset=['official'])
    for (date, official), value in mapped.groupby(['date', 'official'], sort=False)['contribution'].sum().items():
        details[date][official] = float(value)

    return basket_values, details


def build_city_index(daily_prices, basket=DEFAULT_BASKET):
    """
    都市別の指数系列を作成（最初の有効日 = 100）

    有効なバスケット価格が1日もない場合は空リストを返す。
    P = 0 の日は日付の連続性のため NO_DATA として残す。
    """
    basket_values, details = calculate_basket_values(daily_prices, basket)
    if basket_values.empty:
        return []

    valid_values = basket_values[basket_values > 0]
    if valid_values.empty:
        return []

    base_value = float(valid_values.iloc[0])

    index_values = []
    contributions = []
    for date, value in basket_values.items():
        if value > 0:
            index_values.append((float(value) / base_value) * BASE_INDEX)
            contributions.append({
                official: (amount / base_value) * BASE_INDEX
                for official, amount in details[date].items()
            })
        else:
            index_values.append(0.0)
            contributions.append({})

    # NO_DATA の日は前日比を計算しない
    inflation = [
        mom if index_value > 0 else 0.0
        for mom, index_value in zip(compute_period_inflation(index_values), index_values)
    ]

    return [
        CityIndexPoint(
            date=date,
            index_value=index_value,
            mom_inflation_pct=mom,
            category_contributions=contribution,
            status=DayStatus.VALID if index_value > 0 else DayStatus.NO_DATA,
        )
        for date, index_value, mom, contribution in zip(
            basket_values.index, index_values, inflation, contributions
        )
    ]


def calculate_inflation_metrics(dataset):
    """全国指数のインフレ率とその他指標を計算"""
    if not dataset.points:
        return {}

    series = pd.Series([p.index_value for p in dataset.points])
    metrics = {
        'current_level': dataset.current_index_value,
        'monthly_change': dataset.current_mom_inflation,
        'yearly_change': dataset.yoy_inflation,
        'latest_date': dataset.most_recent_date,
    }

    # ボラティリティ（変化率の標準偏差）
    if len(series) >= 12:
        changes = series[series > 0].pct_change().dropna()
        metrics['volatility'] = changes.std() * 100

    return metrics


def get_inflation_trend_status(yearly_change):
    """前年同期比に基づくインフレ評価を返す"""
    if yearly_change > 3:
        return "⬆️ 高インフレ"
    elif yearly_change > 1:
        return "📈 適度"
    elif yearly_change > 0:
        return "📊 低水準"
    else:
        return "⬇️ デフレ"
