"""
CPI Pipeline Module
都市ごとの価格レコードから全国CPIデータセットを組み立てる

個々の都市の失敗（ファイルなし・有効レコードなし・指数算出不可）は
メッセージとして記録し、残りの都市で処理を続ける。
全都市が失敗した場合のみ CPIDataError を送出する。
"""

import dataclasses

from ..config.settings import CITIES, DEFAULT_BASKET
from ..data.processor import aggregate_category_prices, build_city_index
from ..errors import CPIDataError
from ..logging_setup import get_logger
from .national import aggregate_national_index

logger = get_logger(__name__)


def build_city_series(city, daily_records, basket=DEFAULT_BASKET):
    """
    1都市分の指数系列を計算

    Args:
        city: CityConfig
        daily_records: ファイルごとの RawPriceRecord リストのリスト

    Returns:
        (CityIndexPoint のリスト, エラーメッセージ or None)
    """
    if not daily_records:
        return [], f"No CSV files found for {city.name} at path '{city.path}'."

    # 有効レコードのない日は除外
    valid_days = [records for records in daily_records if records]
    if not valid_days:
        return [], f"{city.name}: Files downloaded but no valid products found. Check CSV format."

    records = [record for records in valid_days for record in records]
    daily_prices = aggregate_category_prices(records)
    points = build_city_index(daily_prices, basket)

    if not points:
        return [], f"{city.name}: Insufficient data to calculate CPI (needs overlapping categories)."

    logger.info("%s: %d index points from %d files", city.name, len(points), len(valid_days))
    return points, None


def build_cpi_dataset(city_records, cities=CITIES, basket=DEFAULT_BASKET):
    """
    都市ID → 日次レコードの辞書から全国CPIデータセットを作成

    Raises:
        CPIDataError: どの都市からも指数を算出できなかった場合
    """
    city_series = {}
    errors = []

    for city in cities:
        points, message = build_city_series(city, city_records.get(city.id), basket)
        if message:
            logger.warning(message)
            errors.append(message)
            continue
        city_series[city.id] = points

    if not city_series:
        raise CPIDataError(errors)

    dataset = aggregate_national_index(city_series, cities)
    return dataclasses.replace(dataset, messages=tuple(errors))
