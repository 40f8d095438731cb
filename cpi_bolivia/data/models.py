"""
CPI Data Models
価格レコード・指数ポイント・最終データセットの型定義

指数ポイントとデータセットは作成後に変更できない。辞書フィールドは
MappingProxyType で読み取り専用にして保持する。
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import pandas as pd


def _read_only(mapping):
    return MappingProxyType(dict(mapping))


class _FrozenMappings:
    """辞書フィールドを読み取り専用にする frozen dataclass 用の共通処理"""

    def _freeze(self, name, mapping):
        object.__setattr__(self, name, _read_only(mapping))

    def __reduce__(self):
        # MappingProxyType はpickleできないため、通常の辞書に戻して再構築する
        values = tuple(
            dict(value) if isinstance(value, MappingProxyType) else value
            for value in (getattr(self, f.name) for f in fields(self))
        )
        return (self.__class__, values)


@dataclass(frozen=True)
class RawPriceRecord:
    """日次ファイルの1行分の価格レコード"""
    product: str
    raw_category: str
    price: float
    date: str


@dataclass(frozen=True)
class ProductCatalogEntry:
    """商品カタログの1件"""
    id: str
    product_name: str
    category: str


@dataclass(frozen=True)
class DailyCategoryPrice:
    """日付×スーパーカテゴリの幾何平均価格"""
    date: str
    raw_category: str
    geometric_mean_price: float


class DayStatus(Enum):
    """その日のバスケット価格が有効かどうか"""
    VALID = "valid"
    NO_DATA = "no_data"


@dataclass(frozen=True)
class CityIndexPoint(_FrozenMappings):
    """都市別の指数ポイント（基準日 = 100）"""
    date: str
    index_value: float
    mom_inflation_pct: float = 0.0
    category_contributions: Mapping[str, float] = field(default_factory=dict)
    status: DayStatus = DayStatus.VALID

    def __post_init__(self):
        self._freeze("category_contributions", self.category_contributions)

    @property
    def is_valid(self):
        return self.status is DayStatus.VALID and self.index_value > 0


@dataclass(frozen=True)
class NationalIndexPoint(_FrozenMappings):
    """全国指数ポイント"""
    date: str
    index_value: float
    mom_inflation_pct: float = 0.0
    city_index_values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        self._freeze("city_index_values", self.city_index_values)


@dataclass(frozen=True)
class CPIDataset(_FrozenMappings):
    """パイプラインの最終成果物（表示レイヤーに渡す）"""
    points: Tuple[NationalIndexPoint, ...] = ()
    current_index_value: float = 0.0
    current_mom_inflation: float = 0.0
    yoy_inflation: float = 0.0
    most_recent_date: str = ""
    current_category_contributions: Mapping[str, float] = field(default_factory=dict)
    city_series: Mapping[str, Tuple[CityIndexPoint, ...]] = field(default_factory=dict)
    messages: Tuple[str, ...] = ()  # 除外された都市の診断メッセージ

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "messages", tuple(self.messages))
        self._freeze("current_category_contributions", self.current_category_contributions)
        self._freeze("city_series", {
            name: tuple(series) for name, series in self.city_series.items()
        })

    @property
    def latest_point(self) -> Optional[NationalIndexPoint]:
        return self.points[-1] if self.points else None

    def to_frame(self) -> pd.DataFrame:
        """全国指数をDataFrameに変換（都市別の指数は列として展開）"""
        rows = []
        for point in self.points:
            row: Dict[str, object] = {
                'date': point.date,
                'cpi': point.index_value,
                'inflation': point.mom_inflation_pct,
            }
            row.update(point.city_index_values)
            rows.append(row)

        df = pd.DataFrame(rows)
        if not df.empty:
            df['DATE'] = pd.to_datetime(df['date'], errors='coerce')
        return df

    def city_frame(self, city_name) -> pd.DataFrame:
        """都市別の指数をDataFrameに変換"""
        points = self.city_series.get(city_name, ())
        df = pd.DataFrame([
            {
                'date': p.date,
                'cpi': p.index_value,
                'inflation': p.mom_inflation_pct,
                'valid': p.is_valid,
            }
            for p in points
        ])
        if not df.empty:
            df['DATE'] = pd.to_datetime(df['date'], errors='coerce')
        return df
