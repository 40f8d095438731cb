"""
Bolivia CPI Application Settings
都市・カテゴリ対応表・ウェイト、データソース、色設定などを定義
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class CityConfig:
    """都市設定（全国指数へのウェイト付き）"""
    id: str
    name: str
    path: str  # GitHubリポジトリ内のパス
    weight: float


@dataclass(frozen=True)
class BasketConfig:
    """スーパーのカテゴリ → 公式カテゴリの対応表と公式カテゴリのウェイト"""
    category_mapping: Mapping[str, str] = field(default_factory=dict)
    category_weights: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        # 呼び出し側の辞書を後から書き換えられないように読み取り専用で保持
        object.__setattr__(self, "category_mapping", MappingProxyType(dict(self.category_mapping)))
        object.__setattr__(self, "category_weights", MappingProxyType(dict(self.category_weights)))

    def official_category(self, raw_category):
        """ウェイトを持つ公式カテゴリを返す（対象外ならNone）"""
        official = self.category_mapping.get(raw_category)
        if official is None or not self.category_weights.get(official):
            return None
        return official


# 都市定義（全国指数への寄与ウェイト）
CITIES = (
    CityConfig(
        id="cochabamba",
        name="Cochabamba",
        path="data/hipermaxi/cochabamba",
        weight=0.1943110633,
    ),
    CityConfig(
        id="lapaz",
        name="La Paz",
        path="data/hipermaxi/la_paz",
        weight=0.3909745579,
    ),
    CityConfig(
        id="santacruz",
        name="Santa Cruz",
        path="data/hipermaxi/santa_cruz",
        weight=0.4147143788,
    ),
)

# スーパーのカテゴリ → 公式CPIカテゴリ
CATEGORY_MAPPING = MappingProxyType({
    "Abarrotes": "Alimentos y Bebidas",
    "Bebidas": "Alimentos y Bebidas",
    "Carnes": "Alimentos y Bebidas",
    "Congelados": "Alimentos y Bebidas",
    "Fiambres": "Alimentos y Bebidas",
    "Frutas y Verduras": "Alimentos y Bebidas",
    "Granos y Hortalizas": "Alimentos y Bebidas",
    "Lácteos y Derivados": "Alimentos y Bebidas",
    "Panadería": "Alimentos y Bebidas",
    "Pastelería y Masas Típicas": "Alimentos y Bebidas",
    "Bazar": "Muebles, Bienes y Servicios Domésticos",
    "Bazar Importación": "Muebles, Bienes y Servicios Domésticos",
    "Cuidado del Hogar": "Muebles, Bienes y Servicios Domésticos",
    "Cuidado Personal": "Bienes y Servicios Diversos",
    "Cuidado del Bebé": "Bienes y Servicios Diversos",
    "Juguetería": "Recreación y Cultura",
    "Juguetería Importación": "Recreación y Cultura",
})

# 公式カテゴリのウェイト（追跡対象バスケット内で合計100%に再スケール済み）
CATEGORY_WEIGHTS = MappingProxyType({
    "Alimentos y Bebidas": 0.577,
    "Muebles, Bienes y Servicios Domésticos": 0.130,
    "Recreación y Cultura": 0.132,
    "Bienes y Servicios Diversos": 0.161,
})

DEFAULT_BASKET = BasketConfig(
    category_mapping=CATEGORY_MAPPING,
    category_weights=CATEGORY_WEIGHTS,
)

# 指数計算の定数
BASE_INDEX = 100.0
RENORMALIZATION_THRESHOLD = 0.999  # 都市ウェイト合計の浮動小数点誤差の許容範囲
YOY_TOLERANCE_DAYS = 7             # 前年同期比: 1年前の基準点の許容日数
YOY_SERIES_TOLERANCE_DAYS = 15     # 前年同期比チャート用の許容日数

# 価格カラムが見つからない場合に使う列番号
FALLBACK_PRICE_COLUMN = 2

# 日付の既知の入力ミス（先頭一致で置換）
DATE_PREFIX_CORRECTIONS = MappingProxyType({
    "0025": "2025",
})

# データエラーが判明している日付
KNOWN_ERROR_DATES = ("2024-12-14", "2025-04-21", "2025-08-17", "2025-10-19")

# データソース設定
GITHUB_SETTINGS = {
    "owner": os.getenv("CPI_GITHUB_OWNER", "mauforonda"),
    "repo": os.getenv("CPI_GITHUB_REPO", "precios"),
    "branch": os.getenv("CPI_GITHUB_BRANCH", "master"),
    "api_base": "https://api.github.com",
    "raw_base": "https://raw.githubusercontent.com",
}

# 商品カタログの候補パス（先頭から順に試す）
CATALOG_PATHS = (
    "data/hipermaxi/productos.csv",
    "data/productos.csv",
    "productos.csv",
)

# ファイル取得設定
FETCH_SETTINGS = {
    "recent_file_count": 45,  # 直近の日次データとして必ず取得するファイル数
    "concurrency": 8,
    "request_timeout": 30,
}

# デフォルト設定
DEFAULT_SETTINGS = {
    "page_title": "📊 Bolivia CPI Tracker",
    "page_icon": "📊",
    "layout": "wide",
    "cache_ttl": 3600,  # 1時間
    "chart_height": 450
}

# 都市別の表示色
CITY_COLORS = {
    "National": "#0f172a",
    "Cochabamba": "#8b5cf6",
    "La Paz": "#f59e0b",
    "Santa Cruz": "#10b981"
}

# 公式カテゴリの表示色
CATEGORY_COLORS = {
    "Alimentos y Bebidas": "#F18F01",
    "Muebles, Bienes y Servicios Domésticos": "#845EC2",
    "Recreación y Cultura": "#4E8397",
    "Bienes y Servicios Diversos": "#C73E1D"
}

# チャート設定
CHART_CONFIG = {
    "plot_bgcolor": "white",
    "paper_bgcolor": "white",
    "font_family": "Arial, sans-serif",
    "margin": dict(l=80, r=80, t=100, b=60),
    "hovermode": "x unified"
}
