"""
Data Module
データモデル・解析・処理モジュール

取得処理（loader）は全国集計パイプラインに依存するため、
`cpi_bolivia.data.loader` から直接インポートする。
"""

from .models import (
    RawPriceRecord,
    ProductCatalogEntry,
    DailyCategoryPrice,
    DayStatus,
    CityIndexPoint,
    NationalIndexPoint,
    CPIDataset
)

from .parser import (
    parse_price,
    parse_price_file,
    parse_product_catalog,
    normalize_record_date
)

from .processor import (
    geometric_mean,
    compute_period_inflation,
    aggregate_category_prices,
    build_city_index,
    calculate_inflation_metrics
)

from .export import (
    prepare_export_data,
    build_methodology_text
)

__all__ = [
    'RawPriceRecord',
    'ProductCatalogEntry',
    'DailyCategoryPrice',
    'DayStatus',
    'CityIndexPoint',
    'NationalIndexPoint',
    'CPIDataset',
    'parse_price',
    'parse_price_file',
    'parse_product_catalog',
    'normalize_record_date',
    'geometric_mean',
    'compute_period_inflation',
    'aggregate_category_prices',
    'build_city_index',
    'calculate_inflation_metrics',
    'prepare_export_data',
    'build_methodology_text'
]
