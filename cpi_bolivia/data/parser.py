"""
Price File Parser Module
スーパーの日次価格CSVと商品カタログの読み込み

区切り文字（, / ;）や列構成がファイルごとに異なるため、ヘッダーの部分一致で
列を特定し、解析できない行は読み飛ばす。
"""

import re

from ..config.settings import DATE_PREFIX_CORRECTIONS, FALLBACK_PRICE_COLUMN
from ..logging_setup import get_logger
from .models import ProductCatalogEntry, RawPriceRecord

logger = get_logger(__name__)

# ヘッダーの部分一致キーワード
PRODUCT_KEYWORDS = ('producto', 'product')
CATEGORY_KEYWORDS = ('categoria', 'category')
PRICE_KEYWORDS = ('precio', 'price')
ID_KEYWORDS = ('id', 'code', 'sku')
DATE_KEYWORDS = ('fecha', 'date')

CATALOG_ID_KEYWORDS = ('id', 'code')
CATALOG_NAME_KEYWORDS = ('producto', 'nombre')
CATALOG_CATEGORY_KEYWORDS = ('categoria', 'grupo')

DEFAULT_PRODUCT_NAME = "Item"
DEFAULT_CATEGORY = "Uncategorized"
UNKNOWN_LABEL = "Unknown"

_NON_NUMERIC = re.compile(r'[^\d.,-]')
_LEADING_NUMBER = re.compile(r'-?(?:\d+\.?\d*|\.\d+)')


def detect_delimiter(content):
    """先頭5行のカンマとセミコロンの数から区切り文字を判定"""
    lines = content.split('\n')[:5]
    comma_count = sum(line.count(',') for line in lines)
    semicolon_count = sum(line.count(';') for line in lines)
    return ';' if semicolon_count > comma_count else ','


def split_line(line, delimiter):
    """引用符内の区切り文字を無視して1行を分割"""
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append(''.join(current).strip())
    return fields


def parse_price(text):
    """
    現地表記の価格を数値に変換

    "1.234,56" → 1234.56, "12,50" → 12.5, "12.50" → 12.5, "Bs 45" → 45.0
    解析できない場合は0を返す。
    """
    if not text:
        return 0.0

    # 通貨記号・空白を除去
    clean = _NON_NUMERIC.sub('', text)

    if ',' in clean and '.' in clean:
        # 1.000,00 形式（ドットは桁区切り）
        clean = clean.replace('.', '').replace(',', '.', 1)
    elif ',' in clean:
        # カンマのみは小数点
        clean = clean.replace(',', '.', 1)

    match = _LEADING_NUMBER.match(clean)
    if match is None:
        return 0.0
    return float(match.group(0))


def normalize_record_date(date_str, corrections=DATE_PREFIX_CORRECTIONS):
    """既知の年の入力ミス（例: 0025-… → 2025-…）を補正"""
    if not date_str:
        return ''
    for wrong_prefix, right_prefix in corrections.items():
        if date_str.startswith(wrong_prefix):
            return right_prefix + date_str[len(wrong_prefix):]
    return date_str


def find_column(headers, keywords):
    """キーワードを含む最初の列番号（なければ-1）"""
    for idx, header in enumerate(headers):
        if any(keyword in header for keyword in keywords):
            return idx
    return -1


def _strip_quotes(value):
    return value.replace('"', '').replace("'", '')


def _cell(cols, idx):
    if 0 <= idx < len(cols):
        return cols[idx]
    return ''


def _content_lines(content):
    return [line for line in content.split('\n') if line.strip()]


def parse_product_catalog(content):
    """商品カタログ（productos.csv）を ID → ProductCatalogEntry の辞書に変換"""
    catalog = {}
    if not content:
        return catalog

    delimiter = detect_delimiter(content)
    lines = _content_lines(content)
    if len(lines) < 2:
        return catalog

    headers = [h.lower() for h in split_line(lines[0], delimiter)]

    id_idx = find_column(headers, CATALOG_ID_KEYWORDS)
    name_idx = find_column(headers, CATALOG_NAME_KEYWORDS)
    cat_idx = find_column(headers, CATALOG_CATEGORY_KEYWORDS)

    id_idx = id_idx if id_idx != -1 else 0
    name_idx = name_idx if name_idx != -1 else 1
    cat_idx = cat_idx if cat_idx != -1 else 2
    required = max(id_idx, name_idx, cat_idx)

    for line in lines[1:]:
        cols = split_line(line, delimiter)
        if len(cols) <= required:
            continue

        product_id = _strip_quotes(cols[id_idx])
        if not product_id:
            continue

        # 重複IDは後の行で上書き
        catalog[product_id] = ProductCatalogEntry(
            id=product_id,
            product_name=cols[name_idx] or UNKNOWN_LABEL,
            category=cols[cat_idx] or UNKNOWN_LABEL,
        )

    return catalog


def parse_price_file(content, fallback_date, catalog=None):
    """
    日次価格ファイルを RawPriceRecord のリストに変換

    Args:
        content: ファイルの生テキスト
        fallback_date: ファイル名から得た日付（行に日付列がない場合に使用）
        catalog: parse_product_catalog の結果（任意）

    価格が0以下・解析不能な行は除外する。例外は送出しない。
    """
    records = []
    if not content:
        return records

    delimiter = detect_delimiter(content)
    lines = _content_lines(content)
    if len(lines) < 2:
        return records

    headers = [h.lower() for h in split_line(lines[0], delimiter)]

    product_idx = find_column(headers, PRODUCT_KEYWORDS)
    category_idx = find_column(headers, CATEGORY_KEYWORDS)
    price_idx = find_column(headers, PRICE_KEYWORDS)
    id_idx = find_column(headers, ID_KEYWORDS)
    date_idx = find_column(headers, DATE_KEYWORDS)

    skipped = 0
    for line in lines[1:]:
        cols = split_line(line, delimiter)
        if len(cols) < 2:
            skipped += 1
            continue

        # 価格
        if price_idx != -1 and _cell(cols, price_idx):
            price = parse_price(cols[price_idx])
        else:
            price = parse_price(_cell(cols, FALLBACK_PRICE_COLUMN))

        if price <= 0:
            skipped += 1
            continue

        # 商品名・カテゴリ（カタログ優先）
        product_name = DEFAULT_PRODUCT_NAME
        category_name = DEFAULT_CATEGORY
        entry = None

        if catalog and _cell(cols, id_idx):
            entry = catalog.get(_strip_quotes(cols[id_idx]))

        if entry is not None:
            product_name = entry.product_name
            category_name = entry.category
        else:
            product_name = _cell(cols, product_idx) or product_name
            category_name = _cell(cols, category_idx) or category_name

        # 行ごとの日付列があれば優先
        row_date = fallback_date
        date_cell = _cell(cols, date_idx)
        if date_cell and ('-' in date_cell or '/' in date_cell):
            row_date = date_cell
        row_date = normalize_record_date(row_date)

        records.append(RawPriceRecord(
            product=product_name,
            raw_category=category_name,
            price=price,
            date=row_date,
        ))

    if skipped:
        logger.debug("%s: skipped %d unusable rows", fallback_date, skipped)

    return records
