"""
CPI Data Loader Module
GitHubリポジトリからの日次価格ファイル・商品カタログの取得
"""

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import pandas as pd
import requests

from ..analysis.pipeline import build_cpi_dataset
from ..config.settings import (
    CATALOG_PATHS,
    CITIES,
    DEFAULT_BASKET,
    FETCH_SETTINGS,
    GITHUB_SETTINGS,
)
from ..logging_setup import get_logger
from .parser import parse_price_file, parse_product_catalog

logger = get_logger(__name__)


@dataclass(frozen=True)
class DailyFile:
    """日次価格ファイル（ファイル名は YYYY-MM-DD.csv）"""
    name: str
    path: str
    download_url: str = ""

    @property
    def date(self):
        return os.path.splitext(self.name)[0]

    @property
    def locator(self):
        return self.download_url or self.path


class PriceSource:
    """日次ファイル一覧とテキスト取得のインターフェース"""

    def list_daily_files(self, city_path):
        raise NotImplementedError

    def fetch_text(self, locator):
        raise NotImplementedError


class GitHubPriceSource(PriceSource):
    """GitHub contents API と raw.githubusercontent.com を使うデータソース"""

    def __init__(self, owner=None, repo=None, branch=None, session=None, timeout=None):
        self.owner = owner or GITHUB_SETTINGS["owner"]
        self.repo = repo or GITHUB_SETTINGS["repo"]
        self.branch = branch or GITHUB_SETTINGS["branch"]
        self.session = session or requests.Session()
        self.timeout = timeout or FETCH_SETTINGS["request_timeout"]

    def contents_url(self, path):
        return f"{GITHUB_SETTINGS['api_base']}/repos/{self.owner}/{self.repo}/contents/{path}"

    def raw_url(self, path):
        return f"{GITHUB_SETTINGS['raw_base']}/{self.owner}/{self.repo}/{self.branch}/{path}"

    def list_daily_files(self, city_path):
        """ディレクトリ内のCSVファイル一覧（名前順）。取得失敗時は空リスト"""
        try:
            response = self.session.get(
                self.contents_url(city_path),
                headers={'Accept': 'application/vnd.github.v3+json'},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Directory request failed for %s: %s", city_path, e)
            return []

        if not isinstance(data, list):
            return []

        files = [
            DailyFile(
                name=item['name'],
                path=item.get('path') or f"{city_path}/{item['name']}",
                download_url=item.get('download_url') or "",
            )
            for item in data
            if isinstance(item, dict) and str(item.get('name', '')).endswith('.csv')
        ]
        return sorted(files, key=lambda f: f.name)

    def fetch_text(self, locator):
        """ファイル内容を取得（URLまたはリポジトリ内パス）。取得失敗時はNone"""
        url = locator if locator.startswith(('http://', 'https://')) else self.raw_url(locator)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Failed to fetch %s: %s", locator, e)
            return None
        return response.text


def _closest_to_year_ago(sorted_files):
    """最新ファイルのちょうど1年前に最も近いファイル"""
    latest = pd.to_datetime(sorted_files[-1].date, errors='coerce')
    if pd.isna(latest):
        logger.warning("Could not determine YoY target date from %s", sorted_files[-1].name)
        return None

    target = latest - pd.DateOffset(years=1)
    closest = None
    min_diff = None
    for file in sorted_files:
        ts = pd.to_datetime(file.date, errors='coerce')
        if pd.isna(ts):
            continue
        diff = abs(ts - target)
        if min_diff is None or diff < min_diff:
            min_diff = diff
            closest = file
    return closest


def select_files_to_process(files, recent_count=None):
    """
    取得するファイルを間引いて選択

    1. 最初のファイル（基準期間）
    2. 過去分は月ごとに1ファイル
    3. 直近 recent_count ファイルはすべて
    4. 最新ファイルの1年前に最も近いファイル（前年同期比用）
    """
    if not files:
        return []

    if recent_count is None:
        recent_count = FETCH_SETTINGS["recent_file_count"]

    sorted_files = sorted(files, key=lambda f: f.name)
    selected = [sorted_files[0]]
    seen_months = {sorted_files[0].name[:7]}  # YYYY-MM

    cutoff = max(1, len(sorted_files) - recent_count)
    for file in sorted_files[1:cutoff]:
        month = file.name[:7]
        if month not in seen_months:
            selected.append(file)
            seen_months.add(month)

    selected.extend(sorted_files[cutoff:])

    anchor = _closest_to_year_ago(sorted_files)
    if anchor is not None:
        selected.append(anchor)

    unique = {file.name: file for file in selected}
    return [unique[name] for name in sorted(unique)]


def load_product_catalog(source, paths=CATALOG_PATHS):
    """商品カタログを候補パスから順に読み込む。見つからなければNone"""
    for path in paths:
        content = source.fetch_text(path)
        if not content:
            continue
        catalog = parse_product_catalog(content)
        if catalog:
            logger.info("Loaded product map from %s: %d items", path, len(catalog))
            return catalog

    logger.warning("Could not load productos.csv. Categories will be inferred from raw files if possible.")
    return None


def _fetch_and_parse(source, file, catalog):
    content = source.fetch_text(file.locator)
    if not content:
        return []
    return parse_price_file(content, file.date, catalog)


def fetch_city_records(source, files, catalog=None, concurrency=None):
    """
    ファイルを並列に取得・解析し、ファイル順のレコードリストを返す

    個々のファイルの失敗は空の日として扱い、他のファイルの取得は続行する。
    """
    if not files:
        return []

    workers = concurrency or FETCH_SETTINGS["concurrency"]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_fetch_and_parse, source, file, catalog) for file in files]

        daily_records = []
        for file, future in zip(files, futures):
            try:
                daily_records.append(future.result())
            except Exception as e:
                logger.warning("Failed to process %s: %s", file.name, e)
                daily_records.append([])

    return daily_records


def _notify(progress, message):
    logger.info(message)
    if progress is not None:
        progress(message)


def load_cpi_dataset(source=None, cities=CITIES, basket=DEFAULT_BASKET, progress=None):
    """
    全都市のデータを取得して全国CPIデータセットを作成

    Args:
        source: PriceSource（省略時は GitHubPriceSource）
        progress: 進捗メッセージを受け取る関数（任意）

    Raises:
        CPIDataError: どの都市からも指数を算出できなかった場合
    """
    source = source or GitHubPriceSource()

    _notify(progress, "Loading product catalog...")
    catalog = load_product_catalog(source)

    city_records = {}
    for city in cities:
        _notify(progress, f"Scanning {city.name} data...")
        all_files = source.list_daily_files(city.path)
        if not all_files:
            city_records[city.id] = []
            continue

        files = select_files_to_process(all_files)
        _notify(progress, f"Processing {len(files)} files for {city.name}")
        city_records[city.id] = fetch_city_records(source, files, catalog)

    _notify(progress, "Aggregating National CPI...")
    return build_cpi_dataset(city_records, cities, basket)
