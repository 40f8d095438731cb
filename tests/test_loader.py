from __future__ import annotations

import pandas as pd
import pytest
import requests

from cpi_bolivia.data.loader import (
    DailyFile,
    GitHubPriceSource,
    fetch_city_records,
    load_cpi_dataset,
    load_product_catalog,
    select_files_to_process,
)
from cpi_bolivia.errors import CPIDataError
from tests.helpers import FakePriceSource


def _daily_files(start, end):
    return [
        DailyFile(name=f"{day:%Y-%m-%d}.csv", path=f"data/x/{day:%Y-%m-%d}.csv")
        for day in pd.date_range(start, end, freq="D")
    ]


def test_select_files_thins_history_and_keeps_recent_window():
    files = _daily_files("2024-01-01", "2025-03-31")

    selected = [f.name for f in select_files_to_process(files)]

    assert len(selected) == 60
    assert selected == sorted(selected)
    assert selected[0] == "2024-01-01.csv"
    # 過去分は月初の1ファイルのみ
    assert "2024-02-01.csv" in selected
    assert "2024-02-02.csv" not in selected
    # 前年同期比の基準ファイル
    assert "2024-03-31.csv" in selected
    assert selected[-45:] == [f.name for f in files[-45:]]


def test_select_files_small_and_empty_inputs():
    files = _daily_files("2025-01-01", "2025-01-03")

    assert select_files_to_process([]) == []
    assert [f.name for f in select_files_to_process(list(reversed(files)))] == [f.name for f in files]
    assert [f.name for f in select_files_to_process(files, recent_count=1)] == ["2025-01-01.csv", "2025-01-03.csv"]


def test_daily_file_date_and_locator():
    with_url = DailyFile(name="2025-01-02.csv", path="data/a/2025-01-02.csv", download_url="https://x/2025-01-02.csv")
    without_url = DailyFile(name="2025-01-02.csv", path="data/a/2025-01-02.csv")

    assert with_url.date == "2025-01-02"
    assert with_url.locator == "https://x/2025-01-02.csv"
    assert without_url.locator == "data/a/2025-01-02.csv"


def test_catalog_falls_back_through_candidate_paths():
    source = FakePriceSource(contents={
        "data/hipermaxi/productos.csv": "id,nombre,categoria\n",
        "data/productos.csv": "id,nombre,categoria\n1,Arroz,Abarrotes\n",
    })

    catalog = load_product_catalog(source)

    assert catalog["1"].product_name == "Arroz"
    assert source.fetched == ["data/hipermaxi/productos.csv", "data/productos.csv"]
    assert load_product_catalog(FakePriceSource()) is None


def test_failing_file_is_an_empty_day_and_siblings_still_load():
    files = [
        DailyFile(name=f"2025-01-0{i}.csv", path=f"data/a/2025-01-0{i}.csv")
        for i in (1, 2, 3)
    ]
    source = FakePriceSource(
        contents={
            "data/a/2025-01-01.csv": "producto,categoria,precio\nArroz,Abarrotes,10\n",
            "data/a/2025-01-03.csv": "producto,categoria,precio\nArroz,Abarrotes,11\n",
        },
        failing={"data/a/2025-01-02.csv"},
    )

    daily = fetch_city_records(source, files, concurrency=2)

    assert [len(records) for records in daily] == [1, 0, 1]
    assert daily[2][0].date == "2025-01-03"
    assert fetch_city_records(source, []) == []


def test_load_cpi_dataset_end_to_end(two_cities, food_basket):
    source = FakePriceSource(
        listings={"data/a": ["2025-01-02.csv", "2025-01-01.csv"]},
        contents={
            "data/a/2025-01-01.csv": "producto,categoria,precio\nArroz,Abarrotes,10\nFideo,Abarrotes,20\n",
            "data/a/2025-01-02.csv": "producto,categoria,precio\nArroz,Abarrotes,11\nFideo,Abarrotes,22\n",
        },
    )
    progress = []

    dataset = load_cpi_dataset(source, two_cities, food_basket, progress=progress.append)

    assert [p.index_value for p in dataset.points] == pytest.approx([100.0, 110.0])
    assert dataset.messages == ("No CSV files found for City B at path 'data/b'.",)
    assert progress == [
        "Loading product catalog...",
        "Scanning City A data...",
        "Processing 2 files for City A",
        "Scanning City B data...",
        "Aggregating National CPI...",
    ]


def test_load_cpi_dataset_without_any_data_raises(two_cities, food_basket):
    with pytest.raises(CPIDataError) as excinfo:
        load_cpi_dataset(FakePriceSource(), two_cities, food_basket)

    assert len(excinfo.value.messages) == 2


class StubResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.payload = payload
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class StubSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers, timeout))
        return self.response


def test_github_source_lists_only_csv_files_sorted():
    session = StubSession(StubResponse(payload=[
        {"name": "2025-01-02.csv", "path": "data/a/2025-01-02.csv", "download_url": "https://raw/2025-01-02.csv"},
        {"name": "README.md", "path": "data/a/README.md"},
        {"name": "2025-01-01.csv", "path": "data/a/2025-01-01.csv", "download_url": None},
    ]))
    source = GitHubPriceSource(owner="o", repo="r", branch="main", session=session, timeout=5)

    files = source.list_daily_files("data/a")

    assert [f.name for f in files] == ["2025-01-01.csv", "2025-01-02.csv"]
    assert files[0].locator == "data/a/2025-01-01.csv"
    assert files[1].locator == "https://raw/2025-01-02.csv"
    url, headers, timeout = session.calls[0]
    assert url == "https://api.github.com/repos/o/r/contents/data/a"
    assert headers == {"Accept": "application/vnd.github.v3+json"}
    assert timeout == 5


@pytest.mark.parametrize(
    "response",
    [
        StubResponse(status_code=404, payload={"message": "Not Found"}),
        StubResponse(payload={"message": "This is a file"}),
        StubResponse(payload=ValueError("no json")),
    ],
)
def test_github_source_listing_failures_yield_no_files(response):
    source = GitHubPriceSource(owner="o", repo="r", session=StubSession(response))

    assert source.list_daily_files("data/a") == []


def test_github_source_fetch_text_resolves_repo_paths():
    session = StubSession(StubResponse(text="id,nombre\n"))
    source = GitHubPriceSource(owner="o", repo="r", branch="main", session=session)

    assert source.fetch_text("data/productos.csv") == "id,nombre\n"
    assert source.fetch_text("https://example.org/x.csv") == "id,nombre\n"
    assert [call[0] for call in session.calls] == [
        "https://raw.githubusercontent.com/o/r/main/data/productos.csv",
        "https://example.org/x.csv",
    ]

    failing = GitHubPriceSource(owner="o", repo="r", session=StubSession(StubResponse(status_code=500)))
    assert failing.fetch_text("data/productos.csv") is None
