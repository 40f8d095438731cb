"""Test doubles and small helpers shared across test modules.

``FakePriceSource`` stands in for the GitHub retrieval layer: directory
listings and file contents are served from in-memory dictionaries, and any
locator listed in ``failing`` raises to simulate a broken download.
"""

from __future__ import annotations

import textwrap

from cpi_bolivia.data.loader import DailyFile, PriceSource


def dedent_csv(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


class FakePriceSource(PriceSource):
    def __init__(self, listings=None, contents=None, failing=()):
        self.listings = listings or {}
        self.contents = contents or {}
        self.failing = set(failing)
        self.fetched: list[str] = []

    def list_daily_files(self, city_path):
        return [
            DailyFile(name=name, path=f"{city_path}/{name}", download_url=f"{city_path}/{name}")
            for name in sorted(self.listings.get(city_path, []))
        ]

    def fetch_text(self, locator):
        self.fetched.append(locator)
        if locator in self.failing:
            raise RuntimeError(f"boom: {locator}")
        return self.contents.get(locator)
