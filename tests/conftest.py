"""Pytest fixtures: small alternate taxonomies and city tables."""

from __future__ import annotations

import pytest

from cpi_bolivia.config.settings import BasketConfig, CityConfig


@pytest.fixture
def food_basket() -> BasketConfig:
    return BasketConfig(
        category_mapping={"Abarrotes": "Alimentos y Bebidas"},
        category_weights={"Alimentos y Bebidas": 1.0},
    )


@pytest.fixture
def two_cities() -> tuple[CityConfig, ...]:
    return (
        CityConfig(id="a", name="City A", path="data/a", weight=0.4),
        CityConfig(id="b", name="City B", path="data/b", weight=0.6),
    )
