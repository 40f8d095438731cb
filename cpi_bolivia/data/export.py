"""
CPI Export Module
エクスポート用データ（CSV・算出方法テキスト）の作成
"""

import pandas as pd

from ..config.settings import CITIES, DEFAULT_BASKET, GITHUB_SETTINGS


def prepare_export_data(dataset, cities=CITIES):
    """全国指数・前月比・都市別指数のエクスポート用DataFrame"""
    columns = ['Date', 'National CPI', 'Inflation MoM%'] + [city.name for city in cities]

    rows = []
    for point in dataset.points:
        row = {
            'Date': point.date,
            'National CPI': round(point.index_value, 2),
            'Inflation MoM%': round(point.mom_inflation_pct, 2),
        }
        for city in cities:
            value = point.city_index_values.get(city.name)
            row[city.name] = round(value, 2) if value else ''
        rows.append(row)

    return pd.DataFrame(rows, columns=columns)


def build_methodology_text(cities=CITIES, basket=DEFAULT_BASKET):
    """算出方法の説明テキスト"""
    lines = [
        "BOLIVIA CPI TRACKER - METHODOLOGY & DATA STRUCTURE",
        "=================================================",
        "",
        "1. DATA SOURCE",
        "--------------",
        "This tracker uses daily scraping data from Hipermaxi supermarkets in three cities:",
    ]
    lines.extend(f"- {city.name} (Source: {city.path})" for city in cities)
    lines.append(f"Repository: https://github.com/{GITHUB_SETTINGS['owner']}/{GITHUB_SETTINGS['repo']}")
    lines.append("")

    lines.extend([
        "2. CALCULATION PIPELINE",
        "-----------------------",
        "Step A: Product Cleaning & Mapping",
        "Raw product IDs are matched against a static product dictionary.",
        "Products are assigned to standard supermarket categories, then mapped to Official Government Categories (see Section 5).",
        "",
        "Step B: Geometric Mean Aggregation",
        "For every day and every category, we calculate the Geometric Mean of all available product prices.",
        "Formula: exp( mean( log(price_i) ) )",
        "",
        "Step C: Weighted Basket Construction",
        "Category averages are weighted according to their official importance in the Bolivian consumer basket.",
        "These weights are rescaled to sum to 100% for the specific subset of goods tracked.",
        "",
        "Step D: National Composite Index",
        "The National CPI is a weighted average of the city indices.",
        "",
        "3. CITY WEIGHTS (National Aggregation)",
        "--------------------------------------",
    ])
    lines.extend(f"{city.name}: {city.weight * 100:.2f}%" for city in cities)
    lines.append("")

    lines.extend([
        "4. CATEGORY WEIGHTS (Rescaled for Basket)",
        "-----------------------------------------",
    ])
    lines.extend(f"{category}: {weight * 100:.1f}%" for category, weight in basket.category_weights.items())
    lines.append("")

    lines.extend([
        "5. CATEGORY MAPPING (Supermarket -> Official)",
        "---------------------------------------------",
        "Raw Category                  | Official Category",
        "------------------------------|------------------",
    ])
    lines.extend(f"{raw.ljust(30)} | {official}" for raw, official in basket.category_mapping.items())

    return "\n".join(lines)
