from __future__ import annotations

import pytest

from cpi_bolivia.analysis.contribution import (
    get_latest_contribution_summary,
    latest_category_contributions,
)
from cpi_bolivia.analysis.national import (
    aggregate_national_index,
    combine_city_indices,
    compute_yoy_inflation,
    compute_yoy_series,
    find_year_ago_point,
)
from cpi_bolivia.config.settings import CityConfig
from cpi_bolivia.data.models import CityIndexPoint, DayStatus, NationalIndexPoint


def _point(date, value, contributions=None):
    status = DayStatus.VALID if value > 0 else DayStatus.NO_DATA
    return CityIndexPoint(date=date, index_value=value, category_contributions=contributions or {}, status=status)


def _lookup(**series):
    return {city_id: {p.date: p for p in points} for city_id, points in series.items()}


def test_full_coverage_is_plain_weighted_sum(two_cities):
    lookup = _lookup(a=[_point("2025-01-01", 100.0)], b=[_point("2025-01-01", 200.0)])

    national, city_values = combine_city_indices("2025-01-01", lookup, two_cities)

    assert national == pytest.approx(160.0)
    assert city_values == {"City A": 100.0, "City B": 200.0}


def test_weight_sum_just_under_one_is_not_rescaled():
    cities = (
        CityConfig(id="a", name="A", path="a", weight=0.4),
        CityConfig(id="b", name="B", path="b", weight=0.5995),
    )
    lookup = _lookup(a=[_point("2025-01-01", 100.0)], b=[_point("2025-01-01", 200.0)])

    national, _ = combine_city_indices("2025-01-01", lookup, cities)

    assert national == pytest.approx(40.0 + 119.9)


def test_partial_coverage_is_renormalized_by_used_weight():
    cities = (
        CityConfig(id="a", name="A", path="a", weight=0.5),
        CityConfig(id="b", name="B", path="b", weight=0.4),
        CityConfig(id="c", name="C", path="c", weight=0.1),
    )
    lookup = _lookup(
        a=[_point("2025-01-01", 100.0)],
        b=[_point("2025-01-01", 200.0)],
        c=[_point("2025-01-02", 150.0)],
    )

    national, city_values = combine_city_indices("2025-01-01", lookup, cities)

    assert national == pytest.approx((100.0 * 0.5 + 200.0 * 0.4) / 0.9)
    assert set(city_values) == {"A", "B"}


def test_aggregate_skips_no_data_days_and_renormalizes(two_cities):
    series = {
        "a": [_point("2025-01-01", 100.0), _point("2025-01-02", 0.0), _point("2025-01-03", 110.0)],
        "b": [_point("2025-01-01", 100.0), _point("2025-01-02", 120.0), _point("2025-01-03", 120.0)],
        "ignored": [_point("2024-12-31", 500.0)],
    }

    dataset = aggregate_national_index(series, two_cities)

    assert [p.date for p in dataset.points] == ["2025-01-01", "2025-01-02", "2025-01-03"]
    assert [p.index_value for p in dataset.points] == pytest.approx([100.0, 120.0, 116.0])
    assert dataset.points[1].city_index_values == {"City B": 120.0}
    assert dataset.points[1].mom_inflation_pct == pytest.approx(20.0)
    assert dataset.current_mom_inflation == pytest.approx((116.0 - 120.0) / 120.0 * 100)
    assert dataset.most_recent_date == "2025-01-03"
    assert dataset.current_index_value == pytest.approx(116.0)
    assert set(dataset.city_series) == {"City A", "City B"}
    assert dataset.messages == ()


def test_aggregate_without_valid_points_returns_empty_dataset(two_cities):
    dataset = aggregate_national_index({"a": [_point("2025-01-01", 0.0)]}, two_cities)

    assert dataset.points == ()
    assert dataset.current_index_value == 0.0
    assert dataset.latest_point is None
    assert dataset.to_frame().empty
    assert set(dataset.city_series) == {"City A"}


def test_dataset_frames(two_cities):
    series = {
        "a": [_point("2025-01-01", 100.0), _point("2025-01-02", 0.0)],
        "b": [_point("2025-01-01", 100.0), _point("2025-01-02", 105.0)],
    }

    dataset = aggregate_national_index(series, two_cities)
    df = dataset.to_frame()
    city_a = dataset.city_frame("City A")

    assert list(df["cpi"]) == pytest.approx([100.0, 105.0])
    assert "City B" in df.columns
    assert str(df["DATE"].dtype).startswith("datetime64")
    assert list(city_a["valid"]) == [True, False]
    assert dataset.city_frame("Nowhere").empty


def _national(date, value):
    return NationalIndexPoint(date=date, index_value=value)


def test_yoy_accepts_anchor_exactly_seven_days_away():
    points = [_national("2024-01-08", 100.0), _national("2025-01-01", 110.0)]

    assert compute_yoy_inflation(points) == pytest.approx(10.0)


def test_yoy_rejects_anchor_eight_days_away():
    points = [_national("2024-01-09", 100.0), _national("2025-01-01", 110.0)]

    assert find_year_ago_point(points, "2025-01-01") is None
    assert compute_yoy_inflation(points) == 0.0


def test_yoy_uses_closest_anchor_and_first_on_ties():
    closest = [_national("2023-12-28", 90.0), _national("2024-01-03", 100.0), _national("2025-01-01", 110.0)]
    tied = [_national("2023-12-30", 50.0), _national("2024-01-03", 100.0), _national("2025-01-01", 110.0)]

    assert compute_yoy_inflation(closest) == pytest.approx(10.0)
    assert find_year_ago_point(tied, "2025-01-01").date == "2023-12-30"


def test_yoy_short_history_and_empty_input():
    assert compute_yoy_inflation([]) == 0.0
    assert compute_yoy_inflation([_national("2025-01-01", 100.0)]) == 0.0


def test_yoy_series_uses_wider_tolerance():
    points = [
        _national("2024-01-01", 100.0),
        _national("2024-06-01", 105.0),
        _national("2025-01-10", 110.0),
    ]

    df = compute_yoy_series(points)

    assert list(df["date"]) == ["2025-01-10"]
    assert df["yoy"].iloc[0] == pytest.approx(10.0)
    assert compute_yoy_series(points[:2]).empty


def test_latest_category_contributions_weighted_by_city(two_cities):
    series = {
        "a": [_point("2025-01-01", 100.0, {"X": 60.0, "Y": 40.0})],
        "b": [_point("2025-01-01", 100.0, {"X": 50.0, "Y": 50.0})],
    }

    contributions = latest_category_contributions(series, "2025-01-01", two_cities)

    assert contributions == {"X": pytest.approx(54.0), "Y": pytest.approx(46.0)}


def test_latest_category_contributions_missing_city_is_not_rescaled(two_cities):
    series = {"a": [_point("2025-01-01", 100.0, {"X": 100.0})]}

    assert latest_category_contributions(series, "2025-01-01", two_cities) == {"X": pytest.approx(40.0)}


def test_contribution_summary_is_sorted_with_shares():
    summary = get_latest_contribution_summary({"Recreación y Cultura": 10.0, "Alimentos y Bebidas": 30.0})

    assert list(summary) == ["Alimentos y Bebidas", "Recreación y Cultura"]
    assert summary["Alimentos y Bebidas"]["share"] == pytest.approx(75.0)
    assert summary["Alimentos y Bebidas"]["weight"] == pytest.approx(0.577)
    assert get_latest_contribution_summary({}) == {}
