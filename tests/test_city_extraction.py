from __future__ import annotations

import pytest

from weatherdesk.core.weather.cities import extract_city_from_message, find_city, list_cities, normalize_city


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("какая погода в москве", "Москва"),
        ("Какая погода в Риге?", "Рига"),
        ("в Париже погода хорошая", "Париж"),
        ("What is the weather in London?", "Лондон"),
        ("Лондон погода", "Лондон"),
        ("как там в питере", "Санкт-Петербург"),
        ("что с погодой в Берлине", "Берлин"),
        ("Москва", "Москва"),
        ("tokyo", "Токио"),
    ],
)
def test_extract_city_from_message(message: str, expected: str) -> None:
    assert extract_city_from_message(message) == expected


def test_extract_city_returns_none_without_city() -> None:
    assert extract_city_from_message("привет, как дела") is None


def test_unknown_city_in_pattern_is_capitalized() -> None:
    assert extract_city_from_message("погода в урюпинске") == "Урюпинске"


def test_normalize_city_passes_unmatched_input_through() -> None:
    assert normalize_city("  Gotham  ") == "Gotham"


def test_find_city_is_alias_aware() -> None:
    moscow = find_city("moscow")

    assert moscow is not None
    assert moscow.name == "Москва"
    assert find_city("МОСКВА") == moscow
    assert find_city("Атлантида") is None


def test_list_cities_contains_canonical_names() -> None:
    cities = list_cities()

    assert "Москва" in cities
    assert "Рига" in cities
    assert len(cities) == len(set(cities))
