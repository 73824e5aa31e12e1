import pytest

from storage.query_builder import DEFAULT_LIMIT, PropertySearch, build_property_search, to_minor_units


def test_no_filters_has_no_where_or_having():
    query = build_property_search(PropertySearch())

    assert "WHERE" not in query.text
    assert "HAVING" not in query.text
    assert query.params == [DEFAULT_LIMIT]
    assert query.text.rstrip().endswith("LIMIT $1;")


def test_missing_criteria_and_limit_use_defaults():
    query = build_property_search()

    assert query.params == [10]


def test_owner_only_search_starts_with_where():
    query = build_property_search(PropertySearch(owner_id=7), limit=3)

    assert "WHERE owner_id = $1" in query.text
    assert "AND owner_id" not in query.text
    assert query.params == [7, 3]


def test_minimum_price_is_bound_in_cents():
    query = build_property_search(PropertySearch(minimum_price_per_night=50))

    assert "WHERE cost_per_night >= $1" in query.text
    assert query.params[0] == 5000


def test_price_range_joins_predicates_with_and():
    query = build_property_search(
        PropertySearch(city="Van", minimum_price_per_night=50, maximum_price_per_night=120.5)
    )

    assert "WHERE city LIKE $1 AND cost_per_night >= $2 AND cost_per_night <= $3" in query.text
    assert query.params == ["%Van%", 5000, 12050, DEFAULT_LIMIT]


def test_minimum_rating_goes_to_having_after_group_by():
    query = build_property_search(PropertySearch(owner_id=2, minimum_rating=3.5))

    having_at = query.text.index("HAVING AVG(property_reviews.rating) >= $2")
    assert having_at > query.text.index("GROUP BY properties.id")
    where_clause = query.text[query.text.index("WHERE"):query.text.index("GROUP BY")]
    assert "rating" not in where_clause


def test_limit_is_always_the_last_parameter():
    combos = [
        PropertySearch(),
        PropertySearch(city="a"),
        PropertySearch(owner_id=1, minimum_rating=2),
        PropertySearch(city="a", owner_id=1, minimum_price_per_night=1, maximum_price_per_night=2, minimum_rating=3),
    ]
    for criteria in combos:
        query = build_property_search(criteria, limit=42)
        assert query.params[-1] == 42
        assert f"LIMIT ${len(query.params)};" in query.text


def test_city_and_rating_scenario():
    criteria = PropertySearch.from_mapping({"city": "van", "minimum_rating": 4})
    query = build_property_search(criteria, limit=5)

    assert query.params == ["%van%", 4, 5]
    assert "WHERE city LIKE $1" in query.text
    assert "GROUP BY properties.id" in query.text
    assert "HAVING AVG(property_reviews.rating) >= $2" in query.text
    assert "ORDER BY cost_per_night" in query.text
    assert "LIMIT $3" in query.text


def test_falsy_criteria_are_ignored():
    query = build_property_search(PropertySearch(city="", owner_id=0, minimum_price_per_night=0))

    assert query.params == [DEFAULT_LIMIT]


def test_from_mapping_coerces_query_string_values():
    criteria = PropertySearch.from_mapping(
        {"owner_id": "12", "maximum_price_per_night": "99.99", "minimum_rating": "", "unknown": "x"}
    )

    assert criteria == PropertySearch(owner_id=12, maximum_price_per_night=99.99)
    assert build_property_search(criteria).params == [12, 9999, DEFAULT_LIMIT]


def test_non_positive_limit_is_rejected():
    with pytest.raises(ValueError):
        build_property_search(PropertySearch(), limit=0)


def test_to_minor_units_rounds_to_whole_cents():
    assert to_minor_units("19.99") == 1999
    assert to_minor_units(0.1) == 10


@pytest.mark.parametrize("raw", ["inf", "-inf", "nan"])
def test_non_finite_criteria_are_rejected(raw):
    with pytest.raises(ValueError):
        PropertySearch.from_mapping({"minimum_price_per_night": raw})
    with pytest.raises(ValueError):
        to_minor_units(raw)


def test_non_finite_rating_is_not_bound():
    with pytest.raises(ValueError):
        build_property_search(PropertySearch(minimum_rating=float("nan")))
