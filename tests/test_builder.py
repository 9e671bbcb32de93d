import pytest

from carparts.query import (
    ConfigurationError, FilterRequest, InvalidFilterError, InvalidRangeError,
    InvalidSortError, build_search,
)
from carparts.query.operators import like_pattern


def listing_request(**kwargs):
    return FilterRequest(entity_type="listing", **kwargs)


def where_of(sql):
    start = sql.index(" WHERE ")
    end = sql.index(" ORDER BY ") if " ORDER BY " in sql else len(sql)
    return sql[start:end]


def test_brake_search_scenario():
    built = build_search(listing_request(
        search_term="brake",
        field_filters={"condition": "good", "maxPrice": 50},
        page=2,
        limit=10,
    ))

    assert where_of(built.sql) == (
        " WHERE l.status = 'active' AND l.condition = $1 AND l.price_usd <= $2"
        " AND (l.name ILIKE $3 OR l.description ILIKE $3)"
    )
    assert built.sql.endswith(" ORDER BY l.created_date DESC, l.id DESC LIMIT $4 OFFSET $5")
    assert built.params == ["good", 50, "%brake%", 10, 10]
    assert built.count_params == ["good", 50, "%brake%"]
    assert built.page == 2
    assert built.limit == 10


def test_count_query_shares_filters_without_ordering_or_paging():
    built = build_search(listing_request(search_term="pad", field_filters={"brandId": 3}))

    assert built.count_sql.startswith("SELECT COUNT(*) AS count FROM product_listings l")
    assert where_of(built.count_sql) == where_of(built.sql)
    assert "ORDER BY" not in built.count_sql
    assert "LIMIT" not in built.count_sql
    assert "OFFSET" not in built.count_sql
    assert built.params[:len(built.count_params)] == built.count_params


def test_same_request_is_deterministic_regardless_of_key_order():
    first = build_search(listing_request(
        search_term="rotor",
        field_filters={"maxPrice": 100, "brandId": 2, "condition": "fair", "location": "Austin"},
    ))
    second = build_search(listing_request(
        search_term="rotor",
        field_filters={"location": "Austin", "condition": "fair", "brandId": 2, "maxPrice": 100},
    ))

    assert first.sql == second.sql
    assert first.count_sql == second.count_sql
    assert first.params == second.params
    assert first.count_params == second.count_params


def test_user_values_never_reach_sql_text():
    payload = "' OR 1=1 --"
    built = build_search(listing_request(
        search_term=payload,
        field_filters={"location": payload},
        sort_by="name",
    ))

    assert payload not in built.sql
    assert payload not in built.count_sql
    assert "OR 1=1" not in built.sql
    assert f"%{payload}%" in built.params


def test_listing_brand_model_category_filter_through_the_part():
    built = build_search(listing_request(field_filters={"brandId": 1, "modelId": 2, "categoryId": 3}))

    assert "LEFT JOIN car_parts p ON l.car_part_id = p.id" in built.sql
    assert "p.car_part_category_id = $1 AND p.car_brand_id = $2 AND p.car_model_id = $3" in built.sql
    assert "l.car_brand_id" not in built.sql
    assert built.params[:3] == [3, 1, 2]


def test_all_joins_are_left_joins():
    for entity_type in ("listing", "part", "model"):
        built = build_search(FilterRequest(entity_type=entity_type))
        assert " JOIN " in built.sql
        assert built.sql.count(" JOIN ") == built.sql.count(" LEFT JOIN ")


def test_default_status_is_active_only_when_not_given():
    default = build_search(listing_request())
    assert "l.status = 'active'" in default.sql
    assert default.count_params == []

    explicit = build_search(listing_request(field_filters={"status": "sold"}))
    assert "l.status = 'active'" not in explicit.sql
    assert "l.status = $1" in explicit.sql
    assert explicit.params[0] == "sold"


def test_none_filter_values_are_ignored():
    built = build_search(listing_request(field_filters={"status": None, "minPrice": None, "condition": "new"}))

    assert "l.status = 'active'" in built.sql
    assert "price_usd" not in where_of(built.sql)
    assert built.count_params == ["new"]


def test_price_bounds_are_inclusive():
    built = build_search(listing_request(field_filters={"minPrice": 10, "maxPrice": 10}))

    assert "l.price_usd >= $1 AND l.price_usd <= $2" in built.sql
    assert built.count_params == [10, 10]


def test_numeric_strings_are_coerced():
    built = build_search(listing_request(field_filters={"minPrice": "12.5", "userId": "7"}))

    assert built.count_params == [7, 12.5]


def test_unknown_filter_key_is_rejected():
    with pytest.raises(InvalidFilterError) as exc_info:
        build_search(listing_request(field_filters={"bogus": "x"}))
    assert exc_info.value.key == "bogus"
    assert "bogus" in str(exc_info.value)


def test_filter_key_from_another_entity_is_rejected():
    with pytest.raises(InvalidFilterError) as exc_info:
        build_search(FilterRequest(entity_type="part", field_filters={"location": "Austin"}))
    assert exc_info.value.key == "location"


@pytest.mark.parametrize("filters, key", [
    ({"condition": "mint"}, "condition"),
    ({"status": "AVAILABLE"}, "status"),
    ({"minPrice": "cheap"}, "minPrice"),
    ({"maxPrice": True}, "maxPrice"),
    ({"brandId": "1; DROP TABLE users"}, "brandId"),
    ({"brandId": "²"}, "brandId"),
    ({"modelId": "١٢"}, "modelId"),
    ({"userId": "9" * 5000}, "userId"),
    ({"brandId": 2 ** 64}, "brandId"),
    ({"location": "   "}, "location"),
])
def test_bad_filter_values_are_rejected(filters, key):
    with pytest.raises(InvalidFilterError) as exc_info:
        build_search(listing_request(field_filters=filters))
    assert exc_info.value.key == key


def test_sort_key_outside_allow_list_is_rejected():
    with pytest.raises(InvalidSortError):
        build_search(listing_request(sort_by="DROP TABLE users;"))


def test_raw_column_name_is_not_a_sort_key():
    with pytest.raises(InvalidSortError):
        build_search(listing_request(sort_by="price_usd"))


def test_bad_sort_order_is_rejected():
    with pytest.raises(InvalidSortError):
        build_search(listing_request(sort_order="sideways"))


def test_sort_key_and_order_resolve_to_columns():
    built = build_search(listing_request(sort_by="price", sort_order="ASC"))

    assert " ORDER BY l.price_usd ASC, l.id ASC " in built.sql


def test_contradictory_price_range_is_rejected():
    with pytest.raises(InvalidRangeError):
        build_search(listing_request(field_filters={"minPrice": 100, "maxPrice": 50}))


def test_unknown_entity_type_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        build_search(FilterRequest(entity_type="invoice"))


def test_unknown_dialect_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        build_search(listing_request(), dialect="oracle")


@pytest.mark.parametrize("page, limit, expected_page, expected_limit, offset", [
    (None, None, 1, 20, 0),
    (0, 0, 1, 1, 0),
    (-3, -5, 1, 1, 0),
    (3, 500, 3, 100, 200),
    (4, 25, 4, 25, 75),
])
def test_pagination_is_clamped(page, limit, expected_page, expected_limit, offset):
    built = build_search(listing_request(page=page, limit=limit))

    assert built.page == expected_page
    assert built.limit == expected_limit
    assert built.params[-2:] == [expected_limit, offset]


def test_entity_without_filters_omits_where():
    built = build_search(FilterRequest(entity_type="brand", sort_by="name", sort_order="asc"))

    assert " WHERE " not in built.sql
    assert built.count_sql == "SELECT COUNT(*) AS count FROM car_brands b"
    assert built.sql == (
        "SELECT b.id, b.name, b.created_date FROM car_brands b"
        " ORDER BY b.name ASC, b.id ASC LIMIT $1 OFFSET $2"
    )


def test_blank_search_term_is_ignored():
    built = build_search(FilterRequest(entity_type="category", search_term="   "))

    assert " WHERE " not in built.sql


def test_model_year_binds_one_value_for_the_whole_span():
    built = build_search(FilterRequest(entity_type="model", field_filters={"year": 2005, "brandId": 1}))

    assert (
        "m.car_brand_id = $1 AND (m.years_start <= $2 AND (m.years_end IS NULL OR m.years_end >= $2))"
        in built.sql
    )
    assert built.count_params == [1, 2005]


def test_search_never_targets_id_or_numeric_columns():
    built = build_search(FilterRequest(entity_type="part", search_term="123"))
    search_clause = where_of(built.sql)

    assert search_clause == " WHERE (p.name ILIKE $1 OR p.description ILIKE $1)"


def test_sqlite_dialect_uses_like_with_escape():
    built = build_search(listing_request(search_term="pad", field_filters={"location": "Austin"}), dialect="sqlite")

    assert "l.location LIKE $1 ESCAPE '\\'" in built.sql
    assert "(l.name LIKE $2 ESCAPE '\\' OR l.description LIKE $2 ESCAPE '\\')" in built.sql
    assert "ILIKE" not in built.sql


def test_like_pattern_escapes_metacharacters():
    assert like_pattern("brake") == "%brake%"
    assert like_pattern("100%") == "%100\\%%"
    assert like_pattern("a_b") == "%a\\_b%"
    assert like_pattern("c:\\") == "%c:\\\\%"
