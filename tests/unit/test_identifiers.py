import pytest

from querybridge.packages.common.querybridge_common.errors import InvalidIdentifier
from querybridge.packages.federation.planner.identifiers import (
    check_collection,
    check_literal,
    check_project,
    check_table_column,
    continuous_query_table,
    materialized_view_table,
    quote_identifier,
)


def test_check_project_quotes_with_default_separator() -> None:
    assert check_project("acme") == '"acme"'


def test_check_collection_uses_given_separator() -> None:
    assert check_collection("page_views", "`") == "`page_views`"


@pytest.mark.parametrize("separator", ['"', "`"])
@pytest.mark.parametrize(
    "name",
    ['page"views', "page`views", "page'views", "$materialized_daily", "$view_daily", "$VIEW_daily", ""],
)
def test_check_collection_rejects_unsafe_names(name: str, separator: str) -> None:
    with pytest.raises(InvalidIdentifier):
        check_collection(name, separator)


@pytest.mark.parametrize("name", ["acme-corp", "acme.corp", "ac me", ""])
def test_check_project_rejects_names_outside_allow_list(name: str) -> None:
    with pytest.raises(InvalidIdentifier):
        check_project(name)


def test_check_table_column_allows_dollar_columns() -> None:
    assert check_table_column("$server_time") == '"$server_time"'


def test_check_table_column_rejects_quotes() -> None:
    with pytest.raises(InvalidIdentifier):
        check_table_column('x" from secrets --')


def test_prefixed_tables_validate_the_user_supplied_part() -> None:
    assert continuous_query_table("daily_totals") == '"$view_daily_totals"'
    assert materialized_view_table("weekly") == '"$materialized_weekly"'
    with pytest.raises(InvalidIdentifier):
        continuous_query_table('daily"; drop table x; --')


def test_quote_identifier_doubles_embedded_separator() -> None:
    assert quote_identifier('a"b') == '"a""b"'
    assert quote_identifier("a`b", "`") == "`a``b`"


def test_check_literal_escapes_single_quotes() -> None:
    assert check_literal("o'brien") == "o''brien"


def test_identifiers_over_length_limit_are_rejected() -> None:
    with pytest.raises(InvalidIdentifier):
        check_collection("a" * 251)
