"""Tests for the order builder and in-memory sorting."""

from dataclasses import dataclass

import pytest

from headless_datatables import ColumnSpec, DataTablesOptions, Diagnostics, OrderSpec, SortDirection, TableRequest, resolve
from headless_datatables.expressions import sort_rows
from headless_datatables.ordering import build_order

from .models import Employee, Item, Person, Product


@dataclass
class Untitled:
    code: str


def request_for(columns, order):
    return TableRequest(
        columns=[column if isinstance(column, ColumnSpec) else ColumnSpec(data=column) for column in columns],
        order=[OrderSpec(column=index, dir=direction) for index, direction in order],
    )


class TestBuildOrder:
    def test_entries_in_priority_order(self):
        keys = build_order(resolve(Person), request_for(["lastName", "age"], [(1, "desc"), (0, "asc")]))

        assert [(key.accessor.name, key.direction) for key in keys] == [
            ("age", SortDirection.DESCENDING),
            ("last_name", SortDirection.ASCENDING),
        ]

    def test_out_of_range_index_is_skipped(self):
        diagnostics = Diagnostics()

        keys = build_order(resolve(Person), request_for(["age"], [(3, "asc"), (-1, "asc"), (0, "asc")]), diagnostics)

        assert [key.accessor.name for key in keys] == ["age"]
        assert diagnostics.codes() == ["order_index_out_of_range", "order_index_out_of_range"]

    def test_not_orderable_column_is_skipped(self):
        diagnostics = Diagnostics()
        request = request_for([ColumnSpec(data="age", orderable=False), "email"], [(0, "asc"), (1, "desc")])

        keys = build_order(resolve(Person), request, diagnostics)

        assert [key.accessor.name for key in keys] == ["email"]
        assert diagnostics.codes() == ["order_column_not_orderable"]

    def test_unresolved_column_is_skipped_without_error(self):
        diagnostics = Diagnostics()

        keys = build_order(resolve(Person), request_for(["nickname", ""], [(0, "asc"), (1, "asc")]), diagnostics)

        assert [key.accessor.name for key in keys] == ["first_name"]
        assert diagnostics.codes() == ["order_column_unresolved", "order_column_unresolved"]
        assert diagnostics.entries[0].column == "nickname"

    def test_fallback_to_first_name(self):
        keys = build_order(resolve(Person), request_for(["age"], []))

        assert [(key.accessor.name, key.direction) for key in keys] == [("first_name", SortDirection.ASCENDING)]

    def test_fallback_adds_primary_key_tiebreak(self):
        keys = build_order(resolve(Employee), request_for(["hiredOn"], []))

        assert [(key.accessor.name, key.direction) for key in keys] == [
            ("first_name", SortDirection.ASCENDING),
            ("id", SortDirection.ASCENDING),
        ]

    def test_primary_key_fallback_is_not_repeated(self):
        keys = build_order(resolve(Item), request_for(["name"], []))

        assert [key.accessor.name for key in keys] == ["id"]

    def test_fallback_to_id(self):
        keys = build_order(resolve(Product), request_for(["name"], []))

        assert [key.accessor.name for key in keys] == ["id"]

    def test_configured_fallback(self):
        options = DataTablesOptions(fallback_order=("price",))

        keys = build_order(resolve(Product), request_for([], []), options=options)

        assert [key.accessor.name for key in keys] == ["price"]

    def test_no_fallback_keeps_source_order(self):
        assert build_order(resolve(Untitled), request_for(["code"], [])) == ()

    def test_full_name_is_a_single_key(self):
        keys = build_order(resolve(Person), request_for(["fullName"], [(0, "asc")]))

        assert len(keys) == 1
        assert keys[0].accessor.is_virtual


class TestSortRows:
    def test_descending_is_non_increasing(self, products):
        keys = build_order(resolve(Product), request_for(["price"], [(0, "desc")]))

        prices = [product.price for product in sort_rows(products, keys)]

        assert prices == sorted(prices, reverse=True)

    def test_secondary_key_breaks_ties(self):
        people = [Person(1, "Ann", "Zed"), Person(2, "Bob", "Lee"), Person(3, "Ann", "Abe")]
        keys = build_order(resolve(Person), request_for(["firstName", "lastName"], [(0, "asc"), (1, "desc")]))

        assert [person.id for person in sort_rows(people, keys)] == [1, 3, 2]

    def test_full_name_sorts_on_joined_text(self):
        people = [Person(1, "Ann", "Zed"), Person(2, "Ann", "Abe"), Person(3, "Al", "Zed")]
        keys = build_order(resolve(Person), request_for(["fullName"], [(0, "asc")]))

        assert [person.id for person in sort_rows(people, keys)] == [3, 2, 1]

    def test_none_sorts_first_ascending_last_descending(self):
        people = [Person(1, "Ann", "Lee"), Person(2, "Bob", None), Person(3, "Cy", "Abe")]
        ascending = build_order(resolve(Person), request_for(["lastName"], [(0, "asc")]))
        descending = build_order(resolve(Person), request_for(["lastName"], [(0, "desc")]))

        assert [person.id for person in sort_rows(people, ascending)] == [2, 3, 1]
        assert [person.id for person in sort_rows(people, descending)] == [1, 3, 2]

    def test_no_keys_keeps_encounter_order(self, products):
        assert sort_rows(products, ()) == products

    def test_uncomparable_values_raise(self):
        @dataclass
        class Mixed:
            value: object

        keys = build_order(resolve(Mixed), request_for(["value"], [(0, "asc")]))

        with pytest.raises(TypeError):
            sort_rows([Mixed(1), Mixed("a")], keys)
