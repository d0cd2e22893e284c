"""
Test Table View Engine

Unit tests for search filtering, typed sorting and pagination.
"""

from itertools import permutations

import pytest

from analysis.table_view import (
    SortDirection,
    SortSpec,
    TableViewEngine,
    TableViewState,
    clamp_page,
    count_pages,
    tokenize,
)
from core.dataset import Dataset


@pytest.fixture
def engine():
    return TableViewEngine()


@pytest.fixture
def people():
    return Dataset.from_records(
        ["name", "city", "age"],
        [
            {"name": "Alice", "city": "NYC", "age": "33"},
            {"name": "Bob", "city": "LA", "age": "2"},
            {"name": "alice cooper", "city": "Boston", "age": "10"},
            {"name": "Carol", "city": "nyc", "age": None},
            {"name": "Émile", "city": "Paris", "age": "41"},
        ],
    )


@pytest.fixture
def numbered():
    return Dataset.from_records(["n"], [{"n": i} for i in range(1, 24)])


class TestFilter:
    def test_tokens_across_columns(self, engine, people):
        rows = engine.filter_rows(people, "alice nyc")

        assert [r["name"] for r in rows] == ["Alice"]

    def test_case_insensitive(self, engine, people):
        rows = engine.filter_rows(people, "ALICE")

        assert [r["name"] for r in rows] == ["Alice", "alice cooper"]

    def test_selected_column(self, engine, people):
        rows = engine.filter_rows(people, "nyc", selected_column="name")
        assert rows == []

        rows = engine.filter_rows(people, "nyc", selected_column="city")
        assert [r["name"] for r in rows] == ["Alice", "Carol"]

    def test_unknown_column_searches_all(self, engine, people):
        rows = engine.filter_rows(people, "boston", selected_column="nope")

        assert [r["name"] for r in rows] == ["alice cooper"]

    def test_blank_search_keeps_everything(self, engine, people):
        assert len(engine.filter_rows(people, "   ")) == people.row_count

    def test_missing_cells_never_match(self, engine, people):
        rows = engine.filter_rows(people, "none", selected_column="age")

        assert rows == []

    def test_numbers_match_display_text(self, engine, people):
        rows = engine.filter_rows(people, "41")

        assert [r["name"] for r in rows] == ["Émile"]

    def test_tokenize(self):
        assert tokenize("  Foo   bar ") == ["foo", "bar"]
        assert tokenize("") == []


class TestSort:
    def test_numeric_ascending(self, engine, people):
        rows = engine.sort_rows(people.rows, SortSpec("age"), people.headers)

        assert [r["age"] for r in rows] == ["2", "10", "33", "41", None]

    def test_numeric_descending_missing_last(self, engine, people):
        rows = engine.sort_rows(people.rows, SortSpec("age", SortDirection.DESC), people.headers)

        assert [r["age"] for r in rows] == ["41", "33", "10", "2", None]

    def test_text_is_case_and_accent_insensitive(self, engine, people):
        rows = engine.sort_rows(people.rows, SortSpec("name"), people.headers)

        assert [r["name"] for r in rows] == ["Alice", "alice cooper", "Bob", "Carol", "Émile"]

    def test_stable_for_equal_keys(self, engine):
        dataset = Dataset.from_records(
            ["k", "id"],
            [{"k": "b", "id": 1}, {"k": "a", "id": 2}, {"k": "b", "id": 3}, {"k": "a", "id": 4}],
        )
        rows = engine.sort_rows(dataset.rows, SortSpec("k"), dataset.headers)

        assert [r["id"] for r in rows] == [2, 4, 1, 3]

    def test_mixed_column_order_independent_of_input(self, engine):
        results = set()
        for values in permutations(["10", "9", "1a"]):
            rows = [{"v": v} for v in values]
            ordered = engine.sort_rows(rows, SortSpec("v"), ["v"])
            results.add(tuple(r["v"] for r in ordered))

        assert results == {("10", "1a", "9")}

    def test_mixed_column_descending(self, engine):
        rows = [{"v": "9"}, {"v": None}, {"v": "1a"}, {"v": 10}]
        ordered = engine.sort_rows(rows, SortSpec("v", SortDirection.DESC), ["v"])

        assert [r["v"] for r in ordered] == ["9", "1a", 10, None]

    def test_descending_keeps_ties_in_row_order(self, engine):
        rows = [{"k": 1, "id": "a"}, {"k": 2, "id": "b"}, {"k": 1, "id": "c"}]
        ordered = engine.sort_rows(rows, SortSpec("k", SortDirection.DESC), ["k", "id"])

        assert [r["id"] for r in ordered] == ["b", "a", "c"]

    def test_unknown_sort_column_ignored(self, engine, people):
        rows = engine.sort_rows(people.rows, SortSpec("nope"), people.headers)

        assert rows == list(people.rows)

    def test_dataset_not_modified(self, engine, people):
        before = list(people.rows)
        engine.sort_rows(people.rows, SortSpec("age", SortDirection.DESC), people.headers)

        assert list(people.rows) == before


class TestPagination:
    def test_page_count(self):
        assert count_pages(23, 10) == 3
        assert count_pages(20, 10) == 2
        assert count_pages(0, 10) == 1

    def test_clamp(self):
        assert clamp_page(0, 3) == 1
        assert clamp_page(9, 3) == 3
        assert clamp_page(2, 0) == 1

    def test_last_page_range(self, engine, numbered):
        view = engine.render(numbered, TableViewState(page=3))

        assert view.total_pages == 3
        assert view.range_start == 21
        assert view.range_end == 23
        assert [r["n"] for r in view.rows] == [21, 22, 23]

    def test_out_of_range_page_clamped(self, engine, numbered):
        view = engine.render(numbered, TableViewState(page=99))

        assert view.current_page == 3
        assert view.state.page == 3

    def test_empty_result(self, engine, numbered):
        view = engine.render(numbered, TableViewState(search_term="zzz"))

        assert view.total_pages == 1
        assert view.current_page == 1
        assert view.range_start == 0
        assert view.range_end == 0
        assert view.rows == []

    def test_render_is_repeatable(self, engine, people):
        state = TableViewState(search_term="a", sort=SortSpec("age", SortDirection.DESC))

        assert engine.render(people, state) == engine.render(people, state)

    def test_cells_use_placeholder(self, engine, people):
        view = engine.render(people, TableViewState(search_term="carol"))

        assert view.cells() == [["Carol", "nyc", "-"]]
        assert view.total_rows == 5
        assert view.total_filtered == 1


class TestState:
    def test_search_resets_page(self):
        state = TableViewState(page=3).with_search("x")

        assert state.page == 1
        assert state.search_term == "x"

    def test_toggle_sort(self):
        state = TableViewState().toggle_sort("age")
        assert state.sort == SortSpec("age", SortDirection.ASC)

        state = state.toggle_sort("age")
        assert state.sort == SortSpec("age", SortDirection.DESC)

        state = state.toggle_sort("age")
        assert state.sort == SortSpec("age", SortDirection.ASC)

        state = state.toggle_sort("name")
        assert state.sort == SortSpec("name", SortDirection.ASC)

    def test_navigation_clamped(self):
        state = TableViewState().previous_page(3)
        assert state.page == 1

        state = state.next_page(3).next_page(3).next_page(3)
        assert state.page == 3

    def test_column_selection(self):
        assert TableViewState().with_column("city").selected_column == "city"
        assert TableViewState(selected_column="city").with_column("").selected_column is None

    def test_default_page_size(self, engine):
        assert engine.new_state().page_size == 10
