"""
Unit Tests for the Result Comparator
====================================
"""

from nl2sql_eval.comparator import (
    EMPTY_RESULT,
    canonicalize_result,
    results_match,
    serialize_rows,
)
from nl2sql_eval.executor import SQLiteExecutor


class TestSerializeRows:
    """Tests for the canonical result encoding."""

    def test_empty_result(self) -> None:
        assert serialize_rows([]) == "[]"
        assert EMPTY_RESULT == "[]"

    def test_idempotent(self) -> None:
        rows = [{"name": "Customer 1", "total": 100.5}, {"name": "Customer 2", "total": 3}]
        assert serialize_rows(rows) == serialize_rows(rows)

    def test_compact_with_sorted_keys(self) -> None:
        rows = [{"b": 1, "a": "x"}]
        assert serialize_rows(rows) == '[{"a":"x","b":1}]'

    def test_row_order_preserved(self) -> None:
        rows = [{"n": 2}, {"n": 1}]
        assert serialize_rows(rows) == '[{"n":2},{"n":1}]'

    def test_integral_floats_as_integers(self) -> None:
        assert serialize_rows([{"price": 300.0, "avg": 2.5}]) == '[{"avg":2.5,"price":300}]'

    def test_bytes_decoded(self) -> None:
        assert serialize_rows([{"blob": b"abc"}]) == '[{"blob":"abc"}]'

    def test_non_ascii_kept(self) -> None:
        assert serialize_rows([{"name": "Zoë"}]) == '[{"name":"Zoë"}]'

    def test_null_values(self) -> None:
        assert serialize_rows([{"email": None}]) == '[{"email":null}]'


class TestResultsMatch:
    """Tests for comparing executed rows with the recorded result."""

    def test_whitespace_in_recorded_result_ignored(self) -> None:
        expected = '[ { "COUNT(*)" : 10 } ]'
        assert canonicalize_result(expected) == '[{"COUNT(*)":10}]'
        assert results_match([{"COUNT(*)": 10}], expected)

    def test_recorded_float_formatting_ignored(self) -> None:
        assert results_match([{"total": 700}], '[{"total":700.0}]')

    def test_different_values_do_not_match(self) -> None:
        assert not results_match([{"n": 9}], '[{"n":10}]')

    def test_different_order_does_not_match(self) -> None:
        assert not results_match([{"n": 1}, {"n": 2}], '[{"n":2},{"n":1}]')

    def test_non_json_recorded_result_compared_stripped(self) -> None:
        assert canonicalize_result("  not json ") == "not json"
        assert not results_match([], "not json")

    def test_empty_results_match(self) -> None:
        assert results_match([], "[]")
        assert results_match([], "  [ ]  ")

    def test_rows_from_database(self, sqlite_executor: SQLiteExecutor) -> None:
        """Executed rows serialize to the recorded ground truth form."""
        result = sqlite_executor.execute(
            'SELECT SUM("quantity") AS "total_sold" FROM "Order_Products" '
            'WHERE "product_id" = (SELECT "id" FROM "Products" WHERE "name" = \'Product 7\')'
        )
        assert result.success
        assert serialize_rows(result.rows) == '[{"total_sold":21}]'
