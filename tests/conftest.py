"""
Pytest Fixtures
===============

Shared fixtures for the NL-to-SQL evaluation tests.
"""

import sqlite3

import pytest

from nl2sql_eval.database import initialise_database
from nl2sql_eval.executor import SQLExecutor, SQLiteExecutor
from nl2sql_eval.judge import EquivalenceJudge
from nl2sql_eval.llm.mock import MockLLM
from nl2sql_eval.models import ExecutionResult, GenerationOptions, GroundTruthItem


class ScriptedExecutor(SQLExecutor):
    """Executor that fails a fixed number of times, then succeeds."""

    def __init__(self, fail_times: int, rows: list[dict] | None = None) -> None:
        self.fail_times = fail_times
        self.rows = rows if rows is not None else [{"n": 1}]
        self.executed: list[str] = []

    def execute(self, sql: str) -> ExecutionResult:
        self.executed.append(sql)
        if len(self.executed) <= self.fail_times:
            return ExecutionResult(error=f"no such column: bad_{len(self.executed)}")
        return ExecutionResult(rows=list(self.rows), columns=list(self.rows[0]) if self.rows else [])


@pytest.fixture
def make_executor() -> type[ScriptedExecutor]:
    """Factory for executors failing a given number of times."""
    return ScriptedExecutor


@pytest.fixture
def db_connection() -> sqlite3.Connection:
    """Seeded in-memory e-commerce database."""
    conn = initialise_database(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def sqlite_executor(db_connection: sqlite3.Connection) -> SQLiteExecutor:
    """Read-only executor over the seeded database."""
    return SQLiteExecutor(db_connection)


@pytest.fixture
def options() -> GenerationOptions:
    """Deterministic generation options."""
    return GenerationOptions(max_tokens=100, seed=42)


@pytest.fixture
def judge_llm() -> MockLLM:
    """Judge model scripted for the comparison scenarios used in the tests."""
    return MockLLM(
        responses={
            "prod.name": ["Functional"],  # alias-only difference
            "SELECT age FROM users": ["None"],  # disjoint output columns
            "product_name, product_price": ["Functional"],  # superset of columns
            "FROM Customers;": ["Functional"],  # quoting difference
        },
        default="None",
        model="judge",
    )


@pytest.fixture
def judge(judge_llm: MockLLM, options: GenerationOptions) -> EquivalenceJudge:
    """Equivalence judge backed by the scripted judge model."""
    return EquivalenceJudge(judge_llm, options)


@pytest.fixture
def ground_truth_items() -> list[GroundTruthItem]:
    """A few ground truth items matching the seeded database."""
    return [
        GroundTruthItem(
            query="How many customers are there?",
            sql="SELECT COUNT(*) FROM Customers",
            result='[{"COUNT(*)":10}]',
        ),
        GroundTruthItem(
            query="How many products are there?",
            sql='SELECT COUNT(*) AS "n" FROM "Products"',
            result='[{"n":10}]',
        ),
        GroundTruthItem(
            query="Show the unicorns",
            sql="SELECT * FROM Unicorns",
            result="[]",
        ),
    ]
