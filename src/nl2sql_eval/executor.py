"""
Query Executor
==============

Runs candidate SQL against the evaluation database. SQL errors are captured
in the returned ExecutionResult instead of being raised, so the repair loop
can feed the message back to the model.
"""

import sqlite3
import time
from abc import ABC, abstractmethod
from typing import Any

from nl2sql_eval.models import ExecutionResult


class SQLExecutor(ABC):
    """Interface for components that can execute SQL queries."""

    @abstractmethod
    def execute(self, sql: str) -> ExecutionResult:
        raise NotImplementedError


def _decode(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


class SQLiteExecutor(SQLExecutor):
    """
    Executes SQL on a single reused sqlite3 connection.

    With ``read_only`` set, SQLite's ``query_only`` pragma makes any write
    fail with an execution error rather than touching the data.
    """

    def __init__(self, connection: sqlite3.Connection, read_only: bool = True) -> None:
        self.connection = connection
        if read_only:
            self.connection.execute("PRAGMA query_only = ON")

    def execute(self, sql: str) -> ExecutionResult:
        start_time = time.perf_counter()
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql)
            raw_rows = cursor.fetchall()
            columns = [col[0] for col in cursor.description] if cursor.description else []
        # Older sqlite3 modules raise Warning for multiple statements
        except (sqlite3.Error, sqlite3.Warning, ValueError) as exc:
            return ExecutionResult(
                error=str(exc).replace("\n", " "),
                timing_ms=(time.perf_counter() - start_time) * 1000,
            )
        finally:
            cursor.close()

        rows = [
            {column: _decode(value) for column, value in zip(columns, raw_row)}
            for raw_row in raw_rows
        ]
        return ExecutionResult(
            rows=rows,
            columns=columns,
            timing_ms=(time.perf_counter() - start_time) * 1000,
        )
