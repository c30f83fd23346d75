"""
Prompt Builder
==============

System prompt construction for SQL generation, including the history of
failed attempts that is appended on every retry.
"""

from typing import Sequence

from nl2sql_eval.database import SCHEMA_TABLES
from nl2sql_eval.models import FailedAttempt

SQL_GENERATOR_SYSTEM_PROMPT = """You are a READ ONLY SQL SELECT Statement Generator API for the schema below ONLY.
Generate only queries that access data, not modify it:
no UPDATE, INSERT, DELETE or any other statements that attempt to change the data.
Respond to questions in a way that can be interpreted programmatically:
no extra narrative, punctuation, delimiters or escape sequences like backticks.
"""

FAILED_ATTEMPTS_PREAMBLE = (
    "Take into account the following past failed attempts at generating "
    "a new SQL query that avoids the same errors:"
)

FAILED_ATTEMPT_TEMPLATE = """- Generated failed sql query: '{sql}';
Error message explaining why it failed:
'{error}'
"""


def standardize_spaces(text: str) -> str:
    """Collapse every run of whitespace (including newlines) into one space."""
    return " ".join(text.split())


def strip_newlines(text: str) -> str:
    """Replace line breaks with spaces, keeping other whitespace as is."""
    return text.replace("\r\n", " ").replace("\n", " ")


def build_system_prompt(tables: Sequence[str] = SCHEMA_TABLES) -> str:
    """Generator instructions followed by the schema DDL."""
    return SQL_GENERATOR_SYSTEM_PROMPT + "\n".join(tables)


def build_prompt(base_prompt: str, failed_attempts: Sequence[FailedAttempt]) -> str:
    """
    Augment ``base_prompt`` with the failed attempts made so far.

    Returns ``base_prompt`` unchanged when there are no failed attempts.
    Attempts are rendered in the order they were made.
    """
    if not failed_attempts:
        return base_prompt

    parts = [base_prompt, "\n", FAILED_ATTEMPTS_PREAMBLE, "\n"]
    for attempt in failed_attempts:
        parts.append(
            FAILED_ATTEMPT_TEMPLATE.format(
                sql=standardize_spaces(attempt.sql),
                error=strip_newlines(attempt.error_message),
            )
        )
    return "".join(parts)
