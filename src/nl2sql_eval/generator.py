"""
SQL Generator
=============

Generate-execute-repair loop that turns a natural language question into
SQL that runs against the evaluation database.
"""

import structlog

from nl2sql_eval.config import MAX_RETRIES
from nl2sql_eval.errors import ModelInvocationError
from nl2sql_eval.executor import SQLExecutor
from nl2sql_eval.llm.base import LLMInterface
from nl2sql_eval.models import FailedAttempt, GenerationOptions, GenerationResult
from nl2sql_eval.prompts import build_prompt, build_system_prompt, strip_newlines

logger = structlog.get_logger(__name__)


class SQLGenerator:
    """
    Generates executable SQL for a natural language question.

    The generator:
    1. Asks the model for SQL using the base system prompt
    2. Executes the SQL against the database
    3. On an execution error, records the attempt and asks again with every
       failed attempt so far appended to the system prompt
    4. Stops on the first query that executes, or once ``max_retries``
       repairs have been spent (at most ``max_retries + 1`` executions)

    A model invocation error ends the loop for that question immediately.
    """

    def __init__(
        self,
        llm: LLMInterface,
        executor: SQLExecutor,
        options: GenerationOptions | None = None,
        max_retries: int = MAX_RETRIES,
        system_prompt: str | None = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            llm: Model under evaluation
            executor: Database executor used to validate candidates
            options: Generation options passed to every model call
            max_retries: Maximum number of repair attempts after the first try
            system_prompt: Base system prompt (defaults to the e-commerce schema prompt)
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.llm = llm
        self.executor = executor
        self.options = options or GenerationOptions()
        self.max_retries = max_retries
        self.system_prompt = system_prompt or build_system_prompt()

    def process(self, natural_language_query: str) -> GenerationResult:
        """
        Produce executable SQL for ``natural_language_query``.

        Returns:
            GenerationResult with the SQL and rows on success, or the failure
            reason and the failed attempts otherwise
        """
        # Fresh history per question
        failed_attempts: tuple[FailedAttempt, ...] = ()
        attempts = 0

        while len(failed_attempts) <= self.max_retries:
            prompt = build_prompt(self.system_prompt, failed_attempts)
            if failed_attempts:
                logger.debug(
                    "retrying_with_history",
                    failed_attempts=len(failed_attempts),
                    system_prompt=prompt,
                )

            try:
                response = self.llm.generate(natural_language_query, prompt, self.options)
            except ModelInvocationError as exc:
                logger.error(
                    "generation_invocation_failed",
                    query=natural_language_query,
                    model=self.llm.key,
                    attempt=attempts + 1,
                    error=str(exc),
                )
                return GenerationResult(
                    success=False,
                    sql=None,
                    original_query=natural_language_query,
                    attempts=attempts,
                    failed_attempts=failed_attempts,
                    final_message=f"Model invocation failed: {exc}",
                    failure_reason="invocation_error",
                )

            logger.debug("query_generated", elapsed_ms=round(response.elapsed_ms, 1))

            # SQL is often emitted across several lines but runs fine on one
            sql = strip_newlines(response.content)
            attempts += 1
            result = self.executor.execute(sql)

            if result.success:
                logger.info("query_executed", sql=sql, attempts=attempts, rows=len(result.rows))
                return GenerationResult(
                    success=True,
                    sql=sql,
                    original_query=natural_language_query,
                    attempts=attempts,
                    failed_attempts=failed_attempts,
                    rows=result.rows,
                    final_message=f"Query executed successfully after {attempts} attempt(s)",
                )

            logger.warning("query_execution_failed", sql=sql, error=result.error, attempt=attempts)
            failed_attempts = failed_attempts + (
                FailedAttempt(sql=sql, error_message=strip_newlines(result.error or "")),
            )

        logger.error(
            "retry_budget_exhausted",
            query=natural_language_query,
            attempts=attempts,
        )
        return GenerationResult(
            success=False,
            sql=None,
            original_query=natural_language_query,
            attempts=attempts,
            failed_attempts=failed_attempts,
            final_message=f"Failed to execute a valid query after {attempts} attempts",
            failure_reason="retries_exhausted",
        )
