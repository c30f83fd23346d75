"""
Unit Tests for SQLGenerator
===========================

Tests for the generate-execute-repair loop.
"""

import pytest

from nl2sql_eval.errors import ModelInvocationError
from nl2sql_eval.executor import SQLiteExecutor
from nl2sql_eval.generator import SQLGenerator
from nl2sql_eval.llm.mock import MockLLM
from nl2sql_eval.models import GenerationOptions
from nl2sql_eval.prompts import FAILED_ATTEMPTS_PREAMBLE, build_system_prompt

HISTORY_LINE = "Generated failed sql query"


class TestGeneratorBasic:
    """Basic generator behaviour."""

    def test_generator_defaults(self, make_executor) -> None:
        """Default retry budget and system prompt are applied."""
        generator = SQLGenerator(llm=MockLLM(), executor=make_executor(0))
        assert generator.max_retries == 2
        assert generator.system_prompt == build_system_prompt()

    def test_negative_retries_rejected(self, make_executor) -> None:
        with pytest.raises(ValueError):
            SQLGenerator(llm=MockLLM(), executor=make_executor(0), max_retries=-1)

    def test_first_attempt_success(self, make_executor) -> None:
        """A query that executes first time needs one attempt and no history."""
        llm = MockLLM(default="SELECT 1 AS n")
        executor = make_executor(fail_times=0)
        result = SQLGenerator(llm=llm, executor=executor, system_prompt="BASE").process("anything")

        assert result.success is True
        assert result.sql == "SELECT 1 AS n"
        assert result.rows == [{"n": 1}]
        assert result.attempts == 1
        assert result.failed_attempts == ()
        assert llm.calls[0][0] == "BASE"

    def test_question_sent_as_user_prompt(self, make_executor) -> None:
        """The natural language question is the user prompt; options pass through."""
        llm = MockLLM(default="SELECT 1")
        options = GenerationOptions(max_tokens=50, seed=7)
        SQLGenerator(llm=llm, executor=make_executor(0), options=options).process("How many?")

        system_prompt, prompt, passed_options = llm.calls[0]
        assert prompt == "How many?"
        assert passed_options is options
        assert passed_options.temperature == 0.0

    def test_multiline_sql_collapsed(self, make_executor) -> None:
        """Line breaks in generated SQL become spaces before execution."""
        llm = MockLLM(default="SELECT name\nFROM Customers\nLIMIT 1")
        executor = make_executor(fail_times=0)
        result = SQLGenerator(llm=llm, executor=executor).process("first customer")

        assert executor.executed == ["SELECT name FROM Customers LIMIT 1"]
        assert result.sql == "SELECT name FROM Customers LIMIT 1"


class TestGeneratorRepair:
    """Tests for retrying with failed attempt history."""

    @pytest.mark.parametrize("fail_times,max_retries", [(1, 2), (2, 2), (3, 5)])
    def test_recovers_after_k_failures(self, make_executor, fail_times: int, max_retries: int) -> None:
        """k failures then success takes exactly k+1 executions."""
        llm = MockLLM(default="SELECT x FROM t")
        executor = make_executor(fail_times=fail_times)
        generator = SQLGenerator(llm=llm, executor=executor, max_retries=max_retries)

        result = generator.process("question")

        assert result.success is True
        assert result.attempts == fail_times + 1
        assert len(executor.executed) == fail_times + 1
        assert len(result.failed_attempts) == fail_times

        final_system_prompt = llm.calls[-1][0]
        assert final_system_prompt.count(HISTORY_LINE) == fail_times

    def test_each_retry_sees_more_history(self, make_executor) -> None:
        """The history in the system prompt grows by one attempt per retry."""
        llm = MockLLM(default="SELECT x FROM t")
        SQLGenerator(llm=llm, executor=make_executor(fail_times=2)).process("question")

        counts = [system_prompt.count(HISTORY_LINE) for system_prompt, _, _ in llm.calls]
        assert counts == [0, 1, 2]
        assert FAILED_ATTEMPTS_PREAMBLE not in llm.calls[0][0]

    def test_error_message_fed_back(self, make_executor) -> None:
        """The execution error reaches the next prompt."""
        llm = MockLLM(default="SELECT x FROM t")
        SQLGenerator(llm=llm, executor=make_executor(fail_times=1)).process("question")

        assert "no such column: bad_1" in llm.calls[1][0]

    @pytest.mark.parametrize("max_retries", [0, 1, 2, 4])
    def test_budget_exhausted(self, make_executor, max_retries: int) -> None:
        """An executor that always fails gets at most R+1 attempts."""
        llm = MockLLM(default="SELECT broken")
        executor = make_executor(fail_times=1000)
        result = SQLGenerator(llm=llm, executor=executor, max_retries=max_retries).process("q")

        assert result.success is False
        assert result.sql is None
        assert result.attempts == max_retries + 1
        assert len(executor.executed) == max_retries + 1
        assert len(result.failed_attempts) == max_retries + 1
        assert result.failure_reason == "retries_exhausted"
        assert "Failed" in result.final_message

    def test_history_does_not_leak_between_questions(self, make_executor) -> None:
        """A new question starts with an empty history."""
        llm = MockLLM(default="SELECT x FROM t")
        generator = SQLGenerator(llm=llm, executor=make_executor(fail_times=2))

        generator.process("first question")
        llm.reset()
        generator.process("second question")

        assert HISTORY_LINE not in llm.calls[0][0]

    def test_repair_against_real_database(self, sqlite_executor: SQLiteExecutor) -> None:
        """A misspelt table is repaired using the SQLite error message."""
        llm = MockLLM(
            responses={
                "customers": [
                    "SELECT COUNT(*) FROM Customer",
                    "SELECT COUNT(*) FROM Customers",
                ]
            }
        )
        result = SQLGenerator(llm=llm, executor=sqlite_executor).process("How many customers?")

        assert result.success is True
        assert result.attempts == 2
        assert result.rows == [{"COUNT(*)": 10}]
        assert result.failed_attempts[0].sql == "SELECT COUNT(*) FROM Customer"
        assert "no such table" in result.failed_attempts[0].error_message


class TestGeneratorInvocationErrors:
    """Tests for model invocation failures."""

    def test_invocation_error_ends_item(self, make_executor) -> None:
        """A provider failure ends the loop without executing anything."""
        llm = MockLLM(errors=[ModelInvocationError("rate limited", "Mock", "m")])
        executor = make_executor(fail_times=0)
        result = SQLGenerator(llm=llm, executor=executor).process("q")

        assert result.success is False
        assert result.failure_reason == "invocation_error"
        assert result.attempts == 0
        assert executor.executed == []
        assert llm.call_count == 1
        assert "rate limited" in result.final_message

    def test_invocation_error_after_failures_keeps_history(self, make_executor) -> None:
        """Failed attempts made before the provider error are kept in the result."""

        class FailingOnSecondCall(MockLLM):
            def generate(self, prompt, system_prompt=None, options=None):
                if self.calls:
                    self.calls.append((system_prompt, prompt, options))
                    raise ModelInvocationError("connection reset")
                return super().generate(prompt, system_prompt, options)

        llm = FailingOnSecondCall(default="SELECT nope")
        result = SQLGenerator(llm=llm, executor=make_executor(fail_times=5)).process("q")

        assert result.failure_reason == "invocation_error"
        assert result.attempts == 1
        assert len(result.failed_attempts) == 1
