"""
Equivalence Judge
=================

Classifies how a candidate SQL query relates to the ground truth query using
a secondary LLM constrained to a closed vocabulary of verdicts.
"""

from dataclasses import replace

import structlog

from nl2sql_eval.errors import JudgeProtocolError
from nl2sql_eval.llm.base import LLMInterface
from nl2sql_eval.models import EquivalenceVerdict, GenerationOptions

logger = structlog.get_logger(__name__)

# The verdict tokens below are a contract with the judge model: keep them in
# sync with EquivalenceVerdict.
SQL_COMPARISON_SYSTEM_PROMPT = """You are a SQL Statement comparator API: Take two SQL queries, a ground truth and a comparison, and compare them to determine
how similar they are, returning only a single word from this list: "None", or "Functional"

Rules for returning the value "Functional": ALL the following rules must be satisfied:

1. Any difference in interim join aliases can be ignored as they do not affect output.
Example 1: "op" can be any text in this query and it'll be Functional: SELECT p."name", SUM(op."quantity" * p."price") AS "profit" FROM "Order_Products" op JOIN "Products" p ON op."product_id" = p."id" GROUP BY p."name" ORDER BY "profit" DESC LIMIT 1;

2. The output column names can vary from ground truth query and comparison query if they're semantically equivalent.
E.g. for an order query, Query 1: SELECT "order_value" and Query 2: SELECT "total_order_value" are semantically equivalent because order_value and total_order_value in the context of an order query are equivalent.

3. A column name is considered identical whether it's quoted or not. E.g. SELECT COUNT(*) FROM "Customers"; and SELECT COUNT(*) FROM Customers; are semantically equivalent.

4. Subqueries and joins that result in the same final dataset are considered functionally equivalent. For example, using a subquery to filter on a specific product ID versus using a JOIN to the Products table with a WHERE clause filtering on the same product name are functionally equivalent if they result in the same output.
Example: Ground Truth: SELECT SUM("quantity") AS "total_sold" FROM "Order_Products" WHERE "product_id" = (SELECT "id" FROM "Products" WHERE "name" = 'Product 7');
Comparison: SELECT SUM(quantity) FROM Order_Products JOIN Products ON Order_Products.product_id = Products.id WHERE name = 'Product 7';

5. Extra output columns in the comparison query do not prevent a Functional result as long as every ground truth output column is present.
E.g. Query 1: SELECT "product_name", Query 2: SELECT "product_name", "product_price"

"None" rules: regardless of the Functional rules, if ANY of these rules are met, the result is None:
1. The comparison query is missing output columns that are included in the ground truth query.
Example 1 that is None:
Ground truth: "SELECT name, age from students;"
Comparison query: "SELECT name from students;"
Example 2 that is None:
Ground truth: "SELECT c."name", SUM(op."quantity" * p."price") AS "profit" FROM "Order_Products"
Comparison query "SELECT SUM(op."quantity" * p."price") AS "profit" FROM "Order_Products"

Respond to questions in a way that can be interpreted programmatically:
NO extra narrative, punctuation, delimiters or escape sequences like backticks.
"""

COMPARISON_PROMPT_TEMPLATE = """Ground truth sql statement: {ground_truth}
Comparison sql query: {candidate}"""

_VERDICTS = {verdict.value: verdict for verdict in EquivalenceVerdict}


def parse_verdict(response: str) -> EquivalenceVerdict:
    """
    Map the judge's raw answer onto a verdict.

    Only surrounding whitespace is ignored; the token itself must match
    exactly, including case.

    Raises:
        JudgeProtocolError: If the answer is not one of the verdict tokens
    """
    verdict = _VERDICTS.get(response.strip())
    if verdict is None:
        raise JudgeProtocolError(response)
    return verdict


class EquivalenceJudge:
    """Single-shot LLM judge comparing a candidate query with the ground truth."""

    def __init__(self, llm: LLMInterface, options: GenerationOptions | None = None) -> None:
        """
        Args:
            llm: Judge model, distinct from the models being evaluated
            options: Generation options; temperature is always 0.0
        """
        self.llm = llm
        self.options = replace(options or GenerationOptions(), temperature=0.0)

    def compare(self, ground_truth_sql: str, candidate_sql: str) -> EquivalenceVerdict:
        """
        Classify ``candidate_sql`` against ``ground_truth_sql``.

        Identical strings are an exact match and never reach the model.

        Raises:
            JudgeProtocolError: If the judge answers outside the vocabulary
            ModelInvocationError: If the judge model call fails
        """
        if ground_truth_sql == candidate_sql:
            return EquivalenceVerdict.EXACT

        prompt = COMPARISON_PROMPT_TEMPLATE.format(
            ground_truth=ground_truth_sql,
            candidate=candidate_sql,
        )
        response = self.llm.generate(prompt, SQL_COMPARISON_SYSTEM_PROMPT, self.options)
        logger.debug(
            "judge_responded",
            judge=self.llm.key,
            response=response.content,
            elapsed_ms=round(response.elapsed_ms, 1),
        )
        return parse_verdict(response.content)
