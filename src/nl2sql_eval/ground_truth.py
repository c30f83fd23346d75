"""
Ground Truth Loading
====================

Reads (question, SQL, result) triples from CSV, or from the first table of a
Markdown file.
"""

import csv
from pathlib import Path

import structlog
from markdown_it import MarkdownIt
from markdown_it.token import Token

from nl2sql_eval.errors import ConfigurationError
from nl2sql_eval.models import GroundTruthItem

logger = structlog.get_logger(__name__)

# CommonMark plus GFM pipe tables
_MARKDOWN = MarkdownIt("commonmark").enable("table")


def _inline_text(token: Token) -> str:
    """Concatenate the literal text under an inline token, dropping markup."""
    parts = []
    for child in token.children or []:
        if child.children:
            parts.append(_inline_text(child))
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        else:
            parts.append(child.content)
    return "".join(parts)


def markdown_table_to_rows(text: str) -> list[list[str]]:
    """
    Extract the first table from Markdown text.

    Cell text is rendered plain: escapes and entities are resolved, emphasis
    and code span markers are dropped.

    Returns:
        Header row followed by data rows; empty if the text has no table
    """
    rows: list[list[str]] = []
    row: list[str] = []
    in_table = False

    for token in _MARKDOWN.parse(text):
        if token.type == "table_open":
            in_table = True
        elif not in_table:
            continue
        elif token.type == "table_close":
            break
        elif token.type == "tr_open":
            row = []
        elif token.type == "tr_close":
            rows.append(row)
        elif token.type == "inline":
            row.append(_inline_text(token).strip())

    return rows


def convert_markdown_to_csv(md_path: str | Path) -> Path:
    """
    Write the first table of ``md_path`` to ``<md_path>.csv``.

    Raises:
        ConfigurationError: If the file has no table
    """
    md_path = Path(md_path)
    rows = markdown_table_to_rows(md_path.read_text(encoding="utf-8"))
    if not rows:
        raise ConfigurationError(f"No table found in Markdown file '{md_path}'")

    csv_path = md_path.with_name(md_path.name + ".csv")
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        csv.writer(f).writerows(rows)

    logger.info("ground_truth_csv_written", source=str(md_path), path=str(csv_path), rows=len(rows) - 1)
    return csv_path


def load_ground_truth_csv(csv_path: str | Path) -> list[GroundTruthItem]:
    """
    Load ground truth items from a CSV file.

    The first row is a header. Rows with fewer than three cells are skipped.
    """
    items = []
    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        if next(reader, None) is None:
            return items
        for record in reader:
            if len(record) < 3:
                continue
            items.append(GroundTruthItem(query=record[0], sql=record[1], result=record[2]))
    return items


def load_ground_truth(path: str | Path) -> list[GroundTruthItem]:
    """Load ground truth from a ``.md`` or ``.csv`` file."""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Ground truth file not found: '{path}'")

    if path.suffix.lower() in (".md", ".markdown"):
        path = convert_markdown_to_csv(path)

    items = load_ground_truth_csv(path)
    logger.info("ground_truth_loaded", path=str(path), items=len(items))
    return items
