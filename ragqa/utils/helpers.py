"""
Utility helper functions.
"""
import json
import re
from typing import Dict, List, Optional

from ..errors import ParseError

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_-]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def source_filenames(chunks: List[Dict]) -> List[str]:
    """
    Distinct source filenames of retrieved chunks, in first-seen order.

    Example:
        >>> source_filenames([
        ...     {"source_filename": "a.pdf"},
        ...     {"source_filename": "b.pdf"},
        ...     {"source_filename": "a.pdf"},
        ... ])
        ['a.pdf', 'b.pdf']
    """
    seen = []
    for chunk in chunks:
        name = chunk["source_filename"]
        if name not in seen:
            seen.append(name)
    return seen


def format_distance(distance: Optional[float]) -> Optional[str]:
    """Render a distance with four decimals, e.g. 0.1 -> "0.1000"."""
    if distance is None:
        return None
    return f"{distance:.4f}"


def preview(content: str, limit: int = 200) -> str:
    """First `limit` characters, with "..." appended when text was cut."""
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


def strip_code_fences(text: str) -> str:
    """Remove surrounding ```...``` fences (with or without 'json') if present."""
    t = text.strip()
    if t.startswith("```"):
        t = _FENCE_OPEN.sub("", t)
        t = _FENCE_CLOSE.sub("", t)
    return t.strip()


def parse_qa_pairs(raw: str) -> List[Dict[str, str]]:
    """
    Strictly parse LLM output into question/answer pairs.

    The output must be a JSON array of objects, each with non-empty string
    "question" and "answer" fields. Markdown code fences are tolerated;
    anything else is rejected rather than coerced to an empty list.

    Raises:
        ParseError: if the output does not match that shape
    """
    if not raw or not raw.strip():
        raise ParseError("Q&A generation returned no content")

    try:
        data = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as e:
        raise ParseError(f"Q&A generation returned invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise ParseError(f"Q&A generation returned {type(data).__name__}, expected a JSON array")

    pairs = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ParseError(f"Q&A item {i} is not an object")
        question = item.get("question")
        answer = item.get("answer")
        if not isinstance(question, str) or not question.strip():
            raise ParseError(f"Q&A item {i} has no question text")
        if not isinstance(answer, str) or not answer.strip():
            raise ParseError(f"Q&A item {i} has no answer text")
        pairs.append({"question": question.strip(), "answer": answer.strip()})
    return pairs
