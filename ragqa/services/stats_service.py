"""
Knowledge base statistics.
"""
from typing import Any, Dict

from sqlalchemy.engine import Engine

from .. import config
from ..errors import InvalidRequestError
from .store_service import (
    count_answers,
    count_questions,
    count_unanswered,
    list_recent_questions,
    list_unanswered,
)

STAT_TYPES = ("summary", "today", "total", "unanswered")


def build_stats(engine: Engine, stat_type: str = "summary") -> Dict[str, Any]:
    """
    Collect the statistics selected by `stat_type`.

    "summary" includes every section plus the most recent questions.
    A blank type falls back to "summary".

    Raises:
        InvalidRequestError: unknown stat type
    """
    stat_type = (stat_type or "").strip() or "summary"
    if stat_type not in STAT_TYPES:
        raise InvalidRequestError(
            f"type must be one of: {', '.join(STAT_TYPES)}"
        )

    summary = stat_type == "summary"
    stats: Dict[str, Any] = {"success": True, "stat_type": stat_type}

    if summary or stat_type == "today":
        stats["today"] = {
            "questions_registered": count_questions(engine, today=True),
            "answers_added": count_answers(engine, today=True),
        }

    if summary or stat_type == "total":
        stats["total"] = {
            "questions": count_questions(engine),
            "answers": count_answers(engine),
        }

    if summary or stat_type == "unanswered":
        stats["unanswered"] = {
            "count": count_unanswered(engine),
            "questions": list_unanswered(engine, config.UNANSWERED_PREVIEW_LIMIT),
        }

    if summary:
        stats["recent_questions"] = list_recent_questions(engine, config.RECENT_QUESTIONS_LIMIT)

    return stats
