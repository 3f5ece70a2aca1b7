"""
Statistics route.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from ..db import get_engine
from ..services.stats_service import build_stats

router = APIRouter(tags=["stats"])


@router.get("/stats")
def get_stats(
    stat_type: str = Query("summary", alias="type", description="summary, today, total or unanswered"),
    engine: Engine = Depends(get_engine),
):
    return build_stats(engine, stat_type)
