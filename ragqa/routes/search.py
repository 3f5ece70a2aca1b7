"""
Semantic search route.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from ..db import get_engine
from ..errors import InvalidRequestError
from ..schemas import SearchBody
from ..services.search_service import search

router = APIRouter(tags=["search"])


@router.post("/search")
async def search_knowledge_base(payload: SearchBody, engine: Engine = Depends(get_engine)):
    """
    Find the closest recorded question or document excerpt and answer from it.

    Returns one of three shapes: a Q&A match (source "qa"), a document match
    (source "document"), or the raw candidates when nothing is close enough.
    """
    if not payload.query or not payload.query.strip():
        raise InvalidRequestError("query is required")

    return await search(engine, payload.query)
