"""
Search service.
Embeds a query, looks up the nearest question and document chunks in
parallel, and synthesizes an answer when the best match is close enough.
"""
import asyncio
import math
import time
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.engine import Engine

from .. import config
from ..embedding import embed_text
from ..logging_config import logger
from ..utils.helpers import format_distance, preview, source_filenames
from .store_service import list_answers, nearest_chunks, nearest_question
from .synthesis_service import synthesize_from_answers, synthesize_from_chunks

SOURCE_QUESTION = "question"
SOURCE_CHUNK = "chunk"


def _as_distance(value: Optional[float]) -> float:
    return math.inf if value is None else float(value)


def pick_best(
    question: Optional[Dict[str, Any]],
    chunks: List[Dict[str, Any]],
) -> Tuple[str, float, float, float]:
    """
    Choose the better of the nearest question and the nearest chunk.

    Missing candidates count as infinitely far. Ties go to the question.

    Returns:
        (best_source, best_distance, question_distance, chunk_distance)
    """
    q_distance = _as_distance(question["distance"]) if question else math.inf
    chunk_distance = _as_distance(chunks[0]["distance"]) if chunks else math.inf

    best_source = SOURCE_QUESTION if q_distance <= chunk_distance else SOURCE_CHUNK
    return best_source, min(q_distance, chunk_distance), q_distance, chunk_distance


def unanswered_message(question: str) -> str:
    return f'Matched question: "{question}" - but no answers available yet.'


def _no_match_response(
    question: Optional[Dict[str, Any]],
    chunks: List[Dict[str, Any]],
    q_distance: float,
    threshold: float,
) -> Dict[str, Any]:
    best_question = None
    if question:
        best_question = {
            "question_id": question["id"],
            "question": question["content"],
            "distance": format_distance(q_distance) if math.isfinite(q_distance) else None,
        }

    return {
        "success": True,
        "message": f"No close match found (distance >= {threshold})",
        "best_question": best_question,
        "best_chunks": [
            {
                "chunk_id": c["id"],
                "source_filename": c["source_filename"],
                "distance": format_distance(c["distance"]),
                "preview": preview(c["content"]),
            }
            for c in chunks
        ],
    }


async def search(
    engine: Engine,
    query: str,
    threshold: float = None,
    top_k: int = None,
) -> Dict[str, Any]:
    """
    Answer a free-form query from the knowledge base.

    Workflow:
    1. Embed the query
    2. Fetch the nearest question and the top-k nearest chunks concurrently
    3. Pick the closer source (ties prefer the question)
    4. Below the threshold: synthesize from answers ("qa") or chunks ("document")
    5. Otherwise return the raw candidates without synthesis

    Returns:
        Response body for POST /search
    """
    if threshold is None:
        threshold = config.SEARCH_DISTANCE_THRESHOLD
    if top_k is None:
        top_k = config.SEARCH_TOP_K

    start_time = time.time()
    embedding = await asyncio.to_thread(embed_text, query)

    question, chunks = await asyncio.gather(
        asyncio.to_thread(nearest_question, engine, embedding),
        asyncio.to_thread(nearest_chunks, engine, embedding, top_k),
    )

    best_source, best_distance, q_distance, chunk_distance = pick_best(question, chunks)
    logger.info(
        "Search candidates",
        best_source=best_source,
        best_distance=best_distance if math.isfinite(best_distance) else None,
        chunk_count=len(chunks),
    )

    if best_distance < threshold:
        if best_source == SOURCE_QUESTION and question:
            answers = await asyncio.to_thread(list_answers, engine, question["id"])

            if answers:
                fix = await synthesize_from_answers(query, question["content"], answers)
            elif chunks:
                # Close question but nothing recorded for it yet
                fix = await synthesize_from_chunks(query, chunks)
            else:
                fix = unanswered_message(question["content"])

            logger.info(
                "Search answered from Q&A",
                question_id=question["id"],
                answers_used=len(answers),
                time_ms=round((time.time() - start_time) * 1000, 2),
            )
            return {
                "success": True,
                "fix": fix,
                "source": "qa",
                "match": {
                    "question_id": question["id"],
                    "question": question["content"],
                    "distance": format_distance(q_distance),
                    "answers_used": len(answers),
                },
            }

        if chunks:
            fix = await synthesize_from_chunks(query, chunks)
            files = source_filenames(chunks)
            logger.info(
                "Search answered from documents",
                chunks_used=len(chunks),
                source_files=files,
                time_ms=round((time.time() - start_time) * 1000, 2),
            )
            return {
                "success": True,
                "fix": fix,
                "source": "document",
                "match": {
                    "chunks_used": len(chunks),
                    "best_distance": format_distance(chunk_distance),
                    "source_files": files,
                },
            }

    logger.info(
        "Search found no close match",
        threshold=threshold,
        time_ms=round((time.time() - start_time) * 1000, 2),
    )
    return _no_match_response(question, chunks, q_distance, threshold)
