"""
Question API routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from ..db import get_engine
from ..embedding import embed_text
from ..errors import InvalidRequestError
from ..logging_config import logger
from ..schemas import QuestionCreate
from ..services.store_service import insert_question, list_questions

router = APIRouter(tags=["questions"])


@router.post("/questions", status_code=201)
def register_question(payload: QuestionCreate, engine: Engine = Depends(get_engine)):
    """
    Register a question.

    The text is embedded with the provider model and stored with its vector.
    """
    if not payload.content or not payload.content.strip():
        raise InvalidRequestError("content is required")

    embedding = embed_text(payload.content)
    question = insert_question(engine, payload.content, embedding)
    logger.info("Question registered", question_id=question["id"])

    return {
        "success": True,
        "message": "Question registered successfully",
        "question": {
            "id": question["id"],
            "content": question["content"],
            "created_at": question["created_at"],
        },
    }


@router.get("/questions")
def get_questions(engine: Engine = Depends(get_engine)):
    """All registered questions, newest first."""
    return {"success": True, "questions": list_questions(engine)}
