"""
Answer API routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from ..db import get_engine
from ..errors import InvalidRequestError
from ..schemas import AnswerCreate
from ..services.store_service import insert_answer, list_answers

router = APIRouter(tags=["answers"])


@router.post("/answers", status_code=201)
def add_answer(payload: AnswerCreate, engine: Engine = Depends(get_engine)):
    """Link an answer to an existing question (404 if it does not exist)."""
    if payload.question_id is None or not payload.content or not payload.content.strip():
        raise InvalidRequestError("question_id and content are required")

    answer = insert_answer(engine, payload.question_id, payload.content)
    return {
        "success": True,
        "message": "Answer added successfully",
        "answer": {
            "id": answer["id"],
            "question_id": answer["question_id"],
            "content": answer["content"],
            "created_at": answer["created_at"],
        },
    }


@router.get("/answers/{question_id}")
def get_answers(question_id: int, engine: Engine = Depends(get_engine)):
    """Answers for a question, oldest first. Unknown ids give an empty list."""
    return {"success": True, "answers": list_answers(engine, question_id)}
