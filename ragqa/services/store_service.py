"""
Vector store accessor.
Persists questions, answers and document chunks and runs nearest-neighbour
queries in PostgreSQL/pgvector. Every function takes the engine explicitly.
"""
from typing import Any, Dict, List, Optional

from pgvector.sqlalchemy import Vector
from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from .. import config
from ..errors import NotFoundError
from ..logging_config import logger


def _with_embedding(sql: str):
    """text() clause whose :embedding parameter is bound as a pgvector value."""
    return text(sql).bindparams(
        bindparam("embedding", type_=Vector(config.EMBEDDING_DIM))
    )


def _distance(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


# ==================== Questions ====================

def insert_question(engine: Engine, content: str, embedding: List[float]) -> Dict[str, Any]:
    """Store a question with its embedding and return {id, content, created_at}."""
    with engine.begin() as conn:
        row = conn.execute(
            _with_embedding("""
                INSERT INTO questions (content, embedding)
                VALUES (:content, :embedding)
                RETURNING id, content, created_at
            """),
            {"content": content, "embedding": embedding},
        ).mappings().one()
    logger.info("Question stored", question_id=row["id"])
    return dict(row)


def question_exists(engine: Engine, question_id: int) -> bool:
    with engine.connect() as conn:
        found = conn.execute(
            text("SELECT 1 FROM questions WHERE id = :id"),
            {"id": question_id},
        ).first()
    return found is not None


def list_questions(engine: Engine) -> List[Dict[str, Any]]:
    """All questions, newest first."""
    with engine.connect() as conn:
        rows = conn.execute(text("""
            SELECT id, content, created_at
            FROM questions
            ORDER BY created_at DESC, id DESC
        """)).mappings().all()
    return [dict(r) for r in rows]


def nearest_question(engine: Engine, embedding: List[float]) -> Optional[Dict[str, Any]]:
    """
    Single closest question by cosine distance.

    Returns:
        {id, content, distance} or None when the table is empty
    """
    with engine.connect() as conn:
        row = conn.execute(
            _with_embedding("""
                SELECT id, content, embedding <=> CAST(:embedding AS vector) AS distance
                FROM questions
                ORDER BY embedding <=> CAST(:embedding AS vector) ASC
                LIMIT 1
            """),
            {"embedding": embedding},
        ).mappings().first()

    if row is None:
        return None
    result = dict(row)
    result["distance"] = _distance(result["distance"])
    return result


# ==================== Answers ====================

def insert_answer(engine: Engine, question_id: int, content: str) -> Dict[str, Any]:
    """
    Store an answer for an existing question.

    Raises:
        NotFoundError: if the question does not exist
    """
    try:
        with engine.begin() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM questions WHERE id = :id"),
                {"id": question_id},
            ).first()
            if not exists:
                raise NotFoundError(f"Question with id {question_id} not found")

            row = conn.execute(
                text("""
                    INSERT INTO answers (question_id, content)
                    VALUES (:qid, :content)
                    RETURNING id, question_id, content, created_at
                """),
                {"qid": question_id, "content": content},
            ).mappings().one()
    except IntegrityError as e:
        # Question deleted between the check and the insert
        raise NotFoundError(f"Question with id {question_id} not found") from e

    logger.info("Answer stored", answer_id=row["id"], question_id=question_id)
    return dict(row)


def list_answers(engine: Engine, question_id: int) -> List[Dict[str, Any]]:
    """Answers for one question, oldest first, each with the question text."""
    with engine.connect() as conn:
        rows = conn.execute(
            text("""
                SELECT a.id, a.content, a.created_at, q.content AS question
                FROM answers a
                JOIN questions q ON q.id = a.question_id
                WHERE a.question_id = :qid
                ORDER BY a.created_at ASC, a.id ASC
            """),
            {"qid": question_id},
        ).mappings().all()
    return [dict(r) for r in rows]


def insert_question_with_answer(
    engine: Engine,
    question: str,
    embedding: List[float],
    answer: str,
) -> Dict[str, Any]:
    """
    Store a generated question and its answer in one transaction.

    Returns:
        {question_id, question, answer}
    """
    with engine.begin() as conn:
        q_row = conn.execute(
            _with_embedding("""
                INSERT INTO questions (content, embedding)
                VALUES (:content, :embedding)
                RETURNING id, content
            """),
            {"content": question, "embedding": embedding},
        ).mappings().one()
        a_row = conn.execute(
            text("""
                INSERT INTO answers (question_id, content)
                VALUES (:qid, :content)
                RETURNING content
            """),
            {"qid": q_row["id"], "content": answer},
        ).mappings().one()

    return {
        "question_id": q_row["id"],
        "question": q_row["content"],
        "answer": a_row["content"],
    }


# ==================== Document chunks ====================

def insert_chunk(
    engine: Engine,
    filename: str,
    index: int,
    content: str,
    embedding: List[float],
) -> Dict[str, Any]:
    with engine.begin() as conn:
        row = conn.execute(
            _with_embedding("""
                INSERT INTO document_chunks (source_filename, chunk_index, content, embedding)
                VALUES (:filename, :idx, :content, :embedding)
                RETURNING id, source_filename, chunk_index, content, created_at
            """),
            {"filename": filename, "idx": index, "content": content, "embedding": embedding},
        ).mappings().one()
    return dict(row)


def nearest_chunks(engine: Engine, embedding: List[float], k: int) -> List[Dict[str, Any]]:
    """Up to k closest chunks, ascending cosine distance."""
    with engine.connect() as conn:
        rows = conn.execute(
            _with_embedding("""
                SELECT id, source_filename, chunk_index, content,
                       embedding <=> CAST(:embedding AS vector) AS distance
                FROM document_chunks
                ORDER BY embedding <=> CAST(:embedding AS vector) ASC
                LIMIT :k
            """),
            {"embedding": embedding, "k": k},
        ).mappings().all()

    chunks = []
    for r in rows:
        chunk = dict(r)
        chunk["distance"] = _distance(chunk["distance"])
        chunks.append(chunk)
    return chunks


# ==================== Aggregates ====================

def count_questions(engine: Engine, today: bool = False) -> int:
    sql = "SELECT COUNT(*) FROM questions"
    if today:
        sql += " WHERE CAST(created_at AS date) = CURRENT_DATE"
    with engine.connect() as conn:
        return int(conn.execute(text(sql)).scalar_one())


def count_answers(engine: Engine, today: bool = False) -> int:
    sql = "SELECT COUNT(*) FROM answers"
    if today:
        sql += " WHERE CAST(created_at AS date) = CURRENT_DATE"
    with engine.connect() as conn:
        return int(conn.execute(text(sql)).scalar_one())


def count_unanswered(engine: Engine) -> int:
    with engine.connect() as conn:
        return int(conn.execute(text("""
            SELECT COUNT(*)
            FROM questions q
            WHERE NOT EXISTS (SELECT 1 FROM answers a WHERE a.question_id = q.id)
        """)).scalar_one())


def list_unanswered(engine: Engine, limit: int) -> List[Dict[str, Any]]:
    """Newest questions that have no answers yet."""
    with engine.connect() as conn:
        rows = conn.execute(
            text("""
                SELECT q.id, q.content, q.created_at
                FROM questions q
                LEFT JOIN answers a ON a.question_id = q.id
                WHERE a.id IS NULL
                ORDER BY q.created_at DESC, q.id DESC
                LIMIT :limit
            """),
            {"limit": limit},
        ).mappings().all()
    return [dict(r) for r in rows]


def list_recent_questions(engine: Engine, limit: int) -> List[Dict[str, Any]]:
    with engine.connect() as conn:
        rows = conn.execute(
            text("""
                SELECT id, content, created_at
                FROM questions
                ORDER BY created_at DESC, id DESC
                LIMIT :limit
            """),
            {"limit": limit},
        ).mappings().all()
    return [dict(r) for r in rows]
