import itertools
import math
import os
from datetime import datetime, timedelta, timezone

# Provider credentials must exist before ragqa.openai_client is imported
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("RUN_MIGRATIONS", "false")

import pytest
from fastapi.testclient import TestClient

from ragqa.db import get_engine
from ragqa.errors import NotFoundError
from ragqa.main import app

DEFAULT_VECTOR = [1.0, 0.0, 0.0]


def cosine_distance(a, b):
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return 1.0 - dot / norm


class FakeEmbedder:
    """Deterministic embedding provider: known texts map to fixed vectors."""

    def __init__(self):
        self.vectors = {}
        self.calls = []

    def __call__(self, text):
        self.calls.append(text)
        return list(self.vectors.get(text, DEFAULT_VECTOR))


class FakeStore:
    """In-memory stand-in for store_service with the same call signatures."""

    def __init__(self):
        self.questions = []
        self.answers = []
        self.chunks = []
        self._ids = itertools.count(1)
        self._clock = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)

    def _now(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    @staticmethod
    def _public(question):
        return {k: question[k] for k in ("id", "content", "created_at")}

    def insert_question(self, engine, content, embedding):
        row = {"id": next(self._ids), "content": content, "embedding": embedding,
               "created_at": self._now()}
        self.questions.append(row)
        return self._public(row)

    def insert_answer(self, engine, question_id, content):
        if not any(q["id"] == question_id for q in self.questions):
            raise NotFoundError(f"Question with id {question_id} not found")
        row = {"id": next(self._ids), "question_id": question_id, "content": content,
               "created_at": self._now()}
        self.answers.append(row)
        return dict(row)

    def insert_question_with_answer(self, engine, question, embedding, answer):
        q = self.insert_question(engine, question, embedding)
        a = self.insert_answer(engine, q["id"], answer)
        return {"question_id": q["id"], "question": q["content"], "answer": a["content"]}

    def insert_chunk(self, engine, filename, index, content, embedding):
        row = {"id": next(self._ids), "source_filename": filename, "chunk_index": index,
               "content": content, "embedding": embedding, "created_at": self._now()}
        self.chunks.append(row)
        return dict(row)

    def list_questions(self, engine):
        return [self._public(q) for q in reversed(self.questions)]

    def list_answers(self, engine, question_id):
        content = next((q["content"] for q in self.questions if q["id"] == question_id), None)
        return [
            {"id": a["id"], "content": a["content"], "created_at": a["created_at"], "question": content}
            for a in self.answers if a["question_id"] == question_id
        ]

    def nearest_question(self, engine, embedding):
        if not self.questions:
            return None
        best = min(self.questions, key=lambda q: cosine_distance(q["embedding"], embedding))
        return {"id": best["id"], "content": best["content"],
                "distance": cosine_distance(best["embedding"], embedding)}

    def nearest_chunks(self, engine, embedding, k):
        ranked = sorted(self.chunks, key=lambda c: cosine_distance(c["embedding"], embedding))
        return [
            {"id": c["id"], "source_filename": c["source_filename"], "chunk_index": c["chunk_index"],
             "content": c["content"], "distance": cosine_distance(c["embedding"], embedding)}
            for c in ranked[:k]
        ]

    def count_questions(self, engine, today=False):
        return len(self.questions)

    def count_answers(self, engine, today=False):
        return len(self.answers)

    def _unanswered(self):
        answered = {a["question_id"] for a in self.answers}
        return [self._public(q) for q in reversed(self.questions) if q["id"] not in answered]

    def count_unanswered(self, engine):
        return len(self._unanswered())

    def list_unanswered(self, engine, limit):
        return self._unanswered()[:limit]

    def list_recent_questions(self, engine, limit):
        return self.list_questions(engine)[:limit]


# Module attribute paths that import store functions by name
STORE_BINDINGS = {
    "ragqa.routes.questions": ["insert_question", "list_questions"],
    "ragqa.routes.answers": ["insert_answer", "list_answers"],
    "ragqa.services.search_service": ["nearest_question", "nearest_chunks", "list_answers"],
    "ragqa.services.stats_service": [
        "count_questions", "count_answers", "count_unanswered",
        "list_unanswered", "list_recent_questions",
    ],
    "ragqa.services.ingestion_service": ["insert_chunk", "insert_question_with_answer"],
}

EMBED_BINDINGS = [
    "ragqa.routes.questions",
    "ragqa.services.search_service",
    "ragqa.services.ingestion_service",
]


class FakeSynthesizer:
    """Records synthesis calls instead of contacting an LLM."""

    def __init__(self):
        self.calls = []

    async def from_answers(self, query, question, answers):
        self.calls.append(("answers", query, question, [a["content"] for a in answers]))
        return f"synthesized from {len(answers)} answers"

    async def from_chunks(self, query, chunks):
        self.calls.append(("chunks", query, [c["source_filename"] for c in chunks]))
        return f"synthesized from {len(chunks)} chunks"


@pytest.fixture
def engine():
    # Store functions are faked, so the engine is only passed through
    return object()


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    for module, names in STORE_BINDINGS.items():
        for name in names:
            monkeypatch.setattr(f"{module}.{name}", getattr(fake, name))
    return fake


@pytest.fixture
def embedder(monkeypatch):
    fake = FakeEmbedder()
    for module in EMBED_BINDINGS:
        monkeypatch.setattr(f"{module}.embed_text", fake)
    return fake


@pytest.fixture
def synthesizer(monkeypatch):
    fake = FakeSynthesizer()
    monkeypatch.setattr("ragqa.services.search_service.synthesize_from_answers", fake.from_answers)
    monkeypatch.setattr("ragqa.services.search_service.synthesize_from_chunks", fake.from_chunks)
    return fake


@pytest.fixture
def client(engine, store, embedder):
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()
