import asyncio
import math

import pytest

from ragqa.services import search_service
from ragqa.services.search_service import pick_best, search


def run(coro):
    return asyncio.run(coro)


def at_distance(distance):
    """Unit vector whose cosine distance from [1, 0, 0] is `distance`."""
    cos = 1.0 - distance
    return [cos, math.sqrt(1.0 - cos * cos), 0.0]


@pytest.fixture
def fixed_candidates(monkeypatch):
    """Replace both nearest-neighbour lookups with fixed results."""
    state = {"question": None, "chunks": []}
    monkeypatch.setattr(search_service, "nearest_question", lambda engine, emb: state["question"])
    monkeypatch.setattr(search_service, "nearest_chunks", lambda engine, emb, k: state["chunks"][:k])
    return state


def chunk(id_, filename, distance, content="chunk text"):
    return {"id": id_, "source_filename": filename, "chunk_index": 0,
            "content": content, "distance": distance}


# ==================== pick_best ====================

def test_pick_best_prefers_question_on_tie():
    source, best, q, c = pick_best({"distance": 0.2}, [chunk(1, "a.pdf", 0.2)])

    assert source == "question"
    assert best == q == c == 0.2


def test_pick_best_prefers_closer_chunk():
    source, best, _, _ = pick_best({"distance": 0.3}, [chunk(1, "a.pdf", 0.1)])

    assert (source, best) == ("chunk", 0.1)


def test_pick_best_missing_candidates_are_infinite():
    source, best, q, c = pick_best(None, [])

    assert source == "question"
    assert math.isinf(best) and math.isinf(q) and math.isinf(c)

    source, best, q, _ = pick_best(None, [chunk(1, "a.pdf", 0.5)])
    assert source == "chunk" and best == 0.5 and math.isinf(q)


# ==================== threshold decision ====================

def test_distance_exactly_at_threshold_is_no_match(engine, store, embedder, synthesizer, fixed_candidates):
    fixed_candidates["question"] = {"id": 1, "content": "What is pgvector?", "distance": 0.4}

    result = run(search(engine, "pgvector"))

    assert result["message"] == "No close match found (distance >= 0.4)"
    assert result["best_question"] == {"question_id": 1, "question": "What is pgvector?", "distance": "0.4000"}
    assert result["best_chunks"] == []
    assert "fix" not in result
    assert synthesizer.calls == []


def test_question_match_with_answers_synthesizes_from_answers(engine, store, embedder, synthesizer):
    q = store.insert_question(engine, "How do I fix CORS errors?", [1.0, 0.0, 0.0])
    store.insert_answer(engine, q["id"], "Use the cors middleware.")
    store.insert_answer(engine, q["id"], "Set Access-Control-Allow-Origin.")
    embedder.vectors["cors problem"] = at_distance(0.05)

    result = run(search(engine, "cors problem"))

    assert result["source"] == "qa"
    assert result["fix"] == "synthesized from 2 answers"
    assert result["match"]["question_id"] == q["id"]
    assert result["match"]["answers_used"] == 2
    assert result["match"]["distance"] == "0.0500"
    assert synthesizer.calls == [(
        "answers", "cors problem", "How do I fix CORS errors?",
        ["Use the cors middleware.", "Set Access-Control-Allow-Origin."],
    )]


def test_unanswered_question_without_chunks_returns_static_message(engine, store, embedder, synthesizer):
    store.insert_question(engine, "What is pgvector?", [1.0, 0.0, 0.0])
    embedder.vectors["pgvector extension"] = at_distance(0.1)

    result = run(search(engine, "pgvector extension"))

    assert result["source"] == "qa"
    assert "What is pgvector?" in result["fix"]
    assert "no answers available yet" in result["fix"]
    assert result["match"]["answers_used"] == 0
    assert result["match"]["distance"] == "0.1000"
    assert synthesizer.calls == []


def test_unanswered_question_falls_back_to_chunks(engine, store, embedder, synthesizer):
    store.insert_question(engine, "What is pgvector?", [1.0, 0.0, 0.0])
    # Far from the query, so the question stays the best match
    store.insert_chunk(engine, "guide.pdf", 0, "pgvector adds a vector type", [0.0, 0.0, 1.0])
    embedder.vectors["pgvector extension"] = at_distance(0.1)

    result = run(search(engine, "pgvector extension"))

    assert result["source"] == "qa"
    assert result["fix"] == "synthesized from 1 chunks"
    assert result["match"]["answers_used"] == 0
    assert synthesizer.calls[0][0] == "chunks"


def test_chunk_match_reports_document_source(engine, store, embedder, synthesizer, fixed_candidates):
    fixed_candidates["question"] = {"id": 7, "content": "Unrelated", "distance": 0.9}
    fixed_candidates["chunks"] = [
        chunk(1, "manual.pdf", 0.12),
        chunk(2, "faq.pdf", 0.2),
        chunk(3, "manual.pdf", 0.25),
    ]

    result = run(search(engine, "how to install"))

    assert result == {
        "success": True,
        "fix": "synthesized from 3 chunks",
        "source": "document",
        "match": {
            "chunks_used": 3,
            "best_distance": "0.1200",
            "source_files": ["manual.pdf", "faq.pdf"],
        },
    }


def test_top_k_limits_chunk_lookup(engine, store, embedder, synthesizer):
    for i in range(5):
        store.insert_chunk(engine, f"doc{i}.pdf", 0, f"text {i}", at_distance(0.1 + i * 0.01))
    embedder.vectors["query"] = [1.0, 0.0, 0.0]

    result = run(search(engine, "query"))

    assert result["match"]["chunks_used"] == 3


def test_no_candidates_at_all(engine, store, embedder, synthesizer):
    result = run(search(engine, "anything"))

    assert result == {
        "success": True,
        "message": "No close match found (distance >= 0.4)",
        "best_question": None,
        "best_chunks": [],
    }
    assert synthesizer.calls == []


def test_no_match_lists_chunk_previews(engine, store, embedder, synthesizer, fixed_candidates):
    fixed_candidates["chunks"] = [chunk(4, "long.pdf", 0.61, content="y" * 300)]

    result = run(search(engine, "far away"))

    assert result["best_question"] is None
    assert result["best_chunks"] == [{
        "chunk_id": 4,
        "source_filename": "long.pdf",
        "distance": "0.6100",
        "preview": "y" * 200 + "...",
    }]


def test_threshold_is_configurable(engine, store, embedder, synthesizer, fixed_candidates):
    fixed_candidates["question"] = {"id": 1, "content": "Q", "distance": 0.45}

    result = run(search(engine, "q", threshold=0.5))

    assert result["source"] == "qa"


# ==================== HTTP ====================

def test_search_endpoint_pgvector_scenario(client, store, embedder, synthesizer):
    created = client.post("/questions", json={"content": "What is pgvector?"}).json()
    embedder.vectors["pgvector extension"] = at_distance(0.1)

    resp = client.post("/search", json={"query": "pgvector extension"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["source"] == "qa"
    assert body["match"]["question_id"] == created["question"]["id"]
    assert body["match"]["answers_used"] == 0
    assert "What is pgvector?" in body["fix"]
    assert synthesizer.calls == []


@pytest.mark.parametrize("payload", [{}, {"query": ""}, {"query": "   "}])
def test_search_requires_query(client, payload):
    resp = client.post("/search", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "query is required"}
