"""
Document ingestion service.
Chunks an extracted PDF, embeds and stores each chunk, then generates and
stores question/answer pairs. Best-effort: single item failures are recorded
and skipped, nothing is rolled back.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .. import config
from ..embedding import embed_text
from ..errors import UpstreamError
from ..logging_config import logger
from ..text_extraction import chunk_text
from .store_service import insert_chunk, insert_question_with_answer
from .synthesis_service import generate_qa_pairs

# Failures of these kinds are recorded per item; anything else aborts the upload
ITEM_ERRORS = (UpstreamError, SQLAlchemyError)


@dataclass
class ItemFailure:
    stage: str
    item: Any
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"stage": self.stage, "item": self.item, "error": self.error}


@dataclass
class IngestionReport:
    filename: str
    pages: int
    characters: int
    chunk_size: int
    overlap: int
    chunks_total: int = 0
    chunks_saved: int = 0
    chunk_failures: List[ItemFailure] = field(default_factory=list)
    qa_saved: List[Dict[str, Any]] = field(default_factory=list)
    qa_failures: List[ItemFailure] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Processed PDF: {self.chunks_saved} chunks trained, "
            f"{len(self.qa_saved)} Q&A pairs generated"
        )

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "pdf_info": {
                "filename": self.filename,
                "pages": self.pages,
                "characters_extracted": self.characters,
            },
            "chunks": {
                "total": self.chunks_total,
                "saved": self.chunks_saved,
                "failed": [f.to_dict() for f in self.chunk_failures],
                "chunk_size": self.chunk_size,
                "overlap": self.overlap,
            },
            "generated_qa": self.qa_saved,
            "qa_failures": [f.to_dict() for f in self.qa_failures],
        }


def _save_chunk(engine: Engine, filename: str, index: int, content: str) -> None:
    embedding = embed_text(content)
    insert_chunk(engine, filename, index, content, embedding)


def _save_pair(engine: Engine, pair: Dict[str, str]) -> Dict[str, Any]:
    embedding = embed_text(pair["question"])
    return insert_question_with_answer(engine, pair["question"], embedding, pair["answer"])


async def ingest_document(
    engine: Engine,
    filename: str,
    text: str,
    pages: int,
    chunk_size: int = None,
    overlap: int = None,
) -> IngestionReport:
    """
    Run the ingestion pipeline for already-extracted document text.

    Steps run strictly one after another: one outstanding provider call at
    a time.

    Returns:
        IngestionReport with per-item successes and failures
    """
    if chunk_size is None:
        chunk_size = config.CHUNK_SIZE
    if overlap is None:
        overlap = config.CHUNK_OVERLAP

    report = IngestionReport(
        filename=filename,
        pages=pages,
        characters=len(text),
        chunk_size=chunk_size,
        overlap=overlap,
    )

    # 1. Chunk -> embed -> insert
    chunks = chunk_text(text, chunk_size, overlap)
    report.chunks_total = len(chunks)
    logger.info("Created chunks", filename=filename, chunk_count=len(chunks))

    for i, chunk in enumerate(chunks):
        try:
            await asyncio.to_thread(_save_chunk, engine, filename, i, chunk)
            report.chunks_saved += 1
        except ITEM_ERRORS as e:
            logger.error("Failed to save chunk", filename=filename, chunk_index=i, exc_info=e)
            report.chunk_failures.append(ItemFailure("chunk", i, str(e)))

    logger.info("Saved chunks", filename=filename, saved=report.chunks_saved, total=len(chunks))

    # 2. Generate Q&A pairs from the start of the document
    try:
        pairs = await generate_qa_pairs(text)
    except UpstreamError as e:
        logger.error("Q&A generation failed", filename=filename, exc_info=e)
        report.qa_failures.append(ItemFailure("generation", None, str(e)))
        pairs = []

    # 3. Embed each question and store the pair
    for pair in pairs:
        try:
            saved = await asyncio.to_thread(_save_pair, engine, pair)
            report.qa_saved.append(saved)
        except ITEM_ERRORS as e:
            logger.error("Failed to save Q&A pair", question=pair["question"], exc_info=e)
            report.qa_failures.append(ItemFailure("qa_pair", pair["question"], str(e)))

    logger.info(
        "Document ingested",
        filename=filename,
        chunks_saved=report.chunks_saved,
        qa_saved=len(report.qa_saved),
        failures=len(report.chunk_failures) + len(report.qa_failures),
    )
    return report
