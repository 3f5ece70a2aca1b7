"""
PDF upload route.
Extracts text from an uploaded PDF, stores embedded chunks and generated
Q&A pairs.
"""
import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.engine import Engine

from .. import config
from ..db import get_engine
from ..errors import InvalidRequestError, PdfExtractionError
from ..logging_config import logger
from ..services.ingestion_service import ingest_document
from ..text_extraction import read_text_from_pdf

router = APIRouter(tags=["documents"])

PDF_MIME_TYPE = "application/pdf"


def _is_pdf(upload: UploadFile) -> bool:
    return (upload.content_type or "") == PDF_MIME_TYPE or (upload.filename or "").lower().endswith(".pdf")


@router.post("/upload-pdf")
async def upload_pdf(file: Optional[UploadFile] = File(None), engine: Engine = Depends(get_engine)):
    """
    Upload a PDF and turn it into searchable knowledge.

    Process:
    1. Validate the upload (PDF, size limit)
    2. Extract text
    3. Chunk, embed and store every chunk
    4. Generate Q&A pairs from the text and store them

    Returns:
        Ingestion report with per-item successes and failures
    """
    if file is None or not file.filename:
        raise InvalidRequestError("No file uploaded. Use form field name 'file'.")

    if not _is_pdf(file):
        raise InvalidRequestError("Only PDF files are accepted.")

    data = await file.read(config.MAX_UPLOAD_BYTES + 1)
    if len(data) > config.MAX_UPLOAD_BYTES:
        raise InvalidRequestError(
            f"File '{file.filename}' is too large. "
            f"Max size is {config.MAX_UPLOAD_BYTES // (1024 * 1024)} MB."
        )

    logger.info("Processing PDF", filename=file.filename, size_bytes=len(data))

    text, pages = await asyncio.to_thread(read_text_from_pdf, data)
    if len(text.strip()) < config.MIN_EXTRACTED_CHARS:
        raise PdfExtractionError("Could not extract sufficient text from the PDF.")

    logger.info("Extracted text", filename=file.filename, characters=len(text), pages=pages)

    report = await ingest_document(engine, file.filename, text, pages)
    return report.to_response()
