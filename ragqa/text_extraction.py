import io
from typing import List, Tuple

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .errors import PdfExtractionError


def read_text_from_pdf(data: bytes) -> Tuple[str, int]:
    """
    Extract the text of every page of an in-memory PDF.

    Returns:
        (text, page_count); pages are joined with newlines

    Raises:
        PdfExtractionError: if the bytes cannot be parsed as a PDF
    """
    try:
        pdf = PdfReader(io.BytesIO(data))
        parts = [page.extract_text() or "" for page in pdf.pages]
    except (PyPdfError, ValueError) as e:
        raise PdfExtractionError(f"Could not read PDF: {e}") from e
    return "\n".join(parts), len(parts)


def chunk_text(text: str, size: int = 1000, overlap: int = 200) -> List[str]:
    """
    Split text into fixed-size windows that overlap by `overlap` characters.

    Window i covers [i * (size - overlap), i * (size - overlap) + size),
    clipped to the end of the text. Raw character offsets, no normalisation.
    Stops after the first window that reaches the end of the text, so a
    trailing window lying entirely inside its predecessor is never emitted.

    Raises:
        ValueError: unless 0 <= overlap < size
    """
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    if overlap < 0 or overlap >= size:
        raise ValueError(f"overlap must be in [0, size), got overlap={overlap} size={size}")

    step = size - overlap
    chunks = []
    start = 0
    n = len(text)
    while start < n:
        end = min(start + size, n)
        chunks.append(text[start:end])
        if end == n:
            break
        start += step
    return chunks
