from typing import List

from openai import OpenAIError

from .errors import EmbeddingError
from .logging_config import logger
from .openai_client import client, EMBED_MODEL


def embed_text(text: str) -> List[float]:
    """
    Embed a single text with the configured provider model.

    One provider call per invocation: no batching, retry or caching.

    Raises:
        EmbeddingError: provider error or a response without an embedding
    """
    try:
        resp = client.embeddings.create(model=EMBED_MODEL, input=text)
    except OpenAIError as e:
        logger.error("Embedding request failed", model=EMBED_MODEL, error=str(e))
        raise EmbeddingError(f"Embedding API error: {e}") from e

    data = getattr(resp, "data", None)
    if not data or not getattr(data[0], "embedding", None):
        raise EmbeddingError("Embedding API returned no embedding values")
    return list(data[0].embedding)
