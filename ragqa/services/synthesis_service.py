"""
Synthesis service.
Builds prompts from retrieved context and runs a single, non-streaming LLM
completion through the configured provider.
"""
import asyncio
from time import perf_counter
from typing import Dict, List

import aiohttp
from openai import OpenAIError

from .. import config
from ..errors import SynthesisError
from ..logging_config import logger
from ..ollama_client import ollama_chat
from ..openai_client import client as openai_client
from ..utils.helpers import parse_qa_pairs
from .model_service import resolve_model

# Returned when the provider answers with an empty completion
NO_CONTENT_TEXT = "Unable to generate a response."


def build_answers_prompt(query: str, question: str, answers: List[Dict]) -> str:
    recorded = "\n".join(
        f"{i}. {answer['content']}" for i, answer in enumerate(answers, start=1)
    )
    return (
        "You are a helpful assistant. A user asked:\n\n"
        f'"{query}"\n\n'
        "The most relevant question in our knowledge base is:\n"
        f'"{question}"\n\n'
        "Recorded answers:\n"
        f"{recorded}\n\n"
        "Provide a single clear, concise, and easy-to-understand response. "
        "Do not mention combining multiple answers."
    )


def build_chunks_prompt(query: str, chunks: List[Dict]) -> str:
    context = "\n\n".join(
        f"[Chunk {i} from {chunk['source_filename']}]:\n{chunk['content']}"
        for i, chunk in enumerate(chunks, start=1)
    )
    return (
        "You are a helpful assistant. A user asked:\n\n"
        f'"{query}"\n\n'
        "Here are the most relevant sections from our knowledge base documents:\n\n"
        f"{context}\n\n"
        "Based on the above context, provide a single clear, concise, and "
        "easy-to-understand answer to the user's query. "
        "Reference specific details from the documents."
    )


def build_qa_prompt(text: str) -> str:
    return (
        "You are an expert knowledge extractor. Analyze the following document text "
        "and generate a comprehensive set of question-and-answer pairs that capture "
        "all the key information.\n\n"
        "Rules:\n"
        "- Generate between 5 and 20 Q&A pairs depending on the content length and richness.\n"
        "- Questions should be specific, useful, and cover all important topics in the document.\n"
        "- Answers should be concise but complete, using information directly from the text.\n"
        "- Return ONLY a valid JSON array, no markdown fences, no extra text.\n"
        '- Format: [{"question": "...", "answer": "..."}]\n\n'
        "Document text:\n"
        f"{text}"
    )


async def _complete_openai(model_name: str, messages: List[Dict], temperature: float) -> str:
    response = await asyncio.to_thread(
        openai_client.chat.completions.create,
        model=model_name,
        messages=messages,
        temperature=temperature,
    )
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


async def complete(prompt: str, temperature: float = None) -> str:
    """
    Send one prompt to the configured LLM and return the raw completion text.

    Raises:
        SynthesisError: if the provider call fails
    """
    if temperature is None:
        temperature = config.LLM_TEMPERATURE
    provider, model_name = resolve_model()
    messages = [{"role": "user", "content": prompt}]

    t = perf_counter()
    try:
        if provider == "ollama":
            content = await ollama_chat(model_name, messages, temperature=temperature)
        else:
            content = await _complete_openai(model_name, messages, temperature)
    except (OpenAIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error("LLM request failed", provider=provider, model=model_name, error=str(e))
        raise SynthesisError(f"LLM API error: {e}") from e

    logger.info(
        "LLM response received",
        provider=provider,
        model=model_name,
        prompt_chars=len(prompt),
        time_ms=round((perf_counter() - t) * 1000, 2),
    )
    return content


async def synthesize_from_answers(query: str, question: str, answers: List[Dict]) -> str:
    """One coherent answer built from the recorded answers of the matched question."""
    text = await complete(build_answers_prompt(query, question, answers))
    return text.strip() or NO_CONTENT_TEXT


async def synthesize_from_chunks(query: str, chunks: List[Dict]) -> str:
    """One coherent answer built from retrieved document excerpts."""
    text = await complete(build_chunks_prompt(query, chunks))
    return text.strip() or NO_CONTENT_TEXT


async def generate_qa_pairs(text: str) -> List[Dict[str, str]]:
    """
    Ask the LLM for question/answer pairs covering the start of a document.

    Only the first config.QA_SOURCE_MAX_CHARS characters are sent.

    Raises:
        SynthesisError: provider failure
        ParseError: output is not a JSON array of {question, answer} objects
    """
    truncated = text[:config.QA_SOURCE_MAX_CHARS]
    raw = await complete(build_qa_prompt(truncated), temperature=config.QA_TEMPERATURE)
    pairs = parse_qa_pairs(raw)
    logger.info("Generated Q&A pairs", count=len(pairs), source_chars=len(truncated))
    return pairs
