import aiohttp

from . import config


async def ollama_chat(model: str, messages: list, temperature: float = None) -> str:
    """
    Run a single non-streaming chat completion against Ollama.
    Returns the assistant message text ("" when Ollama sends none).
    """
    payload = {"model": model, "messages": messages, "stream": False}
    if temperature is not None:
        payload["options"] = {"temperature": temperature}

    async with aiohttp.ClientSession() as session:
        async with session.post(f"{config.OLLAMA_URL}/api/chat", json=payload) as resp:
            if resp.status >= 400:
                body = await resp.text()
                raise aiohttp.ClientResponseError(
                    resp.request_info,
                    resp.history,
                    status=resp.status,
                    message=f"Ollama chat error ({resp.status}): {body}",
                )
            data = await resp.json()

    return (data.get("message") or {}).get("content") or ""
