from openai import OpenAI

from . import config

if not config.OPENAI_API_KEY:
    raise RuntimeError("OPENAI_API_KEY is not set. Put it in env or .env (server-side only).")

client = OpenAI(api_key=config.OPENAI_API_KEY)

EMBED_MODEL = config.EMBED_MODEL
