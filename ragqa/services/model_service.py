"""
Model service for LLM provider selection.
Resolves the configured "provider:model" string.
"""
from typing import Tuple

from .. import config

SUPPORTED_PROVIDERS = ("openai", "ollama")
DEFAULT_PROVIDER = "openai"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


def resolve_model(model_string: str = None) -> Tuple[str, str]:
    """
    Resolve a model string to provider and model name.
    
    Args:
        model_string: Format "provider:model_name" (e.g., "openai:gpt-4o-mini").
                     None uses config.LLM_MODEL.
    
    Returns:
        Tuple of (provider, model_name)
        
    Examples:
        >>> resolve_model("openai:gpt-4o")
        ("openai", "gpt-4o")
        
        >>> resolve_model("ollama:qwen2.5:7b")
        ("ollama", "qwen2.5:7b")
        
        >>> resolve_model("gpt-4o")
        ("openai", "gpt-4o")  # bare names are OpenAI models
    """
    if model_string is None:
        model_string = config.LLM_MODEL
    model_string = (model_string or "").strip()
    if not model_string:
        return DEFAULT_PROVIDER, DEFAULT_OPENAI_MODEL

    provider, sep, model_name = model_string.partition(":")
    if sep and provider in SUPPORTED_PROVIDERS:
        if not model_name:
            return DEFAULT_PROVIDER, DEFAULT_OPENAI_MODEL
        return provider, model_name

    return DEFAULT_PROVIDER, model_string
