from enum import Enum
from functools import lru_cache
from typing import Union

from pydantic import BaseModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.ollama import OllamaProvider


class ModelConfig(BaseModel):
    """Configuration for a language model: which provider serves it and its limits."""

    provider: str
    model_name: str
    context_window: int


class ModelChoice(Enum):
    """Available language models with their configurations."""

    OPENAI_GPT4O_MINI = ModelConfig(
        provider="openai",
        model_name="gpt-4o-mini",
        context_window=128_000,
    )
    GEMINI_FLASH_LITE = ModelConfig(
        provider="google",
        model_name="gemini-2.0-flash-lite",
        context_window=1_000_000,
    )
    # https://ollama.com/library/qwen3 - Local models for offline runs
    OLLAMA_QWEN3_8B = ModelConfig(
        provider="ollama",
        model_name="qwen3:8b",
        context_window=40_000,
    )


ModelSpec = Union[str, OpenAIChatModel]

_OLLAMA_BASE_URL = "http://127.0.0.1:11434/v1"


@lru_cache(maxsize=None)
def _get_ollama_model(model_name: str) -> OpenAIChatModel:
    provider = OllamaProvider(base_url=_OLLAMA_BASE_URL)
    return OpenAIChatModel(model_name=model_name, provider=provider)


def get_model(choice: ModelChoice) -> ModelSpec:
    """Get a model instance (or pydantic-ai model string) from a ModelChoice."""
    config = choice.value
    if config.provider == "openai":
        return f"openai:{config.model_name}"
    if config.provider == "google":
        return f"google-gla:{config.model_name}"
    if config.provider == "ollama":
        return _get_ollama_model(config.model_name)
    raise ValueError(f"Unsupported model provider: {config.provider}")
