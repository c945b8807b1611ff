"""LLM client for content generation, using OpenRouter."""

from typing import Optional, Type, TypeVar

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from pr_assistant.config import settings
from pr_assistant.core.logging import get_logger

logger = get_logger("llm")

T = TypeVar("T", bound=BaseModel)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

SUPPORTED_MODELS = {
    "claude-sonnet-4": {
        "model_id": "anthropic/claude-sonnet-4",
        "structured_method": "function_calling",
    },
    "claude-opus-4": {
        "model_id": "anthropic/claude-opus-4",
        "structured_method": "function_calling",
    },
    "gpt-4o": {
        "model_id": "openai/gpt-4o",
        "structured_method": "json_schema",
    },
    "gpt-4o-mini": {
        "model_id": "openai/gpt-4o-mini",
        "structured_method": "json_schema",
    },
}
DEFAULT_MODEL = "claude-sonnet-4"


def _model_config(model: Optional[str]) -> dict:
    return SUPPORTED_MODELS.get(model or settings.generation_model, SUPPORTED_MODELS[DEFAULT_MODEL])


def get_chat_llm(
    model: Optional[str] = None,
    temperature: float = 0.0,
) -> ChatOpenAI:
    """Get a chat LLM instance via OpenRouter."""
    api_key = settings.openrouter_api_key
    if not api_key:
        raise ValueError("OPENROUTER_API_KEY not configured")

    model_id = _model_config(model)["model_id"]
    logger.debug(f"[LLM] Using OpenRouter model {model_id}")

    return ChatOpenAI(
        model=model_id,
        api_key=api_key,
        base_url=OPENROUTER_BASE_URL,
        temperature=temperature,
    )


def get_structured_llm(
    output_model: Type[T],
    model: Optional[str] = None,
    temperature: float = 0.0,
) -> Runnable:
    """Get an LLM whose output is parsed into `output_model`."""
    base_llm = get_chat_llm(model=model, temperature=temperature)
    return base_llm.with_structured_output(
        output_model, method=_model_config(model)["structured_method"]
    )


async def generate_structured(output_model: Type[T], system_prompt: str, prompt: str) -> T:
    """Run one structured generation call and return the parsed model."""
    llm = get_structured_llm(output_model)
    result = await llm.ainvoke([
        SystemMessage(content=system_prompt),
        HumanMessage(content=prompt),
    ])
    logger.info(f"[LLM] Generated {output_model.__name__}")
    return result
