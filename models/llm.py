from __future__ import annotations

from typing import Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_ollama import ChatOllama

from common.config import LLMConfig
from common.errors import ConfigError, ProviderError
from common.logger import get_logger

log = get_logger(__name__)


class GenerativeProvider:
    """Answers a (system instruction, user instruction) pair with generated text."""

    def __init__(self, chat_model: BaseChatModel):
        self.chat_model = chat_model

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
        try:
            response = self.chat_model.invoke(messages)
        except Exception as e:
            raise ProviderError(f"Completion request failed: {e}") from e

        text = response.content if response is not None else None
        if not isinstance(text, str) or not text:
            raise ProviderError("Completion response did not contain any text.")
        log.info("Received completion (%d chars)", len(text))
        return text


def load_local_llm(cfg: LLMConfig, base_url: Optional[str] = None) -> BaseChatModel:
    if cfg.provider == "ollama":
        kwargs = {"model": cfg.model_name, "temperature": cfg.temperature}
        if base_url:
            kwargs["base_url"] = base_url
        return ChatOllama(**kwargs)
    raise ConfigError(f"Unsupported provider: {cfg.provider}")


def load_generative_provider(
    cfg: LLMConfig, base_url: Optional[str] = None
) -> GenerativeProvider:
    log.info("Using %s chat model (%s)", cfg.provider, cfg.model_name)
    return GenerativeProvider(load_local_llm(cfg, base_url))
