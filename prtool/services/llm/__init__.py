"""Summarizer collaborators for the merged pull request report."""

from logging import getLogger

from prtool.conf.config import EffectiveConfig

from .base import StubSummarizer, Summarizer
from .ollama_client import OllamaSummarizer
from .openai_client import OpenAISummarizer

logger = getLogger(__name__)

__all__ = ["OllamaSummarizer", "OpenAISummarizer", "StubSummarizer", "Summarizer", "create_summarizer"]


def create_summarizer(cfg: EffectiveConfig, ollama_base_url: str | None = None) -> Summarizer:
    """Create the summarizer selected by ``llm_provider``.

    Unknown providers, and OpenAI without an API key, fall back to the stub.
    """
    provider = cfg.llm_provider.lower()

    if provider in ("", "stub"):
        return StubSummarizer()

    if provider == "openai":
        if not cfg.llm_api_key:
            logger.warning("OpenAI API key not provided, falling back to stub summarizer")
            return StubSummarizer()
        return OpenAISummarizer(api_key=cfg.llm_api_key, model=cfg.llm_model or None)

    if provider == "ollama":
        return OllamaSummarizer(base_url=ollama_base_url, model=cfg.llm_model or None)

    logger.warning(f"Unknown LLM provider '{cfg.llm_provider}', falling back to stub summarizer")
    return StubSummarizer()
