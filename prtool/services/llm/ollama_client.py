"""Ollama summarizer using the local generate endpoint."""

from logging import getLogger
from typing import Any

import httpx

from prtool.errors import SummaryError

logger = getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "llama3.2"


class OllamaSummarizer:
    def __init__(self, base_url: str | None = None, model: str | None = None, timeout: float = 120.0) -> None:
        self.base_url = (base_url or DEFAULT_OLLAMA_URL).rstrip("/")
        self.model = model or DEFAULT_OLLAMA_MODEL
        self.timeout = timeout

    async def summarize(self, context: str) -> str:
        """Generate a summary with a single non-streaming request.

        Raises:
            SummaryError: If Ollama is unreachable, answers with an error status, or returns invalid JSON
        """
        payload: dict[str, Any] = {"model": self.model, "prompt": context, "stream": False}
        url = f"{self.base_url}/api/generate"
        logger.debug(f"Requesting Ollama generation from {url} with model {self.model}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                result: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            raise SummaryError(
                f"Ollama API returned non-200 status: {e.response.status_code}, body: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise SummaryError(f"failed to send request to Ollama: {e}") from e
        except ValueError as e:
            raise SummaryError(f"failed to decode Ollama response: {e}") from e

        return str(result.get("response", ""))
