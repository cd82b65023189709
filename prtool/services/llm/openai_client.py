"""OpenAI chat completion summarizer."""

from logging import getLogger

from openai import AsyncOpenAI, OpenAIError

from prtool.errors import SummaryError

logger = getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"


class OpenAISummarizer:
    def __init__(self, api_key: str, model: str | None = None, client: AsyncOpenAI | None = None) -> None:
        self.model = model or DEFAULT_OPENAI_MODEL
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def summarize(self, context: str) -> str:
        """Send the context as a single user message and return the reply.

        Raises:
            SummaryError: If the API call fails or returns no choices
        """
        logger.debug(f"Requesting OpenAI chat completion with model {self.model}")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": context}],
            )
        except OpenAIError as e:
            raise SummaryError(f"OpenAI chat completion error: {e}") from e

        if not response.choices:
            raise SummaryError("OpenAI chat completion returned no choices")
        return response.choices[0].message.content or ""
