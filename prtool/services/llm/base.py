from typing import Protocol

from prtool.errors import SummaryError

STUB_SUMMARY = "Summary generation is disabled (stub provider). Configure llm_provider to generate a summary."


class Summarizer(Protocol):
    async def summarize(self, context: str) -> str: ...


class StubSummarizer:
    """Returns a fixed summary, or raises a configured error."""

    def __init__(self, summary: str = STUB_SUMMARY, error: Exception | None = None) -> None:
        self.summary = summary
        self.error = error
        self.contexts: list[str] = []

    async def summarize(self, context: str) -> str:
        self.contexts.append(context)
        if self.error is not None:
            raise SummaryError(str(self.error)) from self.error
        return self.summary
