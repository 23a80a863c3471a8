from __future__ import annotations

from typing import TYPE_CHECKING

from memo_app.config import settings
from memo_app.core.errors import EmptyResultError, UpstreamError, ValidationError
from memo_app.utils.logging import get_logger
from memo_app.utils.openai_client import get_openai_client

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = get_logger(__name__)

SUMMARY_INSTRUCTIONS = (
    "Summarize the following memo concisely. "
    "Capture its core message and main points in 3-5 sentences."
)


def build_summary_prompt(title: str | None, content: str) -> str:
    """Embed the memo title and content into the fixed summary instruction."""
    return (
        f"{SUMMARY_INSTRUCTIONS}\n\n"
        f"Title: {(title or '').strip()}\n\n"
        f"Content:\n{content.strip()}\n\n"
        "Summary:"
    )


class SummaryService:
    """Generates a short summary of a memo with the OpenAI Responses API."""

    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        self._client = client

    async def summarize(self, title: str | None, content: str | None) -> str:
        """Return the trimmed summary text for a memo.

        Raises:
            ValidationError: content is empty; no request is sent
            ConfigurationError: no OpenAI API key is configured
            EmptyResultError: the model returned no text
            UpstreamError: the API call failed
        """
        if not content or not content.strip():
            raise ValidationError("Memo content is empty")

        client = self._client or get_openai_client()
        prompt = build_summary_prompt(title, content)

        logger.info(
            "Requesting memo summary - title: %s, content length: %d",
            title,
            len(content),
        )
        try:
            response = await client.responses.create(
                model=settings.summary_model,
                input=prompt,
                max_output_tokens=settings.summary_max_output_tokens,
                temperature=settings.summary_temperature,
            )
        except Exception as err:
            logger.error("Summary request failed: %s", err, extra={"error_type": type(err).__name__})
            raise UpstreamError(f"Summary generation failed: {err}") from err

        summary = (getattr(response, "output_text", None) or "").strip()
        if not summary:
            logger.warning("Model returned no summary text")
            raise EmptyResultError("The model returned an empty summary")
        return summary
