from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

from app.config import get_settings
from app.exceptions import ReportGenerationFailed

logger = logging.getLogger(__name__)


@runtime_checkable
class ReportGenerator(Protocol):
    """Interface for the generative text service that writes reports."""

    async def generate(self, prompt: str) -> str:
        """Return the generated text. Raises ReportGenerationFailed on any failure."""
        ...


class GeminiReportGenerator:
    """Calls the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        if not self._api_key:
            raise ReportGenerationFailed("GEMINI_API_KEY not configured")

        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers={"x-goog-api-key": self._api_key})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Report generation request failed: %s", exc)
            raise ReportGenerationFailed("Failed to generate report") from exc

        text = "".join(
            part.get("text", "")
            for candidate in (data.get("candidates") or [])[:1]
            for part in (candidate.get("content") or {}).get("parts") or []
        )
        if not text.strip():
            logger.warning("Report generation returned no text")
            raise ReportGenerationFailed("Report generation returned an empty response")
        return text


def _default_generator() -> ReportGenerator:
    settings = get_settings()
    return GeminiReportGenerator(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.upstream_timeout_seconds,
    )


_report_generator: ReportGenerator | None = None


def get_report_generator() -> ReportGenerator:
    """FastAPI dependency for the report generator."""
    global _report_generator
    if _report_generator is None:
        _report_generator = _default_generator()
    return _report_generator


def set_report_generator(generator: ReportGenerator | None) -> None:
    """Override the generator (for testing); ``None`` restores the default."""
    global _report_generator
    _report_generator = generator
