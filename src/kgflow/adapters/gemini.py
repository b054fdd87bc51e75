"""Gemini-backed text assessment."""

import logging
from typing import Any

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


class GeminiTextAssessor:
    """Sends assessment prompts to a Gemini model and returns the raw text.

    JSON output is requested, but the response may still arrive wrapped in
    code fences; callers strip them before parsing.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.2,
        client: Any = None,
    ) -> None:
        if client is None and not api_key:
            raise ValueError("api_key is required when no client is supplied")
        self._client = client or genai.Client(api_key=api_key)
        self._model = model
        self._config = types.GenerateContentConfig(
            response_mime_type="application/json", temperature=temperature
        )

    async def assess(self, prompt: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=self._model, contents=prompt, config=self._config
        )
        text = response.text or ""
        logger.debug("Gemini %s returned %d characters", self._model, len(text))
        return text
