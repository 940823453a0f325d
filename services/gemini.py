# services/gemini.py
from __future__ import annotations

import logging
from typing import Protocol

from google import genai
from google.genai import types, errors as gerrors

from core.errors import GenerationError

_LOG = logging.getLogger(__name__)

class TextGenerator(Protocol):
    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str: ...


# ───────────── Generation (async) ─────────────
class GeminiTextGenerator:
    """Gemini chat completion behind the `TextGenerator` interface."""

    def __init__(self, api_key: str | None, model: str) -> None:
        self._api_key = api_key
        self._model = model
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise GenerationError("GEMINI_API_KEY not set in environment")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str,
        temperature: float = 0.7,
        max_output_tokens: int = 1200,
    ) -> str:
        """Run a chat completion and return the LLM’s text response."""
        client = self._get_client()
        try:
            resp = await client.aio.models.generate_content(
                model=self._model,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
            )
        except gerrors.APIError as e:
            _LOG.error("Gemini generation failed: %s", e)
            raise GenerationError(str(e)) from e

        # take the first candidate’s text
        if not resp.candidates or not resp.candidates[0].content:
            raise GenerationError("Gemini returned no candidates")
        parts = resp.candidates[0].content.parts or []
        return "".join(p.text or "" for p in parts)
