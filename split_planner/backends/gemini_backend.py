"""Google Gemini suggestion oracle."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..exceptions import OracleError
from .base import SuggestionOracle

logger = logging.getLogger("split_planner.backends.gemini")


SYSTEM_INSTRUCTION = """
You are a PDF processing assistant.
Your goal is to interpret the user's natural language request for splitting a document and convert it into specific page ranges.
The document has {page_count} pages.
Return a JSON array of ranges. Each range object must have 'start', 'end', and 'label'.
Ensure 'start' and 'end' are numbers within 1 to {page_count}.
Ensure ranges do not overlap unless specifically requested (which is rare for splitting).
If the request is vague, make a best guess based on standard logical splits (e.g., equal parts).
"""

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "start": {"type": "INTEGER"},
            "end": {"type": "INTEGER"},
            "label": {"type": "STRING"},
        },
        "required": ["start", "end", "label"],
    },
}


class GeminiOracle(SuggestionOracle):
    """Suggestion oracle backed by the Gemini ``generateContent`` endpoint."""

    provider_name = "gemini"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-2.5-flash"

    def __init__(
        self,
        api_key: str | None,
        model: str | None = None,
        timeout: float = 60.0,
    ) -> None:
        """
        Initialize the Gemini oracle.

        Args:
            api_key: Google AI API key.
            model: Model used for suggestions.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.timeout = timeout

    def build_payload(self, prompt_text: str, page_count: int) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt_text}]}],
            "systemInstruction": {
                "parts": [{"text": SYSTEM_INSTRUCTION.format(page_count=page_count)}]
            },
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    async def _make_request(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Make an API request to Gemini.

        Raises:
            OracleError: If the request fails or the API reports an error.
        """
        url = f"{self.BASE_URL}/models/{self.model}:generateContent"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key or ""},
                )
            except httpx.TimeoutException as exc:
                raise OracleError(f"[{self.provider_name}] Request timeout: {exc}") from exc
            except httpx.HTTPError as exc:
                raise OracleError(f"[{self.provider_name}] Connection to provider failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise OracleError(f"[{self.provider_name}] Authentication failed - check API key")
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            message = f"Rate limit exceeded. Retry after {retry_after}s" if retry_after else "Rate limit exceeded"
            raise OracleError(f"[{self.provider_name}] {message}")
        if response.status_code == 404:
            raise OracleError(f"[{self.provider_name}] Model '{self.model}' not found or not available")
        if response.status_code >= 400:
            raise OracleError(f"[{self.provider_name}] API error: {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise OracleError(f"[{self.provider_name}] Response is not valid JSON") from exc

    async def suggest(self, prompt_text: str, page_count: int) -> list[dict[str, Any]]:
        if not self.api_key:
            raise OracleError(f"[{self.provider_name}] API key not configured")

        logger.debug("Requesting split suggestions from %s for %s pages", self.model, page_count)
        response_data = await self._make_request(self.build_payload(prompt_text, page_count))

        if not isinstance(response_data, dict):
            raise OracleError(f"[{self.provider_name}] Unexpected response body")

        candidates = response_data.get("candidates") or []
        if not isinstance(candidates, list) or not candidates:
            raise OracleError(f"[{self.provider_name}] No response candidates returned")

        candidate = candidates[0]
        content = candidate.get("content") if isinstance(candidate, dict) else None
        if not isinstance(content, dict):
            raise OracleError(f"[{self.provider_name}] Response candidate has no content")

        parts = content.get("parts") or []
        if not isinstance(parts, list):
            raise OracleError(f"[{self.provider_name}] Response content has no parts")
        text = "".join(
            part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
        if not text.strip():
            return []

        try:
            raw_ranges = json.loads(text)
        except json.JSONDecodeError as exc:
            raise OracleError(f"[{self.provider_name}] Reply is not a JSON array: {exc}") from exc

        if not isinstance(raw_ranges, list):
            raise OracleError(f"[{self.provider_name}] Reply is not a JSON array")

        logger.info("Received %s suggested range(s) from %s", len(raw_ranges), self.provider_name)
        return raw_ranges
