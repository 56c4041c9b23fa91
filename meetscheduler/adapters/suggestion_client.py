"""
Language-model client producing meeting time suggestions.
"""

import asyncio
import json
from typing import Any, List

import requests
from pydantic import ValidationError
from rich.console import Console

from ..domain.exceptions import SuggestionError
from ..domain.suggestions import SuggestedTime, SuggestionRequest, render_prompt

console = Console()


def parse_suggestions(content: str) -> List[SuggestedTime]:
    """
    Extract suggestions from a model reply.

    The reply should be a JSON array of ``{"start", "end"}`` objects but
    models like to wrap it in prose or code fences, so the outermost
    bracketed span is parsed.

    Raises:
        SuggestionError: If no JSON array can be found
    """
    first = content.find("[")
    last = content.rfind("]")
    if first == -1 or last < first:
        raise SuggestionError("Suggestion reply contains no JSON array")

    try:
        items = json.loads(content[first:last + 1])
    except json.JSONDecodeError as e:
        raise SuggestionError(f"Suggestion reply is not valid JSON: {e}") from e

    suggestions: List[SuggestedTime] = []
    for item in items:
        try:
            suggestions.append(SuggestedTime.model_validate(item))
        except ValidationError as e:
            console.print(f"[yellow]Warning: Skipping malformed suggestion {item!r}: {e.error_count()} error(s)[/yellow]")

    return suggestions


class SuggestionClient:
    """
    Asks an OpenAI-compatible chat completions endpoint for meeting times.
    """

    def __init__(self, api_url: str, api_key: str, model: str, timeout: float = 60):
        self.api_url = api_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json"
        }

    async def suggest_times(self, request: SuggestionRequest) -> List[SuggestedTime]:
        return await asyncio.to_thread(self.fetch_suggestions, request)

    def fetch_suggestions(self, request: SuggestionRequest) -> List[SuggestedTime]:
        """
        Query the model for suggestions.

        Raises:
            SuggestionError: If the request fails or the reply is unusable
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": render_prompt(request)}],
            "temperature": 0,
        }

        try:
            response = requests.post(
                f"{self.api_url}/chat/completions",
                headers=self.headers,
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise SuggestionError(f"Suggestion request failed: {e}") from e

        except ValueError as e:
            raise SuggestionError(f"Suggestion service returned invalid JSON: {e}") from e

        return parse_suggestions(self._extract_content(data))

    @staticmethod
    def _extract_content(data: Any) -> str:
        """Pull the assistant message text out of a chat completions response."""
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise SuggestionError(f"Unexpected suggestion response shape: {e}") from e

        if not isinstance(content, str):
            raise SuggestionError("Suggestion response has no text content")

        return content
