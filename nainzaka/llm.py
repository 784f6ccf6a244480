# llm.py
"""Thin client for the hosted, OpenAI-compatible chat-completions endpoint (Groq)."""

import logging
from typing import Optional

import httpx

from nainzaka.settings import settings

log = logging.getLogger(__name__)


class LLMError(Exception):
    """The completion call failed."""


class EmptyCompletionError(LLMError):
    """The call succeeded but the model returned no text."""


class LLMClient:
    def __init__(
        self,
        api_key: str = settings.GROQ_API_KEY,
        api_url: str = settings.GROQ_API_URL,
        model: str = settings.GROQ_CHAT_MODEL,
        timeout: float = settings.LLM_TIMEOUT,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout

    async def complete(self, prompt: str, model: Optional[str] = None) -> str:
        """Send `prompt` as a single user-role message and return the completion text."""
        if not self.api_key:
            raise LLMError("GROQ client is not configured. Check your .env file.")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model or self.model,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, headers=headers, json=payload)
                response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            log.error(f"Groq API Error: {e.response.status_code} - {e.response.text[:200]}")
            raise LLMError(f"LLM service error ({e.response.status_code})")
        except httpx.RequestError as e:
            log.error(f"Network error calling Groq: {e}")
            raise LLMError("LLM service network error")
        except ValueError as e:
            log.error(f"Groq returned invalid JSON: {e}")
            raise LLMError("LLM service returned an invalid response")

        try:
            content = ((data.get("choices") or [{}])[0].get("message") or {}).get("content")
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            log.error(f"Groq returned an unexpected response shape: {e}. Data: {str(data)[:200]}")
            raise LLMError("LLM service returned an invalid response")

        if not content:
            log.error(f"Groq returned empty content. Data: {data}")
            raise EmptyCompletionError("LLM returned empty content")
        return content


def get_llm_client() -> LLMClient:
    """FastAPI dependency."""
    return LLMClient()
