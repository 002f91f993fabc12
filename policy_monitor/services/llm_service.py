"""OpenRouter LLM service used for policy analysis, descriptions and drafts."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from policy_monitor.config import settings

logger = logging.getLogger(__name__)

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"
MAX_ATTEMPTS = 3


class LLMError(Exception):
    """Raised when LLM service call fails.

    ``kind`` is one of: not_configured, rate_limited, auth, blocked,
    malformed, request, http.
    """

    def __init__(self, message: str, kind: str = "http"):
        super().__init__(message)
        self.kind = kind


def _error_kind(status_code: int, body: str) -> str:
    if status_code in (401, 403):
        return "auth"
    if status_code == 429:
        return "rate_limited"
    if "safety" in body.lower() or "blocked" in body.lower():
        return "blocked"
    return "http"


def _extract_content(data: Any, model: str) -> str:
    """Pull the assistant text out of a chat-completions envelope."""
    try:
        choice = (data.get("choices") or [{}])[0]
        finish_reason = choice.get("finish_reason")
        content = (choice.get("message") or {}).get("content")
    except (AttributeError, TypeError, IndexError, KeyError) as e:
        raise LLMError(f"Malformed response envelope from model {model}: {e}", kind="malformed") from e

    if finish_reason == "content_filter":
        raise LLMError(f"Response blocked by safety filters ({model})", kind="blocked")
    if content is not None and not isinstance(content, str):
        raise LLMError(
            f"Non-text content ({type(content).__name__}) from model {model}", kind="malformed",
        )
    if not content:
        raise LLMError(f"Empty response from model {model}", kind="malformed")
    return content


async def call_llm(
    prompt: str,
    system_prompt: str = "",
    model: str | None = None,
    temperature: float = 0.3,
    max_tokens: int = 2000,
    json_mode: bool = False,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """
    Call OpenRouter API for LLM completion.

    Args:
        prompt: User message content.
        system_prompt: System instruction.
        model: Model ID (defaults to settings.OPENROUTER_MODEL).
        temperature: Sampling temperature.
        max_tokens: Maximum response tokens.
        json_mode: If True, request JSON output format.
        transport: Optional httpx transport (tests).

    Returns:
        The assistant's response text.

    Raises:
        LLMError: If the API call fails after retries.
    """
    api_key = settings.OPENROUTER_API_KEY
    if not api_key:
        raise LLMError("OPENROUTER_API_KEY not configured", kind="not_configured")

    model = model or settings.OPENROUTER_MODEL

    messages: list[dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})

    payload: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "HTTP-Referer": "https://policy-monitor.local",
        "X-Title": "Animal Welfare Policy Monitor",
    }

    last_error: Exception | None = None
    last_kind = "request"

    for attempt in range(MAX_ATTEMPTS):
        try:
            async with httpx.AsyncClient(timeout=60.0, transport=transport) as client:
                resp = await client.post(
                    OPENROUTER_API_URL,
                    json=payload,
                    headers=headers,
                )
                resp.raise_for_status()
                data = resp.json()

            return _extract_content(data, model)

        except httpx.HTTPStatusError as e:
            last_error = e
            if e.response.status_code == 429:
                last_kind = "rate_limited"
                wait = 2 ** attempt
                logger.warning("Rate limited, waiting %ds...", wait)
                await asyncio.sleep(wait)
                continue
            error_msg = f"HTTP {e.response.status_code}: {e.response.text[:500]}"
            raise LLMError(error_msg, kind=_error_kind(e.response.status_code, e.response.text)) from e

        except httpx.RequestError as e:
            last_error = e
            last_kind = "request"
            logger.warning("Request error (attempt %d): %s", attempt + 1, e)
            await asyncio.sleep(1)
            continue

        except ValueError as e:
            # resp.json() on a non-JSON body
            raise LLMError(f"Invalid JSON envelope from OpenRouter: {e}", kind="malformed") from e

    raise LLMError(f"Failed after {MAX_ATTEMPTS} attempts: {last_error}", kind=last_kind)


def strip_code_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [l for l in lines if not l.strip().startswith("```")]
        text = "\n".join(lines)
    return text


async def call_llm_json(
    prompt: str,
    system_prompt: str = "",
    model: str | None = None,
    temperature: float = 0.1,
    max_tokens: int = 4000,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any] | list[Any]:
    """
    Call LLM and parse the response as JSON.

    Returns parsed JSON (dict or list).
    """
    raw = await call_llm(
        prompt=prompt,
        system_prompt=system_prompt,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        json_mode=True,
        transport=transport,
    )

    text = strip_code_fences(raw)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise LLMError(
            f"Failed to parse LLM response as JSON: {e}\nRaw: {text[:500]}", kind="malformed",
        ) from e
