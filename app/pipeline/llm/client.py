"""
LLM client for Azure OpenAI
"""
import httpx
import time
import logging
from typing import Callable, Optional

from app.core.config import Settings, settings as default_settings
from app.core.errors import CompletionServiceError

logger = logging.getLogger(__name__)


def completion_url(settings: Settings) -> str:
    return (
        f"{settings.AZURE_OPENAI_ENDPOINT}/openai/deployments/"
        f"{settings.AZURE_OPENAI_DEPLOYMENT_NAME}/chat/completions?"
        f"api-version={settings.AZURE_OPENAI_API_VERSION}"
    )


def call_llm(
    messages: list[dict],
    temperature: float = 0.1,
    max_tokens: int = 800,
    client: Optional[httpx.Client] = None,
    settings: Optional[Settings] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Call Azure OpenAI with retry
    Returns content string directly

    Raises:
        CompletionServiceError: service not configured, or every attempt failed
    """
    settings = settings or default_settings
    if not settings.has_completion_service:
        raise CompletionServiceError("Azure OpenAI not configured")

    headers = {
        "Content-Type": "application/json",
        "api-key": settings.AZURE_OPENAI_API_KEY
    }

    payload = {
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens
    }

    url = completion_url(settings)
    attempts = max(1, settings.LLM_MAX_ATTEMPTS)

    for attempt in range(attempts):
        try:
            if client is not None:
                response = client.post(url, headers=headers, json=payload, timeout=settings.LLM_TIMEOUT_SECONDS)
            else:
                with httpx.Client(timeout=settings.LLM_TIMEOUT_SECONDS) as own_client:
                    response = own_client.post(url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()
            return data["choices"][0]["message"]["content"] or ""
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            if attempt == attempts - 1:
                logger.error(f"LLM call failed after {attempts} attempts: {e}")
                raise CompletionServiceError(str(e)) from e
            wait_time = 2 ** attempt
            logger.warning(f"Attempt {attempt + 1} failed, retrying in {wait_time}s...")
            sleep(wait_time)
