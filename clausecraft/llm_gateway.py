from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from clausecraft.config import Settings
from clausecraft.errors import ConfigurationError, GatewayError

log = logging.getLogger("clausecraft.llm")


class LLMGateway:
    """
    Single-call boundary around a hosted text-generation endpoint.

    `complete` returns only the newly generated text. Every failure
    (transport error, timeout, non-2xx, empty completion) surfaces as
    GatewayError. No retries.
    """

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        raise NotImplementedError


# ------------------------------------------------------------------------------
# Hugging Face Inference API
# ------------------------------------------------------------------------------

class HuggingFaceGateway(LLMGateway):
    def __init__(
        self,
        access_token: str,
        model: str,
        api_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self.endpoint = f"{api_url.rstrip('/')}/{model}"
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._timeout = httpx.Timeout(timeout, connect=min(10.0, timeout))
        self._transport = transport

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        payload = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": max_tokens,
                "temperature": temperature,
                "return_full_text": False,
            },
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(self.endpoint, json=payload, headers=self._headers)
                r.raise_for_status()
                body = r.json()
        except httpx.TimeoutException as exc:
            raise GatewayError(f"Inference request timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise GatewayError(
                f"Inference endpoint returned HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise GatewayError(f"Inference request failed: {exc}") from exc

        text = _generated_text(body).strip()
        if not text:
            raise GatewayError("Inference endpoint returned an empty completion")

        log.info("hf completion: model=%s prompt_chars=%d completion_chars=%d",
                 self.model, len(prompt), len(text))
        return text


def _generated_text(body: Any) -> str:
    # The text-generation task answers with a list of candidates; some
    # deployments return a single object instead.
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict):
        value = body.get("generated_text")
        if isinstance(value, str):
            return value
    return ""


# ------------------------------------------------------------------------------
# OpenAI-compatible chat completions
# ------------------------------------------------------------------------------

class OpenAIGateway(LLMGateway):
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self.model = model
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            raise GatewayError(f"Completion request failed: {exc}") from exc

        msg = ""
        if resp.choices:
            msg = (resp.choices[0].message.content or "").strip()
        if not msg:
            raise GatewayError("Completion endpoint returned an empty completion")

        tokens = (resp.usage and resp.usage.total_tokens) or 0
        log.info("openai completion: model=%s tokens=%d", self.model, tokens)
        return msg


def build_gateway(settings: Settings) -> LLMGateway:
    """Build the configured backend. Raises ConfigurationError without a credential."""
    token = settings.require_llm_credential()
    backend = settings.llm_backend.strip().lower()
    if backend == "huggingface":
        return HuggingFaceGateway(
            access_token=token,
            model=settings.hf_model,
            api_url=settings.hf_api_url,
            timeout=settings.llm_timeout_seconds,
        )
    if backend == "openai":
        return OpenAIGateway(
            api_key=token,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.llm_timeout_seconds,
        )
    raise ConfigurationError(f"Unknown LLM backend '{settings.llm_backend}'")
