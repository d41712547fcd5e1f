"""
One prompt -> model -> normalize pipeline, parameterized per request type.

Analysis prefers availability: any gateway or parse failure turns into the
fallback record. Generation and chat prefer honesty and re-raise.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from clausecraft.errors import GatewayError, NormalizationError
from clausecraft.llm_gateway import LLMGateway
from clausecraft.normalizer import (
    fallback_analysis,
    normalize_analysis,
    normalize_chat,
    normalize_generation,
)
from clausecraft.prompts import (
    build_analysis_prompt,
    build_chat_prompt,
    build_generation_prompt,
)

log = logging.getLogger("clausecraft.pipeline")

DEFAULT_TEMPERATURE = 0.7


class PipelineKind(str, enum.Enum):
    ANALYSIS = "analysis"
    GENERATION = "generation"
    CHAT = "chat"


class OnFailure(str, enum.Enum):
    USE_FALLBACK = "use_fallback"
    PROPAGATE = "propagate"


@dataclass(frozen=True)
class PipelineVariant:
    kind: PipelineKind
    build_prompt: Callable[..., str]
    normalize: Callable[[str], Any]
    max_tokens: int
    on_failure: OnFailure = OnFailure.PROPAGATE
    # Receives the same positional args as build_prompt.
    fallback: Optional[Callable[..., Any]] = None


ANALYSIS = PipelineVariant(
    kind=PipelineKind.ANALYSIS,
    build_prompt=build_analysis_prompt,
    normalize=normalize_analysis,
    max_tokens=2000,
    on_failure=OnFailure.USE_FALLBACK,
    fallback=fallback_analysis,
)

GENERATION = PipelineVariant(
    kind=PipelineKind.GENERATION,
    build_prompt=build_generation_prompt,
    normalize=normalize_generation,
    max_tokens=2000,
)

CHAT = PipelineVariant(
    kind=PipelineKind.CHAT,
    build_prompt=build_chat_prompt,
    normalize=normalize_chat,
    max_tokens=1000,
)


async def run(
    variant: PipelineVariant,
    gateway: LLMGateway,
    *args: Any,
    temperature: float = DEFAULT_TEMPERATURE,
) -> Any:
    """
    Build the prompt, make exactly one gateway call and normalize the reply.
    """
    prompt = variant.build_prompt(*args)
    try:
        raw = await gateway.complete(prompt, variant.max_tokens, temperature)
        return variant.normalize(raw)
    except (GatewayError, NormalizationError) as exc:
        if variant.on_failure is OnFailure.USE_FALLBACK and variant.fallback is not None:
            log.warning("%s pipeline fell back: %s: %s",
                        variant.kind.value, type(exc).__name__, exc)
            return variant.fallback(*args)
        log.error("%s pipeline failed: %s: %s", variant.kind.value, type(exc).__name__, exc)
        raise
