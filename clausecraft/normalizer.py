from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List

from clausecraft.errors import InvalidGenerationFormat, NormalizationError
from clausecraft.schemas import RISK_LEVELS, AnalysisResult, RiskItem

log = logging.getLogger("clausecraft.normalizer")

CODE_FENCE_RE = re.compile(r"```(?:json)?")
# Greedy: first "{" through last "}".
JSON_SPAN_RE = re.compile(r"\{[\s\S]*\}")

DEFAULT_SUMMARY = "Analysis summary not provided"
DEFAULT_CLAUSE = "Content not specified"
DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_EXPLANATION = "Risk not specified"
DEFAULT_RECOMMENDATION = "No specific recommendation provided"

FALLBACK_EXCERPT_CHARS = 200


# ------------------------------------------------------------------------------
# Extraction
# ------------------------------------------------------------------------------

def strip_code_fences(raw: str) -> str:
    return CODE_FENCE_RE.sub("", raw.strip()).strip()


def extract_json_object(raw: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a noisy completion.

    Trims, drops markdown fences, takes the largest {...} span and parses it
    strictly. Raises NormalizationError if there is no span, the span is not
    valid JSON, or the value is not an object.
    """
    cleaned = strip_code_fences(raw or "")
    match = JSON_SPAN_RE.search(cleaned)
    if match is None:
        log.debug("no JSON span in model output: chars=%d", len(cleaned))
        raise NormalizationError("No JSON object found in model output")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise NormalizationError(f"Model output is not valid JSON: {exc.msg}") from exc
    except (ValueError, RecursionError) as exc:
        # Oversized integers and very deep nesting
        raise NormalizationError(f"Model output JSON cannot be decoded: {type(exc).__name__}") from exc
    if not isinstance(data, dict):
        raise NormalizationError("Model output JSON is not an object")
    return data


# ------------------------------------------------------------------------------
# Field re-validation
# ------------------------------------------------------------------------------

def _level(value: Any) -> str:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in RISK_LEVELS:
            return lowered
    return "medium"


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _risk_item(entry: Dict[str, Any]) -> RiskItem:
    return RiskItem(
        severity=_level(entry.get("severity")),
        clauseText=_text(entry.get("clause_text"), DEFAULT_CLAUSE),
        category=_text(entry.get("category"), DEFAULT_CATEGORY),
        explanation=_text(entry.get("explanation"), DEFAULT_EXPLANATION),
        recommendation=_text(entry.get("recommendation"), DEFAULT_RECOMMENDATION),
    )


# ------------------------------------------------------------------------------
# Per-call-site normalizers
# ------------------------------------------------------------------------------

def normalize_analysis(raw: str) -> AnalysisResult:
    data = extract_json_object(raw)

    risks = [_risk_item(r) for r in _list(data.get("risks")) if isinstance(r, dict)]
    recommendations = [
        r.strip() for r in _list(data.get("recommendations"))
        if isinstance(r, str) and r.strip()
    ]

    return AnalysisResult(
        summary=_text(data.get("summary"), DEFAULT_SUMMARY),
        overallRisk=_level(data.get("overall_risk")),
        risks=risks,
        recommendations=recommendations,
    )


def normalize_generation(raw: str) -> str:
    data = extract_json_object(raw)
    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        raise InvalidGenerationFormat("Invalid contract format")
    return content.strip()


def normalize_chat(raw: str) -> str:
    """Chat answers are free text; only fences and whitespace are removed."""
    answer = strip_code_fences(raw or "")
    if not answer:
        raise NormalizationError("Empty answer from model")
    return answer


def fallback_analysis(contract_text: str) -> AnalysisResult:
    """
    Fixed placeholder returned when the model output is unusable.
    Always well-formed and non-empty.
    """
    excerpt = contract_text[:FALLBACK_EXCERPT_CHARS]
    if len(contract_text) > FALLBACK_EXCERPT_CHARS:
        excerpt += "..."
    return AnalysisResult(
        summary=(
            "The contract requires careful review. While automated analysis encountered "
            "issues, it's recommended to ensure all terms are clearly defined, mutually "
            "beneficial, and legally sound."
        ),
        overallRisk="medium",
        risks=[
            RiskItem(
                severity="medium",
                clauseText=excerpt or DEFAULT_CLAUSE,
                category="General Contract Terms",
                explanation=(
                    "Unable to complete full analysis. Common risks in similar contracts "
                    "include unclear terms, one-sided provisions, and missing standard protections."
                ),
                recommendation=(
                    "Consider having a legal professional review the contract. Focus on clearly "
                    "defining terms, ensuring mutual protections, and including standard clauses "
                    "for your industry."
                ),
            )
        ],
        recommendations=[
            "Have a qualified legal professional review the full contract.",
            "Confirm termination, liability and payment terms are clearly defined for both parties.",
        ],
    )
