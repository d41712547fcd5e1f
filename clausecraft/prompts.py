"""
Prompt templates for the three model calls: analysis, generation and chat.

Everything here is pure string building. Length checks live here too so the
caller can reject a contract before any network traffic happens.
"""
from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from clausecraft.errors import ContractTooLong

DEFAULT_MAX_CONTRACT_TOKENS = 30_000
DEFAULT_TERMS = "Standard terms apply"

RISK_CATEGORIES = (
    "termination",
    "liability",
    "payment",
    "confidentiality",
    "penalties",
    "intellectual property",
    "dispute resolution",
)

ANALYSIS_TEMPLATE = """You are a legal contract analysis expert. Analyze the contract below carefully and give detailed, specific feedback.

Contract text:
{contract_text}

Instructions:
1. Break the contract down into logical clauses.
2. Assess the risk of each clause by category ({categories}, etc.).
3. Focus on one-sided terms, vague or ambiguous language, missing standard protections and unusual or unfair conditions.
4. For every risky clause give a practical, specific recommendation.

Respond with exactly one JSON object in this format and nothing else (no prose, no markdown):
{{
  "summary": "Short overall assessment of the contract",
  "overall_risk": "high | medium | low",
  "risks": [
    {{
      "severity": "high | medium | low",
      "clause_text": "Exact or paraphrased clause text",
      "category": "termination | liability | payment | confidentiality | penalties | ...",
      "explanation": "Why this clause is risky",
      "recommendation": "How to change the clause"
    }}
  ],
  "recommendations": ["General recommendation 1", "General recommendation 2"]
}}"""

GENERATION_TEMPLATE = """You are a legal expert. Generate a professional {contract_type} contract with these details:
- Party A (First Party): {party_a}
- Party B (Second Party): {party_b}
- Additional Terms: {terms}

Create a properly formatted contract following these rules:
1. Include all necessary legal clauses
2. Add proper signature blocks
3. Use clear, enforceable language
4. Add standard protections for both parties

Return ONLY valid JSON in this format:
{{
  "content": "THE_CONTRACT_TEXT"
}}"""

CHAT_TEMPLATE = """You are a knowledgeable legal assistant. Provide a clear, professional response to this legal question: "{question}"

Consider:
1. Explain legal concepts in plain language
2. Provide specific examples if helpful
3. Mention important caveats or considerations
4. Suggest follow-up questions if needed"""


# ------------------------------------------------------------------------------
# Length guard
# ------------------------------------------------------------------------------

def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four bytes of UTF-8."""
    return math.ceil(len(text.encode("utf-8")) / 4)


def ensure_within_limit(text: str, limit: int = DEFAULT_MAX_CONTRACT_TOKENS) -> int:
    """
    Raise ContractTooLong when `text` is over the estimated-token ceiling.
    Returns the estimate so callers can log it.
    """
    estimated = estimate_tokens(text)
    if estimated > limit:
        raise ContractTooLong(estimated, limit)
    return estimated


# ------------------------------------------------------------------------------
# Builders
# ------------------------------------------------------------------------------

def build_analysis_prompt(contract_text: str) -> str:
    if not contract_text or not contract_text.strip():
        raise ValueError("contract_text must be non-empty")
    return ANALYSIS_TEMPLATE.format(
        contract_text=contract_text,
        categories=", ".join(RISK_CATEGORIES),
    )


def build_generation_prompt(contract_type: str, parameters: Mapping[str, Any]) -> str:
    """
    `parameters` recognizes partyA, partyB and an optional terms field.
    """
    terms = parameters.get("terms")
    if not terms or not str(terms).strip():
        terms = DEFAULT_TERMS
    return GENERATION_TEMPLATE.format(
        contract_type=contract_type,
        party_a=parameters.get("partyA", ""),
        party_b=parameters.get("partyB", ""),
        terms=terms,
    )


def build_chat_prompt(question: str, contract_context: Optional[str] = None) -> str:
    prompt = CHAT_TEMPLATE.format(question=question)
    if contract_context:
        return f"Contract context:\n{contract_context}\n\n{prompt}"
    return prompt
