from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RiskLevel = Literal["high", "medium", "low"]
RISK_LEVELS = ("high", "medium", "low")


# ------------------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    """
    Request body for /api/contracts/analyze.
    Length limits are enforced on the estimated token count, not here.
    """
    content: Optional[str] = Field(default=None, description="Full contract text to analyze")


class GenerateRequest(BaseModel):
    type: Optional[str] = Field(default=None, description="Contract type, e.g. nda | service | employment | lease")
    partyA: Optional[str] = Field(default=None, description="First party name")
    partyB: Optional[str] = Field(default=None, description="Second party name")
    terms: Optional[str] = Field(default=None, description="Additional terms, free text")


class ChatMessageRequest(BaseModel):
    message: str = Field(..., min_length=1, description="Question for the legal assistant")


class Credentials(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6)


# ------------------------------------------------------------------------------
# Analysis models
# ------------------------------------------------------------------------------

class RiskItem(BaseModel):
    """
    One risky clause found by the model. Only the normalizer creates these.
    """
    model_config = ConfigDict(frozen=True)

    severity: RiskLevel
    clauseText: str
    category: str  # payment | liability | termination | confidentiality | ...
    explanation: str
    recommendation: str


class AnalysisResult(BaseModel):
    """
    Canonical analysis response. `risks` and `recommendations` are always
    lists, never null.
    """
    summary: str
    overallRisk: RiskLevel = "medium"
    risks: List[RiskItem] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


# ------------------------------------------------------------------------------
# Stored records
# ------------------------------------------------------------------------------

class GeneratedContract(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    ownerId: Optional[int] = None
    contractType: str
    content: str
    version: int = Field(default=1, ge=1)
    createdAt: datetime


class ChatExchange(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    ownerId: int
    question: str
    answer: str
    createdAt: datetime


class User(BaseModel):
    """Public view of an account; never carries the password hash."""
    id: int
    email: str


class UserRecord(User):
    passwordHash: str

    def public(self) -> User:
        return User(id=self.id, email=self.email)
