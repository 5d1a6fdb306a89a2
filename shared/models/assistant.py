"""
Assistant Models
================

Virtual assistant questions, talking-avatar requests and AI risk dashboard.

Version: 0.1.0
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AnswerCategory(str, Enum):
    GENERAL = "general"
    CONTROL = "control"
    POLICY = "policy"
    GUIDANCE = "guidance"
    CHECKLIST = "checklist"


class AskRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000)


class AssistantAnswer(BaseModel):
    answer: str
    category: AnswerCategory
    matched_key: str | None = Field(default=None, description="Table key that matched, None for the fallback")


class TalkRequest(BaseModel):
    """Request a talking-avatar video for a piece of text."""

    text: str = Field(..., max_length=5000)
    presenter_id: str | None = None
    driver_id: str | None = None


class Talk(BaseModel):
    """D-ID talk state, trimmed to the fields clients use."""

    id: str
    status: str
    result_url: str | None = None
    created_at: datetime | None = None
    duration: float | None = None
    error: dict[str, Any] | None = None


class DIDKeys(BaseModel):
    agent_id: str | None = None
    api_key: bool | None = Field(default=None, description="True when a key is configured, never the key")


class RiskDistribution(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class HistoricalScore(BaseModel):
    date: datetime | None = None
    score: float = 0
    status: str


class RiskDashboard(BaseModel):
    """Aggregate AI risk view over the latest completed assessment."""

    risk_score: float = 0
    compliance_level: str = "Unknown"
    message: str | None = None
    last_assessment_date: datetime | None = None
    assessment_name: str | None = None
    framework_id: int | None = None
    high_risk_domains: list[str] = Field(default_factory=list)
    critical_recommendations: list[str] = Field(default_factory=list)
    risk_summary: str | None = None
    domain_risk_distribution: RiskDistribution = Field(default_factory=RiskDistribution)
    historical_data: list[HistoricalScore] = Field(default_factory=list)
