"""
AI Risk Prediction
==================

LLM-backed analysis of assessment results.

Analyses:
- Risk analysis of an assessment (overall score 1-10, per-domain risks)
- Remediation plan for the domain risks of an analysis
- Gap analysis of a single control from its result history

Assessment analyses are cached in Redis; cache failures never fail a request.

Version: 0.1.0
"""

import json
from collections.abc import Sequence
from typing import Any

import openai
from redis.exceptions import RedisError

from services.portal.models import AssessmentModel
from shared.config import settings
from shared.database import RedisClient
from shared.llm import LLMProvider, get_llm_provider
from shared.logging import get_logger
from shared.models.assistant import HistoricalScore, RiskDashboard, RiskDistribution


logger = get_logger(__name__)

CACHE_PREFIX = "risk-prediction"

NO_ASSESSMENT_MESSAGE = (
    "No completed assessments found. Complete an assessment to generate risk prediction."
)


class RiskPredictionError(Exception):
    """The analysis could not be produced."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# =============================================================================
# Prompts
# =============================================================================

RISK_ANALYSIS_SYSTEM = (
    "You are an expert in cybersecurity compliance risk analysis. Your task is to analyze "
    "compliance data and provide detailed risk predictions and recommendations based on "
    "identified gaps and patterns."
)

REMEDIATION_SYSTEM = (
    "You are an expert in cybersecurity remediation planning. Your task is to create detailed, "
    "actionable remediation plans for identified compliance risks."
)

CONTROL_GAP_SYSTEM = (
    "You are an expert in cybersecurity control implementation. Your task is to identify gaps "
    "in control implementations and provide actionable recommendations."
)

RISK_ANALYSIS_FORMAT = """For each domain or control with compliance gaps, predict:
1. Risk likelihood (High/Medium/Low)
2. Potential impact (High/Medium/Low)
3. Overall risk rating
4. Potential consequences of non-compliance
5. Recommended priority level for remediation
6. Brief explanation of risk factors

Return the response in the following JSON structure:
{
  "overall_risk_score": number, // 1-10
  "risk_summary": "Summary text",
  "domain_risks": [
    {
      "domain": "Domain name",
      "risk_level": "High/Medium/Low",
      "impact": "High/Medium/Low",
      "priority": "Critical/High/Medium/Low",
      "explanation": "Explanation text",
      "potential_consequences": ["Consequence 1", "Consequence 2"],
      "control_risks": [
        {
          "control_id": "ID",
          "risk_level": "High/Medium/Low",
          "impact": "High/Medium/Low",
          "explanation": "Explanation text"
        }
      ]
    }
  ],
  "recommendations": ["Recommendation 1", "Recommendation 2"]
}"""

REMEDIATION_FORMAT = """For each risk, provide:
1. Step-by-step remediation actions
2. Estimated time for implementation
3. Required resources
4. Key stakeholders who should be involved
5. Potential challenges in implementation
6. Success metrics to verify remediation

Return the response in the following JSON structure:
{
  "remediation_summary": "Summary text",
  "risk_remediations": [
    {
      "risk_id": "ID or description",
      "priority": "Critical/High/Medium/Low",
      "steps": [
        {
          "step_number": 1,
          "description": "Step description",
          "estimated_time": "Time estimate",
          "required_resources": ["Resource 1", "Resource 2"],
          "stakeholders": ["Stakeholder 1", "Stakeholder 2"]
        }
      ],
      "challenges": ["Challenge 1", "Challenge 2"],
      "success_metrics": ["Metric 1", "Metric 2"]
    }
  ],
  "general_recommendations": ["Recommendation 1", "Recommendation 2"]
}"""

CONTROL_GAP_FORMAT = """Identify gaps in the implementation compared to the control requirements:
1. Identified implementation gaps
2. Compliance impact of each gap
3. Recommended actions to close gaps
4. Implementation complexity
5. Estimated effort to remediate

Return the response in the following JSON structure:
{
  "control_id": "Control ID",
  "compliance_status": "Compliant/Partial/Non-compliant",
  "gap_analysis": {
    "identified_gaps": [
      {
        "gap_description": "Description",
        "compliance_impact": "High/Medium/Low",
        "remediation_action": "Action description",
        "complexity": "High/Medium/Low",
        "estimated_effort": "Effort estimate"
      }
    ]
  },
  "overall_recommendations": ["Recommendation 1", "Recommendation 2"]
}"""


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def build_risk_analysis_prompt(assessment_data: dict[str, Any], company: dict[str, Any] | None) -> str:
    prompt = "Please analyze the following compliance assessment data and predict potential risks:\n\n"
    prompt += f"Assessment Data:\n{_dump(assessment_data)}\n\n"
    if company:
        prompt += f"Company Context:\n{_dump(company)}\n\n"
    return prompt + RISK_ANALYSIS_FORMAT


def build_remediation_prompt(risks: Sequence[dict[str, Any]], context: dict[str, Any] | None) -> str:
    prompt = "Please create a detailed remediation plan for the following compliance risks:\n\n"
    prompt += f"Identified Risks:\n{_dump(list(risks))}\n\n"
    if context:
        prompt += f"Company Context:\n{_dump(context)}\n\n"
    return prompt + REMEDIATION_FORMAT


def build_control_gap_prompt(control: dict[str, Any], implementation: dict[str, Any]) -> str:
    prompt = "Please analyze the following control implementation and identify gaps:\n\n"
    prompt += f"Control Details:\n{_dump(control)}\n\n"
    prompt += f"Current Implementation:\n{_dump(implementation)}\n\n"
    return prompt + CONTROL_GAP_FORMAT


# =============================================================================
# Dashboard
# =============================================================================


def compliance_level_for_risk(risk_score: float) -> str:
    """Low risk means high compliance."""
    if 0 <= risk_score <= 3:
        return "High"
    if 3 < risk_score <= 6:
        return "Medium"
    return "Low"


def domain_risk_distribution(domain_risks: Sequence[dict[str, Any]] | None) -> RiskDistribution:
    distribution = RiskDistribution()
    for domain in domain_risks or []:
        level = domain.get("risk_level")
        if level == "High":
            distribution.high += 1
        elif level == "Medium":
            distribution.medium += 1
        else:
            distribution.low += 1
    return distribution


def build_dashboard(
    completed: Sequence[AssessmentModel],
    analysis: dict[str, Any] | None,
) -> RiskDashboard:
    """
    Assemble the dashboard for the newest completed assessment.

    Args:
        completed: Completed assessments, newest first
        analysis: Risk analysis of completed[0]
    """
    if not completed:
        return RiskDashboard(risk_score=0, compliance_level="Unknown", message=NO_ASSESSMENT_MESSAGE)

    latest = completed[0]
    analysis = analysis or {}
    risk_score = analysis.get("overall_risk_score") or 0
    domain_risks = analysis.get("domain_risks") or []

    return RiskDashboard(
        risk_score=risk_score,
        compliance_level=compliance_level_for_risk(risk_score),
        last_assessment_date=latest.completion_date,
        assessment_name=latest.name,
        framework_id=latest.framework_id,
        high_risk_domains=[d.get("domain", "") for d in domain_risks if d.get("risk_level") == "High"],
        critical_recommendations=list(analysis.get("recommendations") or [])[:3],
        risk_summary=analysis.get("risk_summary"),
        domain_risk_distribution=domain_risk_distribution(domain_risks),
        historical_data=[
            HistoricalScore(date=a.completion_date, score=a.score or 0, status=a.status.value)
            for a in completed
        ],
    )


# =============================================================================
# Service
# =============================================================================


def analysis_cache_key(assessment_id: int) -> str:
    return f"{CACHE_PREFIX}:assessment:{assessment_id}:analysis"


class RiskPredictionService:
    """LLM calls for risk analysis, with Redis caching of assessment analyses."""

    def __init__(
        self,
        provider: LLMProvider | None = None,
        cache: type[RedisClient] | None = RedisClient,
        cache_ttl: int | None = None,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._cache_ttl = cache_ttl if cache_ttl is not None else settings.risk_prediction_cache_ttl

    def _get_provider(self) -> LLMProvider:
        if self._provider is None:
            try:
                self._provider = get_llm_provider()
            except ValueError as e:
                logger.error("risk_prediction_provider_unavailable", error=str(e))
                raise RiskPredictionError("AI risk prediction is not configured", status_code=503) from e
        return self._provider

    async def _generate(self, kind: str, prompt: str, system_prompt: str, temperature: float) -> dict[str, Any]:
        provider = self._get_provider()
        try:
            result = await provider.generate_json(prompt, system_prompt=system_prompt, temperature=temperature)
        except (openai.OpenAIError, ValueError) as e:
            logger.error("risk_prediction_failed", kind=kind, error=str(e), error_type=type(e).__name__)
            raise RiskPredictionError(f"Failed to generate {kind}: {e}") from e

        logger.info("risk_prediction_generated", kind=kind, provider=provider.name)
        return result

    # -- cache -----------------------------------------------------------------

    async def _read_cache(self, key: str) -> dict[str, Any] | None:
        if self._cache is None:
            return None
        try:
            cached = await self._cache.get_cached(key)
        except RedisError as e:
            logger.warning("risk_prediction_cache_read_failed", key=key, error=str(e))
            return None
        return cached if isinstance(cached, dict) else None

    async def _write_cache(self, key: str, value: dict[str, Any]) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set_cached(key, value, ttl_seconds=self._cache_ttl)
        except RedisError as e:
            logger.warning("risk_prediction_cache_write_failed", key=key, error=str(e))

    async def invalidate(self, assessment_id: int) -> None:
        """Drop cached analyses after an assessment's results change."""
        if self._cache is None:
            return
        try:
            await self._cache.delete_pattern(f"{CACHE_PREFIX}:assessment:{assessment_id}:*")
        except RedisError as e:
            logger.warning("risk_prediction_cache_invalidate_failed", assessment_id=assessment_id, error=str(e))

    # -- analyses --------------------------------------------------------------

    async def predict_risks(
        self,
        assessment_data: dict[str, Any],
        company: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self._generate(
            "risk analysis",
            build_risk_analysis_prompt(assessment_data, company),
            RISK_ANALYSIS_SYSTEM,
            temperature=0.2,
        )

    async def analyze_assessment(
        self,
        assessment_id: int,
        assessment_data: dict[str, Any],
        company: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Risk analysis of an assessment, served from cache when present."""
        key = analysis_cache_key(assessment_id)
        cached = await self._read_cache(key)
        if cached is not None:
            logger.debug("risk_prediction_cache_hit", assessment_id=assessment_id)
            return cached

        analysis = await self.predict_risks(assessment_data, company)
        await self._write_cache(key, analysis)
        return analysis

    async def remediation_plan(
        self,
        domain_risks: Sequence[dict[str, Any]],
        context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self._generate(
            "remediation plan",
            build_remediation_prompt(domain_risks, context),
            REMEDIATION_SYSTEM,
            temperature=0.3,
        )

    async def control_gaps(
        self,
        control: dict[str, Any],
        implementation: dict[str, Any],
    ) -> dict[str, Any]:
        return await self._generate(
            "control gap analysis",
            build_control_gap_prompt(control, implementation),
            CONTROL_GAP_SYSTEM,
            temperature=0.2,
        )


def get_risk_prediction_service() -> RiskPredictionService:
    """FastAPI dependency."""
    return RiskPredictionService()
