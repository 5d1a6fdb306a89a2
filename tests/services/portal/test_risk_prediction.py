"""
Risk Prediction Tests
=====================

Tests for the LLM risk analyses with a stub provider and in-memory cache.

Version: 0.1.0
"""

import json
from datetime import UTC, datetime
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from services.portal.models import AssessmentModel
from services.portal.services.risk_prediction import (
    NO_ASSESSMENT_MESSAGE,
    RiskPredictionError,
    RiskPredictionService,
    analysis_cache_key,
    build_dashboard,
    build_risk_analysis_prompt,
    compliance_level_for_risk,
    domain_risk_distribution,
)
from shared.llm import LLMProvider, set_llm_provider
from shared.llm.provider import LLMMessage, LLMResponse
from shared.models.assessment import AssessmentStatus


ANALYSIS = {
    "overall_risk_score": 7,
    "risk_summary": "Governance gaps",
    "domain_risks": [
        {"domain": "Cybersecurity Governance", "risk_level": "High"},
        {"domain": "Technology Security", "risk_level": "Medium"},
        {"domain": "Third-Party Cybersecurity", "risk_level": "Low"},
        {"domain": "Operations"},
    ],
    "recommendations": ["Approve policy", "Appoint CISO", "Train staff", "Review vendors"],
}


# =============================================================================
# Fixtures
# =============================================================================


class StubProvider(LLMProvider):
    """Returns a fixed completion and records the prompts it receives."""

    def __init__(self, content: str) -> None:
        self.content = content
        self.calls: list[tuple[list[LLMMessage], dict[str, Any]]] = []

    @property
    def name(self) -> str:
        return "stub"

    @property
    def model(self) -> str:
        return "stub-model"

    async def complete(self, messages, temperature=None, max_tokens=None, json_mode=False) -> LLMResponse:
        self.calls.append((messages, {"temperature": temperature, "json_mode": json_mode}))
        return LLMResponse(content=self.content, model=self.model, provider=self.name)

    async def health_check(self) -> dict[str, Any]:
        return {"status": "healthy"}


class MemoryCache:
    def __init__(self, fail: bool = False) -> None:
        self.store: dict[str, Any] = {}
        self.ttls: dict[str, int | None] = {}
        self.fail = fail
        self.deleted: list[str] = []

    async def get_cached(self, key: str) -> Any:
        if self.fail:
            raise RedisConnectionError("down")
        return self.store.get(key)

    async def set_cached(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        if self.fail:
            raise RedisConnectionError("down")
        self.store[key] = value
        self.ttls[key] = ttl_seconds

    async def delete_pattern(self, pattern: str) -> int:
        if self.fail:
            raise RedisConnectionError("down")
        self.deleted.append(pattern)
        return 1


def assessment(assessment_id: int, score: float, day: int) -> AssessmentModel:
    return AssessmentModel(
        id=assessment_id,
        company_id=1,
        framework_id=2,
        name=f"Assessment {assessment_id}",
        status=AssessmentStatus.COMPLETED,
        score=score,
        completion_date=datetime(2025, 1, day, tzinfo=UTC),
    )


class TestDashboard:
    @pytest.mark.parametrize(("score", "level"), [(0, "High"), (3, "High"), (3.5, "Medium"), (6, "Medium"), (7, "Low")])
    def test_compliance_level(self, score: float, level: str) -> None:
        assert compliance_level_for_risk(score) == level

    def test_distribution_counts_unknown_as_low(self) -> None:
        distribution = domain_risk_distribution(ANALYSIS["domain_risks"])

        assert (distribution.high, distribution.medium, distribution.low) == (1, 1, 2)

    def test_no_completed_assessments(self) -> None:
        dashboard = build_dashboard([], None)

        assert dashboard.risk_score == 0
        assert dashboard.compliance_level == "Unknown"
        assert dashboard.message == NO_ASSESSMENT_MESSAGE

    def test_latest_assessment(self) -> None:
        completed = [assessment(9, 72.5, 20), assessment(4, 40.0, 5)]

        dashboard = build_dashboard(completed, ANALYSIS)

        assert dashboard.risk_score == 7
        assert dashboard.compliance_level == "Low"
        assert dashboard.assessment_name == "Assessment 9"
        assert dashboard.high_risk_domains == ["Cybersecurity Governance"]
        assert dashboard.critical_recommendations == ["Approve policy", "Appoint CISO", "Train staff"]
        assert [h.score for h in dashboard.historical_data] == [72.5, 40.0]
        assert dashboard.historical_data[0].status == "completed"


class TestPrompts:
    def test_risk_prompt_includes_company(self) -> None:
        prompt = build_risk_analysis_prompt({"summary": {"compliance_score": 40}}, {"name": "Acme"})

        assert '"compliance_score": 40' in prompt
        assert "Company Context" in prompt
        assert "overall_risk_score" in prompt

    def test_risk_prompt_without_company(self) -> None:
        assert "Company Context" not in build_risk_analysis_prompt({}, None)


class TestRiskPredictionService:
    async def test_uses_installed_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("shared.llm.provider._provider", None)
        provider = StubProvider(json.dumps(ANALYSIS))
        set_llm_provider(provider)

        service = RiskPredictionService(cache=None)

        assert await service.analyze_assessment(5, {}) == ANALYSIS
        assert len(provider.calls) == 1

    async def test_analysis_is_cached(self) -> None:
        provider = StubProvider(json.dumps(ANALYSIS))
        cache = MemoryCache()
        service = RiskPredictionService(provider=provider, cache=cache, cache_ttl=60)

        first = await service.analyze_assessment(5, {"summary": {}})
        second = await service.analyze_assessment(5, {"summary": {}})

        assert first == ANALYSIS
        assert second == ANALYSIS
        assert len(provider.calls) == 1
        assert cache.ttls[analysis_cache_key(5)] == 60
        messages, options = provider.calls[0]
        assert messages[0].role == "system"
        assert options == {"temperature": 0.2, "json_mode": True}

    async def test_cache_failures_do_not_fail_analysis(self) -> None:
        provider = StubProvider("```json\n" + json.dumps(ANALYSIS) + "\n```")
        service = RiskPredictionService(provider=provider, cache=MemoryCache(fail=True))

        assert await service.analyze_assessment(5, {}) == ANALYSIS
        await service.invalidate(5)

    async def test_invalidate_pattern(self) -> None:
        cache = MemoryCache()
        service = RiskPredictionService(provider=StubProvider("{}"), cache=cache)

        await service.invalidate(12)

        assert cache.deleted == ["risk-prediction:assessment:12:*"]

    async def test_invalid_json_raises(self) -> None:
        service = RiskPredictionService(provider=StubProvider("not json"), cache=None)

        with pytest.raises(RiskPredictionError) as exc_info:
            await service.remediation_plan([{"domain": "x"}])

        assert exc_info.value.status_code == 502
        assert "remediation plan" in exc_info.value.message

    async def test_control_gaps(self) -> None:
        provider = StubProvider(json.dumps({"control_id": "ECC-1.1.1", "compliance_status": "Partial"}))
        service = RiskPredictionService(provider=provider, cache=None)

        result = await service.control_gaps({"control_id": "ECC-1.1.1"}, {"results": []})

        assert result["compliance_status"] == "Partial"
        assert "Control Details" in provider.calls[0][0][1].content
