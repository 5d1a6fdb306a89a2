"""
Tests for reference data seeding.

Version: 0.1.0
"""

from unittest.mock import AsyncMock

from services.portal.models import ControlModel, FrameworkModel, RiskModel
from services.portal.seed import (
    BADGES,
    FRAMEWORKS,
    ONBOARDING_STEPS,
    POLICY_CATEGORIES,
    SAMPLE_RISKS,
    build_controls,
    build_risk,
    seed_reference_data,
)
from tests.helpers import scalar_result


class TestBuildControls:
    def test_numbering_and_maturity(self) -> None:
        domain = FRAMEWORKS[0].domains[0]

        controls = build_controls(domain, 2, subdomain_id=7)

        assert [c.control_id for c in controls] == [f"{domain.code}.2.{n}" for n in range(1, 6)]
        assert [c.maturity_level for c in controls] == [1, 2, 3, 1, 2]
        assert {c.subdomain_id for c in controls} == {7}


class TestBuildRisk:
    def test_levels_from_matrix(self) -> None:
        risk = build_risk(SAMPLE_RISKS[0])

        assert risk.company_id is None
        assert risk.inherent_risk_level is not None
        assert risk.residual_risk_level is not None


class TestSeedReferenceData:
    async def test_empty_database_is_fully_seeded(self, mock_db_session: AsyncMock) -> None:
        mock_db_session.execute.return_value = scalar_result(0)

        summary = await seed_reference_data(mock_db_session)

        assert summary.frameworks == len(FRAMEWORKS)
        assert summary.domains == sum(len(f.domains) for f in FRAMEWORKS)
        assert summary.controls == summary.subdomains * 5
        assert summary.policy_categories == len(POLICY_CATEGORIES)
        assert summary.onboarding_steps == len(ONBOARDING_STEPS)
        assert summary.badges == len(BADGES)
        assert summary.risks == len(SAMPLE_RISKS)

        controls = [obj for obj in mock_db_session.added if isinstance(obj, ControlModel)]
        assert len(controls) == summary.controls
        assert len({c.control_id for c in controls}) == len(controls)

    async def test_populated_tables_are_skipped(self, mock_db_session: AsyncMock) -> None:
        mock_db_session.execute.return_value = scalar_result(3)

        summary = await seed_reference_data(mock_db_session)

        assert summary.as_dict() == dict.fromkeys(summary.as_dict(), 0)
        assert mock_db_session.added == []

    async def test_only_empty_groups_are_seeded(self, mock_db_session: AsyncMock) -> None:
        # frameworks, policy categories, steps, badges populated; risks empty
        mock_db_session.execute.side_effect = [
            scalar_result(2),
            scalar_result(4),
            scalar_result(4),
            scalar_result(4),
            scalar_result(0),
        ]

        summary = await seed_reference_data(mock_db_session)

        assert summary.frameworks == 0
        assert summary.risks == len(SAMPLE_RISKS)
        assert all(isinstance(obj, RiskModel) for obj in mock_db_session.added)
        assert not any(isinstance(obj, FrameworkModel) for obj in mock_db_session.added)
