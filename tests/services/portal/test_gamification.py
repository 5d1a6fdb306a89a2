"""
Gamification Tests
==================

Tests for progress recording, game statistics and badge awards.

Version: 0.1.0
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from services.portal.models import BadgeModel, UserBadgeModel, UserGameStatsModel, UserProgressModel
from services.portal.services.gamification import (
    award_badge,
    award_earned_badges,
    compute_totals,
    level_for_points,
    next_streak,
    record_progress,
    recompute_game_stats,
    timeline_status,
)
from shared.models.onboarding import ProgressRecord, TimelineStatus
from tests.helpers import scalar_result, scalars_result


NOW = datetime(2025, 3, 10, 9, 0, tzinfo=UTC)


def progress(completed: bool = True, score: int | None = None) -> UserProgressModel:
    return UserProgressModel(user_id=1, step_id=1, completed=completed, score=score, attempts=1)


class TestRules:
    @pytest.mark.parametrize(("points", "level"), [(0, 1), (99, 1), (100, 2), (250, 3)])
    def test_level(self, points: int, level: int) -> None:
        assert level_for_points(points) == level

    def test_totals_only_count_completed(self) -> None:
        totals = compute_totals(
            [
                (progress(score=80), 30),
                (progress(score=None), 10),
                (progress(completed=False, score=20), 50),
                (progress(score=100), 70),
            ]
        )

        assert totals.total_points == 110
        assert totals.completed_steps == 3
        assert totals.quiz_average == 90.0
        assert totals.level == 2

    def test_totals_without_scores(self) -> None:
        assert compute_totals([(progress(), None)]).quiz_average == 0.0

    def test_streak_next_day(self) -> None:
        assert next_streak(3, NOW - timedelta(days=1, hours=2), NOW) == 4

    def test_streak_same_day(self) -> None:
        assert next_streak(3, NOW - timedelta(hours=20), NOW) == 3

    def test_streak_reset_after_gap(self) -> None:
        assert next_streak(5, NOW - timedelta(days=3), NOW) == 1

    def test_streak_naive_last_activity(self) -> None:
        last = (NOW - timedelta(days=1)).replace(tzinfo=None)

        assert next_streak(1, last, NOW) == 2

    def test_timeline_status(self) -> None:
        assert timeline_status(None) == TimelineStatus.NOT_STARTED
        assert timeline_status(progress(completed=False)) == TimelineStatus.IN_PROGRESS
        assert timeline_status(progress()) == TimelineStatus.COMPLETED


class TestRecordProgress:
    async def test_first_record_creates_progress(self, mock_db_session: AsyncMock) -> None:
        mock_db_session.execute.return_value = scalar_result(None)

        row = await record_progress(
            mock_db_session, 1, 4, ProgressRecord(completed=True, score=90), now=NOW
        )

        assert row in mock_db_session.added
        assert row.attempts == 1
        assert row.started_at == NOW
        assert row.completed_at == NOW
        assert row.score == 90

    async def test_update_adds_attempt_and_keeps_unsent_fields(self, mock_db_session: AsyncMock) -> None:
        existing = UserProgressModel(
            id=3, user_id=1, step_id=4, completed=False, score=40, feedback="retry", attempts=2
        )
        mock_db_session.execute.return_value = scalar_result(existing)

        row = await record_progress(mock_db_session, 1, 4, ProgressRecord(score=70), now=NOW)

        assert row is existing
        assert row.attempts == 3
        assert row.score == 70
        assert row.feedback == "retry"
        assert row.completed_at is None


class TestStats:
    async def test_missing_stats_are_created(self, mock_db_session: AsyncMock) -> None:
        mock_db_session.execute.side_effect = [
            scalars_result([(progress(score=60), 120)]),  # progress joined with points
            scalar_result(None),  # existing stats
            scalars_result([]),  # eligible badges
            scalars_result([]),  # owned badges
        ]

        stats = await recompute_game_stats(mock_db_session, 1, now=NOW)

        assert stats.total_points == 120
        assert stats.level == 2
        assert stats.streak_days == 1
        assert stats.completed_steps == 1
        assert stats.quiz_average == 60.0
        assert stats.last_activity == NOW

    async def test_existing_stats_extend_streak(self, mock_db_session: AsyncMock) -> None:
        stats = UserGameStatsModel(id=1, user_id=1, streak_days=2, last_activity=NOW - timedelta(days=1))
        mock_db_session.execute.side_effect = [
            scalars_result([]),
            scalar_result(stats),
            scalars_result([]),
            scalars_result([]),
        ]

        result = await recompute_game_stats(mock_db_session, 1, now=NOW)

        assert result is stats
        assert stats.streak_days == 3
        assert stats.total_points == 0
        assert stats.level == 1


class TestBadges:
    async def test_award_is_idempotent(self, mock_db_session: AsyncMock) -> None:
        owned = UserBadgeModel(id=5, user_id=1, badge_id=2)
        mock_db_session.execute.return_value = scalar_result(owned)

        user_badge, created = await award_badge(mock_db_session, 1, 2)

        assert user_badge is owned
        assert created is False
        mock_db_session.add.assert_not_called()

    async def test_award_new_badge(self, mock_db_session: AsyncMock) -> None:
        mock_db_session.execute.return_value = scalar_result(None)

        user_badge, created = await award_badge(mock_db_session, 1, 2, now=NOW)

        assert created is True
        assert user_badge.earned_at == NOW
        assert user_badge.displayed is True
        assert user_badge.id is not None

    async def test_threshold_badges_skip_owned(self, mock_db_session: AsyncMock) -> None:
        first = BadgeModel(id=1, name="First Steps", required_points=10)
        champion = BadgeModel(id=3, name="Champion", required_points=100)
        owned = scalars_result([1])
        mock_db_session.execute.side_effect = [scalars_result([first, champion]), owned]

        awarded = await award_earned_badges(mock_db_session, 1, 150, now=NOW)

        assert [b.badge_id for b in awarded] == [3]
        mock_db_session.flush.assert_awaited()
