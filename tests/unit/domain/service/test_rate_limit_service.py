"""Unit tests for RateLimitService."""

import pytest

from clubhouse.config import RateLimitSettings
from clubhouse.domain.service import RateLimitService, get_rate_limit_message
from clubhouse.domain.value import ActionKind, UserId
from clubhouse.persistence.repository.inmemory import InMemoryRateLimitRepository
from tests.doubles import FakeClock

ALICE = UserId("alice")


class UnreadableRateLimitRepository(InMemoryRateLimitRepository):
    async def find(self, user_id, action):
        raise ConnectionError("store unavailable")


def make_service(clock: FakeClock, repository=None) -> RateLimitService:
    return RateLimitService(
        repository or InMemoryRateLimitRepository(), RateLimitSettings(), clock=clock
    )


class TestCheckRateLimit:
    """Tests for check_rate_limit."""

    @pytest.mark.asyncio
    async def test_first_action_is_allowed(self):
        service = make_service(FakeClock())

        decision = await service.check_rate_limit(ALICE, ActionKind.COMMENT)

        assert decision.allowed is True
        assert decision.remaining_seconds == 0

    @pytest.mark.asyncio
    async def test_second_action_inside_window_is_rejected(self):
        """Second comment 2s after the first must wait the remaining 3s."""
        # Arrange
        clock = FakeClock()
        service = make_service(clock)
        await service.update_rate_limit_timestamp(ALICE, ActionKind.COMMENT)
        clock.advance(2)

        # Act
        decision = await service.check_rate_limit(ALICE, ActionKind.COMMENT)

        # Assert
        assert decision.allowed is False
        assert decision.remaining_seconds == 3

    @pytest.mark.asyncio
    async def test_partial_seconds_round_up(self):
        clock = FakeClock()
        service = make_service(clock)
        await service.update_rate_limit_timestamp(ALICE, ActionKind.COMMENT)
        clock.advance(4.2)

        decision = await service.check_rate_limit(ALICE, ActionKind.COMMENT)

        assert decision.remaining_seconds == 1

    @pytest.mark.asyncio
    async def test_allowed_again_once_cooldown_elapses(self):
        clock = FakeClock()
        service = make_service(clock)
        await service.update_rate_limit_timestamp(ALICE, ActionKind.COMMENT)
        clock.advance(5)

        decision = await service.check_rate_limit(ALICE, ActionKind.COMMENT)

        assert decision.allowed is True

    @pytest.mark.asyncio
    async def test_checking_does_not_consume_the_budget(self):
        """Only update_rate_limit_timestamp starts a cooldown."""
        service = make_service(FakeClock())

        await service.check_rate_limit(ALICE, ActionKind.COMMENT)
        decision = await service.check_rate_limit(ALICE, ActionKind.COMMENT)

        assert decision.allowed is True

    @pytest.mark.asyncio
    async def test_action_kinds_and_users_are_independent(self):
        service = make_service(FakeClock())
        await service.update_rate_limit_timestamp(ALICE, ActionKind.COMMENT)

        other_action = await service.check_rate_limit(ALICE, ActionKind.POST)
        other_user = await service.check_rate_limit(UserId("bob"), ActionKind.COMMENT)

        assert other_action.allowed is True
        assert other_user.allowed is True

    @pytest.mark.asyncio
    async def test_fails_open_when_record_cannot_be_read(self):
        service = make_service(FakeClock(), UnreadableRateLimitRepository())

        decision = await service.check_rate_limit(ALICE, ActionKind.COMMENT)

        assert decision.allowed is True

    def test_cooldowns_follow_settings(self):
        service = make_service(FakeClock())

        assert service.cooldown_seconds(ActionKind.POST) == 30
        assert service.cooldown_seconds(ActionKind.COMMENT) == 5
        assert service.cooldown_seconds(ActionKind.MESSAGE) == 10
        assert service.cooldown_seconds(ActionKind.SCORE) == 60


class TestRateLimitMessage:
    """Tests for get_rate_limit_message."""

    @pytest.mark.parametrize(
        ("action", "seconds", "expected"),
        [
            (ActionKind.COMMENT, 3, "Please wait 3 seconds before you comment again."),
            (ActionKind.COMMENT, 1, "Please wait 1 second before you comment again."),
            (ActionKind.POST, 60, "Please wait 60 seconds before you post again."),
            (ActionKind.POST, 90, "Please wait 2 minutes before you post again."),
            (ActionKind.SCORE, 61, "Please wait 2 minutes before you log a score again."),
        ],
    )
    def test_message(self, action, seconds, expected):
        assert get_rate_limit_message(action, seconds) == expected
