"""Tests for RedemptionService."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from rizzchat.core.exceptions import (
    InvalidCodeError,
    RedeemCodeAlreadyExistsError,
    UserNotFoundError,
)
from rizzchat.repositories.redeem_code_repo import RedeemCodeRepository
from rizzchat.services.redemption_service import REDEEMED_MESSAGE, RedemptionService
from tests.conftest import load_code, load_user, seed_code, seed_user


def _service(db_session: AsyncSession, user_id: str) -> RedemptionService:
    return RedemptionService(
        code_repo=RedeemCodeRepository(db_session),
        session=db_session,
        user_id=user_id,
    )


class TestRedeem:
    """Tests for RedemptionService.redeem."""

    async def test_redeem_upgrades_user(self, db_session: AsyncSession) -> None:
        await seed_user("alice")
        await seed_code("spring2024")

        result = await _service(db_session, "alice").redeem("spring2024")

        assert result.message == REDEEMED_MESSAGE
        user = await load_user("alice")
        assert user is not None and user.is_pro is True
        code = await load_code("spring2024")
        assert code is not None
        assert code.used is True
        assert code.used_by_id == "alice"
        assert code.used_at is not None

    async def test_code_is_normalized(self, db_session: AsyncSession) -> None:
        await seed_user("alice")
        await seed_code("spring2024")

        await _service(db_session, "alice").redeem("  SPRING2024 \n")

        user = await load_user("alice")
        assert user is not None and user.is_pro is True

    async def test_second_redemption_fails_and_leaves_user_unchanged(
        self, db_session: AsyncSession
    ) -> None:
        await seed_user("alice")
        await seed_user("bob")
        await seed_code("spring2024")

        await _service(db_session, "alice").redeem("SPRING2024")
        with pytest.raises(InvalidCodeError):
            await _service(db_session, "bob").redeem("SPRING2024")

        alice = await load_user("alice")
        bob = await load_user("bob")
        assert alice is not None and alice.is_pro is True
        assert bob is not None and bob.is_pro is False
        code = await load_code("spring2024")
        assert code is not None and code.used_by_id == "alice"

    async def test_unknown_code(self, db_session: AsyncSession) -> None:
        await seed_user("alice")
        with pytest.raises(InvalidCodeError):
            await _service(db_session, "alice").redeem("nope")

    async def test_blank_code(self, db_session: AsyncSession) -> None:
        with pytest.raises(InvalidCodeError):
            await _service(db_session, "alice").redeem("   ")

    async def test_missing_user_rolls_back_code(self, db_session: AsyncSession) -> None:
        await seed_code("orphan")

        with pytest.raises(UserNotFoundError):
            await _service(db_session, "ghost").redeem("orphan")

        code = await load_code("orphan")
        assert code is not None
        assert code.used is False
        assert code.used_by_id is None

    async def test_upgrade_failure_leaves_code_unused(
        self, db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        await seed_user("alice")
        await seed_code("fault")
        repo = RedeemCodeRepository(db_session)
        monkeypatch.setattr(
            repo._users, "mark_pro", AsyncMock(side_effect=RuntimeError("db down"))
        )
        service = RedemptionService(code_repo=repo, session=db_session, user_id="alice")

        with pytest.raises(RuntimeError):
            await service.redeem("fault")

        code = await load_code("fault")
        user = await load_user("alice")
        assert code is not None and code.used is False
        assert user is not None and user.is_pro is False


class TestCreateCode:
    """Tests for RedemptionService.create_code."""

    async def test_create_normalizes(self, db_session: AsyncSession) -> None:
        result = await _service(db_session, "admin-1").create_code(" Welcome ")
        assert result.code == "welcome"
        assert result.used is False

    async def test_duplicate_rejected(self, db_session: AsyncSession) -> None:
        await seed_code("welcome")
        with pytest.raises(RedeemCodeAlreadyExistsError):
            await _service(db_session, "admin-1").create_code("WELCOME")
