"""Tests for ESignService (mocked user repository, real bcrypt)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.application.services.esign_service import ESignService
from app.domain.exceptions import ESignatureException
from app.infrastructure.security.password import get_password_hash


@pytest.fixture(scope="module")
def stored_hash() -> str:
    return get_password_hash("correct horse")


@pytest.fixture
def user_repo(stored_hash) -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = SimpleNamespace(id="u1", password_hash=stored_hash)
    return repo


async def test_correct_password_passes(user_repo) -> None:
    await ESignService(user_repo).verify_password("u1", "correct horse")


async def test_wrong_password_fails(user_repo) -> None:
    with pytest.raises(ESignatureException, match="Electronic signature failed"):
        await ESignService(user_repo).verify_password("u1", "wrong")


async def test_missing_password_fails_without_lookup(user_repo) -> None:
    with pytest.raises(ESignatureException, match="required"):
        await ESignService(user_repo).verify_password("u1", None)
    user_repo.get_by_id.assert_not_awaited()


async def test_unknown_user_fails(user_repo) -> None:
    user_repo.get_by_id.return_value = None
    with pytest.raises(ESignatureException, match="No credentials on file"):
        await ESignService(user_repo).verify_password("ghost", "x")
