# ==============================================================================
# CONFTEST - Pytest Fixtures and Configuration
# ==============================================================================
# Every test gets its own SQLite file and its own named pool
# ==============================================================================

from __future__ import annotations

from typing import Callable, Dict, Iterator
from uuid import uuid4

import pytest

from bank_transfer.core.settings import Settings
from bank_transfer.database.factory import DatabaseFactory
from bank_transfer.database.pool import SQLAlchemyConnectionPool
from bank_transfer.database.repositories.member_repository import MemberRepository
from bank_transfer.schemas.member import Member
from bank_transfer.services.transfer_service import TransferService


# ==============================================================================
# CONFIGURATION FIXTURES
# ==============================================================================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'transfer.db'}",
        DB_POOL_NAME=f"test-pool-{uuid4().hex[:8]}",
        DB_POOL_SIZE=2,
        DB_MAX_OVERFLOW=0,
        DB_POOL_TIMEOUT=0.2,
    )


# ==============================================================================
# DATABASE FIXTURES
# ==============================================================================

@pytest.fixture
def pool(test_settings: Settings) -> Iterator[SQLAlchemyConnectionPool]:
    """Initialized pool with the member table created."""
    DatabaseFactory.reset()
    pool = DatabaseFactory.initialize(test_settings)
    yield pool
    DatabaseFactory.shutdown()


@pytest.fixture
def repository() -> MemberRepository:
    return MemberRepository()


@pytest.fixture
def service(
    pool: SQLAlchemyConnectionPool,
    repository: MemberRepository,
    test_settings: Settings,
) -> TransferService:
    return TransferService.from_settings(pool, repository, test_settings)


# ==============================================================================
# HELPER FIXTURES
# ==============================================================================

@pytest.fixture
def seed_members(
    pool: SQLAlchemyConnectionPool,
    repository: MemberRepository,
) -> Callable[[Dict[str, int]], None]:
    """Insert members in auto-commit mode."""

    def _seed(balances: Dict[str, int]) -> None:
        handle = pool.acquire()
        try:
            for member_id, money in balances.items():
                repository.save(handle, Member(member_id=member_id, money=money))
        finally:
            pool.release(handle)

    return _seed


@pytest.fixture
def read_balances(
    pool: SQLAlchemyConnectionPool,
    repository: MemberRepository,
) -> Callable[[], Dict[str, int]]:
    """Read every committed balance through a fresh connection."""

    def _read() -> Dict[str, int]:
        handle = pool.acquire()
        try:
            return {m.member_id: m.money for m in repository.find_all(handle)}
        finally:
            pool.release(handle)

    return _read


@pytest.fixture
def default_members(seed_members) -> Dict[str, int]:
    """memberA and memberB with 10000 each, plus the rejected member."""
    balances = {"memberA": 10000, "memberB": 10000, "ex": 10000}
    seed_members(balances)
    return balances
