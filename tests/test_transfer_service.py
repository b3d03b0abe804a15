# ==============================================================================
# TRANSFER SERVICE TESTS
# ==============================================================================
# Atomicity, conservation and release guarantees of TransferService.transfer
# ==============================================================================

import logging
import threading
import time

import pytest

from bank_transfer.core.exceptions import (
    CommitFailed,
    DataAccessFailed,
    EntityNotFound,
    PoolExhausted,
    RepositoryError,
    StaleWrite,
    StaleWriteError,
    TransactionStartFailed,
    TransferError,
    ValidationFailed,
    WriteFailed,
)
from bank_transfer.database.connection import HandleState
from bank_transfer.database.pool import BaseConnectionPool
from bank_transfer.database.repositories.member_repository import MemberRepository
from bank_transfer.schemas.transfer import TransferReceipt
from bank_transfer.services.transfer_service import TransferService
from tests.fakes import FakeHandle, FakePool, StubMemberRepository


class FailingUpdateRepository(MemberRepository):
    """Real repository whose update of one member raises."""

    def __init__(self, member_id: str, error: Exception) -> None:
        self.member_id = member_id
        self.error = error

    def update(self, handle, member_id, money):
        if member_id == self.member_id:
            raise self.error
        super().update(handle, member_id, money)


class SlowReadRepository(MemberRepository):
    """Real repository pausing after every read so transfers overlap."""

    def __init__(self, delay: float) -> None:
        self.delay = delay

    def find_by_id(self, handle, member_id, for_update=False):
        member = super().find_by_id(handle, member_id, for_update=for_update)
        time.sleep(self.delay)
        return member


class RecordingPool(BaseConnectionPool):
    """Delegating pool remembering every handle it gave out."""

    def __init__(self, inner) -> None:
        self.inner = inner
        self.handles = []

    def acquire(self):
        handle = self.inner.acquire()
        self.handles.append(handle)
        return handle

    def release(self, handle):
        self.inner.release(handle)

    @property
    def checked_out(self):
        return self.inner.checked_out

    def dispose(self):
        self.inner.dispose()

    def health_check(self):
        return self.inner.health_check()


class TestTransferScenario:
    """End-to-end transfers against SQLite."""

    def test_transfer_moves_money(self, service, default_members, read_balances):
        """A successful transfer debits the source and credits the destination."""
        receipt = service.transfer("memberA", "memberB", 2000)

        assert receipt.from_balance == 8000
        assert receipt.to_balance == 12000
        balances = read_balances()
        assert balances["memberA"] == 8000
        assert balances["memberB"] == 12000

    def test_transfer_conserves_total(self, service, default_members, read_balances):
        """The sum of both balances is unchanged by a transfer."""
        before = read_balances()
        service.transfer("memberB", "memberA", 3500)
        after = read_balances()

        assert after["memberA"] + after["memberB"] == before["memberA"] + before["memberB"]

    def test_rejected_destination_rolls_back_debit(
        self, service, default_members, read_balances
    ):
        """Transfer to the rejected member fails after the debit and undoes it."""
        service.transfer("memberA", "memberB", 2000)

        with pytest.raises(ValidationFailed) as exc_info:
            service.transfer("memberA", "ex", 1000)

        assert exc_info.value.details["from_id"] == "memberA"
        assert exc_info.value.details["to_id"] == "ex"
        assert exc_info.value.details["amount"] == 1000
        balances = read_balances()
        assert balances["memberA"] == 8000
        assert balances["ex"] == 10000

    def test_rejected_destination_is_configurable(
        self, pool, repository, seed_members, read_balances
    ):
        """The rejected member id comes from the service configuration."""
        seed_members({"alice": 500, "bob": 500})
        service = TransferService(pool, repository, rejected_member_id="bob")

        with pytest.raises(ValidationFailed):
            service.transfer("alice", "bob", 100)

        assert read_balances() == {"alice": 500, "bob": 500}

    @pytest.mark.parametrize(
        "from_id,to_id,missing",
        [
            ("ghost", "memberB", "ghost"),
            ("memberA", "ghost", "ghost"),
        ],
    )
    def test_unknown_member(
        self, service, default_members, read_balances, from_id, to_id, missing
    ):
        """An unknown member fails with EntityNotFound and changes nothing."""
        with pytest.raises(EntityNotFound) as exc_info:
            service.transfer(from_id, to_id, 100)

        assert exc_info.value.member_id == missing
        assert read_balances() == default_members

    def test_credit_failure_rolls_back_debit(
        self, pool, default_members, read_balances
    ):
        """A failing credit leaves the already-applied debit invisible."""
        repository = FailingUpdateRepository(
            "memberB", RepositoryError("disk I/O error", operation="update")
        )
        service = TransferService(pool, repository)

        with pytest.raises(WriteFailed) as exc_info:
            service.transfer("memberA", "memberB", 2000)

        assert not isinstance(exc_info.value, StaleWrite)
        assert isinstance(exc_info.value.__cause__, RepositoryError)
        assert read_balances() == default_members

    def test_stale_credit_reports_stale_write(
        self, pool, default_members, read_balances
    ):
        """An update matching no row surfaces as StaleWrite."""
        repository = FailingUpdateRepository("memberB", StaleWriteError("memberB"))
        service = TransferService(pool, repository)

        with pytest.raises(StaleWrite) as exc_info:
            service.transfer("memberA", "memberB", 2000)

        assert exc_info.value.error_code == "STALE_WRITE"
        assert read_balances() == default_members

    def test_unexpected_error_is_wrapped_and_rolled_back(
        self, pool, default_members, read_balances
    ):
        """Errors outside the repository contract still roll back."""
        repository = FailingUpdateRepository("memberB", KeyError("boom"))
        service = TransferService(pool, repository)

        with pytest.raises(TransferError) as exc_info:
            service.transfer("memberA", "memberB", 2000)

        assert exc_info.value.error_code == "TRANSFER_FAILED"
        assert isinstance(exc_info.value.__cause__, KeyError)
        assert read_balances() == default_members
        assert pool.checked_out == 0

    def test_overdraft_rejected(self, service, default_members, read_balances):
        """A debit larger than the balance fails and leaves both members usable."""
        with pytest.raises(ValidationFailed) as exc_info:
            service.transfer("memberA", "memberB", 15000)

        assert "insufficient funds" in exc_info.value.reason
        assert exc_info.value.details["balance"] == 10000
        assert read_balances() == default_members

        receipt = service.transfer("memberB", "memberA", 10000)
        assert receipt.from_balance == 0
        assert receipt.to_balance == 20000

    def test_whole_balance_can_be_moved(self, service, default_members, read_balances):
        service.transfer("memberA", "memberB", 10000)

        balances = read_balances()
        assert balances["memberA"] == 0
        assert balances["memberB"] == 20000


class TestRequestValidation:
    """Requests rejected before a connection is borrowed."""

    @pytest.mark.parametrize("amount", [0, -500, True, 10.5, "100"])
    def test_invalid_amount(self, amount):
        pool = FakePool()
        service = TransferService(pool, StubMemberRepository({"a": 1, "b": 1}))

        with pytest.raises(ValidationFailed):
            service.transfer("a", "b", amount)

        assert pool.acquired == 0

    def test_self_transfer(self):
        pool = FakePool()
        service = TransferService(pool, StubMemberRepository({"a": 100}))

        with pytest.raises(ValidationFailed) as exc_info:
            service.transfer("a", "a", 10)

        assert "different members" in exc_info.value.reason
        assert pool.acquired == 0

    def test_empty_member_id(self):
        pool = FakePool()
        service = TransferService(pool, StubMemberRepository({}))

        with pytest.raises(ValidationFailed):
            service.transfer("", "b", 10)


class TestConnectionRelease:
    """Pool accounting returns to zero on every outcome."""

    def test_released_after_success(self, service, pool, default_members):
        service.transfer("memberA", "memberB", 100)
        assert pool.checked_out == 0
        assert pool.engine.pool.checkedout() == 0

    def test_released_after_validation_failure(self, service, pool, default_members):
        with pytest.raises(ValidationFailed):
            service.transfer("memberA", "ex", 100)
        assert pool.checked_out == 0
        assert pool.engine.pool.checkedout() == 0

    def test_released_after_not_found(self, service, pool, default_members):
        with pytest.raises(EntityNotFound):
            service.transfer("memberA", "nobody", 100)
        assert pool.checked_out == 0

    def test_auto_commit_restored(self, pool, repository, default_members):
        """The borrowed handle ends released with auto-commit back on."""
        recording = RecordingPool(pool)
        service = TransferService(recording, repository)

        service.transfer("memberA", "memberB", 100)
        with pytest.raises(ValidationFailed):
            service.transfer("memberA", "ex", 100)

        assert len(recording.handles) == 2
        for handle in recording.handles:
            assert handle.autocommit is True
            assert handle.state is HandleState.RELEASED

    def test_pool_exhausted(self, service, pool, default_members, read_balances):
        """With every connection borrowed, transfer fails fast and touches nothing."""
        held = [pool.acquire(), pool.acquire()]
        try:
            with pytest.raises(PoolExhausted) as exc_info:
                service.transfer("memberA", "memberB", 100)
            assert exc_info.value.details["amount"] == 100
        finally:
            for handle in held:
                pool.release(handle)

        assert pool.checked_out == 0
        assert read_balances() == default_members

    def test_concurrent_transfers_are_serialized(
        self, pool, default_members, read_balances
    ):
        """Two overlapping transfers from one member both apply in full."""
        service = TransferService(pool, SlowReadRepository(delay=0.2))
        start = threading.Barrier(2)
        outcomes = []

        def run():
            start.wait()
            try:
                outcomes.append(service.transfer("memberA", "memberB", 1000))
            except TransferError as e:
                outcomes.append(e)

        workers = [threading.Thread(target=run) for _ in range(2)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join(timeout=10)

        assert len(outcomes) == 2
        assert all(isinstance(outcome, TransferReceipt) for outcome in outcomes)
        assert sorted(o.from_balance for o in outcomes) == [8000, 9000]
        balances = read_balances()
        assert balances["memberA"] == 8000
        assert balances["memberB"] == 12000
        assert pool.checked_out == 0


class TestFailureMapping:
    """Fault injection on commit, rollback and release."""

    def test_commit_failure_is_surfaced_without_rollback(self):
        handle = FakeHandle(fail_on=("commit",))
        pool = FakePool(handle)
        service = TransferService(pool, StubMemberRepository({"a": 100, "b": 0}))

        with pytest.raises(CommitFailed):
            service.transfer("a", "b", 40)

        assert "rollback" not in handle.calls
        assert handle.closed
        assert pool.checked_out == 0

    def test_transaction_start_failure(self):
        handle = FakeHandle(fail_on=("begin",))
        pool = FakePool(handle)
        repository = StubMemberRepository({"a": 100, "b": 0})
        service = TransferService(pool, repository)

        with pytest.raises(TransactionStartFailed):
            service.transfer("a", "b", 40)

        assert repository.reads == []
        assert pool.checked_out == 0

    def test_rollback_failure_keeps_primary_error(self, caplog):
        caplog.set_level(logging.WARNING, logger="bank_transfer")
        handle = FakeHandle(fail_on=("rollback",))
        pool = FakePool(handle)
        service = TransferService(pool, StubMemberRepository({"a": 100, "ex": 0}))

        with pytest.raises(ValidationFailed):
            service.transfer("a", "ex", 40)

        assert "Rollback failed" in caplog.text
        assert pool.checked_out == 0

    def test_release_failure_does_not_mask_success(self, caplog):
        caplog.set_level(logging.WARNING, logger="bank_transfer")
        handle = FakeHandle(fail_on=("close",))
        pool = FakePool(handle)
        repository = StubMemberRepository({"a": 100, "b": 0})
        service = TransferService(pool, repository)

        receipt = service.transfer("a", "b", 40)

        assert receipt.from_balance == 60
        assert repository.balances == {"a": 60, "b": 40}
        assert "RELEASE_FAILED" in caplog.text

    def test_read_failure_maps_to_data_access_failed(self):
        repository = StubMemberRepository(
            {"a": 100, "b": 0},
            failures={("find", "b"): RepositoryError("timeout", operation="find")},
        )
        handle = FakeHandle()
        service = TransferService(FakePool(handle), repository)

        with pytest.raises(DataAccessFailed):
            service.transfer("a", "b", 40)

        assert repository.updates == []
        assert "rollback" in handle.calls

    def test_operation_order(self):
        """Reads, debit, validation, credit, then commit on one handle."""
        handle = FakeHandle()
        repository = StubMemberRepository({"b": 50, "a": 100})
        service = TransferService(FakePool(handle), repository, lock_ordering=False)

        service.transfer("b", "a", 20)

        assert repository.reads == ["b", "a"]
        assert repository.updates == [("b", 30), ("a", 120)]
        assert handle.calls == [
            ("set_transactional", True),
            "commit",
            ("set_transactional", False),
            "close",
        ]

    def test_lock_ordering_reads_in_id_order(self):
        """With lock ordering on, members are read in ascending id order."""
        repository = StubMemberRepository({"b": 50, "a": 100})
        service = TransferService(FakePool(), repository, lock_ordering=True)

        service.transfer("b", "a", 20)

        assert repository.reads == ["a", "b"]
        assert repository.updates == [("b", 30), ("a", 120)]

    def test_debit_applied_before_validation(self):
        """The rejected destination is detected after the debit was written."""
        handle = FakeHandle()
        repository = StubMemberRepository({"a": 100, "ex": 0})
        service = TransferService(FakePool(handle), repository)

        with pytest.raises(ValidationFailed):
            service.transfer("a", "ex", 40)

        assert repository.updates == [("a", 60)]
        assert "rollback" in handle.calls
        assert "commit" not in handle.calls
