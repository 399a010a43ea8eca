"""Tests for WriteInterceptor (fake audit sink, no database)."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.audit_trail import AuditEntryCreate
from app.infrastructure.persistence.interceptor import RecordedWrite, WriteInterceptor
from app.infrastructure.persistence.models.audit_trail import AUDIT_TRAIL_ENTITY
from app.shared import context
from app.shared.context import RequestContext
from app.shared.enums import AuditAction


class _FakeSink:
    """Collects appended entries; optionally fails."""

    def __init__(self, fail: bool = False) -> None:
        self.entries: list[AuditEntryCreate] = []
        self.fail = fail

    async def append(self, entry: AuditEntryCreate) -> AuditEntryCreate:
        if self.fail:
            raise RuntimeError("audit store down")
        self.entries.append(entry)
        return entry


def _returns(value):
    async def _op():
        return value

    return _op


@pytest.fixture
def sink() -> _FakeSink:
    return _FakeSink()


@pytest.fixture
def interceptor(sink: _FakeSink) -> WriteInterceptor:
    return WriteInterceptor(sink, ignored_fields={"updated_at"})


async def test_create_records_one_entry_without_changes(interceptor, sink) -> None:
    result = await interceptor.intercept(
        "Report", AuditAction.CREATE, _returns({"id": "r1", "client": "Acme"})
    )
    assert result == {"id": "r1", "client": "Acme"}
    assert len(sink.entries) == 1
    entry = sink.entries[0]
    assert entry.action == "CREATE"
    assert entry.entity == "Report"
    assert entry.entity_id == "r1"
    assert entry.changes is None
    assert entry.details == "Created Report r1"


async def test_update_records_field_diff(interceptor, sink) -> None:
    before = {"id": "r1", "status": "DRAFT", "updated_at": "t1"}
    after = {"id": "r1", "status": "SUBMITTED_BY_CLIENT", "updated_at": "t2"}
    await interceptor.intercept(
        "Report", AuditAction.UPDATE, _returns(after), fetch_before=_returns(before)
    )
    entry = sink.entries[0]
    assert entry.action == "UPDATE"
    assert entry.entity_id == "r1"
    assert entry.changes == {"status": {"from": "DRAFT", "to": "SUBMITTED_BY_CLIENT"}}


async def test_update_without_changes_still_records_entry(interceptor, sink) -> None:
    """A no-op update writes exactly one UPDATE entry with changes None."""
    snap = {"id": "r1", "status": "DRAFT"}
    await interceptor.intercept(
        "Report", AuditAction.UPDATE, _returns(dict(snap)), fetch_before=_returns(dict(snap))
    )
    assert len(sink.entries) == 1
    assert sink.entries[0].action == "UPDATE"
    assert sink.entries[0].changes is None


async def test_upsert_against_missing_record_diffs_from_none(interceptor, sink) -> None:
    await interceptor.intercept(
        "LabReportSequence",
        AuditAction.UPSERT,
        _returns({"id": "M", "last_number": 1}),
        fetch_before=_returns(None),
    )
    entry = sink.entries[0]
    assert entry.action == "UPSERT"
    assert entry.entity_id == "M"
    assert entry.changes == {
        "id": {"from": None, "to": "M"},
        "last_number": {"from": None, "to": 1},
    }


async def test_delete_takes_entity_id_from_before(interceptor, sink) -> None:
    await interceptor.intercept(
        "Report",
        AuditAction.DELETE,
        _returns({"id": "ignored"}),
        fetch_before=_returns({"id": "r9", "status": "DRAFT"}),
    )
    entry = sink.entries[0]
    assert entry.action == "DELETE"
    assert entry.entity_id == "r9"
    assert entry.changes is None


@pytest.mark.parametrize(
    "action",
    [AuditAction.CREATE_MANY, AuditAction.UPDATE_MANY, AuditAction.DELETE_MANY],
)
async def test_bulk_actions_record_no_changes_and_no_entity_id(interceptor, sink, action) -> None:
    result = await interceptor.intercept("Report", action, _returns(3))
    assert result == 3
    entry = sink.entries[0]
    assert entry.action == action.value
    assert entry.entity_id is None
    assert entry.changes is None
    assert "(3 rows)" in entry.details


async def test_bulk_actions_do_not_fetch_before(interceptor, sink) -> None:
    fetch = AsyncMock(return_value={"id": "x"})
    await interceptor.intercept("Report", AuditAction.UPDATE_MANY, _returns(2), fetch_before=fetch)
    fetch.assert_not_awaited()


async def test_audit_store_entity_is_never_recorded(interceptor, sink) -> None:
    result = await interceptor.intercept(AUDIT_TRAIL_ENTITY, AuditAction.CREATE, _returns({"id": "a1"}))
    assert result == {"id": "a1"}
    assert sink.entries == []


async def test_non_mutating_action_passes_through(interceptor, sink) -> None:
    result = await interceptor.intercept("Report", "findMany", _returns([1, 2]))
    assert result == [1, 2]
    assert sink.entries == []


async def test_lowercase_action_names_are_accepted(interceptor, sink) -> None:
    await interceptor.intercept("Report", "create", _returns({"id": "r1"}))
    assert sink.entries[0].action == "CREATE"


async def test_skip_audit_bypasses_recording(interceptor, sink) -> None:
    async def work():
        return await interceptor.intercept("Report", AuditAction.CREATE, _returns({"id": "r1"}))

    await context.run_async(RequestContext(user_id="u1", skip_audit=True), work)
    assert sink.entries == []


async def test_operation_failure_propagates_and_records_nothing(interceptor, sink) -> None:
    async def boom():
        raise LookupError("constraint violated")

    with pytest.raises(LookupError, match="constraint violated"):
        await interceptor.intercept(
            "Report", AuditAction.UPDATE, boom, fetch_before=_returns({"id": "r1"})
        )
    assert sink.entries == []


async def test_before_fetch_failure_degrades_to_none(interceptor, sink) -> None:
    async def failing_fetch():
        raise RuntimeError("lookup failed")

    result = await interceptor.intercept(
        "Report", AuditAction.UPDATE, _returns({"id": "r1", "status": "A"}), fetch_before=failing_fetch
    )
    assert result == {"id": "r1", "status": "A"}
    entry = sink.entries[0]
    assert entry.entity_id == "r1"
    assert entry.changes == {
        "id": {"from": None, "to": "r1"},
        "status": {"from": None, "to": "A"},
    }


async def test_sink_failure_is_swallowed() -> None:
    """The caller sees the operation's result even when the audit append fails."""
    interceptor = WriteInterceptor(_FakeSink(fail=True))
    result = await interceptor.intercept("Report", AuditAction.CREATE, _returns({"id": "r1"}))
    assert result == {"id": "r1"}


async def test_entry_attributed_from_context(interceptor, sink) -> None:
    async def work():
        return await interceptor.intercept("Report", AuditAction.CREATE, _returns({"id": "r1"}))

    ctx = RequestContext(user_id="u1", role="QA", ip="10.0.0.5", reason="Typo")
    await context.run_async(ctx, work)
    entry = sink.entries[0]
    assert entry.user_id == "u1"
    assert entry.role == "QA"
    assert entry.ip_address == "10.0.0.5"
    assert entry.details == "Created Report r1 | reason: Typo"


async def test_reason_patched_during_operation_is_used(interceptor, sink) -> None:
    async def op():
        context.patch(reason="late reason")
        return {"id": "r1"}

    async def work():
        return await interceptor.intercept("Report", AuditAction.CREATE, op)

    await context.run_async(RequestContext(user_id="u1"), work)
    assert sink.entries[0].details.endswith("| reason: late reason")


async def test_without_context_attribution_is_empty(interceptor, sink) -> None:
    await interceptor.intercept("Report", AuditAction.CREATE, _returns({"id": "r1"}))
    entry = sink.entries[0]
    assert entry.user_id is None
    assert entry.role is None
    assert entry.ip_address is None


async def test_after_write_hook_receives_recorded_write(interceptor, sink) -> None:
    seen: list[RecordedWrite] = []

    async def hook(recorded: RecordedWrite) -> None:
        seen.append(recorded)

    await interceptor.intercept(
        "Report",
        AuditAction.UPDATE,
        _returns({"id": "r1", "status": "B"}),
        fetch_before=_returns({"id": "r1", "status": "A"}),
        after_write=hook,
    )
    assert len(seen) == 1
    assert seen[0].before == {"id": "r1", "status": "A"}
    assert seen[0].after == {"id": "r1", "status": "B"}
    assert seen[0].changes == {"status": {"from": "A", "to": "B"}}


async def test_after_write_hook_failure_is_swallowed(interceptor, sink) -> None:
    async def hook(recorded: RecordedWrite) -> None:
        raise RuntimeError("history table missing")

    result = await interceptor.intercept(
        "Report", AuditAction.CREATE, _returns({"id": "r1"}), after_write=hook
    )
    assert result == {"id": "r1"}
    assert len(sink.entries) == 1


async def test_concurrent_writes_are_attributed_to_their_own_request(interceptor, sink) -> None:
    async def write(entity_id: str):
        await asyncio.sleep(0.001)
        return await interceptor.intercept("Report", AuditAction.CREATE, _returns({"id": entity_id}))

    await asyncio.gather(
        context.run_async(RequestContext(user_id="alice"), write, "r-alice"),
        context.run_async(RequestContext(user_id="bob"), write, "r-bob"),
    )
    by_id = {e.entity_id: e.user_id for e in sink.entries}
    assert by_id == {"r-alice": "alice", "r-bob": "bob"}


@pytest.mark.parametrize(
    "action",
    [AuditAction.UPDATE, "UPDATE", "update", "Update"],
)
async def test_enum_members_and_names_record_the_same_action(interceptor, sink, action) -> None:
    await interceptor.intercept(
        "Report",
        action,
        _returns({"id": "r1", "status": "B"}),
        fetch_before=_returns({"id": "r1", "status": "A"}),
    )
    assert len(sink.entries) == 1
    assert sink.entries[0].action == "UPDATE"
    assert sink.entries[0].changes == {"status": {"from": "A", "to": "B"}}


async def test_cancelled_caller_waits_for_audit_append_before_unwinding() -> None:
    """Cancellation during the append lets it finish before the caller unwinds."""
    started = asyncio.Event()
    release = asyncio.Event()
    order: list[str] = []

    class _SlowSink:
        async def append(self, entry: AuditEntryCreate) -> AuditEntryCreate:
            started.set()
            await release.wait()
            order.append("appended")
            return entry

    interceptor = WriteInterceptor(_SlowSink())

    async def caller() -> None:
        try:
            await interceptor.intercept("Report", AuditAction.CREATE, _returns({"id": "r1"}))
        finally:
            order.append("caller unwound")

    task = asyncio.create_task(caller())
    await started.wait()
    task.cancel()
    await asyncio.sleep(0)
    assert order == []
    release.set()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert order == ["appended", "caller unwound"]
