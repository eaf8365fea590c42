import pytest

from app.infrastructure.audit.audit_logger import AuditEntry, AuditLogger


@pytest.mark.asyncio
async def test_request_entry_reaches_every_sink():
    received = []
    audit = AuditLogger(sinks=[lambda kind, payload: received.append((kind, payload))])

    ok = await audit.log_request_entry(
        AuditEntry(request_id="req-1", method="GET", path="/api/users", status_code=200)
    )

    assert ok is True
    kind, payload = received[0]
    assert kind == "request"
    assert payload["request_id"] == "req-1"
    assert payload["status_code"] == 200
    assert "request_body" not in payload


@pytest.mark.asyncio
async def test_failing_sink_never_raises_and_others_still_run():
    received = []

    def broken(kind, payload):
        raise RuntimeError("disk full")

    audit = AuditLogger(sinks=[broken, lambda kind, payload: received.append(payload)])

    ok = await audit.log(user_id="1", action="user_deleted", resource_type="user", resource_id="7")

    assert ok is False
    assert received[0]["audit_action"] == "user_deleted"
    assert received[0]["resource_id"] == "7"


@pytest.mark.asyncio
async def test_event_payload_drops_empty_fields():
    received = []
    audit = AuditLogger(sinks=[lambda kind, payload: received.append((kind, payload))])

    await audit.log(user_id=None, action="user_created", metadata={"changes": {"a": 1}})

    kind, payload = received[0]
    assert kind == "event"
    assert "user_id" not in payload
    assert payload["metadata"] == {"changes": {"a": 1}}


@pytest.mark.asyncio
async def test_default_sink_writes_structured_log():
    audit = AuditLogger()

    assert await audit.log_request_entry(
        AuditEntry(request_id="r", method="GET", path="/x", status_code=503)
    )


def test_add_and_remove_sink():
    audit = AuditLogger(sinks=[])
    sink = lambda kind, payload: None  # noqa: E731

    audit.add_sink(sink)
    audit.remove_sink(sink)
    audit.remove_sink(sink)

    assert audit._sinks == []
