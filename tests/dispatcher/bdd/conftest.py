"""Shared BDD fixtures and step definitions for the bulk payload queue."""

import asyncio

import pytest
from dispatcher.message.payload import MessagePayload
from dispatcher.message.queue_message import QueueMessage
from pytest_bdd import given, parsers, then


@pytest.fixture()
def context():
    """Container for payloads read between steps."""
    return {"read": []}


def _queue(bulk_store, vendor_name):
    payload = MessagePayload(
        queue_message=QueueMessage(token_id="TKN-BDD", subject="Hello"),
        vendor_name=vendor_name,
    )
    return asyncio.run(bulk_store.insert(payload))


def _internal_errors(store):
    return [
        doc
        for doc in store.documents("EventLog")
        if doc["log_message"] and doc["log_message"]["message"].startswith("An internal exception occurred")
    ]


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the bulk reader serves vendor "{vendor_name}"'))
def reader_settings(settings, vendor_name):
    assert settings.normalized_vendor_name == vendor_name.lower()


@given(parsers.cfparse('a message for vendor "{vendor_name}" is queued'))
def queued_message(bulk_store, vendor_name):
    _queue(bulk_store, vendor_name)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the reader sees {count:d} pending payload"))
@then(parsers.cfparse("the reader sees {count:d} pending payloads"))
def pending_count(bulk_store, count):
    assert len(asyncio.run(bulk_store.read_batch())) == count


@then(parsers.cfparse('every pending payload has status "{status}"'))
def pending_status(bulk_store, status):
    assert all(payload.status == status for payload in asyncio.run(bulk_store.read_batch()))


@then(parsers.cfparse('the stored payload has status "{status}"'))
def stored_status(store, status):
    assert [doc["status"] for doc in store.documents("BulkMessage")] == [status]


@then("the queue is empty")
def queue_empty(store):
    assert store.documents("BulkMessage") == []


@then("no internal errors were logged")
def no_internal_errors(store):
    assert _internal_errors(store) == []


@then(parsers.cfparse("{count:d} internal error was logged"))
def internal_error_count(store, count):
    assert len(_internal_errors(store)) == count
