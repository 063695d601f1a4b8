"""End-to-end: invitation journey events accumulate on their parent document."""

import asyncio
from datetime import UTC, datetime

from dispatcher.logevent.logevent import EventAction, EventChannel
from dispatcher.logevent.messages import dispatch_successful
from dispatcher.message.payload import MessagePayload

CREATED = datetime(2024, 3, 1, 9, 30, tzinfo=UTC)


def _seed_parent(store, invitation_id, events=()):
    asyncio.run(
        store.insert_many(
            "EventLog",
            [
                {
                    "id": invitation_id,
                    "tags": ["Dispatcher"],
                    "events": list(events),
                    "log_message": None,
                    "created": CREATED,
                    "updated": CREATED,
                }
            ],
        )
    )


def _parent(store, invitation_id):
    return next(doc for doc in store.documents("EventLog") if doc["id"] == invitation_id)


class TestInvitationJourney:
    def test_events_are_appended_in_order(self, pipeline, store, queue_message):
        _seed_parent(store, "inv-1", events=[{"action": "Requested", "channel": "DispatchAPI"}])

        payload = MessagePayload(queue_message=queue_message, invitation_id="inv-1")
        payload.track(EventAction.DISPATCH_SUCCESSFUL, EventChannel.EMAIL, dispatch_successful("Email"))
        payload.track(EventAction.DISPATCH_SUCCESSFUL, EventChannel.SMS)
        asyncio.run(pipeline.flush_batch([payload]))

        parent = _parent(store, "inv-1")
        assert [(e["action"], e["channel"]) for e in parent["events"]] == [
            ("Requested", "DispatchAPI"),
            ("DispatchSuccessful", "Email"),
            ("DispatchSuccessful", "SMS"),
        ]
        assert parent["events"][1]["target_id"] == "jane@example.com"
        assert parent["events"][1]["log_message"]["level"] == "Information"
        assert parent["events"][2]["target_id"] == "+15551234567"
        assert parent["updated"] >= CREATED
        assert parent["created"] == CREATED

    def test_successive_batches_keep_appending(self, pipeline, store, queue_message):
        _seed_parent(store, "inv-2")

        for action in (EventAction.REQUESTED, EventAction.DISPATCH_SUCCESSFUL):
            payload = MessagePayload(queue_message=queue_message, invitation_id="inv-2")
            payload.track(action, EventChannel.EMAIL)
            asyncio.run(pipeline.flush_batch([payload]))

        assert [e["action"] for e in _parent(store, "inv-2")["events"]] == ["Requested", "DispatchSuccessful"]

    def test_each_payload_updates_its_own_invitation(self, pipeline, store, queue_message):
        _seed_parent(store, "inv-a")
        _seed_parent(store, "inv-b")

        first = MessagePayload(queue_message=queue_message, invitation_id="inv-a")
        first.track(EventAction.REJECTED, EventChannel.EMAIL)
        second = MessagePayload(queue_message=queue_message, invitation_id="inv-b")
        second.track(EventAction.THROTTLED, EventChannel.SMS)
        asyncio.run(pipeline.flush_batch([first, second]))

        assert [e["action"] for e in _parent(store, "inv-a")["events"]] == ["Rejected"]
        assert [e["action"] for e in _parent(store, "inv-b")["events"]] == ["Throttled"]
        assert len(store.calls_to("bulk_write")) == 1

    def test_unknown_invitation_is_not_created(self, pipeline, store, queue_message):
        payload = MessagePayload(queue_message=queue_message, invitation_id="inv-missing")
        payload.track(EventAction.SUPPRESSED, EventChannel.EMAIL)

        asyncio.run(pipeline.flush_batch([payload]))

        assert store.documents("EventLog") == []
