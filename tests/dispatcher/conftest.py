import pytest
from dispatcher.bulk.store import BulkPayloadStore
from dispatcher.config import DispatcherSettings
from dispatcher.logevent.flush import LogFlushPipeline
from dispatcher.message.queue_message import QueueMessage
from dispatcher.store.memory import InMemoryDocumentStore
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def dispatcher_bed():
    from dispatcher.domain import dispatcher

    bed = DomainFixture(dispatcher)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(dispatcher_bed):
    with dispatcher_bed.domain_context():
        yield


@pytest.fixture()
def settings():
    return DispatcherSettings(
        log_level=4,
        bulk_vendor_name="Acme",
        bulk_read_size=2,
        survey_base_domain="survey.example.com",
        unsubscribe_base_url="https://example.com/unsubscribe/",
        max_self_log_attempts=3,
    )


@pytest.fixture()
def store():
    return InMemoryDocumentStore()


@pytest.fixture()
def pipeline(store, settings):
    return LogFlushPipeline(store, settings)


@pytest.fixture()
def bulk_store(store, settings, pipeline):
    return BulkPayloadStore(store, settings, pipeline)


@pytest.fixture()
def queue_message():
    return QueueMessage(
        batch_id="batch-001",
        dispatch_id="dispatch-001",
        token_id="TKN-001",
        common_identifier="hash-of-recipient",
        user="ops@example.com",
        template_id="tmpl-42",
        additional_url_parameter="&lang=en",
        subject="Hello $Q1*|there|*",
        html_body="<p>Dear $Q1*|Customer|*</p>",
        text_body="Dear $Q1*|Customer|*",
        email_id="jane@example.com",
        mobile_number="+15551234567",
        mapped_value={"Q1": "hashed-name", "Q2": "hashed-city"},
    )
