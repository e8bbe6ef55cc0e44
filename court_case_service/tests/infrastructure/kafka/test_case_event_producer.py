# Unit Tests for the Kafka producer and the case event publisher
import asyncio
import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from confluent_kafka import KafkaError, KafkaException

from court_case_service.app import config as app_config
from court_case_service.app.models.case_db import CaseHistoryEntryDB
from court_case_service.app.service.models import HistoryAction
from court_case_service.infrastructure.kafka import case_events
from court_case_service.infrastructure.kafka import producer as kafka_producer_module
from court_case_service.infrastructure.kafka.case_events import CaseEventPublisher
from court_case_service.infrastructure.kafka.producer import KafkaProducerService
from court_case_service.infrastructure.kafka.schemas import CaseEventMessage

NOW = datetime.datetime(2025, 3, 14, 9, 30, tzinfo=datetime.timezone.utc)


@pytest.fixture(autouse=True)
def reset_producer_singleton():
    original_servers = app_config.settings.KAFKA_BOOTSTRAP_SERVERS
    original_enabled = app_config.settings.CASE_EVENTS_ENABLED
    kafka_producer_module._kafka_producer_instance = None
    yield
    app_config.settings.KAFKA_BOOTSTRAP_SERVERS = original_servers
    app_config.settings.CASE_EVENTS_ENABLED = original_enabled
    kafka_producer_module._kafka_producer_instance = None


@pytest.fixture
def registered_case(case_factory):
    case = case_factory(case_number="DC/2025/0001")
    entry = case.add_history_entry(HistoryAction.CASE_REGISTERED, "reg-1", "Case registered by Meera Iyer", NOW)
    return case, entry


# --- KafkaProducerService ---

@patch('court_case_service.infrastructure.kafka.producer.Producer')
def test_get_kafka_producer_is_a_singleton(MockConfluentProducer):
    app_config.settings.KAFKA_BOOTSTRAP_SERVERS = "fake_server:9092"

    first = kafka_producer_module.get_kafka_producer()
    second = kafka_producer_module.get_kafka_producer()

    assert first is second
    MockConfluentProducer.assert_called_once()
    config = MockConfluentProducer.call_args.args[0]
    assert config['bootstrap.servers'] == "fake_server:9092"
    assert config['acks'] == 'all'


def test_get_kafka_producer_requires_servers():
    app_config.settings.KAFKA_BOOTSTRAP_SERVERS = ""

    with pytest.raises(ValueError, match="KAFKA_BOOTSTRAP_SERVERS not configured"):
        kafka_producer_module.get_kafka_producer()


@patch('court_case_service.infrastructure.kafka.producer.Producer')
def test_produce_message_serializes_json(MockConfluentProducer, registered_case):
    case, entry = registered_case
    service = KafkaProducerService(bootstrap_servers="fake_server:9092")
    message = CaseEventMessage(
        case_id=case.id, action=entry.action, action_by=entry.action_by, action_date=entry.action_date,
        description=entry.description, status=case.status, case_version=1,
    )

    service.produce_message("court_case_events", message, key=case.id)

    MockConfluentProducer.return_value.produce.assert_called_once_with(
        "court_case_events",
        value=message.model_dump_json().encode('utf-8'),
        key=case.id.encode('utf-8'),
        on_delivery=service._delivery_report,
    )


@patch('court_case_service.infrastructure.kafka.producer.Producer')
def test_produce_message_propagates_buffer_error(MockConfluentProducer, registered_case):
    MockConfluentProducer.return_value.produce.side_effect = BufferError("Local: Queue full")
    service = KafkaProducerService(bootstrap_servers="fake_server:9092")

    with pytest.raises(BufferError):
        service.produce_message("court_case_events", CaseEventMessage(
            case_id="c1", action="CASE_REGISTERED", action_by="reg-1", action_date=NOW,
            description="x", status="registered", case_version=1,
        ))


@patch('court_case_service.infrastructure.kafka.producer.Producer')
def test_delivery_report_logs_failures(MockConfluentProducer):
    service = KafkaProducerService(bootstrap_servers="fake_server:9092")
    msg = MagicMock()
    msg.topic.return_value = "court_case_events"
    msg.key.return_value = b"case-1"

    with patch.object(kafka_producer_module.logger, 'error') as mock_logger_error:
        service._delivery_report(KafkaError(KafkaError._MSG_TIMED_OUT), msg)

    mock_logger_error.assert_called_once()
    assert "court_case_events" in mock_logger_error.call_args.args[0]


@pytest.mark.asyncio
@patch('court_case_service.infrastructure.kafka.producer.Producer')
async def test_polling_starts_and_stops(MockConfluentProducer):
    service = KafkaProducerService(bootstrap_servers="fake_server:9092")

    await service.start_polling()
    assert service._poll_loop_task is not None
    await asyncio.sleep(kafka_producer_module.POLL_INTERVAL_SECONDS * 2)
    await service.stop_polling()

    assert service._poll_loop_task is None
    MockConfluentProducer.return_value.poll.assert_called()


@pytest.mark.asyncio
async def test_shutdown_without_producer_is_a_no_op():
    await kafka_producer_module.shutdown_kafka_producer()


@pytest.mark.asyncio
async def test_shutdown_flushes_then_stops():
    instance = MagicMock(spec=KafkaProducerService)
    instance.stop_polling = AsyncMock()
    kafka_producer_module._kafka_producer_instance = instance

    await kafka_producer_module.shutdown_kafka_producer()

    instance.flush.assert_called_once()
    instance.stop_polling.assert_awaited_once()


# --- CaseEventPublisher ---

def test_publish_sends_case_event_keyed_by_case_id(registered_case):
    case, entry = registered_case
    producer = MagicMock()
    publisher = CaseEventPublisher(producer=producer, topic="court_case_events")

    message = publisher.publish(case, entry)

    assert message.case_number == "DC/2025/0001"
    assert message.action == "CASE_REGISTERED"
    assert message.status == "registered"
    assert message.case_version == case.version
    producer.produce_message.assert_called_once_with(topic="court_case_events", message=message, key=case.id)


@pytest.mark.parametrize("error", [BufferError("Local: Queue full"), KafkaException("broker down")])
def test_publish_failure_is_logged_not_raised(registered_case, error):
    case, entry = registered_case
    producer = MagicMock()
    producer.produce_message.side_effect = error
    publisher = CaseEventPublisher(producer=producer, topic="court_case_events")

    with patch.object(case_events.logger, 'error') as mock_logger_error:
        assert publisher.publish(case, entry) is None

    mock_logger_error.assert_called_once()


def test_case_event_publisher_disabled_by_settings():
    app_config.settings.CASE_EVENTS_ENABLED = False

    assert case_events.get_case_event_publisher() is None


@patch('court_case_service.infrastructure.kafka.producer.Producer')
def test_case_event_publisher_uses_configured_topic(MockConfluentProducer):
    app_config.settings.CASE_EVENTS_ENABLED = True
    app_config.settings.KAFKA_BOOTSTRAP_SERVERS = "fake_server:9092"

    publisher = case_events.get_case_event_publisher()

    assert publisher.topic == app_config.settings.CASE_EVENTS_KAFKA_TOPIC
    assert publisher.producer is kafka_producer_module.get_kafka_producer()
