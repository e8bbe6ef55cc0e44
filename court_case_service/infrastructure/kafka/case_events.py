# Publishing committed case history entries to Kafka
import logging
from typing import Optional

from opentelemetry.trace import SpanKind, Status, StatusCode

from court_case_service.app.config import settings
from court_case_service.app.models.case_db import CaseDB, CaseHistoryEntryDB
from court_case_service.app.observability import tracer
from court_case_service.infrastructure.kafka.producer import KafkaProducerService, get_kafka_producer
from court_case_service.infrastructure.kafka.schemas import CaseEventMessage

logger = logging.getLogger(__name__)


class CaseEventPublisher:
    """
    Publishes one CaseEventMessage per committed lifecycle operation.

    Called only after the case write is confirmed. Delivery belongs to the
    notification service, so a publish failure is logged and never undoes or
    fails the committed operation.
    """

    def __init__(self, producer: KafkaProducerService, topic: str):
        self.producer = producer
        self.topic = topic

    def publish(self, case: CaseDB, entry: CaseHistoryEntryDB) -> Optional[CaseEventMessage]:
        message = CaseEventMessage(
            case_id=case.id,
            case_number=case.case_number,
            action=entry.action,
            action_by=entry.action_by,
            action_date=entry.action_date,
            description=entry.description,
            status=case.status,
            case_version=case.version,
        )
        with tracer.start_as_current_span("case_event.publish", kind=SpanKind.PRODUCER) as span:
            span.set_attribute("messaging.destination", self.topic)
            span.set_attribute("case.id", case.id)
            span.set_attribute("case.action", entry.action)
            try:
                self.producer.produce_message(topic=self.topic, message=message, key=case.id)
            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(f"Failed to publish {entry.action} event for case {case.id} to {self.topic}: {e}", exc_info=True)
                return None
        logger.info(f"Published {entry.action} event {message.event_id} for case {case.id} to {self.topic}.")
        return message


def get_case_event_publisher() -> Optional[CaseEventPublisher]:
    if not settings.CASE_EVENTS_ENABLED:
        return None
    return CaseEventPublisher(producer=get_kafka_producer(), topic=settings.CASE_EVENTS_KAFKA_TOPIC)
