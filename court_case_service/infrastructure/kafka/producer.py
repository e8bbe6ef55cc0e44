# Kafka Producer for case lifecycle events
import asyncio
import logging
from typing import Optional

from confluent_kafka import Producer
from pydantic import BaseModel

from court_case_service.app.config import settings

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.1


class KafkaProducerService:
    """
    Thin async-friendly wrapper around confluent_kafka.Producer.

    Messages are enqueued synchronously; a background task polls the producer
    so delivery callbacks fire while the event loop keeps serving requests.
    """

    def __init__(self, bootstrap_servers: str, client_id: str = settings.SERVICE_NAME_API):
        self.producer_config = {
            'bootstrap.servers': bootstrap_servers,
            'client.id': client_id,
            'acks': 'all',
        }
        self.producer = Producer(self.producer_config)
        self._cancelled = False
        self._poll_loop_task: Optional[asyncio.Task] = None
        logger.info(f"KafkaProducer '{client_id}' initialized with servers: {bootstrap_servers}")

    def _delivery_report(self, err, msg):
        if err is not None:
            logger.error(f"Case event delivery failed: topic {msg.topic()} key {msg.key()!r}: {err}")
        else:
            logger.debug(f"Case event delivered: topic {msg.topic()} key {msg.key()!r} partition [{msg.partition()}] @ offset {msg.offset()}")

    async def _poll_loop(self):
        while not self._cancelled:
            self.producer.poll(0)
            await asyncio.sleep(POLL_INTERVAL_SECONDS)
        logger.info("KafkaProducer poll loop stopped.")

    def produce_message(self, topic: str, message: BaseModel, key: Optional[str] = None):
        """
        Serializes ``message`` as JSON and enqueues it on ``topic``.

        Raises BufferError when the local queue is full, and KafkaException for
        any other client-side rejection.
        """
        if self._cancelled:
            logger.warning(f"Producer is stopped, not producing message to {topic}.")
            return

        self.producer.produce(
            topic,
            value=message.model_dump_json().encode('utf-8'),
            key=key.encode('utf-8') if key else None,
            on_delivery=self._delivery_report,
        )
        logger.debug(f"Message enqueued to topic {topic} (key: {key}).")

    async def start_polling(self):
        if self._poll_loop_task is None or self._poll_loop_task.done():
            self._cancelled = False
            self._poll_loop_task = asyncio.create_task(self._poll_loop())
            logger.info("KafkaProducer polling started.")

    async def stop_polling(self):
        if self._poll_loop_task and not self._cancelled:
            self._cancelled = True
            try:
                await asyncio.wait_for(self._poll_loop_task, timeout=5.0)
            except asyncio.TimeoutError:
                logger.warning("KafkaProducer poll loop did not stop in time.")
            self._poll_loop_task = None

    def flush(self, timeout: float = 10.0) -> int:
        remaining = self.producer.flush(timeout)
        if remaining > 0:
            logger.warning(f"{remaining} case events still queued after flush timeout.")
        else:
            logger.info("All case events flushed.")
        return remaining


_kafka_producer_instance: Optional[KafkaProducerService] = None


def get_kafka_producer() -> KafkaProducerService:
    global _kafka_producer_instance
    if _kafka_producer_instance is None:
        if not settings.KAFKA_BOOTSTRAP_SERVERS:
            logger.error("KAFKA_BOOTSTRAP_SERVERS not configured; cannot publish case events.")
            raise ValueError("KAFKA_BOOTSTRAP_SERVERS not configured.")
        _kafka_producer_instance = KafkaProducerService(bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS)
    return _kafka_producer_instance


async def startup_kafka_producer():
    await get_kafka_producer().start_polling()


async def shutdown_kafka_producer():
    if _kafka_producer_instance is None:
        logger.info("Kafka producer was not initialized, skipping shutdown.")
        return
    logger.info("Flushing Kafka producer before shutdown...")
    _kafka_producer_instance.flush()
    await _kafka_producer_instance.stop_polling()
    logger.info("Kafka producer shutdown complete.")
