"""Kafka sink publishing ledger change events."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from confluent_kafka import Producer

from credit_ledger.config import KafkaConfig
from credit_ledger.exceptions import SinkError
from credit_ledger.models import ChangeEvent
from credit_ledger.serialization import to_dict
from credit_ledger.store.base import RecordStore, Unsubscribe

logger = logging.getLogger(__name__)


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0


class KafkaChangeSink:
    """Forward store change events to Kafka topics.

    Each collection maps to ``<topic_prefix>.<collection>`` (for example
    ``ledger.sales``); messages are keyed by record id so every change of a
    record lands on the same partition, in order.
    """

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()
        self._detach: Unsubscribe | None = None

    def attach(self, store: RecordStore) -> None:
        """Publish every change of ``store`` from now on."""
        self.detach()
        self._detach = store.add_listener(self.publish)

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def publish(self, event: ChangeEvent) -> None:
        """Send one change event."""
        self.send(self.config.topic_for(event.collection), event, key=event.subject)

    def send(self, topic: str, record: Any, key: str | None = None) -> None:
        """Send a single record to a Kafka topic as JSON."""
        value = json.dumps(to_dict(record), ensure_ascii=False, default=str).encode("utf-8")
        try:
            self.producer.produce(
                topic=topic,
                key=key.encode("utf-8") if key else None,
                value=value,
                callback=self._delivery_callback,
            )
        except BufferError as exc:
            raise SinkError(f"Kafka producer queue full while sending to {topic}") from exc
        self.stats.sent += 1
        self.producer.poll(0)

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Write a batch of records to a Kafka topic."""
        logger.info("Writing batch to %s: %d records", topic, len(records))

        for record in records:
            self.send(topic, record)

        self.flush()
        logger.info("Batch complete: sent=%d, delivered=%d, failed=%d",
                    self.stats.sent, self.stats.delivered, self.stats.failed)

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        remaining = self.producer.flush(timeout)
        if remaining:
            logger.warning("%d message(s) still queued after flush", remaining)

    def close(self) -> None:
        """Detach, flush and report."""
        self.detach()
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
