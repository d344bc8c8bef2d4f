"""Output sinks for ledger change events and exports."""

from credit_ledger.sinks.json_file import JsonFileSink
from credit_ledger.sinks.kafka import KafkaChangeSink, ProducerStats

__all__ = ["JsonFileSink", "KafkaChangeSink", "ProducerStats"]
