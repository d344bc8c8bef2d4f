"""Configuration management for credit-ledger."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from credit_ledger.exceptions import ConfigurationError

DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"


@dataclass
class KafkaConfig:
    """Kafka producer configuration for change-event publishing."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "ledger"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }

    def topic_for(self, collection: str) -> str:
        """Topic name for a collection path or bare collection name."""
        name = collection.rsplit("/", 1)[-1]
        return f"{self.topic_prefix}.{name}"


@dataclass
class OutputConfig:
    """Output configuration for exports."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class LedgerConfig:
    """Main configuration for credit-ledger."""

    timezone: str = DEFAULT_TIMEZONE
    amount_quantum: Decimal = Decimal("1")  # installment unit amounts floor to this
    log_level: str = "INFO"
    locale: str = "es_AR"
    seed: int | None = None
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def __post_init__(self) -> None:
        self.amount_quantum = Decimal(self.amount_quantum)
        if self.amount_quantum <= 0:
            raise ConfigurationError(f"amount_quantum must be positive, got {self.amount_quantum}")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown timezone: {self.timezone}") from exc

    @property
    def tzinfo(self) -> ZoneInfo:
        """Reference timezone as a tzinfo."""
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        quantum_str = os.getenv("LEDGER_AMOUNT_QUANTUM", "1")
        try:
            quantum = Decimal(quantum_str)
        except InvalidOperation as exc:
            raise ConfigurationError(f"Invalid LEDGER_AMOUNT_QUANTUM: {quantum_str!r}") from exc

        seed_str = os.getenv("SEED")
        try:
            seed = int(seed_str) if seed_str else None
        except ValueError as exc:
            raise ConfigurationError(f"Invalid SEED: {seed_str!r}") from exc

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("LEDGER_TOPIC_PREFIX", "ledger"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            timezone=os.getenv("LEDGER_TIMEZONE", DEFAULT_TIMEZONE),
            amount_quantum=quantum,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            locale=os.getenv("LEDGER_LOCALE", "es_AR"),
            seed=seed,
            kafka=kafka,
            output=output,
        )
