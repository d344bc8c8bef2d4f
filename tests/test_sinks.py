"""Tests for JSON and Kafka sinks."""

import json
import tempfile
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock, patch

import pytest

from credit_ledger.config import KafkaConfig
from credit_ledger.exceptions import SinkError
from credit_ledger.models import Client, PeriodReportRow, SaleTerms
from credit_ledger.session import LedgerSession
from credit_ledger.sinks import JsonFileSink, KafkaChangeSink, ProducerStats
from credit_ledger.store import InMemoryRecordStore


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_init_creates_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            output_dir = Path(tmpdir) / "nested" / "output"

            JsonFileSink(output_dir)

            assert output_dir.exists()

    def test_write_batch(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            sink = JsonFileSink(tmpdir)
            rows = [
                PeriodReportRow("2024-01", "Jan 24", date(2024, 1, 1), income=Decimal("333")),
            ]

            file_path = sink.write_batch("report_monthly", rows)

            assert file_path == Path(tmpdir) / "report_monthly.json"
            data = json.loads(file_path.read_text(encoding="utf-8"))
            assert data == [
                {
                    "period_key": "2024-01",
                    "label": "Jan 24",
                    "period_start": "2024-01-01",
                    "income": "333",
                    "expense": "0",
                    "sales_volume": "0",
                }
            ]
            assert sink._counts["report_monthly"] == 1

    def test_write_batch_pretty(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            sink = JsonFileSink(tmpdir, pretty=True)

            file_path = sink.write_batch("clients", [{"name": "Ña"}])

            content = file_path.read_text(encoding="utf-8")
            assert "\n  " in content
            assert "Ña" in content

    def test_write_batch_failure(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            sink = JsonFileSink(tmpdir)
            (Path(tmpdir) / "clients.json").mkdir()

            with pytest.raises(SinkError):
                sink.write_batch("clients", [{"name": "Ana"}])

    @pytest.mark.asyncio
    async def test_export_snapshot(
        self,
        session: LedgerSession,
        client: Client,
        make_terms: Callable[..., SaleTerms],
    ) -> None:
        await session.sales.create_sale(make_terms(client.client_id))
        await session.leads.add_lead("Quiere un TV")

        with tempfile.TemporaryDirectory() as tmpdir:
            sink = JsonFileSink(tmpdir)
            sink.export_snapshot(session.snapshot)
            sink.close()

            sales = json.loads((Path(tmpdir) / "sales.json").read_text(encoding="utf-8"))
            assert len(sales) == 1
            assert sales[0]["client_id"] == client.client_id
            assert len(sales[0]["installments"]) == 3
            assert sink._counts == {"clients": 1, "sales": 1, "leads": 1}


class TestProducerStats:
    """Tests for ProducerStats."""

    def test_success_rate(self) -> None:
        assert ProducerStats().success_rate == 0.0
        assert ProducerStats(sent=4, delivered=3, failed=1).success_rate == 0.75


class TestKafkaChangeSink:
    """Tests for KafkaChangeSink."""

    @patch("credit_ledger.sinks.kafka.Producer")
    def test_init_with_string(self, mock_producer_class: MagicMock) -> None:
        sink = KafkaChangeSink("kafka:9092")

        assert sink.config.bootstrap_servers == "kafka:9092"
        mock_producer_class.assert_called_once()
        assert mock_producer_class.call_args[0][0]["bootstrap.servers"] == "kafka:9092"

    @patch("credit_ledger.sinks.kafka.Producer")
    def test_send(self, mock_producer_class: MagicMock) -> None:
        mock_producer = MagicMock()
        mock_producer_class.return_value = mock_producer
        sink = KafkaChangeSink(KafkaConfig())

        sink.send("ledger.sales", {"amount": Decimal("333"), "at": datetime(2024, 1, 10)}, key="s-1")

        call_kwargs = mock_producer.produce.call_args[1]
        assert call_kwargs["topic"] == "ledger.sales"
        assert call_kwargs["key"] == b"s-1"
        assert json.loads(call_kwargs["value"]) == {"amount": "333", "at": "2024-01-10T00:00:00"}
        assert sink.stats.sent == 1
        mock_producer.poll.assert_called_once_with(0)

    @patch("credit_ledger.sinks.kafka.Producer")
    def test_send_queue_full(self, mock_producer_class: MagicMock) -> None:
        mock_producer = MagicMock()
        mock_producer.produce.side_effect = BufferError("queue full")
        mock_producer_class.return_value = mock_producer
        sink = KafkaChangeSink(KafkaConfig())

        with pytest.raises(SinkError):
            sink.send("ledger.sales", {"amount": "1"})

        assert sink.stats.sent == 0

    @pytest.mark.asyncio
    async def test_attach_publishes_store_changes(self) -> None:
        mock_producer = MagicMock()
        mock_producer.flush.return_value = 0
        store = InMemoryRecordStore(id_factory=lambda: "rec-001")
        with patch("credit_ledger.sinks.kafka.Producer", return_value=mock_producer):
            sink = KafkaChangeSink(KafkaConfig(topic_prefix="test.ledger"))

        sink.attach(store)
        await store.create("users/u1/clients", {"name": "Ana"})
        sink.close()
        await store.delete("users/u1/clients", "rec-001")

        assert mock_producer.produce.call_count == 1
        call_kwargs = mock_producer.produce.call_args[1]
        assert call_kwargs["topic"] == "test.ledger.clients"
        assert call_kwargs["key"] == b"rec-001"
        event = json.loads(call_kwargs["value"])
        assert event["event_type"] == "clients.created"
        assert event["kind"] == "created"
        assert event["data"] == {"name": "Ana"}

    @patch("credit_ledger.sinks.kafka.Producer")
    def test_write_batch(self, mock_producer_class: MagicMock) -> None:
        mock_producer = MagicMock()
        mock_producer.flush.return_value = 0
        mock_producer_class.return_value = mock_producer
        sink = KafkaChangeSink(KafkaConfig())

        sink.write_batch("ledger.report", [{"n": i} for i in range(5)])

        assert mock_producer.produce.call_count == 5
        mock_producer.flush.assert_called_once_with(30.0)

    @patch("credit_ledger.sinks.kafka.Producer")
    def test_delivery_callback(self, mock_producer_class: MagicMock) -> None:
        sink = KafkaChangeSink(KafkaConfig())
        msg = MagicMock()
        msg.topic.return_value = "ledger.sales"
        msg.partition.return_value = 0
        msg.offset.return_value = 7

        sink._delivery_callback(None, msg)
        sink._delivery_callback("broker down", msg)

        assert sink.stats.delivered == 1
        assert sink.stats.failed == 1
