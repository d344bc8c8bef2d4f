"""JSON file sink for exporting ledger data and reports."""

import json
import logging
from pathlib import Path
from typing import Any

from credit_ledger.exceptions import SinkError
from credit_ledger.serialization import to_dict
from credit_ledger.store.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Output records to JSON files, one file per entity type."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> Path:
        """Write a batch of records to ``<entity_type>.json``."""
        file_path = self.output_dir / f"{entity_type}.json"
        data = [to_dict(record) for record in records]

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False, default=str)
                else:
                    json.dump(data, f, ensure_ascii=False, default=str)
        except OSError as exc:
            raise SinkError(f"Cannot write {file_path}: {exc}") from exc

        self._counts[entity_type] = len(records)
        return file_path

    def export_snapshot(self, snapshot: LedgerSnapshot) -> None:
        """Write clients, sales and leads."""
        self.write_batch("clients", list(snapshot.clients.values()))
        self.write_batch("sales", list(snapshot.sales.values()))
        self.write_batch("leads", list(snapshot.leads.values()))

    def close(self) -> None:
        """Log a summary of written files."""
        logger.info("JSON files written to: %s", self.output_dir)
        for entity_type, count in self._counts.items():
            logger.info("  %s: %d records", entity_type, count)
