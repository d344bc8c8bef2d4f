#!/usr/bin/env python3
"""Seed an in-memory ledger with a sample portfolio and export it.

Writes clients, sales, leads and a period report as JSON files and prints
the dashboard KPIs. With ``--kafka`` every store change is also published to
Kafka.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from credit_ledger.config import LedgerConfig
from credit_ledger.logging import setup_logging
from credit_ledger.models import ReportPeriod
from credit_ledger.scenarios import SamplePortfolioScenario
from credit_ledger.session import LedgerSession
from credit_ledger.sinks import JsonFileSink, KafkaChangeSink
from credit_ledger.store import InMemoryRecordStore, StaticAuthProvider


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a sample credit ledger")
    parser.add_argument("--clients", type=int, default=20, help="Number of clients")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--user", default="demo-user", help="Owning user id")
    parser.add_argument(
        "--period",
        choices=[p.value.lower() for p in ReportPeriod],
        default="monthly",
        help="Period of the exported financial report",
    )
    parser.add_argument("--output-dir", type=Path, default=None, help="Export directory")
    parser.add_argument("--kafka", action="store_true", help="Publish changes to Kafka")
    return parser.parse_args()


async def run(args: argparse.Namespace, config: LedgerConfig) -> None:
    store = InMemoryRecordStore()
    kafka_sink = None
    if args.kafka:
        kafka_sink = KafkaChangeSink(config.kafka)
        kafka_sink.attach(store)

    session = LedgerSession.open(store, StaticAuthProvider(args.user), config=config)
    scenario = SamplePortfolioScenario(num_clients=args.clients, seed=args.seed)
    summary = await scenario.run(session)

    output_dir = args.output_dir or config.output.json_output_dir
    sink = JsonFileSink(output_dir, pretty=config.output.pretty_json)
    sink.export_snapshot(session.snapshot)
    period = ReportPeriod(args.period.upper())
    sink.write_batch(f"report_{period.value.lower()}", session.portfolio.period_report(period))
    sink.close()

    dashboard = session.portfolio.dashboard()
    totals = session.portfolio.financial_totals(period)

    print("=" * 60)
    print("Sample Portfolio")
    print("=" * 60)
    for name, count in summary.items():
        print(f"{name + ':':18}{count}")
    print(f"{'receivable:':18}{dashboard.total_receivable}")
    print(f"{'collected:':18}{dashboard.total_collected}")
    print(f"{'collection rate:':18}{dashboard.collection_rate}%")
    print(f"{'clients in arrears:':18}{len(dashboard.overdue)}")
    print(f"{'profit:':18}{totals.profit} (margin {totals.margin}%)")
    print(f"\nAll files saved to: {output_dir}")

    session.close()
    if kafka_sink is not None:
        kafka_sink.close()


def main() -> None:
    args = parse_args()
    config = LedgerConfig.from_env()
    if args.seed is not None:
        config.seed = args.seed
    setup_logging(config.log_level)
    asyncio.run(run(args, config))


if __name__ == "__main__":
    main()
