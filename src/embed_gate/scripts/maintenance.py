"""Maintenance commands for the configured message store.

Usable from cron to run the retention sweep on a timer instead of (or in
addition to) the per-request sweep.
"""
from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from embed_gate.core.logging import configure_logging
from embed_gate.core.policy import load_gate_policy
from embed_gate.core.settings import settings
from embed_gate.db.session import SessionLocal, create_tables
from embed_gate.repositories.base import StoreError
from embed_gate.repositories.sql_repo import SqlGateRepository
from embed_gate.services.bans import BanRegistry
from embed_gate.services.retention import RetentionManager


def run_sweep() -> int:
    """Run one retention sweep and return the number of deleted rows."""
    policy = load_gate_policy()
    with SessionLocal() as db:
        manager = RetentionManager(SqlGateRepository(db), max_age=policy.retention)
        return manager.sweep_expired()


def unban(address: str) -> bool:
    """Remove the ban row for an address."""
    with SessionLocal() as db:
        return SqlGateRepository(db).delete_ban(address)


def describe(address: str) -> dict[str, object]:
    """Return the ban state and stored message count for an address."""
    with SessionLocal() as db:
        repository = SqlGateRepository(db)
        registry = BanRegistry(repository)
        ban = registry.get_ban(address)
        return {
            "address": address,
            "banned": registry.is_active(ban),
            "banned_until": ban.banned_until.isoformat() if ban else None,
            "messages": repository.count_messages(address),
        }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Embed Gate store maintenance")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create the messages and bans tables.")
    commands.add_parser("sweep", help="Delete messages older than the retention period.")

    unban_parser = commands.add_parser("unban", help="Lift the ban on an address.")
    unban_parser.add_argument("address")

    status_parser = commands.add_parser("status", help="Show ban state for an address.")
    status_parser.add_argument("address")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level)

    try:
        if args.command == "init-db":
            create_tables()
            print("[maintenance] tables created")
        elif args.command == "sweep":
            print(f"[maintenance] swept {run_sweep()} expired messages")
        elif args.command == "unban":
            lifted = unban(args.address)
            print(f"[maintenance] {'lifted ban on' if lifted else 'no ban for'} {args.address}")
        elif args.command == "status":
            for key, value in describe(args.address).items():
                print(f"{key}: {value}")
    except StoreError as exc:
        print(f"[maintenance] ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
