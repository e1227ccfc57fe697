#!/usr/bin/env python3
"""
Store maintenance tool.

Runs the operations that sit outside the normal request flow:

- ``reset``: truncate patients, case histories and examination reports
- ``repair-orphans``: remove child records whose patient no longer exists
- ``stats``: print record counts per collection

Reads the database location from MEDICAL_DOC_DATABASE_URL.

Usage:
  medical-doc-maintenance reset --yes
  medical-doc-maintenance repair-orphans [--json]
  medical-doc-maintenance stats [--json]
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from medical_doc.db.database import open_store
from medical_doc.db.errors import RecordStoreError
from medical_doc.db.store import PRIMARY_COLLECTIONS, RecordStore
from medical_doc.services import RecordIntegrityService, reset_all_records

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Medical doc store maintenance")
    sub = parser.add_subparsers(dest="command", required=True)
    reset = sub.add_parser("reset", help="Delete all patients, case histories and reports")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")
    for name in ("repair-orphans", "stats"):
        p = sub.add_parser(name)
        p.add_argument("--json", action="store_true", help="Print JSON output")
    return parser.parse_args(argv)


async def _stats(store: RecordStore) -> dict:
    return {collection: len(await store.read_all(collection)) for collection in PRIMARY_COLLECTIONS}


async def run(args: argparse.Namespace, store: RecordStore | None = None) -> int:
    owned = store is None
    try:
        store = store or await open_store()
        await store.open()
        if args.command == "reset":
            if not args.yes:
                print("Refusing to reset without --yes.", file=sys.stderr)
                return 2
            await reset_all_records(store)
            print("All record collections cleared.")
        elif args.command == "repair-orphans":
            result = await RecordIntegrityService(store).repair_orphans()
            if args.json:
                print(json.dumps(result.model_dump()))
            else:
                print(f"Removed {result.total_removed} orphaned records.")
        elif args.command == "stats":
            counts = await _stats(store)
            if args.json:
                print(json.dumps(counts))
            else:
                for collection, count in counts.items():
                    print(f"{collection}: {count}")
        return 0
    except RecordStoreError as exc:
        logger.error("maintenance_failed: command=%s error=%s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        if owned and store is not None:
            await store.close()


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
