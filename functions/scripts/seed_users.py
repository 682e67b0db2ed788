"""
Write user profiles into the users table read by the family dashboard.

Profiles come from a JSON file (a list of objects, each with a userId) or from
a single --user-id/--name/--role triple.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pings.config import get_settings
from pings.db import DocumentStore
from pings.dependencies import build_document_store
from pings.records import now_iso

logger = logging.getLogger(__name__)


def load_profiles(args: argparse.Namespace) -> list[dict]:
    if args.file:
        profiles = json.loads(Path(args.file).read_text(encoding="utf-8"))
        if not isinstance(profiles, list):
            raise ValueError("Profile file must contain a JSON list")
        return profiles
    if not args.user_id:
        raise ValueError("Either --file or --user-id is required")
    profile = {"userId": args.user_id}
    if args.name:
        profile["name"] = args.name
    if args.role:
        profile["role"] = args.role
    return [profile]


def seed_users(store: DocumentStore, table: str, profiles: list[dict]) -> int:
    written = 0
    for profile in profiles:
        if not profile.get("userId"):
            logger.warning("Skipping profile without userId: %s", profile)
            continue
        item = {"createdAt": now_iso(), **profile}
        store.put(table, item)
        logger.info("Seeded user %s", item["userId"])
        written += 1
    return written


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed Pings user profiles")
    parser.add_argument("-f", "--file", type=str, default=None, help="JSON list of profiles")
    parser.add_argument("--user-id", type=str, default=None)
    parser.add_argument("--name", type=str, default=None)
    parser.add_argument(
        "--role", type=str, choices=("senior", "caregiver", "family"), default=None
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    settings = get_settings()
    store = build_document_store(settings)
    written = seed_users(store, settings.users_table, load_profiles(args))
    logger.info("Seeded %d user profiles into %s", written, settings.users_table)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
