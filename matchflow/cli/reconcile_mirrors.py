"""Rewrite conversation stage mirrors that drifted from their match.

Example:
  - python -m matchflow.cli.reconcile_mirrors --db matchflow.db --dry-run
"""

from __future__ import annotations

import argparse

from matchflow.app_api.reconcile import reconcile_conversation_mirrors
from matchflow.config import configure_logging, load_settings
from matchflow.infra.sqlite.db import get_connection
from matchflow.infra.sqlite.migrator import apply_migrations


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile conversation stage mirrors")
    parser.add_argument("--db", help="Match database path (overrides MATCHFLOW_DB_PATH)")
    parser.add_argument("--limit", type=int, help="Max mismatches to process")
    parser.add_argument("--dry-run", action="store_true", help="Report drift without writing")
    parser.add_argument("--env-file", help="Optional .env file to load")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.env_file)
    db_path = args.db or settings.db_path
    configure_logging(settings.log_level)

    conn = get_connection(db_path, timeout=settings.busy_timeout)
    try:
        apply_migrations(conn)
    finally:
        conn.close()

    report = reconcile_conversation_mirrors(
        db_path,
        limit=args.limit,
        dry_run=args.dry_run,
        timeout=settings.busy_timeout,
    )
    mode = "dry-run" if report.dry_run else "applied"
    print(f"mirrors checked={report.checked} repaired={report.repaired} mode={mode}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
