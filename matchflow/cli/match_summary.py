"""Print the match funnel and time-to-confirmation statistics.

Purpose:
  - Summarize all matches, or one user's matches, for operators.
Example:
  - python -m matchflow.cli.match_summary --db matchflow.db --user-id coach-1 --role coach
"""

from __future__ import annotations

import argparse
from dataclasses import replace

from matchflow.app_api.dashboard import summarize_matches
from matchflow.app_api.dto import parse_party
from matchflow.app_api.factories import build_match_store
from matchflow.config import configure_logging, load_settings
from matchflow.core.domain.enums import Stage, stage_label


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize match funnel and confirmation timing")
    parser.add_argument("--db", help="Match database path (overrides MATCHFLOW_DB_PATH)")
    parser.add_argument("--user-id", help="Restrict to matches of this user")
    parser.add_argument("--role", default="coach", help="Role of --user-id: coach, player or parent")
    parser.add_argument("--env-file", help="Optional .env file to load")
    return parser.parse_args(argv)


def _fmt_hours(value: float | None) -> str:
    return "-" if value is None else f"{value:.1f}h"


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.env_file)
    if args.db:
        settings = replace(settings, db_path=args.db)
    configure_logging(settings.log_level)
    store = build_match_store(settings)

    if args.user_id:
        party = parse_party(args.role)
        if party is None:
            raise SystemExit(f"unknown role: {args.role}")
        matches = store.list_for_party(args.user_id, party)
    else:
        matches = store.list_all()

    summary = summarize_matches(matches)
    print(f"matches={summary.total} open={summary.open_count}")
    for stage in Stage:
        count = summary.stage_counts[stage.value]
        if count:
            print(f"  {stage_label(stage):<20} {count}")
    print(
        f"confirmed={summary.confirmed_count} declined={summary.declined_count} "
        f"completed={summary.completed_count} rate={summary.confirmation_rate:.2%}"
    )
    print(
        f"time_to_confirm median={_fmt_hours(summary.hours_to_confirm_median)} "
        f"p90={_fmt_hours(summary.hours_to_confirm_p90)}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
