"""Serve the match lifecycle HTTP API.

Purpose:
  - Migrate the database and expose the engine over HTTP.
Inputs:
  - CLI args / MATCHFLOW_* environment for database path, host and port.
Example:
  - python -m matchflow.cli.serve_api --db matchflow.db --port 8000
"""

from __future__ import annotations

import argparse
from dataclasses import replace

import uvicorn

from matchflow.api.http import create_app
from matchflow.app_api.factories import build_match_store
from matchflow.config import configure_logging, load_settings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the match lifecycle API")
    parser.add_argument("--db", help="Match database path (overrides MATCHFLOW_DB_PATH)")
    parser.add_argument("--host", help="Bind host (overrides MATCHFLOW_API_HOST)")
    parser.add_argument("--port", type=int, help="Bind port (overrides MATCHFLOW_API_PORT)")
    parser.add_argument("--env-file", help="Optional .env file to load")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = load_settings(args.env_file)
    if args.db:
        settings = replace(settings, db_path=args.db)
    if args.host:
        settings = replace(settings, api_host=args.host)
    if args.port:
        settings = replace(settings, api_port=args.port)
    settings.validate()
    configure_logging(settings.log_level)

    store = build_match_store(settings)
    uvicorn.run(create_app(store), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
