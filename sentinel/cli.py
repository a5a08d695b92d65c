"""Command-line interface for the report pipeline and the add-in server.

Usage notes:
- `report` runs the full pipeline against a saved .eml file, as if the user had
  clicked the matching button with that message open.
- `serve` starts the asset/config server (HTTPS when certs/ holds key.pem and cert.pem).
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Optional

from sentinel.addin.pipeline import ReportPipeline
from sentinel.core.config import AddinConfig, settings
from sentinel.core.remote_config import fetch_remote_config
from sentinel.core.schemas import ReportRequest, ReportType, UserIdentity
from sentinel.host.eml_mailbox import EmlMailbox


async def _run_report(args) -> int:
    config = AddinConfig.from_settings(settings)
    if args.config_url:
        config = await fetch_remote_config(args.config_url, defaults=config)

    with open(args.eml, "rb") as handle:
        content = handle.read()

    user = UserIdentity(display_name=args.reporter_name, email=args.reporter_email)
    mailbox = EmlMailbox.from_bytes(content, user=user, drafts_dir=args.drafts)
    pipeline = ReportPipeline(mailbox, config)
    outcome = await pipeline.submit(ReportRequest(report_type=args.type))

    print(
        json.dumps(
            {
                "outcome": outcome.model_dump(mode="json"),
                "notifications": [n.model_dump(mode="json") for n in mailbox.notifications],
            },
            indent=2,
        )
    )
    if args.print_report and pipeline.last_report:
        print(pipeline.last_report)
    return 0 if outcome.succeeded else 1


def _handle_report(args) -> int:
    return asyncio.run(_run_report(args))


def _handle_serve(args) -> int:
    from sentinel.server import run_server

    run_server(host=args.host, port=args.port)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description=f"{settings.PROJECT_NAME} CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    report_parser = subparsers.add_parser("report", help="Report a saved .eml message")
    report_parser.add_argument("eml", help="Path to the .eml file")
    report_parser.add_argument("--type", required=True, choices=[t.value for t in ReportType], help="Report type")
    report_parser.add_argument("--drafts", default=None, help="Directory to write the report draft to")
    report_parser.add_argument("--reporter-name", default="", help="Reporting user's display name")
    report_parser.add_argument("--reporter-email", default="", help="Reporting user's email")
    report_parser.add_argument("--config-url", default=None, help="Base URL of a running config service")
    report_parser.add_argument("--print-report", action="store_true", help="Print the rendered report HTML")
    report_parser.set_defaults(func=_handle_report)

    serve_parser = subparsers.add_parser("serve", help="Run the add-in asset/config server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (defaults to PORT)")
    serve_parser.set_defaults(func=_handle_serve)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
