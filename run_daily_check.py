from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from app.config import NotificationSettings
from app.db import CareStore
from app.services.sweep import DailySweep, SweepAlreadyRunning

ROOT = Path(__file__).resolve().parent


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the daily notification sweep once and print the result."
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Sweep as if today were this day (YYYY-MM-DD). Defaults to today.",
    )
    parser.add_argument(
        "--mongodb-uri",
        type=str,
        default=None,
        help="Override MONGODB_URI for this run.",
    )
    parser.add_argument(
        "--no-dedup",
        action="store_true",
        help="Send even when the event was already notified today.",
    )
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON.")
    return parser.parse_args()


def run_once(args: argparse.Namespace, today: Optional[date] = None) -> int:
    settings = NotificationSettings.from_env()
    if args.no_dedup:
        settings.dedup_enabled = False

    print("=== Daily Check ===")
    print(f"Email configured: {settings.email_configured}")
    print(f"SMS configured:   {settings.sms_configured}")

    with CareStore.connect(args.mongodb_uri) as store:
        try:
            result = DailySweep(store, settings).run(today)
        except SweepAlreadyRunning as exc:
            print(f"Error: {exc}")
            return 2
        except Exception as exc:
            print(f"Error: {exc.__class__.__name__}: {exc}")
            return 1

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        for alert in result.alerts:
            state = "skipped" if alert.skipped else ("sent" if alert.delivered else "failed")
            print(f"{alert.type.value:<22} {alert.elderlyName:<30} {state}")
    print(
        f"Processed: {result.processed}  Sent: {result.successful}  "
        f"Failed: {result.failed}  Skipped: {result.skipped}"
    )
    return 0 if result.failed == 0 else 3


def main() -> int:
    load_dotenv(ROOT / "backend" / ".env")
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    args = parse_args()
    return run_once(args, today=args.date)


if __name__ == "__main__":
    raise SystemExit(main())
