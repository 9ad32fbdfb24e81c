#!/usr/bin/env python3
"""
Run the overdue sweep outside the API process.

Run: python scripts/run_sweep.py --once
     python scripts/run_sweep.py --interval 30

Uses DATABASE_URL from the environment / .env like the API does.
"""
from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent
for _p in (_project_root, _project_root / "src"):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))


def main() -> int:
    from api.utils.logger import configure_logging

    logger = configure_logging(console=True)

    from api.config import create_db, get_settings
    from api.services.sweep_service import run_sweep_once

    parser = argparse.ArgumentParser(description="Auto-grade attempts whose time to complete has expired.")
    parser.add_argument("--once", action="store_true", help="run a single sweep and exit")
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="seconds between sweeps (default: SWEEP_INTERVAL_SECONDS)",
    )
    args = parser.parse_args()

    create_db()

    if args.once:
        completed = run_sweep_once()
        print(f"completed={completed}")
        return 0

    interval = args.interval if args.interval is not None else get_settings().sweep_interval_seconds
    logger.info("sweep loop interval_s=%s", interval)
    try:
        while True:
            try:
                run_sweep_once()
            except Exception:
                logger.exception("sweep run failed")
            time.sleep(interval)
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
