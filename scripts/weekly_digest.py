"""Email administrators how many Pass transfer requests are still pending.

Meant to be run from cron once a week.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.pass_tracker.pass_tracker.container import build_container
from src.pass_tracker.pass_tracker.main import NOTIFICATION_SETTINGS


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        notification_settings={name: getattr(settings, name, "") for name in NOTIFICATION_SETTINGS},
    )
    outcome = container.digest.send()
    print(f"weekly digest: {outcome}")
    return 0 if outcome in {"sent", "no pending"} else 1


if __name__ == "__main__":
    sys.exit(main())
