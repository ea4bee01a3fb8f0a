"""
Remove permanent photo objects left behind by interrupted approvals.

Meant to run periodically (cron). Safe to run at any time: only objects
staged longer ago than PHOTO_RECONCILE_GRACE_MINUTES are touched.

Usage:
    ENV_FILE=.env.dev python scripts/photos/reconcile_photo_requests.py
"""

import asyncio
import os
import sys
from datetime import timedelta
from pathlib import Path

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from dotenv import load_dotenv

project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env.prod")
load_dotenv(project_root / env_file, override=True)

from libs.common.config import get_settings
from libs.common.container import build_container
from libs.common.datetime_utils import utc_now
from libs.db.config import get_session_factory
from services.members_service.services.photo_requests import reconcile_photo_requests


async def main():
    settings = get_settings()
    container = build_container(settings)
    grace = timedelta(minutes=settings.PHOTO_RECONCILE_GRACE_MINUTES)

    session_factory = get_session_factory()
    async with session_factory() as session:
        examined, cleaned = await reconcile_photo_requests(
            session, container.storage, utc_now(), grace
        )

    print(f"✅ Examined {examined} staged requests, cleaned {len(cleaned)}")
    for request_id in cleaned:
        print(f"   - {request_id}")


if __name__ == "__main__":
    asyncio.run(main())
