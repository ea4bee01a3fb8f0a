"""
Rebuild the Algolia index from the database.

Clears the index and pushes every member, family member, adherent and
the daily guests from today onward.

Usage:
    ENV_FILE=.env.dev python scripts/search/backfill_search.py
"""

import asyncio
import os
import sys
from pathlib import Path

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from dotenv import load_dotenv

project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env.prod")
load_dotenv(project_root / env_file, override=True)

from libs.common.config import get_settings
from libs.common.datetime_utils import club_today
from libs.common.search import AlgoliaSearchClient
from libs.db.config import get_session_factory
from services.access_service.services.backfill import rebuild_search_index


async def main():
    settings = get_settings()
    search = AlgoliaSearchClient.from_settings(settings)
    if not search.configured:
        print("❌ ALGOLIA_APP_ID / ALGOLIA_API_KEY are not set")
        sys.exit(1)

    print(f"🔄 Rebuilding index {settings.ALGOLIA_INDEX_NAME}...")
    session_factory = get_session_factory()
    async with session_factory() as session:
        counts = await rebuild_search_index(session, search, club_today())

    print(
        f"✅ Indexed {counts['records']} records "
        f"({counts['members']} members, {counts['guest_lists']} guest lists)"
    )


if __name__ == "__main__":
    asyncio.run(main())
