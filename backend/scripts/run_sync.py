"""
Run one dataset sync outside the API, for cron / scheduled jobs.
Run this script from the backend directory with:
    python -m scripts.run_sync mec
    python -m scripts.run_sync tech-skills
Exits non-zero when the sync fails or another sync is already running.
"""
import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

load_dotenv()  # Load .env file before settings are read

from catalog_sync.config import get_settings  # noqa: E402
from catalog_sync.database import async_session_maker, init_db  # noqa: E402
from catalog_sync.exceptions import SyncInProgressError  # noqa: E402
from catalog_sync.services.acquisition import build_mec_acquirer  # noqa: E402
from catalog_sync.services.cache import get_cache, close_cache  # noqa: E402
from catalog_sync.services.mec_sync import MecSyncService  # noqa: E402
from catalog_sync.services.stackoverflow_client import StackOverflowTagsClient  # noqa: E402
from catalog_sync.services.tech_skills_sync import TechSkillsSyncService  # noqa: E402

DATASETS = ("mec", "tech-skills")


def build_service(dataset: str):
    settings = get_settings()
    cache = get_cache()
    if dataset == "mec":
        return MecSyncService(async_session_maker, cache, build_mec_acquirer())
    return TechSkillsSyncService(
        async_session_maker,
        cache,
        StackOverflowTagsClient(settings.stackoverflow_api_url, settings.stackoverflow_max_pages),
    )


async def run(dataset: str) -> int:
    await init_db()
    try:
        result = await build_service(dataset).sync(triggered_by="scheduled")
    except SyncInProgressError as e:
        print(f"⏭️  {e}")
        return 2
    except Exception as e:
        print(f"❌ Sync failed: {e}")
        return 1
    finally:
        await close_cache()

    print(f"✅ {dataset} sync #{result.sync_log_id} finished in {result.duration_ms}ms")
    print(f"   Parents inserted: {result.parents_inserted}")
    print(f"   Children inserted: {result.children_inserted}")
    print(f"   Rows processed: {result.total_rows_processed}")
    print(f"   Row errors: {len(result.errors)}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a dataset sync once")
    parser.add_argument("dataset", choices=DATASETS)
    args = parser.parse_args()

    logging.basicConfig(level=get_settings().log_level.upper())
    sys.exit(asyncio.run(run(args.dataset)))
