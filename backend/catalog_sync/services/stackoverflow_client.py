"""
Stack Exchange API client - pages through the most popular Stack Overflow tags.
"""
import asyncio
import logging
from typing import List, Optional

import httpx

from ..exceptions import AcquisitionError
from ..schemas.tech_skill import StackOverflowTag

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
PAGE_DELAY_SECONDS = 0.1


class StackOverflowTagsClient:
    def __init__(
        self,
        api_url: str,
        max_pages: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        page_delay: float = PAGE_DELAY_SECONDS,
    ):
        self.api_url = api_url
        self.max_pages = max_pages
        self.transport = transport
        self.page_delay = page_delay

    async def fetch_tags(self) -> List[StackOverflowTag]:
        """
        Fetch tags in popularity order.

        Stops after `max_pages`, when the API reports no more pages, or at the
        first non-2xx page (tags fetched so far are kept).

        Raises:
            AcquisitionError: network failure or an unreadable response body
        """
        logger.info("[TECH-SKILLS] Fetching Stack Overflow tags...")
        tags = []

        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self.transport) as client:
                for page in range(1, self.max_pages + 1):
                    response = await client.get(self.api_url, params={
                        "page": page,
                        "pagesize": PAGE_SIZE,
                        "order": "desc",
                        "sort": "popular",
                        "site": "stackoverflow",
                    })
                    if not response.is_success:
                        logger.warning(f"[TECH-SKILLS] Failed to fetch page {page}: {response.status_code}")
                        break

                    data = response.json()
                    for item in data.get("items", []):
                        tags.append(StackOverflowTag(name=item["name"], count=item.get("count", 0)))

                    if not data.get("has_more"):
                        break
                    await asyncio.sleep(self.page_delay)
        except (httpx.HTTPError, ValueError, KeyError) as e:
            raise AcquisitionError(f"Failed to fetch Stack Overflow tags: {e}") from e

        logger.info(f"[TECH-SKILLS] Fetched {len(tags)} tags")
        return tags
