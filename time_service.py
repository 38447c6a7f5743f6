import asyncio
import aiohttp
from datetime import datetime, timezone, timedelta
from typing import List, Optional

DEFAULT_TIME_APIS = ["http://worldclockapi.com/api/json/utc/now"]
OFFSET_MAX_AGE_SECONDS = 3600


class TimeService:
    """Local clock for "today" and reminder anchoring, optionally corrected by a time API"""

    def __init__(self, time_apis: Optional[List[str]] = None, request_timeout: float = 10.0):
        self.api_time_offset = 0.0  # seconds the API clock runs ahead of the system clock
        self.last_sync_time = None
        self.time_apis = list(time_apis or DEFAULT_TIME_APIS)
        self.request_timeout = request_timeout

    async def sync_time(self) -> bool:
        """Measure the offset against the first time API that answers.

        When none answers the offset is cleared so "today" follows the
        system clock.
        """
        timeout = aiohttp.ClientTimeout(total=self.request_timeout, connect=self.request_timeout / 2)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            for api_url in self.time_apis:
                api_time = await self._fetch_api_time(session, api_url)
                if api_time is None:
                    continue
                system_time = datetime.now(timezone.utc)
                self.api_time_offset = (api_time - system_time).total_seconds()
                self.last_sync_time = system_time
                print(f"✅ Clock checked against {api_url}: {self.api_time_offset:+.1f}s")
                return True

        print("⚠️ No time API answered, reminders follow the system clock")
        self.last_sync_time = datetime.now(timezone.utc)
        self.api_time_offset = 0.0
        return False

    async def _fetch_api_time(self, session, api_url: str) -> Optional[datetime]:
        try:
            async with session.get(api_url, headers={'User-Agent': 'HydrationTracker/1.0'}) as response:
                if response.status != 200:
                    print(f"❌ HTTP {response.status} from {api_url}")
                    return None
                data = await response.json(content_type=None)
        except asyncio.TimeoutError:
            print(f"⏱️ Timeout connecting to {api_url}")
            return None
        except aiohttp.ClientError as e:
            print(f"❌ Failed to reach {api_url}: {e}")
            return None
        return self._parse_api_time(api_url, data)

    def _parse_api_time(self, api_url: str, data) -> Optional[datetime]:
        """Read the UTC instant from a worldclockapi payload"""
        try:
            parsed = datetime.fromisoformat(str(data['currentDateTime']).replace('Z', '+00:00'))
        except (KeyError, TypeError, ValueError) as e:
            print(f"❌ Unexpected payload from {api_url}: {e}")
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    def now(self) -> datetime:
        """Current local wall-clock time (naive), corrected by the API offset"""
        local_time = datetime.now().replace(microsecond=0)

        # A stale offset is ignored
        if self.last_sync_time and self.api_time_offset:
            time_since_sync = (datetime.now(timezone.utc) - self.last_sync_time).total_seconds()
            if time_since_sync < OFFSET_MAX_AGE_SECONDS:
                return local_time + timedelta(seconds=self.api_time_offset)

        return local_time

    def today(self):
        """Local calendar day used for the "today" aggregates"""
        return self.now().date()


class FixedClock:
    """Clock pinned to a given instant"""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def today(self):
        return self.current.date()

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)


# Global time service instance
time_service = TimeService()
