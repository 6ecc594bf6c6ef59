"""
Clock
Wall-clock time and repeating callbacks for the quest-reset poll
"""
from datetime import datetime, timezone
from typing import Callable

from discord.ext import tasks


class SystemClock:
    """Real time in UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def schedule(self, interval_seconds: float, callback: Callable[[], None]) -> tasks.Loop:
        """Run callback every interval on the running event loop; cancel() on the returned loop stops it"""
        async def tick():
            try:
                callback()
            except Exception as e:
                print(f"[CLOCK] ❌ Scheduled callback failed: {e}")

        loop = tasks.loop(seconds=interval_seconds)(tick)
        loop.start()
        return loop


# Global clock instance
system_clock = SystemClock()
