"""
Background Task Utilities

Fixed-interval asyncio loop with cancellation on shutdown. Used by the client
insight feed to poll the API; failed iterations are logged and the loop waits
for the next tick (no retry/backoff).
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class BackgroundTask:
    """
    Periodic task runner with graceful shutdown.

    The first run happens immediately on ``start()``; afterwards the task
    function runs every ``interval`` seconds until ``stop()``.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        task_func: Callable[[], Awaitable[None]],
    ):
        """
        Initialize background task.

        Args:
            name: Task name for logging
            interval: Sleep interval in seconds between task executions
            task_func: Async function to execute in the loop
        """
        self.name = name
        self.interval = interval
        self.task_func = task_func
        self._task: Optional[asyncio.Task] = None
        self._consecutive_errors = 0
        self._max_consecutive_errors = 10

    async def start(self) -> None:
        """Start the loop unless it is already running."""
        if self._task and not self._task.done():
            logger.debug("%s: Task already running, skipping start", self.name)
            return

        self._task = asyncio.create_task(self._run_loop())
        logger.info("%s: Background task started (interval: %ss)", self.name, self.interval)

    async def _run_loop(self) -> None:
        while True:
            try:
                await self.task_func()
                self._consecutive_errors = 0

            except asyncio.CancelledError:
                logger.debug("%s: Task cancelled", self.name)
                break

            except Exception as e:
                logger.error(
                    "%s: Unexpected error: %s: %s",
                    self.name,
                    e.__class__.__name__,
                    e,
                    exc_info=True,
                )
                self._consecutive_errors += 1

                if self._consecutive_errors >= self._max_consecutive_errors:
                    logger.error(
                        "%s: %s consecutive errors - task may be unhealthy",
                        self.name,
                        self._consecutive_errors,
                    )
                    self._consecutive_errors = 0  # Reset to prevent log spam

            try:
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                logger.debug("%s: Task cancelled", self.name)
                break

    async def stop(self) -> None:
        """Cancel the loop and wait briefly for it to finish."""
        if not self._task:
            return

        logger.info("%s: Shutting down background task...", self.name)
        self._task.cancel()

        try:
            await asyncio.wait_for(self._task, timeout=5.0)
        except asyncio.CancelledError:
            logger.debug("%s: Task cancelled successfully", self.name)
        except asyncio.TimeoutError:
            logger.warning(
                "%s: Task did not finish within timeout during shutdown", self.name
            )
        finally:
            self._task = None
            logger.info("%s: Background task stopped", self.name)

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()
