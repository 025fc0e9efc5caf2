"""Nightly view-count flush and its background task."""

from asyncio import CancelledError, Task, create_task
from asyncio import sleep as asyncio_sleep
from contextlib import suppress
from logging import getLogger

from sqlalchemy.exc import SQLAlchemyError

from inkblog.db.database import Database
from inkblog.errors import DatabaseError
from inkblog.managers.view_counter import ViewCounter
from inkblog.repositories import BlogRepository
from inkblog.schemas.cache import FlushReport
from inkblog.utils.helpers import file_logger, seconds_until_midnight

logger = file_logger(getLogger(__name__))

DAY_SECONDS = 24 * 60 * 60


class ViewCountFlusher:
    """Moves buffered view counts into the blog table, one transaction per post."""

    def __init__(self, database: Database, view_counter: ViewCounter) -> None:
        self.database = database
        self.view_counter = view_counter

    async def _persist(self, blog_id: int, total: int) -> None:
        try:
            async with self.database.transaction() as session:
                await BlogRepository(session).update_view_count(blog_id, total)
        except SQLAlchemyError as e:
            mssg = f"Failed to store view count for blog {blog_id}: {e}"
            raise DatabaseError(mssg) from e

    async def flush(self) -> FlushReport:
        report = await self.view_counter.flush(self._persist)
        if report.skipped:
            logger.info("View count flush skipped; another worker holds the lock")
        else:
            logger.info(
                f"View count flush stored {len(report.flushed)} posts, "
                f"{len(report.failed)} kept for retry",
            )
        return report


class ViewCountScheduler:
    """
    Runs ``ViewCountFlusher.flush`` at local midnight and every 24 hours after.

    Started and stopped by the application lifespan.
    """

    def __init__(self, flusher: ViewCountFlusher) -> None:
        self.flusher = flusher
        self._task: Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = create_task(self._loop())
        logger.info("View count scheduler started")

    async def _loop(self) -> None:
        delay = seconds_until_midnight()
        while True:
            try:
                await asyncio_sleep(delay)
                await self.flusher.flush()
            except CancelledError:
                break
            except Exception:
                logger.exception("Scheduled view count flush failed")
            delay = DAY_SECONDS

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task:
            task.cancel()
            with suppress(CancelledError):
                await task
            logger.info("View count scheduler stopped")
