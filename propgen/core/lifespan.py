import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from propgen.store.db import get_store
from propgen.store.identity import purge_expired_sessions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    store = get_store()
    purge_expired_sessions(store)

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = purge_expired_sessions(store)
                if deleted:
                    logger.info("session_purge deleted=%d", deleted)
            except Exception as exc:  # pragma: no cover - purge must not stop the loop
                logger.warning("session_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=3600)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
