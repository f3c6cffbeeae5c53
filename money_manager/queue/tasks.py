"""
Celery tasks - retry a single holder's revaluation after a failed price-update fan-out.
"""

import asyncio
import logging
from datetime import date

from money_manager.config import get_settings
from money_manager.queue.celery_app import celery_app

logger = logging.getLogger(__name__)

settings = get_settings()


def _run_async(coro):
    """Run async function from sync Celery task."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def _revalue(user_id: int, item_id: int, old_price_cents: int, new_price_cents: int, day: date) -> int:
    # Imported here so the worker only builds an engine when a task actually runs
    from money_manager.db.session import async_session_maker, engine
    from money_manager.services.ledger import revalue_holder

    try:
        async with async_session_maker() as session:
            async with session.begin():
                return await revalue_holder(
                    session, user_id, item_id, old_price_cents, new_price_cents, day
                )
    finally:
        # Pooled connections are bound to this task's event loop
        await engine.dispose()


@celery_app.task(bind=True, max_retries=settings.revaluation_max_retries)
def revalue_holder_task(
    self, user_id: int, item_id: int, old_price_cents: int, new_price_cents: int, day: str
):
    """Apply one holder's share of a price change in its own transaction."""
    try:
        amount = _run_async(
            _revalue(user_id, item_id, old_price_cents, new_price_cents, date.fromisoformat(day))
        )
    except Exception as exc:
        logger.warning("Revaluation retry failed user_id=%s item_id=%s: %s", user_id, item_id, exc)
        raise self.retry(exc=exc, countdown=settings.revaluation_retry_countdown)
    logger.info("Revaluation retry applied user_id=%s item_id=%s amount=%s", user_id, item_id, amount)
    return amount


def enqueue_holder_revaluation(
    user_id: int, item_id: int, old_price_cents: int, new_price_cents: int, day: date
) -> bool:
    """Queue a per-holder retry. Returns False (and logs) when the broker is unreachable."""
    try:
        revalue_holder_task.delay(user_id, item_id, old_price_cents, new_price_cents, day.isoformat())
    except Exception:
        logger.exception("Could not enqueue revaluation user_id=%s item_id=%s", user_id, item_id)
        return False
    return True
