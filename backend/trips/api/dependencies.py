"""FastAPI dependencies for services, locks and collaborators."""

from functools import lru_cache
from typing import Annotated

import redis
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.trips.config import get_settings
from backend.trips.db.engine import get_session
from backend.trips.locks import InMemoryRegenerationLock, RedisRegenerationLock, RegenerationLock
from backend.trips.orchestration.components import ComponentOrchestrator
from backend.trips.orchestration.payment_schedules import PaymentScheduleService
from backend.trips.orchestration.storage_cleanup import AttachmentCleaner, NoopAttachmentCleaner


@lru_cache
def get_regeneration_lock() -> RegenerationLock:
    """Redis lock when REDIS_URL is configured, process-local lock otherwise."""
    settings = get_settings()
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        return RedisRegenerationLock(client, ttl_seconds=settings.regeneration_lock_ttl_seconds)
    return InMemoryRegenerationLock(ttl_seconds=settings.regeneration_lock_ttl_seconds)


def get_attachment_cleaner() -> AttachmentCleaner:
    return NoopAttachmentCleaner()


def get_orchestrator(
    session: Annotated[AsyncSession, Depends(get_session)],
    cleaner: Annotated[AttachmentCleaner, Depends(get_attachment_cleaner)],
) -> ComponentOrchestrator:
    return ComponentOrchestrator(session, attachment_cleaner=cleaner)


def get_payment_schedule_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PaymentScheduleService:
    return PaymentScheduleService(session)
