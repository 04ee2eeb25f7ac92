from functools import lru_cache
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pos_bridge.core.config import Settings, get_settings
from pos_bridge.database import async_session
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.epos.client import EposClient, create_epos_client
from pos_bridge.services.epos.inbound import EposInboundService
from pos_bridge.services.epos.locks import KeyedLocks
from pos_bridge.services.epos.outbound import EposOutboundService
from pos_bridge.services.sync_log import SyncLog


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


@lru_cache()
def get_sync_log() -> SyncLog:
    """Process-wide sync log, opened and closed by the application lifespan"""
    return SyncLog(get_settings().EPOS_LOG_FILE)


@lru_cache()
def get_reconciliation_locks() -> KeyedLocks:
    """Shared by the webhooks and the full sync so a product is never reconciled twice at once"""
    return KeyedLocks()


def get_entity_store(db: AsyncSession = Depends(get_db)) -> EntityStore:
    return EntityStore(db)


async def get_epos_client(
    store: EntityStore = Depends(get_entity_store),
    settings: Settings = Depends(get_settings),
    sync_log: SyncLog = Depends(get_sync_log)
) -> EposClient:
    return await create_epos_client(store, settings, sync_log)


def get_inbound_service(
    store: EntityStore = Depends(get_entity_store),
    settings: Settings = Depends(get_settings),
    sync_log: SyncLog = Depends(get_sync_log),
    locks: KeyedLocks = Depends(get_reconciliation_locks)
) -> EposInboundService:
    return EposInboundService(store, sync_log, settings, locks)


def get_outbound_service(
    client: EposClient = Depends(get_epos_client),
    store: EntityStore = Depends(get_entity_store),
    settings: Settings = Depends(get_settings),
    sync_log: SyncLog = Depends(get_sync_log)
) -> EposOutboundService:
    return EposOutboundService(client, store, sync_log, settings)
