# pos_bridge/services/epos/jobs.py
import asyncio
import logging
from typing import Optional

from pos_bridge.core.config import Settings
from pos_bridge.database import async_session
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.epos.client import create_epos_client
from pos_bridge.services.epos.full_sync import EposFullSyncService, FullSyncResult
from pos_bridge.services.epos.inbound import EposInboundService
from pos_bridge.services.epos.locks import KeyedLocks
from pos_bridge.services.sync_log import SyncLog

logger = logging.getLogger(__name__)


async def run_full_sync_job(
    settings: Settings,
    sync_log: SyncLog,
    locks: Optional[KeyedLocks] = None,
    cancel_event: Optional[asyncio.Event] = None,
    session_factory=async_session
) -> FullSyncResult:
    """Run one full stock sync in its own database session"""
    async with session_factory() as session:
        store = EntityStore(session)
        client = await create_epos_client(store, settings, sync_log)
        inbound = EposInboundService(store, sync_log, settings, locks)
        return await EposFullSyncService(client, inbound, settings).run_full_sync(cancel_event)
