# pos_bridge/cli/outbound.py
import asyncio
import click

from pos_bridge.core.config import get_settings
from pos_bridge.core.exceptions import BaseServiceError
from pos_bridge.core.logging_config import configure_logging
from pos_bridge.database import async_session
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.epos.client import create_epos_client
from pos_bridge.services.epos.outbound import EposOutboundService
from pos_bridge.services.sync_log import SyncLog


async def _run(action, entity_id, sync_log):
    settings = get_settings()
    async with async_session() as session:
        store = EntityStore(session)
        client = await create_epos_client(store, settings, sync_log)
        outbound = EposOutboundService(client, store, sync_log, settings)

        if action == "customer":
            return await outbound.create_customer(await store.get_customer(entity_id))
        if action == "order":
            return await outbound.create_order(await store.get_order(entity_id))
        order = await store.get_order(entity_id)
        if action == "confirm":
            return await outbound.confirm_order(order)
        return await outbound.cancel_order(order)


def _execute(action, entity_id):
    configure_logging()
    with SyncLog(get_settings().EPOS_LOG_FILE) as sync_log:
        try:
            return asyncio.run(_run(action, entity_id, sync_log))
        except BaseServiceError as e:
            raise click.ClickException(str(e))


@click.command("sync-customer")
@click.argument("customer_id", type=int)
def sync_customer(customer_id):
    """Register a local customer in ePOS Now"""
    pos_id = _execute("customer", customer_id)
    click.echo(f"Customer {customer_id}: " + (f"POS id {pos_id}" if pos_id else "not synced, see the sync log"))


@click.command("sync-order")
@click.argument("order_id", type=int)
@click.option("--confirm", "status", flag_value="confirm", help="Mark the POS transaction as paid")
@click.option("--cancel", "status", flag_value="cancel", help="Put the POS transaction on hold")
def sync_order(order_id, status):
    """Create a local order in ePOS Now, or update its payment status"""
    result = _execute(status or "order", order_id)
    if status:
        click.echo(f"Order {order_id} {status}: {'ok' if result else 'failed, see the sync log'}")
    else:
        click.echo(f"Order {order_id}: " + (f"POS transaction {result}" if result else "not synced, see the sync log"))
