# pos_bridge/cli/full_sync.py
import asyncio
import logging
import click
from datetime import datetime

from pos_bridge.core.config import get_settings
from pos_bridge.core.exceptions import BaseServiceError
from pos_bridge.core.logging_config import configure_logging
from pos_bridge.services.epos.jobs import run_full_sync_job
from pos_bridge.services.sync_log import SyncLog

logger = logging.getLogger(__name__)

@click.command("full-sync")
@click.option('--max-pages', type=int, default=None, help='Override the page safety cap for this run')
def full_sync(max_pages):
    """Reconcile all local stock with ePOS Now"""
    configure_logging()
    settings = get_settings()
    if max_pages is not None:
        settings = settings.model_copy(update={"EPOS_FULL_SYNC_MAX_PAGES": max_pages})

    start_time = datetime.now()
    logger.info(f"Starting full stock sync at {start_time}")

    with SyncLog(settings.EPOS_LOG_FILE) as sync_log:
        try:
            result = asyncio.run(run_full_sync_job(settings, sync_log))
        except BaseServiceError as e:
            raise click.ClickException(str(e))

    click.echo("\nFull sync completed!")
    click.echo(f"Stopped because: {result.stop_reason.value if result.stop_reason else 'unknown'}")
    click.echo(f"Pages: {result.pages}")
    click.echo(f"Items: {result.items}")
    click.echo(f"Skipped (other locations): {result.skipped}")
    click.echo(f"Products reconciled: {result.reconciled}")
    click.echo(f"Errors: {len(result.errors)}")
    for error in result.errors:
        click.echo(f"  - {error}")
    logger.info(f"Completed full stock sync in {datetime.now() - start_time}")

if __name__ == "__main__":
    full_sync()
