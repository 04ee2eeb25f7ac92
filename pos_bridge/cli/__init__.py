import click

from .create_tables import create_tables
from .full_sync import full_sync
from .outbound import sync_customer, sync_order


@click.group()
def cli():
    """POS bridge maintenance commands"""


cli.add_command(create_tables)
cli.add_command(full_sync)
cli.add_command(sync_customer)
cli.add_command(sync_order)
