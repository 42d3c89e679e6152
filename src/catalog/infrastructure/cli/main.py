import click

from catalog.infrastructure.cli.db_commands import db_init
from catalog.infrastructure.cli.product_commands import (
    product_create,
    product_delete,
    product_discontinue,
    product_publish,
    product_search,
    product_show,
    product_update,
)
from catalog.infrastructure.config import get_settings
from catalog.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """Catalog: product catalog management"""
    configure_logging(get_settings())


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def db() -> None:
    """Manage the catalog database."""


# Register subcommands
product.add_command(product_create)
product.add_command(product_delete)
product.add_command(product_discontinue)
product.add_command(product_publish)
product.add_command(product_search)
product.add_command(product_show)
product.add_command(product_update)
db.add_command(db_init)
