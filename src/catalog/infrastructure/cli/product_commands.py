"""CLI commands for the Product aggregate."""

from __future__ import annotations

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

import click

from catalog.application.change_product_status import (
    DiscontinueProductHandler,
    PublishProductHandler,
)
from catalog.application.create_product import CreateProductHandler
from catalog.application.delete_product import DeleteProductHandler
from catalog.application.dto import (
    CreateProduct,
    DeleteProduct,
    DiscontinueProduct,
    GetProductById,
    ProductView,
    PublishProduct,
    SearchProducts,
    UpdateProduct,
)
from catalog.application.get_product import GetProductByIdHandler
from catalog.application.search_products import SearchProductsHandler
from catalog.application.unit_of_work import AbstractUnitOfWork
from catalog.application.update_product import UpdateProductHandler
from catalog.infrastructure.bootstrap import open_unit_of_work
from catalog.infrastructure.config import get_settings


def _parse_decimal(ctx: click.Context, param: click.Parameter, value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"'{value}' is not a number.")
    if not number.is_finite():
        raise click.BadParameter(f"'{value}' is not a number.")
    return number


def _execute(make_handler: Callable[[AbstractUnitOfWork], Any], request: Any) -> Any:
    """Run one use case in its own unit of work; Failure becomes a CLI error."""
    settings = get_settings()

    async def run():
        async with open_unit_of_work(settings) as uow:
            return await make_handler(uow).handle(request)

    result = asyncio.run(run())
    if not result.ok:
        raise click.ClickException(f"[{result.kind.value}] {result.message}")
    return result.value


def _echo_product(view: ProductView) -> None:
    click.echo(f"Product {view.id}")
    click.echo(f"  SKU:         {view.sku}")
    click.echo(f"  Name:        {view.name}")
    if view.description:
        click.echo(f"  Description: {view.description}")
    click.echo(f"  Price:       {view.price:,.2f} {view.currency}")
    click.echo(f"  Status:      {view.status}")
    if view.category_id:
        click.echo(f"  Category:    {view.category_id}")
    click.echo(f"  Version:     {view.version}")


@click.command("create")
@click.option("--sku", required=True, help="Stock keeping unit, e.g. WID-001.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, callback=_parse_decimal, help="Price (e.g. 15.00).")
@click.option("--currency", default="USD", show_default=True, help="ISO currency code.")
@click.option("--description", default=None, help="Optional description.")
@click.option("--category", "category_id", default=None, help="Category ID.")
def product_create(
    sku: str,
    name: str,
    price: Decimal,
    currency: str,
    description: str | None,
    category_id: str | None,
) -> None:
    """Add a new draft product to the catalog."""
    view = _execute(
        CreateProductHandler,
        CreateProduct(
            sku=sku,
            name=name,
            price=price,
            currency=currency,
            description=description,
            category_id=category_id,
        ),
    )
    click.echo(f"Product {view.id} '{view.name}' created ({view.sku})")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--description", default=None, help="New description.")
@click.option("--price", default=None, callback=_parse_decimal, help="New price.")
@click.option("--currency", default=None, help="Currency of the new price.")
@click.option("--category", "category_id", default=None, help="Category ID (omit to clear).")
def product_update(
    product_id: str,
    name: str,
    description: str | None,
    price: Decimal | None,
    currency: str | None,
    category_id: str | None,
) -> None:
    """Replace a product's details, price and category."""
    view = _execute(
        UpdateProductHandler,
        UpdateProduct(
            id=product_id,
            name=name,
            description=description,
            price=price,
            currency=currency,
            category_id=category_id,
        ),
    )
    click.echo(f"Product {view.id} updated (version {view.version})")


@click.command("delete")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_delete(product_id: str) -> None:
    """Delete a product."""
    _execute(DeleteProductHandler, DeleteProduct(id=product_id))
    click.echo(f"Product {product_id} deleted")


@click.command("show")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_show(product_id: str) -> None:
    """Show a single product."""
    view = _execute(GetProductByIdHandler, GetProductById(id=product_id))
    if view is None:
        raise click.ClickException(f"Product {product_id} not found")
    _echo_product(view)


@click.command("publish")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_publish(product_id: str) -> None:
    """Make a draft product available."""
    view = _execute(PublishProductHandler, PublishProduct(id=product_id))
    click.echo(f"Product {view.id} is now {view.status}")


@click.command("discontinue")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_discontinue(product_id: str) -> None:
    """Withdraw a product for good."""
    view = _execute(DiscontinueProductHandler, DiscontinueProduct(id=product_id))
    click.echo(f"Product {view.id} is now {view.status}")


@click.command("search")
@click.option("--term", default=None, help="Text contained in the name or SKU.")
@click.option("--status", default=None, help="Draft, Published or Discontinued.")
@click.option("--category", "category_id", default=None, help="Category ID.")
@click.option("--min-price", default=None, callback=_parse_decimal, help="Lowest price.")
@click.option("--max-price", default=None, callback=_parse_decimal, help="Highest price.")
@click.option("--page", "page_number", default=1, show_default=True, help="Page number.")
@click.option("--page-size", default=None, type=int, help="Products per page.")
@click.option("--price-desc", is_flag=True, help="Most expensive first.")
def product_search(
    term: str | None,
    status: str | None,
    category_id: str | None,
    min_price: Decimal | None,
    max_price: Decimal | None,
    page_number: int,
    page_size: int | None,
    price_desc: bool,
) -> None:
    """Search the catalog."""
    settings = get_settings()
    page = _execute(
        lambda uow: SearchProductsHandler(uow, max_page_size=settings.max_page_size),
        SearchProducts(
            term=term,
            status=status,
            category_id=category_id,
            min_price=min_price,
            max_price=max_price,
            page_number=page_number,
            page_size=settings.default_page_size if page_size is None else page_size,
            order_by_price_descending=price_desc,
        ),
    )

    if not page.items:
        click.echo("No products found.")
        return

    click.echo(f"{'SKU':<16} {'Name':<30} {'Price':>14} {'Status':<12}")
    click.echo("-" * 75)
    for p in page.items:
        price = f"{p.price:,.2f} {p.currency}"
        click.echo(f"{p.sku:<16} {p.name:<30} {price:>14} {p.status:<12}")
    click.echo(
        f"Page {page.page_number} of {page.total_pages} ({page.total_count} products)"
    )


