"""Integration tests for the SQLAlchemy unit of work against SQLite."""

import asyncio
from decimal import Decimal

import pytest

from catalog.application.create_product import CreateProductHandler
from catalog.application.delete_product import DeleteProductHandler
from catalog.application.dto import (
    CreateProduct,
    DeleteProduct,
    GetProductById,
    SearchProducts,
    UpdateProduct,
)
from catalog.application.event_dispatcher import EventDispatcher
from catalog.application.get_product import GetProductByIdHandler
from catalog.application.search_products import SearchProductsHandler
from catalog.application.update_product import UpdateProductHandler
from catalog.domain.exceptions import (
    ConcurrencyError,
    DuplicateSkuError,
    ErrorKind,
    UnitOfWorkError,
)
from catalog.domain.model.events import ProductCreated
from catalog.domain.model.product import Product
from catalog.domain.model.value_objects import Money, Sku
from tests.fakes import RecordingSubscriber


def _new_product(sku: str = "WID-001") -> Product:
    return Product.create(Sku(sku), "Widget", Money.of("10"))


async def _get(make_uow, product_id: str) -> Product | None:
    async with make_uow() as uow:
        return await uow.products.get_by_id(product_id)


class TestTransactions:

    async def test_save_changes_commits(self, make_uow):
        product = _new_product()
        async with make_uow() as uow:
            await uow.products.add(product)
            assert await uow.save_changes() == 1

        assert (await _get(make_uow, product.id)) is not None

    async def test_rolled_back_changes_are_never_visible(self, make_uow):
        product = _new_product()
        async with make_uow() as uow:
            await uow.begin_transaction()
            await uow.products.add(product)
            await uow.save_changes()
            await uow.rollback_transaction()

        assert (await _get(make_uow, product.id)) is None

    async def test_flushed_changes_invisible_to_others_until_commit(self, make_uow):
        product = _new_product()
        async with make_uow() as uow:
            await uow.begin_transaction()
            await uow.products.add(product)
            await uow.save_changes()

            assert (await _get(make_uow, product.id)) is None

            await uow.commit_transaction()

        assert (await _get(make_uow, product.id)) is not None

    async def test_exiting_with_open_transaction_rolls_back(self, make_uow):
        product = _new_product()
        with pytest.raises(RuntimeError):
            async with make_uow() as uow:
                await uow.begin_transaction()
                await uow.products.add(product)
                await uow.save_changes()
                raise RuntimeError("caller bug")

        assert (await _get(make_uow, product.id)) is None

    async def test_cancellation_rolls_back(self, make_uow):
        product = _new_product()
        flushed = asyncio.Event()

        async def operation(uow):
            await uow.products.add(product)
            await uow.save_changes()
            flushed.set()
            await asyncio.sleep(3600)

        async def run():
            async with make_uow() as uow:
                await uow.execute_in_transaction(lambda: operation(uow))

        task = asyncio.create_task(run())
        await flushed.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert (await _get(make_uow, product.id)) is None

    async def test_session_unavailable_outside_scope(self, make_uow):
        uow = make_uow()
        with pytest.raises(UnitOfWorkError):
            uow.session

    async def test_dispatches_events_after_save(self, make_uow):
        dispatcher = EventDispatcher()
        subscriber = RecordingSubscriber()
        dispatcher.subscribe(ProductCreated, subscriber)
        product = _new_product()

        async with make_uow(dispatcher=dispatcher) as uow:
            await uow.products.add(product)
            await uow.save_changes()

        assert [e.product_id for e in subscriber.events] == [product.id]


class TestConcurrency:

    async def test_second_writer_with_stale_version_is_rejected(self, make_uow):
        product = _new_product()
        async with make_uow() as uow:
            await uow.products.add(product)
            await uow.save_changes()

        async with make_uow() as first, make_uow() as second:
            a = await first.products.get_by_id(product.id)
            b = await second.products.get_by_id(product.id)

            a.update_price(Money.of("11"))
            await first.products.update(a)
            await first.save_changes()

            b.update_price(Money.of("12"))
            with pytest.raises(ConcurrencyError):
                await second.products.update(b)

        stored = await _get(make_uow, product.id)
        assert stored.price.amount == Decimal("11.00")
        assert stored.version == 1

    async def test_write_rejects_writer_that_passed_the_check(self, make_uow):
        product = _new_product()
        async with make_uow() as uow:
            await uow.products.add(product)
            await uow.save_changes()

        async with make_uow() as first, make_uow() as second:
            a = await first.products.get_by_id(product.id)
            b = await second.products.get_by_id(product.id)
            a.update_details("First", None)
            b.update_details("Second", None)
            await first.products.update(a)
            await second.products.update(b)

            await first.save_changes()
            with pytest.raises(ConcurrencyError):
                await second.save_changes()

        stored = await _get(make_uow, product.id)
        assert stored.name == "First"
        assert stored.version == 1

    async def test_soft_delete_rejects_writer_that_passed_the_check(self, make_uow):
        product = _new_product()
        async with make_uow() as uow:
            await uow.products.add(product)
            await uow.save_changes()

        async with make_uow() as editor, make_uow() as deleter:
            a = await editor.products.get_by_id(product.id)
            b = await deleter.products.get_by_id(product.id)
            a.update_details("Edited", None)
            await editor.products.update(a)
            await deleter.products.delete(b)

            await editor.save_changes()
            with pytest.raises(ConcurrencyError):
                await deleter.save_changes()

        stored = await _get(make_uow, product.id)
        assert stored.name == "Edited"
        assert stored.version == 1

    async def test_duplicate_sku_race_is_reported(self, make_uow):
        async with make_uow() as first, make_uow() as second:
            assert not await first.products.sku_exists(Sku("WID-001"))
            assert not await second.products.sku_exists(Sku("WID-001"))

            await first.products.add(_new_product())
            await first.save_changes()

            await second.products.add(_new_product())
            with pytest.raises(DuplicateSkuError):
                await second.save_changes()

    async def test_version_strictly_increases(self, make_uow):
        product = _new_product()
        async with make_uow() as uow:
            await uow.products.add(product)
            await uow.save_changes()

        versions = []
        for name in ("A", "B", "C"):
            async with make_uow() as uow:
                loaded = await uow.products.get_by_id(product.id)
                loaded.update_details(name, None)
                await uow.products.update(loaded)
                await uow.save_changes()
            versions.append((await _get(make_uow, product.id)).version)

        assert versions == [1, 2, 3]


class TestHandlersEndToEnd:

    async def test_create_then_get(self, make_uow):
        async with make_uow() as uow:
            created = (
                await CreateProductHandler(uow).handle(
                    CreateProduct(
                        sku="wid-001",
                        name="Widget",
                        price=Decimal("19.99"),
                        currency="usd",
                        description="Blue",
                    )
                )
            ).value

        async with make_uow() as uow:
            fetched = (await GetProductByIdHandler(uow).handle(GetProductById(created.id))).value

        assert fetched.id == created.id
        assert fetched.sku == "WID-001"
        assert fetched.name == "Widget"
        assert fetched.description == "Blue"
        assert fetched.price == Decimal("19.99")
        assert fetched.currency == "USD"
        assert fetched.status == "Draft"
        assert fetched.created_at == created.created_at

    async def test_duplicate_sku_via_handler(self, make_uow):
        command = CreateProduct(sku="WID-001", name="Widget", price=Decimal("1"), currency="USD")
        async with make_uow() as uow:
            await CreateProductHandler(uow).handle(command)
        async with make_uow() as uow:
            result = await CreateProductHandler(uow).handle(command)

        assert result.kind is ErrorKind.DUPLICATE_SKU

    async def test_update_delete_and_search(self, make_uow):
        async with make_uow() as uow:
            created = (
                await CreateProductHandler(uow).handle(
                    CreateProduct(
                        sku="WID-001", name="Widget", price=Decimal("5"), currency="USD"
                    )
                )
            ).value

        async with make_uow(actor_id="editor") as uow:
            updated = (
                await UpdateProductHandler(uow).handle(
                    UpdateProduct(
                        id=created.id, name="Widget Pro", price=Decimal("7.5"), currency="USD"
                    )
                )
            ).value
        assert updated.version > created.version
        assert updated.updated_by == "editor"

        async with make_uow() as uow:
            page = (await SearchProductsHandler(uow).handle(SearchProducts(term="pro"))).value
        assert [p.name for p in page.items] == ["Widget Pro"]
        assert page.items[0].price == Decimal("7.50")

        async with make_uow() as uow:
            assert (await DeleteProductHandler(uow).handle(DeleteProduct(created.id))).ok
        async with make_uow() as uow:
            again = await DeleteProductHandler(uow).handle(DeleteProduct(created.id))
            page = (await SearchProductsHandler(uow).handle(SearchProducts())).value

        assert again.kind is ErrorKind.NOT_FOUND
        assert page.total_count == 0
