"""Integration tests for the DeleteProduct and GetProductById use cases."""

from decimal import Decimal

from catalog.application.create_product import CreateProductHandler
from catalog.application.delete_product import DeleteProductHandler
from catalog.application.dto import CreateProduct, DeleteProduct, GetProductById
from catalog.application.get_product import GetProductByIdHandler
from catalog.application.result import Success
from catalog.domain.exceptions import ErrorKind
from catalog.domain.model.value_objects import Sku
from tests.fakes import FakeStorage, FakeUnitOfWork


async def _seed(storage: FakeStorage) -> str:
    result = await CreateProductHandler(FakeUnitOfWork(storage)).handle(
        CreateProduct(sku="WID-001", name="Widget", price=Decimal("10"), currency="USD")
    )
    return result.value.id


class TestGetProductById:

    async def test_create_then_get_round_trip(self):
        storage = FakeStorage()
        created = (
            await CreateProductHandler(FakeUnitOfWork(storage)).handle(
                CreateProduct(
                    sku="wid-001",
                    name="Widget",
                    price=Decimal("10.50"),
                    currency="usd",
                    description="Blue",
                    category_id="cat-1",
                )
            )
        ).value

        fetched = (
            await GetProductByIdHandler(FakeUnitOfWork(storage)).handle(
                GetProductById(created.id)
            )
        ).value

        assert fetched == created

    async def test_missing_product_is_success_none(self):
        result = await GetProductByIdHandler(FakeUnitOfWork()).handle(GetProductById("nope"))
        assert result == Success(None)


class TestDeleteProduct:

    async def test_deleted_product_disappears(self):
        storage = FakeStorage()
        product_id = await _seed(storage)

        result = await DeleteProductHandler(FakeUnitOfWork(storage)).handle(
            DeleteProduct(product_id)
        )

        assert result.ok
        assert result.value is None
        fetched = await GetProductByIdHandler(FakeUnitOfWork(storage)).handle(
            GetProductById(product_id)
        )
        assert fetched.value is None

    async def test_delete_is_soft(self):
        storage = FakeStorage()
        product_id = await _seed(storage)

        await DeleteProductHandler(FakeUnitOfWork(storage)).handle(DeleteProduct(product_id))

        assert product_id in storage.rows
        assert product_id in storage.deleted

    async def test_second_delete_is_not_found(self):
        storage = FakeStorage()
        product_id = await _seed(storage)
        await DeleteProductHandler(FakeUnitOfWork(storage)).handle(DeleteProduct(product_id))

        result = await DeleteProductHandler(FakeUnitOfWork(storage)).handle(
            DeleteProduct(product_id)
        )

        assert result.kind is ErrorKind.NOT_FOUND

    async def test_sku_stays_reserved_after_delete(self):
        storage = FakeStorage()
        product_id = await _seed(storage)
        await DeleteProductHandler(FakeUnitOfWork(storage)).handle(DeleteProduct(product_id))

        uow = FakeUnitOfWork(storage)
        assert await uow.products.sku_exists(Sku("WID-001"))
