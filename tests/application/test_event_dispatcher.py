"""Unit tests for the in-process event dispatcher."""

from decimal import Decimal

from catalog.application.event_dispatcher import EventDispatcher
from catalog.domain.model.events import DomainEvent, ProductCreated, ProductPriceChanged
from tests.fakes import RecordingSubscriber


def _created() -> ProductCreated:
    return ProductCreated(
        product_id="p1", sku="WID-001", name="Widget", price_amount=Decimal("1"), price_currency="USD"
    )


class TestEventDispatcher:

    async def test_delivers_to_matching_subscribers_only(self):
        dispatcher = EventDispatcher()
        created, price_changed = RecordingSubscriber(), RecordingSubscriber()
        dispatcher.subscribe(ProductCreated, created)
        dispatcher.subscribe(ProductPriceChanged, price_changed)

        event = _created()
        delivered = await dispatcher.publish(event)

        assert delivered == 1
        assert created.events == [event]
        assert price_changed.events == []

    async def test_base_type_subscription_sees_everything(self):
        dispatcher = EventDispatcher()
        everything = RecordingSubscriber()
        dispatcher.subscribe(DomainEvent, everything)

        await dispatcher.publish(_created())

        assert len(everything.events) == 1

    async def test_async_subscribers_are_awaited(self):
        dispatcher = EventDispatcher()
        seen = []

        async def subscriber(event):
            seen.append(event.product_id)

        dispatcher.subscribe(ProductCreated, subscriber)
        await dispatcher.publish(_created())

        assert seen == ["p1"]

    async def test_failing_subscriber_does_not_stop_delivery(self):
        dispatcher = EventDispatcher()
        after = RecordingSubscriber()

        def broken(event):
            raise RuntimeError("boom")

        dispatcher.subscribe(ProductCreated, broken)
        dispatcher.subscribe(ProductCreated, after)

        delivered = await dispatcher.publish(_created())

        assert delivered == 1
        assert len(after.events) == 1

    async def test_no_subscribers(self):
        assert await EventDispatcher().publish(_created()) == 0

    def test_events_carry_identity_and_timestamp(self):
        a, b = _created(), _created()
        assert a.event_id != b.event_id
        assert a.occurred_at.tzinfo is not None
