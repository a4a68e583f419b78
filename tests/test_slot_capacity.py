"""Delivery slot capacity: consume, release, listing and a concurrent race."""

import threading
from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront.data.database import init_db
from storefront.data.models import DeliverySlotModel
from storefront.data.transaction import atomic
from storefront.domain.errors import InsufficientCapacityError, NotFoundError
from storefront.services.slot_capacity import DeliverySlotCapacity


def _consumed(db, slot):
    db.refresh(slot)
    return slot.consumed_capacity


class TestConsume:

    def test_consume_takes_one_unit(self, db, make_slot):
        slot = make_slot(capacity=3)
        with atomic(db, "test consume"):
            refreshed = DeliverySlotCapacity(db).consume(slot.id)

        assert refreshed.remaining_capacity == 2
        assert _consumed(db, slot) == 1

    def test_full_slot_is_rejected(self, db, make_slot):
        slot = make_slot(capacity=2, consumed=2)
        with pytest.raises(InsufficientCapacityError, match="no longer available") as exc:
            DeliverySlotCapacity(db).consume(slot.id)

        assert exc.value.available == 0
        assert _consumed(db, slot) == 2

    def test_past_slot_is_rejected(self, db, make_slot):
        slot = make_slot(days_ahead=-1)
        with pytest.raises(InsufficientCapacityError, match="expired"):
            DeliverySlotCapacity(db).consume(slot.id, not_before=date.today())

    def test_unknown_slot(self, db):
        with pytest.raises(NotFoundError):
            DeliverySlotCapacity(db).consume(404)


class TestRelease:

    def test_release_gives_capacity_back(self, db, make_slot):
        slot = make_slot(capacity=3, consumed=2)
        with atomic(db, "test release"):
            DeliverySlotCapacity(db).release(slot.id)
        assert _consumed(db, slot) == 1

    def test_over_release_clamps_at_zero(self, db, make_slot):
        slot = make_slot(capacity=3, consumed=1)
        with atomic(db, "test release"):
            DeliverySlotCapacity(db).release(slot.id, 5)
        assert _consumed(db, slot) == 0

    def test_unknown_slot(self, db):
        with pytest.raises(NotFoundError):
            DeliverySlotCapacity(db).release(404)


def test_available_slots_grouped_by_day(db, make_slot):
    make_slot(days_ahead=1, start="18:00", end="20:00")
    make_slot(days_ahead=1, start="08:00", end="10:00")
    make_slot(days_ahead=2, capacity=1, consumed=1)
    make_slot(days_ahead=-1)

    days = DeliverySlotCapacity(db).available_slots(date.today())

    assert [d["date"] for d in days] == [date.today() + timedelta(days=1)]
    assert [s["time_display"] for s in days[0]["slots"]] == ["08:00 - 10:00", "18:00 - 20:00"]
    assert days[0]["slots"][0]["remaining_capacity"] == 10


def test_concurrent_consumers_of_last_unit(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'slots.db'}",
        connect_args={"check_same_thread": False, "timeout": 10},
    )
    init_db(engine)
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    with Session() as setup:
        slot = DeliverySlotModel(
            date=date.today() + timedelta(days=3),
            start_time="08:00",
            end_time="10:00",
            total_capacity=5,
            consumed_capacity=4,
        )
        setup.add(slot)
        setup.commit()
        slot_id = slot.id

    barrier = threading.Barrier(2)
    outcomes = []

    def consume():
        with Session() as db:
            barrier.wait()
            try:
                with atomic(db, "race"):
                    DeliverySlotCapacity(db).consume(slot_id)
                outcomes.append("ok")
            except InsufficientCapacityError:
                outcomes.append("full")

    threads = [threading.Thread(target=consume) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["full", "ok"]
    with Session() as check:
        assert check.get(DeliverySlotModel, slot_id).consumed_capacity == 5
    engine.dispose()
