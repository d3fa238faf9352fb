from types import SimpleNamespace

from app.services.conflict_index import ConflictIndex


def test_marking_a_cell_blocks_room_trainer_and_class():
    index = ConflictIndex()
    index.mark_used(1, "p1", "room-a", "trainer-a", "class-a")

    assert not index.is_available(1, "p1", "room-a", "trainer-b", "class-b")
    assert not index.is_available(1, "p1", "room-b", "trainer-a", "class-b")
    assert not index.is_available(1, "p1", "room-b", "trainer-b", "class-a")
    assert index.is_available(1, "p1", "room-b", "trainer-b", "class-b")


def test_other_day_or_period_stays_free():
    index = ConflictIndex()
    index.mark_used(1, "p1", "room-a", "trainer-a", "class-a")

    assert index.is_available(2, "p1", "room-a", "trainer-a", "class-a")
    assert index.is_available(1, "p2", "room-a", "trainer-a", "class-a")


def test_resource_namespaces_do_not_collide():
    index = ConflictIndex()
    # A room and a trainer sharing an id must not block each other.
    index.mark_used(3, "p1", "shared-id", "trainer-a", "class-a")

    assert index.is_available(3, "p1", "room-b", "shared-id", "class-b")


def test_available_rooms_filters_taken_rooms_and_respects_trainer():
    index = ConflictIndex()
    index.mark_used(1, "p1", "room-a", "trainer-a", "class-a")

    assert index.available_rooms(1, "p1", ["room-a", "room-b", "room-c"], "trainer-b", "class-b") == [
        "room-b",
        "room-c",
    ]
    assert index.available_rooms(1, "p1", ["room-b", "room-c"], "trainer-a", "class-b") == []


def test_empty_index_is_usable_and_counts_keys():
    index = ConflictIndex()
    assert len(index) == 0
    index.mark_used(1, "p1", "room-a", "trainer-a", "class-a")
    assert len(index) == 3


def test_from_slots_seeds_existing_bookings():
    existing = [
        SimpleNamespace(day_of_week=1, lesson_period_id="p1", room_id="r1", trainer_id="t1", class_id="c1"),
        SimpleNamespace(day_of_week=2, lesson_period_id="p2", room_id="r2", trainer_id="t2", class_id="c2"),
    ]
    index = ConflictIndex.from_slots(existing)

    assert not index.is_available(1, "p1", "r1", "tx", "cx")
    assert not index.is_available(2, "p2", "rx", "t2", "cx")
    assert index.is_available(1, "p2", "r1", "t1", "c1")
