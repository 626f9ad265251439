import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import DAY, HOUR, NOW
from shareit.core.errors import ConflictError, NotFoundError, ValidationError
from shareit.domain import BookingStatus
from shareit.repositories.sql import SqlBookingRepository, SqlStorage
from shareit.services import booking_service, item_service, user_service


def book(w, start, end, booker=None, item=None):
    return booking_service.create_booking(
        w.store, (item or w.item).id, start, end, (booker or w.booker).id
    )


def listed_ids(bookings):
    return [b.id for b in bookings]


# --- creation

def test_new_booking_is_waiting(world):
    b = book(world, NOW + DAY, NOW + 2 * DAY)

    assert b.id is not None
    assert b.status is BookingStatus.WAITING
    assert b.item.id == world.item.id
    assert b.item.owner_id == world.owner.id
    assert b.booker.id == world.booker.id
    assert b.booker.email == "booker@example.com"


@pytest.mark.parametrize("start,end", [
    (NOW + DAY, NOW + DAY),
    (NOW + 2 * DAY, NOW + DAY),
    (None, NOW + DAY),
    (NOW + DAY, None),
    (None, None),
])
def test_bad_dates_rejected_and_nothing_stored(world, start, end):
    with pytest.raises(ValidationError, match="Invalid booking dates"):
        book(world, start, end)

    assert booking_service.list_by_booker(world.store, world.booker.id, "ALL", 0, 10, now=NOW) == []


def test_unavailable_item_cannot_be_booked(world):
    item_service.update_item(world.store, world.item.id, world.owner.id, available=False)

    with pytest.raises(ValidationError, match="not available"):
        book(world, NOW + DAY, NOW + 2 * DAY)


def test_owner_cannot_book_own_item(world):
    with pytest.raises(ValidationError, match="Owner cannot book own item"):
        book(world, NOW + DAY, NOW + 2 * DAY, booker=world.owner)


def test_unknown_booker_and_item(world):
    with pytest.raises(NotFoundError, match="User"):
        booking_service.create_booking(world.store, 999, NOW + DAY, NOW + 2 * DAY, 999)
    with pytest.raises(NotFoundError, match="Item"):
        booking_service.create_booking(world.store, 999, NOW + DAY, NOW + 2 * DAY, world.booker.id)


def test_first_failing_precondition_wins(world):
    item_service.update_item(world.store, world.item.id, world.owner.id, available=False)

    # unavailable, owner's own item and bad dates at once: availability is checked first
    with pytest.raises(ValidationError, match="not available"):
        book(world, NOW + 2 * DAY, NOW + DAY, booker=world.owner)


def test_overlapping_bookings_are_accepted(world):
    first = book(world, NOW + DAY, NOW + 2 * DAY)
    second = book(world, NOW + DAY + HOUR, NOW + 3 * DAY)

    assert first.status is BookingStatus.WAITING
    assert second.status is BookingStatus.WAITING
    assert first.id != second.id
    assert world.store.items.get(world.item.id).available is True


# --- approval

def test_approve_then_approve_again_conflicts(world):
    b = book(world, NOW + DAY, NOW + 2 * DAY)

    approved = booking_service.set_approval(world.store, b.id, world.owner.id, True)
    assert approved.status is BookingStatus.APPROVED

    with pytest.raises(ConflictError):
        booking_service.set_approval(world.store, b.id, world.owner.id, True)
    with pytest.raises(ConflictError):
        booking_service.set_approval(world.store, b.id, world.owner.id, False)

    assert booking_service.get_booking(world.store, b.id, world.owner.id).status is BookingStatus.APPROVED


def test_reject(world):
    b = book(world, NOW + DAY, NOW + 2 * DAY)

    rejected = booking_service.set_approval(world.store, b.id, world.owner.id, False)

    assert rejected.status is BookingStatus.REJECTED
    with pytest.raises(ConflictError):
        booking_service.set_approval(world.store, b.id, world.owner.id, False)


@pytest.mark.parametrize("actor", ["booker", "stranger"])
def test_only_owner_decides(world, actor):
    b = book(world, NOW + DAY, NOW + 2 * DAY)

    with pytest.raises(ValidationError, match="owner"):
        booking_service.set_approval(world.store, b.id, getattr(world, actor).id, True)

    assert booking_service.get_booking(world.store, b.id, world.booker.id).status is BookingStatus.WAITING


def test_decide_missing_booking(world):
    with pytest.raises(NotFoundError):
        booking_service.set_approval(world.store, 404, world.owner.id, True)


def test_transition_only_from_expected_status(world):
    b = book(world, NOW + DAY, NOW + 2 * DAY)

    with world.store.transaction():
        assert world.store.bookings.transition(b.id, BookingStatus.WAITING, BookingStatus.APPROVED)
        assert not world.store.bookings.transition(b.id, BookingStatus.WAITING, BookingStatus.REJECTED)
        assert not world.store.bookings.transition(12345, BookingStatus.WAITING, BookingStatus.REJECTED)

    assert world.store.bookings.get(b.id).status is BookingStatus.APPROVED


def test_concurrent_approvals_have_one_winner(memory_store):
    owner = user_service.create_user(memory_store, "Owner", "o@example.com")
    booker = user_service.create_user(memory_store, "Booker", "b@example.com")
    item = item_service.create_item(memory_store, owner.id, "Saw", "Hand saw", True)
    b = booking_service.create_booking(memory_store, item.id, NOW + DAY, NOW + 2 * DAY, booker.id)
    barrier = threading.Barrier(4)

    def decide(approved):
        barrier.wait()
        try:
            return booking_service.set_approval(memory_store, b.id, owner.id, approved).status
        except ConflictError:
            return "conflict"

    with ThreadPoolExecutor(max_workers=4) as pool:
        outcomes = list(pool.map(decide, [True, False, True, False]))

    assert outcomes.count("conflict") == 3
    winner = next(o for o in outcomes if o != "conflict")
    assert memory_store.bookings.get(b.id).status == winner


def test_concurrent_sql_approvals_have_one_winner(sql_file_sessions, monkeypatch):
    setup = SqlStorage(sql_file_sessions())
    owner = user_service.create_user(setup, "Owner", "o@example.com")
    booker = user_service.create_user(setup, "Booker", "b@example.com")
    item = item_service.create_item(setup, owner.id, "Saw", "Hand saw", True)
    b = booking_service.create_booking(setup, item.id, NOW + DAY, NOW + 2 * DAY, booker.id)
    setup.db.close()

    barrier = threading.Barrier(2, timeout=10)
    read = SqlBookingRepository.get

    def read_then_wait(self, booking_id, for_update=False):
        booking = read(self, booking_id, for_update)
        if for_update:
            # both deciders have seen WAITING before either one writes
            barrier.wait()
        return booking

    monkeypatch.setattr(SqlBookingRepository, "get", read_then_wait)

    def decide(approved):
        db = sql_file_sessions()
        try:
            return booking_service.set_approval(SqlStorage(db), b.id, owner.id, approved).status
        except ConflictError:
            return "conflict"
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(decide, [True, False]))

    assert outcomes.count("conflict") == 1
    winner = next(o for o in outcomes if o != "conflict")
    monkeypatch.undo()
    check = SqlStorage(sql_file_sessions())
    assert check.bookings.get(b.id).status == winner
    check.db.close()


def test_listing_while_bookings_are_written(memory_store):
    owner = user_service.create_user(memory_store, "Owner", "o@example.com")
    booker = user_service.create_user(memory_store, "Booker", "b@example.com")
    item = item_service.create_item(memory_store, owner.id, "Saw", "Hand saw", True)

    def writer():
        for i in range(300):
            start = NOW + i * HOUR
            booking_service.create_booking(memory_store, item.id, start, start + HOUR, booker.id)
            try:
                # rejected after the transaction opened, so the store rolls back
                booking_service.create_booking(memory_store, item.id, start, start, booker.id)
            except ValidationError:
                pass

    t = threading.Thread(target=writer)
    t.start()
    try:
        while t.is_alive():
            booking_service.list_by_booker(memory_store, booker.id, "ALL", 0, 20)
            booking_service.list_by_owner(memory_store, owner.id, "FUTURE", 0, 20, now=NOW)
    finally:
        t.join()

    assert len(booking_service.list_by_booker(memory_store, booker.id, "ALL", 0, 500)) == 300


# --- retrieval

def test_get_booking_visible_to_booker_and_owner_only(world):
    b = book(world, NOW + DAY, NOW + 2 * DAY)

    assert booking_service.get_booking(world.store, b.id, world.booker.id).id == b.id
    assert booking_service.get_booking(world.store, b.id, world.owner.id).id == b.id
    with pytest.raises(ValidationError, match="Access denied"):
        booking_service.get_booking(world.store, b.id, world.stranger.id)


def test_get_missing_booking(world):
    with pytest.raises(NotFoundError):
        booking_service.get_booking(world.store, 12345, world.booker.id)


# --- listings

@pytest.fixture
def timeline(world):
    """Past (approved), current (waiting), future (rejected), far future (waiting)."""
    past = book(world, NOW - 3 * DAY, NOW - 2 * DAY)
    current = book(world, NOW - HOUR, NOW + HOUR)
    future = book(world, NOW + DAY, NOW + 2 * DAY)
    far = book(world, NOW + 5 * DAY, NOW + 6 * DAY)
    booking_service.set_approval(world.store, past.id, world.owner.id, True)
    booking_service.set_approval(world.store, future.id, world.owner.id, False)
    world.past, world.current, world.future, world.far = past, current, future, far
    return world


@pytest.mark.parametrize("state,expected", [
    ("ALL", ["far", "future", "current", "past"]),
    ("CURRENT", ["current"]),
    ("PAST", ["past"]),
    ("FUTURE", ["far", "future"]),
    ("WAITING", ["far", "current"]),
    ("APPROVED", ["past"]),
    ("REJECTED", ["future"]),
])
def test_state_filters_for_booker_and_owner(timeline, state, expected):
    w = timeline
    want = [getattr(w, name).id for name in expected]

    by_booker = booking_service.list_by_booker(w.store, w.booker.id, state, 0, 10, now=NOW)
    by_owner = booking_service.list_by_owner(w.store, w.owner.id, state, 0, 10, now=NOW)

    assert listed_ids(by_booker) == want
    assert listed_ids(by_owner) == want


def test_state_is_case_insensitive(timeline):
    w = timeline
    got = booking_service.list_by_booker(w.store, w.booker.id, "current", 0, 10, now=NOW)
    assert listed_ids(got) == [w.current.id]


@pytest.mark.parametrize("token", ["unsupported", "CANCELED", "", "past "])
def test_unknown_state_names_the_token(world, token):
    with pytest.raises(ValidationError) as exc:
        booking_service.list_by_booker(world.store, world.booker.id, token, 0, 10)
    assert str(exc.value) == f"Unknown state: {token}"

    with pytest.raises(ValidationError, match="Unknown state"):
        booking_service.list_by_owner(world.store, world.owner.id, token, 0, 10)


def test_current_window_edges(world):
    starts_now = book(world, NOW, NOW + HOUR)
    ends_now = book(world, NOW - HOUR, NOW)

    current = booking_service.list_by_booker(world.store, world.booker.id, "CURRENT", 0, 10, now=NOW)
    past = booking_service.list_by_booker(world.store, world.booker.id, "PAST", 0, 10, now=NOW)

    assert listed_ids(current) == [starts_now.id]
    # end == now is neither current nor past
    assert ends_now.id not in listed_ids(past)


def test_scenario_current_then_past_is_empty(world):
    b = book(world, NOW + DAY, NOW + 2 * DAY)
    midway = NOW + DAY + 12 * HOUR

    current = booking_service.list_by_booker(world.store, world.booker.id, "CURRENT", 0, 10, now=midway)
    past = booking_service.list_by_booker(world.store, world.booker.id, "PAST", 0, 10, now=midway)

    assert listed_ids(current) == [b.id]
    assert past == []


def test_paging_uses_containing_page(world):
    made = [book(world, NOW + i * DAY, NOW + i * DAY + HOUR) for i in range(1, 6)]
    newest_first = [b.id for b in reversed(made)]

    def page(from_, size):
        return listed_ids(booking_service.list_by_booker(world.store, world.booker.id, "ALL", from_, size, now=NOW))

    assert page(0, 2) == newest_first[0:2]
    assert page(2, 2) == newest_first[2:4]
    # from=3 is not a multiple of 2: the page containing it (index 1) is returned
    assert page(3, 2) == newest_first[2:4]
    assert page(4, 2) == newest_first[4:5]
    assert page(10, 2) == []


@pytest.mark.parametrize("from_,size", [(-1, 10), (0, 0), (0, -5)])
def test_bad_paging_parameters(world, from_, size):
    with pytest.raises(ValidationError):
        booking_service.list_by_booker(world.store, world.booker.id, "ALL", from_, size)


def test_listing_for_unknown_user(world):
    with pytest.raises(NotFoundError):
        booking_service.list_by_booker(world.store, 999, "ALL", 0, 10)
    with pytest.raises(NotFoundError):
        booking_service.list_by_owner(world.store, 999, "ALL", 0, 10)


def test_owner_listing_only_covers_own_items(world):
    other_owner = user_service.create_user(world.store, "Other", "other@example.com")
    other_item = item_service.create_item(world.store, other_owner.id, "Ladder", "Tall ladder", True)
    mine = book(world, NOW + DAY, NOW + 2 * DAY)
    book(world, NOW + DAY, NOW + 2 * DAY, item=other_item)

    got = booking_service.list_by_owner(world.store, world.owner.id, "ALL", 0, 10, now=NOW)

    assert listed_ids(got) == [mine.id]
    assert booking_service.list_by_owner(world.store, world.booker.id, "ALL", 0, 10, now=NOW) == []
