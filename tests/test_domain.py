import pytest

from conftest import DAY, NOW
from shareit.core.errors import ValidationError
from shareit.domain import Booking, BookingState, BookingStatus, Item, User
from shareit.services.common import page_window


def make_booking(start, end, status=BookingStatus.WAITING):
    return Booking(
        start=start,
        end=end,
        item=Item(name="Drill", description="", available=True, owner_id=1, id=1),
        booker=User(name="B", email="b@example.com", id=2),
        status=status,
    )


@pytest.mark.parametrize("token,expected", [
    ("all", BookingState.ALL),
    ("Current", BookingState.CURRENT),
    ("WAITING", BookingState.WAITING),
    (BookingState.PAST, BookingState.PAST),
])
def test_parse_state(token, expected):
    assert BookingState.parse(token) is expected


@pytest.mark.parametrize("token", ["canceled", "bogus", None])
def test_parse_unknown_state(token):
    with pytest.raises(ValidationError, match=f"Unknown state: {token}"):
        BookingState.parse(token)


def test_status_filters_map_to_persisted_status():
    assert BookingState.WAITING.status is BookingStatus.WAITING
    assert BookingState.REJECTED.status is BookingStatus.REJECTED
    assert BookingState.CURRENT.status is None
    assert BookingState.ALL.status is None
    # query-only states have no persisted counterpart
    assert {s.value for s in BookingState} - {s.value for s in BookingStatus} == {"ALL", "CURRENT", "PAST", "FUTURE"}


def test_matches():
    past = make_booking(NOW - 2 * DAY, NOW - DAY, BookingStatus.APPROVED)
    future = make_booking(NOW + DAY, NOW + 2 * DAY)

    assert BookingState.PAST.matches(past, NOW)
    assert not BookingState.FUTURE.matches(past, NOW)
    assert BookingState.APPROVED.matches(past, NOW)
    assert BookingState.FUTURE.matches(future, NOW)
    assert BookingState.WAITING.matches(future, NOW)
    assert not BookingState.CURRENT.matches(future, NOW)
    assert BookingState.ALL.matches(future, NOW)


def test_decide():
    b = make_booking(NOW, NOW + DAY)
    b.decide(False)
    assert b.status is BookingStatus.REJECTED


@pytest.mark.parametrize("from_,size,window", [
    (0, 10, (0, 10)),
    (10, 10, (10, 10)),
    (15, 10, (10, 10)),
    (9, 10, (0, 10)),
    (7, 3, (6, 3)),
])
def test_page_window(from_, size, window):
    assert page_window(from_, size) == window
