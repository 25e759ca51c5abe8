"""Tests for guest, host and admin reservation views."""

from __future__ import annotations

from unittest.mock import patch
from uuid import uuid4

import pytest

from rentaly.domain.errors import AuthorizationError, ReservationNotFoundError
from rentaly.domain.projections import (
    get_reservation_view,
    list_all_reservations,
    list_guest_reservations,
    list_host_reservations,
)
from tests.helpers import cursor_for, make_listing, make_reservation, make_transaction

MODULE = "rentaly.domain.projections"


@pytest.fixture
def store():
    with patch(f"{MODULE}.txn") as mock_txn, \
         patch(f"{MODULE}.list_reservations") as mock_list, \
         patch(f"{MODULE}.count_reservations", return_value=1) as mock_count, \
         patch(f"{MODULE}.get_reservation") as mock_get, \
         patch(f"{MODULE}.get_listings_by_ids") as mock_listings, \
         patch(f"{MODULE}.list_images") as mock_images, \
         patch(f"{MODULE}.get_public_users") as mock_users, \
         patch(f"{MODULE}.list_for_reservations") as mock_transactions:
        cur = cursor_for(mock_txn)
        yield {
            "cur": cur,
            "list": mock_list,
            "count": mock_count,
            "get": mock_get,
            "listings": mock_listings,
            "images": mock_images,
            "users": mock_users,
            "transactions": mock_transactions,
        }


def _seed(store, reservation):
    listing = make_listing(id=reservation["listing_id"], user_id=reservation["host_id"])
    transaction = make_transaction(reservation["id"])
    store["listings"].return_value = {listing["id"]: listing}
    store["images"].return_value = {listing["id"]: [{"id": "img-1", "url": "https://cdn.example/1.jpg"}]}
    store["users"].return_value = {
        reservation["user_id"]: {"id": reservation["user_id"], "name": "Jean", "email": "j@example.com", "role": "user"}
    }
    store["transactions"].return_value = {reservation["id"]: [transaction]}
    return listing, transaction


class TestViews:
    def test_guest_view_is_joined_and_serialized(self, store):
        reservation = make_reservation()
        store["list"].return_value = [reservation]
        listing, _ = _seed(store, reservation)

        page = list_guest_reservations(reservation["user_id"])

        store["list"].assert_called_once_with(
            store["cur"], limit=50, offset=0, user_id=reservation["user_id"], include_archived=False
        )
        assert page["total"] == 1
        view = page["reservations"][0]
        assert view["start_date"] == "2024-03-10"
        assert view["created_at"] == "2024-03-01T09:00:00+00:00"
        assert "host_id" not in view
        assert view["listing"]["title"] == listing["title"]
        assert view["listing"]["images"][0]["url"] == "https://cdn.example/1.jpg"
        assert view["user"]["name"] == "Jean"
        assert view["transactions"][0]["date_transaction"] == "2024-03-01T09:00:00+00:00"
        # guest sees their own number
        assert view["numero_mobile_money"] == "+242061234567"
        assert view["transactions"][0]["numero_mobile_money"] == "+242061234567"

    def test_host_view_masks_guest_number(self, store):
        reservation = make_reservation()
        store["list"].return_value = [reservation]
        _seed(store, reservation)

        view = list_host_reservations(reservation["host_id"])["reservations"][0]

        assert view["numero_mobile_money"].endswith("67")
        assert "0612345" not in view["numero_mobile_money"]
        assert "0612345" not in view["transactions"][0]["numero_mobile_money"]

    def test_host_listing_filter_archived_flag_and_paging(self, store):
        store["list"].return_value = []
        store["count"].return_value = 120
        store["listings"].return_value = {}
        store["images"].return_value = {}
        store["users"].return_value = {}
        store["transactions"].return_value = {}

        page = list_host_reservations(
            "host-1", listing_id="l-1", include_archived=True, limit=20, offset=100
        )

        assert page == {"reservations": [], "total": 120}
        store["list"].assert_called_once_with(
            store["cur"],
            limit=20,
            offset=100,
            host_id="host-1",
            listing_id="l-1",
            include_archived=True,
        )
        store["count"].assert_called_once_with(
            store["cur"], host_id="host-1", listing_id="l-1", include_archived=True
        )

    def test_admin_listing_reveals_numbers(self, store):
        reservation = make_reservation()
        store["list"].return_value = [reservation]
        _seed(store, reservation)

        view = list_all_reservations(str(uuid4()), is_admin=True)["reservations"][0]

        assert view["numero_mobile_money"] == "+242061234567"

    def test_admin_listing_forbidden_for_users(self, store):
        with pytest.raises(AuthorizationError):
            list_all_reservations(str(uuid4()), is_admin=False)
        store["list"].assert_not_called()


class TestGetReservationView:
    def test_host_can_read(self, store):
        reservation = make_reservation()
        store["get"].return_value = reservation
        _seed(store, reservation)

        view = get_reservation_view(reservation["id"], viewer_id=reservation["host_id"])
        assert view["id"] == reservation["id"]

    def test_stranger_forbidden(self, store):
        store["get"].return_value = make_reservation()
        with pytest.raises(AuthorizationError):
            get_reservation_view(str(uuid4()), viewer_id=str(uuid4()))

    def test_unknown(self, store):
        store["get"].return_value = None
        with pytest.raises(ReservationNotFoundError):
            get_reservation_view(str(uuid4()), viewer_id=str(uuid4()))
