"""Tests for /reservations endpoints (domain layer mocked)."""

from __future__ import annotations

from unittest.mock import patch
from uuid import uuid4

from rentaly.domain.errors import (
    AuthorizationError,
    ConflictError,
    DatesUnavailableError,
    ReservationNotFoundError,
    ValidationError,
)
from tests.helpers import make_client, make_user

DOMAIN = "rentaly.domain.reservations"
PROJECTIONS = "rentaly.domain.projections"


class TestCreate:
    def test_passes_body_and_caller(self):
        user = make_user()
        client = make_client(user)
        listing_id = str(uuid4())
        created = {
            "success": True,
            "code_reservation": "RSV-AB12CD",
            "reference_transaction": "TX-ZZ9Y8X",
            "reservation": {"id": str(uuid4())},
            "transaction": {"id": str(uuid4())},
        }

        with patch(f"{DOMAIN}.create_reservation", return_value=created) as mock_create:
            response = client.post(
                "/reservations",
                json={
                    "listingId": listing_id,
                    "startDate": "2024-03-10",
                    "endDate": "2024-03-12",
                    "totalPrice": 75000,
                    "type_transaction": "mobile_money",
                    "numero_mobile_money": "+242061234567",
                },
            )

        assert response.status_code == 200
        assert response.json()["code_reservation"] == "RSV-AB12CD"
        kwargs = mock_create.call_args.kwargs
        assert kwargs["guest_id"] == user.id
        assert kwargs["listing_id"] == listing_id
        assert kwargs["start_date"] == "2024-03-10"
        assert kwargs["total_price"] == 75000
        assert kwargs["numero_mobile_money"] == "+242061234567"

    def test_overlap_is_400_with_french_message(self):
        client = make_client(make_user())
        with patch(
            f"{DOMAIN}.create_reservation",
            side_effect=DatesUnavailableError("Ces dates sont déjà réservées"),
        ):
            response = client.post("/reservations", json={"listingId": str(uuid4())})

        assert response.status_code == 400
        assert response.json() == {"error": "Ces dates sont déjà réservées"}

    def test_missing_field_is_400(self):
        client = make_client(make_user())
        with patch(
            f"{DOMAIN}.create_reservation",
            side_effect=ValidationError("Missing required field: type_transaction"),
        ):
            response = client.post("/reservations", json={})

        assert response.status_code == 400
        assert "type_transaction" in response.json()["error"]


class TestReads:
    def test_list_my_reservations(self):
        user = make_user()
        client = make_client(user)
        page = {"reservations": [{"id": "r"}], "total": 1}
        with patch(f"{PROJECTIONS}.list_guest_reservations", return_value=page) as mock_list:
            response = client.get("/reservations?include_archived=true")

        assert response.json() == page
        mock_list.assert_called_once_with(user.id, include_archived=True, limit=50, offset=0)

    def test_list_passes_limit_and_offset(self):
        user = make_user()
        client = make_client(user)
        page = {"reservations": [], "total": 75}
        with patch(f"{PROJECTIONS}.list_guest_reservations", return_value=page) as mock_list:
            response = client.get("/reservations?limit=25&offset=50")

        assert response.json()["total"] == 75
        mock_list.assert_called_once_with(user.id, include_archived=False, limit=25, offset=50)

    def test_limit_above_cap_is_400(self):
        client = make_client(make_user())
        with patch(f"{PROJECTIONS}.list_guest_reservations") as mock_list:
            response = client.get("/reservations?limit=500")

        assert response.status_code == 400
        assert "limit" in response.json()["error"]
        mock_list.assert_not_called()

    def test_hosting_filter(self):
        user = make_user()
        client = make_client(user)
        listing_id = str(uuid4())
        page = {"reservations": [], "total": 0}
        with patch(f"{PROJECTIONS}.list_host_reservations", return_value=page) as mock_list:
            response = client.get(f"/reservations/hosting?listingId={listing_id}&offset=10")

        assert response.status_code == 200
        mock_list.assert_called_once_with(
            user.id, listing_id=listing_id, include_archived=False, limit=50, offset=10
        )

    def test_get_one_forbidden(self):
        client = make_client(make_user())
        with patch(f"{PROJECTIONS}.get_reservation_view", side_effect=AuthorizationError("Accès interdit")):
            response = client.get(f"/reservations/{uuid4()}")
        assert response.status_code == 403

    def test_get_one_not_found(self):
        client = make_client(make_user())
        with patch(
            f"{PROJECTIONS}.get_reservation_view",
            side_effect=ReservationNotFoundError("Réservation non trouvée"),
        ):
            response = client.get(f"/reservations/{uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"error": "Réservation non trouvée"}


class TestTransitions:
    def test_cancel_response_shape(self):
        user = make_user()
        client = make_client(user)
        reservation_id = str(uuid4())
        result = {"success": True, "message": "Réservation annulée avec succès", "reservation": {}}

        with patch(f"{DOMAIN}.cancel_reservation", return_value=result) as mock_cancel:
            response = client.patch(f"/reservations/{reservation_id}/cancel")

        assert response.json() == {"success": True, "message": "Réservation annulée avec succès"}
        mock_cancel.assert_called_once_with(reservation_id, actor_id=user.id, is_admin=False)

    def test_admin_cancel_passes_role(self):
        admin = make_user(role="admin")
        client = make_client(admin)
        reservation_id = str(uuid4())
        result = {"success": True, "message": "Réservation annulée avec succès", "reservation": {}}

        with patch(f"{DOMAIN}.cancel_reservation", return_value=result) as mock_cancel:
            client.patch(f"/reservations/{reservation_id}/cancel")

        mock_cancel.assert_called_once_with(reservation_id, actor_id=admin.id, is_admin=True)

    def test_archive_conflict(self):
        client = make_client(make_user())
        with patch(
            f"{DOMAIN}.archive_reservation",
            side_effect=ConflictError("Seules les réservations annulées peuvent être archivées"),
        ):
            response = client.patch(f"/reservations/{uuid4()}/archive")

        assert response.status_code == 400
        assert "annulées" in response.json()["error"]

    def test_confirm_payment(self):
        user = make_user()
        client = make_client(user)
        reservation_id = str(uuid4())
        result = {"message": "Paiement confirmé avec succès", "reservation": {"id": reservation_id}}

        with patch(f"{DOMAIN}.confirm_payment_by_host", return_value=result) as mock_confirm:
            response = client.patch(f"/reservations/{reservation_id}/confirm-payment")

        assert response.json()["message"] == "Paiement confirmé avec succès"
        mock_confirm.assert_called_once_with(reservation_id, actor_id=user.id)

    def test_validate_arrival(self):
        user = make_user()
        client = make_client(user)
        reservation_id = str(uuid4())
        result = {"message": "Arrivée validée avec succès", "reservation": {}}

        with patch(f"{DOMAIN}.validate_arrival", return_value=result) as mock_validate:
            response = client.patch(f"/reservations/{reservation_id}/validate-arrival")

        assert response.status_code == 200
        mock_validate.assert_called_once_with(reservation_id, actor_id=user.id)

    def test_host_confirm_returns_count(self):
        user = make_user()
        client = make_client(user)
        reservation_id = str(uuid4())

        with patch(f"{DOMAIN}.host_confirm_reservation", return_value={"count": 0}) as mock_confirm:
            response = client.patch(f"/reservations/{reservation_id}")

        assert response.json() == {"count": 0}
        mock_confirm.assert_called_once_with(reservation_id, actor_id=user.id)

    def test_admin_confirm(self):
        admin = make_user(role="admin")
        client = make_client(admin)
        reservation_id = str(uuid4())

        with patch(f"{DOMAIN}.confirm_reservation_payment", return_value={"success": True}) as mock_confirm:
            client.patch(f"/reservations/{reservation_id}/confirm")

        mock_confirm.assert_called_once_with(reservation_id, is_admin=True)

    def test_delete_returns_count(self):
        user = make_user()
        client = make_client(user)
        reservation_id = str(uuid4())

        with patch(f"{DOMAIN}.delete_reservation", return_value={"count": 1}) as mock_delete:
            response = client.delete(f"/reservations/{reservation_id}")

        assert response.json() == {"count": 1}
        mock_delete.assert_called_once_with(reservation_id, actor_id=user.id)

    def test_malformed_id_never_reaches_domain(self):
        client = make_client(make_user())
        with patch(f"{DOMAIN}.cancel_reservation") as mock_cancel:
            response = client.patch("/reservations/not-a-uuid/cancel")

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid reservation_id")
        mock_cancel.assert_not_called()
