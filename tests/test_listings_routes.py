"""Tests for /listings endpoints (domain layer mocked)."""

from __future__ import annotations

from unittest.mock import patch
from uuid import uuid4

from fastapi.testclient import TestClient

from rentaly.api.factory import create_app
from rentaly.domain.errors import AuthorizationError, ListingNotFoundError, ValidationError
from tests.helpers import make_client, make_listing, make_user

DOMAIN = "rentaly.domain.listings"


class TestCreate:
    def test_caller_becomes_owner(self):
        user = make_user()
        client = make_client(user)
        listing = make_listing(user_id=user.id)

        with patch(f"{DOMAIN}.create_listing", return_value=listing) as mock_create:
            response = client.post(
                "/listings",
                json={"title": "Studio Poto-Poto", "price": 25000, "images": ["https://cdn.example/1.jpg"]},
            )

        assert response.status_code == 201
        assert response.json()["id"] == listing["id"]
        mock_create.assert_called_once_with(
            user.id,
            title="Studio Poto-Poto",
            rental_type=None,
            price=25000,
            price_per_month=None,
            visit_price=None,
            amenities=None,
            images=["https://cdn.example/1.jpg"],
        )

    def test_unknown_field_is_400(self):
        client = make_client(make_user())
        with patch(f"{DOMAIN}.create_listing") as mock_create:
            response = client.post("/listings", json={"title": "Studio", "owner": "someone"})

        assert response.status_code == 400
        mock_create.assert_not_called()

    def test_requires_authentication(self):
        client = TestClient(create_app())
        assert client.post("/listings", json={"title": "Studio"}).status_code == 401


class TestRead:
    def test_public(self):
        client = TestClient(create_app())
        listing = make_listing()
        with patch(f"{DOMAIN}.get_listing_view", return_value=listing) as mock_get:
            response = client.get(f"/listings/{listing['id']}")

        assert response.status_code == 200
        assert response.json()["title"] == listing["title"]
        mock_get.assert_called_once_with(listing["id"])

    def test_deleted_is_404(self):
        client = TestClient(create_app())
        with patch(f"{DOMAIN}.get_listing_view", side_effect=ListingNotFoundError("Annonce non trouvée")):
            response = client.get(f"/listings/{uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"error": "Annonce non trouvée"}


class TestUpdate:
    def test_passes_only_sent_fields(self):
        user = make_user()
        client = make_client(user)
        listing_id = str(uuid4())

        with patch(f"{DOMAIN}.update_listing", return_value={"id": listing_id}) as mock_update:
            response = client.put(
                f"/listings/{listing_id}", json={"price": 30000, "amenities": {"wifi": True}}
            )

        assert response.status_code == 200
        mock_update.assert_called_once_with(
            listing_id,
            actor_id=user.id,
            changes={"price": 30000, "amenities": {"wifi": True}},
        )

    def test_non_owner_is_403(self):
        client = make_client(make_user())
        with patch(f"{DOMAIN}.update_listing", side_effect=AuthorizationError("Accès interdit")):
            response = client.put(f"/listings/{uuid4()}", json={"title": "Mine"})

        assert response.status_code == 403
        assert response.json() == {"error": "Accès interdit"}

    def test_empty_body_is_400(self):
        client = make_client(make_user())
        with patch(
            f"{DOMAIN}.update_listing",
            side_effect=ValidationError("Aucune donnée fournie pour la mise à jour"),
        ):
            response = client.put(f"/listings/{uuid4()}", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Aucune donnée fournie pour la mise à jour"}


class TestDelete:
    def test_owner_deletes(self):
        user = make_user()
        client = make_client(user)
        listing_id = str(uuid4())

        with patch(
            f"{DOMAIN}.delete_listing", return_value={"message": "Listing supprimé avec succès"}
        ) as mock_delete:
            response = client.delete(f"/listings/{listing_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Listing supprimé avec succès"}
        mock_delete.assert_called_once_with(listing_id, actor_id=user.id)

    def test_unknown_is_404(self):
        client = make_client(make_user())
        with patch(f"{DOMAIN}.delete_listing", side_effect=ListingNotFoundError("Annonce non trouvée")):
            response = client.delete(f"/listings/{uuid4()}")

        assert response.status_code == 404

    def test_malformed_id_is_400(self):
        client = make_client(make_user())
        with patch(f"{DOMAIN}.delete_listing") as mock_delete:
            response = client.delete("/listings/not-a-uuid")

        assert response.status_code == 400
        mock_delete.assert_not_called()
