"""Shared test helpers for Rentaly tests.

Plain functions (not fixtures) importable from any test module.
"""

from __future__ import annotations

import base64
import time
from datetime import date, datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

from rentaly.api.auth import CurrentUser, get_current_user
from rentaly.api.factory import create_app

ISSUER = "https://auth.rentaly.example"
AUDIENCE = "rentaly-api"


def _generate_rsa_keypair():
    """Generate RSA key pair for test JWT signing."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    public_key = private_key.public_key()
    return private_key, public_key


def _create_jwks(public_key, kid: str = "test-key-1") -> dict:
    """Create JWKS from public key."""
    public_numbers = public_key.public_numbers()

    def int_to_base64(n: int) -> str:
        byte_length = (n.bit_length() + 7) // 8
        return (
            base64.urlsafe_b64encode(n.to_bytes(byte_length, "big"))
            .rstrip(b"=")
            .decode()
        )

    return {
        "keys": [
            {
                "kty": "RSA",
                "use": "sig",
                "alg": "RS256",
                "kid": kid,
                "n": int_to_base64(public_numbers.n),
                "e": int_to_base64(public_numbers.e),
            }
        ]
    }


def _create_token(
    private_key,
    kid: str = "test-key-1",
    sub: str = "user-123",
    iss: str = ISSUER,
    aud: str = AUDIENCE,
    exp: int | None = None,
    azp: str | None = None,
) -> str:
    """Create signed JWT for testing."""
    now = int(time.time())
    payload = {
        "sub": sub,
        "iss": iss,
        "aud": aud,
        "exp": exp if exp is not None else now + 3600,
        "iat": now,
    }
    if azp:
        payload["azp"] = azp

    return jwt.encode(payload, private_key, algorithm="RS256", headers={"kid": kid})


def make_user(role: str = "user", user_id: str | None = None) -> CurrentUser:
    return CurrentUser(
        id=user_id or str(uuid4()),
        external_subject=f"sub-{uuid4().hex[:8]}",
        email="guest@example.com",
        name="Test User",
        role=role,
    )


def make_client(user: CurrentUser) -> TestClient:
    """TestClient whose requests are authenticated as ``user``."""
    app = create_app()
    app.dependency_overrides[get_current_user] = lambda: user
    return TestClient(app, raise_server_exceptions=False)


def cursor_for(mock_txn: MagicMock) -> MagicMock:
    """Wire a patched txn() so ``with txn() as cur`` yields the returned mock."""
    cur = MagicMock()
    mock_txn.return_value.__enter__.return_value = cur
    return cur


def make_reservation(**overrides) -> dict:
    """Reservation row as returned by the repository (host_id included)."""
    reservation = {
        "id": str(uuid4()),
        "user_id": str(uuid4()),
        "listing_id": str(uuid4()),
        "host_id": str(uuid4()),
        "start_date": date(2024, 3, 10),
        "end_date": date(2024, 3, 12),
        "total_price": 75000,
        "message": None,
        "type_transaction": "mobile_money",
        "status": "pending",
        "status_client": None,
        "status_hote": None,
        "etat": "non_payer",
        "rental_type": "short-term",
        "motif": None,
        "code_reservation": "RSV-AB12CD",
        "check_in_hours": None,
        "date_visite": None,
        "heure_visite": None,
        "nom_mobile_money": "Jean Malonga",
        "numero_mobile_money": "+242061234567",
        "archived_at": None,
        "created_at": datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
    }
    reservation.update(overrides)
    return reservation


def make_transaction(reservation_id: str, **overrides) -> dict:
    transaction = {
        "id": str(uuid4()),
        "reservation_id": reservation_id,
        "type_transaction": "mobile_money",
        "nom_mobile_money": "Jean Malonga",
        "numero_mobile_money": "+242061234567",
        "reference_transaction": "TX-ZZ9Y8X",
        "montant": 75000,
        "devise": "FCFA",
        "statut": "en_attente",
        "etat": "non_payer",
        "date_transaction": datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
    }
    transaction.update(overrides)
    return transaction


def make_listing(**overrides) -> dict:
    listing = {
        "id": str(uuid4()),
        "user_id": str(uuid4()),
        "title": "Studio Poto-Poto",
        "rental_type": "short-term",
        "price": 25000,
        "price_per_month": None,
        "visit_price": None,
        "amenities": {"wifi": True},
    }
    listing.update(overrides)
    return listing
