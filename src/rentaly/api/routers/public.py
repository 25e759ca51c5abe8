"""Unauthenticated service routes."""

from fastapi import APIRouter

router = APIRouter(tags=["public"])


@router.get("/health")
def health() -> dict:
    """Liveness probe; does not touch the database."""
    return {"status": "ok"}
