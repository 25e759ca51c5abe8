"""Auth routes - user identity endpoints."""

from fastapi import APIRouter, Depends

from rentaly.api.auth import CurrentUser, get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/whoami")
def whoami(user: CurrentUser = Depends(get_current_user)) -> dict:
    """Return the caller's account, role included."""
    return {
        "id": user.id,
        "external_subject": user.external_subject,
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }
