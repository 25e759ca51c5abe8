"""Role checks layered on top of get_current_user.

Ownership (guest of a reservation, owner of a listing) is row-level and is
checked by the domain functions; only the marketplace-wide admin role is a
route dependency.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException

from rentaly.api.auth import CurrentUser, get_current_user


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """FastAPI dependency: the caller, who must be an admin.

    Raises:
        HTTPException: 403 for non-admin callers.
    """
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Accès réservé aux administrateurs")
    return user
