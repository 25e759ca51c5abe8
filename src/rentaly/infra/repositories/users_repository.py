"""Users repository - local accounts linked to OIDC subjects."""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor

# Only these fields are ever embedded in reservation views.
PUBLIC_USER_COLUMNS = ("id", "name", "email", "role")


def get_user_by_subject(cur: PgCursor, external_subject: str) -> dict[str, Any] | None:
    cur.execute(
        """
        SELECT id, external_subject, email, name, role
        FROM users
        WHERE external_subject = %s
        """,
        (external_subject,),
    )
    row = cur.fetchone()
    if row is None:
        return None
    return {
        "id": str(row[0]),
        "external_subject": row[1],
        "email": row[2],
        "name": row[3],
        "role": row[4],
    }


def get_public_users(cur: PgCursor, user_ids: list[str]) -> dict[str, dict[str, Any]]:
    """Public profiles keyed by id."""
    if not user_ids:
        return {}
    cur.execute(
        f"""
        SELECT {", ".join(PUBLIC_USER_COLUMNS)}
        FROM users
        WHERE id = ANY(%s::uuid[])
        """,
        (user_ids,),
    )
    users = {}
    for row in cur.fetchall():
        user = dict(zip(PUBLIC_USER_COLUMNS, row))
        user["id"] = str(user["id"])
        users[user["id"]] = user
    return users
