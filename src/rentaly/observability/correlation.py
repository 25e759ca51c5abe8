"""Correlation ID management for request tracing."""

import re
import uuid
from contextvars import ContextVar, Token

# Accessible from any code running inside the request context
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Incoming IDs are echoed into logs and headers, so only accept a safe charset
_VALID_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def resolve_correlation_id(incoming: str | None) -> str:
    """Keep a well-formed incoming ID, otherwise generate a fresh one."""
    if incoming and _VALID_CORRELATION_ID.match(incoming):
        return incoming
    return generate_correlation_id()


def get_correlation_id() -> str:
    """Get current correlation ID from context."""
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    """Set correlation ID in context."""
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    """Reset correlation ID to previous value."""
    correlation_id_var.reset(token)
