"""Caller identity for the Ordering API.

Authentication happens upstream; by the time a request reaches this service
the caller's id travels in the ``X-User-Id`` header. Older clients send it as
a ``user_id`` query parameter instead.
"""

from fastapi import Header, Query
from protean.exceptions import ValidationError


def current_user_id(
    x_user_id: str | None = Header(default=None),
    user_id: str | None = Query(default=None),
) -> str:
    resolved = (x_user_id or user_id or "").strip()
    if not resolved:
        raise ValidationError({"user_id": ["user_id is required"]})
    return resolved
