from __future__ import annotations

import uuid

from fastapi import HTTPException, Request

from bragger.core.security import decode_access_token
from bragger.models.base import as_uuid


def _bearer_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth[7:].strip() or None


def _user_id_from_token(token: str) -> uuid.UUID | None:
    payload = decode_access_token(token)
    if payload is None:
        return None
    return as_uuid(payload.get("sub"))


async def get_current_user_id(request: Request) -> uuid.UUID:
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(status_code=401, detail="Access token required")
    user_id = _user_id_from_token(token)
    if user_id is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")
    return user_id


async def get_optional_user_id(request: Request) -> uuid.UUID | None:
    token = _bearer_token(request)
    if token is None:
        return None
    return _user_id_from_token(token)
