from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.api.deps import get_current_user_id
from bragger.core.rate_limit import limiter
from bragger.core.security import create_access_token, hash_password, verify_password
from bragger.database import get_db
from bragger.models.user import User
from bragger.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from bragger.schemas.common import ok

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


async def _user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


@router.post("/register", status_code=201)
@limiter.limit("5/minute")
async def register(request: Request, body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    if await _user_by_email(db, body.email) is not None:
        raise HTTPException(400, "User with this email already exists")

    user = User(
        email=body.email.lower(),
        name=body.name.strip(),
        password_hash=hash_password(body.password),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(400, "User with this email already exists") from None
    logger.info("User %s registered", user.id)

    auth = AuthResponse(user=UserResponse.model_validate(user), token=create_access_token(user.id))
    return ok(auth, "User registered successfully")


@router.post("/login")
@limiter.limit("10/minute")
async def login(request: Request, body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await _user_by_email(db, body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(401, "Invalid email or password")

    auth = AuthResponse(user=UserResponse.model_validate(user), token=create_access_token(user.id))
    return ok(auth, "Login successful")


@router.get("/profile")
async def profile(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(404, "User not found")
    return ok(UserResponse.model_validate(user))
