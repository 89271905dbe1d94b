"""
bacefook.api.routes.users — User CRUD & friendship endpoints
=============================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Engine

from bacefook.api.deps import get_config, get_engine
from bacefook.config import BacefookConfig
from bacefook.services import analytics_service, friendship_service, user_service

router = APIRouter(prefix="/users", tags=["users"])

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Columns that may be cleared with an explicit null on update.
NULLABLE_FIELDS = {"bio", "avatar"}


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class UserCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    username: str = Field(min_length=3, max_length=30)
    first_name: str = Field(alias="firstName", min_length=1, max_length=100)
    last_name: str = Field(alias="lastName", min_length=1, max_length=100)
    bio: str | None = None
    avatar: str | None = Field(default=None, max_length=500)
    referred_by_id: str | None = Field(default=None, alias="referredById")


class UserUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=30)
    first_name: str | None = Field(default=None, alias="firstName", min_length=1, max_length=100)
    last_name: str | None = Field(default=None, alias="lastName", min_length=1, max_length=100)
    bio: str | None = None
    avatar: str | None = Field(default=None, max_length=500)


class FriendRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    friend_id: str = Field(alias="friendId", min_length=1)


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------
@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, engine: Engine = Depends(get_engine)):
    """Register a user (awards referral points up to two levels)."""
    return user_service.create_user(engine, **body.model_dump())


@router.get("")
def list_users(
    search: str | None = Query(None),
    page: int = Query(1),
    limit: int | None = Query(None),
    engine: Engine = Depends(get_engine),
    cfg: BacefookConfig = Depends(get_config),
):
    """Paginated user listing with optional search."""
    return analytics_service.find_all(
        engine,
        search=search,
        page=page,
        limit=limit or cfg.default_page_size,
        max_limit=cfg.max_page_size,
    )


@router.get("/{user_id}")
def get_user(user_id: str, engine: Engine = Depends(get_engine)):
    """Full profile with live network strength."""
    return analytics_service.find_one(engine, user_id)


@router.patch("/{user_id}")
def update_user(user_id: str, body: UserUpdate, engine: Engine = Depends(get_engine)):
    """Partial profile update; the referrer cannot be changed."""
    changes = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    return user_service.update_user(engine, user_id, **changes)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, engine: Engine = Depends(get_engine)):
    user_service.delete_user(engine, user_id)


# ---------------------------------------------------------------------------
# Friends
# ---------------------------------------------------------------------------
@router.post("/{user_id}/friends")
def add_friend(user_id: str, body: FriendRequest, engine: Engine = Depends(get_engine)):
    return friendship_service.add_friend(engine, user_id, body.friend_id)


@router.delete("/{user_id}/friends/{friend_id}")
def remove_friend(user_id: str, friend_id: str, engine: Engine = Depends(get_engine)):
    return friendship_service.remove_friend(engine, user_id, friend_id)


@router.get("/{user_id}/friends")
def list_friends(
    user_id: str,
    page: int = Query(1),
    limit: int | None = Query(None),
    engine: Engine = Depends(get_engine),
    cfg: BacefookConfig = Depends(get_config),
):
    """Paginated friend list."""
    return friendship_service.get_friends(
        engine,
        user_id,
        page=page,
        limit=limit or cfg.default_page_size,
        max_limit=cfg.max_page_size,
    )
