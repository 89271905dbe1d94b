"""
bacefook.database.models — SQLAlchemy 2.0 Data Models
======================================================

Tables:
- users              — Member profiles; ``referred_by_id`` forms the referral forest
- friendships        — Directed (user, friend) rows, always written in symmetric pairs
- referral_points    — Running referral-point counter, one row per user
- network_strengths  — Cached network-strength score, one row per user
- events             — Append-only mutation journal (time-series source)
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Bacefook ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class EventType(enum.StrEnum):
    """Every mutation recorded in the event journal."""
    REGISTER = "register"
    REFERRAL = "referral"
    UPDATED = "updated"
    DELETED = "deleted"
    ADD_FRIEND = "addfriend"
    UNFRIEND = "unfriend"


# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests).
JsonPayload = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Friendships — self-referential many-to-many on users
# ---------------------------------------------------------------------------
friendships = Table(
    "friendships",
    Base.metadata,
    Column(
        "user_id", String(36),
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "friend_id", String(36),
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
    ),
    Index("ix_friendships_friend_id", "friend_id"),
)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    bio: Mapped[str | None] = mapped_column(Text, default=None)
    avatar: Mapped[str | None] = mapped_column(String(500), default=None)
    # Set once at registration; never updated afterwards.
    referred_by_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), default=None,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    friends: Mapped[list[User]] = relationship(
        secondary=friendships,
        primaryjoin=lambda: User.id == friendships.c.user_id,
        secondaryjoin=lambda: User.id == friendships.c.friend_id,
        back_populates="friend_of",
        order_by=lambda: [User.created_at, User.id],
    )
    friend_of: Mapped[list[User]] = relationship(
        secondary=friendships,
        primaryjoin=lambda: User.id == friendships.c.friend_id,
        secondaryjoin=lambda: User.id == friendships.c.user_id,
        back_populates="friends",
    )
    referred_by: Mapped[User | None] = relationship(
        remote_side=lambda: [User.id], back_populates="referrals",
    )
    referrals: Mapped[list[User]] = relationship(
        back_populates="referred_by",
        order_by=lambda: [User.created_at, User.id],
    )
    referral_point: Mapped[ReferralPoint | None] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    network_strength: Mapped[NetworkStrength | None] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_users_referred_by_created", "referred_by_id", "created_at"),
        Index("ix_users_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


# ---------------------------------------------------------------------------
# ReferralPoint — running counter, incremented via atomic upsert
# ---------------------------------------------------------------------------
class ReferralPoint(Base):
    __tablename__ = "referral_points"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    user: Mapped[User] = relationship(back_populates="referral_point")

    __table_args__ = (
        Index("ix_referral_points_points", "points"),
    )

    def __repr__(self) -> str:
        return f"<ReferralPoint user={self.user_id} points={self.points}>"


# ---------------------------------------------------------------------------
# NetworkStrength — fully recomputed cache
# ---------------------------------------------------------------------------
class NetworkStrength(Base):
    __tablename__ = "network_strengths"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    strength: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    user: Mapped[User] = relationship(back_populates="network_strength")

    __table_args__ = (
        Index("ix_network_strengths_strength", "strength"),
    )

    def __repr__(self) -> str:
        return f"<NetworkStrength user={self.user_id} strength={self.strength}>"


# ---------------------------------------------------------------------------
# Event — append-only mutation journal
# ---------------------------------------------------------------------------
class Event(Base):
    """Append-only record of every graph/profile mutation.

    The ``addfriend`` rows are the only timestamped trace of when a
    friendship was formed, so friend time-series are rebuilt from here.
    ``processed`` is always ``True``; nothing consumes the log asynchronously.
    """
    __tablename__ = "events"

    # INTEGER on SQLite so the rowid alias autoincrements.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"), primary_key=True, autoincrement=True
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JsonPayload, nullable=False, default=dict)
    processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_events_type_created", "type", "created_at"),
    )

    def to_dict(self) -> dict[str, Any]:
        created = self.created_at
        if created is not None and created.tzinfo is None:
            created = created.replace(tzinfo=UTC)
        return {
            "type": self.type,
            "data": self.data,
            "createdAt": created.isoformat() if created else None,
            "processed": self.processed,
        }

    def __repr__(self) -> str:
        return f"<Event id={self.id} type={self.type!r} ts={self.created_at}>"
