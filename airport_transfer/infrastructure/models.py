"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``accounts``  -- sign-in identities (e-mail/password or verified phone)
* ``profiles``  -- role and contact details, keyed by account id
* ``bookings``  -- transfer requests and their lifecycle status

Indexes
-------
* **B-Tree** on ``bookings.owner_id``, ``status`` and ``created_at`` for the
  customer dashboard, the admin filters and the newest-first listing.
* ``(owner_id, idempotency_key)`` is unique so a retried submit cannot
  create a second booking.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from .database import Base
from airport_transfer.domain.enums import BookingStatus, Role, VehicleClass


def _values(enum_cls):
    return [member.value for member in enum_cls]


class AccountModel(Base):
    __tablename__ = "accounts"

    id = Column(String(32), primary_key=True)
    email = Column(String(255), unique=True, nullable=True)
    phone_number = Column(String(32), unique=True, nullable=True)
    hashed_password = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ProfileModel(Base):
    __tablename__ = "profiles"

    id = Column(String(32), ForeignKey("accounts.id"), primary_key=True)
    role = Column(
        Enum(Role, name="accountrole", values_callable=_values),
        default=Role.USER,
        nullable=False,
    )
    email = Column(String(255), nullable=True)
    display_name = Column(String(120), nullable=True)
    contact_phone = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class BookingModel(Base):
    __tablename__ = "bookings"

    # Surrogate key; also records insertion order for stable listings.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False)
    owner_id = Column(String(32), ForeignKey("accounts.id"), nullable=False)

    pickup = Column("pickup_location", String(255), nullable=False)
    drop = Column("drop_location", String(255), nullable=False)
    scheduled_at = Column(DateTime(timezone=True), nullable=False)

    vehicle_class = Column(
        Enum(VehicleClass, name="vehicleclass", values_callable=_values),
        nullable=False,
    )
    fare = Column(Integer, nullable=False)
    status = Column(
        Enum(BookingStatus, name="bookingstatus", values_callable=_values),
        default=BookingStatus.PENDING,
        nullable=False,
    )
    idempotency_key = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "owner_id", "idempotency_key", name="uq_bookings_owner_idempotency"
        ),
        Index("idx_bookings_owner", "owner_id"),
        Index("idx_bookings_status", "status"),
        Index("idx_bookings_created", "created_at"),
    )
