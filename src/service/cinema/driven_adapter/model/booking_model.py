from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime_type import UTCDateTime


class BookingModel(Base):
    __tablename__ = 'booking'
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')", name='ck_booking_status'
        ),
        CheckConstraint('total_amount >= 0', name='ck_booking_total'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    showtime_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('showtime.id', ondelete='CASCADE'), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), default='pending', nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    idempotency_key: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True, unique=True
    )
    hold_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    conflict_seat_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    tickets: Mapped[List['TicketModel']] = relationship(
        back_populates='booking', cascade='all, delete-orphan', passive_deletes=True
    )


class TicketModel(Base):
    __tablename__ = 'ticket'
    __table_args__ = (
        # At most one active ticket per (showtime, seat); enforced atomically at insert
        Index(
            'uq_ticket_active_seat',
            'showtime_id',
            'seat_id',
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        CheckConstraint("status IN ('active', 'cancelled')", name='ck_ticket_status'),
        CheckConstraint('price >= 0', name='ck_ticket_price'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('booking.id', ondelete='CASCADE'), nullable=False, index=True
    )
    # Copied from the booking so the seat guard is a single-table index
    showtime_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('showtime.id', ondelete='CASCADE'), nullable=False
    )
    seat_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('seat.id', ondelete='CASCADE'), nullable=False
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='active', nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    booking: Mapped['BookingModel'] = relationship(back_populates='tickets')
