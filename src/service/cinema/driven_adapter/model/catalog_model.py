from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime_type import UTCDateTime


class MovieModel(Base):
    __tablename__ = 'movie'
    __table_args__ = (CheckConstraint('duration_minutes > 0', name='ck_movie_duration'),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    genre: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    rating: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)


class HallModel(Base):
    __tablename__ = 'hall'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    screen_type: Mapped[str] = mapped_column(String(20), nullable=False, default='standard')
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)


class SeatModel(Base):
    __tablename__ = 'seat'
    __table_args__ = (
        UniqueConstraint('hall_id', 'row_label', 'seat_number', name='uq_seat_position'),
        CheckConstraint(
            "category IN ('standard', 'premium', 'vip')", name='ck_seat_category'
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hall_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('hall.id', ondelete='CASCADE'), nullable=False, index=True
    )
    row_label: Mapped[str] = mapped_column(String(5), nullable=False)
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default='standard')


class ShowtimeModel(Base):
    __tablename__ = 'showtime'
    __table_args__ = (
        UniqueConstraint('hall_id', 'show_date', 'start_time', name='uq_showtime_hall_start'),
        CheckConstraint('end_time > start_time', name='ck_showtime_window'),
        CheckConstraint('price >= 0', name='ck_showtime_price'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    movie_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('movie.id', ondelete='CASCADE'), nullable=False, index=True
    )
    hall_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('hall.id', ondelete='CASCADE'), nullable=False, index=True
    )
    show_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
