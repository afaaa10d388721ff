#!/usr/bin/env python3
"""
Database Seed Script
Populate demo catalog data into the database

Features:
1. Create tables if missing
2. Create a movie, a hall with its seat layout, and one showtime per slot

Notes:
- Seat layout size comes from the SEAT_ROWS / SEATS_PER_ROW environment variables
- Re-running against a seeded database fails on the unique hall name
"""

import asyncio
from datetime import date, time, timedelta
import os
import string

from sqlalchemy import text

from src.platform.config.di import container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.service.cinema.app.command.create_showtime_use_case import CreateShowtimeUseCase
from src.service.cinema.domain.entity.catalog_entity import Hall, Movie, build_seat_layout
from src.service.cinema.domain.enum.seat_category import SeatCategory


SLOTS = [(time(13, 0), time(15, 15)), (time(16, 0), time(18, 15)), (time(19, 0), time(21, 15))]
TICKET_PRICE = 450


def _layout() -> dict[str, int]:
    rows = int(os.getenv('SEAT_ROWS', '10'))
    per_row = int(os.getenv('SEATS_PER_ROW', '12'))
    return {label: per_row for label in string.ascii_uppercase[:rows]}


def _categories(rows: dict[str, int]) -> dict[str, SeatCategory]:
    # Back two rows are premium, last row is VIP
    labels = list(rows)
    categories = {label: SeatCategory.PREMIUM for label in labels[-3:-1]}
    categories[labels[-1]] = SeatCategory.VIP
    return categories


async def create_catalog(uow_factory: UnitOfWorkFactory) -> tuple[int, int]:
    """Returns (movie_id, hall_id)"""
    rows = _layout()
    async with uow_factory() as uow:
        movie = await uow.catalog_command_repo.create_movie(
            movie=Movie(title='Spirited Away', duration_minutes=125, genre='animation', rating='PG')
        )
        hall, seats = await uow.catalog_command_repo.create_hall(
            hall=Hall(name='Hall 1', capacity=sum(rows.values()), screen_type='imax'),
            seats=build_seat_layout(hall_id=0, rows=rows, categories=_categories(rows)),
        )
        await uow.commit()

    assert movie.id is not None and hall.id is not None
    print(f'   ✅ Created movie: ID={movie.id}, Title={movie.title}')
    print(f'   ✅ Created hall: ID={hall.id}, Name={hall.name}, Seats={len(seats)}')
    return movie.id, hall.id


async def create_showtimes(uow_factory: UnitOfWorkFactory, movie_id: int, hall_id: int) -> None:
    use_case = CreateShowtimeUseCase(uow_factory=uow_factory)
    show_date = date.today() + timedelta(days=1)
    for start, end in SLOTS:
        showtime = await use_case.create(
            movie_id=movie_id,
            hall_id=hall_id,
            show_date=show_date,
            start_time=start,
            end_time=end,
            price=TICKET_PRICE,
        )
        print(f'   ✅ Created showtime: ID={showtime.id}, {show_date} {start}-{end}')


async def verify_data(uow_factory: UnitOfWorkFactory) -> None:
    """Verify seeded data"""
    print('🔍 Verifying seeded data...')
    async with uow_factory() as uow:
        assert uow.session is not None
        for table in ['movie', 'hall', 'seat', 'showtime']:
            count = (await uow.session.execute(text(f'SELECT COUNT(*) FROM {table}'))).scalar()
            print(f'   {table.capitalize()} count: {count}')


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    database = container.database()
    uow_factory = container.unit_of_work.provider
    try:
        await database.create_all()
        movie_id, hall_id = await create_catalog(uow_factory)
        await create_showtimes(uow_factory, movie_id, hall_id)
        await verify_data(uow_factory)
        print('=' * 50)
        print('🌱 Data seeding completed!')
    finally:
        await database.dispose()


if __name__ == '__main__':
    asyncio.run(main())
