"""
Cinema service fixtures

- `database`: a fresh SQLite file per test with the schema created
- `uow_factory`: what the container hands to use cases, bound to that database
- `seed_catalog` / `seeded`: one movie, one hall (rows A and B, 5 seats each), one showtime
- `api_client`: the real app over httpx ASGITransport, container pointed at `database`
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import date, time
from pathlib import Path

import attrs
from dependency_injector import providers
from fastapi import FastAPI
import httpx
import pytest

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork, UnitOfWorkFactory
from src.service.cinema.domain.entity.catalog_entity import (
    Hall,
    Movie,
    Showtime,
    build_seat_layout,
)
from src.service.cinema.domain.enum.seat_category import SeatCategory


SHOW_DATE = date(2025, 1, 10)
TICKET_PRICE = 450


@attrs.define
class SeededShowtime:
    movie: Movie
    hall: Hall
    showtime: Showtime
    seats: dict[str, int]  # label (e.g. 'A1') -> seat id

    @property
    def showtime_id(self) -> int:
        assert self.showtime.id is not None
        return self.showtime.id


def _sqlite_url(path: Path) -> str:
    return f'sqlite+aiosqlite:///{path}'


@pytest.fixture
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    db = Database(url=_sqlite_url(tmp_path / 'cinema.db'), lock_timeout_ms=5000)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def database_without_fk(tmp_path: Path) -> AsyncIterator[Database]:
    """Foreign keys off, so tests can plant the corruption the audit looks for."""
    db = Database(
        url=_sqlite_url(tmp_path / 'cinema_nofk.db'),
        lock_timeout_ms=5000,
        enforce_foreign_keys=False,
    )
    await db.create_all()
    yield db
    await db.dispose()


def _uow_factory_for(db: Database) -> UnitOfWorkFactory:
    return lambda: SqlAlchemyUnitOfWork(session_factory=db.session)


@pytest.fixture
def uow_factory(database: Database) -> UnitOfWorkFactory:
    return _uow_factory_for(database)


async def _seed(
    uow_factory: UnitOfWorkFactory,
    *,
    hall_name: str = 'Hall 1',
    rows: dict[str, int] | None = None,
    price: int = TICKET_PRICE,
    start: time = time(19, 0),
    end: time = time(21, 30),
) -> SeededShowtime:
    rows = rows or {'A': 5, 'B': 5}
    async with uow_factory() as uow:
        movie = await uow.catalog_command_repo.create_movie(
            movie=Movie(title='Spirited Away', duration_minutes=125, genre='animation')
        )
        hall, seats = await uow.catalog_command_repo.create_hall(
            hall=Hall(name=hall_name, capacity=sum(rows.values())),
            seats=build_seat_layout(
                hall_id=0, rows=rows, categories={'B': SeatCategory.PREMIUM}
            ),
        )
        assert movie.id is not None and hall.id is not None
        showtime = await uow.catalog_command_repo.create_showtime(
            showtime=Showtime.create(
                movie_id=movie.id,
                hall_id=hall.id,
                show_date=SHOW_DATE,
                start_time=start,
                end_time=end,
                price=price,
            )
        )
        await uow.commit()

    return SeededShowtime(
        movie=movie,
        hall=hall,
        showtime=showtime,
        seats={seat.label: seat.id for seat in seats if seat.id is not None},
    )


@pytest.fixture
def seed_catalog(
    uow_factory: UnitOfWorkFactory,
) -> Callable[..., Awaitable[SeededShowtime]]:
    async def _seed_with(**kwargs) -> SeededShowtime:
        return await _seed(uow_factory, **kwargs)

    return _seed_with


@pytest.fixture
async def seeded(uow_factory: UnitOfWorkFactory) -> SeededShowtime:
    return await _seed(uow_factory)


@pytest.fixture
def uow_factory_without_fk(database_without_fk: Database) -> UnitOfWorkFactory:
    return _uow_factory_for(database_without_fk)


@pytest.fixture
async def seeded_without_fk(uow_factory_without_fk: UnitOfWorkFactory) -> SeededShowtime:
    return await _seed(uow_factory_without_fk)


@asynccontextmanager
async def _test_lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield


@pytest.fixture
async def api_client(database: Database) -> AsyncIterator[httpx.AsyncClient]:
    container.database.override(providers.Object(database))
    container.wire(modules=WIRE_MODULES)
    app = create_app(lifespan=_test_lifespan, title_suffix=' (Test)')
    try:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url='http://test'
        ) as client:
            yield client
    finally:
        container.unwire()
        container.database.reset_override()
