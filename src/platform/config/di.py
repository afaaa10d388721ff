"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.platform.metrics.booking_metrics import metrics


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (one engine per process)
    database = providers.Singleton(Database.from_settings, settings=config_service)

    # A fresh UoW (session + transaction) per call; use cases receive the provider
    # itself via `unit_of_work.provider` and open one UoW per transaction
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_factory=database.provided.session
    )

    # Observability
    booking_metrics = providers.Object(metrics)


container = Container()


def cleanup() -> None:
    container.reset_singletons()
