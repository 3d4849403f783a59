"""SQLAlchemy adapter – relational outbox store and unit of work."""
from mp_outbox.adapters.sqlalchemy.outbox import SqlAlchemyOutboxQueries, SqlAlchemyOutboxRepository
from mp_outbox.adapters.sqlalchemy.session import SqlAlchemySessionFactory
from mp_outbox.adapters.sqlalchemy.tables import (
    create_outbox_tables,
    metadata,
    outbox_failures_table,
    outbox_publications_table,
    outbox_table,
)
from mp_outbox.adapters.sqlalchemy.uow import RepositoriesFactory, SqlAlchemyUowPerformer

__all__ = [
    "RepositoriesFactory",
    "SqlAlchemyOutboxQueries",
    "SqlAlchemyOutboxRepository",
    "SqlAlchemySessionFactory",
    "SqlAlchemyUowPerformer",
    "create_outbox_tables",
    "metadata",
    "outbox_failures_table",
    "outbox_publications_table",
    "outbox_table",
]
