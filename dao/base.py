import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

log = logging.getLogger(__name__)


class DaoError(Exception):
    """Any failure of the persistence layer, chained to the SQLAlchemy error that caused it."""


class BaseDao:
    """Shared connection handling for the DAOs.

    Every operation runs inside :meth:`_connect`, which takes a pooled
    connection from the engine, commits when the block finishes, rolls back
    when it raises and always hands the connection back to the pool.
    """

    def __init__(self, engine):
        self._engine = engine

    @contextmanager
    def _connect(self, failure_message):
        try:
            with self._engine.begin() as connection:
                yield connection
        except SQLAlchemyError as exc:
            log.error(failure_message, exc_info=True)
            raise DaoError(failure_message) from exc
