import logging

from sqlalchemy import case, delete, func, insert, select, update

from dao.base import BaseDao
from entities import DayOfWeek, Show, TimeOfDay
from models import shows, tickets

log = logging.getLogger(__name__)

# enum declaration order, so MONDAY sorts before FRIDAY and MORNING before NIGHT
_DAY_ORDER = case({day.name: index for index, day in enumerate(DayOfWeek)}, value=shows.c.day)
_TIME_ORDER = case({slot.name: index for index, slot in enumerate(TimeOfDay)}, value=shows.c.time)

_SHOW_COLUMNS = (shows.c.id, shows.c.day, shows.c.time, shows.c.movie)


def _to_show(row):
    return Show(
        id=row.id,
        day=DayOfWeek[row.day],
        time=TimeOfDay[row.time],
        movie=row.movie,
    )


class ShowDao(BaseDao):

    def create(self, show):
        """Store ``show`` and the tickets it carries in one transaction.

        The generated id is written back to ``show`` (and to each ticket's
        ``show_id``) only once the transaction has committed, so a failed call
        leaves the entity without an id.
        """
        log.info("Creating new show")
        with self._connect("Can't create show") as connection:
            result = connection.execute(
                insert(shows).values(day=show.day.name, time=show.time.name, movie=show.movie)
            )
            show_id = result.inserted_primary_key[0]
            if show.tickets:
                connection.execute(
                    insert(tickets),
                    [
                        {
                            "row": ticket.row,
                            "seat": ticket.seat,
                            "price": ticket.price,
                            "sold": False,
                            "show_id": show_id,
                        }
                        for ticket in show.tickets
                    ],
                )
        show.id = show_id
        for ticket in show.tickets:
            ticket.show_id = show_id
        log.info("Show is created with id = %s", show.id)

    def update(self, show):
        log.info("Updating show with id %s", show.id)
        with self._connect("Can't update show") as connection:
            connection.execute(
                update(shows)
                .where(shows.c.id == show.id)
                .values(day=show.day.name, time=show.time.name, movie=show.movie)
            )

    def delete(self, show_id):
        log.info("Deleting show with id %s", show_id)
        with self._connect("Can't delete show") as connection:
            connection.execute(delete(shows).where(shows.c.id == show_id))

    def find(self, show_id):
        log.info("Finding show with id %s", show_id)
        return self._find_one(select(*_SHOW_COLUMNS).where(shows.c.id == show_id), "Can't find show")

    def find_all(self):
        log.info("Finding all shows")
        return self._find_many(select(*_SHOW_COLUMNS))

    def find_by_day(self, day):
        log.info("Finding shows by day %s", day.name)
        return self._find_many(select(*_SHOW_COLUMNS).where(shows.c.day == day.name))

    def find_by_time(self, time):
        log.info("Finding shows by time %s", time.name)
        return self._find_many(select(*_SHOW_COLUMNS).where(shows.c.time == time.name))

    def find_by_day_and_time(self, day, time):
        log.info("Finding show by day %s and time %s", day.name, time.name)
        query = select(*_SHOW_COLUMNS).where(shows.c.day == day.name, shows.c.time == time.name)
        return self._find_one(query, "Can't find show")

    def find_by_movie(self, pattern):
        """Case-insensitive ``LIKE`` match; callers add their own ``%`` wildcards."""
        log.info("Finding shows by movie '%s'", pattern)
        query = select(*_SHOW_COLUMNS).where(func.upper(shows.c.movie).like(func.upper(pattern)))
        return self._find_many(query)

    def find_by_ticket(self, ticket_id):
        log.info("Finding show by ticket with id %s", ticket_id)
        query = (
            select(*_SHOW_COLUMNS)
            .join(tickets, tickets.c.show_id == shows.c.id)
            .where(tickets.c.id == ticket_id)
        )
        return self._find_one(query, "Can't find show")

    def _find_one(self, query, failure_message):
        with self._connect(failure_message) as connection:
            row = connection.execute(query).first()
        return _to_show(row) if row is not None else None

    def _find_many(self, query):
        with self._connect("Can't find shows") as connection:
            rows = connection.execute(query.order_by(_DAY_ORDER, _TIME_ORDER)).all()
        return [_to_show(row) for row in rows]
