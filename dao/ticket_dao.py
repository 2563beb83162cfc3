import logging

from sqlalchemy import delete, insert, select, update

from dao.base import BaseDao
from entities import Ticket
from models import tickets

log = logging.getLogger(__name__)


def _to_ticket(row):
    return Ticket(
        id=row.id,
        row=row.row,
        seat=row.seat,
        price=row.price,
        sold=bool(row.sold),
        show_id=row.show_id,
        user_id=row.user_id,
    )


class TicketDao(BaseDao):

    def create(self, ticket, show_id):
        log.info("Creating new ticket for show with id %s", show_id)
        with self._connect("Can't create ticket") as connection:
            result = connection.execute(
                insert(tickets).values(
                    row=ticket.row,
                    seat=ticket.seat,
                    price=ticket.price,
                    sold=ticket.sold,
                    show_id=show_id,
                )
            )
            ticket_id = result.inserted_primary_key[0]
        ticket.id = ticket_id
        ticket.show_id = show_id
        log.info("Ticket is created with id = %s", ticket.id)

    def update(self, ticket, show_id):
        log.info("Updating ticket with id %s", ticket.id)
        with self._connect("Can't update ticket") as connection:
            connection.execute(
                update(tickets)
                .where(tickets.c.id == ticket.id)
                .values(
                    row=ticket.row,
                    seat=ticket.seat,
                    price=ticket.price,
                    sold=ticket.sold,
                    show_id=show_id,
                )
            )

    def delete(self, ticket_id):
        # no check on the sold flag: a sold ticket is removed the same way, without any refund step
        log.info("Deleting ticket with id %s", ticket_id)
        with self._connect("Can't delete ticket") as connection:
            connection.execute(delete(tickets).where(tickets.c.id == ticket_id))

    def find(self, ticket_id):
        log.info("Finding ticket with id %s", ticket_id)
        with self._connect("Can't find ticket") as connection:
            row = connection.execute(select(tickets).where(tickets.c.id == ticket_id)).first()
        return _to_ticket(row) if row is not None else None

    def find_all(self):
        log.info("Finding all tickets")
        return self._find_many(select(tickets))

    def find_by_user(self, user_id):
        log.info("Finding tickets by user with id %s", user_id)
        return self._find_many(select(tickets).where(tickets.c.user_id == user_id))

    def find_by_show(self, show_id):
        log.info("Finding tickets by show with id %s", show_id)
        return self._find_many(select(tickets).where(tickets.c.show_id == show_id))

    def find_by_state(self, sold):
        log.info("Finding tickets with sold = %s", sold)
        return self._find_many(select(tickets).where(tickets.c.sold == sold))

    def buy_ticket(self, ticket_id, user_id):
        """Mark the ticket sold to ``user_id`` whatever its current state.

        Two buyers of the same ticket both succeed and the later one keeps
        it; :meth:`buy_unsold_ticket` is the guarded variant.
        """
        log.info("User with id %s buys ticket with id %s", user_id, ticket_id)
        with self._connect("Can't buy ticket") as connection:
            connection.execute(
                update(tickets).where(tickets.c.id == ticket_id).values(sold=True, user_id=user_id)
            )

    def buy_unsold_ticket(self, ticket_id, user_id):
        """Sell the ticket only if it is still unsold; return whether this call got it."""
        log.info("User with id %s buys unsold ticket with id %s", user_id, ticket_id)
        with self._connect("Can't buy ticket") as connection:
            result = connection.execute(
                update(tickets)
                .where(tickets.c.id == ticket_id, tickets.c.sold.is_(False))
                .values(sold=True, user_id=user_id)
            )
            won = result.rowcount == 1
        if not won:
            log.warning("Ticket with id %s is already sold or missing", ticket_id)
            return False
        return True

    def _find_many(self, query):
        with self._connect("Can't find tickets") as connection:
            rows = connection.execute(query.order_by(tickets.c.id)).all()
        return [_to_ticket(row) for row in rows]
