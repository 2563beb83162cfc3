import logging
from dataclasses import dataclass

import bcrypt

from dao import ShowDao, TicketDao, UserDao
from entities import DayOfWeek, Show, Ticket, TimeOfDay

log = logging.getLogger(__name__)


def hash_password(password, pepper):
    salt = bcrypt.gensalt()
    password_with_pepper = password.encode('utf-8') + pepper
    hashed_password = bcrypt.hashpw(password_with_pepper, salt)
    return hashed_password, salt


def verify_password(entered_password, stored_hashed_password, stored_salt, pepper):
    entered_password_with_pepper = entered_password.encode('utf-8') + pepper
    hashed_entered_password = bcrypt.hashpw(entered_password_with_pepper, stored_salt)
    return hashed_entered_password == stored_hashed_password


class ShowService:
    def __init__(self, show_dao, hall_rows, hall_seats, ticket_price):
        self.show_dao = show_dao
        self.hall_rows = hall_rows
        self.hall_seats = hall_seats
        self.ticket_price = ticket_price

    def create_show(self, day, time, movie):
        """Schedule ``movie`` in a free slot together with a full hall of tickets.

        Returns the stored show, or ``None`` when the slot is already taken.
        """
        if self.show_dao.find_by_day_and_time(day, time) is not None:
            log.warning("Slot %s %s is already taken", day.name, time.name)
            return None
        show = Show(day=day, time=time, movie=movie)
        show.tickets = [
            Ticket(row=row, seat=seat, price=self.ticket_price)
            for row in range(1, self.hall_rows + 1)
            for seat in range(1, self.hall_seats + 1)
        ]
        self.show_dao.create(show)
        return show

    def cancel_show(self, day, time):
        show = self.show_dao.find_by_day_and_time(day, time)
        if show is None:
            return False
        self.show_dao.delete(show.id)
        return True

    def get_schedule(self):
        schedule = {day: {time: None for time in TimeOfDay} for day in DayOfWeek}
        for show in self.show_dao.find_all():
            schedule[show.day][show.time] = show
        return schedule

    def find_by_day_and_time(self, day, time):
        return self.show_dao.find_by_day_and_time(day, time)

    def find_by_ticket(self, ticket_id):
        return self.show_dao.find_by_ticket(ticket_id)

    def search(self, text):
        return self.show_dao.find_by_movie(f"%{text.strip()}%")


class TicketService:
    def __init__(self, ticket_dao):
        self.ticket_dao = ticket_dao

    def find(self, ticket_id):
        return self.ticket_dao.find(ticket_id)

    def find_by_show(self, show_id):
        return self.ticket_dao.find_by_show(show_id)

    def find_by_user(self, user_id):
        return self.ticket_dao.find_by_user(user_id)

    def buy(self, ticket_id, user_id):
        return self.ticket_dao.buy_unsold_ticket(ticket_id, user_id)

    def cancel(self, ticket_id):
        self.ticket_dao.delete(ticket_id)


class UserService:
    def __init__(self, user_dao, pepper):
        self.user_dao = user_dao
        self.pepper = pepper.encode('utf-8')

    def register(self, user, password):
        """Hash ``password`` onto ``user`` and store it; ``None`` if the email is taken."""
        if self.user_dao.find_by_email(user.email) is not None:
            log.warning("User with email %s already exists", user.email)
            return None
        user.password, user.salt = hash_password(password, self.pepper)
        self.user_dao.create(user)
        return user

    def authenticate(self, email, password):
        user = self.user_dao.find_by_email(email)
        if user is None:
            return None
        if not verify_password(password, user.password, user.salt, self.pepper):
            return None
        return user

    def find(self, user_id):
        return self.user_dao.find(user_id)

    def find_by_email(self, email):
        return self.user_dao.find_by_email(email)

    def find_all(self):
        return self.user_dao.find_all()

    def delete(self, user_id):
        self.user_dao.delete(user_id)


@dataclass
class Services:
    shows: ShowService
    tickets: TicketService
    users: UserService


def build_services(engine, config):
    return Services(
        shows=ShowService(
            ShowDao(engine),
            hall_rows=config["HALL_ROWS"],
            hall_seats=config["HALL_SEATS"],
            ticket_price=config["TICKET_PRICE"],
        ),
        tickets=TicketService(TicketDao(engine)),
        users=UserService(UserDao(engine), pepper=config["PEPPER"]),
    )
