"""Request handlers selected by the ``command`` parameter.

Each handler reads its parameters from the current request, calls the
services it was bound to, publishes what the view needs and returns the name
of the view (a template under ``templates/``). Small selections and the
logged-in user live in the session; lists are request attributes.
"""
import logging
from enum import Enum
from functools import partial

from flask import g, request, session
from marshmallow import ValidationError

from entities import DayOfWeek, Role, TimeOfDay, User
from schemas import error_list, register_schema, slot_schema

log = logging.getLogger(__name__)

COMMAND_PARAM = "command"
DAY_PARAM = "day"
TIME_PARAM = "time"
MOVIE_PARAM = "movie"
TICKET_ID_PARAM = "ticketId"
USER_ID_PARAM = "userId"
EMAIL_PARAM = "email"
PASSWORD_PARAM = "password"
FIRSTNAME_PARAM = "firstname"
LASTNAME_PARAM = "lastname"
ROLES_PARAM = "roles"
LOCALE_PARAM = "locale"

# session keys
DAY_ATTR = "day"
TIME_ATTR = "time"
LOGGED_USER_ATTR = "loggedUser"
LOCALE_ATTR = "locale"

# request attribute keys
DAYS_ATTR = "days"
TIMES_ATTR = "times"
SCHEDULE_ATTR = "schedule"
SHOW_ATTR = "show"
SHOWS_ATTR = "shows"
TICKETS_ATTR = "tickets"
USERS_ATTR = "users"
ERRORS_ATTR = "errors"
MESSAGE_ATTR = "message"

MAIN_VIEW = "schedule"
LOGIN_VIEW = "login"
REGISTER_VIEW = "register"
MOVIE_VIEW = "movie"
HALL_VIEW = "hall"
TICKETS_VIEW = "tickets"
USERS_VIEW = "users"

SUPPORTED_LOCALES = ("en", "ru", "uk")


class Action(str, Enum):
    LOGIN = "login"
    CHECK_LOGIN = "checkLogin"
    TICKETS = "tickets"
    LOGOUT = "logout"
    REGISTER_USER = "registerUser"
    ADD_USER = "addUser"
    CANCEL_MOVIE = "cancelMovie"
    ADD_MOVIE = "addMovie"
    CREATE_MOVIE = "createMovie"
    HALL = "hall"
    USERS = "users"
    DELETE_USER = "deleteUser"
    BUY_TICKET = "buyTicket"
    CHANGE_LOCALE = "changeLocale"
    CANCEL_TICKET = "cancelTicket"

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return None


def publish(key, value):
    g.setdefault("attributes", {})[key] = value


def logged_user(services):
    """The logged-in user as currently stored, so deleted accounts and revoked roles take effect."""
    cached = User.from_session(session.get(LOGGED_USER_ATTR))
    if cached is None:
        return None
    user = services.users.find(cached.id)
    if user is None:
        log.warning("Logged user with id %s no longer exists", cached.id)
        session.pop(LOGGED_USER_ATTR, None)
        return None
    session[LOGGED_USER_ATTR] = user.to_session()
    return user


def _require_role(services, role, action, target=None):
    user = logged_user(services)
    if user is not None and user.has_role(role):
        return user
    log.warning(
        "Access denied: user %s without role %s tried to run %s on %s",
        user.email if user else None, role.name, action.value, target,
    )
    return None


def _selected_slot():
    """Day and time from the request, falling back to the slot kept in the session."""
    data = {
        "day": request.values.get(DAY_PARAM) or session.get(DAY_ATTR),
        "time": request.values.get(TIME_PARAM) or session.get(TIME_ATTR),
    }
    try:
        return slot_schema.load(data)
    except ValidationError as exc:
        publish(ERRORS_ATTR, error_list(exc))
        return None


def show_schedule(services):
    publish(DAYS_ATTR, list(DayOfWeek))
    publish(TIMES_ATTR, list(TimeOfDay))
    publish(SCHEDULE_ATTR, services.shows.get_schedule())
    return MAIN_VIEW


def show_login(services):
    return LOGIN_VIEW


def check_login(services):
    email = (request.values.get(EMAIL_PARAM) or "").strip()
    password = request.values.get(PASSWORD_PARAM) or ""
    user = services.users.authenticate(email, password)
    if user is None:
        log.info("Failed login for email %s", email)
        publish(ERRORS_ATTR, [{"field": EMAIL_PARAM, "msg": "Invalid email or password"}])
        return LOGIN_VIEW
    session[LOGGED_USER_ATTR] = user.to_session()
    log.info("User with id %s logged in", user.id)
    return show_schedule(services)


def logout(services):
    locale = session.get(LOCALE_ATTR)
    session.clear()
    if locale:
        session[LOCALE_ATTR] = locale
    return LOGIN_VIEW


def add_user(services):
    return REGISTER_VIEW


def register_user(services):
    payload = {
        "firstname": request.values.get(FIRSTNAME_PARAM),
        "lastname": request.values.get(LASTNAME_PARAM),
        "email": request.values.get(EMAIL_PARAM),
        "password": request.values.get(PASSWORD_PARAM),
        "roles": request.values.getlist(ROLES_PARAM),
    }
    caller = logged_user(services)
    is_admin = caller is not None and caller.has_role(Role.ADMIN)
    if not is_admin and payload["roles"]:
        # only administrators pick roles, everyone else registers as USER
        log.warning("Ignoring roles %s requested without ADMIN role", payload["roles"])
        payload["roles"] = []
    try:
        data = register_schema.load({key: value for key, value in payload.items() if value is not None})
    except ValidationError as exc:
        publish(ERRORS_ATTR, error_list(exc))
        return REGISTER_VIEW

    log.info("Register user with email %s, roles %s", data["email"], sorted(r.name for r in data["roles"]))
    user = User(
        firstname=data["firstname"],
        lastname=data["lastname"],
        email=data["email"],
        roles=data["roles"],
    )
    if services.users.register(user, data["password"]) is None:
        publish(ERRORS_ATTR, [{"field": EMAIL_PARAM, "msg": "User already exists"}])
        return REGISTER_VIEW

    publish(MESSAGE_ATTR, "User registered successfully")
    if is_admin:
        return show_users(services)
    return LOGIN_VIEW


def add_movie(services):
    session[DAY_ATTR] = request.values.get(DAY_PARAM)
    session[TIME_ATTR] = request.values.get(TIME_PARAM)
    return MOVIE_VIEW


def create_movie(services):
    if _require_role(services, Role.ADMIN, Action.CREATE_MOVIE) is None:
        return show_schedule(services)

    slot = _selected_slot()
    movie = (request.values.get(MOVIE_PARAM) or "").strip()
    if slot is None:
        return MOVIE_VIEW
    if not movie:
        publish(ERRORS_ATTR, [{"field": MOVIE_PARAM, "msg": "Movie title is required"}])
        return MOVIE_VIEW

    if services.shows.create_show(slot["day"], slot["time"], movie) is None:
        publish(ERRORS_ATTR, [{"field": MOVIE_PARAM, "msg": "This slot already has a show"}])
    return show_schedule(services)


def cancel_movie(services):
    slot = _selected_slot()
    if slot is not None and _require_role(services, Role.ADMIN, Action.CANCEL_MOVIE, slot) is not None:
        services.shows.cancel_show(slot["day"], slot["time"])
    return show_schedule(services)


def show_hall(services):
    slot = _selected_slot()
    show = None
    tickets = []
    if slot is not None:
        session[DAY_ATTR] = slot["day"].name
        session[TIME_ATTR] = slot["time"].name
        show = services.shows.find_by_day_and_time(slot["day"], slot["time"])
        if show is not None:
            tickets = services.tickets.find_by_show(show.id)
    publish(SHOW_ATTR, show)
    publish(TICKETS_ATTR, tickets)
    return HALL_VIEW


def buy_ticket(services):
    ticket_id = request.values.get(TICKET_ID_PARAM, type=int)
    if ticket_id is not None:
        user = _require_role(services, Role.USER, Action.BUY_TICKET, ticket_id)
        if user is not None and not services.tickets.buy(ticket_id, user.id):
            publish(ERRORS_ATTR, [{"field": TICKET_ID_PARAM, "msg": "Ticket is already sold"}])
    return show_hall(services)


def show_tickets(services):
    user = logged_user(services)
    tickets = []
    shows = {}
    if user is not None:
        log.info("Show tickets for user with id %s", user.id)
        tickets = services.tickets.find_by_user(user.id)
        for ticket in tickets:
            if ticket.show_id not in shows:
                shows[ticket.show_id] = services.shows.find_by_ticket(ticket.id)
    publish(TICKETS_ATTR, tickets)
    publish(SHOWS_ATTR, shows)
    return TICKETS_VIEW


def cancel_ticket(services):
    ticket_id = request.values.get(TICKET_ID_PARAM, type=int)
    if ticket_id is not None:
        log.info("Delete ticket with id %s", ticket_id)
        user = _require_role(services, Role.USER, Action.CANCEL_TICKET, ticket_id)
        if user is not None:
            ticket = services.tickets.find(ticket_id)
            if ticket is not None and ticket.user_id == user.id:
                services.tickets.cancel(ticket_id)
            else:
                log.warning("User with id %s tried to cancel ticket with id %s they do not own", user.id, ticket_id)
    return show_tickets(services)


def show_users(services):
    users = []
    if _require_role(services, Role.ADMIN, Action.USERS) is not None:
        users = services.users.find_all()
    publish(USERS_ATTR, users)
    return USERS_VIEW


def delete_user(services):
    user_id = request.values.get(USER_ID_PARAM, type=int)
    if user_id is not None and _require_role(services, Role.ADMIN, Action.DELETE_USER, user_id) is not None:
        services.users.delete(user_id)
    return show_users(services)


def change_locale(services):
    locale = request.values.get(LOCALE_PARAM)
    if locale in SUPPORTED_LOCALES:
        session[LOCALE_ATTR] = locale
    return show_schedule(services)


HANDLERS = {
    Action.LOGIN: show_login,
    Action.CHECK_LOGIN: check_login,
    Action.TICKETS: show_tickets,
    Action.LOGOUT: logout,
    Action.REGISTER_USER: register_user,
    Action.ADD_USER: add_user,
    Action.CANCEL_MOVIE: cancel_movie,
    Action.ADD_MOVIE: add_movie,
    Action.CREATE_MOVIE: create_movie,
    Action.HALL: show_hall,
    Action.USERS: show_users,
    Action.DELETE_USER: delete_user,
    Action.BUY_TICKET: buy_ticket,
    Action.CHANGE_LOCALE: change_locale,
    Action.CANCEL_TICKET: cancel_ticket,
}


def build_routing_table(services):
    """Bind every action's handler to ``services``."""
    return {action: partial(handler, services) for action, handler in HANDLERS.items()}


class Dispatcher:
    def __init__(self, routes, default):
        self.routes = dict(routes)
        self.default = default

    def resolve(self, key):
        action = Action.parse(key)
        handler = self.routes.get(action) if action is not None else None
        if handler is None:
            log.info("Running default command for key %r", key)
            return self.default
        log.info("Running command %s", action.value)
        return handler


def build_dispatcher(services):
    return Dispatcher(build_routing_table(services), default=partial(show_schedule, services))
