from dao.base import DaoError
from dao.show_dao import ShowDao
from dao.ticket_dao import TicketDao
from dao.user_dao import UserDao

__all__ = ["DaoError", "ShowDao", "TicketDao", "UserDao"]
