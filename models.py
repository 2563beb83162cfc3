import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE clauses unless foreign keys are switched on per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class UserModel(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    firstname = db.Column(db.String(50), nullable=False)
    lastname = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.LargeBinary, nullable=False)
    salt = db.Column(db.LargeBinary, nullable=False)


class UserRoleModel(db.Model):
    __tablename__ = 'user_roles'
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    role = db.Column(db.String(20), primary_key=True)


class ShowModel(db.Model):
    __tablename__ = 'shows'
    id = db.Column(db.Integer, primary_key=True)
    day = db.Column(db.String(10), nullable=False)
    time = db.Column(db.String(10), nullable=False)
    movie = db.Column(db.String(200), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('day', 'time', name='uq_shows_day_time'),
    )


class TicketModel(db.Model):
    __tablename__ = 'tickets'
    id = db.Column(db.Integer, primary_key=True)
    row = db.Column(db.Integer, nullable=False)
    seat = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Integer, nullable=False)
    sold = db.Column(db.Boolean, nullable=False, default=False)
    show_id = db.Column(db.Integer, db.ForeignKey('shows.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))

    __table_args__ = (
        db.UniqueConstraint('show_id', 'row', 'seat', name='uq_tickets_show_row_seat'),
        db.CheckConstraint('"row" > 0', name='ck_tickets_row_positive'),
        db.CheckConstraint('seat > 0', name='ck_tickets_seat_positive'),
        db.CheckConstraint('price >= 0', name='ck_tickets_price_non_negative'),
    )


shows = ShowModel.__table__
tickets = TicketModel.__table__
users = UserModel.__table__
user_roles = UserRoleModel.__table__
