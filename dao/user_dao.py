import logging

from sqlalchemy import delete, insert, select, update

from dao.base import BaseDao
from entities import Role, User
from models import user_roles, users

log = logging.getLogger(__name__)


class UserDao(BaseDao):

    def create(self, user):
        log.info("Creating new user with email %s", user.email)
        with self._connect("Can't create user") as connection:
            result = connection.execute(
                insert(users).values(
                    firstname=user.firstname,
                    lastname=user.lastname,
                    email=user.email,
                    password=user.password,
                    salt=user.salt,
                )
            )
            user_id = result.inserted_primary_key[0]
            self._insert_roles(connection, user_id, user.roles)
        user.id = user_id
        log.info("User is created with id = %s", user.id)

    def update(self, user):
        log.info("Updating user with id %s", user.id)
        with self._connect("Can't update user") as connection:
            connection.execute(
                update(users)
                .where(users.c.id == user.id)
                .values(
                    firstname=user.firstname,
                    lastname=user.lastname,
                    email=user.email,
                    password=user.password,
                    salt=user.salt,
                )
            )
            connection.execute(delete(user_roles).where(user_roles.c.user_id == user.id))
            self._insert_roles(connection, user.id, user.roles)

    def delete(self, user_id):
        log.info("Deleting user with id %s", user_id)
        with self._connect("Can't delete user") as connection:
            connection.execute(delete(users).where(users.c.id == user_id))

    def find(self, user_id):
        log.info("Finding user with id %s", user_id)
        return self._find_one(users.c.id == user_id)

    def find_by_email(self, email):
        log.info("Finding user with email %s", email)
        return self._find_one(users.c.email == email)

    def find_all(self):
        log.info("Finding all users")
        with self._connect("Can't find users") as connection:
            rows = connection.execute(select(users).order_by(users.c.id)).all()
            roles = self._load_roles(connection, [row.id for row in rows])
        return [self._to_user(row, roles.get(row.id, set())) for row in rows]

    def _find_one(self, condition):
        with self._connect("Can't find user") as connection:
            row = connection.execute(select(users).where(condition)).first()
            if row is None:
                return None
            roles = self._load_roles(connection, [row.id])
        return self._to_user(row, roles.get(row.id, set()))

    @staticmethod
    def _insert_roles(connection, user_id, roles):
        if roles:
            connection.execute(
                insert(user_roles),
                [{"user_id": user_id, "role": role.name} for role in roles],
            )

    @staticmethod
    def _load_roles(connection, user_ids):
        roles = {}
        if not user_ids:
            return roles
        rows = connection.execute(
            select(user_roles.c.user_id, user_roles.c.role).where(user_roles.c.user_id.in_(user_ids))
        )
        for user_id, role in rows:
            if role in Role.__members__:
                roles.setdefault(user_id, set()).add(Role[role])
        return roles

    @staticmethod
    def _to_user(row, roles):
        return User(
            id=row.id,
            firstname=row.firstname,
            lastname=row.lastname,
            email=row.email,
            password=row.password,
            salt=row.salt,
            roles=roles,
        )
