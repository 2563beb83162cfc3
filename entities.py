from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set


class DayOfWeek(Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["DayOfWeek"]:
        if not value:
            return None
        return cls.__members__.get(value.strip().upper())


class TimeOfDay(Enum):
    MORNING = "10:00"
    AFTERNOON = "14:00"
    EVENING = "18:00"
    NIGHT = "21:00"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["TimeOfDay"]:
        """Accept either the slot name (``EVENING``) or its clock label (``18:00``)."""
        if not value:
            return None
        value = value.strip()
        member = cls.__members__.get(value.upper())
        if member is not None:
            return member
        for slot in cls:
            if slot.value == value:
                return slot
        return None


class Role(Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass
class Ticket:
    row: int
    seat: int
    price: int
    sold: bool = False
    id: Optional[int] = None
    show_id: Optional[int] = None
    user_id: Optional[int] = None


@dataclass
class Show:
    day: DayOfWeek
    time: TimeOfDay
    movie: str
    id: Optional[int] = None
    tickets: List[Ticket] = field(default_factory=list)


@dataclass
class User:
    firstname: str
    lastname: str
    email: str
    password: bytes = b""
    salt: bytes = b""
    roles: Set[Role] = field(default_factory=set)
    id: Optional[int] = None

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def add_role(self, role: Role) -> None:
        self.roles.add(role)

    def to_session(self) -> Dict[str, Any]:
        # the password hash never goes into the cookie session
        return {
            "id": self.id,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "email": self.email,
            "roles": sorted(role.name for role in self.roles),
        }

    @classmethod
    def from_session(cls, data: Optional[Dict[str, Any]]) -> Optional["User"]:
        if not data:
            return None
        return cls(
            id=data.get("id"),
            firstname=data.get("firstname", ""),
            lastname=data.get("lastname", ""),
            email=data.get("email", ""),
            roles={Role[name] for name in data.get("roles", []) if name in Role.__members__},
        )
