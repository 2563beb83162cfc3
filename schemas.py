import re
from typing import Any, Dict

from marshmallow import Schema, ValidationError, fields, post_load, pre_load, validates, validate

from entities import DayOfWeek, Role, TimeOfDay


class RegisterSchema(Schema):
    firstname = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    lastname = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    email = fields.Email(required=True)
    password = fields.Str(required=True)
    roles = fields.List(
        fields.Str(validate=validate.OneOf(list(Role.__members__))),
        load_default=lambda: [Role.USER.name],
    )

    @pre_load
    def strip_fields(self, data: Dict[str, Any], **kwargs):
        data = dict(data)
        for key in ("firstname", "lastname", "email"):
            value = data.get(key)
            if isinstance(value, str):
                data[key] = value.strip()
        if not data.get("roles"):
            data.pop("roles", None)
        return data

    @validates("password")
    def validate_password(self, value: str, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters")
        if not re.search(r"\d", value):
            raise ValidationError("Password must have a number")
        if not re.search(r"[^A-Za-z0-9]", value):
            raise ValidationError("Password must have at least 1 special character")

    @post_load
    def to_roles(self, data: Dict[str, Any], **kwargs):
        data["roles"] = {Role[name] for name in data["roles"]}
        return data


class SlotSchema(Schema):
    day = fields.Str(required=True, validate=validate.OneOf(list(DayOfWeek.__members__)))
    time = fields.Str(required=True, validate=validate.OneOf(list(TimeOfDay.__members__)))

    @pre_load
    def normalize_slot(self, data: Dict[str, Any], **kwargs):
        data = dict(data)
        day = DayOfWeek.parse(data.get("day"))
        if day is not None:
            data["day"] = day.name
        time = TimeOfDay.parse(data.get("time"))
        if time is not None:
            data["time"] = time.name
        return data

    @post_load
    def to_enums(self, data: Dict[str, Any], **kwargs):
        return {"day": DayOfWeek[data["day"]], "time": TimeOfDay[data["time"]]}


def error_list(exc: ValidationError):
    """Flatten marshmallow messages into ``[{"field": ..., "msg": ...}]``."""
    errors = []
    for field, messages in (exc.messages or {}).items():
        if isinstance(messages, dict):
            messages = [msg for nested in messages.values() for msg in nested]
        for message in messages:
            errors.append({"field": field, "msg": message})
    return errors


register_schema = RegisterSchema()
slot_schema = SlotSchema()
