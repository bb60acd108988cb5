"""Helpers shared by the JSON controllers.

The caller's identity is set by the upstream gateway in the ``X-Employee-Id``
and ``X-Role`` headers; this layer only reads them.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .datetime_utils import parse_iso_date, parse_iso_datetime, parse_iso_time
from .validators import require_positive_id


def identified(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        raw_id = request.headers.get("X-Employee-Id", "").strip()
        raw_role = request.headers.get("X-Role", Role.STAFF.value).strip().lower()
        if not raw_id.isdigit():
            raise AuthenticationError("Missing or invalid X-Employee-Id header")
        try:
            role = Role(raw_role)
        except ValueError:
            raise AuthenticationError("Unknown role", role=raw_role)
        g.employee_id = int(raw_id)
        g.role = role
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    def decorator(view):
        @wraps(view)
        @identified
        def wrapper(*args, **kwargs):
            if g.role not in roles:
                raise AuthorizationError("You do not have permission for this action", role=g.role.value)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def target_employee_id() -> int:
    """``employee_id`` query arg for managers/admins, the caller otherwise."""
    requested = int_arg("employee_id")
    if requested is None or requested == g.employee_id:
        return g.employee_id
    if g.role not in {Role.ADMIN, Role.MANAGER}:
        raise AuthorizationError("You can only view your own records")
    return requested


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_field(data: dict, name: str) -> Any:
    value = data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required", field=name)
    return value


def id_field(data: dict, name: str) -> int:
    return require_positive_id(require_field(data, name), name)


def date_field(value: Optional[str], name: str) -> date:
    try:
        return parse_iso_date(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be YYYY-MM-DD", field=name)


def datetime_field(value: Optional[str], name: str) -> datetime:
    try:
        return parse_iso_datetime(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an ISO timestamp", field=name)


def time_field(value: Optional[str], name: str) -> time:
    try:
        return parse_iso_time(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be HH:MM", field=name)


def int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number", field=name)


def to_json(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value
