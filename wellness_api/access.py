"""Request-level helpers shared by the blueprints.

Role checks read the claims of the current JWT, so they must be called
from inside a ``@jwt_required()`` view.
"""
from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from dateutil.parser import parse as parse_date  # type: ignore
from flask_jwt_extended import get_jwt, get_jwt_identity

from . import db
from .errors import NotFoundError, ValidationError
from .models import Profile, Role
from .services.profile_service import profile_exists


def is_admin() -> bool:
    return get_jwt().get("role") == Role.ADMIN.value


def owns_profile(profile_id: str) -> bool:
    """Return True if the current user is the owner of ``profile_id``."""
    profile = db.session.get(Profile, profile_id)
    return profile is not None and profile.user_id == get_jwt_identity()


def can_access_profile(profile_id: str) -> bool:
    return is_admin() or owns_profile(profile_id)


def parse_uuid(value: str, field: str = "id") -> str:
    """Return ``value`` in canonical UUID form or raise ``ValidationError``."""
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        raise ValidationError(f"{field} must be a valid UUID.", fields={field: ["Not a valid UUID."]})


def parse_date_arg(value: Optional[str], field: str) -> Optional[date]:
    """Parse an optional query-string date such as ``2024-05-01``."""
    if not value:
        return None
    try:
        return parse_date(value).date()
    except (ValueError, OverflowError):
        raise ValidationError(f"{field} must be a date.", fields={field: ["Not a valid date."]})


def require_profile(profile_id: str) -> str:
    """Validate ``profile_id`` and raise ``NotFoundError`` unless the profile is active."""
    profile_id = parse_uuid(profile_id, "profile_id")
    if not profile_exists(db.session, profile_id):
        raise NotFoundError("Profile not found.")
    return profile_id
