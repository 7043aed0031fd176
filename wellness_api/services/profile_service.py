"""Profile lookups used by the survey pipeline."""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from ..models import Profile, User


def get_active_profile(session: Session, profile_id: str) -> Optional[Profile]:
    """Return the profile if it exists and its user account is active."""
    return (
        session.query(Profile)
        .join(User, Profile.user_id == User.user_id)
        .filter(Profile.profile_id == profile_id, User.is_active.is_(True))
        .first()
    )


def profile_exists(session: Session, profile_id: str) -> bool:
    return get_active_profile(session, profile_id) is not None
