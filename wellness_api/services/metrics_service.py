"""Aggregate wellness metrics.

Metrics are stored as snapshots: each call to :func:`refresh_metrics`
appends a ``WellnessMetricSnapshot`` row and readers only ever see the
most recent one.

User metrics are live counts and are never stored.
"""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Profile, Role, Survey, SurveyCategoryScore, User, WellnessMetricSnapshot
from ..schemas import UserMetricsSchema

logger = logging.getLogger(__name__)


def refresh_metrics(session: Session) -> WellnessMetricSnapshot:
    """Calculate and persist a new metrics snapshot.

    ``average_total_score`` is the mean, over surveys that have any
    category scores, of the sum of their category scores.
    """
    total, profiles, first, latest = session.query(
        func.count(Survey.survey_id),
        func.count(func.distinct(Survey.profile_id)),
        func.min(Survey.created_at),
        func.max(Survey.created_at),
    ).one()

    per_survey = (
        session.query(func.sum(SurveyCategoryScore.score).label("total"))
        .group_by(SurveyCategoryScore.survey_id)
        .subquery()
    )
    average = session.query(func.avg(per_survey.c.total)).scalar()

    snapshot = WellnessMetricSnapshot(
        calculation_date=datetime.utcnow(),
        total_surveys=total,
        unique_profiles=profiles,
        first_survey=first,
        latest_survey=latest,
        average_total_score=round(float(average), 2) if average is not None else None,
    )
    session.add(snapshot)
    session.commit()
    logger.info("Wellness metrics refreshed: %d surveys across %d profiles", total, profiles)
    return snapshot


def get_user_metrics(session: Session) -> dict:
    """Live account counts: totals, active/inactive, admins, and engagement."""
    total = session.query(func.count(User.user_id)).scalar()
    active = session.query(func.count(User.user_id)).filter(User.is_active.is_(True)).scalar()
    admins = session.query(func.count(User.user_id)).filter(User.role == Role.ADMIN).scalar()
    with_profiles = session.query(func.count(Profile.profile_id)).scalar()
    with_surveys = (
        session.query(func.count(func.distinct(Profile.user_id)))
        .select_from(Profile)
        .join(Survey, Survey.profile_id == Profile.profile_id)
        .scalar()
    )
    return UserMetricsSchema().dump(
        {
            "total_users": total,
            "active_users": active,
            "inactive_users": total - active,
            "admin_users": admins,
            "users_with_profiles": with_profiles,
            "users_with_surveys": with_surveys,
        }
    )
