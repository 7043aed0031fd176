"""Routes for wellness metrics.

Aggregate and account metrics are for admins only. Progress and the
composed wellness profile of a single profile are also open to its owner.
"""
from __future__ import annotations

from flask import Blueprint
from flask_jwt_extended import jwt_required

from .. import db
from ..access import can_access_profile, is_admin, require_profile
from ..errors import ForbiddenError, NotFoundError
from ..schemas import WellnessMetricSnapshotSchema
from ..services import SurveyQueryService, get_user_metrics, refresh_metrics

metrics_bp = Blueprint("metrics", __name__)


@metrics_bp.route("/metrics/wellness", methods=["GET"])
@jwt_required()
def wellness_metrics() -> tuple[dict, int]:
    """Return the most recently calculated metrics snapshot."""
    if not is_admin():
        raise ForbiddenError()
    metrics = SurveyQueryService(db.session).get_aggregate_metrics()
    if metrics is None:
        raise NotFoundError("Wellness metrics have not been calculated yet.")
    return metrics, 200


@metrics_bp.route("/metrics/wellness/refresh", methods=["POST"])
@jwt_required()
def refresh_wellness_metrics() -> tuple[dict, int]:
    if not is_admin():
        raise ForbiddenError()
    snapshot = refresh_metrics(db.session)
    return WellnessMetricSnapshotSchema().dump(snapshot), 201


@metrics_bp.route("/metrics/surveys/statistics", methods=["GET"])
@jwt_required()
def survey_statistics() -> tuple[dict, int]:
    """Live survey counts and first/latest submission times."""
    if not is_admin():
        raise ForbiddenError()
    return SurveyQueryService(db.session).get_statistics(), 200


@metrics_bp.route("/metrics/users", methods=["GET"])
@jwt_required()
def user_metrics() -> tuple[dict, int]:
    """Live account counts."""
    if not is_admin():
        raise ForbiddenError()
    return get_user_metrics(db.session), 200


@metrics_bp.route("/metrics/surveys/progress/<profile_id>", methods=["GET"])
@jwt_required()
def wellness_progress(profile_id: str) -> tuple[dict, int]:
    profile_id = require_profile(profile_id)
    if not can_access_profile(profile_id):
        raise ForbiddenError()
    return SurveyQueryService(db.session).get_progress(profile_id), 200


@metrics_bp.route("/metrics/wellness-profile/<profile_id>", methods=["GET"])
@jwt_required()
def wellness_profile(profile_id: str) -> tuple[dict, int]:
    """Profile details with its latest survey and progress."""
    profile_id = require_profile(profile_id)
    if not can_access_profile(profile_id):
        raise ForbiddenError()
    return SurveyQueryService(db.session).get_wellness_profile(profile_id), 200
