"""
Routes for submitting, updating and reading wellness surveys.

Creating and updating go through ``SurveyTransactionManager`` so the
header, responses and category scores are written atomically. Reads go
through ``SurveyQueryService``. A user may only touch surveys of their
own profile; admins may touch any.
"""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required

from .. import db
from ..access import can_access_profile, is_admin, parse_date_arg, parse_uuid, require_profile
from ..errors import ForbiddenError, NotFoundError
from ..models import Survey
from ..schemas import (
    ImprovementAreaOptionSchema,
    SurveyCreateSchema,
    SurveyPatchSchema,
    WellnessActivityOptionSchema,
)
from ..services import SurveyQueryService, SurveyTransactionManager
from ..services import reference_service


surveys_bp = Blueprint("surveys", __name__)


def _manager() -> SurveyTransactionManager:
    exclude = current_app.config.get("SURVEY_EXCLUDE_EXTERNAL_QUESTIONS", False)
    return SurveyTransactionManager(db.session, include_external=not exclude)


@surveys_bp.route("/surveys", methods=["GET"])
@jwt_required()
def list_surveys() -> tuple[list[dict], int]:
    """List every survey with its owner's names. Admins only."""
    if not is_admin():
        raise ForbiddenError()
    return SurveyQueryService(db.session).list_all(), 200


@surveys_bp.route("/surveys", methods=["POST"])
@jwt_required()
def create_survey() -> tuple[dict, int]:
    """Submit a completed survey.

    Expects ``profile_id``, optional ``consent_given`` and
    ``survey_date``, and a non-empty ``responses`` list of
    ``{question_id, selected_option_id, score?}``. Returns the survey
    with its responses and category scores.
    """
    data = SurveyCreateSchema().load(request.get_json(silent=True) or {})
    profile_id = require_profile(data.profile_id)
    if not can_access_profile(profile_id):
        raise ForbiddenError()
    survey = _manager().create_survey(profile_id, data.consent_given, data.responses, data.survey_date)
    return survey, 201


@surveys_bp.route("/surveys/<survey_id>", methods=["GET"])
@jwt_required()
def get_survey(survey_id: str) -> tuple[dict, int]:
    survey = SurveyQueryService(db.session).get_by_id(parse_uuid(survey_id, "survey_id"))
    if survey is None:
        raise NotFoundError("Survey not found.")
    if not can_access_profile(survey["profile_id"]):
        raise ForbiddenError()
    return survey, 200


@surveys_bp.route("/surveys/<survey_id>", methods=["PUT"])
@jwt_required()
def update_survey(survey_id: str) -> tuple[dict, int]:
    """Update consent and/or replace the full response set.

    Accepts ``consent_given``, ``responses`` and ``version``. When
    ``version`` is sent and no longer matches, 409 is returned.
    """
    survey_id = parse_uuid(survey_id, "survey_id")
    patch = SurveyPatchSchema().load(request.get_json(silent=True) or {})
    survey = db.session.get(Survey, survey_id)
    if survey is None:
        raise NotFoundError("Survey not found.")
    if not can_access_profile(survey.profile_id):
        raise ForbiddenError()
    return _manager().update_survey(survey_id, patch), 200


@surveys_bp.route("/surveys/profile/<profile_id>", methods=["GET"])
@jwt_required()
def list_profile_surveys(profile_id: str) -> tuple[list[dict], int]:
    """Survey headers of a profile, newest first."""
    profile_id = require_profile(profile_id)
    if not can_access_profile(profile_id):
        raise ForbiddenError()
    return SurveyQueryService(db.session).get_by_profile(profile_id), 200


@surveys_bp.route("/surveys/profile/<profile_id>/latest", methods=["GET"])
@jwt_required()
def latest_profile_survey(profile_id: str) -> tuple[dict, int]:
    profile_id = require_profile(profile_id)
    if not can_access_profile(profile_id):
        raise ForbiddenError()
    survey = SurveyQueryService(db.session).get_latest_by_profile(profile_id)
    if survey is None:
        raise NotFoundError("No surveys found for this profile.")
    return survey, 200


@surveys_bp.route("/surveys/profile/<profile_id>/history", methods=["GET"])
@jwt_required()
def profile_survey_history(profile_id: str) -> tuple[list[dict], int]:
    """Score history, newest first, optionally bounded by ``since``/``until`` dates."""
    profile_id = require_profile(profile_id)
    if not can_access_profile(profile_id):
        raise ForbiddenError()
    since = parse_date_arg(request.args.get("since"), "since")
    until = parse_date_arg(request.args.get("until"), "until")
    return SurveyQueryService(db.session).get_history(profile_id, since=since, until=until), 200


@surveys_bp.route("/surveys/options/improvement-areas", methods=["GET"])
@jwt_required()
def improvement_area_options() -> tuple[list[dict], int]:
    options = reference_service.list_improvement_area_options(db.session)
    return ImprovementAreaOptionSchema(many=True).dump(options), 200


@surveys_bp.route("/surveys/options/wellness-activities", methods=["GET"])
@jwt_required()
def wellness_activity_options() -> tuple[list[dict], int]:
    options = reference_service.list_wellness_activity_options(db.session)
    return WellnessActivityOptionSchema(many=True).dump(options), 200
