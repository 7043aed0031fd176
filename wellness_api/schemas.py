"""
Serialization schemas using Marshmallow for the Wellness Survey API.

Output schemas convert SQLAlchemy models to JSON-friendly
representations. Sensitive fields, such as password hashes, are
excluded. Input schemas validate request bodies and load them into
small typed structures (``SurveyCreate``, ``SurveyPatch``) so that the
service layer only ever sees the fields it declares. Unknown keys are
rejected rather than silently written to the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from marshmallow import Schema, fields, validate, post_load, validates_schema
from marshmallow import ValidationError as SchemaValidationError
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema

from .models import (
    User,
    Profile,
    Question,
    QuestionOption,
    Category,
    ImprovementAreaOption,
    WellnessActivityOption,
    Survey,
    WellnessMetricSnapshot,
)


# ---------------------------------------------------------------------------
# Typed inputs
# ---------------------------------------------------------------------------

@dataclass
class ResponseInput:
    question_id: int
    selected_option_id: int
    # Client hint only; the stored score is taken from the option.
    score: Optional[float] = None


@dataclass
class SurveyCreate:
    profile_id: str
    consent_given: bool
    responses: List[ResponseInput]
    survey_date: Optional[date] = None


@dataclass
class SurveyPatch:
    """Fields a client may change on an existing survey.

    ``None`` means "leave unchanged". ``version``, when given, must match
    the stored survey version.
    """
    consent_given: Optional[bool] = None
    responses: Optional[List[ResponseInput]] = None
    version: Optional[int] = None


# ---------------------------------------------------------------------------
# Input schemas
# ---------------------------------------------------------------------------

def _check_unique_questions(responses: List[ResponseInput]) -> None:
    seen = set()
    for response in responses:
        if response.question_id in seen:
            raise SchemaValidationError(
                f"question {response.question_id} is answered more than once.", "responses"
            )
        seen.add(response.question_id)


class ResponseInputSchema(Schema):
    question_id = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))
    selected_option_id = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))
    score = fields.Float(load_default=None, allow_none=True)

    @post_load
    def make_response(self, data, **kwargs) -> ResponseInput:
        return ResponseInput(**data)


class SurveyCreateSchema(Schema):
    profile_id = fields.UUID(required=True)
    consent_given = fields.Boolean(load_default=False)
    survey_date = fields.Date(load_default=None, allow_none=True)
    responses = fields.List(
        fields.Nested(ResponseInputSchema), required=True, validate=validate.Length(min=1)
    )

    @validates_schema
    def validate_responses(self, data, **kwargs) -> None:
        _check_unique_questions(data.get("responses") or [])

    @post_load
    def make_survey(self, data, **kwargs) -> SurveyCreate:
        data["profile_id"] = str(data["profile_id"])
        return SurveyCreate(**data)


class SurveyPatchSchema(Schema):
    consent_given = fields.Boolean()
    responses = fields.List(fields.Nested(ResponseInputSchema), validate=validate.Length(min=1))
    version = fields.Integer(strict=True, validate=validate.Range(min=1))

    @validates_schema
    def validate_responses(self, data, **kwargs) -> None:
        _check_unique_questions(data.get("responses") or [])

    @post_load
    def make_patch(self, data, **kwargs) -> SurveyPatch:
        return SurveyPatch(**data)


class RegisterSchema(Schema):
    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))
    first_name = fields.String(load_default=None, validate=validate.Length(max=100))
    last_name = fields.String(load_default=None, validate=validate.Length(max=100))


class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)


# ---------------------------------------------------------------------------
# Output schemas
# ---------------------------------------------------------------------------

class ProfileSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``Profile`` objects."""

    class Meta:
        model = Profile
        include_fk = True


class UserSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``User`` objects."""

    role = fields.Function(lambda user: user.role.value)
    profile = fields.Nested(ProfileSchema, only=("profile_id", "first_name", "last_name"), allow_none=True)

    class Meta:
        model = User
        # Exclude password_hash from the serialised output
        exclude = ("password_hash",)


class QuestionOptionSchema(SQLAlchemyAutoSchema):
    score = fields.Float()

    class Meta:
        model = QuestionOption
        include_fk = True


class QuestionSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Question


class QuestionWithOptionsSchema(QuestionSchema):
    options = fields.Nested(QuestionOptionSchema, many=True, exclude=("question_id",))


class CategorySchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Category


class CategoryQuestionSchema(Schema):
    """A question as seen through one category's mapping."""

    question_id = fields.Integer()
    question_text = fields.String()
    section_number = fields.Integer()
    question_number = fields.Integer()
    weight = fields.Float()
    is_external = fields.Boolean()


class MappingViewSchema(Schema):
    mapping_id = fields.Integer()
    question_id = fields.Integer()
    question_text = fields.String()
    category_id = fields.Integer()
    category_name = fields.String()
    weight = fields.Float()
    is_external = fields.Boolean()


class ImprovementAreaOptionSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = ImprovementAreaOption


class WellnessActivityOptionSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = WellnessActivityOption


class SurveySchema(SQLAlchemyAutoSchema):
    """Survey header without responses or scores."""

    class Meta:
        model = Survey
        include_fk = True


class SurveyResponseViewSchema(Schema):
    response_id = fields.Integer()
    question_id = fields.Integer()
    question_number = fields.Integer()
    section_number = fields.Integer()
    question_text = fields.String()
    selected_option_id = fields.Integer()
    option_text = fields.String()
    score = fields.Float()
    is_external = fields.Boolean()


class CategoryScoreViewSchema(Schema):
    category_id = fields.Integer()
    name = fields.String()
    display_order = fields.Integer()
    score = fields.Float()


class SurveyListItemSchema(SurveySchema):
    """Header plus owner names, used by the admin listing."""

    first_name = fields.Function(lambda survey: survey.profile.first_name)
    last_name = fields.Function(lambda survey: survey.profile.last_name)
    username = fields.Function(lambda survey: survey.profile.user.username)
    email = fields.Function(lambda survey: survey.profile.user.email)


class HistoryRecordSchema(Schema):
    survey_id = fields.String()
    profile_id = fields.String()
    survey_date = fields.Date()
    created_at = fields.DateTime()
    consent_given = fields.Boolean()
    total_score = fields.Float()
    delta = fields.Float(allow_none=True)
    category_scores = fields.Dict(keys=fields.String(), values=fields.Float())


class WellnessMetricSnapshotSchema(SQLAlchemyAutoSchema):
    average_total_score = fields.Float(allow_none=True)

    class Meta:
        model = WellnessMetricSnapshot


class SurveyStatisticsSchema(Schema):
    total_surveys = fields.Integer()
    unique_profiles = fields.Integer()
    first_survey = fields.DateTime(allow_none=True)
    latest_survey = fields.DateTime(allow_none=True)


class UserMetricsSchema(Schema):
    total_users = fields.Integer()
    active_users = fields.Integer()
    inactive_users = fields.Integer()
    admin_users = fields.Integer()
    users_with_profiles = fields.Integer()
    users_with_surveys = fields.Integer()


class WellnessProgressSchema(Schema):
    """First-to-latest change of a profile's survey scores."""

    profile_id = fields.String()
    survey_count = fields.Integer()
    first_survey_date = fields.Date(allow_none=True)
    latest_survey_date = fields.Date(allow_none=True)
    first_total_score = fields.Float(allow_none=True)
    latest_total_score = fields.Float(allow_none=True)
    change = fields.Float(allow_none=True)
    category_change = fields.Dict(keys=fields.String(), values=fields.Float())
