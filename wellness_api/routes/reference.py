"""
Read-only routes for the questionnaire reference data.

Categories, questions, their options and the weighted mapping between
questions and categories. Any authenticated user may read them.
"""

from __future__ import annotations

from flask import Blueprint
from flask_jwt_extended import jwt_required

from .. import db
from ..errors import NotFoundError
from ..schemas import (
    CategoryQuestionSchema,
    CategorySchema,
    MappingViewSchema,
    QuestionOptionSchema,
    QuestionSchema,
    QuestionWithOptionsSchema,
)
from ..services import reference_service


reference_bp = Blueprint("reference", __name__)


@reference_bp.route("/categories", methods=["GET"])
@jwt_required()
def list_categories() -> tuple[list[dict], int]:
    return CategorySchema(many=True).dump(reference_service.list_categories(db.session)), 200


@reference_bp.route("/categories/mapping", methods=["GET"])
@jwt_required()
def question_category_mapping() -> tuple[list[dict], int]:
    return MappingViewSchema(many=True).dump(reference_service.mapping_view(db.session)), 200


@reference_bp.route("/categories/<int:category_id>", methods=["GET"])
@jwt_required()
def get_category(category_id: int) -> tuple[dict, int]:
    category = reference_service.get_category(db.session, category_id)
    if category is None:
        raise NotFoundError("Category not found.")
    return CategorySchema().dump(category), 200


@reference_bp.route("/categories/<int:category_id>/questions", methods=["GET"])
@jwt_required()
def get_category_questions(category_id: int) -> tuple[list[dict], int]:
    if reference_service.get_category(db.session, category_id) is None:
        raise NotFoundError("Category not found.")
    questions = reference_service.category_questions(db.session, category_id)
    return CategoryQuestionSchema(many=True).dump(questions), 200


@reference_bp.route("/questions", methods=["GET"])
@jwt_required()
def list_questions() -> tuple[list[dict], int]:
    return QuestionSchema(many=True).dump(reference_service.list_questions(db.session)), 200


@reference_bp.route("/questions/questionnaire", methods=["GET"])
@jwt_required()
def questionnaire() -> tuple[dict, int]:
    """All questions with their options, keyed by section number."""
    schema = QuestionWithOptionsSchema(many=True)
    sections = reference_service.questionnaire_by_section(db.session)
    return {str(section): schema.dump(questions) for section, questions in sections.items()}, 200


@reference_bp.route("/questions/<int:question_id>", methods=["GET"])
@jwt_required()
def get_question(question_id: int) -> tuple[dict, int]:
    question = reference_service.get_question(db.session, question_id)
    if question is None:
        raise NotFoundError("Question not found.")
    return QuestionSchema().dump(question), 200


@reference_bp.route("/questions/<int:question_id>/options", methods=["GET"])
@jwt_required()
def get_question_options(question_id: int) -> tuple[list[dict], int]:
    question = reference_service.get_question(db.session, question_id)
    if question is None:
        raise NotFoundError("Question not found.")
    return QuestionOptionSchema(many=True).dump(question.options), 200
