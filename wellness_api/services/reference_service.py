"""Read access to the reference catalogs.

Questions, options, categories and the question-to-category mapping are
seeded out of band and never modified by the API. Everything here is a
plain query; no locking is taken.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from ..models import (
    Category,
    ImprovementAreaOption,
    Question,
    QuestionCategoryMapping,
    QuestionOption,
    WellnessActivityOption,
)


def load_mappings(session: Session, question_ids: Optional[Iterable[int]] = None) -> List[QuestionCategoryMapping]:
    """Return mapping rows, optionally limited to the given questions."""
    query = session.query(QuestionCategoryMapping)
    if question_ids is not None:
        ids = list(question_ids)
        if not ids:
            return []
        query = query.filter(QuestionCategoryMapping.question_id.in_(ids))
    return query.order_by(QuestionCategoryMapping.mapping_id).all()


def load_options(session: Session, option_ids: Iterable[int]) -> Dict[int, QuestionOption]:
    """Return ``{option_id: option}`` for the ids that exist."""
    ids = list(option_ids)
    if not ids:
        return {}
    options = session.query(QuestionOption).filter(QuestionOption.option_id.in_(ids)).all()
    return {option.option_id: option for option in options}


def list_categories(session: Session) -> List[Category]:
    return session.query(Category).order_by(Category.display_order, Category.category_id).all()


def get_category(session: Session, category_id: int) -> Optional[Category]:
    return session.get(Category, category_id)


def category_questions(session: Session, category_id: int) -> List[dict]:
    """Questions mapped to a category, with their weight and external flag."""
    rows = (
        session.query(Question, QuestionCategoryMapping)
        .join(QuestionCategoryMapping, QuestionCategoryMapping.question_id == Question.question_id)
        .filter(QuestionCategoryMapping.category_id == category_id)
        .order_by(Question.question_number)
        .all()
    )
    return [
        {
            "question_id": question.question_id,
            "question_text": question.question_text,
            "section_number": question.section_number,
            "question_number": question.question_number,
            "weight": mapping.weight,
            "is_external": mapping.is_external,
        }
        for question, mapping in rows
    ]


def mapping_view(session: Session) -> List[dict]:
    """Full mapping joined to question text and category name."""
    rows = (
        session.query(QuestionCategoryMapping, Question, Category)
        .join(Question, QuestionCategoryMapping.question_id == Question.question_id)
        .join(Category, QuestionCategoryMapping.category_id == Category.category_id)
        .order_by(Category.display_order, Question.question_number)
        .all()
    )
    return [
        {
            "mapping_id": mapping.mapping_id,
            "question_id": question.question_id,
            "question_text": question.question_text,
            "category_id": category.category_id,
            "category_name": category.name,
            "weight": mapping.weight,
            "is_external": mapping.is_external,
        }
        for mapping, question, category in rows
    ]


def list_questions(session: Session, with_options: bool = False) -> List[Question]:
    query = session.query(Question)
    if with_options:
        query = query.options(selectinload(Question.options))
    return query.order_by(Question.section_number, Question.question_number).all()


def get_question(session: Session, question_id: int) -> Optional[Question]:
    return session.get(Question, question_id)


def questionnaire_by_section(session: Session) -> "OrderedDict[int, List[Question]]":
    """Questions with their options grouped by section number."""
    sections: "OrderedDict[int, List[Question]]" = OrderedDict()
    for question in list_questions(session, with_options=True):
        sections.setdefault(question.section_number, []).append(question)
    return sections


def list_improvement_area_options(session: Session) -> List[ImprovementAreaOption]:
    return session.query(ImprovementAreaOption).order_by(ImprovementAreaOption.option_id).all()


def list_wellness_activity_options(session: Session) -> List[WellnessActivityOption]:
    return session.query(WellnessActivityOption).order_by(WellnessActivityOption.option_id).all()
