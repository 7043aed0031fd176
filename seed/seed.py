"""Seed script for initial data.

Running this script creates the tables and populates the reference
catalogs (categories, questions with scored options, the weighted
question-to-category mapping, improvement areas and wellness
activities) plus a demo admin and a demo user. Invoke it from the
repository root with ``python seed/seed.py`` after ``pip install -e .``.
"""
from __future__ import annotations

import logging

from wellness_api import create_app, db
from wellness_api.models import (
    Category,
    ImprovementAreaOption,
    Profile,
    Question,
    QuestionCategoryMapping,
    QuestionOption,
    Role,
    User,
    WellnessActivityOption,
)

logger = logging.getLogger("seed")

CATEGORIES = [
    ("Physical", "Health, sleep and energy"),
    ("Emotional", "Mood and emotional balance"),
    ("Financial", "Money and work stability"),
    ("Social", "Friendships, family and partners"),
    ("Purpose", "Goals, balance and spiritual connection"),
]

# (section, text, [(category, weight, is_external), ...])
QUESTIONS = [
    (1, "How would you rate your general health?", [("Physical", 1.0, False)]),
    (1, "How well do you usually sleep?", [("Physical", 1.0, False), ("Emotional", 0.5, False)]),
    (1, "How much energy do you have during the day?", [("Physical", 1.0, False)]),
    (2, "How would you describe your mood lately?", [("Emotional", 1.0, False)]),
    (2, "How satisfied are you with your financial situation?", [("Financial", 1.0, False)]),
    (2, "How in control of your spending do you feel?", [("Financial", 1.0, False)]),
    (2, "How stable is your job or main source of income?", [("Financial", 1.0, True)]),
    (3, "How satisfied are you with your friendships?", [("Social", 1.0, False)]),
    (3, "How satisfied are you with your romantic relationships?", [("Social", 1.0, False)]),
    (3, "How much progress are you making on personal goals?", [("Purpose", 1.0, False)]),
    (3, "How balanced do work and rest feel?", [("Purpose", 1.0, False), ("Emotional", 0.5, False)]),
    (3, "How connected do you feel to something larger than yourself?", [("Purpose", 1.0, False)]),
]

OPTIONS = [("Very poor", 1), ("Poor", 2), ("Fair", 3), ("Good", 4), ("Excellent", 5)]

IMPROVEMENT_AREAS = [
    ("Sleep", "Build a regular, restful sleep routine"),
    ("Stress", "Reduce and manage everyday stress"),
    ("Finances", "Gain control over spending and savings"),
    ("Relationships", "Strengthen connections with others"),
]

WELLNESS_ACTIVITIES = [
    ("Walking", "Daily walks outdoors"),
    ("Meditation", "Short guided meditation sessions"),
    ("Journaling", "Write down thoughts and gratitude"),
    ("Budgeting", "Weekly review of expenses"),
]


def run_seeds() -> None:
    """Insert reference catalogs and demo accounts into the database."""
    app = create_app()
    with app.app_context():
        db.create_all()
        categories = {}
        for order, (name, description) in enumerate(CATEGORIES, start=1):
            categories[name] = Category(name=name, description=description, display_order=order)
        db.session.add_all(categories.values())

        for number, (section, text, mapped) in enumerate(QUESTIONS, start=1):
            question = Question(question_text=text, section_number=section, question_number=number)
            question.options = [
                QuestionOption(option_text=label, score=score, display_order=order)
                for order, (label, score) in enumerate(OPTIONS, start=1)
            ]
            question.mappings = [
                QuestionCategoryMapping(category=categories[name], weight=weight, is_external=external)
                for name, weight, external in mapped
            ]
            db.session.add(question)

        db.session.add_all(ImprovementAreaOption(name=n, description=d) for n, d in IMPROVEMENT_AREAS)
        db.session.add_all(WellnessActivityOption(name=n, description=d) for n, d in WELLNESS_ACTIVITIES)

        admin = User(username="admin", email="admin@example.com", role=Role.ADMIN)
        admin.set_password("password")
        admin.profile = Profile(first_name="Admin", last_name="User")
        demo = User(username="demo", email="demo@example.com", role=Role.USER)
        demo.set_password("password")
        demo.profile = Profile(first_name="Demo", last_name="User")
        db.session.add_all([admin, demo])
        db.session.commit()
        logger.info("Seed data inserted successfully.")


if __name__ == "__main__":
    run_seeds()
