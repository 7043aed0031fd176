"""Shared fixtures: an app bound to an in-memory database and seeded
reference data small enough to reason about by hand.

Reference data
--------------
Categories: 1 Physical, 2 Social, 3 Financial (display order 1..3).

======  =========================================  =====================
Q       mapping (category, weight, external)       options (id: score)
======  =========================================  =====================
1       Physical 1.0                               11: 10, 12: 5
2       Physical 0.5, Social 2.0                   21: 4, 22: 1
3       Financial 1.0 (external)                   31: 3, 32: 6
4       (unmapped)                                 41: 7
======  =========================================  =====================
"""
from __future__ import annotations

import pytest
from flask_jwt_extended import create_access_token

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

PHYSICAL, SOCIAL, FINANCIAL = 1, 2, 3

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-secret-key-with-enough-bytes-for-hs256",
    "LOG_LEVEL": "WARNING",
}


def _seed_reference_data() -> None:
    db.session.add_all([
        Category(category_id=PHYSICAL, name="Physical", display_order=1),
        Category(category_id=SOCIAL, name="Social", display_order=2),
        Category(category_id=FINANCIAL, name="Financial", display_order=3),
    ])
    for number, section in ((1, 1), (2, 1), (3, 2), (4, 2)):
        db.session.add(Question(
            question_id=number,
            question_text=f"Question {number}?",
            section_number=section,
            question_number=number,
        ))
    db.session.add_all([
        QuestionOption(option_id=11, question_id=1, option_text="High", score=10, display_order=1),
        QuestionOption(option_id=12, question_id=1, option_text="Medium", score=5, display_order=2),
        QuestionOption(option_id=21, question_id=2, option_text="Often", score=4, display_order=1),
        QuestionOption(option_id=22, question_id=2, option_text="Rarely", score=1, display_order=2),
        QuestionOption(option_id=31, question_id=3, option_text="Unstable", score=3, display_order=1),
        QuestionOption(option_id=32, question_id=3, option_text="Stable", score=6, display_order=2),
        QuestionOption(option_id=41, question_id=4, option_text="Yes", score=7, display_order=1),
    ])
    db.session.add_all([
        QuestionCategoryMapping(mapping_id=1, question_id=1, category_id=PHYSICAL, weight=1.0),
        QuestionCategoryMapping(mapping_id=2, question_id=2, category_id=PHYSICAL, weight=0.5),
        QuestionCategoryMapping(mapping_id=3, question_id=2, category_id=SOCIAL, weight=2.0),
        QuestionCategoryMapping(mapping_id=4, question_id=3, category_id=FINANCIAL, weight=1.0, is_external=True),
    ])
    db.session.add_all([
        ImprovementAreaOption(name="Sleep", description="Sleep better"),
        WellnessActivityOption(name="Walking", description="Walk daily"),
    ])


def _make_user(username: str, role: Role = Role.USER) -> User:
    user = User(username=username, email=f"{username}@example.com", role=role)
    user.set_password("password")
    user.profile = Profile(first_name=username.title(), last_name="Tester")
    db.session.add(user)
    return user


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        _seed_reference_data()
        _make_user("alice")
        _make_user("bob")
        _make_user("admin", Role.ADMIN)
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(username: str) -> User:
    return User.query.filter_by(username=username).one()


def _headers(user: User) -> dict:
    token = create_access_token(identity=user.user_id, additional_claims={"role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_profile_id(app) -> str:
    return _user("alice").profile.profile_id


@pytest.fixture
def bob_profile_id(app) -> str:
    return _user("bob").profile.profile_id


@pytest.fixture
def alice_headers(app) -> dict:
    return _headers(_user("alice"))


@pytest.fixture
def bob_headers(app) -> dict:
    return _headers(_user("bob"))


@pytest.fixture
def admin_headers(app) -> dict:
    return _headers(_user("admin"))
