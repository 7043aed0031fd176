"""
Database models for the Wellness Survey API.

The schema has three groups of tables:

* accounts: ``User`` and its one-to-one wellness ``Profile``;
* reference data, seeded out of band and read-only to the application:
  questions, their options (each carrying a score), wellness categories,
  the weighted question-to-category mapping and two option catalogs;
* surveys: a ``Survey`` header owned by a profile, its ``SurveyResponse``
  rows and the derived ``SurveyCategoryScore`` rows.

Category scores are never written by clients. They are recomputed by
``services.survey_service`` every time a survey's responses change.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, date
from typing import Optional, List

from werkzeug.security import generate_password_hash, check_password_hash

from . import db

# Scores and weights are small decimals; read them back as floats.
Score = db.Numeric(8, 2, asdecimal=False)


def _uuid() -> str:
    return str(uuid.uuid4())


class Role(enum.Enum):
    """Enumeration of user roles."""
    USER = "user"
    ADMIN = "admin"


class User(db.Model):
    """An account that can authenticate against the API.

    Passwords are stored as salted hashes. Inactive users keep their
    data but their profile no longer counts as existing for new surveys.
    """
    __allow_unmapped__ = True
    __tablename__ = "users"

    user_id: str = db.Column(db.String(36), primary_key=True, default=_uuid)
    username: str = db.Column(db.String(50), unique=True, nullable=False)
    email: str = db.Column(db.String(120), unique=True, nullable=False)
    password_hash: str = db.Column(db.String(256), nullable=False)
    role: Role = db.Column(db.Enum(Role), default=Role.USER, nullable=False)
    is_active: bool = db.Column(db.Boolean, default=True, nullable=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    profile: Optional[Profile] = db.relationship("Profile", back_populates="user", uselist=False)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"


class Profile(db.Model):
    """Wellness profile of a user; the owner of surveys."""
    __allow_unmapped__ = True
    __tablename__ = "profiles"

    profile_id: str = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.user_id"), unique=True, nullable=False)
    first_name: Optional[str] = db.Column(db.String(100))
    last_name: Optional[str] = db.Column(db.String(100))
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user: User = db.relationship("User", back_populates="profile")
    surveys: List[Survey] = db.relationship("Survey", back_populates="profile")

    def __repr__(self) -> str:
        return f"<Profile {self.profile_id}>"


class Question(db.Model):
    __allow_unmapped__ = True
    __tablename__ = "wellness_questions"

    question_id: int = db.Column(db.Integer, primary_key=True)
    question_text: str = db.Column(db.String(500), nullable=False)
    section_number: int = db.Column(db.Integer, nullable=False)
    question_number: int = db.Column(db.Integer, nullable=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    options: List[QuestionOption] = db.relationship(
        "QuestionOption", back_populates="question", order_by="QuestionOption.display_order"
    )
    mappings: List[QuestionCategoryMapping] = db.relationship(
        "QuestionCategoryMapping", back_populates="question"
    )

    def __repr__(self) -> str:
        return f"<Question {self.question_number}>"


class QuestionOption(db.Model):
    """A selectable answer to a question and the raw score it is worth."""
    __allow_unmapped__ = True
    __tablename__ = "wellness_question_options"

    option_id: int = db.Column(db.Integer, primary_key=True)
    question_id: int = db.Column(db.Integer, db.ForeignKey("wellness_questions.question_id"), nullable=False)
    option_text: str = db.Column(db.String(255), nullable=False)
    score: float = db.Column(Score, nullable=False)
    display_order: int = db.Column(db.Integer, nullable=False, default=0)

    question: Question = db.relationship("Question", back_populates="options")

    def __repr__(self) -> str:
        return f"<QuestionOption {self.option_id} q={self.question_id} score={self.score}>"


class Category(db.Model):
    __allow_unmapped__ = True
    __tablename__ = "wellness_categories"

    category_id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(100), unique=True, nullable=False)
    description: Optional[str] = db.Column(db.String(255))
    display_order: int = db.Column(db.Integer, nullable=False, default=0)

    mappings: List[QuestionCategoryMapping] = db.relationship(
        "QuestionCategoryMapping", back_populates="category"
    )

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class QuestionCategoryMapping(db.Model):
    """Weighted contribution of a question to a category score.

    ``is_external`` marks questions sourced outside the core questionnaire.
    """
    __allow_unmapped__ = True
    __tablename__ = "question_category_mapping"

    mapping_id: int = db.Column(db.Integer, primary_key=True)
    question_id: int = db.Column(db.Integer, db.ForeignKey("wellness_questions.question_id"), nullable=False)
    category_id: int = db.Column(db.Integer, db.ForeignKey("wellness_categories.category_id"), nullable=False)
    weight: float = db.Column(Score, nullable=False, default=1.0)
    is_external: bool = db.Column(db.Boolean, nullable=False, default=False)

    question: Question = db.relationship("Question", back_populates="mappings")
    category: Category = db.relationship("Category", back_populates="mappings")

    __table_args__ = (
        db.UniqueConstraint("question_id", "category_id", name="uix_question_category"),
    )

    def __repr__(self) -> str:
        return f"<Mapping q={self.question_id} c={self.category_id} w={self.weight}>"


class ImprovementAreaOption(db.Model):
    __allow_unmapped__ = True
    __tablename__ = "improvement_areas_options"

    option_id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(100), unique=True, nullable=False)
    description: Optional[str] = db.Column(db.String(255))


class WellnessActivityOption(db.Model):
    __allow_unmapped__ = True
    __tablename__ = "wellness_activities_options"

    option_id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(100), unique=True, nullable=False)
    description: Optional[str] = db.Column(db.String(255))


class Survey(db.Model):
    """One completed wellness questionnaire for a profile.

    ``version`` starts at 1 and is bumped by SQLAlchemy on every UPDATE of
    the header row; a flush against a row whose version moved underneath
    raises ``StaleDataError``.
    """
    __allow_unmapped__ = True
    __tablename__ = "wellness_surveys"

    survey_id: str = db.Column(db.String(36), primary_key=True, default=_uuid)
    profile_id: str = db.Column(db.String(36), db.ForeignKey("profiles.profile_id"), nullable=False, index=True)
    consent_given: bool = db.Column(db.Boolean, nullable=False, default=False)
    survey_date: date = db.Column(db.Date, nullable=False, default=date.today)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    version: int = db.Column(db.Integer, nullable=False)

    profile: Profile = db.relationship("Profile", back_populates="surveys")
    responses: List[SurveyResponse] = db.relationship(
        "SurveyResponse", back_populates="survey", order_by="SurveyResponse.response_id"
    )
    category_scores: List[SurveyCategoryScore] = db.relationship(
        "SurveyCategoryScore", back_populates="survey"
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Survey {self.survey_id} profile={self.profile_id} v{self.version}>"


class SurveyResponse(db.Model):
    """Answer to one question within a survey.

    ``score`` is copied from the selected option when the response is
    written, so later edits to option scores leave history untouched.
    """
    __allow_unmapped__ = True
    __tablename__ = "survey_responses"

    response_id: int = db.Column(db.Integer, primary_key=True)
    survey_id: str = db.Column(db.String(36), db.ForeignKey("wellness_surveys.survey_id"), nullable=False, index=True)
    question_id: int = db.Column(db.Integer, db.ForeignKey("wellness_questions.question_id"), nullable=False)
    selected_option_id: int = db.Column(
        db.Integer, db.ForeignKey("wellness_question_options.option_id"), nullable=False
    )
    score: float = db.Column(Score, nullable=False)

    survey: Survey = db.relationship("Survey", back_populates="responses")
    question: Question = db.relationship("Question")
    selected_option: QuestionOption = db.relationship("QuestionOption")

    def __repr__(self) -> str:
        return f"<SurveyResponse survey={self.survey_id} q={self.question_id} score={self.score}>"


class SurveyCategoryScore(db.Model):
    __allow_unmapped__ = True
    __tablename__ = "survey_category_scores"

    survey_id: str = db.Column(db.String(36), db.ForeignKey("wellness_surveys.survey_id"), primary_key=True)
    category_id: int = db.Column(db.Integer, db.ForeignKey("wellness_categories.category_id"), primary_key=True)
    score: float = db.Column(Score, nullable=False)

    survey: Survey = db.relationship("Survey", back_populates="category_scores")
    category: Category = db.relationship("Category")

    def __repr__(self) -> str:
        return f"<SurveyCategoryScore survey={self.survey_id} c={self.category_id} score={self.score}>"


class WellnessMetricSnapshot(db.Model):
    """Point-in-time summary of survey volume and recency across all profiles."""
    __allow_unmapped__ = True
    __tablename__ = "wellness_metrics"

    snapshot_id: int = db.Column(db.Integer, primary_key=True)
    calculation_date: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    total_surveys: int = db.Column(db.Integer, nullable=False, default=0)
    unique_profiles: int = db.Column(db.Integer, nullable=False, default=0)
    first_survey: Optional[datetime] = db.Column(db.DateTime)
    latest_survey: Optional[datetime] = db.Column(db.DateTime)
    average_total_score: Optional[float] = db.Column(Score)

    def __repr__(self) -> str:
        return f"<WellnessMetricSnapshot {self.calculation_date} surveys={self.total_surveys}>"
