"""Read-side assembly of survey aggregates.

``SurveyQueryService`` composes survey headers, responses and category
scores into JSON-ready dictionaries. Nothing in this module writes to
the database. Lookups that find nothing return ``None`` and leave it to
the caller to decide whether that is an error.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..models import (
    Category,
    Profile,
    Question,
    QuestionCategoryMapping,
    QuestionOption,
    Survey,
    SurveyCategoryScore,
    SurveyResponse,
    WellnessMetricSnapshot,
)
from ..schemas import (
    CategoryScoreViewSchema,
    HistoryRecordSchema,
    ProfileSchema,
    SurveyListItemSchema,
    SurveyResponseViewSchema,
    SurveySchema,
    SurveyStatisticsSchema,
    WellnessMetricSnapshotSchema,
    WellnessProgressSchema,
)
from .scoring_service import total_score


class SurveyQueryService:
    def __init__(self, session: Session):
        self.session = session

    # -- single survey ----------------------------------------------------

    def get_by_id(self, survey_id: str) -> Optional[dict]:
        """Header, owner contact fields, responses and category scores."""
        survey = (
            self.session.query(Survey)
            .options(joinedload(Survey.profile).joinedload(Profile.user))
            .filter(Survey.survey_id == survey_id)
            .first()
        )
        if survey is None:
            return None
        data = SurveySchema().dump(survey)
        data.update(
            first_name=survey.profile.first_name,
            last_name=survey.profile.last_name,
            username=survey.profile.user.username,
            email=survey.profile.user.email,
        )
        data["responses"] = self._responses(survey_id)
        data["category_scores"] = self._category_scores(survey_id)
        return data

    def _responses(self, survey_id: str) -> List[dict]:
        rows = (
            self.session.query(SurveyResponse, Question, QuestionOption)
            .join(Question, SurveyResponse.question_id == Question.question_id)
            .join(QuestionOption, SurveyResponse.selected_option_id == QuestionOption.option_id)
            .filter(SurveyResponse.survey_id == survey_id)
            .order_by(Question.section_number, Question.question_number)
            .all()
        )
        external = self._external_question_ids([question.question_id for _, question, _ in rows])
        views = [
            {
                "response_id": response.response_id,
                "question_id": question.question_id,
                "question_number": question.question_number,
                "section_number": question.section_number,
                "question_text": question.question_text,
                "selected_option_id": option.option_id,
                "option_text": option.option_text,
                "score": response.score,
                "is_external": question.question_id in external,
            }
            for response, question, option in rows
        ]
        return SurveyResponseViewSchema(many=True).dump(views)

    def _external_question_ids(self, question_ids: List[int]) -> set:
        if not question_ids:
            return set()
        rows = (
            self.session.query(QuestionCategoryMapping.question_id)
            .filter(
                QuestionCategoryMapping.question_id.in_(question_ids),
                QuestionCategoryMapping.is_external.is_(True),
            )
            .distinct()
            .all()
        )
        return {question_id for (question_id,) in rows}

    def _category_scores(self, survey_id: str) -> List[dict]:
        rows = (
            self.session.query(SurveyCategoryScore, Category)
            .join(Category, SurveyCategoryScore.category_id == Category.category_id)
            .filter(SurveyCategoryScore.survey_id == survey_id)
            .order_by(Category.display_order, Category.category_id)
            .all()
        )
        views = [
            {
                "category_id": category.category_id,
                "name": category.name,
                "display_order": category.display_order,
                "score": score.score,
            }
            for score, category in rows
        ]
        return CategoryScoreViewSchema(many=True).dump(views)

    # -- per profile ------------------------------------------------------

    def _profile_surveys(self, profile_id: str):
        return self.session.query(Survey).filter(Survey.profile_id == profile_id)

    def get_by_profile(self, profile_id: str) -> List[dict]:
        """Survey headers for a profile, newest first."""
        surveys = self._profile_surveys(profile_id).order_by(Survey.created_at.desc()).all()
        return SurveySchema(many=True).dump(surveys)

    def get_latest_by_profile(self, profile_id: str) -> Optional[dict]:
        survey = self._profile_surveys(profile_id).order_by(Survey.created_at.desc()).first()
        if survey is None:
            return None
        data = SurveySchema().dump(survey)
        data["category_scores"] = self._category_scores(survey.survey_id)
        return data

    def get_history(
        self, profile_id: str, since: Optional[date] = None, until: Optional[date] = None
    ) -> List[dict]:
        """Summary records for trend display, newest first.

        Each record carries the survey's total score (sum of its category
        scores), the scores keyed by category name, and ``delta``, the
        change of the total from the next-older survey.
        """
        return HistoryRecordSchema(many=True).dump(self._history_records(profile_id, since, until))

    def _history_records(
        self, profile_id: str, since: Optional[date] = None, until: Optional[date] = None
    ) -> List[dict]:
        query = self._profile_surveys(profile_id)
        if since is not None:
            query = query.filter(Survey.survey_date >= since)
        if until is not None:
            query = query.filter(Survey.survey_date <= until)
        surveys = query.order_by(Survey.created_at.asc()).all()

        scores_by_survey: Dict[str, Dict[str, float]] = {s.survey_id: {} for s in surveys}
        if surveys:
            rows = (
                self.session.query(SurveyCategoryScore.survey_id, Category.name, SurveyCategoryScore.score)
                .join(Category, SurveyCategoryScore.category_id == Category.category_id)
                .filter(SurveyCategoryScore.survey_id.in_(list(scores_by_survey)))
                .order_by(Category.display_order)
                .all()
            )
            for survey_id, name, score in rows:
                scores_by_survey[survey_id][name] = score

        # deltas are folded oldest to newest, then the list is reversed
        records = []
        previous = None
        for survey in surveys:
            category_scores = scores_by_survey[survey.survey_id]
            current = total_score(category_scores)
            records.append(
                {
                    "survey_id": survey.survey_id,
                    "profile_id": survey.profile_id,
                    "survey_date": survey.survey_date,
                    "created_at": survey.created_at,
                    "consent_given": survey.consent_given,
                    "total_score": current,
                    "delta": None if previous is None else round(current - previous, 2),
                    "category_scores": category_scores,
                }
            )
            previous = current
        records.reverse()
        return records

    def get_progress(self, profile_id: str) -> dict:
        """Change of the profile's scores from its first to its latest survey.

        ``change`` and ``category_change`` compare the latest survey with
        the first one; a category missing from either side counts as 0.
        A profile without surveys yields zero counts and ``None`` figures.
        """
        records = self._history_records(profile_id)
        progress = {
            "profile_id": profile_id,
            "survey_count": len(records),
            "first_survey_date": None,
            "latest_survey_date": None,
            "first_total_score": None,
            "latest_total_score": None,
            "change": None,
            "category_change": {},
        }
        if records:
            latest, first = records[0], records[-1]
            names = dict.fromkeys(list(latest["category_scores"]) + list(first["category_scores"]))
            progress.update(
                first_survey_date=first["survey_date"],
                latest_survey_date=latest["survey_date"],
                first_total_score=first["total_score"],
                latest_total_score=latest["total_score"],
                change=round(latest["total_score"] - first["total_score"], 2),
                category_change={
                    name: round(
                        latest["category_scores"].get(name, 0.0) - first["category_scores"].get(name, 0.0), 2
                    )
                    for name in names
                },
            )
        return WellnessProgressSchema().dump(progress)

    def get_wellness_profile(self, profile_id: str) -> Optional[dict]:
        """Profile details, latest survey and progress in one document."""
        profile = (
            self.session.query(Profile)
            .options(joinedload(Profile.user))
            .filter(Profile.profile_id == profile_id)
            .first()
        )
        if profile is None:
            return None
        data = ProfileSchema().dump(profile)
        data.update(username=profile.user.username, email=profile.user.email)
        return {
            "profile": data,
            "latest_survey": self.get_latest_by_profile(profile_id),
            "progress": self.get_progress(profile_id),
        }

    # -- across profiles --------------------------------------------------

    def list_all(self) -> List[dict]:
        surveys = (
            self.session.query(Survey)
            .options(joinedload(Survey.profile).joinedload(Profile.user))
            .order_by(Survey.created_at.desc())
            .all()
        )
        return SurveyListItemSchema(many=True).dump(surveys)

    def get_aggregate_metrics(self) -> Optional[dict]:
        """Most recent metrics snapshot, or ``None`` if none was calculated."""
        snapshot = (
            self.session.query(WellnessMetricSnapshot)
            .order_by(WellnessMetricSnapshot.calculation_date.desc(), WellnessMetricSnapshot.snapshot_id.desc())
            .first()
        )
        if snapshot is None:
            return None
        return WellnessMetricSnapshotSchema().dump(snapshot)

    def get_statistics(self) -> dict:
        """Live survey volume and recency figures."""
        total, profiles, first, latest = self.session.query(
            func.count(Survey.survey_id),
            func.count(func.distinct(Survey.profile_id)),
            func.min(Survey.created_at),
            func.max(Survey.created_at),
        ).one()
        return SurveyStatisticsSchema().dump(
            {
                "total_surveys": total,
                "unique_profiles": profiles,
                "first_survey": first,
                "latest_survey": latest,
            }
        )
