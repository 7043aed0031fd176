"""Atomic survey submission and update.

``SurveyTransactionManager`` writes a survey header, replaces its
response rows and recomputes the derived category scores inside a
single database transaction. Either everything is committed or nothing
is: any failure rolls the session back before the error reaches the
caller.

Category scores are recomputed synchronously from the responses as they
stand in the transaction, immediately before the commit, so a reader
can never observe scores belonging to an older response set.

The storage session is passed in by the caller. In the web application
this is ``db.session``; tests may pass any SQLAlchemy session.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..errors import (
    ApiError,
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
    TransactionFailure,
    ValidationError,
)
from ..models import Survey, SurveyCategoryScore, SurveyResponse
from ..schemas import ResponseInput, SurveyPatch
from .query_service import SurveyQueryService
from .reference_service import load_mappings, load_options
from .scoring_service import compute_category_scores

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"


def translate_integrity_error(err: IntegrityError) -> ApiError:
    """Map a storage constraint violation onto a client-facing error.

    PostgreSQL drivers expose the SQLSTATE code; SQLite only gives a
    message, so fall back to matching on it.
    """
    orig = getattr(err, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    text = str(orig).lower()
    if code == FOREIGN_KEY_VIOLATION or "foreign key" in text:
        return InvalidReferenceError("The survey references a record that does not exist.")
    if code == UNIQUE_VIOLATION or "unique" in text:
        return ConflictError("The survey conflicts with an existing record.")
    return TransactionFailure("The survey could not be saved.")


class SurveyTransactionManager:
    """Create and update surveys as all-or-nothing units."""

    def __init__(self, session: Session, include_external: bool = True):
        self.session = session
        self.include_external = include_external
        self.queries = SurveyQueryService(session)

    @contextmanager
    def _transaction(self, action: str, survey_id: str):
        try:
            yield
            self.session.commit()
        except ApiError as err:
            self.session.rollback()
            logger.info("Survey %s %s rejected: %s", survey_id, action, err.message)
            raise
        except StaleDataError as err:
            self.session.rollback()
            logger.warning("Survey %s %s lost a concurrent update", survey_id, action)
            raise ConflictError("The survey was modified by another request.") from err
        except IntegrityError as err:
            self.session.rollback()
            logger.warning("Survey %s %s violated a constraint: %s", survey_id, action, err.orig)
            raise translate_integrity_error(err) from err
        except Exception as err:
            self.session.rollback()
            logger.exception("Survey %s %s failed and was rolled back", survey_id, action)
            raise TransactionFailure(f"The survey {action} failed.") from err

    def create_survey(
        self,
        profile_id: str,
        consent_given: bool,
        responses: List[ResponseInput],
        survey_date: Optional[date] = None,
    ) -> dict:
        """Persist a new survey and return it fully composed.

        The profile is assumed to exist; the foreign key on
        ``wellness_surveys.profile_id`` rejects it otherwise, surfaced as
        ``InvalidReferenceError``.
        """
        survey_id = str(uuid.uuid4())
        with self._transaction("create", survey_id):
            now = datetime.utcnow()
            survey = Survey(
                survey_id=survey_id,
                profile_id=profile_id,
                consent_given=bool(consent_given),
                survey_date=survey_date or now.date(),
                created_at=now,
                updated_at=now,
            )
            self.session.add(survey)
            self.session.flush()
            self._write_responses(survey_id, responses)
            self._recompute_scores(survey_id)
        logger.info("Created survey %s for profile %s with %d responses", survey_id, profile_id, len(responses))
        return self.queries.get_by_id(survey_id)

    def update_survey(self, survey_id: str, patch: SurveyPatch) -> dict:
        """Apply ``patch`` to an existing survey and return it recomposed.

        When ``patch.responses`` is given the stored response set is
        replaced in full; there is no row-level merge.
        """
        with self._transaction("update", survey_id):
            survey = self.session.get(Survey, survey_id)
            if survey is None:
                raise NotFoundError(f"Survey {survey_id} not found.")
            if patch.version is not None and patch.version != survey.version:
                raise ConflictError(
                    f"Survey version is {survey.version}, update was based on version {patch.version}."
                )
            if patch.consent_given is not None:
                survey.consent_given = patch.consent_given
            survey.updated_at = datetime.utcnow()
            self.session.flush()
            if patch.responses is not None:
                self.session.query(SurveyResponse).filter(SurveyResponse.survey_id == survey_id).delete()
                self._write_responses(survey_id, patch.responses)
            self._recompute_scores(survey_id)
        logger.info("Updated survey %s", survey_id)
        return self.queries.get_by_id(survey_id)

    def _write_responses(self, survey_id: str, responses: Iterable[ResponseInput]) -> None:
        responses = list(responses)
        options = load_options(self.session, {r.selected_option_id for r in responses})
        missing = sorted({r.selected_option_id for r in responses} - set(options))
        if missing:
            raise InvalidReferenceError(f"Unknown option(s): {', '.join(map(str, missing))}.")
        for index, response in enumerate(responses):
            option = options[response.selected_option_id]
            if option.question_id != response.question_id:
                raise ValidationError(
                    "Selected option does not belong to the question.",
                    fields={"responses": {str(index): [
                        f"option {option.option_id} belongs to question {option.question_id}, "
                        f"not {response.question_id}."
                    ]}},
                )
            if response.score is not None and float(response.score) != option.score:
                logger.debug(
                    "Survey %s: client score %s for option %s replaced by %s",
                    survey_id, response.score, option.option_id, option.score,
                )
            self.session.add(
                SurveyResponse(
                    survey_id=survey_id,
                    question_id=response.question_id,
                    selected_option_id=option.option_id,
                    score=option.score,
                )
            )
        self.session.flush()

    def _recompute_scores(self, survey_id: str) -> Dict[int, float]:
        """Upsert the survey's category scores from its stored responses."""
        responses = self.session.query(SurveyResponse).filter(SurveyResponse.survey_id == survey_id).all()
        mappings = load_mappings(self.session, {r.question_id for r in responses})
        scores = compute_category_scores(responses, mappings, include_external=self.include_external)

        existing = {
            row.category_id: row
            for row in self.session.query(SurveyCategoryScore).filter(SurveyCategoryScore.survey_id == survey_id)
        }
        for category_id, score in sorted(scores.items()):
            row = existing.pop(category_id, None)
            if row is None:
                self.session.add(SurveyCategoryScore(survey_id=survey_id, category_id=category_id, score=score))
            else:
                row.score = score
        for stale in existing.values():
            self.session.delete(stale)
        self.session.flush()
        return scores
