"""Service layer for the Wellness Survey API.

This package contains business logic that sits between the
Flask route handlers and the database models. Separating
services into their own modules helps keep the routes thin
and reusable, and makes the core calculations (like category
scores) easy to unit test.

Nothing in this package should perform any HTTP handling.
Instead, services return simple Python data structures or
database objects, and raise exceptions defined in
``wellness_api.errors`` when something goes wrong. Every
service receives its database session from the caller.
"""

from .scoring_service import compute_category_scores, total_score
from .survey_service import SurveyTransactionManager
from .query_service import SurveyQueryService
from .metrics_service import get_user_metrics, refresh_metrics
from .profile_service import profile_exists, get_active_profile

__all__ = [
    "compute_category_scores",
    "total_score",
    "SurveyTransactionManager",
    "SurveyQueryService",
    "refresh_metrics",
    "get_user_metrics",
    "profile_exists",
    "get_active_profile",
]
