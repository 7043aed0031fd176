"""Category score computation.

Scores are derived from a survey's responses and the global
question-to-category mapping. Each response contributes
``response.score * mapping.weight`` to every category its question is
mapped to, and contributions accumulate additively. Totals are raw
weighted sums: they are not divided by the total weight nor by the
number of questions.

The functions here are pure. They accept any objects exposing the
relevant attributes (ORM rows, dataclasses, named tuples), which keeps
them easy to unit test without a database.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Protocol


class ScoredResponse(Protocol):
    question_id: int
    score: float


class CategoryMapping(Protocol):
    mapping_id: int
    question_id: int
    category_id: int
    weight: float
    is_external: bool


def index_mappings(
    mappings: Iterable[CategoryMapping], include_external: bool = True
) -> Dict[int, List[CategoryMapping]]:
    """Group mapping rows by question id, ordered by ``mapping_id``."""
    by_question: Dict[int, List[CategoryMapping]] = defaultdict(list)
    for mapping in sorted(mappings, key=lambda m: m.mapping_id):
        if mapping.is_external and not include_external:
            continue
        by_question[mapping.question_id].append(mapping)
    return by_question


def compute_category_scores(
    responses: Iterable[ScoredResponse],
    mappings: Iterable[CategoryMapping],
    include_external: bool = True,
) -> Dict[int, float]:
    """Return ``{category_id: score}`` for a single survey.

    Only categories with at least one contributing response appear in
    the result. Responses whose question has no mapping are skipped.
    Responses are folded in question order and mappings in id order,
    so the same inputs always produce the same floating point totals.

    Parameters
    ----------
    responses:
        The survey's responses; each needs ``question_id`` and ``score``.
    mappings:
        Question to category mapping rows.
    include_external:
        When ``False``, mappings flagged ``is_external`` are ignored.
    """
    by_question = index_mappings(mappings, include_external=include_external)
    totals: Dict[int, float] = {}
    for response in sorted(responses, key=lambda r: r.question_id):
        for mapping in by_question.get(response.question_id, ()):
            contribution = float(response.score) * float(mapping.weight)
            totals[mapping.category_id] = totals.get(mapping.category_id, 0.0) + contribution
    return {category_id: round(total, 2) for category_id, total in totals.items()}


def total_score(category_scores: Dict[int, float]) -> float:
    """Sum of all category scores, used by history and metrics views."""
    return round(sum(category_scores.values()), 2)
