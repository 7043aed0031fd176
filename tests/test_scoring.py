"""Unit tests for the category scoring functions (no database)."""
from collections import namedtuple

from wellness_api.services.scoring_service import compute_category_scores, total_score

Response = namedtuple("Response", "question_id score")
Mapping = namedtuple("Mapping", "mapping_id question_id category_id weight is_external")

MAPPINGS = [
    Mapping(1, 1, "A", 1.0, False),
    Mapping(2, 2, "A", 0.5, False),
    Mapping(3, 2, "B", 2.0, False),
    Mapping(4, 3, "C", 1.0, True),
]


def test_single_response_single_category() -> None:
    assert compute_category_scores([Response(1, 10)], MAPPINGS) == {"A": 10.0}


def test_contributions_are_weighted_and_summed_without_normalisation() -> None:
    scores = compute_category_scores([Response(1, 10), Response(2, 4)], MAPPINGS)
    # A: 10 * 1.0 + 4 * 0.5, B: 4 * 2.0
    assert scores == {"A": 12.0, "B": 8.0}


def test_unmapped_question_contributes_nothing() -> None:
    assert compute_category_scores([Response(99, 7)], MAPPINGS) == {}
    assert compute_category_scores([Response(1, 5), Response(99, 7)], MAPPINGS) == {"A": 5.0}


def test_external_mappings_are_included_by_default() -> None:
    assert compute_category_scores([Response(3, 6)], MAPPINGS) == {"C": 6.0}


def test_external_mappings_can_be_excluded() -> None:
    scores = compute_category_scores([Response(1, 10), Response(3, 6)], MAPPINGS, include_external=False)
    assert scores == {"A": 10.0}


def test_scoring_is_deterministic_regardless_of_input_order() -> None:
    responses = [Response(2, 0.1), Response(1, 0.2), Response(3, 0.7)]
    first = compute_category_scores(responses, MAPPINGS)
    second = compute_category_scores(list(reversed(responses)), list(reversed(MAPPINGS)))
    assert first == second
    assert compute_category_scores(responses, MAPPINGS) == first


def test_empty_inputs() -> None:
    assert compute_category_scores([], MAPPINGS) == {}
    assert compute_category_scores([Response(1, 10)], []) == {}


def test_total_score() -> None:
    assert total_score({"A": 12.0, "B": 8.5}) == 20.5
    assert total_score({}) == 0
