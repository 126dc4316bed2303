import pytest

from academy.services.assessment_flow import (
    FlowInputError,
    is_pre_assessment_complete,
    normalize_answers,
    normalize_history,
    parse_rating,
)


@pytest.mark.parametrize("rating,history,expected", [
    (1, [], True),
    (1, [{"question": "q", "answer": "a"}] * 2, True),
    (2, [], False),
    (5, [{}] * 4, False),
    (5, [{}] * 5, True),
    (3, None, False),
    (1, "not a list", True),
    (3, "not a list", False),
])
def test_completion_rule(rating, history, expected):
    assert is_pre_assessment_complete(rating, history) is expected


@pytest.mark.parametrize("raw,expected", [(3, 3), ("4", 4), (2.0, 2), (" 1 ", 1)])
def test_parse_rating_accepts_integers(raw, expected):
    assert parse_rating(raw) == expected


@pytest.mark.parametrize("raw", [None, True, "abc", 2.5, [3]])
def test_parse_rating_rejects(raw):
    with pytest.raises(FlowInputError):
        parse_rating(raw)


def test_history_normalized():
    assert normalize_history([{"question": "q", "answer": None}]) == [{"question": "q", "answer": ""}]
    assert normalize_history(None) == []
    with pytest.raises(FlowInputError):
        normalize_history([{"answer": "no question"}])


def test_answers_must_be_non_empty_list():
    with pytest.raises(FlowInputError):
        normalize_answers([])
    with pytest.raises(FlowInputError):
        normalize_answers({"question": "q"})
