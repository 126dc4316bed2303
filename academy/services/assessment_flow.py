"""Assessment state transitions.

The client holds all progress (rating and Q/A history) and sends it with
every call, so these are pure functions of the supplied values.
"""

MIN_SKILL_RATING = 1
MAX_PRE_ASSESSMENT_QUESTIONS = 5


class FlowInputError(ValueError):
    pass


def parse_rating(raw) -> int:
    if isinstance(raw, bool) or raw is None:
        raise FlowInputError('rating must be an integer')
    try:
        rating = int(raw)
    except (TypeError, ValueError):
        raise FlowInputError('rating must be an integer')
    if str(raw).strip() not in (str(rating), f'{rating}.0'):
        raise FlowInputError('rating must be an integer')
    return rating


def _qa_pairs(items, name):
    if items is None:
        return []
    if not isinstance(items, list):
        raise FlowInputError(f'{name} must be a list')
    pairs = []
    for i, item in enumerate(items, start=1):
        if not isinstance(item, dict) or 'question' not in item:
            raise FlowInputError(f'{name}[{i}] must be an object with question and answer')
        pairs.append({'question': str(item.get('question') or ''), 'answer': str(item.get('answer') or '')})
    return pairs


def normalize_history(history):
    return _qa_pairs(history, 'history')


def normalize_answers(answers):
    pairs = _qa_pairs(answers, 'answers')
    if not pairs:
        raise FlowInputError('answers must not be empty')
    return pairs


def is_pre_assessment_complete(rating, history) -> bool:
    """A minimum self-rating needs no probing; otherwise stop after the question budget.

    Only the length of `history` is read, so this can run before the items are validated.
    """
    if rating == MIN_SKILL_RATING:
        return True
    return isinstance(history, list) and len(history) >= MAX_PRE_ASSESSMENT_QUESTIONS
