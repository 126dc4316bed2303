"""Best-effort decoding of model output.

The inference services give no structured-output guarantee, so every
decoder here returns a ParseResult instead of raising. Callers decide what
a failure means.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_NUMBERED_RE = re.compile(r"^\s*\d+[.)]\s*(.+)")
_QUESTION_PREFIX_RE = re.compile(
    r"(?:Question:|Here is the question:|The question is:|\[Question\])\s*(.*)",
    re.IGNORECASE | re.DOTALL,
)
_ANSWER_SPLIT_RE = re.compile(r"Answer:", re.IGNORECASE)


@dataclass
class ParseResult:
    ok: bool
    value: Any = None
    error: Optional[str] = None
    strategy: Optional[str] = None

    @classmethod
    def success(cls, value, strategy):
        return cls(ok=True, value=value, strategy=strategy)

    @classmethod
    def failure(cls, error):
        return cls(ok=False, error=error)


def strip_fences(text: str) -> str:
    return _FENCE_RE.sub('', text or '').strip()


def _bracket_slice(text, opener, closer):
    first = text.find(opener)
    last = text.rfind(closer)
    if first == -1 or last == -1 or last <= first:
        return None
    return text[first:last + 1]


def _decode(text, opener, closer, expected_type):
    text = text or ''
    errors = []

    chunk = _bracket_slice(text, opener, closer)
    if chunk is not None:
        try:
            value = json.loads(chunk)
            if isinstance(value, expected_type):
                return ParseResult.success(value, 'brackets')
            errors.append(f'brackets: decoded {type(value).__name__}')
        except ValueError as e:
            errors.append(f'brackets: {e}')
    else:
        errors.append(f'brackets: no {opener}...{closer} pair')

    cleaned = strip_fences(text)
    try:
        value = json.loads(cleaned)
        if isinstance(value, expected_type):
            return ParseResult.success(value, 'fences')
        errors.append(f'fences: decoded {type(value).__name__}')
    except ValueError as e:
        errors.append(f'fences: {e}')

    return ParseResult.failure('; '.join(errors) + f' (content: {text[:200]!r})')


def decode_json_object(text: str) -> ParseResult:
    return _decode(text, '{', '}', dict)


def decode_json_array(text: str) -> ParseResult:
    return _decode(text, '[', ']', list)


def parse_numbered_questions(text: str) -> ParseResult:
    """Pick `1. Question?` style lines out of free text as short-answer questions."""
    questions = []
    for line in (text or '').splitlines():
        m = _NUMBERED_RE.match(line)
        if m:
            questions.append({
                'id': len(questions) + 1,
                'question': m.group(1).strip(),
                'type': 'short_answer',
            })
    if not questions:
        return ParseResult.failure('no numbered lines found')
    return ParseResult.success(questions, 'numbered_lines')


def clean_question_text(text: str) -> str:
    text = (text or '').strip()
    m = _QUESTION_PREFIX_RE.search(text)
    if m and m.group(1).strip():
        text = m.group(1).strip()
    # the model sometimes answers its own question
    return _ANSWER_SPLIT_RE.split(text)[0].strip()
