"""Prompt templates for scenario generation, adaptive questioning, quiz
generation and rubric grading.

Every operation either returns a value in its documented shape or raises
GenerationError. Nothing degraded is handed back to be cached or stored.
"""

import json
from typing import Any, Dict, List

from flask import current_app

from .errors import GenerationError, RubricError
from .inference import invoke_model
from .parsing import (
    clean_question_text,
    decode_json_array,
    decode_json_object,
    parse_numbered_questions,
)

RUBRIC_CATEGORIES = ('generic', 'department', 'module')
CRITERIA_PER_CATEGORY = 3
MAX_CRITERION_SCORE = 10
POST_ASSESSMENT_QUESTION_COUNT = 5

SCENARIO_CONTEXT_CHARS = 10000
ADAPTIVE_CONTEXT_CHARS = 5000
POST_ASSESSMENT_CONTEXT_CHARS = 8000

SCENARIO_PROMPT = """
You are an expert training content analyzer.

Training Material:
{material} ... (truncated)

Task:
1. Analyze the text and write a concise context/summary of the material (2-3 sentences).
2. Name the training module (e.g. "Cybersecurity Basics", "Phishing Awareness").
3. Write a 3x3 rubric (9 criteria) for evaluating understanding of the material:
   - 3 "generic" criteria (e.g. Clarity, Accuracy, Critical Thinking).
   - 3 "department" criteria relevant to the department's domain.
   - 3 "module" criteria specific to this content.

Respond with JSON of this shape:
{{
    "title": "Module Name",
    "scenario_text": "The context/summary of the material...",
    "task": "Review the training material and answer the assessment questions.",
    "difficulty": "Normal",
    "category": "Module Name",
    "rubric": {{
        "generic": ["criterion 1", "criterion 2", "criterion 3"],
        "department": ["criterion 1", "criterion 2", "criterion 3"],
        "module": ["criterion 1", "criterion 2", "criterion 3"]
    }},
    "hint": "Focus on the key concepts."
}}

IMPORTANT:
1. "rubric" must contain exactly 3 keys: "generic", "department", "module".
2. Each rubric key must be an array of exactly 3 strings.
3. Return ONLY the JSON object.
"""

ADAPTIVE_PROMPT = """
You are a helpful mentor.

Context:
{context} ...

History:
{history}

Task:
Ask the user a single interesting question about the Context to start a discussion.
- If History is empty, ask a general question.
- If History exists, ask a follow-up question that builds on the previous answers.

IMPORTANT: Return ONLY the question text.
"""

POST_ASSESSMENT_PROMPT = """
You are a trivia generator.

Text:
{context} ...

Task:
Generate {count} trivia questions based on the Text.
- Mix multiple choice and short answer questions.

Return a JSON array of objects, for example:
[
    {{ "id": 1, "question": "Question?", "type": "multiple_choice", "options": ["A", "B", "C", "D"] }},
    {{ "id": 2, "question": "Question?", "type": "short_answer" }}
]

IMPORTANT: Return ONLY the JSON array.
"""

EVALUATION_PROMPT = """
You are an expert grader. Evaluate the following answers against the rubric.

Rubric (9 criteria):
{rubric}

Q&A:
{qa}

Task:
1. Evaluate the answers against the 3 generic, 3 department and 3 module criteria.
2. Give a score from 0 to 10 for each of the 9 criteria.
3. Give brief feedback for each category.
4. Give a final total score from 0 to 100.

Return JSON:
{{
    "scores": {{
        "generic": [8, 9, 7],
        "department": [7, 8, 8],
        "module": [9, 9, 10]
    }},
    "feedback": {{
        "generic": "...",
        "department": "...",
        "module": "..."
    }},
    "total_score": 85
}}

IMPORTANT: Return ONLY the JSON object. Do NOT include markdown formatting.
"""


def format_qa(pairs) -> str:
    return '\n\n'.join(
        f"Q{i}: {p.get('question', '')}\nA{i}: {p.get('answer', '')}"
        for i, p in enumerate(pairs, start=1)
    )


def normalize_rubric(raw) -> Dict[str, List[str]]:
    """Coerce a generated rubric into exactly 3 categories x 3 criteria.

    Extra criteria are dropped. A missing category or one with fewer than 3
    usable criteria cannot be repaired and raises RubricError.
    """
    if not isinstance(raw, dict):
        raise RubricError(f'rubric must be an object, got {type(raw).__name__}')
    lowered = {str(k).strip().lower(): v for k, v in raw.items()}
    rubric = {}
    for cat in RUBRIC_CATEGORIES:
        items = lowered.get(cat)
        if isinstance(items, str):
            items = [items]
        if not isinstance(items, list):
            raise RubricError(f'rubric category {cat!r} is missing')
        criteria = [str(c).strip() for c in items if c is not None and str(c).strip()]
        if len(criteria) < CRITERIA_PER_CATEGORY:
            raise RubricError(f'rubric category {cat!r} has {len(criteria)} criteria, expected {CRITERIA_PER_CATEGORY}')
        rubric[cat] = criteria[:CRITERIA_PER_CATEGORY]
    return rubric


def _text_field(data, name) -> str:
    value = data.get(name)
    if value is None:
        return ''
    if isinstance(value, (dict, list, bool)):
        raise GenerationError(f'generated scenario field {name!r} is not text')
    return str(value).strip()


def generate_scenario(text: str) -> Dict[str, Any]:
    prompt = SCENARIO_PROMPT.format(material=(text or '')[:SCENARIO_CONTEXT_CHARS])
    content = invoke_model(prompt, max_tokens=2000, temperature=0)

    parsed = decode_json_object(content)
    if not parsed.ok:
        raise GenerationError(f'Failed to decode scenario from model output: {parsed.error}')
    data = parsed.value

    title = _text_field(data, 'title')
    scenario_text = _text_field(data, 'scenario_text')
    if not title or not scenario_text:
        raise GenerationError('generated scenario is missing a title or scenario_text')

    return {
        'title': title,
        'scenario_text': scenario_text,
        'task': _text_field(data, 'task') or 'Review the training material and answer the assessment questions.',
        'difficulty': _text_field(data, 'difficulty') or 'Normal',
        'category': _text_field(data, 'category') or 'Training',
        'rubric': normalize_rubric(data.get('rubric')),
        'hint': _text_field(data, 'hint'),
    }


def generate_adaptive_question(context_text: str, history) -> str:
    history_text = format_qa(history) if history else 'No previous interaction.'
    prompt = ADAPTIVE_PROMPT.format(
        context=(context_text or '')[:ADAPTIVE_CONTEXT_CHARS],
        history=history_text,
    )
    content = invoke_model(prompt, max_tokens=500, temperature=0.7)
    question = clean_question_text(content)
    if not question:
        raise GenerationError('model returned an empty question')
    return question


def _normalize_question(item, index):
    if isinstance(item, str):
        item = {'question': item}
    if not isinstance(item, dict):
        return None
    question = str(item.get('question') or '').strip()
    if not question:
        return None
    options = item.get('options')
    options = [str(o).strip() for o in options if str(o).strip()] if isinstance(options, list) else []
    if len(options) >= 2:
        return {'id': index, 'question': question, 'type': 'multiple_choice', 'options': options}
    return {'id': index, 'question': question, 'type': 'short_answer'}


def generate_post_assessment_questions(context_text: str) -> List[Dict[str, Any]]:
    prompt = POST_ASSESSMENT_PROMPT.format(
        context=(context_text or '')[:POST_ASSESSMENT_CONTEXT_CHARS],
        count=POST_ASSESSMENT_QUESTION_COUNT,
    )
    content = invoke_model(prompt, max_tokens=2000, temperature=0)

    parsed = decode_json_array(content)
    if not parsed.ok:
        fallback = parse_numbered_questions(content)
        if not fallback.ok:
            raise GenerationError(f'Failed to decode post-assessment questions: {parsed.error}')
        parsed = fallback
    current_app.logger.debug('post-assessment questions decoded via %s', parsed.strategy)

    questions = []
    for item in parsed.value:
        q = _normalize_question(item, len(questions) + 1)
        if q:
            questions.append(q)
        if len(questions) == POST_ASSESSMENT_QUESTION_COUNT:
            break
    if not questions:
        raise GenerationError('model returned no usable post-assessment questions')
    return questions


def _clamp(value, low, high):
    return max(low, min(high, value))


def _criterion_scores(raw):
    out = []
    for v in (raw if isinstance(raw, list) else [])[:CRITERIA_PER_CATEGORY]:
        try:
            out.append(int(round(_clamp(float(v), 0, MAX_CRITERION_SCORE))))
        except (TypeError, ValueError):
            out.append(0)
    return out + [0] * (CRITERIA_PER_CATEGORY - len(out))


def normalize_evaluation(data) -> Dict[str, Any]:
    raw_scores = data.get('scores') if isinstance(data.get('scores'), dict) else {}
    has_scores = any(isinstance(raw_scores.get(c), list) for c in RUBRIC_CATEGORIES)
    scores = {c: _criterion_scores(raw_scores.get(c)) for c in RUBRIC_CATEGORIES}

    total = data.get('total_score')
    try:
        total = float(total)
    except (TypeError, ValueError):
        if not has_scores:
            raise GenerationError('evaluation has neither a total_score nor per-criterion scores')
        maximum = len(RUBRIC_CATEGORIES) * CRITERIA_PER_CATEGORY * MAX_CRITERION_SCORE
        total = sum(sum(v) for v in scores.values()) * 100.0 / maximum
    total = int(round(_clamp(total, 0, 100)))

    raw_feedback = data.get('feedback')
    if isinstance(raw_feedback, dict):
        feedback = {c: str(raw_feedback.get(c) or '') for c in RUBRIC_CATEGORIES}
    else:
        feedback = {c: '' for c in RUBRIC_CATEGORIES}
        if raw_feedback:
            feedback['generic'] = str(raw_feedback)

    return {'scores': scores, 'feedback': feedback, 'total_score': total}


def evaluate_assessment(answers, rubric) -> Dict[str, Any]:
    prompt = EVALUATION_PROMPT.format(
        rubric=json.dumps(rubric, indent=2, ensure_ascii=False),
        qa=format_qa(answers),
    )
    content = invoke_model(prompt, max_tokens=1500, temperature=0)
    parsed = decode_json_object(content)
    if not parsed.ok:
        raise GenerationError(f'Failed to decode evaluation: {parsed.error}')
    return normalize_evaluation(parsed.value)
