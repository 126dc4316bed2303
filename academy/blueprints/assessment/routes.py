from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from . import bp
from ...extensions import db
from ...models.assessment import Assessment
from ...models.department import Department
from ...models.employee import Employee
from ...models.scenario import Scenario
from ...services import extraction, generation, storage
from ...services.assessment_flow import (
    FlowInputError,
    is_pre_assessment_complete,
    normalize_answers,
    normalize_history,
    parse_rating,
)
from ...services.errors import ServiceError
from ...utils.http import json_body, json_error

UPSTREAM_ERRORS = (ServiceError, BotoCoreError, ClientError, SQLAlchemyError)

DEFAULT_DEPARTMENT_NAME = 'General'
DEFAULT_SKILL = 'General'


def _tag_skill(text):
    if not current_app.config.get('SKILL_TAGGING'):
        return DEFAULT_SKILL
    try:
        return extraction.primary_skill(text) or DEFAULT_SKILL
    except (BotoCoreError, ClientError) as e:
        # Comprehend errors fall back to the default skill
        current_app.logger.warning('skill tagging failed, using %s: %s', DEFAULT_SKILL, e)
        return DEFAULT_SKILL


@bp.post("/upload-url")
def upload_url():
    data = json_body()
    file_name, content_type, user_id = data.get('fileName'), data.get('contentType'), data.get('userId')
    if not file_name or not content_type or not user_id:
        return json_error('Missing required fields', 400)

    try:
        key = storage.build_upload_key(user_id, file_name)
        url = storage.generate_upload_url(storage.default_bucket(), key, content_type)
    except UPSTREAM_ERRORS as e:
        current_app.logger.exception('Error generating upload URL')
        return json_error('Failed to generate upload URL', 500, e)

    return jsonify({"uploadUrl": url, "key": key})


@bp.post("/process")
def process_file():
    data = json_body()
    key = data.get('key')
    user_id = data.get('userId')
    department_id = data.get('departmentId')
    post_assessment_date = data.get('postAssessmentDate')
    if not key or not user_id or not department_id or not post_assessment_date:
        return json_error('Missing required fields: key, userId, departmentId, postAssessmentDate', 400)

    current_app.logger.info('processing upload %s for user %s', key, user_id)
    try:
        text = extraction.extract_text(storage.default_bucket(), key)

        dept = db.session.get(Department, department_id)
        department_name = dept.name if dept else DEFAULT_DEPARTMENT_NAME
        generated = generation.generate_scenario(f"Department: {department_name}\n\n{text}")

        scenario = Scenario(
            title=generated['title'],
            scenario_text=generated['scenario_text'],
            task=generated['task'],
            difficulty=generated['difficulty'],
            rubric=generated['rubric'],
            hint=generated['hint'],
            creator_id=user_id,
            source_file=key,
            status='draft',
            type='text',
            category=generated['category'],
            skill=_tag_skill(text),
            department_id=dept.id if dept else None,
            post_assessment_date=post_assessment_date,
        )
        db.session.add(scenario)
        db.session.commit()
    except UPSTREAM_ERRORS as e:
        db.session.rollback()
        current_app.logger.exception('Error processing file %s', key)
        return json_error('Failed to process file', 500, e)

    return jsonify({
        "message": "File processed and scenario created successfully",
        "scenario": scenario.to_dict(),
    })


@bp.get("/departments")
def list_departments():
    try:
        rows = Department.query.order_by(Department.name).all()
    except SQLAlchemyError as e:
        current_app.logger.exception('Error fetching departments')
        return json_error('Failed to fetch departments', 500, e)
    return jsonify([d.to_dict() for d in rows])


@bp.post("/pre-assessment")
def pre_assessment():
    data = json_body()
    scenario_id = data.get('scenarioId')
    if not scenario_id or data.get('rating') is None:
        return json_error('Missing required fields', 400)
    try:
        rating = parse_rating(data.get('rating'))
    except FlowInputError as e:
        return json_error(str(e), 400)

    if is_pre_assessment_complete(rating, data.get('history')):
        return jsonify({"message": "Pre-assessment complete", "complete": True, "nextQuestion": None})

    try:
        history = normalize_history(data.get('history'))
    except FlowInputError as e:
        return json_error(str(e), 400)

    try:
        scenario = db.session.get(Scenario, scenario_id)
        if not scenario:
            return json_error('Scenario not found', 404)
        question = generation.generate_adaptive_question(scenario.scenario_text, history)
    except UPSTREAM_ERRORS as e:
        current_app.logger.exception('Error in pre-assessment for scenario %s', scenario_id)
        return json_error('Failed to process pre-assessment', 500, e)

    return jsonify({"complete": False, "nextQuestion": question})


@bp.get("/post-assessment/<scenario_id>")
def post_assessment(scenario_id):
    try:
        scenario = db.session.get(Scenario, scenario_id)
        if not scenario:
            return json_error('Scenario not found', 404)
        if scenario.post_assessment_data:
            return jsonify({"questions": scenario.post_assessment_data})

        questions = generation.generate_post_assessment_questions(scenario.scenario_text)
        scenario.post_assessment_data = questions
        db.session.commit()
    except UPSTREAM_ERRORS as e:
        db.session.rollback()
        current_app.logger.exception('Error getting post-assessment for scenario %s', scenario_id)
        return json_error('Failed to get post-assessment', 500, e)

    return jsonify({"questions": questions})


@bp.post("/submit")
def submit():
    data = json_body()
    user_id, scenario_id = data.get('userId'), data.get('scenarioId')
    if not user_id or not scenario_id or data.get('answers') is None:
        return json_error('Missing required fields', 400)
    try:
        answers = normalize_answers(data.get('answers'))
    except FlowInputError as e:
        return json_error(str(e), 400)

    try:
        scenario = db.session.get(Scenario, scenario_id)
        if not scenario:
            return json_error('Scenario not found', 404)
        if not db.session.get(Employee, user_id):
            return json_error('Employee not found', 404)
        evaluation = generation.evaluate_assessment(answers, scenario.rubric)

        # every submission is its own attempt; resubmitting records another row
        row = Assessment.record(user_id, scenario, evaluation, answers)
        db.session.add(row)
        db.session.commit()
    except UPSTREAM_ERRORS as e:
        db.session.rollback()
        current_app.logger.exception('Error submitting assessment for scenario %s', scenario_id)
        return json_error('Failed to submit assessment', 500, e)

    return jsonify({
        "assessmentId": row.id,
        "score": evaluation['total_score'],
        "feedback": evaluation['feedback'],
        "breakdown": evaluation['scores'],
    })
