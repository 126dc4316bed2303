from flask import current_app, jsonify
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from . import bp
from ...extensions import db
from ...models.assessment import Assessment
from ...models.employee import Employee
from ...utils.decorators import admin_required, employee_required
from ...utils.http import json_error

RECENT_ASSESSMENTS_LIMIT = 10


@bp.get("/dashboard")
@employee_required
def dashboard():
    try:
        employee = db.session.get(Employee, current_user.id)
        if not employee:
            return json_error('Employee not found', 404)
        total = Assessment.query.filter_by(user_id=employee.id).count()
    except SQLAlchemyError:
        current_app.logger.exception('Get dashboard stats failed for %s', current_user.id)
        return json_error('Internal server error', 500)

    return jsonify({
        "success": True,
        "stats": {
            "ranking": employee.ranking,
            "win_rate": employee.win_rate,
            "streak": employee.streak,
            "total_assessments": total,
        },
    })


@bp.get("/all")
@admin_required
def all_employees():
    try:
        employees = Employee.query.order_by(Employee.name).all()
    except SQLAlchemyError:
        current_app.logger.exception('Database error fetching employees')
        return json_error('Failed to fetch employees', 500)

    current_app.logger.info('Found %d employees', len(employees))
    # dashboard rows: job title shown as role, win rate as progress
    return jsonify({
        "success": True,
        "employees": [
            {
                "id": e.id,
                "name": e.name,
                "role": e.job_title,
                "department": e.department or 'Unassigned',
                "progress": e.win_rate or 0,
                "status": "Active",
            }
            for e in employees
        ],
    })


@bp.get("/<employee_id>/details")
@admin_required
def employee_details(employee_id):
    try:
        employee = db.session.get(Employee, employee_id)
        if not employee:
            return json_error('Employee not found', 404)
        recent = (
            Assessment.query.filter_by(user_id=employee.id)
            .order_by(Assessment.created_at.desc())
            .limit(RECENT_ASSESSMENTS_LIMIT)
            .all()
        )
        assessments = [a.to_dict(with_scenario=True) for a in recent]
    except SQLAlchemyError:
        current_app.logger.exception('Get employee details failed for %s', employee_id)
        return json_error('Internal server error', 500)

    return jsonify({"success": True, "employee": employee.to_dict(), "assessments": assessments})
