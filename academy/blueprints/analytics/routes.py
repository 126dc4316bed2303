from datetime import timedelta

from flask import current_app, jsonify
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from . import bp
from ...extensions import db
from ...models.assessment import Assessment
from ...models.base import utcnow
from ...models.employee import Employee
from ...models.scenario import Scenario
from ...utils.decorators import admin_required
from ...utils.http import json_error

ACTIVITY_WINDOW_DAYS = 30
TOP_SKILLS = 5


def average_win_rate():
    avg = db.session.query(func.avg(func.coalesce(Employee.win_rate, 0))).scalar()
    # half-up, win rates are never negative
    return int(float(avg) + 0.5) if avg is not None else 0


def activity_timeline(now=None):
    """Assessments per calendar day over the window; days without activity are omitted."""
    now = now or utcnow()
    since = now - timedelta(days=ACTIVITY_WINDOW_DAYS)
    rows = Assessment.query.with_entities(Assessment.created_at).filter(Assessment.created_at >= since).all()
    daily = {}
    for (created_at,) in rows:
        if created_at is None:
            continue
        d = created_at.date().isoformat()
        daily[d] = daily.get(d, 0) + 1
    return [{"date": d, "count": daily[d]} for d in sorted(daily)]


def skill_distribution():
    skill = func.coalesce(Scenario.skill, 'Unknown').label('skill')
    rows = (
        db.session.query(skill, func.count(Assessment.id).label('cnt'))
        .select_from(Assessment)
        .outerjoin(Scenario, Scenario.id == Assessment.scenario_id)
        .group_by(skill)
        .order_by(func.count(Assessment.id).desc(), skill)
        .limit(TOP_SKILLS)
        .all()
    )
    return [{"name": r.skill, "value": int(r.cnt)} for r in rows]


@bp.get("/overview")
@admin_required
def overview():
    try:
        data = {
            "avgCompletionRate": average_win_rate(),
            "totalAssessments": Assessment.query.count(),
            "activityTimeline": activity_timeline(),
            "skillDistribution": skill_distribution(),
        }
    except SQLAlchemyError:
        current_app.logger.exception('Analytics overview failed')
        return json_error('Failed to fetch analytics', 500)

    return jsonify({"success": True, "data": data})
