import json

from ..extensions import db
from .base import UUIDPrimaryKeyMixin, TimestampMixin, iso, loads_or_raw


class Assessment(db.Model, UUIDPrimaryKeyMixin, TimestampMixin):
    """One graded submission. Rows are written once and never updated."""
    __tablename__ = "assessments"

    user_id = db.Column(db.String(36), db.ForeignKey("employees.id"), nullable=False, index=True)
    scenario_id = db.Column(db.String(36), db.ForeignKey("scenarios.id"), nullable=False, index=True)
    score = db.Column(db.Float)  # 0-100
    feedback = db.Column(db.Text)  # serialized {"generic", "department", "module"}
    user_response = db.Column(db.Text)  # serialized [{"question", "answer"}]
    difficulty = db.Column(db.String(40))

    employee = db.relationship("Employee", back_populates="assessments")
    scenario = db.relationship("Scenario")

    @classmethod
    def record(cls, user_id, scenario, evaluation, answers):
        return cls(
            user_id=user_id,
            scenario_id=scenario.id,
            score=evaluation["total_score"],
            feedback=json.dumps(evaluation["feedback"], ensure_ascii=False),
            user_response=json.dumps(answers, ensure_ascii=False),
            difficulty=scenario.difficulty,
        )

    def to_dict(self, with_scenario=False):
        out = {
            "id": self.id,
            "user_id": self.user_id,
            "scenario_id": self.scenario_id,
            "score": self.score,
            "feedback": loads_or_raw(self.feedback),
            "difficulty": self.difficulty,
            "created_at": iso(self.created_at),
        }
        if with_scenario:
            sc = self.scenario
            out["scenario"] = {"title": sc.title, "skill": sc.skill} if sc else None
        return out
