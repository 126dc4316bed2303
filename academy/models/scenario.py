from ..extensions import db
from .base import UUIDPrimaryKeyMixin, TimestampMixin, iso

SCENARIO_STATUSES = ("draft", "published")


class Scenario(db.Model, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "scenarios"

    title = db.Column(db.String(255), nullable=False)
    scenario_text = db.Column(db.Text, nullable=False)
    task = db.Column(db.Text)
    difficulty = db.Column(db.String(40))
    # {"generic": [3], "department": [3], "module": [3]}
    rubric = db.Column(db.JSON, nullable=False)
    hint = db.Column(db.Text)
    creator_id = db.Column(db.String(64))
    source_file = db.Column(db.String(512))  # object key in the upload bucket
    status = db.Column(db.String(20), nullable=False, default="draft")
    type = db.Column(db.String(20), default="text")
    category = db.Column(db.String(120))
    skill = db.Column(db.String(120))
    department_id = db.Column(db.String(36), db.ForeignKey("departments.id"))
    post_assessment_date = db.Column(db.String(40))
    post_assessment_data = db.Column(db.JSON)  # cached question set, filled on first fetch

    department = db.relationship("Department")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "scenario_text": self.scenario_text,
            "task": self.task,
            "difficulty": self.difficulty,
            "rubric": self.rubric,
            "hint": self.hint,
            "creator_id": self.creator_id,
            "source_file": self.source_file,
            "status": self.status,
            "type": self.type,
            "category": self.category,
            "skill": self.skill,
            "department_id": self.department_id,
            "post_assessment_date": self.post_assessment_date,
            "post_assessment_data": self.post_assessment_data,
            "created_at": iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Scenario id={self.id} title={self.title!r} status={self.status}>"
