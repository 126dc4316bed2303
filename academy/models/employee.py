from ..extensions import db
from .base import UUIDPrimaryKeyMixin, TimestampMixin


class Employee(db.Model, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "employees"

    name = db.Column(db.String(120), nullable=False)
    job_title = db.Column(db.String(120))
    department = db.Column(db.String(120))  # display name, not a departments FK
    ranking = db.Column(db.Integer, default=0)
    win_rate = db.Column(db.Float, default=0)  # 0-100
    streak = db.Column(db.Integer, default=0)

    assessments = db.relationship("Assessment", back_populates="employee", lazy="dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "job_title": self.job_title,
            "department": self.department,
            "ranking": self.ranking,
            "win_rate": self.win_rate,
            "streak": self.streak,
        }

    def __repr__(self) -> str:
        return f"<Employee id={self.id} name={self.name!r}>"
