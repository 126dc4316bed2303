from ..extensions import db
from .base import UUIDPrimaryKeyMixin, TimestampMixin


class Department(db.Model, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "departments"

    name = db.Column(db.String(120), nullable=False, unique=True)

    def to_dict(self):
        return {"id": self.id, "name": self.name}
