from ..extensions import db
from .base import UUIDPrimaryKeyMixin, TimestampMixin
from werkzeug.security import generate_password_hash, check_password_hash


class Admin(db.Model, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "admins"

    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120))

    def set_password(self, raw):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw):
        return check_password_hash(self.password_hash, raw)
