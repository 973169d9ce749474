from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from ..extensions import db
from .base import SerializeMixin, TimestampMixin


class Admin(db.Model, UserMixin, SerializeMixin, TimestampMixin):
    __tablename__ = "admins"
    __hidden__ = ("password_hash",)

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    role = "admin"

    def get_id(self):
        return f"admin:{self.id}"

    def set_password(self, raw):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw):
        return check_password_hash(self.password_hash, raw)

    def session_view(self) -> dict:
        return {"id": self.id, "username": self.username, "name": self.name}

    def __repr__(self) -> str:
        return f"<Admin id={self.id} username={self.username!r}>"
