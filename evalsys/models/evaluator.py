from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from ..extensions import db
from .base import SerializeMixin, TimestampMixin


class Evaluator(db.Model, UserMixin, SerializeMixin, TimestampMixin):
    __tablename__ = "evaluators"
    __hidden__ = ("password_hash",)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)  # login name
    email = db.Column(db.String(254))
    department = db.Column(db.String(200), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    submissions = db.relationship("EvaluationSubmission", back_populates="evaluator",
                                  cascade="all, delete-orphan", lazy="dynamic")

    role = "evaluator"

    def get_id(self):
        return f"evaluator:{self.id}"

    def set_password(self, raw):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw):
        return check_password_hash(self.password_hash, raw)

    def session_view(self) -> dict:
        return {"id": self.id, "name": self.name, "department": self.department}

    def __repr__(self) -> str:
        return f"<Evaluator id={self.id} name={self.name!r}>"
