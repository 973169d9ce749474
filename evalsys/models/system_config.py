from ..extensions import db
from .base import SerializeMixin, TimestampMixin


class SystemConfig(db.Model, SerializeMixin, TimestampMixin):
    """Singleton row. Only ever accessed through records.get_config/upsert_config."""
    __tablename__ = "system_config"

    id = db.Column(db.Integer, primary_key=True)
    evaluation_title = db.Column(db.String(200), nullable=False, default="종합평가시스템")
    system_name = db.Column(db.String(200))
    description = db.Column(db.Text)
    is_evaluation_active = db.Column(db.Boolean, nullable=False, default=False)
    allow_public_results = db.Column(db.Boolean, nullable=False, default=False)
    evaluation_start_date = db.Column(db.DateTime)
    evaluation_end_date = db.Column(db.DateTime)
    max_score = db.Column(db.Integer, default=100)
