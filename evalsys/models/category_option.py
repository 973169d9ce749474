from ..extensions import db
from .base import SerializeMixin, TimestampMixin


class CategoryOption(db.Model, SerializeMixin, TimestampMixin):
    """Selectable labels for a candidate's main/sub category."""
    __tablename__ = "category_options"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    type = db.Column(db.String(10), nullable=False, default="main")  # main/sub
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    __table_args__ = (
        db.UniqueConstraint("type", "name", name="uq_category_options_type_name"),
    )
