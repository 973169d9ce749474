from ..extensions import db
from .base import SerializeMixin


class EvaluationCategory(db.Model, SerializeMixin):
    __tablename__ = "evaluation_categories"

    id = db.Column(db.Integer, primary_key=True)
    category_code = db.Column(db.String(40), nullable=False)
    category_name = db.Column(db.String(200), nullable=False)  # e.g. 기관수행능력
    description = db.Column(db.Text)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    items = db.relationship("EvaluationItem", back_populates="category",
                            cascade="all, delete-orphan",
                            order_by="EvaluationItem.sort_order")

    def __repr__(self) -> str:
        return f"<EvaluationCategory id={self.id} name={self.category_name!r}>"
