from ..extensions import db
from .base import SerializeMixin


class EvaluationItem(db.Model, SerializeMixin):
    __tablename__ = "evaluation_items"

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("evaluation_categories.id"), nullable=False, index=True)
    item_code = db.Column(db.String(40), nullable=False)
    item_name = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text)
    max_score = db.Column(db.Integer, nullable=False, default=10)
    weight = db.Column(db.Numeric(5, 2), nullable=False, default=1)
    is_quantitative = db.Column(db.Boolean, nullable=False, default=False)  # 정량/정성
    has_preset_scores = db.Column(db.Boolean, nullable=False, default=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    category = db.relationship("EvaluationCategory", back_populates="items")

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["categoryName"] = self.category.category_name if self.category else None
        return out

    def __repr__(self) -> str:
        return f"<EvaluationItem id={self.id} code={self.item_code!r} max={self.max_score}>"
