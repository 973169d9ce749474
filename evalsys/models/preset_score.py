from ..extensions import db
from .base import SerializeMixin, TimestampMixin


class CandidatePresetScore(db.Model, SerializeMixin, TimestampMixin):
    """Admin-assigned score for a (candidate, item) pair.

    While ``apply_preset`` is set the preset replaces whatever evaluators
    enter for that item, and the field is read-only on the scoring form.
    """
    __tablename__ = "candidate_preset_scores"

    id = db.Column(db.Integer, primary_key=True)
    candidate_id = db.Column(db.Integer, db.ForeignKey("candidates.id"), nullable=False, index=True)
    evaluation_item_id = db.Column(db.Integer, db.ForeignKey("evaluation_items.id"), nullable=False)
    preset_score = db.Column(db.Float, nullable=False, default=0)
    apply_preset = db.Column(db.Boolean, nullable=False, default=True)
    notes = db.Column(db.Text)

    candidate = db.relationship("Candidate", back_populates="preset_scores")

    __table_args__ = (
        db.UniqueConstraint("candidate_id", "evaluation_item_id", name="uq_preset_candidate_item"),
    )
