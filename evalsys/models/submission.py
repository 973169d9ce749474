from ..extensions import db
from .base import SerializeMixin, TimestampMixin


class EvaluationSubmission(db.Model, SerializeMixin, TimestampMixin):
    """One evaluator's scores for one candidate.

    ``scores`` maps evaluation item id (as a string) to the entered score.
    ``is_completed`` separates temporary saves from final submissions.
    """
    __tablename__ = "evaluation_submissions"

    id = db.Column(db.Integer, primary_key=True)
    evaluator_id = db.Column(db.Integer, db.ForeignKey("evaluators.id"), nullable=False, index=True)
    candidate_id = db.Column(db.Integer, db.ForeignKey("candidates.id"), nullable=False, index=True)
    scores = db.Column(db.JSON, nullable=False, default=dict)
    total_score = db.Column(db.Float, nullable=False, default=0)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    submitted_at = db.Column(db.DateTime)

    evaluator = db.relationship("Evaluator", back_populates="submissions")
    candidate = db.relationship("Candidate", back_populates="submissions")

    __table_args__ = (
        db.UniqueConstraint("evaluator_id", "candidate_id", name="uq_submissions_evaluator_candidate"),
    )

    def __repr__(self) -> str:
        return (f"<EvaluationSubmission evaluator={self.evaluator_id} "
                f"candidate={self.candidate_id} completed={self.is_completed}>")
