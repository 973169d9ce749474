from ..extensions import db
from .base import SerializeMixin, TimestampMixin


class Candidate(db.Model, SerializeMixin, TimestampMixin):
    __tablename__ = "candidates"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)          # 기관명(성명)
    department = db.Column(db.String(200), nullable=False)    # 소속(부서)
    position = db.Column(db.String(200), nullable=False)      # 직책(직급)
    category = db.Column(db.String(120))                      # 구분
    sub_category = db.Column(db.String(120))                  # 세부구분
    description = db.Column(db.Text)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    submissions = db.relationship("EvaluationSubmission", back_populates="candidate",
                                  cascade="all, delete-orphan", lazy="dynamic")
    preset_scores = db.relationship("CandidatePresetScore", back_populates="candidate",
                                    cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Candidate id={self.id} name={self.name!r}>"
