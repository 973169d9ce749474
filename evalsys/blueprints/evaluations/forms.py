from flask_wtf import FlaskForm
from wtforms import IntegerField
from wtforms.validators import InputRequired


class ScoreSubmissionForm(FlaskForm):
    # the scores map itself is checked by clean_scores; WTForms has no mapping field
    candidate_id = IntegerField("평가대상", validators=[InputRequired()])
