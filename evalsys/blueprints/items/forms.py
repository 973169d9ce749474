from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, IntegerField, BooleanField, DecimalField, FloatField
from wtforms.validators import DataRequired, InputRequired, Optional, Length, NumberRange


class CategoryForm(FlaskForm):
    category_code = StringField("코드", validators=[DataRequired(), Length(max=40)])
    category_name = StringField("구분명", validators=[DataRequired(), Length(max=200)])
    description = TextAreaField("설명", validators=[Optional()])
    sort_order = IntegerField("순서", default=0, validators=[Optional()])
    is_active = BooleanField("활성", default=True)


class EvaluationItemForm(FlaskForm):
    category_id = IntegerField("구분", validators=[InputRequired()])
    item_code = StringField("코드", validators=[DataRequired(), Length(max=40)])
    item_name = StringField("세부 항목", validators=[DataRequired(), Length(max=300)])
    description = TextAreaField("설명", validators=[Optional()])
    max_score = IntegerField("배점", default=10, validators=[InputRequired(), NumberRange(min=0)])
    weight = DecimalField("가중치", default=1, places=2, validators=[Optional(), NumberRange(min=0)])
    is_quantitative = BooleanField("정량", default=False)
    has_preset_scores = BooleanField("사전점수", default=False)
    sort_order = IntegerField("순서", default=0, validators=[Optional()])
    is_active = BooleanField("활성", default=True)


class PresetScoreForm(FlaskForm):
    candidate_id = IntegerField("평가대상", validators=[InputRequired()])
    evaluation_item_id = IntegerField("평가항목", validators=[InputRequired()])
    preset_score = FloatField("사전점수", validators=[InputRequired(), NumberRange(min=0)])
    apply_preset = BooleanField("적용", default=True)
    notes = TextAreaField("메모", validators=[Optional()])
