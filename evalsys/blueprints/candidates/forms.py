from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, IntegerField, BooleanField, SelectField
from wtforms.validators import DataRequired, Optional, Length


class CandidateForm(FlaskForm):
    name = StringField("기관명(성명)", validators=[DataRequired(), Length(max=200)])
    department = StringField("소속(부서)", validators=[DataRequired(), Length(max=200)])
    position = StringField("직책(직급)", validators=[DataRequired(), Length(max=200)])
    category = StringField("구분", validators=[Optional(), Length(max=120)])
    sub_category = StringField("세부구분", validators=[Optional(), Length(max=120)])
    description = TextAreaField("설명", validators=[Optional()])
    sort_order = IntegerField("순서", default=0, validators=[Optional()])
    is_active = BooleanField("활성", default=True)


class CategoryOptionForm(FlaskForm):
    name = StringField("이름", validators=[DataRequired(), Length(max=120)])
    type = SelectField("유형", choices=[("main", "주 카테고리"), ("sub", "하위 카테고리")], default="main")
    sort_order = IntegerField("순서", default=0, validators=[Optional()])
    is_active = BooleanField("활성", default=True)
