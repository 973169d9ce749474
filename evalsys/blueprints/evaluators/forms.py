from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, IntegerField, BooleanField
from wtforms.validators import DataRequired, Optional, Length, Email


class EvaluatorForm(FlaskForm):
    name = StringField("평가위원명", validators=[DataRequired(), Length(max=120)])
    email = StringField("Email", validators=[Optional(), Email(check_deliverability=False)])
    department = StringField("소속", validators=[DataRequired(), Length(max=200)])
    password = PasswordField("비밀번호", validators=[DataRequired(), Length(min=4)])
    sort_order = IntegerField("순서", default=0, validators=[Optional()])
    is_active = BooleanField("활성", default=True)


class EvaluatorUpdateForm(EvaluatorForm):
    password = PasswordField("비밀번호", validators=[Optional(), Length(min=4)])
