from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Length


class AdminLoginForm(FlaskForm):
    username = StringField("아이디", validators=[DataRequired(), Length(max=80)])
    password = PasswordField("비밀번호", validators=[DataRequired()])


class EvaluatorLoginForm(FlaskForm):
    name = StringField("평가위원명", validators=[DataRequired(), Length(max=120)])
    password = PasswordField("비밀번호", validators=[DataRequired()])
