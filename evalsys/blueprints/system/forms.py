from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, BooleanField, IntegerField, DateTimeField
from wtforms.validators import DataRequired, Optional, Length, NumberRange, ValidationError

DATETIME_FORMATS = ["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ",
                    "%Y-%m-%dT%H:%M", "%Y-%m-%d"]


class SystemConfigForm(FlaskForm):
    evaluation_title = StringField("평가 제목", default="종합평가시스템", validators=[DataRequired(), Length(max=200)])
    system_name = StringField("시스템명", validators=[Optional(), Length(max=200)])
    description = TextAreaField("설명", validators=[Optional()])
    is_evaluation_active = BooleanField("평가 진행", default=False)
    allow_public_results = BooleanField("결과 공개", default=False)
    evaluation_start_date = DateTimeField("평가 시작", format=DATETIME_FORMATS, validators=[Optional()])
    evaluation_end_date = DateTimeField("평가 종료", format=DATETIME_FORMATS, validators=[Optional()])
    max_score = IntegerField("만점", default=100, validators=[Optional(), NumberRange(min=1)])

    def validate_evaluation_end_date(self, field):
        start = self.evaluation_start_date.data
        if field.data and start and field.data < start:
            raise ValidationError("End date must not be before the start date.")
