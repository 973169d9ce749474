"""JSON body -> WTForms validation.

API payloads use camelCase keys; forms use snake_case field names. The body
is flattened into form data so WTForms does the type coercion exactly as it
would for a posted HTML form.
"""
import re
from datetime import date, datetime
from decimal import Decimal
from flask import request
from werkzeug.datastructures import MultiDict

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


class ValidationError(Exception):
    def __init__(self, errors, message="Invalid input"):
        super().__init__(message)
        self.message = message
        self.errors = errors


def snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def json_body():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError({"body": ["JSON object expected"]})
    return data


def _form_value(value):
    if isinstance(value, bool):
        return "y" if value else "false"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


def validate_payload(form_cls, data, obj=None, partial=False):
    """Validate ``data`` against ``form_cls`` and return cleaned field values.

    With ``partial`` (PATCH) the current values of ``obj`` fill the gaps and
    only the keys present in ``data`` are returned.
    """
    data = {snake(k): v for k, v in (data or {}).items()}
    blank = form_cls(formdata=None, meta={"csrf": False})
    merged = {name: field.data for name, field in blank._fields.items()}
    if obj is not None:
        for name in merged:
            if hasattr(obj, name):
                merged[name] = getattr(obj, name)
    merged.update({k: v for k, v in data.items() if k in merged})

    formdata = MultiDict()
    for name, value in merged.items():
        if value is None:
            continue
        if isinstance(value, (list, dict)):
            raise ValidationError({name: ["Not a valid value."]})
        formdata.add(name, _form_value(value))

    form = form_cls(formdata=formdata, meta={"csrf": False})
    if not form.validate():
        raise ValidationError(form.errors)

    cleaned = {name: field.data for name, field in form._fields.items()
               if field.type not in ("SubmitField", "CSRFTokenField")}
    if partial:
        cleaned = {k: v for k, v in cleaned.items() if k in data}
    return cleaned


def validate_many(form_cls, rows, field="items"):
    if not isinstance(rows, list) or not rows:
        raise ValidationError({field: ["A non-empty list is required."]})
    cleaned, errors = [], {}
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            errors[str(idx)] = {"row": ["JSON object expected"]}
            continue
        try:
            cleaned.append(validate_payload(form_cls, row))
        except ValidationError as e:
            errors[str(idx)] = e.errors
    if errors:
        raise ValidationError({field: errors})
    return cleaned
