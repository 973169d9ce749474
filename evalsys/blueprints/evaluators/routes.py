from flask import jsonify, request
from . import bp
from .forms import EvaluatorForm, EvaluatorUpdateForm
from ...extensions import db
from ...models import Evaluator
from ...services import records
from ...utils.decorators import admin_required
from ...utils.validation import json_body, validate_payload, validate_many, ValidationError


def _ensure_unique_name(name, current_id=None):
    existing = records.get_evaluator_by_name(name)
    if existing and existing.id != current_id:
        raise ValidationError({"name": ["이미 등록된 평가위원명입니다"]})


@bp.get("/admin/evaluators")
@admin_required
def list_evaluators():
    active = request.args.get("active") in ("1", "true")
    return jsonify([e.to_dict() for e in records.list_evaluators(active_only=active)])


@bp.post("/admin/evaluators")
@admin_required
def create_evaluator():
    data = validate_payload(EvaluatorForm, json_body())
    _ensure_unique_name(data["name"])
    ev = records.create_evaluator(data)
    return jsonify(ev.to_dict()), 201


@bp.post("/admin/evaluators/bulk")
@admin_required
def bulk_create_evaluators():
    rows = validate_many(EvaluatorForm, json_body().get("evaluators"), field="evaluators")
    names = [r["name"] for r in rows]
    if len(set(names)) != len(names):
        raise ValidationError({"evaluators": ["평가위원명이 중복되었습니다"]})
    for name in names:
        _ensure_unique_name(name)
    created = records.create_evaluators(rows)
    return jsonify([e.to_dict() for e in created]), 201


@bp.get("/admin/evaluators/<int:evaluator_id>")
@admin_required
def get_evaluator(evaluator_id):
    ev = db.get_or_404(Evaluator, evaluator_id)
    out = ev.to_dict()
    out.update(records.evaluator_progress(ev.id))
    return jsonify(out)


@bp.patch("/admin/evaluators/<int:evaluator_id>")
@admin_required
def update_evaluator(evaluator_id):
    ev = db.get_or_404(Evaluator, evaluator_id)
    data = validate_payload(EvaluatorUpdateForm, json_body(), obj=ev, partial=True)
    if "name" in data:
        _ensure_unique_name(data["name"], current_id=ev.id)
    records.update_evaluator(ev, data)
    return jsonify(ev.to_dict())


@bp.delete("/admin/evaluators/<int:evaluator_id>")
@admin_required
def delete_evaluator(evaluator_id):
    ev = db.get_or_404(Evaluator, evaluator_id)
    records.delete_evaluator(ev)
    return jsonify({"message": "Evaluator deleted successfully"})
